"""Record persistence and audit output."""

from .store import JsonlRecordStore, RecordStore, write_theme_audit

__all__ = ["JsonlRecordStore", "RecordStore", "write_theme_audit"]
