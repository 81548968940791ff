"""
Persistence of validated records and per-theme audit files.

Validated records are appended to a JSONL file, one line per record.
The raw per-theme results, including errors and records that failed
validation, are written separately for auditing.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
from pathlib import Path
import threading
from typing import Any, Protocol

from ..core.types import PipelineRecord, SeedResult


class RecordStore(Protocol):
    def save(self, record: PipelineRecord, batch_id: str) -> None: ...


class JsonlRecordStore:
    """Appends validated records to a JSONL file.

    Attributes:
        path: Full path to the records file
    """

    def __init__(self, output_dir: Path, filename: str = "records.jsonl"):
        self.output_dir = output_dir
        self.path = output_dir / filename
        self._lock = threading.Lock()

    def save(self, record: PipelineRecord, batch_id: str) -> None:
        """Write one record, stamping it with the batch id and a save timestamp."""
        payload = record.to_dict()
        payload["batchid"] = batch_id
        payload.setdefault("saved_at", datetime.now(timezone.utc).isoformat())
        line = json.dumps(payload, ensure_ascii=False)
        with self._lock:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(line)
                handle.write("\n")

    def load(self) -> list[dict[str, Any]]:
        """Read back every stored record."""
        if not self.path.exists():
            return []
        records = []
        with self.path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if line.strip():
                    records.append(json.loads(line))
        return records


def write_theme_audit(
    results: list[SeedResult],
    batch_dir: Path,
    theme: str,
    prefix: str = "analysis_results_",
) -> Path:
    """Write the raw results of one theme to `<batch_dir>/<prefix><theme>.json`."""
    batch_dir.mkdir(parents=True, exist_ok=True)
    path = batch_dir / f"{prefix}{theme}.json"
    payload = [result.to_dict() for result in results]
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return path
