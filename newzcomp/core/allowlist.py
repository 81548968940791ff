"""
Trusted source domains.

The allow-list is loaded once per run and passed around as an immutable
value, so it can be shared by concurrent workers without locking.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable
from urllib.parse import urlparse

from ..errors import AllowlistError


def domain_of(url: str) -> str:
    """Return the lowercased hostname of a URL without a leading "www.".

    Returns an empty string when the URL has no parseable host.
    """
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    host = host.lower()
    if host.startswith("www."):
        host = host[4:]
    return host


@dataclass(frozen=True)
class DomainAllowList:
    """Set of trusted registrable domains with suffix matching."""

    domains: frozenset[str]

    @classmethod
    def from_iterable(cls, domains: Iterable[str]) -> "DomainAllowList":
        cleaned = set()
        for raw in domains:
            domain = raw.strip().lower()
            if domain.startswith("www."):
                domain = domain[4:]
            if domain:
                cleaned.add(domain)
        return cls(frozenset(cleaned))

    def is_allowed(self, hostname: str) -> bool:
        """Check a hostname (already stripped of "www.") against the list."""
        if not hostname:
            return False
        return any(hostname.endswith(domain) for domain in self.domains)

    def allows_url(self, url: str) -> bool:
        return self.is_allowed(domain_of(url))

    def __len__(self) -> int:
        return len(self.domains)


def load_allowlist(path: str | Path) -> DomainAllowList:
    """Load the allow-list from a text file, one domain per line.

    Blank lines and lines starting with "#" are ignored.

    Raises:
        AllowlistError: If the file cannot be read or lists no domains
    """
    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AllowlistError(f"Could not read allow-list {file_path}: {exc}") from exc

    lines = []
    for line in content.splitlines():
        stripped = line.split("#", 1)[0].strip()
        if stripped:
            lines.append(stripped)

    allowlist = DomainAllowList.from_iterable(lines)
    if not allowlist.domains:
        raise AllowlistError(f"Allow-list {file_path} contains no domains")
    return allowlist
