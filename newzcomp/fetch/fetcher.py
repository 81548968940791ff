"""
HTTP page fetching.

Every HTML-reading component goes through `fetch_url`, which applies the
configured timeout, a browser-like User-Agent and a small retry loop, and
reports failures in the result instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
import time

import httpx

from ..config import FetchConfig


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        final_url: The URL after redirects, used to resolve relative links
        status_code: HTTP status code, or None if request failed before getting response
        text: The response body text, or None on error
        error: Error message if fetch failed, None on success
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None
    final_url: str | None = None

    @property
    def ok(self) -> bool:
        return self.text is not None and self.error is None


def fetch_url(
    url: str,
    cfg: FetchConfig,
    timeout: float | None = None,
    retries: int | None = None,
) -> FetchResult:
    """Fetch a URL using httpx with retry logic.

    Non-2xx responses count as failures so callers never parse error pages
    as articles.

    Args:
        url: The URL to fetch
        cfg: Fetch settings (timeout, retries, user agent, proxy handling)
        timeout: Optional override of cfg.timeout_seconds
        retries: Optional override of cfg.retries

    Returns:
        FetchResult with text on success or error message on failure
    """
    headers = {
        "User-Agent": cfg.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }
    timeout = cfg.timeout_seconds if timeout is None else timeout
    retries = cfg.retries if retries is None else retries
    last_error: str | None = None
    status_code: int | None = None

    for attempt in range(retries + 1):
        try:
            with httpx.Client(
                timeout=timeout,
                headers=headers,
                follow_redirects=True,
                trust_env=cfg.trust_env,
            ) as client:
                resp = client.get(url)
            status_code = resp.status_code
            if resp.is_success:
                return FetchResult(
                    url=url,
                    status_code=resp.status_code,
                    text=resp.text,
                    error=None,
                    final_url=str(resp.url),
                )
            last_error = f"HTTP {resp.status_code}"
            # Client errors will not change on retry.
            if 400 <= resp.status_code < 500 and resp.status_code != 429:
                break
        except httpx.HTTPError as exc:
            last_error = f"{type(exc).__name__}: {exc}"
        if attempt < retries:
            # Linear backoff: 0.5s, 1.0s, 1.5s...
            time.sleep(0.5 * (attempt + 1))

    return FetchResult(url=url, status_code=status_code, text=None, error=last_error)
