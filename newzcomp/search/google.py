"""
Google Custom Search adapter.

Searches with service-account credentials through the discovery client
first, and retries once over plain HTTPS with an API key when that fails.
Search never raises: any failure on both paths yields an empty list.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from google.oauth2 import service_account
from googleapiclient.discovery import build
import httpx

from ..config import FetchConfig, SearchConfig, get_search_credentials
from ..core.types import CandidateResult
from ..utils.logging import log_event

logger = logging.getLogger(__name__)

CSE_SCOPES = ["https://www.googleapis.com/auth/cse"]
MAX_RESULTS = 10


class SearchProvider(Protocol):
    def search(
        self,
        query: str,
        date_restrict: str | None = None,
        sort: str | None = None,
        num: int = MAX_RESULTS,
    ) -> list[CandidateResult]: ...


class GoogleSearchProvider:
    """Custom Search JSON API client with an API-key fallback."""

    def __init__(self, cfg: SearchConfig, fetch_cfg: FetchConfig):
        self.cfg = cfg
        self.fetch_cfg = fetch_cfg

    def search(
        self,
        query: str,
        date_restrict: str | None = None,
        sort: str | None = None,
        num: int = MAX_RESULTS,
    ) -> list[CandidateResult]:
        """Run a search and return normalized hits, newest first when sort="date"."""
        params = _query_params(query, date_restrict, sort, min(num, MAX_RESULTS))
        cx, api_key, service_account_file = get_search_credentials(self.cfg)

        try:
            data = self._search_service_account(params, cx, service_account_file)
            method = "service_account"
        except Exception as exc:  # noqa: BLE001
            logger.warning("Service account search failed, trying API key fallback: %s", exc)
            try:
                data = self._search_api_key(params, cx, api_key)
                method = "api_key"
            except Exception as fallback_exc:  # noqa: BLE001
                log_event(
                    logger,
                    "Search failed",
                    level=logging.ERROR,
                    event="search_failed",
                    query=query,
                    error=str(fallback_exc),
                )
                return []

        results = normalize_results(data)
        log_event(
            logger,
            "Search complete",
            event="search_complete",
            query=query,
            method=method,
            results=len(results),
        )
        return results

    def _search_service_account(
        self,
        params: dict[str, Any],
        cx: str | None,
        service_account_file: str | None,
    ) -> dict[str, Any]:
        if not cx:
            raise ValueError(f"Missing search engine id (set {self.cfg.cx_env})")
        if not service_account_file:
            raise ValueError(f"Missing service account key (set {self.cfg.service_account_env})")
        credentials = service_account.Credentials.from_service_account_file(
            service_account_file, scopes=CSE_SCOPES
        )
        service = build("customsearch", "v1", credentials=credentials, cache_discovery=False)
        return service.cse().list(cx=cx, **params).execute()

    def _search_api_key(
        self,
        params: dict[str, Any],
        cx: str | None,
        api_key: str | None,
    ) -> dict[str, Any]:
        if not api_key:
            raise ValueError(f"No API key available for fallback (set {self.cfg.api_key_env})")
        if not cx:
            raise ValueError(f"Missing search engine id (set {self.cfg.cx_env})")
        request_params = {**params, "key": api_key, "cx": cx}
        with httpx.Client(
            timeout=self.fetch_cfg.timeout_seconds,
            trust_env=self.fetch_cfg.trust_env,
        ) as client:
            resp = client.get(self.cfg.endpoint, params=request_params)
            resp.raise_for_status()
            return resp.json()


def normalize_results(data: Any) -> list[CandidateResult]:
    """Convert a Custom Search response body into CandidateResults."""
    if not isinstance(data, dict):
        return []
    items = data.get("items") or []
    results: list[CandidateResult] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        link = item.get("link")
        if not link:
            continue
        results.append(
            CandidateResult(
                link=str(link),
                title=str(item.get("title") or ""),
                snippet=str(item.get("snippet") or ""),
                display_link=str(item.get("displayLink") or ""),
                published_at=_published_at(item),
            )
        )
    return results


def _published_at(item: dict[str, Any]) -> str | None:
    try:
        value = item["pagemap"]["metatags"][0].get("article:published_time")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    return str(value) if value else None


def _query_params(query: str, date_restrict: str | None, sort: str | None, num: int) -> dict[str, Any]:
    params: dict[str, Any] = {"q": query, "num": num}
    if date_restrict:
        params["dateRestrict"] = date_restrict
    if sort:
        params["sort"] = sort
    return params
