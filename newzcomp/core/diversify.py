"""
Source diversification: at most one accepted article per domain.
"""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

from .allowlist import domain_of
from .types import CandidateResult


T = TypeVar("T")


class SourceDiversifier:
    """Accepts search candidates in order, one per unique domain, up to a cap.

    Each call to `diversify` starts from a fresh seen-domain set, so running
    it twice over the same candidates yields the same output.
    """

    def __init__(self, cap: int = 8):
        if cap < 1:
            raise ValueError("cap must be at least 1")
        self.cap = cap

    def diversify(
        self,
        candidates: Iterable[CandidateResult],
        accept: Callable[[CandidateResult], T | None] | None = None,
        seen_domains: Iterable[str] = (),
        on_skip: Callable[[CandidateResult, str], None] | None = None,
        item_domain: Callable[[T], str] | None = None,
    ) -> list[T]:
        """Walk candidates and keep the first acceptable one from each domain.

        Args:
            candidates: Search results in relevance order
            accept: Maps a candidate to an accepted item, or None to reject it.
                Defaults to accepting the candidate unchanged.
            seen_domains: Domains treated as already taken (e.g. the seed outlet)
            on_skip: Called with (candidate, reason) for every skipped candidate
            item_domain: Domain of an accepted item when it can differ from
                the candidate's own link

        Returns:
            Accepted items in candidate order, never two from the same domain
        """
        seen = {d for d in seen_domains if d}
        accepted: list[T] = []

        for candidate in candidates:
            if len(accepted) >= self.cap:
                break
            domain = domain_of(candidate.link)
            if not domain:
                _notify(on_skip, candidate, "invalid_url")
                continue
            if domain in seen:
                _notify(on_skip, candidate, "duplicate_domain")
                continue
            item = accept(candidate) if accept is not None else candidate
            if item is None:
                _notify(on_skip, candidate, "rejected")
                continue
            # A resolved section page may point at another outlet.
            final_domain = item_domain(item) if item_domain is not None else domain
            if final_domain != domain and final_domain in seen:
                _notify(on_skip, candidate, "duplicate_domain")
                continue
            seen.update({domain, final_domain})
            accepted.append(item)

        return accepted


def _notify(callback, candidate: CandidateResult, reason: str) -> None:
    if callback is not None:
        callback(candidate, reason)
