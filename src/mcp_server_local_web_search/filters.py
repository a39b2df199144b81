"""Deduplication and domain filtering of candidate links."""

from collections.abc import Iterable
from urllib.parse import urlsplit, urlunsplit

from .models import CandidateLink, normalize_domain


def normalize_url(url: str) -> str:
    """Canonical form used for duplicate detection.

    Lowercases scheme and host and drops the fragment; path and query are kept.
    """
    parts = urlsplit(url.strip())
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path or "/", parts.query, ""))


def host_matches(url: str, domains: Iterable[str]) -> bool:
    """True if the URL's host is one of ``domains`` or a subdomain of one."""
    host = normalize_domain(urlsplit(url).hostname or "")
    if not host:
        return False
    for domain in domains:
        domain = normalize_domain(domain)
        if domain and (host == domain or host.endswith("." + domain)):
            return True
    return False


def filter_links(
    links: Iterable[CandidateLink],
    visited: set[str],
    skip_domains: Iterable[str] = (),
    exclude_domains: Iterable[str] = (),
    limit: int | None = None,
) -> list[CandidateLink]:
    """Order-preserving dedup and domain filter.

    Left to right: a link already in ``visited`` is dropped, otherwise it is
    recorded there; then links on a skipped or excluded domain are dropped.
    At most ``limit`` links are returned. ``visited`` is mutated and must be
    owned by the caller's run.
    """
    blocked = [*skip_domains, *exclude_domains]
    kept: list[CandidateLink] = []
    for link in links:
        if limit is not None and len(kept) >= limit:
            break
        key = normalize_url(link.url)
        if key in visited:
            continue
        visited.add(key)
        if host_matches(link.url, blocked):
            continue
        kept.append(link)
    return kept
