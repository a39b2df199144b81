"""Tests for link deduplication and domain filtering."""

from mcp_server_local_web_search.filters import filter_links, host_matches, normalize_url
from mcp_server_local_web_search.models import CandidateLink


def link(url: str, title: str = "t") -> CandidateLink:
    return CandidateLink(title=title, url=url)


class TestNormalizeUrl:
    def test_case_and_fragment(self):
        assert normalize_url("HTTPS://Example.COM/Path?q=1#top") == "https://example.com/Path?q=1"

    def test_empty_path(self):
        assert normalize_url("https://example.com") == normalize_url("https://example.com/")


class TestHostMatches:
    def test_exact_and_subdomain(self):
        assert host_matches("https://wikipedia.org/wiki/X", ["wikipedia.org"])
        assert host_matches("https://en.wikipedia.org/wiki/X", ["wikipedia.org"])
        assert host_matches("https://www.wikipedia.org/", ["wikipedia.org"])

    def test_www_in_domain_ignored(self):
        assert host_matches("https://youtube.com/watch", ["www.youtube.com"])

    def test_suffix_is_not_subdomain(self):
        assert not host_matches("https://notwikipedia.org/", ["wikipedia.org"])

    def test_no_domains(self):
        assert not host_matches("https://example.com/", [])


class TestFilterLinks:
    def test_dedup_preserves_first_occurrence(self):
        links = [link("https://a.com/1", "first"), link("https://b.com/"), link("https://a.com/1#x", "second")]
        kept = filter_links(links, set())
        assert [(k.url, k.title) for k in kept] == [("https://a.com/1", "first"), ("https://b.com/", "t")]

    def test_skip_and_exclude(self):
        links = [link("https://youtube.com/watch?v=1"), link("https://a.com/"), link("https://docs.b.com/"), link("https://c.com/")]
        kept = filter_links(links, set(), skip_domains=["youtube.com"], exclude_domains=["b.com"])
        assert [k.url for k in kept] == ["https://a.com/", "https://c.com/"]

    def test_limit_applies_after_filtering(self):
        links = [link("https://skip.com/"), link("https://a.com/"), link("https://a.com/"), link("https://b.com/"), link("https://c.com/")]
        kept = filter_links(links, set(), skip_domains=["skip.com"], limit=2)
        assert [k.url for k in kept] == ["https://a.com/", "https://b.com/"]

    def test_visited_set_is_shared_state_of_the_run(self):
        visited = {normalize_url("https://a.com/")}
        kept = filter_links([link("https://a.com/"), link("https://b.com/")], visited)
        assert [k.url for k in kept] == ["https://b.com/"]
        assert normalize_url("https://b.com/") in visited

    def test_skipped_urls_still_marked_visited(self):
        visited: set[str] = set()
        filter_links([link("https://youtube.com/x")], visited, skip_domains=["youtube.com"])
        assert normalize_url("https://youtube.com/x") in visited

    def test_empty(self):
        assert filter_links([], set(), limit=5) == []
