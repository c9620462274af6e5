"""Tests for URL and domain helpers."""

import pytest

from worker.crawler.url import ensure_absolute, normalize_domain


class TestNormalizeDomain:
    """Tests for normalize_domain."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://www.Example.com/path?q=1", "example.com"),
            ("http://example.com", "example.com"),
            ("example.com", "example.com"),
            ("example.com/", "example.com"),
            ("  news.example.co.uk  ", "news.example.co.uk"),
            ("//example.com/a", "example.com"),
            ("https://example.com:8443/", "example.com"),
        ],
    )
    def test_valid(self, url: str, expected: str) -> None:
        assert normalize_domain(url) == expected

    @pytest.mark.parametrize("url", ["", "   ", "ftp://example.com", "not a url", "https://"])
    def test_invalid(self, url: str) -> None:
        assert normalize_domain(url) is None


class TestEnsureAbsolute:
    """Tests for resolving sitemap references."""

    def test_absolute_unchanged(self) -> None:
        assert ensure_absolute("https://cdn.example.com/s.xml", "example.com") == (
            "https://cdn.example.com/s.xml"
        )

    def test_root_relative(self) -> None:
        assert ensure_absolute("/sitemap.xml", "example.com") == "https://example.com/sitemap.xml"

    def test_protocol_relative(self) -> None:
        assert ensure_absolute("//example.com/s.xml", "example.com") == "https://example.com/s.xml"

    def test_bare_path(self) -> None:
        assert ensure_absolute("s.xml", "example.com") == "https://example.com/s.xml"
