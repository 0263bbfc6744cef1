"""Tests for blog view counts."""

import pytest
import requests

from protostats.providers.blog_views import fetch_blog_views
from protostats.report.blog_views import format_views_table

URL = "https://example.test/api/blog-views?summary=true"


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        return self.response


class TestFetchBlogViews:
    """Tests for the view counter client."""

    def test_returns_views(self):
        session = FakeSession(FakeResponse({"views": {"blog-index": 12, "2025-11-22-hello": "4"}}))

        views = fetch_blog_views(URL, session=session)

        assert views == {"blog-index": 12, "2025-11-22-hello": 4}
        assert session.urls == [URL]

    def test_nothing_tracked(self):
        assert fetch_blog_views(URL, session=FakeSession(FakeResponse({}))) == {}

    def test_http_error(self):
        with pytest.raises(requests.HTTPError):
            fetch_blog_views(URL, session=FakeSession(FakeResponse({}, status_code=500)))

    def test_bad_shape(self):
        with pytest.raises(ValueError):
            fetch_blog_views(URL, session=FakeSession(FakeResponse(["views"])))
        with pytest.raises(ValueError):
            fetch_blog_views(URL, session=FakeSession(FakeResponse({"views": [1, 2]})))


class TestFormatViewsTable:
    """Tests for the console table."""

    def test_empty(self):
        assert format_views_table({}) == ["No views tracked yet."]

    def test_sorted_with_labels(self):
        lines = format_views_table(
            {"2025-11-22-hello": 4, "blog-index": 12, "other-post": 7},
            slug_prefix="2025-11-22-",
        )

        rows = [line for line in lines if line.endswith(" views")]
        assert [row.split()[0] for row in rows] == ["Blog", "other-post", "hello"]
        assert rows[0].startswith("Blog Index Page")
        assert lines[-1] == "Total Views: 23"
