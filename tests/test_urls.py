import pytest

from livetv.services.urls import is_absolute_url, is_http_url, resolve_url


class TestUrls:
    def test_is_http_url(self):
        assert is_http_url("HTTPS://cdn/x")
        assert is_http_url("http://cdn/x")
        assert not is_http_url("ftp://cdn/x")
        assert not is_http_url("")
        assert is_absolute_url("rtmp://live/x")
        assert not is_absolute_url("live/x")

    @pytest.mark.parametrize(
        "base, relative, expected",
        [
            ("http://h/a/b.m3u8", "https://other/x.ts", "https://other/x.ts"),
            ("http://h/a/b.m3u8", "c.ts", "http://h/a/c.ts"),
            ("http://h/a/b.m3u8", "./c.ts", "http://h/a/c.ts"),
            ("http://h/a/b/c.m3u8", "../x.ts", "http://h/a/x.ts"),
            ("http://h/a/b.m3u8", "/root.ts", "http://h/root.ts"),
            ("https://h/a/", "//cdn/x.ts", "https://cdn/x.ts"),
            ("", "x.ts", "x.ts"),
        ],
    )
    def test_resolve_url(self, base, relative, expected):
        assert resolve_url(base, relative) == expected
