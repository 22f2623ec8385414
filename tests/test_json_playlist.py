import json

from livetv.models import UNGROUPED
from livetv.services.json_playlist import parse_json_playlist


class TestParseJsonPlaylist:
    def test_channels_object(self):
        text = json.dumps(
            {
                "channels": [
                    {"name": "CCTV1", "url": "http://cdn/1.m3u8", "logo": "http://l/1.png", "group": "央视", "tvgId": "cctv1"}
                ]
            }
        )
        ch = parse_json_playlist("j", text).channels[0]

        assert (ch.id, ch.tvg_id, ch.name, ch.logo, ch.group, ch.url) == (
            "j-0",
            "cctv1",
            "CCTV1",
            "http://l/1.png",
            "央视",
            "http://cdn/1.m3u8",
        )

    def test_field_aliases(self):
        text = json.dumps(
            [
                {"tvg_id": "a", "title": "A", "link": "https://cdn/a", "category": "Sports"},
                {"id": 7, "name": "B", "url": "http://cdn/b"},
                {"name": "C D", "url": "http://cdn/c"},
            ]
        )
        a, b, c = parse_json_playlist("j", text).channels

        assert (a.tvg_id, a.name, a.url, a.group) == ("a", "A", "https://cdn/a", "Sports")
        assert b.tvg_id == "7"
        assert b.group == UNGROUPED
        assert c.tvg_id == "C D"

    def test_scalar_values_render_as_plain_text(self):
        text = '[{"id": 7.0, "name": "A", "url": "http://cdn/a"}, {"tvgId": true, "name": 101, "url": "http://cdn/b"}]'
        a, b = parse_json_playlist("j", text).channels

        assert a.tvg_id == "7"
        assert (b.tvg_id, b.name) == ("true", "101")

    def test_epg_url_alias_priority(self):
        channels = [{"name": "A", "url": "http://cdn/a"}]
        assert parse_json_playlist("j", json.dumps({"x-tvg-url": "x", "epg": "e", "channels": channels})).epg_url == "e"
        assert parse_json_playlist("j", json.dumps({"epg": "e", "tvgUrl": "t", "channels": channels})).epg_url == "t"
        assert parse_json_playlist("j", json.dumps({"url-tvg": "u", "channels": channels})).epg_url == "u"
        assert parse_json_playlist("j", json.dumps(channels)).epg_url == ""

    def test_bad_entries_are_dropped_silently(self):
        text = json.dumps(
            [
                "junk",
                {"name": "", "url": "http://cdn/none"},
                {"name": "X", "url": "ftp://bad"},
                {"name": "Good", "url": "http://cdn/good"},
            ]
        )
        result = parse_json_playlist("j", text)

        assert [(c.id, c.name) for c in result.channels] == [("j-0", "Good")]
        assert result.dropped == 3

    def test_scheme_rejected(self):
        result = parse_json_playlist("j", '{"channels":[{"name":"X","url":"ftp://bad"}]}')
        assert result.channels == []

    def test_invalid_documents_yield_empty_result(self):
        for text in ["{not json", '{"channels": {"a": 1}}', '{"foo": 1}', "5", '"text"', ""]:
            result = parse_json_playlist("j", text)
            assert (result.epg_url, result.channels) == ("", [])
