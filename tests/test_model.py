import pytest

from m3u_parse.model import (
    AttributeMap,
    DegradedLocator,
    Entry,
    EntryAttributes,
    EntryKind,
    Playlist,
    ResolvedLocator,
)
from m3u_parse.parse_m3u import parse_m3u


def _entry(name, group=None, tvg_name=None, degraded=False):
    locator = DegradedLocator(name) if degraded else ResolvedLocator(f"https://a.com/{name}.ts")
    return Entry(
        duration=-1,
        attributes=EntryAttributes(name=tvg_name, group_title=group),
        kind=EntryKind.UNKNOWN,
        display_name=name,
        locator=locator,
    )


def test_playlist_queries(mixed_text):
    pl = parse_m3u(mixed_text).playlist
    assert len(pl) == 4
    assert [e.display_name for e in pl.live_channels] == ["News 24", "Radio"]
    assert [e.display_name for e in pl.movies] == ["Some Film"]
    assert [e.display_name for e in pl.series] == ["Show S01E02"]
    assert [e.display_name for e in pl.in_group("News")] == ["News 24"]
    assert [e.display_name for e in pl.from_country("UK")] == ["News 24"]
    assert [e.display_name for e in pl.in_language("English")] == ["News 24"]
    assert pl.by_id("film.1").display_name == "Some Film"
    assert pl.by_id("nope") is None
    assert pl.by_locator("http://provider.tv:8080/series/user/pass/3003.mp4").display_name == "Show S01E02"
    assert pl.degraded_count == 0


def test_search_prefers_tvg_name():
    pl = Playlist((
        _entry("Display", tvg_name="Catalog Name"),
        _entry("Other display"),
    ))
    assert [e.display_name for e in pl.search("catalog")] == ["Display"]
    assert pl.search("display") == [pl.entries[1]]


def test_group_titles_unique_in_first_seen_order():
    pl = Playlist((
        _entry("a", "Sports"),
        _entry("b", " "),
        _entry("c", "News"),
        _entry("d", "Sports"),
        _entry("e"),
    ))
    assert pl.group_titles() == ["Sports", "News"]


def test_degraded_locator_shape():
    loc = DegradedLocator("bad value")
    assert loc.host is None
    assert loc.path == ""
    assert str(loc) == loc.uri
    pl = Playlist((_entry("x", degraded=True), _entry("y")))
    assert pl.degraded_count == 1
    assert pl.entries[0].url.startswith("m3u-degraded:")


def test_resolved_locator_parts():
    loc = ResolvedLocator("HTTP://Example.com:8080/live/1.ts?x=1")
    assert loc.scheme == "http"
    assert loc.host == "example.com"
    assert loc.path == "/live/1.ts"
    assert str(loc) == "HTTP://Example.com:8080/live/1.ts?x=1"


def test_iteration_preserves_order(interleaved_text):
    pl = parse_m3u(interleaved_text).playlist
    assert [e.display_name for e in pl] == [e.display_name for e in pl.entries]


def test_parsed_values_are_read_only_and_hashable():
    res = parse_m3u('#EXTM3U custom="1"\n#EXTINF:-1 foo="bar",A\nhttps://a.com/a.ts\n')
    entry = res.entries[0]

    with pytest.raises(TypeError):
        entry.attributes.other["foo"] = "changed"
    with pytest.raises(TypeError):
        res.playlist.attributes.other["custom"] = "2"
    assert entry.attributes.other == {"foo": "bar"}

    assert hash(entry) == hash(parse_m3u('#EXTM3U\n#EXTINF:-1 foo="bar",A\nhttps://a.com/a.ts\n').entries[0])
    assert len({res, res}) == 1


def test_attribute_map_copies_its_input():
    source = {"a": "1"}
    attrs = EntryAttributes(other=source)
    source["a"] = "2"
    assert attrs.other == {"a": "1"}
    assert isinstance(attrs.other, AttributeMap)
    assert EntryAttributes(other={"x": "y"}) == EntryAttributes(other=AttributeMap([("x", "y")]))
