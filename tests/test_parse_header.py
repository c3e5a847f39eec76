from m3u_parse.model import PlaylistAttributes
from m3u_parse.parse_header import parse_playlist_attributes


def test_epg_url_and_description():
    attrs = parse_playlist_attributes('#EXTM3U url-tvg="https://a/epg.xml" description="D"')
    assert attrs.epg_url == "https://a/epg.xml"
    assert attrs.description == "D"
    assert attrs.other == {}


def test_both_epg_spellings_are_joined_primary_first():
    attrs = parse_playlist_attributes('#EXTM3U URL-TVG="https://a" X-TVG-URL="https://b"')
    assert attrs.epg_url == "https://a,https://b"


def test_epg_join_order_does_not_follow_source_order():
    attrs = parse_playlist_attributes('#EXTM3U x-tvg-url="https://b" url-tvg="https://a"')
    assert attrs.epg_url == "https://a,https://b"


def test_comma_separated_epg_value_kept_verbatim():
    attrs = parse_playlist_attributes(
        '#EXTM3U x-tvg-url="http://epg1.com/guide.xml,http://epg2.com/backup.xml" description="Multi-EPG"'
    )
    assert attrs.epg_url == "http://epg1.com/guide.xml,http://epg2.com/backup.xml"
    assert attrs.description == "Multi-EPG"


def test_unquoted_values_parse_like_quoted():
    quoted = parse_playlist_attributes('#EXTM3U url-tvg="https://e/g.xml" description="Simple" size="small"')
    bare = parse_playlist_attributes("#EXTM3U url-tvg=https://e/g.xml description=Simple size=small")
    assert bare == quoted
    assert bare.description == "Simple"
    assert bare.size == "small"


def test_all_known_fields_and_other():
    attrs = parse_playlist_attributes(
        '#EXTM3U url-tvg="https://epg.example.com/guide.xml" description="Full IPTV List" '
        'size="Large" background="#000000" custom-attr="custom-value" catchup=\'append\''
    )
    assert attrs.epg_url == "https://epg.example.com/guide.xml"
    assert attrs.description == "Full IPTV List"
    assert attrs.size == "Large"
    assert attrs.background == "#000000"
    assert attrs.other == {"custom-attr": "custom-value", "catchup": "append"}


def test_non_epg_keys_are_case_sensitive():
    attrs = parse_playlist_attributes('#EXTM3U Description="Upper" description="lower"')
    assert attrs.description == "lower"
    assert attrs.other == {"Description": "Upper"}


def test_duplicate_keys_last_wins():
    attrs = parse_playlist_attributes('#EXTM3U x="1" x="2" url-tvg="a" url-tvg="b"')
    assert attrs.other == {"x": "2"}
    assert attrs.epg_url == "b"


def test_header_without_attributes_still_yields_attributes():
    assert parse_playlist_attributes("#EXTM3U") == PlaylistAttributes()
    attrs = parse_playlist_attributes("  #extm3u  ")
    assert attrs.epg_url is None
    assert attrs.other == {}
