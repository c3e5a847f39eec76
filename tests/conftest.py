"""Shared playlist documents for the test suite."""
import pytest


BASIC = (
    "#EXTM3U\n"
    '#EXTINF:-1 tvg-id="bbc" group-title="UK",BBC One\n'
    "https://ex.com/bbc.m3u8\n"
)

INTERLEAVED = """#EXTM3U
#EXTINF:-1 tvg-name="Channel A", Channel A
https://url-a.com/stream.m3u8
#EXTINF:-1 tvg-name="Channel B", Channel B
#EXTGRP:Group
#EXTVLCOPT:option
https://url-b.com/stream.m3u8
#EXTINF:-1 tvg-name="Channel C", Channel C
#EXTVLCOPT:option1
#EXTVLCOPT:option2
#EXTGRP:Group
https://url-c.com/stream.m3u8
"""

MIXED = """#EXTM3U url-tvg="https://epg.example.com/guide.xml" description="Mixed bag"
#EXTINF:-1 tvg-id="news.uk" tvg-country="UK" tvg-language="English" group-title="News",News 24
#EXTVLCOPT:http-user-agent=Mozilla/5.0
http://provider.tv:8080/live/user/pass/1001.ts
#EXTINF:-1 tvg-name="Lonely" group-title="News",No Locator Here
#EXTINF:7200 tvg-id="film.1" group-title="Movies",Some Film
#EXT-X-SESSION-DATA:DATA-ID="com.example",VALUE="x"
http://provider.tv:8080/movie/user/pass/2002.mkv
http://provider.tv:8080/movie/user/pass/2002-backup.mkv
#EXTINF:-1 tvg-name="Show S01 E02" group-title="Series",Show S01E02
http://provider.tv:8080/series/user/pass/3003.mp4

#EXTINF:-1 group-title="Music",Radio
not a url at all
rtmp://radio.example.com/live/stream
#EXTINF:-1,Trailing
"""


def make_playlist(count: int, noise: bool = True) -> str:
    """A header plus `count` well-formed entries, optionally padded with directives."""
    lines = ["#EXTM3U"]
    for i in range(count):
        lines.append(f'#EXTINF:-1 tvg-id="ch{i}" group-title="G{i % 3}",Channel {i}')
        if noise and i % 2:
            lines.append("#EXTGRP:Noise")
            lines.append("#EXTVLCOPT:http-referrer=https://example.com/")
        if noise and i % 5 == 0:
            lines.append("")
        lines.append(f"https://cdn{i}.example.com/live/stream{i}.m3u8")
        if noise and i % 7 == 0:
            lines.append(f"https://dup{i}.example.com/ignored.m3u8")
        if noise and i % 11 == 0:
            lines.append("#EXTINF:-1,Orphan without locator")
    return "\n".join(lines) + "\n"


@pytest.fixture
def basic_text() -> str:
    return BASIC


@pytest.fixture
def interleaved_text() -> str:
    return INTERLEAVED


@pytest.fixture
def mixed_text() -> str:
    return MIXED
