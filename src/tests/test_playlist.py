"""
Tests for playlist assembly and serialization.
"""

from scte_fetch.hls import dumps
from scte_fetch.models import KeyDescriptor, RewrittenSegment
from scte_fetch.playlist import assemble


def _seg(uri, duration, key_uri=None):
    key = KeyDescriptor(method="AES-128", uri=key_uri) if key_uri else None
    return RewrittenSegment(uri=uri, duration=duration, key=key)


def test_target_duration_is_ceiling_of_longest():
    segments = [_seg("a.ts", 5.2), _seg("b.ts", 9.9), _seg("c.ts", 3.0)]
    playlist = assemble(segments, 9.9)
    assert playlist.target_duration == 10
    assert all(playlist.target_duration >= s.duration for s in playlist.segments)


def test_integral_duration_is_not_bumped():
    assert assemble([_seg("a.ts", 6.0)], 6.0).target_duration == 6


def test_empty_playlist():
    playlist = assemble([], 0.0)
    assert playlist.segments == []
    assert playlist.target_duration == 0
    assert playlist.endlist is True


def test_assembled_playlist_is_terminated_vod():
    playlist = assemble([_seg("a.ts", 4.0)], 4.0)
    assert playlist.version == 3
    assert playlist.playlist_type == "VOD"
    assert playlist.endlist is True


def test_dumps_writes_discontinuities_and_keys():
    playlist = assemble(
        [_seg("a.ts", 6.006, "k1.key"), _seg("b.ts", 6.0, "k1.key"), _seg("c.ts", 4.5, "k2.key")],
        6.006,
    )
    text = dumps(playlist)
    lines = text.splitlines()

    assert lines[:4] == [
        "#EXTM3U",
        "#EXT-X-VERSION:3",
        "#EXT-X-TARGETDURATION:7",
        "#EXT-X-PLAYLIST-TYPE:VOD",
    ]
    assert lines[-1] == "#EXT-X-ENDLIST"
    assert lines.count("#EXT-X-DISCONTINUITY") == 3
    assert lines.count('#EXT-X-KEY:METHOD=AES-128,URI="k1.key"') == 1
    assert lines.count('#EXT-X-KEY:METHOD=AES-128,URI="k2.key"') == 1
    assert "#EXTINF:6.006," in lines
    assert "#EXTINF:6," in lines
    assert [ln for ln in lines if not ln.startswith("#")] == ["a.ts", "b.ts", "c.ts"]
    assert text.endswith("\n")


def test_dumps_clears_key_when_segment_is_unencrypted():
    text = dumps(assemble([_seg("a.ts", 2.0, "k.key"), _seg("b.ts", 2.0)], 2.0))
    assert "#EXT-X-KEY:METHOD=NONE" in text.splitlines()
