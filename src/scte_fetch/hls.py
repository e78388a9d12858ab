"""
HLS media playlist parsing, SCTE-35 segment extraction and serialization.

Only the tags the fetcher needs are understood; everything else is skipped.
"""

import dataclasses
import logging
import re
from datetime import datetime, timedelta, timezone

from .errors import PlaylistParseError
from .models import (
    DateRange,
    KeyDescriptor,
    Marker,
    MarkerType,
    MediaPlaylist,
    OutputPlaylist,
    Segment,
)

logger = logging.getLogger("scte_fetch")

_ATTR_RE = re.compile(r'([A-Z0-9-]+)=("[^"]*"|[^,]*)')
_EXTINF_RE = re.compile(r"#EXTINF:\s*([^,]*)(?:,(.*))?$")


def parse_attributes(text: str) -> dict[str, str]:
    """Parse an attribute list (KEY=VALUE,KEY="quoted, value")."""
    return {k: v[1:-1] if v.startswith('"') else v.strip() for k, v in _ATTR_RE.findall(text)}


def parse_datetime(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    v = value.strip()
    if v.endswith(("Z", "z")):
        v = v[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(v)
    except ValueError:
        logger.warning("Ignoring unparsable timestamp: %s", value)
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_datetime(dt: datetime) -> str:
    """YYYY-MM-DDTHH:MM:SS.mmmZ in UTC; naive values are taken as UTC."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def _float_or_none(value: str | None) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _int_tag(line: str, value: str) -> int:
    try:
        return int(float(value))
    except ValueError as e:
        raise PlaylistParseError(f"Bad tag value: {line}") from e


def _parse_key(attrs: dict[str, str]) -> KeyDescriptor | None:
    method = attrs.get("METHOD", "NONE")
    if method.upper() == "NONE":
        return None
    return KeyDescriptor(
        method=method,
        uri=attrs.get("URI") or None,
        iv=attrs.get("IV"),
        keyformat=attrs.get("KEYFORMAT"),
        keyformatversions=attrs.get("KEYFORMATVERSIONS"),
    )


def _parse_date_range(attrs: dict[str, str]) -> DateRange:
    start = parse_datetime(attrs.get("START-DATE"))
    end = parse_datetime(attrs.get("END-DATE"))
    scte35_in = attrs.get("SCTE35-IN")
    if end is None and scte35_in is not None and "SCTE35-OUT" not in attrs:
        # A bare SCTE35-IN closes the interval at its start date.
        end = start
    return DateRange(
        id=attrs.get("ID", ""),
        start=start,
        end=end,
        duration=_float_or_none(attrs.get("DURATION")),
        planned_duration=_float_or_none(attrs.get("PLANNED-DURATION")),
        scte35_out=attrs.get("SCTE35-OUT"),
        scte35_in=scte35_in,
        scte35_cmd=attrs.get("SCTE35-CMD"),
        class_=attrs.get("CLASS"),
    )


def _is_scte_range(dr: DateRange, known_ids: set[str]) -> bool:
    if dr.scte35_out is not None or dr.scte35_in is not None or dr.scte35_cmd is not None:
        return True
    if dr.class_ and "scte35" in dr.class_.lower():
        return True
    return dr.id in known_ids


def _parse_cue_out(value: str) -> Marker:
    value = value.strip()
    duration = None
    if value:
        attrs = parse_attributes(value)
        duration = _float_or_none(attrs.get("DURATION") if attrs else value)
    return Marker(type=MarkerType.OUT, duration=duration, value=value)


def _pick_date_range(ranges: list[DateRange]) -> DateRange | None:
    """One range per segment; a closing range takes precedence."""
    if not ranges:
        return None
    for dr in ranges:
        if dr.end is not None:
            return dr
    return ranges[-1]


def parse_media_playlist(text: str) -> MediaPlaylist:
    """Parse the text of an HLS media playlist."""
    lines = [ln.strip() for ln in text.splitlines()]
    lines = [ln for ln in lines if ln]
    if not lines or not lines[0].startswith("#EXTM3U"):
        raise PlaylistParseError("Not an HLS playlist (missing #EXTM3U)")

    playlist = MediaPlaylist(segments=[])
    key: KeyDescriptor | None = None
    scte_ids: set[str] = set()
    pending: dict = {}

    for line in lines[1:]:
        if not line.startswith("#"):
            if "duration" not in pending:
                raise PlaylistParseError(f"Segment without #EXTINF: {line}")
            playlist.segments.append(
                Segment(
                    uri=line,
                    duration=pending["duration"],
                    title=pending.get("title", ""),
                    key=key,
                    program_date_time=pending.get("pdt"),
                    date_range=_pick_date_range(pending.get("ranges", [])),
                    markers=tuple(pending.get("markers", [])),
                    discontinuity=pending.get("discontinuity", False),
                    cue_out_cont=pending.get("cue_out_cont", False),
                )
            )
            pending = {}
            continue

        tag, _, value = line.partition(":")
        if tag == "#EXTINF":
            m = _EXTINF_RE.match(line)
            try:
                pending["duration"] = float(m.group(1))
            except (AttributeError, ValueError) as e:
                raise PlaylistParseError(f"Bad #EXTINF: {line}") from e
            pending["title"] = (m.group(2) or "").strip()
        elif tag == "#EXT-X-STREAM-INF":
            raise PlaylistParseError("Master playlists are not supported; pass a media playlist")
        elif tag == "#EXT-X-TARGETDURATION":
            playlist.target_duration = _int_tag(line, value)
        elif tag == "#EXT-X-MEDIA-SEQUENCE":
            playlist.media_sequence = _int_tag(line, value)
        elif tag == "#EXT-X-VERSION":
            playlist.version = _int_tag(line, value)
        elif tag == "#EXT-X-PLAYLIST-TYPE":
            playlist.playlist_type = value.strip().upper()
        elif tag == "#EXT-X-ENDLIST":
            playlist.endlist = True
        elif tag == "#EXT-X-KEY":
            key = _parse_key(parse_attributes(value))
        elif tag == "#EXT-X-DISCONTINUITY":
            pending["discontinuity"] = True
        elif tag == "#EXT-X-PROGRAM-DATE-TIME":
            pending["pdt"] = parse_datetime(value)
        elif tag == "#EXT-X-DATERANGE":
            dr = _parse_date_range(parse_attributes(value))
            if _is_scte_range(dr, scte_ids):
                scte_ids.add(dr.id)
                pending.setdefault("ranges", []).append(dr)
            else:
                logger.debug("Ignoring non-SCTE date range %s", dr.id)
        elif tag == "#EXT-X-CUE-OUT":
            pending.setdefault("markers", []).append(_parse_cue_out(value))
        elif tag == "#EXT-X-CUE-OUT-CONT":
            pending["cue_out_cont"] = True
        elif tag == "#EXT-X-CUE-IN":
            pending.setdefault("markers", []).append(Marker(type=MarkerType.IN))

    return playlist


def _segment_start(seg: Segment, clock: datetime | None) -> datetime | None:
    if seg.program_date_time is not None:
        return seg.program_date_time
    return clock


def extract_scte_segments(playlist: MediaPlaylist) -> list[Segment]:
    """Return the segments inside CUE-OUT -> CUE-IN intervals, in order.

    The opening segment, interior segments and the closing (CUE-IN) segment
    are all returned. Interior segments of a date-range interval get the
    opening range attached (without an end) so their event id is known.

    An SCTE35-OUT range that already carries END-DATE has no separate close;
    its interval ends at the first segment starting at or after END-DATE,
    using program date time (or the range's START-DATE) as the timeline.
    """
    out: list[Segment] = []
    inside = False
    open_range: DateRange | None = None
    open_until: datetime | None = None
    clock: datetime | None = None

    for seg in playlist.segments:
        start = _segment_start(seg, clock)
        dr = seg.date_range
        if start is None and dr is not None and dr.scte35_out is not None:
            start = dr.start

        if inside and open_until is not None and (start is None or start >= open_until):
            inside = False
            open_range = None
            open_until = None

        if dr is not None:
            closes = dr.end is not None and dr.scte35_out is None
            opens = not closes
        else:
            closes = any(m.type is MarkerType.IN for m in seg.markers)
            opens = any(m.type is MarkerType.OUT for m in seg.markers)

        if closes:
            out.append(seg)
            inside = False
            open_range = None
            open_until = None
            if opens:
                inside = True
        elif opens:
            out.append(seg)
            inside = True
            open_range = dr
            open_until = dr.end if dr is not None else None
        elif inside or seg.cue_out_cont:
            inside = True
            if seg.date_range is None and open_range is not None:
                seg = dataclasses.replace(seg, date_range=dataclasses.replace(open_range, end=None))
            out.append(seg)

        clock = start + timedelta(seconds=seg.duration) if start is not None else None

    return out


def _fmt_duration(duration: float) -> str:
    s = f"{duration:.6f}".rstrip("0").rstrip(".")
    return s or "0"


def _key_line(key: KeyDescriptor | None) -> str:
    if key is None:
        return "#EXT-X-KEY:METHOD=NONE"
    parts = [f"METHOD={key.method}"]
    if key.uri:
        parts.append(f'URI="{key.uri}"')
    if key.iv:
        parts.append(f"IV={key.iv}")
    if key.keyformat:
        parts.append(f'KEYFORMAT="{key.keyformat}"')
    if key.keyformatversions:
        parts.append(f'KEYFORMATVERSIONS="{key.keyformatversions}"')
    return "#EXT-X-KEY:" + ",".join(parts)


def dumps(playlist: OutputPlaylist) -> str:
    """Serialize an output playlist to M3U8 text."""
    lines = [
        "#EXTM3U",
        f"#EXT-X-VERSION:{playlist.version}",
        f"#EXT-X-TARGETDURATION:{playlist.target_duration}",
        f"#EXT-X-PLAYLIST-TYPE:{playlist.playlist_type}",
    ]
    last_key: KeyDescriptor | None = None
    for seg in playlist.segments:
        if seg.discontinuity:
            lines.append("#EXT-X-DISCONTINUITY")
        if seg.key != last_key:
            lines.append(_key_line(seg.key))
            last_key = seg.key
        lines.append(f"#EXTINF:{_fmt_duration(seg.duration)},{seg.title}")
        lines.append(seg.uri)
    if playlist.endlist:
        lines.append("#EXT-X-ENDLIST")
    return "\n".join(lines) + "\n"
