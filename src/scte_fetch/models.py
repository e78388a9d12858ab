"""
Data models for the SCTE segment fetcher.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


class MarkerType(str, Enum):
    """Discrete cue marker kinds (#EXT-X-CUE-OUT / #EXT-X-CUE-IN)."""

    OUT = "OUT"
    IN = "IN"


@dataclass(frozen=True)
class Marker:
    """A single cue marker attached to a segment."""

    type: MarkerType
    duration: float | None = None  # seconds, CUE-OUT only
    value: str = ""  # raw tag value


@dataclass(frozen=True)
class DateRange:
    """An #EXT-X-DATERANGE interval descriptor."""

    id: str
    start: datetime | None = None
    end: datetime | None = None  # set => interval closed on this segment
    duration: float | None = None
    planned_duration: float | None = None
    scte35_out: str | None = None
    scte35_in: str | None = None
    scte35_cmd: str | None = None
    class_: str | None = None


@dataclass(frozen=True)
class KeyDescriptor:
    """An #EXT-X-KEY entry."""

    method: str
    uri: str | None = None
    iv: str | None = None
    keyformat: str | None = None
    keyformatversions: str | None = None

    @property
    def is_encrypted(self) -> bool:
        return self.method.upper() != "NONE" and bool(self.uri)


@dataclass(frozen=True)
class Segment:
    """A media segment as parsed from the source playlist."""

    uri: str
    duration: float  # seconds
    title: str = ""
    key: KeyDescriptor | None = None
    program_date_time: datetime | None = None
    date_range: DateRange | None = None
    markers: tuple[Marker, ...] = ()
    discontinuity: bool = False
    cue_out_cont: bool = False  # #EXT-X-CUE-OUT-CONT seen before this segment


@dataclass
class MediaPlaylist:
    """A parsed HLS media playlist."""

    segments: list[Segment]
    target_duration: int | None = None
    media_sequence: int = 0
    version: int | None = None
    playlist_type: str | None = None
    endlist: bool = False


@dataclass(frozen=True)
class KeyRecord:
    """A key that has been fetched and written during the current run."""

    remote_uri: str
    local_filename: str


@dataclass(frozen=True)
class RewrittenSegment:
    """An output segment pointing at local files, stripped of live-only tags."""

    uri: str
    duration: float
    title: str = ""
    key: KeyDescriptor | None = None
    discontinuity: bool = True


@dataclass
class OutputPlaylist:
    """A standalone, terminated VOD playlist."""

    segments: list[RewrittenSegment]
    target_duration: int
    version: int = 3
    playlist_type: str = "VOD"
    endlist: bool = True


@dataclass
class SelectionResult:
    """Outcome of the selection pass over the SCTE segments."""

    segments: list[RewrittenSegment] = field(default_factory=list)
    max_duration: float = 0.0
    fetched_segments: int = 0
    fetched_keys: int = 0


@dataclass
class RunSummary:
    """What a pipeline run produced on disk."""

    outdir: Path
    manifest_path: Path
    scte_segments: int
    written_segments: int
    written_keys: int
    outfile: Path | None = None
