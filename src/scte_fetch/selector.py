"""
Segment selection and rewriting for the local VOD playlist.
"""

import dataclasses
import logging
from collections.abc import Sequence
from pathlib import Path

from tqdm import tqdm

from .cues import describe_cue, is_cue_in
from .hls import format_datetime
from .io_ffmpeg import write_file
from .keys import KeyCache
from .models import RewrittenSegment, Segment, SelectionResult
from .uris import resolve

logger = logging.getLogger("scte_fetch")


def format_pdt(segment: Segment) -> str:
    """Program date time for log lines, empty when the segment has none."""
    pdt = segment.program_date_time
    return format_datetime(pdt) if pdt is not None else ""


def rewrite_segment(
    segment: Segment, local_filename: str, key_filename: str | None = None
) -> RewrittenSegment:
    """Build the output record for a retained segment.

    Program date time, date range and markers are dropped; every output
    segment is a discontinuity.
    """
    key = None
    if segment.key is not None and key_filename is not None:
        key = dataclasses.replace(segment.key, uri=key_filename)
    return RewrittenSegment(
        uri=local_filename,
        duration=segment.duration,
        title=segment.title,
        key=key,
        discontinuity=True,
    )


def process_all(
    segments: Sequence[Segment],
    base_url: str,
    include_cue_out: bool,
    *,
    fetcher,
    key_cache: KeyCache,
    outdir: Path,
    progress: bool = False,
) -> SelectionResult:
    """Fetch the selected segments (and keys) and return the rewritten list.

    With ``include_cue_out`` False only CUE-IN boundary segments are kept;
    nothing is fetched for the skipped ones. Any fetch or write error aborts.
    """
    outdir = Path(outdir)
    result = SelectionResult()
    keys_before = len(key_cache)

    for segment in tqdm(segments, desc="Segments", disable=not progress):
        seg_url, local_filename = resolve(segment.uri, base_url)
        logger.info("%s, %s, %s", format_pdt(segment), describe_cue(segment), seg_url)

        if not include_cue_out and not is_cue_in(segment):
            # Skip CUE-OUT
            continue

        data = fetcher.fetch(seg_url)
        write_file(outdir, local_filename, data, source_uri=seg_url)
        result.fetched_segments += 1

        key_filename = None
        if segment.key is not None and segment.key.is_encrypted:
            key_filename = key_cache.ensure_key(segment.key, base_url)
        elif segment.key is None:
            logger.debug("Segment %s has no key", seg_url)

        result.segments.append(rewrite_segment(segment, local_filename, key_filename))
        result.max_duration = max(result.max_duration, segment.duration)

    result.fetched_keys = len(key_cache) - keys_before
    return result
