"""
End-to-end run: playlist URL in, local VOD playlist (and optional file) out.
"""

import logging
from pathlib import Path

from .errors import InvalidInputUrl, NoCueSegmentsFound
from .fetcher import BROWSER_USER_AGENT, DEFAULT_TIMEOUT, Fetcher
from .hls import dumps, extract_scte_segments, parse_media_playlist
from .io_ffmpeg import check_outdir, concat_playlist, create_outdir, write_file
from .keys import KeyCache
from .models import RunSummary
from .playlist import assemble
from .selector import process_all
from .uris import is_absolute_http_url

logger = logging.getLogger("scte_fetch")

MANIFEST_NAME = "index.m3u8"


def run_pipeline(
    playlist_url: str,
    outdir: str | Path,
    *,
    cue_in_only: bool = False,
    outfile: str | None = None,
    fetcher=None,
    timeout: float = DEFAULT_TIMEOUT,
    ffmpeg_path: str = "ffmpeg",
    progress: bool = False,
    key_user_agent: str = BROWSER_USER_AGENT,
) -> RunSummary:
    """Fetch the SCTE segments of ``playlist_url`` into ``outdir``.

    Raises NoCueSegmentsFound (before anything is written) when the playlist
    has no cue metadata. Every other ScteFetchError is fatal. ``fetcher``
    defaults to an httpx-backed Fetcher owned by this call.
    ``key_user_agent`` is sent on key requests only.
    """
    if not is_absolute_http_url(playlist_url):
        raise InvalidInputUrl(playlist_url)

    outdir = Path(outdir)
    check_outdir(outdir)
    opts = dict(
        cue_in_only=cue_in_only,
        outfile=outfile,
        ffmpeg_path=ffmpeg_path,
        progress=progress,
        key_user_agent=key_user_agent,
    )
    if fetcher is None:
        with Fetcher(timeout=timeout) as owned:
            return _run(playlist_url, outdir, owned, **opts)
    return _run(playlist_url, outdir, fetcher, **opts)


def _run(
    playlist_url: str,
    outdir: Path,
    fetcher,
    *,
    cue_in_only: bool,
    outfile: str | None,
    ffmpeg_path: str,
    progress: bool,
    key_user_agent: str,
) -> RunSummary:
    text = fetcher.fetch_text(playlist_url)
    source = parse_media_playlist(text)
    if not source.endlist:
        logger.info("Source playlist is live; using the current snapshot")

    scte_segments = extract_scte_segments(source)
    logger.info(
        "Found %d SCTE segment(s) among %d segment(s)", len(scte_segments), len(source.segments)
    )
    if not scte_segments:
        raise NoCueSegmentsFound()

    create_outdir(outdir)
    key_cache = KeyCache(fetcher, outdir, user_agent=key_user_agent)
    result = process_all(
        scte_segments,
        playlist_url,
        include_cue_out=not cue_in_only,
        fetcher=fetcher,
        key_cache=key_cache,
        outdir=outdir,
        progress=progress,
    )
    if not result.segments:
        logger.info("No segment matched the selection; writing an empty playlist")

    playlist = assemble(result.segments, result.max_duration)
    manifest_path = write_file(
        outdir, MANIFEST_NAME, dumps(playlist).encode("utf-8"), source_uri=playlist_url
    )
    logger.info("%d segments have been written", len(result.segments))

    summary = RunSummary(
        outdir=outdir,
        manifest_path=manifest_path,
        scte_segments=len(scte_segments),
        written_segments=result.fetched_segments,
        written_keys=len(key_cache),
    )
    if outfile and result.segments:
        summary.outfile = concat_playlist(outdir, MANIFEST_NAME, outfile, ffmpeg_path)
        logger.info('All the segments have been concatenated into "%s"', outfile)
    return summary
