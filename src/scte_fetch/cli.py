"""
Command-line interface for the SCTE segment fetcher.
"""

import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .errors import InvalidInputUrl, NoCueSegmentsFound, OutdirCreationFailed, ScteFetchError
from .fetcher import BROWSER_USER_AGENT, DEFAULT_TIMEOUT
from .hls import format_datetime
from .pipeline import run_pipeline

logger = logging.getLogger("scte_fetch")

EXAMPLE = (
    'fetch-scte-segments "https://example.com/live.m3u8?last-hour=6" '
    "--cue-in-only --outdir=SCTE_2023-01-01 --outfile=concatenated.ts"
)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def default_outdir(now: datetime | None = None) -> str:
    """./log_<timestamp> for the current time."""
    return f"log_{format_datetime(now or datetime.now(timezone.utc))}"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not a number)", name, raw)
        return default


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="fetch-scte-segments",
        description="Fetch the CUE-OUT/CUE-IN segments of an HLS playlist into a local VOD playlist",
        epilog=f"Example:\n  {EXAMPLE}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("manifest_url", help="URL of the HLS media playlist")
    ap.add_argument(
        "--cue-in-only",
        action="store_true",
        help="Only fetch CUE-IN segments. By default both CUE-OUT/IN segments are fetched.",
    )
    ap.add_argument(
        "--outdir",
        default=None,
        help='Directory for the fetched files (default: "./log_YYYY-MM-DDTHH:MM:SS.SSSZ")',
    )
    ap.add_argument(
        "--outfile",
        default=None,
        help="Concatenate the fetched segments into this file with ffmpeg (skipped if not set)",
    )
    ap.add_argument(
        "--timeout",
        type=float,
        default=_env_float("SCTE_FETCH_TIMEOUT", DEFAULT_TIMEOUT),
        help="HTTP timeout in seconds",
    )
    ap.add_argument(
        "--user-agent",
        default=os.getenv("SCTE_FETCH_USER_AGENT") or BROWSER_USER_AGENT,
        help="User-Agent sent when fetching decryption keys (default: a desktop browser)",
    )
    ap.add_argument(
        "--ffmpeg",
        default=os.getenv("FFMPEG_PATH", "ffmpeg"),
        help="ffmpeg executable used for --outfile",
    )
    ap.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return ap


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    # .env in the project root (parent of src), else the current directory
    env_path = Path(__file__).resolve().parent.parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    else:
        load_dotenv(find_dotenv(usecwd=True))

    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    outdir = args.outdir or default_outdir()
    print(f"\toutdir={outdir}")
    print(f"\tcueInOnly={str(args.cue_in_only).lower()}")

    try:
        summary = run_pipeline(
            args.manifest_url,
            outdir,
            cue_in_only=args.cue_in_only,
            outfile=args.outfile,
            timeout=args.timeout,
            key_user_agent=args.user_agent,
            ffmpeg_path=args.ffmpeg,
            progress=not args.no_progress,
        )
    except NoCueSegmentsFound as e:
        print(e)
        return e.exit_code
    except (InvalidInputUrl, OutdirCreationFailed) as e:
        print(e)
        print()
        parser.print_usage()
        return e.exit_code
    except ScteFetchError as e:
        logger.debug("Run aborted", exc_info=True)
        print(f"Failed to fetch and store the segment files.\n{e}")
        return e.exit_code

    logger.info(f"Done -> {summary.manifest_path} ({summary.written_keys} key file(s))")
    return 0


if __name__ == "__main__":
    sys.exit(main())
