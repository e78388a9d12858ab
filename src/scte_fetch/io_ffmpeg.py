"""
Output directory handling and ffmpeg concatenation.
"""

import logging
import subprocess
from pathlib import Path

from .errors import ConcatenationFailed, OutdirCreationFailed, WriteFailed

logger = logging.getLogger("scte_fetch")


def run(cmd: list[str], *, cwd: str | None = None, check: bool = True) -> str:
    """Run a command and return stdout (stderr merged)."""
    logger.debug("Running: %s", " ".join(map(str, cmd)))
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
    except OSError as e:
        raise ConcatenationFailed(f"Could not run {cmd[0]}: {e}") from e
    if proc.returncode != 0 and check:
        logger.error("Command failed with code %d: %s", proc.returncode, proc.stdout)
        msg = f"Command failed with code {proc.returncode}"
        raise ConcatenationFailed(msg)
    return proc.stdout


def check_outdir(path: str | Path) -> bool:
    """Fail early if ``path`` cannot be used as the output directory.

    Returns True when an empty directory already exists there.
    """
    outdir = Path(path)
    if not outdir.exists():
        return False
    if not outdir.is_dir():
        raise OutdirCreationFailed(str(outdir), "not a directory")
    if any(outdir.iterdir()):
        raise OutdirCreationFailed(str(outdir), "directory is not empty")
    return True


def create_outdir(path: str | Path) -> Path:
    """Create the output directory.

    An existing empty directory is reused; a file or a non-empty directory at
    ``path`` is an error.
    """
    outdir = Path(path)
    if check_outdir(outdir):
        return outdir
    try:
        outdir.mkdir(parents=True)
    except OSError as e:
        raise OutdirCreationFailed(str(outdir), e.strerror or str(e)) from e
    return outdir


def write_file(outdir: Path, filename: str, data: bytes, *, source_uri: str) -> Path:
    """Write ``data`` to ``outdir/filename``; overwrites an existing file."""
    path = outdir / filename
    try:
        path.write_bytes(data)
    except OSError as e:
        raise WriteFailed(str(path), source_uri, e.strerror or str(e)) from e
    logger.debug("Wrote %d bytes -> %s", len(data), path)
    return path


def concat_playlist(
    outdir: Path, manifest_name: str, outfile: str, ffmpeg_path: str = "ffmpeg"
) -> Path:
    """Losslessly concatenate every segment of the local playlist into one file.

    ffmpeg runs inside ``outdir`` so the playlist's bare filenames (including
    key files with arbitrary extensions) resolve.
    """
    cmd = [
        ffmpeg_path,
        "-y",
        "-allowed_extensions",
        "ALL",
        "-i",
        manifest_name,
        "-c",
        "copy",
        outfile,
    ]
    run(cmd, cwd=str(outdir))
    return outdir / outfile
