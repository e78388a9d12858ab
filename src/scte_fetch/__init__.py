"""
SCTE-35 segment fetcher - pull ad breaks out of HLS playlists.

A small pipeline for:
- Detecting CUE-OUT/CUE-IN intervals in an HLS media playlist
- Downloading the segments (and their AES keys) inside those intervals
- Rebuilding a standalone VOD playlist that points at the local copies
- Optionally concatenating the result into one file with ffmpeg
"""

__version__ = "0.1.0"
