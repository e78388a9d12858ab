"""
Per-run cache of fetched decryption keys.
"""

import logging
from pathlib import Path

from .errors import FetchFailed, KeyFetchFailed
from .fetcher import BROWSER_USER_AGENT
from .io_ffmpeg import write_file
from .models import KeyDescriptor, KeyRecord
from .uris import resolve

logger = logging.getLogger("scte_fetch")


class KeyCache:
    """Makes sure every distinct key file is fetched and written at most once.

    Keyed by local filename, since that is what ends up on disk. One instance
    belongs to one pipeline run; fetches are sequential so no locking is done.
    """

    def __init__(self, fetcher, outdir: Path, *, user_agent: str = BROWSER_USER_AGENT) -> None:
        self._fetcher = fetcher
        self._outdir = Path(outdir)
        self._headers = {"User-Agent": user_agent}
        self._records: dict[str, KeyRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[KeyRecord]:
        return list(self._records.values())

    def ensure_key(self, key: KeyDescriptor, base_url: str) -> str:
        """Return the local filename for ``key``, fetching it on first sight."""
        key_url, local_filename = resolve(key.uri, base_url)
        if local_filename in self._records:
            return local_filename

        logger.debug("Fetch key: %s", key_url)
        try:
            data = self._fetcher.fetch(key_url, headers=self._headers)
        except KeyFetchFailed:
            raise
        except FetchFailed as e:
            raise KeyFetchFailed(key_url, e.reason) from e
        write_file(self._outdir, local_filename, data, source_uri=key_url)

        self._records[local_filename] = KeyRecord(
            remote_uri=key_url, local_filename=local_filename
        )
        logger.info("Saved key %s -> %s", key_url, local_filename)
        return local_filename
