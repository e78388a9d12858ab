"""
URI resolution and local filename mapping for segments and keys.
"""

import posixpath
import re
from urllib.parse import urljoin, urlsplit

from .errors import InvalidUri

_BAD_CHARS_RE = re.compile(r"[\x00-\x20\x7f]")


def resolve(raw_uri: str, base_url: str) -> tuple[str, str]:
    """Resolve ``raw_uri`` against ``base_url``.

    Returns ``(absolute_url, local_filename)`` where the filename is the last
    path component of the absolute URL, without query string or fragment.
    Distinct URIs sharing a basename map to the same filename.
    """
    if raw_uri is None or not raw_uri.strip():
        raise InvalidUri(str(raw_uri), "empty URI")
    uri = raw_uri.strip()
    if _BAD_CHARS_RE.search(uri):
        raise InvalidUri(raw_uri, "contains whitespace or control characters")

    try:
        absolute_url = urljoin(base_url, uri)
        parts = urlsplit(absolute_url)
        parts.port  # noqa: B018 - raises ValueError on a bad port
    except ValueError as e:
        raise InvalidUri(raw_uri, str(e)) from e

    local_filename = posixpath.basename(parts.path)
    if not local_filename or local_filename in (".", ".."):
        raise InvalidUri(raw_uri, "no file name in path")
    return absolute_url, local_filename


def is_absolute_http_url(url: str) -> bool:
    """True for http(s) URLs with a host."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)
