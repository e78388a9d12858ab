"""
Test doubles and segment builders.
"""

from datetime import datetime, timezone

from scte_fetch.errors import FetchFailed
from scte_fetch.models import DateRange, KeyDescriptor, Marker, MarkerType, Segment


class FakeFetcher:
    """Serves bytes from a dict and records every call."""

    def __init__(self, responses: dict[str, bytes] | None = None, default: bytes | None = None):
        self.responses = dict(responses or {})
        self.default = default
        self.calls: list[tuple[str, dict | None]] = []

    def fetch(self, url, headers=None):
        self.calls.append((url, headers))
        if url in self.responses:
            return self.responses[url]
        if self.default is not None:
            return self.default
        raise FetchFailed(url, "HTTP 404")

    def fetch_text(self, url):
        return self.fetch(url).decode("utf-8")

    def urls(self) -> list[str]:
        return [u for u, _ in self.calls]


def make_segment(uri, duration=6.0, *, key_uri=None, date_range=None, markers=()):
    key = KeyDescriptor(method="AES-128", uri=key_uri, iv="0x01") if key_uri else None
    return Segment(uri=uri, duration=duration, key=key, date_range=date_range, markers=tuple(markers))


OUT = Marker(type=MarkerType.OUT, duration=30.0)
IN = Marker(type=MarkerType.IN)


def open_range(event_id="ad-1"):
    return DateRange(id=event_id, scte35_out="0xFC30")


def closed_range(event_id="ad-1"):
    return DateRange(
        id=event_id,
        start=datetime(2023, 1, 1, 0, 0, tzinfo=timezone.utc),
        end=datetime(2023, 1, 1, 0, 0, 30, tzinfo=timezone.utc),
        scte35_in="0xFC30",
    )
