import pytest

from helpers import FakeFetcher


@pytest.fixture
def fetcher():
    return FakeFetcher(default=b"\x47" * 188)
