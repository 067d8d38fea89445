from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """Feed source returning canned XML and counting calls."""

    def __init__(self, payload: bytes = b"", error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.calls: list[int] = []

    async def fetch(self, rows: int) -> bytes:
        self.calls.append(rows)
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def two_entry_feed() -> bytes:
    return (FIXTURES / "finn_two_entries.xml").read_bytes()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
