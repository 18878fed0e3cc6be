import asyncio
from typing import Iterable, List, Optional

import pytest

from sysstats.config import SYSTEM_COUNTERS, SamplingRequest
from sysstats.sources import BaseCounterSource

PREAMBLE = [
    b"\r\n",
    b'"(PDH-CSV 4.0)","\\\\HOST\\Processor(_Total)\\% Processor Time","\\\\HOST\\Memory\\% Committed Bytes In Use","\\\\HOST\\Paging file(_Total)\\% Usage","\\\\HOST\\PhysicalDisk(_Total)\\% Disk Time"\r\n',
]


class FakeProcess:
    """Stand-in for an asyncio subprocess whose stdout is fed by the test."""

    def __init__(
        self,
        lines: Iterable[bytes] = (),
        eof: bool = True,
        stdout: bool = True,
        limit: int = 2**16,
    ):
        self.stdout: Optional[asyncio.StreamReader] = (
            asyncio.StreamReader(limit=limit) if stdout else None
        )
        self.returncode: Optional[int] = None
        self.killed = False
        if self.stdout is not None:
            for line in lines:
                self.stdout.feed_data(line)
            if eof:
                self.stdout.feed_eof()

    def kill(self) -> None:
        self.killed = True
        self.returncode = -9
        if self.stdout is not None and not self.stdout.at_eof():
            self.stdout.feed_eof()

    async def wait(self) -> Optional[int]:
        return self.returncode


class FakeSource(BaseCounterSource):
    NAME = "fake"

    def __init__(self, request: SamplingRequest, process=None, error: Optional[Exception] = None):
        super().__init__(request)
        self.fake_process = process
        self.error = error
        self.argv: List[str] = []

    def build_command(self) -> List[str]:
        return ["fake", *self.request.arguments()]

    async def spawn(self, argv: List[str]):
        self.argv = argv
        if self.error is not None:
            raise self.error
        return self.fake_process


@pytest.fixture
def request_4():
    return SamplingRequest(interval=1, counters=SYSTEM_COUNTERS)


@pytest.fixture
def make_process():
    def factory(
        data: Iterable[bytes] = (),
        eof: bool = True,
        preamble: bool = True,
        stdout: bool = True,
        limit: int = 2**16,
    ):
        lines = list(PREAMBLE) + list(data) if preamble else list(data)
        return FakeProcess(lines, eof=eof, stdout=stdout, limit=limit)

    return factory


@pytest.fixture
def make_source(request_4):
    def factory(process=None, error: Optional[Exception] = None):
        return FakeSource(request_4, process=process, error=error)

    return factory


async def _drain(queue: asyncio.Queue) -> list:
    items = []
    while True:
        item = await asyncio.wait_for(queue.get(), timeout=2.0)
        items.append(item)
        if item is None:
            return items


@pytest.fixture
def drain():
    """Collect items from a queue up to and including the ``None`` sentinel."""
    return _drain
