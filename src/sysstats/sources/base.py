"""
Base classes for counter sources.
"""

from __future__ import annotations

import abc
import asyncio
import contextlib
import logging
from typing import Any, List, Optional

from ..config import SamplingRequest
from ..exceptions import CounterSourceReadError, CounterSourceStartError

LOG = logging.getLogger(__name__)

RawRecord = List[str]

# Lines the utility prints before the first sample: a blank line and the header row.
PREAMBLE_LINES = 2


def split_record(line: bytes) -> RawRecord:
    text = line.decode("utf-8", "replace")
    if text.endswith("\r\n"):
        text = text[:-2]
    elif text.endswith("\n"):
        text = text[:-1]
    return text.split(",")


class BaseCounterSource(abc.ABC):
    """Contract for subprocess-backed counter sources.

    A source owns exactly one process per :meth:`run` call. Records are put on
    the sink queue and ``None`` is put once when the source is done, whatever
    the reason.
    """

    NAME: str = ""

    def __init__(self, request: SamplingRequest) -> None:
        self.request = request
        self._process: Optional[Any] = None

    @property
    def process(self) -> Any:
        if self._process is None:
            raise RuntimeError("Counter source not started yet")
        return self._process

    @abc.abstractmethod
    def build_command(self) -> List[str]:
        """Return the full argv for the counter utility."""

    @abc.abstractmethod
    async def spawn(self, argv: List[str]) -> Any:
        """Start the process with stdout piped and stderr inherited."""

    async def start(self) -> Any:
        argv = self.build_command()
        try:
            process = await self.spawn(argv)
        except (OSError, ValueError) as exc:
            raise CounterSourceStartError(f"Failed to start {self.NAME}: {exc}") from exc
        if process.stdout is None:
            await _kill(process)
            raise CounterSourceStartError(f"Failed to connect stdout for {self.NAME}")
        self._process = process
        LOG.debug("Counter source %s started: %s", self.NAME, argv)
        return process

    async def read_line(self) -> bytes:
        try:
            line = await self.process.stdout.readline()
        except (OSError, ValueError) as exc:
            raise CounterSourceReadError(str(exc)) from exc
        if not line:
            raise CounterSourceReadError("end of stream")
        return line

    async def run(self, sink: asyncio.Queue, quit: asyncio.Event) -> None:
        """Stream records into ``sink`` until EOF, a read error or ``quit``.

        The quit event is only checked between reads; a read that never
        returns is not interrupted.
        """
        try:
            try:
                await self.start()
            except CounterSourceStartError as exc:
                LOG.error("%s", exc)
                return
            try:
                for _ in range(PREAMBLE_LINES):
                    await self.read_line()
                while not quit.is_set():
                    line = await self.read_line()
                    await sink.put(split_record(line))
            except CounterSourceReadError as exc:
                LOG.error("Read error from %s: %s", self.NAME, exc)
            finally:
                await self.stop()
        finally:
            await sink.put(None)

    async def stop(self) -> None:
        if self._process is None:
            return
        process, self._process = self._process, None
        await _kill(process)
        LOG.debug("Counter source %s stopped", self.NAME)


async def _kill(process: Any) -> None:
    if process.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
    try:
        await process.wait()
    except OSError as exc:  # pragma: no cover - platform specific
        LOG.warning("Failed to reap counter process: %s", exc)
