"""
Stats aggregator that turns raw counter records into normalized vectors.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from datetime import timedelta
from typing import AsyncIterator, List, Optional, Sequence, Union

from .config import SYSTEM_FIELD_NAMES, SamplingConfig
from .sources import BaseCounterSource, TypePerfSource

LOG = logging.getLogger(__name__)

StatVector = List[float]


def zero_vector(width: int = len(SYSTEM_FIELD_NAMES)) -> StatVector:
    return [0.0] * width


class StatsAggregator:
    """Run one sampling session and forward normalized vectors to a queue.

    The results queue receives an all-zero vector first, then one vector per
    counter record, then ``None`` once the session is over. Nothing is raised
    to the caller; failures show up in the logs and as an early ``None`` or
    zeroed fields.
    """

    def __init__(
        self,
        config: Optional[SamplingConfig] = None,
        source: Optional[BaseCounterSource] = None,
    ) -> None:
        self.config = config or SamplingConfig.default()
        self.source = source or TypePerfSource(
            self.config.to_request(), executable=self.config.executable
        )
        self.width = len(self.config.counters)
        self.stalls = 0

    async def run(self, results: asyncio.Queue, quit: asyncio.Event) -> None:
        records: asyncio.Queue = asyncio.Queue(maxsize=self.config.buffer_size)
        task = asyncio.create_task(self.source.run(records, quit))
        finished = False
        try:
            # The first real sample takes a full interval; prime the consumer right away.
            await results.put(zero_vector(self.width))
            while True:
                try:
                    record = await asyncio.wait_for(
                        records.get(), timeout=self.config.stall_timeout
                    )
                except asyncio.TimeoutError:
                    self._stalled(quit)
                    continue
                if record is None:
                    break
                await results.put(self.parse_record(record))
            finished = True
        finally:
            if finished:
                await results.put(None)
                await task
            else:
                task.cancel()
                try:
                    results.put_nowait(None)
                except asyncio.QueueFull:
                    LOG.warning("Results queue full, end-of-stream marker dropped")
                await asyncio.wait({task}, timeout=self.config.stall_timeout)

    def _stalled(self, quit: asyncio.Event) -> None:
        # Only effective once the source's pending read returns; a hung
        # process is not killed here.
        self.stalls += 1
        LOG.warning(
            "%s read timed out after %.1fs", self.source.NAME, self.config.stall_timeout
        )
        quit.set()

    def parse_record(self, record: Sequence[str]) -> StatVector:
        values = zero_vector(self.width)
        for index, field in enumerate(record):
            if index == 0:  # timestamp
                continue
            if index > self.width:
                LOG.warning(
                    "Ignoring extra field %d in %s data: '%s'", index, self.source.NAME, field
                )
                continue
            try:
                value = float(field.strip('"'))
            except ValueError:
                LOG.warning(
                    "Failed to parse field %d in %s data: '%s'", index, self.source.NAME, field
                )
                value = 0.0
            values[index - 1] = value / 100
            if self.config.debug:
                LOG.info("%s: %s", SYSTEM_FIELD_NAMES[index - 1], value)
        return values


async def system_stats(
    interval: Union[float, timedelta],
    results: asyncio.Queue,
    quit: asyncio.Event,
    *,
    debug: bool = False,
    config: Optional[SamplingConfig] = None,
) -> None:
    """Sample CPU, memory, swap and disk usage as fractions every ``interval``.

    The interval is truncated to whole seconds. Set ``quit`` to stop; the
    results queue is always terminated with ``None``.
    """
    if config is None:
        config = SamplingConfig(interval=interval, debug=debug)
    else:
        config = dataclasses.replace(config, interval=interval, debug=debug or config.debug)
    await StatsAggregator(config).run(results, quit)


async def iter_results(results: asyncio.Queue) -> AsyncIterator[StatVector]:
    """Yield vectors from a results queue until it is closed."""
    while True:
        vector = await results.get()
        if vector is None:
            return
        yield vector
