"""
`sysstats` command line interface that streams system utilization samples.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

import aiofiles

from ..aggregator import StatsAggregator, StatVector, iter_results
from ..config import DEFAULT_EXECUTABLE, DEFAULT_STALL_TIMEOUT, SamplingConfig

LOG = logging.getLogger("sysstats")

FIELD_KEYS = ("cpu", "mem", "swap", "disk")


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sysstats",
        description="Stream CPU, memory, swap and disk utilization as fractions using TypePerf.",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=1.0,
        help="Sampling interval in seconds (truncated to whole seconds).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_STALL_TIMEOUT,
        help="Seconds without data before the sampler is considered stalled.",
    )
    parser.add_argument(
        "--executable",
        type=str,
        default=DEFAULT_EXECUTABLE,
        help="Counter utility to launch.",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=0,
        help="Stop after this many samples (0 = run until interrupted).",
    )
    parser.add_argument("--output", type=Path, help="Append JSONL samples to this path.")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log raw counter percentages for every sample.",
    )
    parser.add_argument(
        "--log",
        type=str,
        default="INFO",
        help="Log level (DEBUG, INFO, WARNING, ERROR).",
    )
    return parser.parse_args(argv)


def configure_logging(level: str, debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def format_vector(vector: StatVector) -> str:
    return json.dumps(dict(zip(FIELD_KEYS, vector)), separators=(",", ":"))


async def stream(config: SamplingConfig, count: int = 0, output: Optional[Path] = None) -> int:
    """Run one session, print each vector and return how many real samples arrived."""
    if output is None:
        return await _consume(config, count, None)
    output.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(output, "a", encoding="utf-8") as handle:
        return await _consume(config, count, handle)


async def _consume(config: SamplingConfig, count: int, handle: Optional[Any]) -> int:
    results: asyncio.Queue = asyncio.Queue()
    quit = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, quit.set)
        interruptible = True
    except (NotImplementedError, RuntimeError):
        # Windows event loops: Ctrl-C raises KeyboardInterrupt in main() instead.
        interruptible = False

    session = asyncio.create_task(StatsAggregator(config).run(results, quit))
    samples = -1  # the priming vector is not a sample
    try:
        async for vector in iter_results(results):
            line = format_vector(vector)
            print(line, flush=True)
            if handle:
                await handle.write(line + "\n")
            samples += 1
            if count and samples >= count:
                quit.set()
        await session
    finally:
        if interruptible:
            loop.remove_signal_handler(signal.SIGINT)
    return max(samples, 0)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    configure_logging(args.log, args.debug)

    try:
        config = SamplingConfig(
            interval=args.interval,
            debug=args.debug,
            stall_timeout=args.timeout,
            executable=args.executable,
        )
    except ValueError as exc:
        LOG.error("%s", exc)
        return 2

    try:
        samples = asyncio.run(stream(config, max(0, args.count), args.output))
    except KeyboardInterrupt:
        LOG.info("Shutting down sampler...")
        return 0
    except OSError as exc:
        LOG.error("Cannot write samples: %s", exc)
        return 1
    if not samples:
        LOG.error("No samples received from %s", config.executable)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
