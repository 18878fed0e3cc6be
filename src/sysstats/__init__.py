"""
sysstats: System utilization sampling over TypePerf

Launches the Windows performance-counter utility, parses its streaming CSV
output and delivers CPU, memory, swap and disk usage as fractions through an
asyncio queue.
"""

from sysstats.aggregator import StatsAggregator, StatVector, iter_results, system_stats
from sysstats.config import SYSTEM_COUNTERS, SamplingConfig, SamplingRequest
from sysstats.exceptions import (
    CounterSourceReadError,
    CounterSourceStartError,
    SysStatsError,
)
from sysstats.sources import BaseCounterSource, TypePerfSource

__version__ = "0.1.0"

__all__ = [
    "StatsAggregator",
    "StatVector",
    "SamplingConfig",
    "SamplingRequest",
    "SYSTEM_COUNTERS",
    "BaseCounterSource",
    "TypePerfSource",
    "SysStatsError",
    "CounterSourceStartError",
    "CounterSourceReadError",
    "iter_results",
    "system_stats",
    "__version__",
]
