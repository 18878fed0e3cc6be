"""Custom exceptions used by the sysstats package."""


class SysStatsError(RuntimeError):
    """Base class for sampling errors."""


class CounterSourceStartError(SysStatsError):
    """Raised when the counter utility cannot be launched or its output attached."""


class CounterSourceReadError(SysStatsError):
    """Raised when reading from the counter utility fails or the stream ends."""
