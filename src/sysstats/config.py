from dataclasses import dataclass, field
from datetime import timedelta
from typing import Tuple, Union

SYSTEM_COUNTERS: Tuple[str, ...] = (
    r"\Processor(_Total)\% Processor Time",
    r"\Memory\% Committed Bytes In Use",
    r"\Paging file(_Total)\% Usage",
    r"\PhysicalDisk(_Total)\% Disk Time",
)

# Short names used when logging raw percentages, in counter order.
SYSTEM_FIELD_NAMES: Tuple[str, ...] = ("CPU%", "Mem%", "Swap", "Disk")

DEFAULT_EXECUTABLE = "TypePerf"
DEFAULT_STALL_TIMEOUT = 10.0
DEFAULT_BUFFER_SIZE = 5


def whole_seconds(interval: Union[float, timedelta]) -> int:
    """Coerce an interval to whole seconds, truncating and never below one."""
    if isinstance(interval, timedelta):
        seconds = interval.total_seconds()
    else:
        seconds = float(interval)
    if seconds <= 0:
        raise ValueError("Sampling interval must be positive")
    return max(1, int(seconds))


@dataclass(frozen=True)
class SamplingRequest:
    """Immutable description of one sampling session."""

    interval: int
    counters: Tuple[str, ...]

    def __post_init__(self):
        if self.interval < 1:
            raise ValueError("Sampling interval must be at least one second")
        if not self.counters:
            raise ValueError("At least one counter is required")

    def arguments(self) -> list[str]:
        """Command line arguments for the counter utility."""
        return [*self.counters, "-si", str(self.interval)]


@dataclass
class SamplingConfig:
    """Configuration for a system statistics session."""

    interval: Union[float, timedelta] = 1.0
    debug: bool = False
    stall_timeout: float = DEFAULT_STALL_TIMEOUT
    buffer_size: int = DEFAULT_BUFFER_SIZE
    executable: str = DEFAULT_EXECUTABLE
    counters: Tuple[str, ...] = field(default=SYSTEM_COUNTERS)

    def __post_init__(self):
        whole_seconds(self.interval)
        if self.stall_timeout <= 0:
            raise ValueError("Stall timeout must be positive")
        if self.buffer_size < 1:
            raise ValueError("Buffer size must be at least 1")
        self.counters = tuple(self.counters)
        if len(self.counters) != len(SYSTEM_FIELD_NAMES):
            raise ValueError(
                f"Expected {len(SYSTEM_FIELD_NAMES)} counters, got {len(self.counters)}"
            )

    @classmethod
    def default(cls) -> "SamplingConfig":
        """One sample per second, quiet logging."""
        return cls()

    @classmethod
    def verbose(cls) -> "SamplingConfig":
        """One sample per second with per-field debug logging."""
        return cls(debug=True)

    @property
    def interval_seconds(self) -> int:
        return whole_seconds(self.interval)

    def to_request(self) -> SamplingRequest:
        return SamplingRequest(interval=self.interval_seconds, counters=self.counters)

    def with_interval(self, interval: Union[float, timedelta]) -> "SamplingConfig":
        """Override sampling interval.

        Args:
            interval: Seconds (or a timedelta) between samples

        Returns:
            Self for method chaining
        """
        whole_seconds(interval)
        self.interval = interval
        return self

    def with_debug(self, debug: bool = True) -> "SamplingConfig":
        """Toggle per-field debug logging.

        Returns:
            Self for method chaining
        """
        self.debug = debug
        return self

    def with_timeout(self, seconds: float) -> "SamplingConfig":
        """Override the liveness timeout.

        Args:
            seconds: Time without data before a stall is reported

        Returns:
            Self for method chaining
        """
        if seconds <= 0:
            raise ValueError("Stall timeout must be positive")
        self.stall_timeout = seconds
        return self
