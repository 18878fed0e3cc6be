"""Available counter source implementations."""

from .base import BaseCounterSource, RawRecord, split_record
from .typeperf import TypePerfSource

__all__ = [
    "BaseCounterSource",
    "RawRecord",
    "TypePerfSource",
    "split_record",
]
