from __future__ import annotations

import asyncio
from typing import Any, List, Optional

from ..config import DEFAULT_EXECUTABLE, SamplingRequest
from .base import BaseCounterSource


class TypePerfSource(BaseCounterSource):
    """Stream performance counters from the Windows ``TypePerf`` utility.

    ``TypePerf`` prints a blank line, a CSV header and then one quoted CSV row
    per interval: the timestamp followed by one value per requested counter.
    """

    NAME = "typeperf"

    def __init__(self, request: SamplingRequest, executable: Optional[str] = None) -> None:
        super().__init__(request)
        self.executable = executable or DEFAULT_EXECUTABLE

    def build_command(self) -> List[str]:
        return [self.executable, *self.request.arguments()]

    async def spawn(self, argv: List[str]) -> Any:
        return await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=None,
        )
