"""
Dataclass for tracking the statistics of a packaging run.
"""

import time
from dataclasses import dataclass, field


@dataclass
class RunStats:
    """Tracks what a run materialized, what failed and what was never found."""

    requested: list[str] = field(default_factory=list)
    materialized: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    unresolved: list[str] = field(default_factory=list)
    assets_downloaded: int = 0
    bytes_downloaded: int = 0
    _start_time: float = field(default_factory=time.monotonic, repr=False)

    def record_asset(self, size: int) -> None:
        self.assets_downloaded += 1
        self.bytes_downloaded += size

    @property
    def duration(self) -> float:
        return time.monotonic() - self._start_time

    @property
    def succeeded(self) -> bool:
        return not self.failed
