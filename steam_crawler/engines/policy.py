from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class CountPolicy:
    """Stop admitting new work once this many records have been collected."""
    limit: int

    def reached(self, size: int, elapsed: float) -> bool:
        return size >= self.limit

    @property
    def capacity(self) -> Optional[int]:
        return self.limit


@dataclass(frozen=True)
class DurationPolicy:
    """Stop admitting new work once the wall-clock budget (seconds) is spent."""
    seconds: float

    def reached(self, size: int, elapsed: float) -> bool:
        return elapsed >= self.seconds

    @property
    def capacity(self) -> Optional[int]:
        return None


StoppingPolicy = Union[CountPolicy, DurationPolicy]
