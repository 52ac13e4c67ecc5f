from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, FrozenSet, Iterable, List, Optional, Set

from ..adapters.base import ProductRecord


@dataclass(frozen=True)
class StateSnapshot:
    records: List[ProductRecord]
    skipped: FrozenSet[int]
    failed: FrozenSet[int]
    frontier: List[int]


class CrawlState:
    """
    Frontier, resolved-id sets and results of one crawl.

    Every method takes the same lock and never awaits, so each call is a single
    atomic step for both the coordinator and the workers. An id is reserved in
    ``in_flight`` when admitted and moves to exactly one of visited/skipped/failed
    when its worker finishes.
    """

    def __init__(self, seeds: Iterable[int] = (), capacity: Optional[int] = None) -> None:
        self._lock = threading.Lock()
        self._capacity = capacity
        self.frontier: Deque[int] = deque(seeds)
        self.visited: Set[int] = set()
        self.skipped: Set[int] = set()
        self.failed: Set[int] = set()
        self.in_flight: Set[int] = set()
        self.results: Dict[int, ProductRecord] = {}

    def _known(self, app_id: int) -> bool:
        return (
            app_id in self.visited
            or app_id in self.skipped
            or app_id in self.failed
            or app_id in self.in_flight
        )

    def _saturated(self) -> bool:
        return self._capacity is not None and len(self.results) + len(self.in_flight) >= self._capacity

    # ---- Admission ----------------------------------------------------------

    def try_admit(self, app_id: int) -> bool:
        """Reserve ``app_id`` for a fetch. False if it was already seen or capacity is used up."""
        with self._lock:
            if self._known(app_id) or self._saturated():
                return False
            self.in_flight.add(app_id)
            return True

    def saturated(self) -> bool:
        with self._lock:
            return self._saturated()

    # ---- Outcomes -----------------------------------------------------------

    def record_success(self, record: ProductRecord) -> None:
        with self._lock:
            self.in_flight.discard(record.app_id)
            self.results[record.app_id] = record
            self.visited.add(record.app_id)

    def record_skip(self, app_id: int) -> None:
        with self._lock:
            self.in_flight.discard(app_id)
            self.skipped.add(app_id)

    def record_failure(self, app_id: int) -> None:
        with self._lock:
            self.in_flight.discard(app_id)
            self.failed.add(app_id)

    def release(self, app_id: int) -> bool:
        """Mark a still-reserved id as failed. False if its worker already resolved it."""
        with self._lock:
            if app_id not in self.in_flight:
                return False
            self.in_flight.discard(app_id)
            self.failed.add(app_id)
            return True

    # ---- Frontier -----------------------------------------------------------

    def enqueue_discovered(self, app_ids: Iterable[int]) -> int:
        """Append unseen ids to the frontier tail; returns how many were queued."""
        with self._lock:
            fresh = [i for i in app_ids if not self._known(i)]
            self.frontier.extend(fresh)
            return len(fresh)

    def pop_frontier(self) -> Optional[int]:
        with self._lock:
            if not self.frontier:
                return None
            return self.frontier.popleft()

    # ---- Introspection ------------------------------------------------------

    def size(self) -> int:
        with self._lock:
            return len(self.results)

    def pending(self) -> int:
        with self._lock:
            return len(self.in_flight)

    def snapshot(self) -> StateSnapshot:
        with self._lock:
            return StateSnapshot(
                records=sorted(self.results.values(), key=lambda r: r.app_id),
                skipped=frozenset(self.skipped),
                failed=frozenset(self.failed),
                frontier=list(self.frontier),
            )
