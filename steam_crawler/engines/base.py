from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional
from abc import ABC, abstractmethod

from ..adapters.base import ProductRecord


@dataclass
class CrawlReport:
    products: List[ProductRecord] = field(default_factory=list)  # sorted by app id
    skipped: FrozenSet[int] = frozenset()
    failed: FrozenSet[int] = frozenset()
    elapsed: float = 0.0
    # Set when the crawl was aborted by a transport failure.
    error: Optional[BaseException] = None

    @property
    def complete(self) -> bool:
        return self.error is None

    @property
    def visited_count(self) -> int:
        return len(self.products) + len(self.skipped) + len(self.failed)


class CrawlEngine(ABC):
    """
    Abstract engine interface. Implementations own the crawl lifecycle.
    """
    @abstractmethod
    async def crawl(self) -> CrawlReport:  # pragma: no cover - interface
        ...
