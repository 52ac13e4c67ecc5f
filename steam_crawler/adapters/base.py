from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional, Protocol, Set


class PurchaseOption(NamedTuple):
    """One priced variant offered on a product page (base game, bundle, DLC...)."""

    is_dlc: bool
    price_text: Optional[str]


@dataclass
class PageData:
    name: Optional[str]
    tags: List[str] = field(default_factory=list)
    purchase_options: List[PurchaseOption] = field(default_factory=list)
    links: Set[int] = field(default_factory=set)


class PageAdapter(Protocol):
    """
    Interface for site-specific parsing logic.
    Keep this small and stable so adapters rarely break across upgrades.
    """

    name: str

    def parse(self, app_id: int, html: str) -> PageData:
        """
        Given the product id and its page HTML, return the extracted fields
        and the ids of linked products. Engine owns the HTTP and queueing.
        """
        ...


@dataclass(eq=False)
class ProductRecord:
    """Structured record for one crawled product. Identity is the app id alone."""

    app_id: int
    name: str
    tags: List[str] = field(default_factory=list)
    price: float = 0.0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProductRecord):
            return NotImplemented
        return self.app_id == other.app_id

    def __hash__(self) -> int:
        return hash(self.app_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.app_id,
            "name": self.name,
            "tags": list(self.tags),
            "price": self.price,
        }
