from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .base import PageData, PurchaseOption
from ..utils.parsing import extract_app_ids


class SteamStoreAdapter:
    """Extracts name, tags, purchase options and linked apps from a store app page."""

    name = "steam"

    def parse(self, app_id: int, html: str) -> PageData:
        soup = BeautifulSoup(html, "html.parser")
        links = extract_app_ids(soup)
        # Self-links add nothing to the frontier.
        links.discard(app_id)
        return PageData(
            name=self._text_or_none(soup.select_one(".apphub_AppName")),
            tags=self._tags(soup),
            purchase_options=self._purchase_options(soup),
            links=links,
        )

    # ---- Extraction helpers -------------------------------------------------

    def _tags(self, soup: BeautifulSoup) -> List[str]:
        tags: List[str] = []
        for node in soup.select(".app_tag"):
            if "add_button" in (node.get("class") or []):
                continue
            text = self._text_or_none(node)
            if text and text != "+":
                tags.append(text)
        return tags

    def _purchase_options(self, soup: BeautifulSoup) -> List[PurchaseOption]:
        options: List[PurchaseOption] = []
        for block in soup.select(".game_area_purchase_game"):
            price_node = block.select_one(".discount_final_price") or block.select_one(".game_purchase_price")
            options.append(PurchaseOption(is_dlc=self._is_dlc(block), price_text=self._text_or_none(price_node)))
        return options

    def _is_dlc(self, block: Tag) -> bool:
        if any("dlc" in cls for cls in block.get("class") or []):
            return True
        return block.find_parent(class_=lambda cls: bool(cls) and "dlc" in cls) is not None

    # ---- Text helpers -------------------------------------------------------

    def _text_or_none(self, node: Optional[Tag]) -> Optional[str]:
        if not node:
            return None
        text = node.get_text(strip=True)
        return text or None
