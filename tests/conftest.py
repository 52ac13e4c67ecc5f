"""Shared fixtures: a Steam-like page builder and an in-memory store replacing the transport."""

import asyncio
import time
from typing import Callable, Dict, Iterable, Optional, Sequence, Union
from unittest.mock import patch

import pytest

from steam_crawler.utils.http import FetchError
from steam_crawler.utils.parsing import app_id_from_url


def build_page(
    name: Optional[str] = "Portal",
    tags: Sequence[str] = ("Puzzle", "Singleplayer"),
    prices: Optional[Sequence[str]] = ("9,75€",),
    links: Iterable[int] = (),
    dlc_prices: Sequence[str] = (),
) -> str:
    """Render a minimal store app page. ``prices=None`` means no purchase options at all."""
    parts = ["<html><body>"]
    if name is not None:
        parts.append(f'<div class="apphub_AppName">{name}</div>')
    parts.append('<div class="glance_tags popular_tags">')
    for tag in tags:
        parts.append(f'<a class="app_tag" href="https://store.steampowered.com/tags/en/{tag}/">\n  {tag}\n</a>')
    parts.append('<div class="app_tag add_button">+</div></div>')
    parts.append('<div id="game_area_purchase">')
    for price in prices or ():
        parts.append(
            '<div class="game_area_purchase_game_wrapper"><div class="game_area_purchase_game">'
            f'<div class="game_purchase_price price">{price}</div></div></div>'
        )
    for price in dlc_prices:
        parts.append(
            '<div class="game_area_purchase_game_wrapper dlc_purchase_wrapper"><div class="game_area_purchase_game">'
            f'<div class="game_purchase_price price">{price}</div></div></div>'
        )
    parts.append("</div>")
    for link in links:
        parts.append(f'<a href="https://store.steampowered.com/app/{link}/Some_Game/">game {link}</a>')
    parts.append("</body></html>")
    return "\n".join(parts)


class FakeStore:
    """Stands in for ``fetch_text``; records every fetch so tests can assert on them."""

    def __init__(
        self,
        pages: Union[Dict[int, str], Callable[[int], str]],
        delay: float = 0.0,
        failing: Iterable[int] = (),
    ) -> None:
        self.pages = pages
        self.delay = delay
        self.failing = set(failing)
        self.calls = []
        self.started_at = []
        self.active = 0
        self.peak = 0

    def page(self, app_id: int) -> Optional[str]:
        if callable(self.pages):
            return self.pages(app_id)
        return self.pages.get(app_id)

    async def fetch(self, session, url, **kwargs) -> str:
        app_id = app_id_from_url(url)
        self.calls.append(app_id)
        self.started_at.append(time.monotonic())
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            html = self.page(app_id)
            if app_id in self.failing or html is None:
                raise FetchError(url, ConnectionError("connection reset"))
            return html
        finally:
            self.active -= 1

    def patch(self):
        return patch("steam_crawler.engines.simple_engine.fetch_text", new=self.fetch)


@pytest.fixture
def page():
    return build_page


@pytest.fixture
def fake_store():
    return FakeStore
