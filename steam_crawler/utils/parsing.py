from __future__ import annotations

import re
from typing import Optional, Set

from bs4 import BeautifulSoup

STORE_URL = "https://store.steampowered.com"

# Canonical product page: https://store.steampowered.com/app/<id>/<slug>/
_APP_URL_RE = re.compile(r"^https?://store\.steampowered\.com/app/([^/?#]+)")


def page_for_app(app_id: int) -> str:
    return f"{STORE_URL}/app/{app_id}/"


def app_id_from_url(url: str) -> Optional[int]:
    """
    Return the product id named by a store URL, or None when the URL is not
    a product page or its id segment is not a positive integer.
    """
    match = _APP_URL_RE.match(url.strip())
    if not match:
        return None
    segment = match.group(1)
    if not segment.isdigit():
        return None
    app_id = int(segment)
    return app_id if app_id > 0 else None


def extract_app_ids(html: str | BeautifulSoup) -> Set[int]:
    """
    Extract ids of all linked product pages from an HTML string or parsed document.
    """
    soup = html if isinstance(html, BeautifulSoup) else BeautifulSoup(html, "html.parser")
    out: Set[int] = set()
    for a in soup.select("a[href]"):
        href = a.get("href")
        if not href:
            continue
        app_id = app_id_from_url(href)
        if app_id is not None:
            out.add(app_id)
    return out
