from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Tuple, Union

from ..adapters.base import PurchaseOption

logger = logging.getLogger(__name__)

# Lower-cased phrases that mark an option as costing nothing.
FREE_MARKERS = (
    "free",
    "demo",
    "play game",
    "kostenlos",
    "gratis",
    "gratuit",
)

_NUMBER_RE = re.compile(r"\d(?:[\d.,']|[\s\u00a0\u202f](?=\d{3}(?!\d)))*(?:--)?")
_GROUPING_RE = re.compile(r"[\s\u00a0\u202f']")
# A trailing separator followed by 1-2 digits (or dash cents) is the decimal mark.
_DECIMAL_TAIL_RE = re.compile(r"[.,](\d{1,2}|--)$")

OptionLike = Union[PurchaseOption, Tuple[bool, Optional[str]], str]


def normalize_price(options: Iterable[OptionLike]) -> Optional[float]:
    """
    Collapse the price texts of a product's purchase options into one number.

    Returns the highest contribution across options, or None when there are
    no options at all (the product has nothing to buy and must be skipped).
    """
    best: Optional[float] = None
    for option in options:
        value = option_price(option)
        if best is None or value > best:
            best = value
    return best


def option_price(option: OptionLike) -> float:
    if isinstance(option, str):
        is_dlc, text = False, option
    else:
        is_dlc, text = option

    if is_dlc or not text:
        return 0.0

    lowered = text.lower()
    if any(marker in lowered for marker in FREE_MARKERS):
        return 0.0

    return parse_price_text(text)


def parse_price_text(text: str) -> float:
    """Parse a displayed price like "19,99€", "$1,299.99" or "5,--€". Unparseable text is 0.0."""
    match = _NUMBER_RE.search(text)
    if not match:
        logger.debug("No number in price text %r", text)
        return 0.0

    raw = _GROUPING_RE.sub("", match.group())

    tail = _DECIMAL_TAIL_RE.search(raw)
    if tail:
        whole = raw[: tail.start()]
        cents = "0" if tail.group(1) == "--" else tail.group(1)
    else:
        whole, cents = raw, "0"

    whole = whole.replace(".", "").replace(",", "")
    try:
        value = Decimal(f"{whole or '0'}.{cents}")
    except InvalidOperation as exc:
        logger.debug("Failed to parse price: %s", text, exc_info=exc)
        return 0.0
    return float(value)
