from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, TypeVar

from src.domain.models import Deal, ListItem, is_finite_price
from src.matching.validity import as_naive_utc
from src.normalization.product import normalize_text
from src.ranking.errors import InvalidInputError

logger = logging.getLogger(__name__)

T = TypeVar("T", ListItem, Deal)


def list_item_problem(item: ListItem) -> str | None:
    if not normalize_text(item.item_name):
        return "item name is blank"
    if isinstance(item.quantity, bool) or not isinstance(item.quantity, int):
        return "quantity must be an integer"
    if item.quantity < 1:
        return "quantity must be at least 1"
    return None


def _window_inverted(start: date | datetime, end: date | datetime) -> bool:
    # Mixed date/datetime bounds compare at day resolution.
    if isinstance(start, datetime) != isinstance(end, datetime):
        start = start.date() if isinstance(start, datetime) else start
        end = end.date() if isinstance(end, datetime) else end
    elif isinstance(start, datetime) and (start.tzinfo is None) != (end.tzinfo is None):
        start, end = as_naive_utc(start), as_naive_utc(end)
    return start > end


def deal_problem(deal: Deal) -> str | None:
    if not normalize_text(deal.store_name):
        return "store name is blank"
    if not is_finite_price(deal.sale_price):
        return "sale price must be a finite positive number"
    if _window_inverted(deal.valid_from, deal.valid_to):
        return "validity window ends before it starts"
    return None


def _screen(records: Iterable[T], kind: str, check, strict: bool) -> list[T]:
    kept: list[T] = []
    seen: set[str] = set()
    for record in records:
        try:
            problem = check(record)
        except TypeError as exc:
            # Bounds that cannot be compared.
            problem = str(exc)
        if problem is None and record.id in seen:
            problem = "duplicate id"
        if problem is None:
            seen.add(record.id)
            kept.append(record)
            continue
        if strict:
            raise InvalidInputError(kind, record.id, problem)
        logger.warning("skipping %s %s: %s", kind, record.id, problem)
    return kept


def screen_list_items(items: Iterable[ListItem], *, strict: bool = False) -> list[ListItem]:
    """Drop malformed list items and repeats of an id already seen; the first one wins."""
    return _screen(items, "list item", list_item_problem, strict)


def screen_deals(deals: Iterable[Deal], *, strict: bool = False) -> list[Deal]:
    return _screen(deals, "deal", deal_problem, strict)
