"""List-item to deal matching.

The default strategy is deliberately conservative: the normalized item name
must appear inside the normalized product name, and a requested variant must
appear there too. There is no typo tolerance and no token reordering.

Alternative strategies only need the ``Matcher`` call signature to be
plugged into the ranker.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from src.domain.models import Deal, ListItem, MatchResult
from src.matching.validity import is_current
from src.normalization.product import normalize_text

logger = logging.getLogger(__name__)

NAME_ONLY_SCORE = 0.5
NAME_AND_VARIANT_SCORE = 1.0

Matcher = Callable[[ListItem, Deal, datetime], Optional[MatchResult]]


def match_deal(
    list_item: ListItem,
    deal: Deal,
    now: datetime,
    *,
    inclusive_end: bool | None = None,
) -> MatchResult | None:
    if not is_current(deal, now, inclusive_end=inclusive_end):
        return None

    name = normalize_text(list_item.item_name)
    product_text = normalize_text(deal.product_name)
    if not name or not product_text:
        return None
    if name not in product_text:
        return None

    variant = normalize_text(list_item.item_variant)
    if variant:
        if variant not in product_text:
            return None
        return MatchResult(
            list_item=list_item,
            deal=deal,
            match_score=NAME_AND_VARIANT_SCORE,
            match_reason=f"matches {name} + {variant}",
        )

    return MatchResult(
        list_item=list_item,
        deal=deal,
        match_score=NAME_ONLY_SCORE,
        match_reason=f"matches {name}",
    )


def match_all(
    list_items: Iterable[ListItem],
    deals: Iterable[Deal],
    now: datetime,
    *,
    matcher: Matcher = match_deal,
) -> list[MatchResult]:
    """Run ``matcher`` over every (item, deal) pair, keeping list order."""
    deals = list(deals)
    matches: list[MatchResult] = []
    for item in list_items:
        for deal in deals:
            result = matcher(item, deal, now)
            if result is not None:
                matches.append(result)
    logger.debug("matched %d pairs", len(matches))
    return matches


def sort_matches(matches: Iterable[MatchResult]) -> list[MatchResult]:
    # Best score first; the remaining keys only make the order reproducible.
    return sorted(
        matches,
        key=lambda m: (
            -m.match_score,
            m.deal.store_name,
            m.deal.sale_price,
            m.deal.product_name,
            m.deal.id,
        ),
    )
