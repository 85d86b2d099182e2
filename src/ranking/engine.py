from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Iterable

from src.domain.models import Deal, ListItem, MatchResult
from src.matching.matcher import Matcher, match_all, match_deal
from src.matching.validity import filter_current
from src.normalization.product import normalize_locality
from src.ranking.aggregator import StoreSummary, aggregate
from src.ranking.validation import screen_deals, screen_list_items

logger = logging.getLogger(__name__)

EMPTY_LIST_MESSAGE = "Your list is empty"
NO_MATCH_MESSAGE = "No current deals match your list"


@dataclass
class RankingResult:
    shopper_id: str
    rankings: list[StoreSummary]
    best_store: str | None
    total_potential_savings: float
    message: str
    list_item_count: int = 0
    evaluated_at: datetime | None = None
    matches: list[MatchResult] = field(default_factory=list)


def _money(value: float) -> str:
    return f"${value:,.2f}"


def _ranking_order(summary: StoreSummary) -> tuple[float, float, str]:
    return (summary.total_cost, -summary.match_percentage, summary.store_name)


def build_message(rankings: list[StoreSummary], total_potential_savings: float) -> str:
    best = rankings[0]
    coverage = f"{best.matched_item_count} of {best.total_list_items} items"
    if len(rankings) == 1:
        return f"{best.store_name} is your best value: {_money(best.total_cost)} for {coverage}"
    return (
        f"{best.store_name} is your best value: {_money(best.total_cost)} for {coverage}, "
        f"saving {_money(total_potential_savings)} versus the most expensive of {len(rankings)} stores"
    )


def prepare_deals(
    deals: Iterable[Deal],
    now: datetime,
    *,
    locality: str | None = None,
    inclusive_end: bool | None = None,
    strict: bool = False,
) -> list[Deal]:
    """Screen, validity-filter and locality-filter a deal snapshot."""
    pool = filter_current(screen_deals(deals, strict=strict), now, inclusive_end=inclusive_end)
    if locality is not None:
        wanted = normalize_locality(locality)
        pool = [deal for deal in pool if normalize_locality(deal.zip_code) == wanted]
    return pool


def rank_stores(
    shopper_id: str,
    list_items: Iterable[ListItem],
    deals: Iterable[Deal],
    now: datetime,
    *,
    locality: str | None = None,
    matcher: Matcher = match_deal,
    inclusive_end: bool | None = None,
    strict: bool = False,
) -> RankingResult:
    """Rank the stores that carry at least one item on the list.

    Checked items are already in the cart and take no part in the ranking.
    """
    list_items = [item for item in list_items if not item.checked]
    if not list_items:
        return RankingResult(
            shopper_id=shopper_id,
            rankings=[],
            best_store=None,
            total_potential_savings=0.0,
            message=EMPTY_LIST_MESSAGE,
            evaluated_at=now,
        )

    items = screen_list_items(list_items, strict=strict)
    if not items:
        return RankingResult(
            shopper_id=shopper_id,
            rankings=[],
            best_store=None,
            total_potential_savings=0.0,
            message=EMPTY_LIST_MESSAGE,
            evaluated_at=now,
        )

    pool = prepare_deals(deals, now, locality=locality, inclusive_end=inclusive_end, strict=strict)
    if matcher is match_deal and inclusive_end is not None:
        matcher = partial(match_deal, inclusive_end=inclusive_end)
    matches = match_all(items, pool, now, matcher=matcher)
    summaries = [s for s in aggregate(items, matches).values() if s.matched_item_count > 0]
    logger.debug(
        "shopper=%s items=%d deals=%d matches=%d stores=%d",
        shopper_id,
        len(items),
        len(pool),
        len(matches),
        len(summaries),
    )

    if not summaries:
        return RankingResult(
            shopper_id=shopper_id,
            rankings=[],
            best_store=None,
            total_potential_savings=0.0,
            message=NO_MATCH_MESSAGE,
            list_item_count=len(items),
            evaluated_at=now,
            matches=matches,
        )

    rankings = sorted(summaries, key=_ranking_order)
    for idx, summary in enumerate(rankings):
        summary.is_best_value = idx == 0

    total_potential_savings = 0.0
    if len(rankings) >= 2:
        costs = [s.total_cost for s in rankings]
        total_potential_savings = round(max(costs) - min(costs), 2)

    return RankingResult(
        shopper_id=shopper_id,
        rankings=rankings,
        best_store=rankings[0].store_name,
        total_potential_savings=total_potential_savings,
        message=build_message(rankings, total_potential_savings),
        list_item_count=len(items),
        evaluated_at=now,
        matches=matches,
    )
