from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable

from src.domain.models import Deal, ListItem, MatchResult


@dataclass
class ItemDealDetail:
    list_item_id: str
    list_item_name: str
    deal_id: str
    deal_product_name: str
    sale_price: float
    regular_price: float | None
    savings: float | None
    savings_percent: int | None
    quantity: int
    line_total: float
    match_score: float
    match_reason: str
    is_best_price: bool


@dataclass
class MissingItem:
    list_item_id: str
    list_item_name: str
    quantity: int


@dataclass
class StoreSummary:
    store_name: str
    matched_item_count: int
    total_list_items: int
    match_percentage: float
    total_cost: float
    total_savings: float
    deals: list[ItemDealDetail] = field(default_factory=list)
    missing_items: list[MissingItem] = field(default_factory=list)
    is_best_value: bool = False


def _representative_key(match: MatchResult) -> tuple[float, float, str, str]:
    return (-match.match_score, match.deal.sale_price, match.deal.product_name, match.deal.id)


def pick_representative(candidates: Iterable[MatchResult]) -> MatchResult:
    """Choose the deal that stands for one list item at one store.

    Highest match score wins, then the lowest sale price, then the smallest
    product name. The deal id is the last resort so the pick never depends on
    input order.
    """
    return min(candidates, key=_representative_key)


def _line_savings(deal: Deal, quantity: int) -> float:
    regular = deal.known_regular_price
    if regular is None or regular < deal.sale_price:
        return 0.0
    return (regular - deal.sale_price) * quantity


def aggregate(list_items: list[ListItem], matches: Iterable[MatchResult]) -> dict[str, StoreSummary]:
    total_list_items = len(list_items)
    known_ids = {item.id for item in list_items}

    by_store: dict[str, dict[str, list[MatchResult]]] = defaultdict(lambda: defaultdict(list))
    lowest_price: dict[str, float] = {}
    for match in matches:
        item_id = match.list_item.id
        if item_id not in known_ids:
            continue
        by_store[match.deal.store_name][item_id].append(match)
        price = match.deal.sale_price
        if item_id not in lowest_price or price < lowest_price[item_id]:
            lowest_price[item_id] = price

    summaries: dict[str, StoreSummary] = {}
    for store_name in sorted(by_store):
        candidates_by_item = by_store[store_name]
        details: list[ItemDealDetail] = []
        missing: list[MissingItem] = []
        total_cost = 0.0
        total_savings = 0.0

        for item in list_items:
            candidates = candidates_by_item.get(item.id)
            if not candidates:
                missing.append(
                    MissingItem(list_item_id=item.id, list_item_name=item.display_name, quantity=item.quantity)
                )
                continue

            best = pick_representative(candidates)
            deal = best.deal
            line_total = deal.sale_price * item.quantity
            total_cost += line_total
            total_savings += _line_savings(deal, item.quantity)
            details.append(
                ItemDealDetail(
                    list_item_id=item.id,
                    list_item_name=item.display_name,
                    deal_id=deal.id,
                    deal_product_name=deal.product_name,
                    sale_price=deal.sale_price,
                    regular_price=deal.known_regular_price,
                    savings=deal.savings,
                    savings_percent=deal.savings_percent,
                    quantity=item.quantity,
                    line_total=round(line_total, 2),
                    match_score=best.match_score,
                    match_reason=best.match_reason,
                    is_best_price=deal.sale_price <= lowest_price[item.id],
                )
            )

        if not details:
            continue

        matched = len(details)
        summaries[store_name] = StoreSummary(
            store_name=store_name,
            matched_item_count=matched,
            total_list_items=total_list_items,
            match_percentage=round(matched / total_list_items * 100, 2) if total_list_items else 0.0,
            total_cost=round(total_cost, 2),
            total_savings=round(total_savings, 2),
            deals=details,
            missing_items=missing,
        )
    return summaries
