from __future__ import annotations

import logging
import math
import os
from dataclasses import asdict
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query

from src.api.schemas import (
    Deal,
    DealListResponse,
    DealMatch,
    DealMatchListResponse,
    ListItem,
    RankingRequest,
    StoreRankingResponse,
    StoreSummary,
)
from src.db.migrate import run_migrations
from src.db.repository import fetch_deals, fetch_list_items, fetch_shopper, search_deals
from src.domain import models
from src.logging_config import configure_logging
from src.matching.matcher import match_all, sort_matches
from src.ranking.engine import RankingResult, prepare_deals, rank_stores
from src.ranking.errors import InvalidInputError

logger = logging.getLogger(__name__)

DEAL_LIST_MAX_LIMIT = int(os.getenv("DEAL_LIST_MAX_LIMIT", "100"))

app = FastAPI(title="Weekly Deal Ranker API", version="0.1.0")


@app.on_event("startup")
def startup() -> None:
    configure_logging()
    run_migrations()


def _now(at: Optional[datetime]) -> datetime:
    return at if at is not None else datetime.now(timezone.utc)


def _require_shopper(shopper_id: str) -> dict:
    shopper = fetch_shopper(shopper_id)
    if shopper is None:
        raise HTTPException(status_code=404, detail=f"Unknown shopper {shopper_id}")
    return shopper


def deal_to_schema(deal: models.Deal) -> Deal:
    return Deal(
        id=deal.id,
        store_name=deal.store_name,
        zip_code=deal.zip_code,
        product_name=deal.product_name,
        product_brand=deal.product_brand,
        product_category=deal.product_category,
        sale_price=deal.sale_price,
        regular_price=deal.known_regular_price,
        savings=deal.savings,
        savings_percent=deal.savings_percent,
        deal_type=deal.deal_type.value.upper(),
        unit=deal.unit,
        quantity_text=deal.quantity_text,
        valid_from=deal.valid_from.isoformat(),
        valid_to=deal.valid_to.isoformat(),
        confidence=deal.confidence,
    )


def list_item_to_schema(item: models.ListItem) -> ListItem:
    return ListItem(
        id=item.id,
        item_name=item.item_name,
        item_variant=item.item_variant,
        display_name=item.display_name,
        quantity=item.quantity,
        checked=item.checked,
        category=item.category,
    )


def ranking_to_schema(result: RankingResult) -> StoreRankingResponse:
    return StoreRankingResponse(
        shopper_id=result.shopper_id,
        rankings=[StoreSummary(**asdict(summary)) for summary in result.rankings],
        best_store=result.best_store,
        total_potential_savings=result.total_potential_savings,
        list_item_count=result.list_item_count,
        message=result.message,
        evaluated_at=result.evaluated_at.isoformat() if result.evaluated_at else "",
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/shoppers/{shopper_id}/ranking", response_model=StoreRankingResponse)
def get_store_ranking(
    shopper_id: str,
    at: Optional[datetime] = Query(default=None),
) -> StoreRankingResponse:
    shopper = _require_shopper(shopper_id)
    now = _now(at)
    items = fetch_list_items(shopper_id)
    deals = fetch_deals(shopper["zip_code"], active_on=now.date()) if items else []
    result = rank_stores(shopper_id, items, deals, now, locality=shopper["zip_code"])
    logger.info("ranking shopper=%s best_store=%s stores=%d", shopper_id, result.best_store, len(result.rankings))
    return ranking_to_schema(result)


@app.get("/shoppers/{shopper_id}/matches", response_model=DealMatchListResponse)
def get_matches(
    shopper_id: str,
    at: Optional[datetime] = Query(default=None),
) -> DealMatchListResponse:
    shopper = _require_shopper(shopper_id)
    now = _now(at)
    items = fetch_list_items(shopper_id)
    if not items:
        return DealMatchListResponse(items=[])
    pool = prepare_deals(fetch_deals(shopper["zip_code"], active_on=now.date()), now, locality=shopper["zip_code"])
    matches = sort_matches(match_all(items, pool, now))
    return DealMatchListResponse(
        items=[
            DealMatch(
                list_item=list_item_to_schema(m.list_item),
                deal=deal_to_schema(m.deal),
                match_score=m.match_score,
                match_reason=m.match_reason,
            )
            for m in matches
        ]
    )


@app.get("/shoppers/{shopper_id}/items/{item_id}/deals", response_model=List[Deal])
def get_item_deals(
    shopper_id: str,
    item_id: str,
    at: Optional[datetime] = Query(default=None),
) -> List[Deal]:
    shopper = _require_shopper(shopper_id)
    now = _now(at)
    item = next((i for i in fetch_list_items(shopper_id, include_checked=True) if i.id == item_id), None)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Unknown list item {item_id}")
    pool = prepare_deals(fetch_deals(shopper["zip_code"], active_on=now.date()), now, locality=shopper["zip_code"])
    matches = sort_matches(match_all([item], pool, now))
    return [deal_to_schema(m.deal) for m in matches]


def _page(deals: list[models.Deal], limit: int, offset: int) -> DealListResponse:
    capped = min(limit, DEAL_LIST_MAX_LIMIT)
    total = len(deals)
    return DealListResponse(
        items=[deal_to_schema(d) for d in deals[offset : offset + capped]],
        total=total,
        offset=offset,
        limit=capped,
        current_page=offset // capped + 1,
        total_pages=math.ceil(total / capped),
    )


@app.get("/deals", response_model=DealListResponse)
def get_deals(
    zip_code: str = Query(..., min_length=1),
    category: Optional[str] = Query(default=None),
    limit: int = Query(default=20, ge=1),
    offset: int = Query(default=0, ge=0),
    at: Optional[datetime] = Query(default=None),
) -> DealListResponse:
    now = _now(at)
    deals = prepare_deals(fetch_deals(zip_code, active_on=now.date(), category=category), now)
    return _page(deals, limit, offset)


@app.get("/deals/search", response_model=DealListResponse)
def get_deal_search(
    zip_code: str = Query(..., min_length=1),
    query: str = Query(..., min_length=1),
    limit: int = Query(default=20, ge=1),
    offset: int = Query(default=0, ge=0),
    at: Optional[datetime] = Query(default=None),
) -> DealListResponse:
    now = _now(at)
    deals = prepare_deals(search_deals(zip_code, query, active_on=now.date()), now)
    return _page(deals, limit, offset)


@app.get("/stores/{store_name}/deals", response_model=DealListResponse)
def get_store_deals(
    store_name: str,
    zip_code: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    limit: int = Query(default=20, ge=1),
    offset: int = Query(default=0, ge=0),
    at: Optional[datetime] = Query(default=None),
) -> DealListResponse:
    now = _now(at)
    deals = fetch_deals(zip_code, active_on=now.date(), category=category, store_name=store_name)
    return _page(prepare_deals(deals, now), limit, offset)


@app.post("/rankings", response_model=StoreRankingResponse)
def post_ranking(payload: RankingRequest) -> StoreRankingResponse:
    items = [item.to_domain(payload.shopper_id) for item in payload.items]
    deals = [deal.to_domain() for deal in payload.deals]
    try:
        result = rank_stores(
            payload.shopper_id,
            items,
            deals,
            _now(payload.at),
            locality=payload.zip_code,
            strict=True,
        )
    except InvalidInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return ranking_to_schema(result)
