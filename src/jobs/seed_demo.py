from __future__ import annotations

import logging
from datetime import datetime, timezone

from src.collectors.demo_flyers import DEMO_SHOPPER_ID, DEMO_ZIP_CODE, collect_demo_flyers, demo_list
from src.db.migrate import run_migrations
from src.db.repository import (
    fetch_deals,
    fetch_list_items,
    insert_deal,
    insert_list_item,
    upsert_shopper,
)
from src.logging_config import configure_logging
from src.ranking.engine import RankingResult, rank_stores

logger = logging.getLogger(__name__)


def run_seed(now: datetime | None = None) -> RankingResult:
    run_migrations()
    now = now or datetime.now(timezone.utc)

    upsert_shopper(DEMO_SHOPPER_ID, DEMO_ZIP_CODE)
    for item in demo_list():
        insert_list_item(item)

    deals = collect_demo_flyers(now.date())
    for deal in deals:
        insert_deal(deal)
    logger.info("seeded %d deals for shopper %s", len(deals), DEMO_SHOPPER_ID)

    items = fetch_list_items(DEMO_SHOPPER_ID)
    snapshot = fetch_deals(DEMO_ZIP_CODE, active_on=now.date())
    result = rank_stores(DEMO_SHOPPER_ID, items, snapshot, now, locality=DEMO_ZIP_CODE)
    for summary in result.rankings:
        logger.info(
            "%s: %d/%d items, total %.2f, savings %.2f%s",
            summary.store_name,
            summary.matched_item_count,
            summary.total_list_items,
            summary.total_cost,
            summary.total_savings,
            " (best value)" if summary.is_best_value else "",
        )
    return result


if __name__ == "__main__":
    configure_logging()
    outcome = run_seed()
    logger.info(outcome.message)
