from datetime import datetime, timezone

import pytest

from src.collectors.demo_flyers import collect_demo_flyers
from src.jobs.seed_demo import run_seed

NOW = datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc)


def test_demo_flyers_run_sunday_to_saturday() -> None:
    deals = {d.id: d for d in collect_demo_flyers(NOW.date())}
    assert deals["SR-001"].valid_from.isoformat() == "2026-10-11"
    assert deals["SR-001"].valid_to.isoformat() == "2026-10-17"
    assert deals["AC-001"].valid_to.isoformat() == "2026-10-10"


def test_seed_ranks_the_demo_list(sqlite_db) -> None:
    result = run_seed(NOW)

    assert result.list_item_count == 3
    assert [s.store_name for s in result.rankings] == ["Target", "ShopRite"]
    target, shoprite = result.rankings
    assert target.is_best_value is True
    assert target.total_cost == pytest.approx(5.19)
    assert target.matched_item_count == 2
    assert [m.list_item_name for m in target.missing_items] == ["Milk (Organic)"]
    assert shoprite.total_cost == pytest.approx(15.27)
    assert shoprite.total_savings == pytest.approx(3.50)
    assert shoprite.match_percentage == 100.0
    assert result.total_potential_savings == pytest.approx(10.08)


def test_seed_is_repeatable(sqlite_db) -> None:
    first = run_seed(NOW)
    second = run_seed(NOW)
    assert [s.total_cost for s in first.rankings] == [s.total_cost for s in second.rankings]
