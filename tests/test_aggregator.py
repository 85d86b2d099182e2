from datetime import date

import pytest

from src.domain.models import Deal, ListItem, MatchResult
from src.ranking.aggregator import aggregate, pick_representative


def _item(name, id_, quantity=1, variant=None) -> ListItem:
    return ListItem(id=id_, shopper_id="s1", item_name=name, item_variant=variant, quantity=quantity)


def _deal(product, id_, store="ShopRite", price=2.0, regular=None) -> Deal:
    return Deal(
        id=id_,
        store_name=store,
        product_name=product,
        sale_price=price,
        regular_price=regular,
        valid_from=date(2026, 10, 11),
        valid_to=date(2026, 10, 17),
    )


def _match(item, deal, score=0.5) -> MatchResult:
    return MatchResult(list_item=item, deal=deal, match_score=score, match_reason="test")


def test_representative_prefers_score_then_price_then_name() -> None:
    item = _item("Milk", "i1")
    high = _match(item, _deal("Whole Milk", "d1", price=5.0), score=1.0)
    cheap = _match(item, _deal("Skim Milk", "d2", price=2.0), score=0.5)
    assert pick_representative([cheap, high]).deal.id == "d1"

    a = _match(item, _deal("B Milk", "d3", price=2.0))
    b = _match(item, _deal("A Milk", "d4", price=2.0))
    c = _match(item, _deal("0 Milk", "d5", price=2.5))
    assert pick_representative([a, b, c]).deal.id == "d4"


def test_totals_use_representative_price_times_quantity() -> None:
    milk = _item("Milk", "i1", quantity=2)
    bread = _item("Bread", "i2")
    matches = [
        _match(milk, _deal("Whole Milk", "d1", price=3.49, regular=3.99)),
        _match(milk, _deal("Chocolate Milk", "d2", price=2.99)),
        _match(bread, _deal("White Bread", "d3", price=2.00, regular=2.50)),
    ]
    summary = aggregate([milk, bread], matches)["ShopRite"]
    assert summary.matched_item_count == 2
    assert summary.total_list_items == 2
    assert summary.match_percentage == 100.0
    assert summary.total_cost == pytest.approx(2.99 * 2 + 2.00)
    # Chocolate milk has no regular price, so only bread contributes savings.
    assert summary.total_savings == pytest.approx(0.50)
    assert [d.deal_id for d in summary.deals] == ["d2", "d3"]
    assert summary.deals[0].line_total == pytest.approx(5.98)


def test_regular_price_below_sale_price_means_no_savings() -> None:
    item = _item("Eggs", "i1", quantity=3)
    summary = aggregate([item], [_match(item, _deal("Large Eggs", "d1", price=3.0, regular=2.5))])["ShopRite"]
    assert summary.total_savings == 0.0
    assert summary.deals[0].savings is None


def test_missing_items_are_listed_per_store() -> None:
    milk = _item("Milk", "i1")
    eggs = _item("Eggs", "i2", quantity=12, variant="Brown")
    summary = aggregate([milk, eggs], [_match(milk, _deal("Whole Milk", "d1"))])["ShopRite"]
    assert summary.matched_item_count == 1
    assert summary.match_percentage == 50.0
    assert [(m.list_item_name, m.quantity) for m in summary.missing_items] == [("Eggs (Brown)", 12)]


def test_stores_without_matches_are_not_returned() -> None:
    item = _item("Milk", "i1")
    summaries = aggregate([item], [_match(item, _deal("Whole Milk", "d1", store="Target"))])
    assert list(summaries) == ["Target"]


def test_best_price_flag_compares_across_stores() -> None:
    bread = _item("Bread", "i1")
    matches = [
        _match(bread, _deal("Wheat Bread", "d1", store="A", price=2.50)),
        _match(bread, _deal("White Bread", "d2", store="B", price=2.00)),
    ]
    summaries = aggregate([bread], matches)
    assert summaries["A"].deals[0].is_best_price is False
    assert summaries["B"].deals[0].is_best_price is True


def test_coverage_never_exceeds_list_size() -> None:
    item = _item("Milk", "i1")
    matches = [_match(item, _deal(f"Milk {n}", f"d{n}")) for n in range(5)]
    summary = aggregate([item], matches)["ShopRite"]
    assert summary.matched_item_count == 1
    assert 0 <= summary.match_percentage <= 100


def test_matches_for_unknown_items_are_ignored() -> None:
    listed = _item("Milk", "i1")
    stray = _item("Milk", "other")
    summaries = aggregate([listed], [_match(stray, _deal("Whole Milk", "d1"))])
    assert summaries == {}
