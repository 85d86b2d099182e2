from datetime import date, datetime, timezone

from src.domain.models import Deal, ListItem
from src.matching.matcher import match_all, match_deal, sort_matches

NOW = datetime(2026, 10, 14, 12, 0, tzinfo=timezone.utc)


def _item(name, variant=None, id_="i1", quantity=1) -> ListItem:
    return ListItem(id=id_, shopper_id="s1", item_name=name, item_variant=variant, quantity=quantity)


def _deal(product, id_="d1", store="ShopRite", price=3.49, valid_to=date(2026, 10, 17)) -> Deal:
    return Deal(
        id=id_,
        store_name=store,
        product_name=product,
        sale_price=price,
        valid_from=date(2026, 10, 11),
        valid_to=valid_to,
    )


def test_name_only_match_scores_half() -> None:
    result = match_deal(_item("Milk"), _deal("Organic Whole Milk"), NOW)
    assert result is not None
    assert result.match_score == 0.5
    assert result.match_reason == "matches milk"


def test_name_and_variant_match_scores_full() -> None:
    result = match_deal(_item("Milk", "Organic"), _deal("Organic Whole Milk"), NOW)
    assert result is not None
    assert result.match_score == 1.0
    assert result.match_reason == "matches milk + organic"


def test_variant_must_appear_in_product_text() -> None:
    assert match_deal(_item("Milk", "Organic"), _deal("Whole Milk 2%"), NOW) is None


def test_match_direction_is_fixed() -> None:
    assert match_deal(_item("Organic Whole Milk"), _deal("Milk"), NOW) is None


def test_blank_variant_counts_as_no_variant() -> None:
    result = match_deal(_item("Bread", "   "), _deal("White Bread"), NOW)
    assert result is not None
    assert result.match_score == 0.5


def test_whitespace_and_case_are_normalized_before_matching() -> None:
    result = match_deal(_item("  whole   MILK "), _deal("Organic Whole  Milk"), NOW)
    assert result is not None


def test_empty_names_never_match() -> None:
    assert match_deal(_item(""), _deal("Whole Milk"), NOW) is None
    assert match_deal(_item("   "), _deal("Whole Milk"), NOW) is None
    assert match_deal(_item("Milk"), _deal(""), NOW) is None


def test_expired_deal_is_rejected_even_when_text_matches() -> None:
    assert match_deal(_item("Milk"), _deal("Whole Milk", valid_to=date(2026, 10, 13)), NOW) is None


def test_match_all_collects_every_pair() -> None:
    items = [_item("Milk", id_="i1"), _item("Bread", id_="i2")]
    deals = [
        _deal("Whole Milk", id_="d1"),
        _deal("White Bread", id_="d2", store="Target"),
        _deal("Chocolate Milk", id_="d3", store="Target"),
    ]
    matches = match_all(items, deals, NOW)
    assert [(m.list_item.id, m.deal.id) for m in matches] == [("i1", "d1"), ("i1", "d3"), ("i2", "d2")]


def test_match_all_accepts_a_custom_matcher() -> None:
    calls = []

    def never(item, deal, now):
        calls.append((item.id, deal.id))
        return None

    assert match_all([_item("Milk")], [_deal("Whole Milk")], NOW, matcher=never) == []
    assert calls == [("i1", "d1")]


def test_sort_matches_puts_best_score_first() -> None:
    items = [_item("Milk", id_="plain"), _item("Milk", "Organic", id_="organic")]
    deals = [_deal("Organic Whole Milk", id_="d1", store="Target"), _deal("Organic Milk", id_="d2", price=4.0)]
    ordered = sort_matches(match_all(items, deals, NOW))
    assert [m.match_score for m in ordered] == [1.0, 1.0, 0.5, 0.5]
    assert [m.deal.store_name for m in ordered[:2]] == ["ShopRite", "Target"]
