from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

from src.db.connection import get_conn, is_postgres
from src.domain.models import Deal, ListItem
from src.domain.parsing import deal_from_dict, list_item_from_dict
from src.normalization.product import contains_term, normalize_locality, normalize_text


def _iso(value: date | datetime) -> str:
    return value.isoformat()


def row_to_list_item(row: dict[str, Any]) -> ListItem:
    return list_item_from_dict(row)


def row_to_deal(row: dict[str, Any]) -> Deal:
    return deal_from_dict(row)


def upsert_shopper(shopper_id: str, zip_code: str) -> None:
    with get_conn() as conn:
        conn.execute(
            """
            INSERT INTO shoppers (id, zip_code) VALUES (?, ?)
            ON CONFLICT(id) DO UPDATE SET zip_code = excluded.zip_code
            """,
            (shopper_id, normalize_locality(zip_code)),
        )


def fetch_shopper(shopper_id: str) -> dict[str, Any] | None:
    with get_conn() as conn:
        row = conn.execute("SELECT id, zip_code FROM shoppers WHERE id = ?", (shopper_id,)).fetchone()
    if row is None:
        return None
    return dict(row)


def insert_list_item(item: ListItem) -> None:
    with get_conn() as conn:
        conn.execute(
            """
            INSERT INTO list_items (id, shopper_id, item_name, item_variant, category, quantity, checked)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
              item_name = excluded.item_name,
              item_variant = excluded.item_variant,
              category = excluded.category,
              quantity = excluded.quantity,
              checked = excluded.checked
            """,
            (
                item.id,
                item.shopper_id,
                item.item_name,
                item.item_variant,
                item.category,
                item.quantity,
                bool(item.checked) if is_postgres() else int(item.checked),
            ),
        )


def fetch_list_items(shopper_id: str, *, include_checked: bool = False) -> list[ListItem]:
    sql = """
        SELECT id, shopper_id, item_name, item_variant, category, quantity, checked
        FROM list_items
        WHERE shopper_id = ?
    """
    params: list[Any] = [shopper_id]
    if not include_checked:
        sql += " AND checked = ?"
        params.append(False if is_postgres() else 0)
    sql += " ORDER BY created_at ASC, id ASC"
    with get_conn() as conn:
        rows = conn.execute(sql, tuple(params)).fetchall()
    return [row_to_list_item(dict(row)) for row in rows]


def insert_deal(deal: Deal) -> None:
    with get_conn() as conn:
        conn.execute(
            """
            INSERT INTO deals (
              id, store_name, zip_code, product_name, product_brand, product_category,
              sale_price, regular_price, unit, deal_type, quantity_text,
              valid_from, valid_to, confidence
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO NOTHING
            """,
            (
                deal.id,
                deal.store_name,
                normalize_locality(deal.zip_code),
                deal.product_name,
                deal.product_brand,
                deal.product_category,
                deal.sale_price,
                deal.regular_price,
                deal.unit,
                deal.deal_type.value,
                deal.quantity_text,
                _iso(deal.valid_from),
                _iso(deal.valid_to),
                deal.confidence,
            ),
        )


def fetch_deals(
    zip_code: str | None = None,
    *,
    active_on: date | None = None,
    category: str | None = None,
    store_name: str | None = None,
) -> list[Deal]:
    """Return a deal snapshot, optionally scoped to a locality and a store.

    ``active_on`` is a coarse prefilter on the stored ``valid_to`` text. Bounds
    keep their flyer's UTC offset, so the cutoff is one day early and the exact
    validity check happens in the ranking engine.
    """
    conditions: list[str] = []
    params: list[Any] = []
    if zip_code is not None:
        conditions.append("zip_code = ?")
        params.append(normalize_locality(zip_code))
    if store_name:
        conditions.append("LOWER(store_name) = LOWER(?)")
        params.append(store_name.strip())
    if active_on is not None:
        conditions.append("valid_to >= ?")
        params.append((active_on - timedelta(days=1)).isoformat())
    if category:
        conditions.append("LOWER(product_category) = LOWER(?)")
        params.append(category)

    where_clause = " AND ".join(conditions) or "1 = 1"
    with get_conn() as conn:
        rows = conn.execute(
            f"""
            SELECT
              id, store_name, zip_code, product_name, product_brand, product_category,
              sale_price, regular_price, unit, deal_type, quantity_text,
              valid_from, valid_to, confidence
            FROM deals
            WHERE {where_clause}
            ORDER BY sale_price ASC, id ASC
            """,
            tuple(params),
        ).fetchall()
    return [row_to_deal(dict(row)) for row in rows]


def search_deals(zip_code: str, query: str, *, active_on: date | None = None) -> list[Deal]:
    if not normalize_text(query):
        return []
    deals = fetch_deals(zip_code, active_on=active_on)
    return [
        deal
        for deal in deals
        if contains_term(deal.product_name, query) or contains_term(deal.product_brand, query)
    ]
