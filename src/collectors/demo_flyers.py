from __future__ import annotations

from datetime import date, timedelta

from src.domain.models import Deal, DealType, ListItem

DEMO_ZIP_CODE = "07030"
DEMO_SHOPPER_ID = "demo-shopper"


def _week_of(today: date) -> tuple[date, date]:
    # Flyers run Sunday through Saturday.
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def collect_demo_flyers(today: date) -> list[Deal]:
    start, end = _week_of(today)
    last_week = (start - timedelta(days=7), start - timedelta(days=1))
    return [
        Deal(
            id="SR-001",
            store_name="ShopRite",
            zip_code=DEMO_ZIP_CODE,
            product_name="Organic Whole Milk",
            product_brand="Horizon",
            product_category="Dairy",
            sale_price=4.99,
            regular_price=6.49,
            unit="gal",
            valid_from=start,
            valid_to=end,
            confidence=0.93,
        ),
        Deal(
            id="SR-002",
            store_name="ShopRite",
            zip_code=DEMO_ZIP_CODE,
            product_name="Large Grade A Eggs",
            product_brand="Bowl & Basket",
            product_category="Dairy",
            sale_price=2.79,
            regular_price=3.29,
            unit="dozen",
            valid_from=start,
            valid_to=end,
            confidence=0.88,
        ),
        Deal(
            id="SR-003",
            store_name="ShopRite",
            zip_code=DEMO_ZIP_CODE,
            product_name="Whole Wheat Bread",
            product_brand="Arnold",
            product_category="Bakery",
            sale_price=2.50,
            regular_price=None,
            deal_type=DealType.BOGO,
            quantity_text="Buy 1 Get 1 Free",
            valid_from=start,
            valid_to=end,
            confidence=0.81,
        ),
        Deal(
            id="TG-001",
            store_name="Target",
            zip_code=DEMO_ZIP_CODE,
            product_name="Whole Milk 2%",
            product_brand="Good & Gather",
            product_category="Dairy",
            sale_price=3.49,
            regular_price=3.99,
            unit="gal",
            valid_from=start,
            valid_to=end,
            confidence=0.9,
        ),
        Deal(
            id="TG-002",
            store_name="Target",
            zip_code=DEMO_ZIP_CODE,
            product_name="White Bread",
            product_brand="Good & Gather",
            product_category="Bakery",
            sale_price=2.00,
            regular_price=2.29,
            valid_from=start,
            valid_to=end,
            confidence=0.86,
        ),
        Deal(
            id="TG-003",
            store_name="Target",
            zip_code=DEMO_ZIP_CODE,
            product_name="Cage Free Brown Eggs",
            product_brand="Good & Gather",
            product_category="Dairy",
            sale_price=3.19,
            regular_price=3.79,
            deal_type=DealType.MULTI_BUY,
            quantity_text="2 for $6.38",
            valid_from=start,
            valid_to=end,
            confidence=0.77,
        ),
        Deal(
            id="AC-001",
            store_name="ACME",
            zip_code=DEMO_ZIP_CODE,
            product_name="Organic Whole Milk Half Gallon",
            product_brand="O Organics",
            product_category="Dairy",
            sale_price=3.99,
            regular_price=4.59,
            valid_from=last_week[0],
            valid_to=last_week[1],
            confidence=0.9,
        ),
        Deal(
            id="AC-002",
            store_name="ACME",
            zip_code="10001",
            product_name="Sourdough Bread",
            product_brand="Signature Select",
            product_category="Bakery",
            sale_price=3.49,
            deal_type=DealType.COUPON,
            valid_from=start,
            valid_to=end,
        ),
    ]


def demo_list(shopper_id: str = DEMO_SHOPPER_ID) -> list[ListItem]:
    return [
        ListItem(id="item-1", shopper_id=shopper_id, item_name="Milk", item_variant="Organic", quantity=2, category="Dairy"),
        ListItem(id="item-2", shopper_id=shopper_id, item_name="Bread", quantity=1, category="Bakery"),
        ListItem(id="item-3", shopper_id=shopper_id, item_name="Eggs", quantity=1, category="Dairy"),
        ListItem(id="item-4", shopper_id=shopper_id, item_name="Coffee", quantity=1, checked=True),
    ]
