from datetime import date, datetime
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, TypeAdapter

from src.domain import models

_DATE = TypeAdapter(date)
_DATETIME = TypeAdapter(datetime)


def parse_bound(value: Any) -> Union[date, datetime]:
    """A bare ``YYYY-MM-DD`` stays a calendar date; anything with a time part is a timestamp."""
    if isinstance(value, (date, datetime)):
        return value
    if isinstance(value, str) and len(value.strip()) == 10:
        return _DATE.validate_python(value.strip())
    return _DATETIME.validate_python(value)


Bound = Annotated[Union[date, datetime], BeforeValidator(parse_bound)]


class ListItemIn(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    shopper_id: Optional[str] = None
    item_name: Optional[str] = None
    item_variant: Optional[str] = None
    quantity: int = 1
    checked: bool = False
    category: Optional[str] = None

    def to_domain(self, shopper_id: str = "") -> models.ListItem:
        return models.ListItem(
            id=self.id,
            shopper_id=self.shopper_id or shopper_id,
            item_name=self.item_name or "",
            item_variant=self.item_variant,
            quantity=self.quantity,
            checked=self.checked,
            category=self.category,
        )


class DealIn(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    store_name: Optional[str] = None
    zip_code: Optional[str] = None
    product_name: Optional[str] = None
    product_brand: Optional[str] = None
    product_category: Optional[str] = None
    sale_price: float
    regular_price: Optional[float] = None
    unit: Optional[str] = None
    deal_type: Optional[str] = None
    quantity_text: Optional[str] = None
    valid_from: Bound
    valid_to: Bound
    confidence: Optional[float] = None

    def to_domain(self) -> models.Deal:
        return models.Deal(
            id=self.id,
            store_name=self.store_name or "",
            zip_code=self.zip_code or "",
            product_name=self.product_name or "",
            product_brand=self.product_brand,
            product_category=self.product_category,
            sale_price=self.sale_price,
            regular_price=self.regular_price,
            unit=self.unit or "each",
            deal_type=models.DealType.parse(self.deal_type),
            quantity_text=self.quantity_text,
            valid_from=self.valid_from,
            valid_to=self.valid_to,
            confidence=self.confidence,
        )


class RankingRequest(BaseModel):
    shopper_id: str = "anonymous"
    zip_code: Optional[str] = None
    at: Optional[datetime] = None
    items: List[ListItemIn]
    deals: List[DealIn]




class Deal(BaseModel):
    id: str
    store_name: str
    zip_code: str
    product_name: str
    product_brand: Optional[str]
    product_category: Optional[str]
    sale_price: float
    regular_price: Optional[float]
    savings: Optional[float]
    savings_percent: Optional[int]
    deal_type: str
    unit: str
    quantity_text: Optional[str]
    valid_from: str
    valid_to: str
    confidence: Optional[float]


class DealListResponse(BaseModel):
    items: List[Deal]
    total: int
    offset: int
    limit: int
    current_page: int
    total_pages: int


class ListItem(BaseModel):
    id: str
    item_name: str
    item_variant: Optional[str]
    display_name: str
    quantity: int
    checked: bool
    category: Optional[str]


class DealMatch(BaseModel):
    list_item: ListItem
    deal: Deal
    match_score: float
    match_reason: str


class DealMatchListResponse(BaseModel):
    items: List[DealMatch]


class ItemDealDetail(BaseModel):
    list_item_id: str
    list_item_name: str
    deal_id: str
    deal_product_name: str
    sale_price: float
    regular_price: Optional[float]
    savings: Optional[float]
    savings_percent: Optional[int]
    quantity: int
    line_total: float
    match_score: float
    match_reason: str
    is_best_price: bool


class MissingItem(BaseModel):
    list_item_id: str
    list_item_name: str
    quantity: int


class StoreSummary(BaseModel):
    store_name: str
    matched_item_count: int
    total_list_items: int
    match_percentage: float
    total_cost: float
    total_savings: float
    is_best_value: bool
    deals: List[ItemDealDetail]
    missing_items: List[MissingItem]


class StoreRankingResponse(BaseModel):
    shopper_id: str
    rankings: List[StoreSummary]
    best_store: Optional[str]
    total_potential_savings: float
    list_item_count: int
    message: str
    evaluated_at: str
