from __future__ import annotations

from typing import Any, Mapping

from src.api.schemas import DealIn, ListItemIn, parse_bound
from src.domain.models import Deal, ListItem

__all__ = ["deal_from_dict", "list_item_from_dict", "parse_bound"]


def list_item_from_dict(data: Mapping[str, Any], *, shopper_id: str = "") -> ListItem:
    """Build a list item from a row or JSON object; raises ``pydantic.ValidationError`` (a ``ValueError``)."""
    return ListItemIn.model_validate(dict(data)).to_domain(shopper_id)


def deal_from_dict(data: Mapping[str, Any]) -> Deal:
    return DealIn.model_validate(dict(data)).to_domain()
