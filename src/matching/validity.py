from __future__ import annotations

import os
from datetime import date, datetime, timezone
from typing import Iterable

from src.domain.models import Deal


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


VALID_TO_INCLUSIVE = _env_flag("DEAL_VALID_TO_INCLUSIVE", True)


def as_naive_utc(value: datetime) -> datetime:
    """Drop tzinfo after converting to UTC; naive values are taken as UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _align(bound: date | datetime, now: datetime) -> tuple[date | datetime, date | datetime]:
    # Date-only flyer bounds cover the whole calendar day.
    if not isinstance(bound, datetime):
        return bound, now.date()
    if (bound.tzinfo is None) != (now.tzinfo is None):
        return as_naive_utc(bound), as_naive_utc(now)
    return bound, now


def is_current(deal: Deal, now: datetime, *, inclusive_end: bool | None = None) -> bool:
    """Return True when ``now`` falls inside the deal's validity window.

    The start bound is always inclusive. The end bound is inclusive unless
    ``inclusive_end`` (or ``DEAL_VALID_TO_INCLUSIVE``) says otherwise.
    """
    if inclusive_end is None:
        inclusive_end = VALID_TO_INCLUSIVE

    start, at = _align(deal.valid_from, now)
    if at < start:
        return False

    end, at = _align(deal.valid_to, now)
    if inclusive_end:
        return at <= end
    return at < end


def filter_current(
    deals: Iterable[Deal],
    now: datetime,
    *,
    inclusive_end: bool | None = None,
) -> list[Deal]:
    return [deal for deal in deals if is_current(deal, now, inclusive_end=inclusive_end)]
