from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pydantic import TypeAdapter, ValidationError

from src.domain.parsing import deal_from_dict, list_item_from_dict
from src.logging_config import configure_logging
from src.ranking.engine import rank_stores
from src.ranking.errors import InvalidInputError

logger = logging.getLogger("rank_from_json")


def _load(raw_records, kind: str, build, strict: bool) -> list:
    records = []
    for raw in raw_records:
        record_id = raw.get("id") if isinstance(raw, dict) else None
        try:
            records.append(build(raw))
        except (TypeError, ValueError) as exc:
            if strict:
                raise InvalidInputError(kind, record_id, str(exc)) from exc
            logger.warning("skipping %s %s: %s", kind, record_id, exc)
    return records


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Rank stores for a shopping list from a JSON snapshot.")
    parser.add_argument("path", help='JSON file with "items" and "deals" arrays')
    parser.add_argument("--shopper", default="cli")
    parser.add_argument("--zip", dest="zip_code", default=None)
    parser.add_argument(
        "--at", default=None, help="ISO timestamp to evaluate at, UTC unless it has an offset (default: now)"
    )
    parser.add_argument("--strict", action="store_true", help="fail on malformed records instead of skipping")
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    try:
        now = TypeAdapter(datetime).validate_python(args.at) if args.at else datetime.now(timezone.utc)
    except ValidationError as exc:
        print(f"error: bad --at value {args.at!r}: {exc}", file=sys.stderr)
        return 2

    payload = json.loads(Path(args.path).read_text(encoding="utf-8"))
    try:
        items = _load(
            payload.get("items", []),
            "list item",
            lambda raw: list_item_from_dict(raw, shopper_id=args.shopper),
            args.strict,
        )
        deals = _load(payload.get("deals", []), "deal", deal_from_dict, args.strict)
        result = rank_stores(args.shopper, items, deals, now, locality=args.zip_code, strict=args.strict)
    except InvalidInputError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    out = {
        "shopper_id": result.shopper_id,
        "rankings": [asdict(s) for s in result.rankings],
        "best_store": result.best_store,
        "total_potential_savings": result.total_potential_savings,
        "list_item_count": result.list_item_count,
        "message": result.message,
    }
    print(json.dumps(out, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
