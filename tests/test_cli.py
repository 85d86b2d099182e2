import importlib.util
import json
from pathlib import Path

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "rank_from_json.py"

_spec = importlib.util.spec_from_file_location("rank_from_json", SCRIPT)
rank_from_json = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(rank_from_json)

DEALS = [
    {"id": "a", "store_name": "A", "product_name": "White Bread", "sale_price": 2.5,
     "valid_from": "2026-10-11", "valid_to": "2026-10-17"},
    {"id": "bad", "store_name": "B", "product_name": "Rye Bread",
     "valid_from": "2026-10-11", "valid_to": "2026-10-17"},
]


def _write(tmp_path, items, deals) -> str:
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps({"items": items, "deals": deals}), encoding="utf-8")
    return str(path)


def test_malformed_deal_is_skipped_by_default(tmp_path, capsys) -> None:
    path = _write(tmp_path, [{"id": "i1", "item_name": "Bread"}], DEALS)
    assert rank_from_json.main([path, "--at", "2026-10-14T12:00:00Z"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["best_store"] == "A"
    assert [r["store_name"] for r in out["rankings"]] == ["A"]


def test_malformed_deal_fails_in_strict_mode(tmp_path, capsys) -> None:
    path = _write(tmp_path, [{"id": "i1", "item_name": "Bread"}], DEALS)
    assert rank_from_json.main([path, "--at", "2026-10-14T12:00:00Z", "--strict"]) == 2
    assert "invalid deal 'bad'" in capsys.readouterr().err


def test_malformed_list_item_is_skipped_by_default(tmp_path, capsys) -> None:
    items = [{"id": "i1", "item_name": "Bread"}, {"id": "i2", "item_name": "Milk", "quantity": 2.7}]
    path = _write(tmp_path, items, DEALS[:1])
    assert rank_from_json.main([path, "--at", "2026-10-14T12:00:00"]) == 0
    assert json.loads(capsys.readouterr().out)["list_item_count"] == 1


def test_bad_evaluation_time_is_reported(tmp_path, capsys) -> None:
    path = _write(tmp_path, [], [])
    assert rank_from_json.main([path, "--at", "next tuesday"]) == 2
    assert "bad --at value" in capsys.readouterr().err
