"""Tests for the file pipelines, the output writers and the command line entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest
import requests

import main
from inventory_sync import data_handler, settings
from inventory_sync.engine import ReconciliationEngine
from inventory_sync.pipelines.master_data import MasterDataPipeline
from inventory_sync.pipelines.orders import OrderSyncPipeline

ORDERS_CSV = "ASIN,SKU,Quantity,Order Status\nB0X,C1,2,Delivered\nB0Y,A1,1,Cancelled\n"


class FakeResponse:
    def __init__(self, status_code: int = 200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


@pytest.fixture
def data_dir(master_files: dict[str, str]) -> Path:
    """Writes the sample master files where the master pipeline looks for them."""
    settings.DATA_DIR.mkdir(parents=True)
    (settings.DATA_DIR / settings.MASTER_SKU_FILENAME).write_text(master_files["master"])
    (settings.DATA_DIR / settings.COMBO_FILENAME).write_text(master_files["combos"])
    (settings.DATA_DIR / settings.INVENTORY_FILENAME).write_text(master_files["inventory"])
    return settings.DATA_DIR


@pytest.fixture
def orders_file(tmp_path: Path) -> Path:
    path = tmp_path / "amazon-orders.csv"
    path.write_text(ORDERS_CSV)
    return path


def test_master_pipeline_loads_files_from_data_dir(data_dir: Path) -> None:
    engine = ReconciliationEngine()
    loaded = MasterDataPipeline(engine).run()

    assert loaded == {"master": 2, "combos": 1, "inventory": 3}
    health = engine.health()
    assert (health.mappings_loaded, health.combos_loaded, health.inventory_items) == (2, 1, 3)


def test_master_pipeline_creates_missing_data_dir() -> None:
    engine = ReconciliationEngine()
    assert not settings.DATA_DIR.exists()

    assert MasterDataPipeline(engine).run() is None
    assert settings.DATA_DIR.is_dir()
    assert engine.health().mappings_loaded == 0


def test_master_pipeline_explicit_paths_override_data_dir(tmp_path: Path, master_files: dict[str, str]) -> None:
    master = tmp_path / "my-master.csv"
    master.write_text(master_files["master"])

    engine = ReconciliationEngine()
    loaded = MasterDataPipeline(engine, master_path=master).run()

    assert loaded == {"master": 2}
    assert engine.health().combos_loaded == 0


def test_order_pipeline_writes_csv_and_json(engine: ReconciliationEngine, orders_file: Path) -> None:
    pipeline = OrderSyncPipeline(engine, [orders_file, orders_file.with_name("missing.csv")], test_mode=True)
    result = pipeline.run()

    assert result.summary.total_orders_processed == 2
    assert set(pipeline.written) == {"csv", "json"}

    df = pd.read_csv(pipeline.written["csv"])
    assert list(df["msku"]) == ["M1", "M2"]
    assert list(df["newStock"]) == [8, 3]
    assert "notFoundInLedger" in df.columns

    report = json.loads(pipeline.written["json"].read_text(encoding="utf-8"))
    assert report["summary"]["totalQuantitySold"] == 4
    assert report["success"] is True


def test_order_pipeline_skips_json_when_disabled(
    engine: ReconciliationEngine, orders_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", False)
    pipeline = OrderSyncPipeline(engine, [orders_file], test_mode=True)
    pipeline.run()
    assert list(pipeline.written) == ["csv"]


def test_order_pipeline_without_files_does_nothing(engine: ReconciliationEngine, tmp_path: Path) -> None:
    pipeline = OrderSyncPipeline(engine, [tmp_path / "nope.csv"])
    assert pipeline.run() is None
    assert pipeline.written == {}


def test_order_pipeline_posts_to_webhook_outside_test_mode(
    engine: ReconciliationEngine, orders_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json))
        return FakeResponse()

    monkeypatch.setattr(settings, "WEBHOOK_URL", "https://hooks.example.test/sync")
    monkeypatch.setattr(data_handler.requests, "post", fake_post)

    OrderSyncPipeline(engine, [orders_file]).run()

    (url, payload) = calls[0]
    assert url == "https://hooks.example.test/sync"
    assert set(payload) == {"summary", "inventoryUpdates", "unmappedSkus", "fileErrors"}
    assert payload["summary"]["uniqueMskusAffected"] == 2


def test_webhook_failure_is_logged_not_raised(
    engine: ReconciliationEngine, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings, "WEBHOOK_URL", "https://hooks.example.test/sync")
    monkeypatch.setattr(data_handler.requests, "post", lambda *args, **kwargs: FakeResponse(500))

    result = engine.process_orders([("orders.csv", ORDERS_CSV)])
    assert data_handler.post_to_webhook(result) is False


def test_webhook_is_skipped_without_url(engine: ReconciliationEngine) -> None:
    result = engine.process_orders([("orders.csv", ORDERS_CSV)])
    assert data_handler.post_to_webhook(result) is False


def test_cli_processes_orders_and_prints_view(
    data_dir: Path, orders_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main.run_process([str(orders_file), "--test-mode", "--show", "changes"])

    assert exit_code == 0
    view = json.loads(capsys.readouterr().out)
    assert view["totalChanges"] == 2
    assert {c["msku"] for c in view["changes"]} == {"M1", "M2"}
    assert any(settings.OUTPUT_DIR.glob("inventory_updates_*.csv"))


def test_cli_reports_missing_master_data(orders_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main.run_process([str(orders_file), "--test-mode"])

    assert exit_code == 1
    assert json.loads(capsys.readouterr().out)["error"] == "missing_master_data"
