"""Shared fixtures: sample master files and an isolated settings sandbox."""

from __future__ import annotations

from pathlib import Path

import pytest

from inventory_sync import settings
from inventory_sync.engine import ReconciliationEngine

MASTER_CSV = "sku,msku,status\nA1,M1,Active\nF-M2,M2,Active\nM3,M3,Active\n"
COMBO_CSV = "Combo ,Status,SKU1,SKU2\nC1,Combo,M1,M2\n"
INVENTORY_CSV = (
    "msku,Product Name,Opening Stock,Buffer Stock\n"
    "M1,Blue Mug,10,2\n"
    "M2,Red Mug,5,1\n"
    "M3,Green Mug,0,0\n"
)


@pytest.fixture(autouse=True)
def sandbox_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every filesystem and network setting at a per-test sandbox."""
    monkeypatch.setattr(settings, "DATA_DIR", tmp_path / "data")
    monkeypatch.setattr(settings, "OUTPUT_DIR", tmp_path / "output")
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", True)
    return tmp_path


@pytest.fixture
def engine() -> ReconciliationEngine:
    """Engine loaded with the small sample master data set."""
    loaded = ReconciliationEngine(isolate_file_errors=True)
    loaded.load_master_skus(MASTER_CSV)
    loaded.load_combos(COMBO_CSV)
    loaded.load_inventory(INVENTORY_CSV)
    return loaded


@pytest.fixture
def master_files() -> dict[str, str]:
    """The raw master, combo and inventory texts behind the `engine` fixture."""
    return {"master": MASTER_CSV, "combos": COMBO_CSV, "inventory": INVENTORY_CSV}
