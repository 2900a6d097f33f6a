from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from docengine.models.discount import PercentDiscount
from docengine.models.line_item import LineItem
from docengine.models.rounding import IndonesianRounding
from docengine.models.tax import ExclusiveTax, InclusiveTax

# --- Line item fixtures ---


@pytest.fixture
def invoice_line() -> LineItem:
    """3 x Rp 100.000, 10% off, PPN 11% on top."""
    return LineItem(
        id="line-1",
        quantity=Decimal("3"),
        unit_price=Decimal("100000"),
        discount=PercentDiscount(Decimal("10")),
        tax=ExclusiveTax(Decimal("11")),
        product_id="PANEL-450",
        description="Solar panel 450W",
    )


@pytest.fixture
def inclusive_line() -> LineItem:
    return LineItem(
        id="line-incl",
        quantity=Decimal("1"),
        unit_price=Decimal("111000"),
        tax=InclusiveTax(Decimal("11")),
    )


@pytest.fixture
def indonesian() -> IndonesianRounding:
    return IndonesianRounding()


@pytest.fixture
def line_item_dict() -> dict:
    return {
        "id": "line-2",
        "product_id": "INVERTER-5K",
        "description": "Hybrid inverter",
        "quantity": 2,
        "unit_price": "8750000",
        "unit": "unit",
        "discount": {"type": "amount", "value": 250000},
        "tax": {"type": "exclusive", "rate": 11},
    }


# --- Pricing fixtures ---


@pytest.fixture
def price_book_dict() -> dict:
    return {
        "priority": ["contract", "volume", "standard"],
        "catalog": {"PANEL-450": "2500000", "INVERTER-5K": "8750000"},
        "contracts": [
            {
                "customer_id": "CUST-001",
                "product_id": "PANEL-450",
                "price": "2300000",
                "valid_from": "2025-01-01",
                "valid_until": "2025-12-31",
            }
        ],
        "volume": {
            "PANEL-450": [
                {"threshold": 10, "rate": 5},
                {"threshold": 50, "rate": 10},
                {"threshold": 100, "rate": 15},
            ]
        },
    }


# --- Workflow fixtures ---


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 6, 15, 9, 30, tzinfo=UTC)


# --- Config dir fixture ---


@pytest.fixture
def config_dir(tmp_path, monkeypatch, price_book_dict):
    import yaml

    cfg = tmp_path / "config"
    cfg.mkdir()
    (cfg / "engine.yaml").write_text(
        yaml.dump(
            {
                "rounding": {"mode": "indonesian", "unit": 100},
                "per_line_rounding": False,
                "default_tax": {"type": "exclusive", "rate": 11},
                "max_line_items": 50,
                "sequences": {
                    "invoice": {"prefix": "INV", "policy": "monthly_reset"},
                    "quotation": {"prefix": "QUO", "counter": 12},
                },
            }
        )
    )
    (cfg / "pricing.yaml").write_text(yaml.dump(price_book_dict))
    monkeypatch.setenv("DOCENGINE_CONFIG_DIR", str(cfg))
    monkeypatch.delenv("DOCENGINE_ROUNDING", raising=False)
    return cfg
