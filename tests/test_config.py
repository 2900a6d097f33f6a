from __future__ import annotations

from decimal import Decimal

import pytest

import docengine.config as config_mod
from docengine.models.rounding import IndonesianRounding, NoRounding, RoundUp
from docengine.models.tax import ExclusiveTax
from docengine.services.exceptions import ConfigurationError


class TestGetConfigDir:
    def test_from_env_var(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DOCENGINE_CONFIG_DIR", str(tmp_path))
        assert config_mod.get_config_dir() == tmp_path

    def test_project_root_fallback(self, monkeypatch, tmp_path):
        monkeypatch.delenv("DOCENGINE_CONFIG_DIR", raising=False)
        fake_root = tmp_path / "src" / "docengine"
        fake_root.mkdir(parents=True)
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        monkeypatch.setattr(config_mod, "__file__", str(fake_root / "config.py"))
        assert config_mod.get_config_dir() == config_dir

    def test_platformdirs_fallback(self, monkeypatch, tmp_path):
        monkeypatch.delenv("DOCENGINE_CONFIG_DIR", raising=False)
        fake = tmp_path / "nowhere" / "src" / "docengine"
        fake.mkdir(parents=True)
        monkeypatch.setattr(config_mod, "__file__", str(fake / "config.py"))
        assert "docengine" in str(config_mod.get_config_dir())


class TestLoadYaml:
    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert config_mod.load_yaml(path) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("rounding: [unclosed")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            config_mod.load_yaml(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            config_mod.load_yaml(path)


class TestLoadSettings:
    def test_from_config_dir(self, config_dir):
        settings = config_mod.load_settings()
        assert settings.rounding == IndonesianRounding(Decimal("100"))
        assert settings.default_tax == ExclusiveTax(Decimal("11"))
        assert settings.max_line_items == 50
        assert settings.sequences["quotation"].counter == 12
        assert settings.sequences["invoice"].policy.value == "monthly_reset"
        assert settings.sequences["purchase_order"].prefix == "PO"

    def test_missing_files_use_defaults(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DOCENGINE_CONFIG_DIR", str(tmp_path))
        monkeypatch.delenv("DOCENGINE_ROUNDING", raising=False)
        settings = config_mod.load_settings()
        assert settings.rounding == NoRounding()
        assert settings.max_line_items == 100
        assert set(settings.sequences) == {"quotation", "invoice", "purchase_order"}

    def test_rounding_env_override(self, config_dir, monkeypatch):
        monkeypatch.setenv("DOCENGINE_ROUNDING", "round_up")
        settings = config_mod.load_settings()
        assert settings.rounding == RoundUp(Decimal("100"))

    def test_rounding_env_override_unknown(self, config_dir, monkeypatch):
        monkeypatch.setenv("DOCENGINE_ROUNDING", "banker")
        with pytest.raises(ConfigurationError):
            config_mod.load_settings()


class TestLoadPriceBook:
    def test_from_config_dir(self, config_dir):
        pricing = config_mod.load_price_book()
        assert pricing.catalog_price("PANEL-450") == Decimal("2500000")
        assert pricing.price("PANEL-450", 50).unit_price == Decimal("2250000")

    def test_missing_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DOCENGINE_CONFIG_DIR", str(tmp_path))
        assert config_mod.load_price_book().catalog_price("PANEL-450") is None
