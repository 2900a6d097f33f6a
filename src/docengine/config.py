from __future__ import annotations

import logging
import os
from pathlib import Path

import platformdirs
import yaml
from dotenv import load_dotenv

from docengine.models.settings import EngineSettings
from docengine.services.exceptions import ConfigurationError
from docengine.services.pricing import PricingService

logger = logging.getLogger(__name__)

APP_NAME = "docengine"

SETTINGS_FILE = "engine.yaml"
PRICING_FILE = "pricing.yaml"


def _resolve_config_dir_for_dotenv() -> Path | None:
    """Resolve config dir for .env loading without depending on env vars from .env itself.

    Only checks sources available before .env is loaded (env var set in the
    shell, dev layout, an existing platformdirs directory).
    """
    from_env = os.environ.get("DOCENGINE_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / "config"
    if candidate.is_dir():
        return candidate
    pd = Path(platformdirs.user_config_dir(APP_NAME))
    if pd.is_dir():
        return pd
    return None


# Load .env: cwd first (highest priority), then config dir (won't override)
load_dotenv()
_cfg_dir = _resolve_config_dir_for_dotenv()
if _cfg_dir is not None:
    load_dotenv(_cfg_dir / ".env")


def get_config_dir() -> Path:
    """Resolve the config directory. Re-evaluated on each call to pick up env changes.

    Priority: 1) DOCENGINE_CONFIG_DIR, 2) dev repo layout, 3) platformdirs user directory.
    """
    from_env = os.environ.get("DOCENGINE_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    # Development layout: src/docengine/config.py -> ../../.. = project root
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / "config"
    if candidate.is_dir():
        return candidate
    return Path(platformdirs.user_config_dir(APP_NAME))


def load_yaml(path: Path) -> dict:
    """Load and parse a YAML file, returning the top-level dict."""
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from None
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a mapping at the top level")
    return data


def _load_optional(name: str) -> dict:
    path = get_config_dir() / name
    if not path.exists():
        logger.debug("No %s in %s, using defaults", name, path.parent)
        return {}
    return load_yaml(path)


def load_settings() -> EngineSettings:
    """Load engine settings from engine.yaml.

    A missing file yields the defaults. DOCENGINE_ROUNDING (e.g. ``indonesian``)
    overrides the configured rounding mode, keeping its other parameters.
    """
    data = _load_optional(SETTINGS_FILE)
    override = os.environ.get("DOCENGINE_ROUNDING")
    if override:
        rounding = dict(data.get("rounding") or {})
        rounding["mode"] = override
        data = {**data, "rounding": rounding}
    return EngineSettings.from_dict(data)


def load_price_book() -> PricingService:
    """Load catalog prices, contracts and volume tiers from pricing.yaml."""
    return PricingService.from_dict(_load_optional(PRICING_FILE))
