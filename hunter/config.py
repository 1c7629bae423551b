"""Hunter System settings: ``config/settings.yaml`` plus API keys from ``.env``.

The returned dict always carries ``storage`` and ``oracle`` sections, with
``oracle.provider`` lower-cased. Keys are kept out of the YAML and exposed
under ``_secrets``.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

PROVIDERS = ("claude", "gemini", "none")

_DEFAULTS = {
    "storage": {"data_dir": "data", "log_file": None},
    "oracle": {"provider": "claude", "timeout_seconds": 10},
}


def load_config(
    config_dir: str | Path | None = None,
) -> dict:
    """Load settings.yaml and .env, return merged config dict."""
    if config_dir is None:
        config_dir = Path(__file__).resolve().parent.parent / "config"
    config_dir = Path(config_dir)

    # Missing .env is fine; keys may come from the environment.
    load_dotenv(config_dir / ".env")

    settings_path = config_dir / "settings.yaml"
    if not settings_path.exists():
        raise FileNotFoundError(f"Config not found: {settings_path}")

    with open(settings_path, encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"{settings_path} must hold a mapping")

    for section, defaults in _DEFAULTS.items():
        values = cfg.get(section) or {}
        if not isinstance(values, dict):
            raise ValueError(f"'{section}' in {settings_path} must be a mapping")
        cfg[section] = {**defaults, **values}

    provider = str(cfg["oracle"]["provider"] or "none").strip().lower()
    if provider not in PROVIDERS:
        raise ValueError(f"oracle.provider must be one of {', '.join(PROVIDERS)}, got {provider!r}")
    cfg["oracle"]["provider"] = provider

    cfg["_secrets"] = {
        "anthropic_api_key": os.getenv("ANTHROPIC_API_KEY", ""),
        "gemini_api_key": os.getenv("GEMINI_API_KEY", ""),
    }

    return cfg
