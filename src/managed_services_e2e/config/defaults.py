"""Default config loading and merging utilities."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

from managed_services_e2e.config.models import E2EConfig

DEFAULTS_DIR = Path(__file__).parent / "defaults"


def load_defaults(name: str = "e2e") -> dict[str, Any]:
    """Load a YAML defaults file by name from the defaults directory."""
    path = DEFAULTS_DIR / f"{name}.yaml"
    if not path.exists():
        msg = f"Defaults file '{name}' not found at {path}"
        raise FileNotFoundError(msg)
    with path.open() as f:
        return yaml.safe_load(f) or {}


def merge_configs(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively deep-merge *overrides* into *base* (non-mutating)."""
    merged: dict[str, Any] = {**base}
    for key, value in overrides.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value
    return merged


def build_e2e_config(
    overrides: dict[str, Any],
    *,
    defaults: str = "e2e",
    resolve: Callable[[Any], Any] | None = None,
) -> E2EConfig:
    """Build a validated E2EConfig by merging defaults with overrides.

    *resolve* is applied to the merged mapping before validation.
    """
    base = load_defaults(defaults)
    merged = merge_configs(base, overrides)
    if resolve is not None:
        merged = resolve(merged)
    return E2EConfig.model_validate(merged)
