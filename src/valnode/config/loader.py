# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/config/loader.py

import logging
import os
import yaml
from pathlib import Path
from .models import AppSettings

log = logging.getLogger("valnode")

DEFAULT_CONFIG_PATH = Path.home() / ".valnode" / "config.yaml"


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Only overwrites when the override value is non-empty.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            if value not in (None, ""):
                base[key] = value
    return base


def _find_secrets_file(config_path: Path) -> Path | None:
    """
    Locate secrets.yaml:

    1. VALNODE_SECRETS_FILE environment variable (explicit override)
    2. secrets.yaml in the same directory as the settings file
    """
    env = os.environ.get("VALNODE_SECRETS_FILE")
    if env:
        p = Path(env)
        if p.is_file():
            return p
        log.warning("VALNODE_SECRETS_FILE=%s does not exist, skipping", env)
        return None

    p = config_path.parent / "secrets.yaml"
    if p.is_file():
        return p

    return None


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    return yaml.safe_load(expanded) or {}


def load_settings(path: str | Path | None = None) -> AppSettings:
    """
    Load the operator settings.

    Lookup order for the file: explicit `path`, `VALNODE_CONFIG`, then
    ~/.valnode/config.yaml. A missing file yields the defaults. A
    secrets.yaml found next to it is deep-merged before validation.
    """
    if path is None:
        path = os.environ.get("VALNODE_CONFIG") or DEFAULT_CONFIG_PATH
    path = Path(path).expanduser()

    data: dict = {}
    if path.is_file():
        data = _load_yaml(path)
        log.debug("loaded settings from %s", path)

        secrets_path = _find_secrets_file(path)
        if secrets_path:
            log.debug("merging secrets from %s", secrets_path)
            _deep_merge(data, _load_yaml(secrets_path))
    else:
        log.debug("no settings file at %s, using defaults", path)

    return AppSettings.model_validate(data)
