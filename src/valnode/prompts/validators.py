# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/prompts/validators.py

from __future__ import annotations

import re
from pathlib import Path

from valnode.utils.versions import is_valid_semver

UINT64_MAX = 2**64 - 1

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def validate_uint64(raw: str, *, allow_zero: bool = True) -> int:
    try:
        value = int(raw.strip(), 10)
    except ValueError:
        raise ValueError(f"{raw!r} is not an unsigned integer")
    if value < 0 or value > UINT64_MAX:
        raise ValueError(f"{value} is out of the uint64 range")
    if value == 0 and not allow_zero:
        raise ValueError("value must be greater than zero")
    return value


def validate_positive_int(raw: str) -> int:
    try:
        value = int(raw.strip(), 10)
    except ValueError:
        raise ValueError(f"{raw!r} is not an integer")
    if value <= 0:
        raise ValueError("value must be greater than zero")
    return value


def validate_address(raw: str) -> str:
    raw = raw.strip()
    if not _ADDRESS_RE.match(raw):
        raise ValueError(f"{raw!r} is not a valid 0x address")
    return raw


def validate_existing_path(raw: str) -> Path:
    p = Path(raw.strip()).expanduser()
    if not p.exists():
        raise ValueError(f"{p} does not exist")
    return p


def validate_version(raw: str) -> str:
    raw = raw.strip()
    if not is_valid_semver(raw):
        raise ValueError(f"{raw!r} is not a valid semantic version (expected e.g. v1.2.3)")
    return raw


def validate_non_empty(raw: str) -> str:
    if not raw.strip():
        raise ValueError("value can't be empty")
    return raw.strip()
