# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/utils/versions.py

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

# vMAJOR.MINOR.PATCH with optional pre-release / build suffixes
_SEMVER_RE = re.compile(
    r"^v(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


def is_valid_semver(version: str) -> bool:
    return bool(_SEMVER_RE.match(version or ""))


def _key(version: str) -> Tuple[int, int, int, int, str]:
    m = _SEMVER_RE.match(version)
    if not m:
        raise ValueError(f"invalid semantic version: {version!r}")
    major, minor, patch, pre = m.group(1), m.group(2), m.group(3), m.group(4)
    # a release sorts after any of its pre-releases
    return int(major), int(minor), int(patch), 0 if pre else 1, pre or ""


def sort_versions(versions: Iterable[str]) -> List[str]:
    return sorted(versions, key=_key)


def latest_version(versions: Iterable[str]) -> Optional[str]:
    ordered = sort_versions(v for v in versions if is_valid_semver(v))
    return ordered[-1] if ordered else None
