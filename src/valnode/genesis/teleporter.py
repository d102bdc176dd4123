# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/genesis/teleporter.py

from __future__ import annotations

import logging

from valnode.genesis.evmkeys import EvmKey
from valnode.genesis.models import TeleporterInfo
from valnode.store.app_store import AppStore
from valnode.subnet.releases import ReleaseClient

log = logging.getLogger("valnode")

TELEPORTER_KEY_NAME = "cli-teleporter-deployer"


def load_or_create_key(store: AppStore, name: str) -> EvmKey:
    path = store.key_path(name)
    if path.is_file():
        return EvmKey.from_hex(path.read_text())
    key = EvmKey.generate()
    store.write_key(name, key.hex())
    log.info("created key %s (%s)", name, key.address)
    return key


def get_teleporter_info(store: AppStore, releases: ReleaseClient, repo: str) -> TeleporterInfo:
    """Deployer key from the local key store and the latest messenger release."""
    key = load_or_create_key(store, TELEPORTER_KEY_NAME)
    version = releases.latest_release(repo)
    return TeleporterInfo(
        version=version,
        funded_address=key.address,
        key_name=TELEPORTER_KEY_NAME,
    )
