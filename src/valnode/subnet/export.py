# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/subnet/export.py

from __future__ import annotations

import base64
import json
import logging
from pathlib import Path

from valnode.models.network import Network
from valnode.store.app_store import AppStore

log = logging.getLogger("valnode")

EXPORT_SUFFIX = "_export.dat"


def export_path(subnet_name: str, directory: str = "/tmp") -> str:
    return f"{directory}/{subnet_name}{EXPORT_SUFFIX}"


def export_subnet(store: AppStore, subnet_name: str, path: str | Path, network: Network) -> Path:
    """
    Bundle a subnet's sidecar and genesis into one JSON document that the
    node-local CLI can import. Only the deployment data for `network` is kept.
    """
    sidecar = store.load_sidecar(subnet_name)
    genesis = store.load_genesis(subnet_name)

    network_key = network.kind.value
    sidecar.networks = {k: v for k, v in sidecar.networks.items() if k == network_key}

    doc = {
        "sidecar": sidecar.model_dump(mode="json"),
        "genesis": base64.b64encode(genesis).decode("ascii"),
    }
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(doc, indent=2))
    log.debug("exported subnet %s to %s", subnet_name, out)
    return out
