# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/node/status.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from valnode.ansible.inventory import read_hosts
from valnode.core.results import run_parallel
from valnode.errors import ValnodeError
from valnode.models.network import NetworkKind
from valnode.node.options import StatusOptions
from valnode.remote.scripts import STATUS_SYNCING, STATUS_VALIDATING, RemoteScripts
from valnode.store.app_store import AppStore
from valnode.utils.ssh import Connector

log = logging.getLogger("valnode")


class NoBlockchainIDError(ValnodeError):
    pass


@dataclass
class NodeStatus:
    host: str
    bootstrapped: bool
    subnet_status: str = ""      # Syncing / Validating / "" when not tracked


@dataclass
class ClusterStatus:
    cluster_name: str
    subnet_name: str = ""
    nodes: List[NodeStatus] = field(default_factory=list)

    def not_bootstrapped(self) -> List[str]:
        return [n.host for n in self.nodes if not n.bootstrapped]

    def not_synced(self) -> List[str]:
        return [n.host for n in self.nodes if n.subnet_status not in (STATUS_SYNCING, STATUS_VALIDATING)]

    def summary(self) -> Optional[str]:
        if not self.subnet_name:
            if not self.not_bootstrapped():
                return f"All nodes in cluster {self.cluster_name} are bootstrapped to Primary Network!"
            return None
        if self.not_synced():
            return None
        syncing = any(n.subnet_status == STATUS_SYNCING for n in self.nodes)
        what = "synced to" if syncing else "validators of"
        return f"All nodes in cluster {self.cluster_name} are {what} Subnet {self.subnet_name}"


class StatusService:
    def __init__(self, store: AppStore, connector: Connector, scripts: RemoteScripts):
        self.store = store
        self.connector = connector
        self.scripts = scripts

    def status(self, opts: StatusOptions) -> ClusterStatus:
        self.store.get_cluster(opts.cluster_name)
        hosts = read_hosts(self.store.ansible_inventory_dir(opts.cluster_name))

        blockchain_id = ""
        if opts.subnet_name:
            sidecar = self.store.load_sidecar(opts.subnet_name)
            data = sidecar.networks.get(NetworkKind.FUJI.value)
            blockchain_id = data.blockchain_id if data else ""
            if not blockchain_id:
                raise NoBlockchainIDError(
                    f"subnet {opts.subnet_name} has no blockchain id on Fuji; deploy it first"
                )

        by_alias = {h.node_id: h for h in hosts}

        def _probe(alias: str) -> NodeStatus:
            with self.connector(by_alias[alias]) as runner:
                bootstrapped = self.scripts.check_bootstrapped(runner)
                subnet_status = self.scripts.subnet_sync_status(runner, blockchain_id) if blockchain_id else ""
            return NodeStatus(host=alias, bootstrapped=bootstrapped, subnet_status=subnet_status)

        results = run_parallel(list(by_alias), _probe)

        out = ClusterStatus(cluster_name=opts.cluster_name, subnet_name=opts.subnet_name)
        for host in hosts:
            r = results.get(host.node_id)
            if r is None or not r.ok:
                log.debug("status probe on %s failed: %s", host.node_id, r.error if r else "no result")
                out.nodes.append(NodeStatus(host=host.node_id, bootstrapped=False))
            else:
                out.nodes.append(r.value)
        return out


def status_rows(status: ClusterStatus) -> List[Dict[str, str]]:
    """Table rows, one per node, keyed by column title."""
    rows: List[Dict[str, str]] = []
    for node in status.nodes:
        row = {"Node": node.host, "Primary Network": "OK" if node.bootstrapped else "ERR"}
        if status.subnet_name:
            if node.subnet_status == STATUS_SYNCING:
                sub = "Synced"
            elif node.subnet_status == STATUS_VALIDATING:
                sub = "Validating"
            else:
                sub = "ERR"
            row[f"Subnet {status.subnet_name}"] = sub
        rows.append(row)
    return rows
