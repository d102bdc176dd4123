# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/node/deploy.py

from __future__ import annotations

import logging
from typing import Callable, Optional

from valnode.ansible.inventory import host_aliases
from valnode.ansible.playbooks import PlaybookRunner
from valnode.errors import ConfigurationError, ValnodeError
from valnode.models.network import Network, NetworkKind
from valnode.node.options import DeployOptions
from valnode.store.app_store import AppStore
from valnode.subnet.export import export_path, export_subnet

log = logging.getLogger("valnode")

REMOTE_EXPORT_DIR = "/tmp"

RunnerFactory = Callable[[AppStore, str], PlaybookRunner]


def _default_runner(store: AppStore, cluster_name: str) -> PlaybookRunner:
    return PlaybookRunner(store.ansible_dir(cluster_name), store.ansible_inventory_dir(cluster_name))


class DeployService:
    """`node deploy`: push a locally created subnet into a devnet cluster."""

    def __init__(self, store: AppStore, runner_factory: Optional[RunnerFactory] = None):
        self.store = store
        self.runner_factory = runner_factory or _default_runner

    def deploy(self, opts: DeployOptions) -> str:
        cluster = self.store.get_cluster(opts.cluster_name)
        self.store.load_sidecar(opts.subnet_name)
        if cluster.network.kind is not NetworkKind.DEVNET:
            raise ConfigurationError("node deploy command must be applied to devnet clusters")

        subnet_path = export_path(opts.subnet_name, REMOTE_EXPORT_DIR)
        export_subnet(self.store, opts.subnet_name, subnet_path, Network.fuji())

        aliases = host_aliases(self.store.ansible_inventory_dir(opts.cluster_name))
        if not aliases:
            raise ValnodeError("inventory for cluster has no nodes")
        target = aliases[0]

        runner = self.runner_factory(self.store, opts.cluster_name)
        runner.export_subnet(subnet_path, REMOTE_EXPORT_DIR, target)
        runner.deploy_subnet(opts.subnet_name, subnet_path, target)
        log.info("Subnet successfully deployed into devnet!")
        return target
