# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/node/bootstrap.py

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from valnode.config.models import AppSettings
from valnode.core.results import NodeResults, run_parallel
from valnode.errors import NodesFailedError
from valnode.models.network import Network
from valnode.models.node import Host
from valnode.node.identity import generate_staking_identity, write_staking_files
from valnode.observers.dispatcher import EventBus
from valnode.observers.events import (
    BootstrapStepCompleted,
    NodeCreated,
    NodeFailed,
    NodeIdentityCreated,
    new_ctx,
)
from valnode.remote.scripts import RemoteScripts
from valnode.store.app_store import AppStore
from valnode.utils.ssh import Connector

log = logging.getLogger("valnode")

BANNER = "======================================"


class BootstrapCoordinator:
    """
    Brings freshly provisioned hosts to a running node, one thread per host.

    Within a host the steps run in a fixed order and the first failure stops
    that host only. The staking identity is recorded as soon as it exists so
    failed hosts can still be correlated with a node id.
    """

    def __init__(
        self,
        store: AppStore,
        settings: AppSettings,
        connector: Connector,
        scripts: RemoteScripts,
        *,
        bus: Optional[EventBus] = None,
        ctx: Optional[dict] = None,
    ):
        self.store = store
        self.settings = settings
        self.connector = connector
        self.scripts = scripts
        self.bus = bus or EventBus()
        self.ctx = ctx or new_ctx(env="", context=None)
        self._lock = threading.Lock()
        self.node_ids: Dict[str, str] = {}

    def _step(self, alias: str, step: str) -> None:
        log.debug("[%s] %s done", alias, step)
        self.bus.emit(BootstrapStepCompleted(host=alias, step=step, **self.ctx))

    def bootstrap_host(self, host: Host, network: Network, node_version: str = "") -> str:
        alias = host.node_id
        instance_id = host.get_cloud_id()
        node_dir = self.store.node_instance_dir(instance_id)

        with self.connector(host) as runner:
            self._step(alias, "connect")

            identity = generate_staking_identity()
            write_staking_files(node_dir, identity)
            with self._lock:
                self.node_ids[alias] = identity.node_id
            log.info("Generated staking keys for host %s[%s]", instance_id, identity.node_id)
            self.bus.emit(NodeIdentityCreated(host=alias, node_id=identity.node_id, **self.ctx))

            self.scripts.upload_staking_files(runner, node_dir)
            self._step(alias, "upload staking files")

            node_cfg = self.store.load_node_config(instance_id)
            self.scripts.setup_node(
                runner,
                self.store.node_config_path(instance_id),
                network,
                node_version=node_version,
                use_static_ip=node_cfg.use_static_ip,
            )
            self._step(alias, "setup node")

            self.scripts.setup_build_env(runner)
            self._step(alias, "setup build env")

            self.scripts.setup_cli_from_source(runner, self.settings.releases.cli_branch)
            self._step(alias, "setup cli from source")

        return identity.node_id

    def bootstrap(self, hosts: List[Host], network: Network, node_version: str = "") -> NodeResults:
        by_alias = {h.node_id: h for h in hosts}
        log.info("Installing the node and the CLI and starting bootstrap on %d host(s) ...", len(hosts))
        return run_parallel(
            list(by_alias),
            lambda alias: self.bootstrap_host(by_alias[alias], network, node_version),
        )

    def report(self, hosts: List[Host], results: NodeResults) -> None:
        log.info(BANNER)
        log.info("AVALANCHE NODE(S) STATUS")
        log.info(BANNER)
        log.info("")
        for host in hosts:
            alias = host.node_id
            node_id = self.node_ids.get(alias, "")
            label = f"{alias}[{node_id}]" if node_id else alias
            result = results.get(alias)
            if result is not None and not result.ok:
                log.info("Node %s is ERROR with error: %s", label, result.error)
                self.bus.emit(NodeFailed(host=alias, node_id=node_id, error=str(result.error), **self.ctx))
            else:
                log.info("Node %s is CREATED", label)
                self.bus.emit(NodeCreated(host=alias, node_id=node_id, **self.ctx))


def raise_on_failures(results: NodeResults, action: str = "deploy") -> None:
    failed = results.error_hosts()
    if not failed:
        return
    detail = ", ".join(f"{alias}: {err}" for alias, err in sorted(failed.items(), key=lambda kv: kv[0]))
    raise NodesFailedError(f"failed to {action} node(s) {detail}", failed_nodes=sorted(failed))
