# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/store/app_store.py

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from valnode.errors import ClusterNotFoundError, SidecarNotFoundError
from valnode.models.cluster import ClusterConfig, ClustersConfig
from valnode.models.node import NodeConfig
from valnode.models.sidecar import Sidecar

log = logging.getLogger("valnode")

CLUSTERS_CONFIG_FILE = "clusters.json"
NODE_CONFIG_FILE = "node_cloud_config.json"
SIDECAR_FILE = "sidecar.json"
GENESIS_FILE = "genesis.json"
NODE_FILE = "node.json"
STAKER_CERT_FILE = "staker.crt"
STAKER_KEY_FILE = "staker.key"
BLS_KEY_FILE = "signer.key"
TERRAFORM_SPEC_FILE = "main.tf.json"


def _write_private(path: Path, data: str | bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = "wb" if isinstance(data, bytes) else "w"
    with open(path, mode) as f:
        f.write(data)
    os.chmod(path, 0o600)


class AppStore:
    """
    On-disk layout under base_dir:

        clusters.json
        nodes/<instance id>/{node_cloud_config.json,staker.crt,staker.key,signer.key}
        ssh/<key pair>.pem
        keys/<name>.pk
        terraform/<cluster>/main.tf.json
        ansible/<cluster>/inventory/hosts
        subnets/<name>/{sidecar.json,genesis.json}
        vms/<name>
    """

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir).expanduser()

    # ------------------------- directories -------------------------

    @property
    def ssh_dir(self) -> Path:
        return self.base_dir / "ssh"

    @property
    def keys_dir(self) -> Path:
        return self.base_dir / "keys"

    @property
    def nodes_dir(self) -> Path:
        return self.base_dir / "nodes"

    @property
    def vms_dir(self) -> Path:
        return self.base_dir / "vms"

    def node_instance_dir(self, instance_id: str) -> Path:
        return self.nodes_dir / instance_id

    def terraform_dir(self, cluster_name: str) -> Path:
        return self.base_dir / "terraform" / cluster_name

    def ansible_inventory_dir(self, cluster_name: str) -> Path:
        return self.base_dir / "ansible" / cluster_name / "inventory"

    def ansible_dir(self, cluster_name: str) -> Path:
        return self.base_dir / "ansible" / cluster_name

    def subnet_dir(self, name: str) -> Path:
        return self.base_dir / "subnets" / name

    def cert_path(self, cert_name: str) -> Path:
        return self.ssh_dir / cert_name

    def key_path(self, key_name: str) -> Path:
        return self.keys_dir / f"{key_name}.pk"

    def custom_vm_path(self, name: str) -> Path:
        return self.vms_dir / name

    # ------------------------- clusters -------------------------

    @property
    def clusters_config_path(self) -> Path:
        return self.base_dir / CLUSTERS_CONFIG_FILE

    def load_clusters_config(self) -> ClustersConfig:
        path = self.clusters_config_path
        if not path.is_file():
            return ClustersConfig()
        return ClustersConfig.model_validate_json(path.read_text())

    def save_clusters_config(self, cfg: ClustersConfig) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.clusters_config_path.write_text(cfg.model_dump_json(indent=2))
        log.debug("saved clusters config to %s", self.clusters_config_path)

    def get_cluster(self, cluster_name: str) -> ClusterConfig:
        cfg = self.load_clusters_config()
        cluster = cfg.clusters.get(cluster_name)
        if cluster is None:
            raise ClusterNotFoundError(f"cluster {cluster_name!r} does not exist")
        return cluster

    # ------------------------- nodes -------------------------

    def node_config_path(self, instance_id: str) -> Path:
        return self.node_instance_dir(instance_id) / NODE_CONFIG_FILE

    def save_node_config(self, cfg: NodeConfig) -> Path:
        path = self.node_config_path(cfg.node_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(cfg.model_dump_json(indent=2))
        return path

    def load_node_config(self, instance_id: str) -> NodeConfig:
        return NodeConfig.model_validate_json(self.node_config_path(instance_id).read_text())

    def write_node_file(self, instance_id: str, filename: str, data: str | bytes) -> Path:
        path = self.node_instance_dir(instance_id) / filename
        _write_private(path, data)
        return path

    # ------------------------- key material -------------------------

    def write_cert(self, cert_name: str, pem: str | bytes) -> Path:
        path = self.cert_path(cert_name)
        _write_private(path, pem)
        return path

    def write_key(self, key_name: str, data: str) -> Path:
        path = self.key_path(key_name)
        _write_private(path, data)
        return path

    # ------------------------- subnets -------------------------

    def sidecar_path(self, name: str) -> Path:
        return self.subnet_dir(name) / SIDECAR_FILE

    def genesis_path(self, name: str) -> Path:
        return self.subnet_dir(name) / GENESIS_FILE

    def sidecar_exists(self, name: str) -> bool:
        return self.sidecar_path(name).is_file()

    def load_sidecar(self, name: str) -> Sidecar:
        path = self.sidecar_path(name)
        if not path.is_file():
            raise SidecarNotFoundError(f"subnet {name!r} does not exist")
        return Sidecar.model_validate_json(path.read_text())

    def save_sidecar(self, sc: Sidecar) -> Path:
        path = self.sidecar_path(sc.name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(sc.model_dump_json(indent=2))
        return path

    def write_genesis(self, name: str, genesis: Dict[str, Any] | bytes) -> Path:
        path = self.genesis_path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(genesis, bytes):
            path.write_bytes(genesis)
        else:
            path.write_text(json.dumps(genesis, indent=2))
        return path

    def load_genesis(self, name: str) -> bytes:
        return self.genesis_path(name).read_bytes()
