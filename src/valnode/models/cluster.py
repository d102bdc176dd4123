# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/models/cluster.py

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field

from valnode.models.network import Network

CLUSTERS_CONFIG_VERSION = "1"


class ClusterConfig(BaseModel):
    network: Network = Field(default_factory=Network)
    nodes: List[str] = Field(default_factory=list)   # cloud instance ids, in creation order


class ClustersConfig(BaseModel):
    version: str = CLUSTERS_CONFIG_VERSION
    key_pair: Dict[str, str] = Field(default_factory=dict)     # key pair name -> local cert path
    clusters: Dict[str, ClusterConfig] = Field(default_factory=dict)

    def add_node(self, cluster_name: str, network: Network, node_id: str) -> ClusterConfig:
        cluster = self.clusters.get(cluster_name)
        if cluster is None:
            cluster = ClusterConfig(network=network)
            self.clusters[cluster_name] = cluster
        if node_id not in cluster.nodes:
            cluster.nodes.append(node_id)
        return cluster

    def register_key_pair(self, name: str, cert_path: str) -> str:
        """
        Record `name -> cert_path` unless `name` is already known.

        Returns the path now associated with `name`; an existing entry is never
        overwritten.
        """
        existing = self.key_pair.get(name)
        if existing is not None:
            return existing
        self.key_pair[name] = cert_path
        return cert_path

    def cluster_exists(self, name: str) -> bool:
        return name in self.clusters
