# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/models/network.py

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel

MAINNET_ID = 1
FUJI_ID = 5
LOCAL_NETWORK_ID = 1337
DEVNET_NETWORK_ID = 1338

MAINNET_API_ENDPOINT = "https://api.avax.network"
FUJI_API_ENDPOINT = "https://api.avax-test.network"
LOCAL_API_ENDPOINT = "http://127.0.0.1:9650"
DEFAULT_API_PORT = 9650


class NetworkKind(str, Enum):
    UNDEFINED = "invalid network"
    MAINNET = "Mainnet"
    FUJI = "Fuji"
    LOCAL = "Local Network"
    DEVNET = "Devnet"
    CLUSTER = "Cluster"

    @classmethod
    def from_string(cls, s: str) -> "NetworkKind":
        for kind in cls:
            if kind is not cls.UNDEFINED and kind.value == s:
                return kind
        return cls.UNDEFINED


class Network(BaseModel):
    kind: NetworkKind = NetworkKind.UNDEFINED
    id: int = 0
    endpoint: str = ""
    cluster_name: str = ""

    # ---------------- constructors ----------------

    @classmethod
    def mainnet(cls) -> "Network":
        return cls(kind=NetworkKind.MAINNET, id=MAINNET_ID, endpoint=MAINNET_API_ENDPOINT)

    @classmethod
    def fuji(cls) -> "Network":
        return cls(kind=NetworkKind.FUJI, id=FUJI_ID, endpoint=FUJI_API_ENDPOINT)

    @classmethod
    def local(cls) -> "Network":
        return cls(kind=NetworkKind.LOCAL, id=LOCAL_NETWORK_ID, endpoint=LOCAL_API_ENDPOINT)

    @classmethod
    def devnet(cls, ip: Optional[str] = None, port: int = DEFAULT_API_PORT) -> "Network":
        endpoint = f"http://{ip}:{port}" if ip else ""
        return cls(kind=NetworkKind.DEVNET, id=DEVNET_NETWORK_ID, endpoint=endpoint)

    @classmethod
    def from_string(cls, s: str) -> "Network":
        kind = NetworkKind.from_string(s)
        return {
            NetworkKind.MAINNET: cls.mainnet,
            NetworkKind.FUJI: cls.fuji,
            NetworkKind.LOCAL: cls.local,
            NetworkKind.DEVNET: cls.devnet,
        }.get(kind, cls)()

    @classmethod
    def from_network_id(cls, network_id: int) -> "Network":
        return {
            MAINNET_ID: cls.mainnet,
            FUJI_ID: cls.fuji,
            LOCAL_NETWORK_ID: cls.local,
            DEVNET_NETWORK_ID: cls.devnet,
        }.get(network_id, cls)()

    # ---------------- formatting ----------------

    def name(self) -> str:
        if self.cluster_name:
            return "Cluster " + self.cluster_name
        name = self.kind.value
        if self.kind is NetworkKind.DEVNET and self.endpoint:
            name += " " + self.endpoint
        return name

    def blockchain_endpoint(self, blockchain_id: str) -> str:
        return f"{self.endpoint}/ext/bc/{blockchain_id}/rpc"

    def blockchain_ws_endpoint(self, blockchain_id: str) -> str:
        host = self.endpoint.removeprefix("http://").removeprefix("https://")
        return f"ws://{host}/ext/bc/{blockchain_id}/ws"

    def c_chain_endpoint(self) -> str:
        return self.blockchain_endpoint("C")

    def network_id_flag_value(self) -> str:
        if self.kind in (NetworkKind.LOCAL, NetworkKind.DEVNET):
            return f"network-{self.id}"
        if self.kind is NetworkKind.FUJI:
            return "fuji"
        if self.kind is NetworkKind.MAINNET:
            return "mainnet"
        return "invalid-network"
