# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/node/devnet.py

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, List, Optional

from valnode.core.results import NodeResults, run_parallel
from valnode.genesis.models import EWOQ_ADDRESS
from valnode.models.network import DEVNET_NETWORK_ID, Network
from valnode.models.node import Host
from valnode.remote.scripts import NODE_CONFIG_DIR, RemoteScripts
from valnode.store.app_store import GENESIS_FILE, NODE_FILE, AppStore
from valnode.utils.ssh import Connector

log = logging.getLogger("valnode")

# ewoq key on custom networks, X-chain form
EWOQ_AVAX_ADDRESS = "X-custom18jma8ppw3nhx5r4ap8clazz0dps7rv5u9xde7p"
DEVNET_C_CHAIN_ID = 43117
P2P_PORT = 9651

INITIAL_AMOUNT = 300_000_000_000_000_000
UNLOCKED_AMOUNT = 10_000_000_000_000_000
STAKE_DURATION = 365 * 24 * 60 * 60
STAKE_DURATION_OFFSET = 90 * 60
DELEGATION_FEE = 1_000_000
C_CHAIN_EWOQ_BALANCE = "0x295BE96E64066972000000"


def c_chain_genesis() -> Dict[str, Any]:
    zero_hash = "0x" + "0" * 64
    return {
        "config": {
            "chainId": DEVNET_C_CHAIN_ID,
            "homesteadBlock": 0,
            "daoForkBlock": 0,
            "daoForkSupport": True,
            "eip150Block": 0,
            "eip155Block": 0,
            "eip158Block": 0,
            "byzantiumBlock": 0,
            "constantinopleBlock": 0,
            "petersburgBlock": 0,
            "istanbulBlock": 0,
            "muirGlacierBlock": 0,
        },
        "nonce": "0x0",
        "timestamp": "0x0",
        "extraData": "0x00",
        "gasLimit": "0x5f5e100",
        "difficulty": "0x0",
        "mixHash": zero_hash,
        "coinbase": "0x" + "0" * 40,
        "alloc": {EWOQ_ADDRESS[2:]: {"balance": C_CHAIN_EWOQ_BALANCE}},
        "number": "0x0",
        "gasUsed": "0x0",
        "parentHash": zero_hash,
    }


def devnet_genesis(node_ids: List[str], *, start_time: Optional[int] = None) -> Dict[str, Any]:
    """Primary network genesis where every cluster node is an initial staker."""
    if not node_ids:
        raise ValueError("devnet genesis needs at least one node id")
    return {
        "networkID": DEVNET_NETWORK_ID,
        "allocations": [
            {
                "ethAddr": EWOQ_ADDRESS,
                "avaxAddr": EWOQ_AVAX_ADDRESS,
                "initialAmount": INITIAL_AMOUNT,
                "unlockSchedule": [{"amount": UNLOCKED_AMOUNT}],
            }
        ],
        "startTime": int(start_time if start_time is not None else time.time()),
        "initialStakeDuration": STAKE_DURATION,
        "initialStakeDurationOffset": STAKE_DURATION_OFFSET,
        "initialStakedFunds": [EWOQ_AVAX_ADDRESS],
        "initialStakers": [
            {"nodeID": node_id, "rewardAddress": EWOQ_AVAX_ADDRESS, "delegationFee": DELEGATION_FEE}
            for node_id in node_ids
        ],
        "cChainGenesis": json.dumps(c_chain_genesis()),
        "message": "valnode devnet",
    }


def node_settings(host: Host, bootstrap: List[tuple[str, str]]) -> Dict[str, Any]:
    """node.json for one member; `bootstrap` is (node id, ip) of earlier members."""
    return {
        "network-id": f"network-{DEVNET_NETWORK_ID}",
        "genesis-file": f"{NODE_CONFIG_DIR}/{GENESIS_FILE}",
        "public-ip": host.ip,
        "http-host": "",
        "bootstrap-ids": ",".join(node_id for node_id, _ in bootstrap),
        "bootstrap-ips": ",".join(f"{ip}:{P2P_PORT}" for _, ip in bootstrap),
    }


def setup_devnet(
    store: AppStore,
    cluster_name: str,
    hosts: List[Host],
    node_ids: Dict[str, str],
    connector: Connector,
    scripts: RemoteScripts,
) -> NodeResults:
    """
    Write genesis.json and node.json for every host, upload them and restart
    the node service. Each host bootstraps from the hosts listed before it.
    """
    members = [h for h in hosts if h.node_id in node_ids]
    if not members:
        raise ValueError("no node ids available to build the devnet genesis")

    genesis = json.dumps(devnet_genesis([node_ids[h.node_id] for h in members]), indent=2)
    for i, host in enumerate(members):
        instance_id = host.get_cloud_id()
        store.write_node_file(instance_id, GENESIS_FILE, genesis)
        earlier = [(node_ids[h.node_id], h.ip) for h in members[:i]]
        store.write_node_file(instance_id, NODE_FILE, json.dumps(node_settings(host, earlier), indent=2))

    cfg = store.load_clusters_config()
    if cluster_name in cfg.clusters:
        cfg.clusters[cluster_name].network = Network.devnet(ip=members[0].ip)
        store.save_clusters_config(cfg)

    by_alias = {h.node_id: h for h in members}

    def _upload(alias: str) -> None:
        host = by_alias[alias]
        with connector(host) as runner:
            scripts.setup_devnet(runner, store.node_instance_dir(host.get_cloud_id()))

    log.info("Setting up Devnet on %d node(s) ...", len(members))
    return run_parallel(list(by_alias), _upload)
