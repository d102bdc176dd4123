# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/genesis/serializer.py

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Dict, Optional

from valnode.errors import GenesisFormatError
from valnode.genesis.models import GenesisParams
from valnode.models.sidecar import VMType

ZERO_HASH = "0x" + "00" * 32
ZERO_ADDRESS = "0x" + "00" * 20
WARP_QUORUM_NUMERATOR = 67

_FORK_BLOCKS = (
    "homesteadBlock",
    "eip150Block",
    "eip155Block",
    "eip158Block",
    "byzantiumBlock",
    "constantinopleBlock",
    "petersburgBlock",
    "istanbulBlock",
    "muirGlacierBlock",
)

_PRECOMPILE_KEYS = {
    "native_minter": "contractNativeMinterConfig",
    "contract_deployer_allow_list": "contractDeployerAllowListConfig",
    "tx_allow_list": "txAllowListConfig",
    "fee_manager": "feeManagerConfig",
    "reward_manager": "rewardManagerConfig",
}


def build_genesis(params: GenesisParams, *, timestamp: Optional[int] = None) -> Dict[str, Any]:
    """Render a Subnet-EVM genesis document from a parameter bundle."""
    ts = int(time.time()) if timestamp is None else timestamp

    config: Dict[str, Any] = {"chainId": params.chain_id}
    config.update({k: 0 for k in _FORK_BLOCKS})
    config["feeConfig"] = params.fee_config.to_genesis()

    pc = params.precompiles
    for attr, key in _PRECOMPILE_KEYS.items():
        allow_list = getattr(pc, attr)
        if allow_list is not None:
            config[key] = allow_list.to_genesis(0)
    if pc.warp:
        config["warpConfig"] = {
            "blockTimestamp": ts,
            "quorumNumerator": WARP_QUORUM_NUMERATOR,
        }

    alloc = {
        address.lower().removeprefix("0x"): {"balance": hex(balance)}
        for address, balance in params.allocation.items()
    }

    return {
        "config": config,
        "nonce": "0x0",
        "timestamp": hex(ts),
        "extraData": "0x",
        "gasLimit": hex(params.fee_config.gas_limit),
        "difficulty": "0x0",
        "mixHash": ZERO_HASH,
        "coinbase": ZERO_ADDRESS,
        "alloc": alloc,
        "airdropHash": ZERO_HASH,
        "airdropAmount": None,
        "number": "0x0",
        "gasUsed": "0x0",
        "parentHash": ZERO_HASH,
        "baseFeePerGas": None,
    }


def validate_genesis(raw: bytes, vm_type: VMType) -> Dict[str, Any]:
    """
    Parse a supplied genesis. Raises GenesisFormatError when it is not JSON,
    or when a Subnet-EVM genesis lacks its chain config or allocation.
    """
    try:
        doc = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise GenesisFormatError(f"genesis is not valid JSON: {exc}") from exc

    if vm_type is VMType.SUBNET_EVM:
        if not isinstance(doc, dict):
            raise GenesisFormatError("Subnet-EVM genesis must be a JSON object")
        config = doc.get("config")
        if not isinstance(config, dict) or not isinstance(config.get("chainId"), int):
            raise GenesisFormatError("Subnet-EVM genesis is missing config.chainId")
        if not isinstance(doc.get("alloc"), dict):
            raise GenesisFormatError("Subnet-EVM genesis is missing the alloc table")
    return doc


def validate_genesis_file(path: str | Path, vm_type: VMType) -> bytes:
    p = Path(path).expanduser()
    try:
        raw = p.read_bytes()
    except OSError as exc:
        raise GenesisFormatError(f"unable to read genesis file {p}: {exc}") from exc
    validate_genesis(raw, vm_type)
    return raw
