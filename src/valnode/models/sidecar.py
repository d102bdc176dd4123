# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/models/sidecar.py

from __future__ import annotations

from enum import Enum
from typing import Dict

from pydantic import BaseModel, Field


class VMType(str, Enum):
    SUBNET_EVM = "Subnet-EVM"
    CUSTOM = "Custom"


class NetworkData(BaseModel):
    subnet_id: str = ""
    blockchain_id: str = ""
    teleporter_messenger_address: str = ""
    teleporter_registry_address: str = ""


class Sidecar(BaseModel):
    """Per-subnet metadata kept next to its genesis."""

    name: str
    vm: VMType
    vm_version: str = ""
    rpc_version: int = 0
    subnet: str = ""
    token_symbol: str = ""
    token_name: str = ""
    teleporter_ready: bool = False
    teleporter_key: str = ""
    teleporter_version: str = ""
    custom_vm_repo_url: str = ""
    custom_vm_branch: str = ""
    custom_vm_build_script: str = ""
    networks: Dict[str, NetworkData] = Field(default_factory=dict)
