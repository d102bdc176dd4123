# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/genesis/models.py

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

ONE_TOKEN = 10**18                      # smallest units per whole token
DEFAULT_AIRDROP_AMOUNT = 1_000_000      # whole tokens
EWOQ_ADDRESS = "0x8db97C7cEcE249c2b98bDC0226Cc4C2A57BF52FC"
TELEPORTER_FUNDED_BALANCE = 600 * ONE_TOKEN


class FeeConfig(BaseModel):
    gas_limit: int = 8_000_000
    target_block_rate: int = 2
    min_base_fee: int = 25_000_000_000
    target_gas: int = 15_000_000
    base_fee_change_denominator: int = 36
    min_block_gas_cost: int = 0
    max_block_gas_cost: int = 1_000_000
    block_gas_cost_step: int = 200_000

    def to_genesis(self) -> dict:
        return {
            "gasLimit": self.gas_limit,
            "targetBlockRate": self.target_block_rate,
            "minBaseFee": self.min_base_fee,
            "targetGas": self.target_gas,
            "baseFeeChangeDenominator": self.base_fee_change_denominator,
            "minBlockGasCost": self.min_block_gas_cost,
            "maxBlockGasCost": self.max_block_gas_cost,
            "blockGasCostStep": self.block_gas_cost_step,
        }


LOW_THROUGHPUT_FEES = FeeConfig(gas_limit=8_000_000, target_gas=15_000_000)
MEDIUM_THROUGHPUT_FEES = FeeConfig(gas_limit=12_000_000, target_gas=20_000_000)
HIGH_THROUGHPUT_FEES = FeeConfig(gas_limit=15_000_000, target_gas=50_000_000)


class AllowListConfig(BaseModel):
    admin_addresses: List[str] = Field(default_factory=list)
    manager_addresses: List[str] = Field(default_factory=list)
    enabled_addresses: List[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.admin_addresses or self.manager_addresses or self.enabled_addresses)

    def to_genesis(self, block_timestamp: int) -> dict:
        out: dict = {"blockTimestamp": block_timestamp}
        if self.admin_addresses:
            out["adminAddresses"] = list(self.admin_addresses)
        if self.manager_addresses:
            out["managerAddresses"] = list(self.manager_addresses)
        if self.enabled_addresses:
            out["enabledAddresses"] = list(self.enabled_addresses)
        return out


class Precompiles(BaseModel):
    native_minter: Optional[AllowListConfig] = None
    contract_deployer_allow_list: Optional[AllowListConfig] = None
    tx_allow_list: Optional[AllowListConfig] = None
    fee_manager: Optional[AllowListConfig] = None
    reward_manager: Optional[AllowListConfig] = None
    warp: bool = False

    def enabled_optional(self) -> List[str]:
        """Names of enabled precompiles other than warp."""
        names = []
        for name in (
            "native_minter",
            "contract_deployer_allow_list",
            "tx_allow_list",
            "fee_manager",
            "reward_manager",
        ):
            if getattr(self, name) is not None:
                names.append(name)
        return names


class TeleporterInfo(BaseModel):
    version: str
    funded_address: str
    funded_balance: int = TELEPORTER_FUNDED_BALANCE
    key_name: str = ""


class GenesisParams(BaseModel):
    chain_id: int = Field(ge=1, lt=2**64)
    token_symbol: str
    fee_config: FeeConfig
    allocation: Dict[str, int] = Field(default_factory=dict)     # address -> balance in smallest units
    precompiles: Precompiles = Field(default_factory=Precompiles)
    use_external_gas_token: bool = False
    use_teleporter: bool = False
    teleporter_info: Optional[TeleporterInfo] = None

    @field_validator("allocation")
    @classmethod
    def _non_negative(cls, v: Dict[str, int]) -> Dict[str, int]:
        for addr, bal in v.items():
            if bal < 0:
                raise ValueError(f"negative balance for {addr}")
        return v
