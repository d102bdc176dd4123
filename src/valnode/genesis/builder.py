# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/genesis/builder.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from valnode.core.statemachine import StateDirection, StateMachine, run_stages
from valnode.errors import ConfigurationError
from valnode.genesis.models import (
    DEFAULT_AIRDROP_AMOUNT,
    EWOQ_ADDRESS,
    HIGH_THROUGHPUT_FEES,
    LOW_THROUGHPUT_FEES,
    MEDIUM_THROUGHPUT_FEES,
    ONE_TOKEN,
    FeeConfig,
    GenesisParams,
    Precompiles,
    TeleporterInfo,
)
from valnode.genesis.precompiles import configure_precompiles
from valnode.prompts.listdecision import capture_list_decision
from valnode.prompts.options import AddPrecompileChoice, AirdropChoice, FeeChoice, GasTokenChoice
from valnode.prompts.prompter import Prompter
from valnode.prompts.validators import validate_uint64

log = logging.getLogger("valnode")

DESCRIPTORS_STAGE = "descriptors"
FEE_STAGE = "fee"
AIRDROP_STAGE = "airdrop"
PRECOMPILES_STAGE = "precompiles"

GENESIS_STAGES = (DESCRIPTORS_STAGE, FEE_STAGE, AIRDROP_STAGE, PRECOMPILES_STAGE)

FEE_EXPLANATION = (
    "The fee presets trade disk usage against throughput. Low matches the "
    "C-Chain. Higher gas targets let more transactions in each block but grow "
    "the chain state faster. Customize lets you set every fee parameter."
)
AIRDROP_EXPLANATION = (
    "The airdrop funds addresses in the genesis block. The ewoq key is public, "
    "so only use it for testing. A new key is written to the local key store."
)
GAS_TOKEN_EXPLANATION = (
    "A native token is minted by this blockchain. A token from another "
    "blockchain is bridged in, which requires interoperability messaging."
)
PRECOMPILES_EXPLANATION = (
    "Precompiles are native contracts that change EVM behaviour: allow lists "
    "for deployers, transactions and minting, plus fee and reward managers. "
    "Warp is enabled on its own when teleporter messaging is selected."
)


@dataclass
class GenesisOptions:
    subnet_name: str
    chain_id: Optional[int] = None
    token_symbol: Optional[str] = None
    use_defaults: bool = False
    use_warp: bool = True
    use_teleporter: Optional[bool] = None
    use_external_gas_token: Optional[bool] = None


class GenesisBuilder:
    """
    Collects a GenesisParams bundle through the four wizard stages.

    Every stage keeps its answer on the builder, so going back only re-asks
    the stage being revisited. A cancelled prompt propagates out of `build`.
    """

    def __init__(
        self,
        prompter: Prompter,
        options: GenesisOptions,
        *,
        new_key: Optional[Callable[[str], str]] = None,
        teleporter_info: Optional[Callable[[], TeleporterInfo]] = None,
    ):
        self.prompter = prompter
        self.options = options
        self._new_key = new_key
        self._teleporter_info = teleporter_info

        self.chain_id: Optional[int] = None
        self.token_symbol: str = ""
        self.use_external_gas_token = False
        self.use_teleporter = False
        self.fee_config: Optional[FeeConfig] = None
        self.allocation: Dict[str, int] = {}
        self.precompiles = Precompiles()

    # ------------------------- entry point -------------------------

    def build(self) -> GenesisParams:
        log.info("creating genesis for subnet %s", self.options.subnet_name)
        machine = StateMachine(GENESIS_STAGES)
        run_stages(
            machine,
            {
                DESCRIPTORS_STAGE: self.descriptors_stage,
                FEE_STAGE: self.fee_stage,
                AIRDROP_STAGE: self.airdrop_stage,
                PRECOMPILES_STAGE: self.precompiles_stage,
            },
        )

        teleporter = None
        allocation = dict(self.allocation)
        if self.use_teleporter and self._teleporter_info is not None:
            teleporter = self._teleporter_info()
            add_prefunded_address(allocation, teleporter.funded_address, teleporter.funded_balance)

        return GenesisParams(
            chain_id=self.chain_id,
            token_symbol=self.token_symbol,
            fee_config=self.fee_config,
            allocation=allocation,
            precompiles=self.precompiles,
            use_external_gas_token=self.use_external_gas_token,
            use_teleporter=self.use_teleporter,
            teleporter_info=teleporter,
        )

    # ------------------------- stages -------------------------

    def descriptors_stage(self) -> StateDirection:
        opts = self.options
        self.chain_id = opts.chain_id
        if self.chain_id is None:
            self.chain_id = self.prompter.capture_uint64("Chain ID", allow_zero=False)
        else:
            try:
                validate_uint64(str(self.chain_id), allow_zero=False)
            except ValueError as exc:
                raise ConfigurationError(f"invalid chain id: {exc}") from exc

        self.token_symbol = opts.token_symbol or self.prompter.capture_string("Token symbol")

        self.use_external_gas_token = bool(opts.use_external_gas_token)
        if opts.use_external_gas_token is None and not opts.use_defaults:
            self.use_external_gas_token = self._ask_gas_token()

        if self.use_external_gas_token:
            log.info("Using a token from another blockchain as gas token: interoperability is required and enabled")
            self.use_teleporter = True
        elif opts.use_teleporter is not None:
            self.use_teleporter = opts.use_teleporter
        elif opts.use_defaults:
            log.info("Using defaults: interoperability messaging enabled")
            self.use_teleporter = True
        else:
            self.use_teleporter = self.prompter.capture_yes_no(
                "Would you like to enable interoperability with other blockchains?"
            )
        return StateDirection.FORWARD

    def _ask_gas_token(self) -> bool:
        while True:
            choice = self.prompter.capture_option(
                "Which token will be used for transaction fee payments?", list(GasTokenChoice)
            )
            if choice is GasTokenChoice.EXPLAIN:
                log.info(GAS_TOKEN_EXPLANATION)
                continue
            return choice is GasTokenChoice.EXTERNAL

    def fee_stage(self) -> StateDirection:
        if self.options.use_defaults:
            log.info("Using defaults: low throughput fee configuration")
            self.fee_config = LOW_THROUGHPUT_FEES.model_copy()
            return StateDirection.FORWARD

        presets = {
            FeeChoice.LOW: LOW_THROUGHPUT_FEES,
            FeeChoice.MEDIUM: MEDIUM_THROUGHPUT_FEES,
            FeeChoice.HIGH: HIGH_THROUGHPUT_FEES,
        }
        while True:
            choice = self.prompter.capture_option(
                "How would you like to set fees?", list(FeeChoice)
            )
            if choice is FeeChoice.EXPLAIN:
                log.info(FEE_EXPLANATION)
                continue
            if choice is FeeChoice.GO_BACK:
                return StateDirection.BACKWARD
            if choice is FeeChoice.CUSTOMIZE:
                self.fee_config = self._custom_fee_config()
            else:
                self.fee_config = presets[choice].model_copy()
            return StateDirection.FORWARD

    def _custom_fee_config(self) -> FeeConfig:
        ask = self.prompter.capture_uint64
        return FeeConfig(
            gas_limit=ask("Set gas limit", allow_zero=False),
            target_block_rate=ask("Set target block rate", allow_zero=False),
            min_base_fee=ask("Set min base fee", allow_zero=False),
            target_gas=ask("Set target gas", allow_zero=False),
            base_fee_change_denominator=ask("Set base fee change denominator", allow_zero=False),
            min_block_gas_cost=ask("Set min block gas cost"),
            max_block_gas_cost=ask("Set max block gas cost"),
            block_gas_cost_step=ask("Set block gas cost step"),
        )

    def airdrop_stage(self) -> StateDirection:
        default_balance = DEFAULT_AIRDROP_AMOUNT * ONE_TOKEN
        if self.options.use_defaults:
            log.info("Using defaults: airdrop %d %s to the ewoq address", DEFAULT_AIRDROP_AMOUNT, self.token_symbol)
            self.allocation = {EWOQ_ADDRESS: default_balance}
            return StateDirection.FORWARD

        while True:
            choice = self.prompter.capture_option(
                "How would you like to distribute funds?", list(AirdropChoice)
            )
            if choice is AirdropChoice.EXPLAIN:
                log.info(AIRDROP_EXPLANATION)
                continue
            if choice is AirdropChoice.GO_BACK:
                return StateDirection.BACKWARD
            if choice is AirdropChoice.EWOQ:
                self.allocation = {EWOQ_ADDRESS: default_balance}
                return StateDirection.FORWARD
            if choice is AirdropChoice.NEW_KEY:
                if self._new_key is None:
                    log.error("no key store available to generate a new key")
                    continue
                address = self._new_key(f"subnet_{self.options.subnet_name}_airdrop")
                log.info("airdropping %d %s to new key %s", DEFAULT_AIRDROP_AMOUNT, self.token_symbol, address)
                self.allocation = {address: default_balance}
                return StateDirection.FORWARD

            entries, cancelled = capture_list_decision(
                self.prompter,
                "Configure the addresses to fund",
                self._capture_allocation_entry,
                "Address to airdrop to",
                "address",
                "Each entry funds one address with an amount of whole tokens.",
            )
            if cancelled:
                continue
            allocation: Dict[str, int] = {}
            for address, balance in entries:
                add_prefunded_address(allocation, address, balance)
            self.allocation = allocation
            return StateDirection.FORWARD

    def _capture_allocation_entry(self, prompt: str):
        address = self.prompter.capture_address(prompt)
        amount = self.prompter.capture_uint64(f"Amount to airdrop (in {self.token_symbol} units)")
        return address, amount * ONE_TOKEN

    def precompiles_stage(self) -> StateDirection:
        use_warp = self.options.use_warp or self.use_teleporter
        if self.options.use_defaults:
            log.info("Using defaults: no optional precompiles%s", ", warp enabled" if use_warp else "")
            self.precompiles = Precompiles(warp=use_warp)
            return StateDirection.FORWARD

        while True:
            choice = self.prompter.capture_option(
                "Advanced: Would you like to add a custom precompile to modify the EVM?", list(AddPrecompileChoice)
            )
            if choice is not AddPrecompileChoice.EXPLAIN:
                break
            log.info(PRECOMPILES_EXPLANATION)
        if choice is AddPrecompileChoice.GO_BACK:
            return StateDirection.BACKWARD
        if choice is AddPrecompileChoice.NO:
            self.precompiles = Precompiles(warp=use_warp)
            return StateDirection.FORWARD
        self.precompiles = configure_precompiles(self.prompter, self.allocation, use_warp=use_warp)
        return StateDirection.FORWARD


def add_prefunded_address(allocation: Dict[str, int], address: str, balance: int) -> Dict[str, int]:
    """Add `balance` to `address`, merging case-insensitively with an existing entry."""
    if balance < 0:
        raise ValueError("balance must be non-negative")
    for existing in allocation:
        if existing.lower() == address.lower():
            allocation[existing] += balance
            return allocation
    allocation[address] = balance
    return allocation
