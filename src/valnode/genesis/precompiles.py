# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/genesis/precompiles.py

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from valnode.genesis.models import AllowListConfig, Precompiles
from valnode.prompts.listdecision import capture_list_decision
from valnode.prompts.options import PrecompileChoice
from valnode.prompts.prompter import Prompter

log = logging.getLogger("valnode")

ALLOW_LIST_INFO = (
    "Admins can add and remove addresses from every role. Managers can add and "
    "remove enabled addresses. Enabled addresses can use the feature but cannot "
    "change the list."
)

_PRECOMPILE_FIELDS = {
    PrecompileChoice.NATIVE_MINT: "native_minter",
    PrecompileChoice.CONTRACT_ALLOW_LIST: "contract_deployer_allow_list",
    PrecompileChoice.TX_ALLOW_LIST: "tx_allow_list",
    PrecompileChoice.FEE_MANAGER: "fee_manager",
    PrecompileChoice.REWARD_MANAGER: "reward_manager",
}


class AdminBalanceError(ValueError):
    pass


def ensure_admins_have_balance(admins: Iterable[str], allocation: Dict[str, int]) -> None:
    """At least one admin must hold tokens, otherwise nobody can transact."""
    admins = list(admins)
    if not admins:
        return
    balances = {a.lower(): b for a, b in allocation.items()}
    for admin in admins:
        if balances.get(admin.lower(), 0) > 0:
            return
    raise AdminBalanceError(
        "none of the addresses in the transaction allow list precompile have any tokens "
        "allocated to them. Currently, no address can transact on the network. Airdrop "
        "some funds to one of the allow list addresses to continue"
    )


def capture_allow_list(prompter: Prompter, feature: str) -> Optional[AllowListConfig]:
    """Collect admin/manager/enabled lists. None when the operator cancels."""
    cfg = AllowListConfig()
    for role, attr in (
        ("admin", "admin_addresses"),
        ("manager", "manager_addresses"),
        ("enabled", "enabled_addresses"),
    ):
        addresses, cancelled = capture_list_decision(
            prompter,
            f"Configure the {role} addresses of the {feature} allow list",
            prompter.capture_address,
            f"Enter {role} address",
            f"{role} address",
            ALLOW_LIST_INFO,
        )
        if cancelled:
            return None
        setattr(cfg, attr, addresses)
    if cfg.is_empty():
        log.info("No addresses given, %s will not be enabled", feature)
        return None
    return cfg


def configure_precompiles(
    prompter: Prompter,
    allocation: Dict[str, int],
    *,
    use_warp: bool,
) -> Precompiles:
    """Menu loop over the optional precompiles until the operator picks Done."""
    result = Precompiles(warp=use_warp)
    remaining = [c for c in PrecompileChoice if c is not PrecompileChoice.DONE]

    while remaining:
        choice = prompter.capture_option(
            "Choose precompile", remaining + [PrecompileChoice.DONE]
        )
        if choice is PrecompileChoice.DONE:
            break

        cfg = capture_allow_list(prompter, choice.label)
        if cfg is None:
            continue
        if choice is PrecompileChoice.TX_ALLOW_LIST:
            try:
                ensure_admins_have_balance(cfg.admin_addresses, allocation)
            except AdminBalanceError as exc:
                log.error("%s", exc)
                continue

        setattr(result, _PRECOMPILE_FIELDS[choice], cfg)
        remaining.remove(choice)

    return result
