# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/subnet/create.py

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from valnode.config.models import AppSettings
from valnode.errors import (
    ConfigurationError,
    FlagConflict,
    GenesisFormatError,
    IllegalNameError,
    InvalidVersionError,
)
from valnode.genesis.builder import GenesisBuilder, GenesisOptions
from valnode.genesis.serializer import build_genesis, validate_genesis_file
from valnode.genesis.teleporter import TELEPORTER_KEY_NAME, get_teleporter_info, load_or_create_key
from valnode.models.sidecar import Sidecar, VMType
from valnode.prompts.options import VersionChoice, VMChoice
from valnode.prompts.prompter import Prompter
from valnode.prompts.validators import validate_uint64
from valnode.store.app_store import AppStore
from valnode.subnet.custom import CustomVMSource, create_custom_subnet_config
from valnode.subnet.releases import ReleaseClient
from valnode.utils.versions import is_valid_semver

log = logging.getLogger("valnode")

LATEST = "latest"
PRE_RELEASE = "pre-release"

VM_EXPLANATION = (
    "A virtual machine defines the application logic of a blockchain. "
    "Subnet-EVM is an EVM-compatible VM that can be configured here without "
    "writing code. A custom VM is any other VM binary, provided directly or "
    "built from a repository, together with its own genesis file."
)


@dataclass
class SubnetCreateOptions:
    name: str
    use_evm: bool = False
    use_custom: bool = False
    genesis_file: Optional[Path] = None
    evm_chain_id: Optional[int] = None
    evm_token: Optional[str] = None
    evm_defaults: bool = False
    use_latest_release: bool = False
    use_latest_pre_release: bool = False
    vm_version: str = ""
    use_teleporter: Optional[bool] = None
    use_warp: bool = True
    use_external_gas_token: Optional[bool] = None
    custom_vm_path: Optional[Path] = None
    custom_vm_repo_url: str = ""
    custom_vm_branch: str = ""
    custom_vm_build_script: str = ""
    force: bool = False


def check_subnet_name(name: str) -> None:
    for ch in name:
        if ord(ch) > 127 or not (ch.isalpha() or ch.isdigit() or ch == " "):
            raise IllegalNameError(
                f"subnet name {name!r} is invalid: illegal name character: "
                "only letters, no special characters allowed"
            )


def check_create_flags(opts: SubnetCreateOptions) -> None:
    if opts.use_evm and opts.use_custom:
        raise ConfigurationError("too many VMs selected. Provide at most one VM selection flag")

    version_flags = [opts.use_latest_release, opts.use_latest_pre_release, bool(opts.vm_version)]
    if sum(version_flags) > 1:
        raise FlagConflict("version flags --latest,--pre-release,--vm-version are mutually exclusive")

    if opts.genesis_file and (opts.evm_chain_id is not None or opts.evm_token or opts.evm_defaults):
        raise FlagConflict(
            "specifying --genesis flag disables SubnetEVM config flags --evm-chain-id,--evm-token,--evm-defaults"
        )

    if opts.evm_chain_id is not None:
        try:
            validate_uint64(str(opts.evm_chain_id), allow_zero=False)
        except ValueError as exc:
            raise ConfigurationError(f"invalid --evm-chain-id: {exc}") from exc

    if opts.vm_version and not is_valid_semver(opts.vm_version):
        raise InvalidVersionError(
            f"invalid version string, should be semantic version (ex: v1.1.1): {opts.vm_version}"
        )

    if opts.use_teleporter and not opts.use_warp:
        raise ConfigurationError("warp should be enabled for teleporter to work")


def add_prefunded_address_to_genesis(genesis: bytes, address: str, balance: int) -> bytes:
    doc = json.loads(genesis)
    alloc = doc.get("alloc")
    if not isinstance(alloc, dict):
        raise GenesisFormatError("alloc field not found on genesis")
    alloc[address.lower().removeprefix("0x")] = {"balance": hex(balance)}
    return json.dumps(doc, indent=2).encode()


class SubnetCreator:
    def __init__(
        self,
        store: AppStore,
        prompter: Prompter,
        releases: ReleaseClient,
        settings: AppSettings,
    ):
        self.store = store
        self.prompter = prompter
        self.releases = releases
        self.settings = settings

    # ------------------------- helpers -------------------------

    def _select_vm(self, opts: SubnetCreateOptions) -> VMType:
        if opts.use_evm:
            return VMType.SUBNET_EVM
        if opts.use_custom:
            return VMType.CUSTOM
        while True:
            choice = self.prompter.capture_option("VM", list(VMChoice))
            if choice is VMChoice.EXPLAIN:
                log.info(VM_EXPLANATION)
                continue
            return VMType.SUBNET_EVM if choice is VMChoice.SUBNET_EVM else VMType.CUSTOM

    def resolve_vm_version(self, opts: SubnetCreateOptions) -> str:
        repo = self.settings.releases.evm_repo
        if opts.use_latest_release:
            return self.releases.latest_release(repo)
        if opts.use_latest_pre_release:
            return self.releases.latest_pre_release(repo)
        if opts.vm_version:
            return opts.vm_version

        latest = self.releases.latest_release(repo)
        pre = self.releases.latest_pre_release(repo)
        options = [VersionChoice.LATEST, VersionChoice.SPECIFIC]
        if pre != latest:
            options.insert(0, VersionChoice.PRE_RELEASE)
        choice = self.prompter.capture_option("What version of Subnet-EVM would you like?", options)
        if choice is VersionChoice.LATEST:
            return latest
        if choice is VersionChoice.PRE_RELEASE:
            return pre
        return self.prompter.capture_version("Version")

    # ------------------------- entry point -------------------------

    def create(self, opts: SubnetCreateOptions) -> Sidecar:
        name = opts.name
        if (self.store.sidecar_exists(name) or self.store.genesis_path(name).exists()) and not opts.force:
            raise ConfigurationError("configuration already exists. Use --force parameter to overwrite")
        check_subnet_name(name)
        check_create_flags(opts)

        vm_type = self._select_vm(opts)

        supplied_genesis: Optional[bytes] = None
        if opts.genesis_file:
            supplied_genesis = validate_genesis_file(opts.genesis_file, vm_type)

        if vm_type is VMType.SUBNET_EVM:
            genesis, sc = self._create_evm(opts, supplied_genesis)
        elif vm_type is VMType.CUSTOM:
            source = CustomVMSource(
                binary_path=opts.custom_vm_path,
                repo_url=opts.custom_vm_repo_url,
                branch=opts.custom_vm_branch,
                build_script=opts.custom_vm_build_script,
            )
            genesis, sc, _ = create_custom_subnet_config(
                self.store, self.prompter, name, opts.genesis_file, source
            )
        else:
            raise ConfigurationError(f"unsupported VM type {vm_type}")

        self.store.write_genesis(name, genesis)
        self.store.save_sidecar(sc)
        log.info("Successfully created subnet configuration %s", name)
        return sc

    def _create_evm(self, opts: SubnetCreateOptions, supplied_genesis: Optional[bytes]) -> tuple[bytes, Sidecar]:
        version = self.resolve_vm_version(opts)
        rpc_version = self.releases.evm_rpc_version(version)

        def _teleporter():
            return get_teleporter_info(self.store, self.releases, self.settings.releases.teleporter_repo)

        if supplied_genesis is not None:
            log.info("importing genesis for subnet %s", opts.name)
            sc = Sidecar(
                name=opts.name,
                vm=VMType.SUBNET_EVM,
                vm_version=version,
                rpc_version=rpc_version,
                subnet=opts.name,
            )
            genesis = supplied_genesis
            if opts.use_teleporter:
                info = _teleporter()
                genesis = add_prefunded_address_to_genesis(genesis, info.funded_address, info.funded_balance)
                self._mark_teleporter(sc, info.version)
            return genesis, sc

        builder = GenesisBuilder(
            self.prompter,
            GenesisOptions(
                subnet_name=opts.name,
                chain_id=opts.evm_chain_id,
                token_symbol=opts.evm_token,
                use_defaults=opts.evm_defaults,
                use_warp=opts.use_warp,
                use_teleporter=opts.use_teleporter,
                use_external_gas_token=opts.use_external_gas_token,
            ),
            new_key=lambda key_name: load_or_create_key(self.store, key_name).address,
            teleporter_info=_teleporter,
        )
        params = builder.build()
        sc = Sidecar(
            name=opts.name,
            vm=VMType.SUBNET_EVM,
            vm_version=version,
            rpc_version=rpc_version,
            subnet=opts.name,
            token_symbol=params.token_symbol,
            token_name=params.token_symbol + " Token",
        )
        if params.teleporter_info is not None:
            self._mark_teleporter(sc, params.teleporter_info.version)
        genesis = json.dumps(build_genesis(params), indent=2).encode()
        return genesis, sc

    @staticmethod
    def _mark_teleporter(sc: Sidecar, version: str) -> None:
        sc.teleporter_ready = True
        sc.teleporter_key = TELEPORTER_KEY_NAME
        sc.teleporter_version = version
