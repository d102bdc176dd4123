# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/subnet/custom.py

from __future__ import annotations

import json
import logging
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from valnode.errors import ValnodeError
from valnode.genesis.serializer import validate_genesis_file
from valnode.models.sidecar import Sidecar, VMType
from valnode.prompts.options import VMSourceChoice
from valnode.prompts.prompter import Prompter
from valnode.store.app_store import AppStore

log = logging.getLogger("valnode")


class CustomVMError(ValnodeError):
    pass


@dataclass
class CustomVMSource:
    binary_path: Optional[Path] = None
    repo_url: str = ""
    branch: str = ""
    build_script: str = ""

    @property
    def from_repo(self) -> bool:
        return bool(self.repo_url)


def _run(argv: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    log.debug("running %s", " ".join(argv))
    cp = subprocess.run(argv, cwd=str(cwd) if cwd else None, check=False, text=True, capture_output=True)
    if cp.returncode != 0:
        raise CustomVMError(f"{argv[0]} failed (rc={cp.returncode}) for {argv!r}\n{cp.stderr}")
    return cp


def vm_rpc_version(binary: Path) -> int:
    """Ask a VM binary for the rpcchainvm protocol it speaks."""
    cp = _run([str(binary), "--version-json"])
    try:
        return int(json.loads(cp.stdout)["rpcchainvm"])
    except (ValueError, KeyError, TypeError) as exc:
        raise CustomVMError(f"unable to read RPC version from {binary}: {exc}") from exc


def build_from_repo(source: CustomVMSource, output: Path) -> Path:
    """Clone `source.repo_url` at `source.branch` and run its build script into `output`."""
    with tempfile.TemporaryDirectory(prefix="valnode-vm-") as tmp:
        repo_dir = Path(tmp) / "repo"
        argv = ["git", "clone", "--depth", "1"]
        if source.branch:
            argv += ["--branch", source.branch]
        _run(argv + [source.repo_url, str(repo_dir)])
        output.parent.mkdir(parents=True, exist_ok=True)
        _run(["bash", source.build_script, str(output)], cwd=repo_dir)
    if not output.is_file():
        raise CustomVMError(f"build script {source.build_script} did not produce {output}")
    return output


def capture_vm_source(prompter: Prompter, source: CustomVMSource) -> CustomVMSource:
    if source.binary_path or source.from_repo:
        return source
    choice = prompter.capture_option("How do you want to set up the VM binary?", list(VMSourceChoice))
    if choice is VMSourceChoice.LOCAL_BINARY:
        return CustomVMSource(binary_path=prompter.capture_existing_path("Enter path to VM binary"))
    return CustomVMSource(
        repo_url=prompter.capture_string("Source code repository URL"),
        branch=prompter.capture_string("Branch or commit"),
        build_script=prompter.capture_string("Build script (relative to the repository root)"),
    )


def create_custom_subnet_config(
    store: AppStore,
    prompter: Prompter,
    subnet_name: str,
    genesis_file: Optional[Path],
    source: CustomVMSource,
) -> tuple[bytes, Sidecar, Path]:
    """
    Collect genesis and binary for a custom VM. The binary is built or
    copied into the local VM directory only after every prompt is answered.
    Returns (genesis bytes, sidecar, local binary path).
    """
    log.info("creating custom VM subnet %s", subnet_name)
    if genesis_file is None:
        genesis_file = prompter.capture_existing_path("Enter path to custom genesis")
    genesis = validate_genesis_file(genesis_file, VMType.CUSTOM)

    source = capture_vm_source(prompter, source)
    target = store.custom_vm_path(subnet_name)
    if source.from_repo:
        build_from_repo(source, target)
    else:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source.binary_path, target)

    sc = Sidecar(
        name=subnet_name,
        vm=VMType.CUSTOM,
        rpc_version=vm_rpc_version(target),
        subnet=subnet_name,
        custom_vm_repo_url=source.repo_url,
        custom_vm_branch=source.branch,
        custom_vm_build_script=source.build_script,
    )
    return genesis, sc, target
