# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/remote/scripts.py

from __future__ import annotations

import logging
import posixpath
import time
from pathlib import Path
from typing import Optional

from valnode.config.models import AppSettings
from valnode.errors import SSHCommandError
from valnode.models.network import Network, NetworkKind
from valnode.remote.template_renderer import TemplateRenderer
from valnode.store.app_store import (
    BLS_KEY_FILE,
    GENESIS_FILE,
    NODE_CONFIG_FILE,
    NODE_FILE,
    STAKER_CERT_FILE,
    STAKER_KEY_FILE,
)
from valnode.utils.ssh_runner import SSHRunner

log = logging.getLogger("valnode")

REMOTE_HOME = "/home/ubuntu"
NODE_DATA_DIR = f"{REMOTE_HOME}/.avalanchego"
STAKING_DIR = f"{NODE_DATA_DIR}/staking"
NODE_CONFIG_DIR = f"{NODE_DATA_DIR}/configs"
CLI_CONFIG_DIR = f"{REMOTE_HOME}/.valnode"
INSTALLER_URL = "https://raw.githubusercontent.com/ava-labs/avalanche-docs/master/scripts/avalanchego-installer.sh"

# platform.getBlockchainStatus values
STATUS_SYNCING = "Syncing"
STATUS_VALIDATING = "Validating"


class RemoteScripts:
    """
    The fixed remote steps of a node, expressed as rendered shell templates
    or direct SFTP transfers over an open SSHRunner.
    """

    def __init__(self, settings: AppSettings, renderer: Optional[TemplateRenderer] = None):
        self.settings = settings
        self.renderer = renderer or TemplateRenderer()

    def _context(self, **extra) -> dict:
        ctx = {
            "remote_home": REMOTE_HOME,
            "node_data_dir": NODE_DATA_DIR,
            "staking_dir": STAKING_DIR,
            "node_config_dir": NODE_CONFIG_DIR,
            "cli_config_dir": CLI_CONFIG_DIR,
        }
        ctx.update(extra)
        return ctx

    def run_script(
        self,
        runner: SSHRunner,
        description: str,
        template: str,
        context: dict,
        timeout: int,
    ) -> str:
        script = self.renderer.render(template, self._context(**context))
        remote_path = f"/tmp/valnode-{template.removesuffix('.j2')}"
        started = time.monotonic()
        runner.put_text(script, remote_path)
        try:
            out = runner.check(f"bash {remote_path}", timeout=timeout)
        except SSHCommandError as exc:
            raise SSHCommandError(f"{description} failed: {exc}") from exc
        log.debug("RunOverSSH[%s]%s took %.1fs", runner.name, description, time.monotonic() - started)
        return out

    # ------------------------- bootstrap steps -------------------------

    def upload_staking_files(self, runner: SSHRunner, node_dir: Path) -> None:
        timeout = self.settings.ssh.script_timeout
        runner.mkdirs(STAKING_DIR, timeout=timeout)
        for filename in (STAKER_CERT_FILE, STAKER_KEY_FILE, BLS_KEY_FILE):
            runner.put_file(node_dir / filename, posixpath.join(STAKING_DIR, filename))

    def setup_node(
        self,
        runner: SSHRunner,
        node_config_path: Path,
        network: Network,
        *,
        node_version: str = "",
        use_static_ip: bool = True,
    ) -> None:
        # devnets start from a fuji install and get their genesis afterwards
        network_flag = "mainnet" if network.kind is NetworkKind.MAINNET else "fuji"
        self.run_script(
            runner,
            "Setup Node",
            "setup_node.sh.j2",
            {
                "installer_url": INSTALLER_URL,
                "ip_mode": "static" if use_static_ip else "dynamic",
                "network_flag": network_flag,
                "node_version": node_version,
            },
            self.settings.ssh.long_running_timeout,
        )
        remote = posixpath.join(CLI_CONFIG_DIR, NODE_CONFIG_FILE)
        log.debug("Uploading config %s to server %s: %s", node_config_path, runner.name, remote)
        runner.put_file(node_config_path, remote)

    def setup_build_env(self, runner: SSHRunner) -> None:
        self.run_script(
            runner,
            "Setup Build Env",
            "setup_build_env.sh.j2",
            {},
            self.settings.ssh.long_running_timeout,
        )

    def setup_cli_from_source(self, runner: SSHRunner, branch: str) -> None:
        self.run_script(
            runner,
            "Setup CLI From Source",
            "setup_cli_from_source.sh.j2",
            {"cli_branch": branch, "cli_repo_url": self.settings.releases.cli_repo_url},
            self.settings.ssh.long_running_timeout,
        )

    def setup_devnet(self, runner: SSHRunner, node_dir: Path) -> None:
        runner.mkdirs(NODE_CONFIG_DIR, timeout=self.settings.ssh.script_timeout)
        for filename in (GENESIS_FILE, NODE_FILE):
            runner.put_file(node_dir / filename, posixpath.join(NODE_CONFIG_DIR, filename))
        self.run_script(
            runner,
            "Setup Devnet",
            "setup_devnet.sh.j2",
            {},
            self.settings.ssh.long_running_timeout,
        )

    # ------------------------- health -------------------------

    def check_bootstrapped(self, runner: SSHRunner) -> bool:
        resp = runner.post_local(
            "/ext/info",
            {"jsonrpc": "2.0", "id": 1, "method": "info.isBootstrapped", "params": {"chain": "X"}},
            timeout=self.settings.ssh.script_timeout,
        )
        return bool(resp.get("result", {}).get("isBootstrapped"))

    def subnet_sync_status(self, runner: SSHRunner, blockchain_id: str) -> str:
        resp = runner.post_local(
            "/ext/bc/P",
            {
                "jsonrpc": "2.0",
                "id": 1,
                "method": "platform.getBlockchainStatus",
                "params": {"blockchainID": blockchain_id},
            },
            timeout=self.settings.ssh.script_timeout,
        )
        return str(resp.get("result", {}).get("status", ""))
