# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/ansible/playbooks.py

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, Optional

import ansible_runner

from valnode.errors import AnsibleError

log = logging.getLogger("valnode")

PLAYBOOKS_DIR = Path(__file__).resolve().parent / "playbooks"

EXPORT_SUBNET_PLAYBOOK = "export_subnet.yml"
DEPLOY_SUBNET_PLAYBOOK = "deploy_subnet.yml"


class PlaybookRunner:
    """
    Runs the bundled playbooks against a cluster inventory with
    ansible-runner. The playbooks are copied into the cluster's ansible
    directory, which doubles as ansible-runner's private data dir.
    """

    def __init__(self, ansible_dir: Path, inventory_dir: Path):
        self.ansible_dir = Path(ansible_dir)
        self.inventory_dir = Path(inventory_dir)

    def _stage(self) -> Path:
        project = self.ansible_dir / "project"
        project.mkdir(parents=True, exist_ok=True)
        for playbook in PLAYBOOKS_DIR.glob("*.yml"):
            shutil.copy2(playbook, project / playbook.name)
        return project

    def run(self, playbook: str, *, limit: Optional[str] = None, extra_vars: Optional[Dict[str, Any]] = None) -> str:
        self._stage()
        env = os.environ.copy()
        env["ANSIBLE_HOST_KEY_CHECKING"] = "False"

        log.info("Running playbook: %s", playbook)
        log.debug("Inventory: %s limit=%s vars=%s", self.inventory_dir, limit, extra_vars)

        r = ansible_runner.run(
            private_data_dir=str(self.ansible_dir),
            playbook=playbook,
            inventory=str(self.inventory_dir),
            limit=limit,
            extravars=extra_vars or {},
            envvars=env,
            quiet=True,
        )

        if r.rc != 0:
            raise AnsibleError(f"playbook {playbook} failed: {r.status} (rc={r.rc})")
        return r.status

    def export_subnet(self, subnet_export_path: str, remote_dir: str, host: str) -> str:
        return self.run(
            EXPORT_SUBNET_PLAYBOOK,
            limit=host,
            extra_vars={"subnet_export_path": subnet_export_path, "remote_dir": remote_dir},
        )

    def deploy_subnet(self, subnet_name: str, subnet_export_path: str, host: str) -> str:
        return self.run(
            DEPLOY_SUBNET_PLAYBOOK,
            limit=host,
            extra_vars={"subnet_name": subnet_name, "subnet_export_path": subnet_export_path},
        )
