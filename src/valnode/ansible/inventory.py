# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/ansible/inventory.py

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Iterable, List

from valnode.errors import AnsibleError
from valnode.models.node import Host

log = logging.getLogger("valnode")

INVENTORY_FILE = "hosts"
SSH_COMMON_ARGS = "-o IdentitiesOnly=yes -o StrictHostKeyChecking=no"


def inventory_file(inventory_dir: Path) -> Path:
    return Path(inventory_dir) / INVENTORY_FILE


def _line(host: Host) -> str:
    parts = [
        host.node_id,
        f"ansible_host={host.ip}",
        f"ansible_user={host.ssh_user}",
    ]
    if host.ssh_private_key_path:
        parts.append(f"ansible_ssh_private_key_file={host.ssh_private_key_path}")
    if host.port != 22:
        parts.append(f"ansible_port={host.port}")
    parts.append(f"ansible_ssh_common_args='{SSH_COMMON_ARGS}'")
    return " ".join(parts)


def write_inventory(inventory_dir: Path, hosts: Iterable[Host], *, append: bool = True) -> Path:
    """
    Write one INI line per host. Existing aliases are replaced so that
    re-running create against a cluster keeps a single entry per instance.
    """
    path = inventory_file(inventory_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    current = {h.node_id: h for h in read_hosts(inventory_dir)} if append and path.is_file() else {}
    for host in hosts:
        current[host.node_id] = host

    path.write_text("".join(_line(h) + "\n" for h in current.values()))
    log.debug("wrote ansible inventory with %d host(s) to %s", len(current), path)
    return path


def read_hosts(inventory_dir: Path) -> List[Host]:
    path = inventory_file(inventory_dir)
    if not path.is_file():
        raise AnsibleError(f"inventory {path} does not exist")

    hosts: List[Host] = []
    for lineno, raw in enumerate(path.read_text().splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith(("#", ";", "[")):
            continue
        tokens = shlex.split(line)
        alias, attrs = tokens[0], {}
        for token in tokens[1:]:
            key, sep, value = token.partition("=")
            if not sep:
                raise AnsibleError(f"{path}:{lineno}: malformed host variable {token!r}")
            attrs[key] = value
        if "ansible_host" not in attrs:
            raise AnsibleError(f"{path}:{lineno}: host {alias} has no ansible_host")
        hosts.append(
            Host(
                node_id=alias,
                ip=attrs["ansible_host"],
                ssh_user=attrs.get("ansible_user", "ubuntu"),
                ssh_private_key_path=attrs.get("ansible_ssh_private_key_file"),
                port=int(attrs.get("ansible_port", 22)),
            )
        )
    return hosts


def host_aliases(inventory_dir: Path) -> List[str]:
    return [h.node_id for h in read_hosts(inventory_dir)]
