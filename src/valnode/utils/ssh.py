# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/utils/ssh.py

from __future__ import annotations

from typing import Callable, Optional

import paramiko

from valnode.models.node import Host
from valnode.utils.ssh_runner import SSHRunner

# connector(host, *, connect_timeout=None) -> SSHRunner
Connector = Callable[..., SSHRunner]


def _load_pkey(path: str):
    for key_cls in (
        paramiko.RSAKey,
        paramiko.Ed25519Key,
        paramiko.ECDSAKey,
    ):
        try:
            return key_cls.from_private_key_file(path)
        except paramiko.SSHException:
            continue
    return None


def open_ssh(
    host: Host,
    *,
    connect_timeout: float = 20.0,
) -> SSHRunner:
    client = paramiko.SSHClient()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    pkey = _load_pkey(host.ssh_private_key_path) if host.ssh_private_key_path else None

    client.connect(
        hostname=host.ip,
        port=host.port,
        username=host.ssh_user,
        pkey=pkey,
        timeout=connect_timeout,
        banner_timeout=connect_timeout,
        allow_agent=pkey is None,
        look_for_keys=pkey is None,
    )

    return SSHRunner(client, name=host.node_id)


def make_connector(default_timeout: float) -> Connector:
    def _connect(host: Host, *, connect_timeout: Optional[float] = None) -> SSHRunner:
        limit = default_timeout if connect_timeout is None else min(default_timeout, connect_timeout)
        return open_ssh(host, connect_timeout=limit)
    return _connect


def public_key_openssh(private_key_path: str) -> str:
    """`<type> <base64>` line for the public half of a local private key."""
    pkey = _load_pkey(private_key_path)
    if pkey is None:
        raise ValueError(f"unable to load private key {private_key_path}")
    return f"{pkey.get_name()} {pkey.get_base64()}"
