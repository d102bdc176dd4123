# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/utils/ssh_runner.py

from __future__ import annotations

import io
import json
import shlex
from pathlib import Path
import paramiko
from typing import Any, Optional

from valnode.errors import SSHCommandError


class SSHRunner:
    def __init__(self, client: paramiko.SSHClient, *, name: str = ""):
        self.client = client
        self.name = name

    def run(
        self,
        cmd: str,
        *,
        sudo: bool = False,
        timeout: Optional[float] = None,
    ) -> tuple[int, str, str]:
        if sudo:
            cmd = f"sudo -H -E bash -c {shlex.quote(cmd)}"

        stdin, stdout, stderr = self.client.exec_command(cmd, timeout=timeout)
        out = stdout.read().decode()
        err = stderr.read().decode()
        rc = stdout.channel.recv_exit_status()
        return rc, out, err

    def check(self, cmd: str, *, sudo: bool = False, timeout: Optional[float] = None) -> str:
        """Run `cmd`, raising SSHCommandError on a non-zero exit."""
        rc, out, err = self.run(cmd, sudo=sudo, timeout=timeout)
        if rc != 0:
            raise SSHCommandError(
                f"[{self.name}] command failed (rc={rc}): {cmd.splitlines()[0] if cmd else cmd}\n{err or out}"
            )
        return out

    def mkdirs(self, remote_dir: str, *, timeout: Optional[float] = None) -> None:
        self.check(f"mkdir -p {shlex.quote(remote_dir)}", timeout=timeout)

    def remove(self, remote_path: str, *, recursive: bool = False) -> None:
        flag = "-rf" if recursive else "-f"
        self.check(f"rm {flag} {shlex.quote(remote_path)}")

    def put_bytes(self, content: bytes, remote_path: str) -> None:
        sftp = self.client.open_sftp()
        try:
            sftp.putfo(io.BytesIO(content), remote_path)
        finally:
            sftp.close()

    def put_text(self, content: str, remote_path: str) -> None:
        self.put_bytes(content.encode(), remote_path)

    def put_file(self, local_path: str | Path, remote_path: str) -> None:
        sftp = self.client.open_sftp()
        try:
            sftp.put(str(local_path), str(remote_path))
        finally:
            sftp.close()

    def get_file(self, remote_path: str, local_path: str | Path) -> None:
        Path(local_path).parent.mkdir(parents=True, exist_ok=True)
        sftp = self.client.open_sftp()
        try:
            sftp.get(str(remote_path), str(local_path))
        finally:
            sftp.close()

    def post_local(
        self,
        path: str,
        body: dict[str, Any],
        *,
        port: int = 9650,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """POST a JSON-RPC body to the node API listening on the host's loopback."""
        payload = shlex.quote(json.dumps(body))
        out = self.check(
            f"curl -s -X POST -H 'content-type:application/json' --data {payload} "
            f"http://127.0.0.1:{port}{path}",
            timeout=timeout,
        )
        try:
            return json.loads(out)
        except json.JSONDecodeError as exc:
            raise SSHCommandError(f"[{self.name}] unexpected API response from {path}: {out!r}") from exc

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "SSHRunner":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
