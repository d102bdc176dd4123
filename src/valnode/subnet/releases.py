# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/subnet/releases.py

from __future__ import annotations

import logging
from typing import Any

import requests

from valnode.config.models import ReleaseSettings
from valnode.errors import ReleaseLookupError
from valnode.utils.versions import latest_version

log = logging.getLogger("valnode")


class ReleaseClient:
    """
    Release metadata from GitHub: latest tags and the RPC compatibility
    tables published by the node and EVM repositories.
    """

    def __init__(self, settings: ReleaseSettings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session or requests.Session()

    def _get_json(self, url: str) -> Any:
        log.debug("GET %s", url)
        try:
            resp = self.session.get(url, timeout=self.settings.request_timeout)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise ReleaseLookupError(f"failed to fetch {url}: {exc}") from exc

    def latest_release(self, repo: str) -> str:
        data = self._get_json(f"{self.settings.github_api}/repos/{repo}/releases/latest")
        tag = data.get("tag_name") if isinstance(data, dict) else None
        if not tag:
            raise ReleaseLookupError(f"no release found for {repo}")
        return tag

    def latest_pre_release(self, repo: str) -> str:
        data = self._get_json(f"{self.settings.github_api}/repos/{repo}/releases")
        if not isinstance(data, list) or not data:
            raise ReleaseLookupError(f"no releases found for {repo}")
        return data[0]["tag_name"]

    def evm_rpc_version(self, evm_version: str) -> int:
        data = self._get_json(self.settings.evm_compatibility_url)
        table = data.get("rpcChainVMProtocolVersion", {}) if isinstance(data, dict) else {}
        if evm_version not in table:
            raise ReleaseLookupError(f"no RPC version known for Subnet-EVM {evm_version}")
        return int(table[evm_version])

    def latest_node_version_for_rpc(self, rpc_version: int) -> str:
        data = self._get_json(self.settings.node_compatibility_url)
        versions = data.get(str(rpc_version), []) if isinstance(data, dict) else []
        latest = latest_version(versions)
        if latest is None:
            raise ReleaseLookupError(f"no node release supports RPC version {rpc_version}")
        return latest
