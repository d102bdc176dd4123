# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/cloud/gcp.py

from __future__ import annotations

import json
import logging
import os
import subprocess
from typing import Any, Dict, List, Optional, Sequence

from valnode.cloud.interface import IngressRule, SecurityGroup
from valnode.config.models import CloudSettings
from valnode.errors import CloudError
from valnode.models.node import GCP_CLOUD_SERVICE

log = logging.getLogger("valnode")


def zone_region(zone: str) -> str:
    """us-east1-b -> us-east1"""
    return zone.rsplit("-", 1)[0]


class GcpProvider:
    """
    Compute Engine lookups for one zone through the `gcloud` CLI with JSON
    output. Key pairs live in the project's `ssh-keys` metadata and security
    groups are firewall rules.
    """

    cloud_service = GCP_CLOUD_SERVICE

    def __init__(
        self,
        zone: str,
        *,
        project: str,
        credentials_path: Optional[str] = None,
        settings: Optional[CloudSettings] = None,
        binary: str = "gcloud",
    ):
        self.region = zone
        self.project = project
        self.credentials_path = credentials_path
        self.settings = settings or CloudSettings()
        self.binary = binary

    def _run(self, args: List[str], *, allow_missing: bool = False) -> Optional[Any]:
        argv = [self.binary] + args + ["--project", self.project, "--format=json"]
        env = dict(os.environ)
        if self.credentials_path:
            env["CLOUDSDK_AUTH_CREDENTIAL_FILE_OVERRIDE"] = self.credentials_path
        log.debug("running %s", " ".join(argv))
        cp = subprocess.run(argv, capture_output=True, text=True, check=False, env=env)
        if cp.returncode != 0:
            if allow_missing and "was not found" in (cp.stderr or ""):
                return None
            raise CloudError(f"GCP[{self.region}] {' '.join(args[:3])} failed: {cp.stderr.strip()}")
        if not cp.stdout.strip():
            return None
        try:
            return json.loads(cp.stdout)
        except json.JSONDecodeError as exc:
            raise CloudError(f"GCP[{self.region}] unexpected gcloud output: {exc}") from exc

    def key_pair_exists(self, name: str) -> bool:
        info = self._run(["compute", "project-info", "describe"]) or {}
        items = info.get("commonInstanceMetadata", {}).get("items", [])
        for item in items:
            if item.get("key") != "ssh-keys":
                continue
            for line in item.get("value", "").splitlines():
                if line.strip().endswith(f" {name}"):
                    return True
        return False

    def find_security_group(self, name: str) -> Optional[SecurityGroup]:
        rule = self._run(["compute", "firewall-rules", "describe", name], allow_missing=True)
        if rule is None:
            return None
        ranges = rule.get("sourceRanges", [])
        rules: List[IngressRule] = []
        for allowed in rule.get("allowed", []):
            for port in allowed.get("ports", []):
                lo, _, hi = str(port).partition("-")
                rules.append(IngressRule(from_port=int(lo), to_port=int(hi or lo), cidrs=list(ranges)))
        return SecurityGroup(name=name, group_id=rule.get("selfLink", name), rules=rules)

    def get_ubuntu_image_id(self) -> str:
        image = self._run(
            [
                "compute", "images", "describe-from-family", self.settings.gcp_image_family,
                "--image-project", self.settings.gcp_image_project,
            ]
        )
        if not image or not image.get("selfLink"):
            raise CloudError(f"GCP no image found in family {self.settings.gcp_image_family}")
        return image["selfLink"]

    def stop_instance(self, instance_id: str) -> None:
        self._run(["compute", "instances", "stop", instance_id, "--zone", self.region])

    def instance_public_ips(self, instance_ids: Sequence[str]) -> Dict[str, str]:
        ips: Dict[str, str] = {}
        for instance_id in instance_ids:
            inst = self._run(["compute", "instances", "describe", instance_id, "--zone", self.region]) or {}
            for nic in inst.get("networkInterfaces", []):
                for cfg in nic.get("accessConfigs", []):
                    if cfg.get("natIP"):
                        ips[instance_id] = cfg["natIP"]
        return ips

    def check_eip_quota(self, count: int) -> None:
        region = self._run(["compute", "regions", "describe", zone_region(self.region)]) or {}
        for quota in region.get("quotas", []):
            if quota.get("metric") != "STATIC_ADDRESSES":
                continue
            available = int(quota.get("limit", 0)) - int(quota.get("usage", 0))
            if count > available:
                raise CloudError(
                    f"GCP[{self.region}] static address quota exceeded: {count} requested, {available} available"
                )
