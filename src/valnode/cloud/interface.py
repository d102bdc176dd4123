# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/cloud/interface.py

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence

SSH_PORT = 22
NODE_API_PORT = 9650
NODE_P2P_PORT = 9651


@dataclass(frozen=True)
class IngressRule:
    from_port: int
    to_port: int
    cidrs: List[str] = field(default_factory=list)

    def covers(self, ip: str, port: int) -> bool:
        if not (self.from_port <= port <= self.to_port):
            return False
        addr = ipaddress.ip_address(ip)
        for cidr in self.cidrs:
            try:
                if addr in ipaddress.ip_network(cidr, strict=False):
                    return True
            except ValueError:
                continue
        return False


@dataclass
class SecurityGroup:
    """A provider firewall object (AWS security group, GCP firewall rule)."""

    name: str
    group_id: str
    rules: List[IngressRule] = field(default_factory=list)

    def allows(self, ip: str, port: int) -> bool:
        return any(rule.covers(ip, port) for rule in self.rules)


class CloudProvider(Protocol):
    """Read/stop operations on one region (AWS) or zone (GCP)."""

    cloud_service: str
    region: str

    def key_pair_exists(self, name: str) -> bool: ...

    def find_security_group(self, name: str) -> Optional[SecurityGroup]: ...

    def get_ubuntu_image_id(self) -> str: ...

    def stop_instance(self, instance_id: str) -> None: ...

    def instance_public_ips(self, instance_ids: Sequence[str]) -> Dict[str, str]: ...

    def check_eip_quota(self, count: int) -> None: ...
