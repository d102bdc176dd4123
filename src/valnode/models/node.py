# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/models/node.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

AWS_CLOUD_SERVICE = "aws"
GCP_CLOUD_SERVICE = "gcp"

ANSIBLE_HOST_PREFIX = {
    AWS_CLOUD_SERVICE: "aws_node_",
    GCP_CLOUD_SERVICE: "gcp_node_",
}


class NodeRole(str, Enum):
    VALIDATOR = "validator"
    API = "api"
    MONITOR = "monitor"
    AWM_RELAYER = "awm-relayer"
    LOAD_TEST = "loadtest"


def parse_roles(raw: Iterable[str]) -> List[NodeRole]:
    roles: List[NodeRole] = []
    for r in raw:
        r = r.strip().lower()
        if not r:
            continue
        try:
            role = NodeRole(r)
        except ValueError:
            raise ValueError(f"unsupported role {r!r}")
        if role not in roles:
            roles.append(role)
    return roles


class NodeConfig(BaseModel):
    """Everything we know about one cloud instance, persisted per instance."""

    node_id: str                       # cloud instance id
    region: str
    ami: str = ""                      # image id used to boot the instance
    key_pair: str = ""
    cert_path: str = ""                # local private key for the key pair
    security_group: str = ""
    elastic_ip: str = ""               # public ip
    cloud_service: str = AWS_CLOUD_SERVICE
    use_static_ip: bool = False
    roles: List[NodeRole] = Field(default_factory=list)

    def add_role(self, role: NodeRole) -> None:
        if role not in self.roles:
            self.roles.append(role)

    def is_validator(self) -> bool:
        return NodeRole.VALIDATOR in self.roles

    def is_api(self) -> bool:
        return NodeRole.API in self.roles


def host_alias(cloud_service: str, instance_id: str) -> str:
    return ANSIBLE_HOST_PREFIX.get(cloud_service, f"{cloud_service}_node_") + instance_id


def cloud_id_from_alias(alias: str) -> str:
    for prefix in ANSIBLE_HOST_PREFIX.values():
        if alias.startswith(prefix):
            return alias[len(prefix):]
    return alias


@dataclass
class Host:
    """Connection parameters for one fleet member."""

    node_id: str                  # inventory alias, e.g. aws_node_i-0abc
    ip: str
    ssh_user: str = "ubuntu"
    ssh_private_key_path: Optional[str] = None
    port: int = 22

    def get_cloud_id(self) -> str:
        return cloud_id_from_alias(self.node_id)
