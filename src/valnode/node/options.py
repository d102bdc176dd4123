# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/node/options.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from valnode.cloud.aws import DEFAULT_PROFILE
from valnode.config.models import CloudSettings
from valnode.errors import ConfigurationError, FlagConflict, RegionNodeCountMismatch
from valnode.models.node import AWS_CLOUD_SERVICE, GCP_CLOUD_SERVICE

DEFAULT_NODE_TYPE = "default"


@dataclass
class CreateOptions:
    """Flags of `node create`, built once by the CLI layer."""

    cluster_name: str
    use_aws: bool = False
    use_gcp: bool = False
    regions: List[str] = field(default_factory=list)
    num_nodes: List[int] = field(default_factory=list)
    node_type: str = DEFAULT_NODE_TYPE
    use_static_ip: bool = True
    authorize_access: bool = False
    use_fuji: bool = False
    use_devnet: bool = False
    latest_avalanchego_version: bool = False
    avalanchego_version_from_subnet: str = ""
    aws_profile: str = DEFAULT_PROFILE
    gcp_project: str = ""
    gcp_credentials: str = ""
    alternative_key_pair_name: str = ""
    username: str = ""


@dataclass
class StatusOptions:
    cluster_name: str
    subnet_name: str = ""


@dataclass
class DeployOptions:
    cluster_name: str
    subnet_name: str


def check_create_options(opts: CreateOptions) -> None:
    """Flag validation; runs before any cloud or infra call."""
    if opts.latest_avalanchego_version and opts.avalanchego_version_from_subnet:
        raise FlagConflict(
            "could not use both latest avalanchego version and avalanchego version based on given subnet"
        )
    if opts.use_aws and opts.use_gcp:
        raise FlagConflict("could not use both AWS and GCP cloud options")
    if opts.use_fuji and opts.use_devnet:
        raise FlagConflict("could not use both fuji and devnet network options")
    if not opts.use_aws and opts.aws_profile != DEFAULT_PROFILE:
        raise FlagConflict("could not use AWS profile for non AWS cloud option")
    if opts.use_aws and opts.gcp_credentials:
        raise FlagConflict("set to use GCP credentials but cloud option is not GCP")
    if opts.use_aws and opts.gcp_project:
        raise FlagConflict("set to use GCP project but cloud option is not GCP")
    check_region_counts(opts.regions, opts.num_nodes)


def check_region_counts(regions: List[str], num_nodes: List[int]) -> None:
    if len(regions) != len(num_nodes):
        raise RegionNodeCountMismatch("number of regions and number of nodes must be equal")
    if len(set(regions)) != len(regions):
        raise ConfigurationError("regions must not repeat")
    for n in num_nodes:
        if n <= 0:
            raise ConfigurationError(f"number of nodes must be positive, got {n}")


def check_cloud_flags(opts: CreateOptions, cloud: str) -> None:
    """Re-check cloud-scoped flags once the cloud is known (flag or prompt)."""
    if cloud != GCP_CLOUD_SERVICE and opts.gcp_credentials:
        raise FlagConflict("set to use GCP credentials but cloud option is not GCP")
    if cloud != GCP_CLOUD_SERVICE and opts.gcp_project:
        raise FlagConflict("set to use GCP project but cloud option is not GCP")
    if cloud != AWS_CLOUD_SERVICE and opts.aws_profile != DEFAULT_PROFILE:
        raise FlagConflict("could not use AWS profile for non AWS cloud option")


def resolve_instance_type(node_type: str, cloud: str, settings: Optional[CloudSettings] = None) -> str:
    settings = settings or CloudSettings()
    if node_type != DEFAULT_NODE_TYPE:
        return node_type
    if cloud == GCP_CLOUD_SERVICE:
        return settings.gcp_instance_type
    return settings.aws_instance_type


def parse_csv_ints(raw: str) -> List[int]:
    values: List[int] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            n = int(part)
        except ValueError:
            raise ValueError(f"{part!r} is not a number")
        if n <= 0:
            raise ValueError(f"{n} is not a positive number")
        values.append(n)
    if not values:
        raise ValueError("invalid input")
    return values


def parse_csv(raw: str) -> List[str]:
    return [p.strip() for p in raw.split(",") if p.strip()]


def validate_csv_ints(raw: str) -> str:
    parse_csv_ints(raw)
    return raw
