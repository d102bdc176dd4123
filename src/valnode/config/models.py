# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/config/models.py

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


def _default_base_dir() -> Path:
    return Path.home() / ".valnode"


class SSHSettings(BaseModel):
    user: str = "ubuntu"
    connect_timeout: float = 20.0
    script_timeout: int = 120
    long_running_timeout: int = 600
    wait_timeout: int = 120          # per host, reachability waiter
    wait_delay: float = 5.0


class CloudSettings(BaseModel):
    aws_instance_type: str = "c5.2xlarge"
    gcp_instance_type: str = "e2-standard-8"
    aws_ami_owner: str = "099720109477"      # Canonical
    aws_ami_name_filter: str = "ubuntu/images/hvm-ssd/ubuntu-jammy-22.04-amd64-server-*"
    gcp_image_project: str = "ubuntu-os-cloud"
    gcp_image_family: str = "ubuntu-2204-lts"
    volume_size_gb: int = 1000
    ip_lookup_url: str = "https://api.ipify.org?format=json"


class ReleaseSettings(BaseModel):
    github_api: str = "https://api.github.com"
    node_repo: str = "ava-labs/avalanchego"
    evm_repo: str = "ava-labs/subnet-evm"
    teleporter_repo: str = "ava-labs/teleporter"
    cli_repo_url: str = "https://github.com/ava-labs/avalanche-cli"
    cli_branch: str = "main"
    node_compatibility_url: str = (
        "https://raw.githubusercontent.com/ava-labs/avalanchego/master/version/compatibility.json"
    )
    evm_compatibility_url: str = (
        "https://raw.githubusercontent.com/ava-labs/subnet-evm/master/compatibility.json"
    )
    request_timeout: float = 15.0


class AppSettings(BaseModel):
    base_dir: Path = Field(default_factory=_default_base_dir)
    ssh: SSHSettings = Field(default_factory=SSHSettings)
    cloud: CloudSettings = Field(default_factory=CloudSettings)
    releases: ReleaseSettings = Field(default_factory=ReleaseSettings)
