# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/terraform/spec.py

"""
Builders for the JSON-syntax terraform documents (main.tf.json) that create
validator instances. One block set per region/zone; resource names carry a
sanitized region suffix, outputs carry the raw region name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from valnode.cloud.interface import NODE_API_PORT, NODE_P2P_PORT, SSH_PORT, SecurityGroup
from valnode.cloud.gcp import zone_region

ANYWHERE = "0.0.0.0/0"


@dataclass
class RegionPlan:
    region: str
    count: int
    image_id: str
    instance_type: str
    key_pair_name: str
    cert_path: str
    create_key_pair: bool
    security_group_name: str
    security_group: Optional[SecurityGroup] = None     # existing group, None -> create
    use_static_ip: bool = True
    volume_size_gb: int = 1000
    ssh_public_key: str = ""                           # gcp, reused key pairs
    instance_prefix: str = ""                          # gcp instance names


def tf_name(region: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_]", "_", region)


def gcp_name(raw: str) -> str:
    return re.sub(r"[^a-z0-9-]", "-", raw.lower()).strip("-")


def ids_output(region: str) -> str:
    return f"instance_ids_{region}"


def ips_output(region: str) -> str:
    return f"instance_ips_{region}"


def regions_output(region: str) -> str:
    return f"instance_regions_{region}"


def missing_operator_ports(sg: SecurityGroup, operator_ip: str) -> List[int]:
    """Operator-only ports the existing group does not open to `operator_ip`."""
    return [port for port in (SSH_PORT, NODE_API_PORT) if not sg.allows(operator_ip, port)]


def _merge(doc: Dict[str, Any], kind: str, type_: str, name: str, body: Dict[str, Any]) -> None:
    doc.setdefault(kind, {}).setdefault(type_, {})[name] = body


def _key_pair_resources(doc: Dict[str, Any], plan: RegionPlan) -> None:
    r = tf_name(plan.region)
    _merge(doc, "resource", "tls_private_key", f"pk_{r}", {"algorithm": "RSA", "rsa_bits": 4096})
    _merge(
        doc,
        "resource",
        "local_file",
        f"tf_key_{r}",
        {
            "filename": plan.cert_path,
            "content": f"${{tls_private_key.pk_{r}.private_key_pem}}",
            "file_permission": "0600",
        },
    )


# ---------------------------------------------------------------------
# AWS
# ---------------------------------------------------------------------
def _aws_rule(port: int, cidr: str, description: str) -> Dict[str, Any]:
    return {
        "description": description,
        "from_port": port,
        "to_port": port,
        "protocol": "tcp",
        "cidr_blocks": [cidr],
        "ipv6_cidr_blocks": [],
        "prefix_list_ids": [],
        "security_groups": [],
        "self": False,
    }


def _aws_region(doc: Dict[str, Any], plan: RegionPlan, operator_ip: str) -> None:
    r = tf_name(plan.region)
    provider = f"aws.{r}"
    operator_cidr = f"{operator_ip}/32"
    depends_on: List[str] = []

    if plan.create_key_pair:
        _key_pair_resources(doc, plan)
        _merge(
            doc,
            "resource",
            "aws_key_pair",
            f"kp_{r}",
            {
                "provider": provider,
                "key_name": plan.key_pair_name,
                "public_key": f"${{tls_private_key.pk_{r}.public_key_openssh}}",
            },
        )
        key_name = f"${{aws_key_pair.kp_{r}.key_name}}"
    else:
        key_name = plan.key_pair_name

    if plan.security_group is None:
        _merge(
            doc,
            "resource",
            "aws_security_group",
            f"sg_{r}",
            {
                "provider": provider,
                "name": plan.security_group_name,
                "description": "validator node access",
                "ingress": [
                    _aws_rule(SSH_PORT, operator_cidr, "ssh"),
                    _aws_rule(NODE_API_PORT, operator_cidr, "node api"),
                    _aws_rule(NODE_API_PORT, ANYWHERE, "node api"),
                    _aws_rule(NODE_P2P_PORT, ANYWHERE, "node p2p"),
                ],
                "egress": [
                    {
                        "description": "all",
                        "from_port": 0,
                        "to_port": 0,
                        "protocol": "-1",
                        "cidr_blocks": [ANYWHERE],
                        "ipv6_cidr_blocks": [],
                        "prefix_list_ids": [],
                        "security_groups": [],
                        "self": False,
                    }
                ],
            },
        )
        depends_on.append(f"aws_security_group.sg_{r}")
    else:
        for port in missing_operator_ports(plan.security_group, operator_ip):
            _merge(
                doc,
                "resource",
                "aws_security_group_rule",
                f"sg_rule_{r}_{port}",
                {
                    "provider": provider,
                    "type": "ingress",
                    "from_port": port,
                    "to_port": port,
                    "protocol": "tcp",
                    "cidr_blocks": [operator_cidr],
                    "security_group_id": plan.security_group.group_id,
                },
            )

    instance: Dict[str, Any] = {
        "provider": provider,
        "count": plan.count,
        "ami": plan.image_id,
        "instance_type": plan.instance_type,
        "key_name": key_name,
        "security_groups": [plan.security_group_name],
        "root_block_device": {"volume_size": plan.volume_size_gb},
        "tags": {"Name": f"{plan.key_pair_name}-node"},
    }
    if depends_on:
        instance["depends_on"] = depends_on
    _merge(doc, "resource", "aws_instance", f"instance_{r}", instance)

    _merge(doc, "output", ids_output(plan.region), "value", f"${{aws_instance.instance_{r}[*].id}}")
    _merge(doc, "output", regions_output(plan.region), "value", f"${{aws_instance.instance_{r}[*].availability_zone}}")

    if plan.use_static_ip:
        _merge(doc, "resource", "aws_eip", f"eip_{r}", {"provider": provider, "count": plan.count, "domain": "vpc"})
        _merge(
            doc,
            "resource",
            "aws_eip_association",
            f"eip_assoc_{r}",
            {
                "provider": provider,
                "count": plan.count,
                "instance_id": f"${{aws_instance.instance_{r}[count.index].id}}",
                "allocation_id": f"${{aws_eip.eip_{r}[count.index].id}}",
            },
        )
        _merge(doc, "output", ips_output(plan.region), "value", f"${{aws_eip.eip_{r}[*].public_ip}}")


def build_aws_spec(plans: List[RegionPlan], operator_ip: str, *, profile: str = "default") -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        "terraform": {
            "required_providers": {
                "aws": {"source": "hashicorp/aws"},
                "tls": {"source": "hashicorp/tls"},
                "local": {"source": "hashicorp/local"},
            }
        },
        "provider": {
            "aws": [{"alias": tf_name(p.region), "region": p.region, "profile": profile} for p in plans]
        },
    }
    for plan in plans:
        _aws_region(doc, plan, operator_ip)
    return doc


# ---------------------------------------------------------------------
# GCP
# ---------------------------------------------------------------------
def _gcp_firewall(name: str, ports: List[int], cidr: str) -> Dict[str, Any]:
    return {
        "name": name,
        "network": "default",
        "direction": "INGRESS",
        "allow": [{"protocol": "tcp", "ports": [str(p) for p in ports]}],
        "source_ranges": [cidr],
    }


def _gcp_zone(doc: Dict[str, Any], plan: RegionPlan, operator_ip: str) -> None:
    r = tf_name(plan.region)
    operator_cidr = f"{operator_ip}/32"
    depends_on: List[str] = []

    if plan.create_key_pair:
        _key_pair_resources(doc, plan)
        ssh_key = f"ubuntu:${{trimspace(tls_private_key.pk_{r}.public_key_openssh)}} {plan.key_pair_name}"
    else:
        ssh_key = f"ubuntu:{plan.ssh_public_key.strip()} {plan.key_pair_name}"

    sg_name = gcp_name(plan.security_group_name)
    if plan.security_group is None:
        _merge(doc, "resource", "google_compute_firewall", f"fw_{r}",
               _gcp_firewall(sg_name, [SSH_PORT, NODE_API_PORT], operator_cidr))
        _merge(doc, "resource", "google_compute_firewall", f"fw_p2p_{r}",
               _gcp_firewall(f"{sg_name}-p2p", [NODE_P2P_PORT, NODE_API_PORT], ANYWHERE))
        depends_on += [f"google_compute_firewall.fw_{r}", f"google_compute_firewall.fw_p2p_{r}"]
    else:
        missing = missing_operator_ports(plan.security_group, operator_ip)
        if missing:
            _merge(doc, "resource", "google_compute_firewall", f"fw_operator_{r}",
                   _gcp_firewall(gcp_name(f"{sg_name}-{operator_ip}"), missing, operator_cidr))

    prefix = gcp_name(plan.instance_prefix or f"{plan.key_pair_name}-{plan.region}")
    access_config: Dict[str, Any] = {}
    if plan.use_static_ip:
        _merge(
            doc,
            "resource",
            "google_compute_address",
            f"ip_{r}",
            {"count": plan.count, "name": f"{prefix}-ip-${{count.index}}", "region": zone_region(plan.region)},
        )
        access_config = {"nat_ip": f"${{google_compute_address.ip_{r}[count.index].address}}"}

    instance: Dict[str, Any] = {
        "count": plan.count,
        "name": f"{prefix}-${{count.index}}",
        "machine_type": plan.instance_type,
        "zone": plan.region,
        "boot_disk": {"initialize_params": {"image": plan.image_id, "size": plan.volume_size_gb}},
        "network_interface": {"network": "default", "access_config": access_config},
        "metadata": {"ssh-keys": ssh_key},
    }
    if depends_on:
        instance["depends_on"] = depends_on
    _merge(doc, "resource", "google_compute_instance", f"instance_{r}", instance)

    _merge(doc, "output", ids_output(plan.region), "value", f"${{google_compute_instance.instance_{r}[*].name}}")
    _merge(doc, "output", regions_output(plan.region), "value", f"${{google_compute_instance.instance_{r}[*].zone}}")
    _merge(
        doc,
        "output",
        ips_output(plan.region),
        "value",
        f"${{google_compute_instance.instance_{r}[*].network_interface[0].access_config[0].nat_ip}}",
    )


def build_gcp_spec(
    plans: List[RegionPlan],
    operator_ip: str,
    *,
    project: str,
    credentials_path: Optional[str] = None,
) -> Dict[str, Any]:
    provider: Dict[str, Any] = {"project": project}
    if credentials_path:
        provider["credentials"] = f'${{file("{credentials_path}")}}'
    doc: Dict[str, Any] = {
        "terraform": {
            "required_providers": {
                "google": {"source": "hashicorp/google"},
                "tls": {"source": "hashicorp/tls"},
                "local": {"source": "hashicorp/local"},
            }
        },
        "provider": {"google": provider},
    }
    for plan in plans:
        _gcp_zone(doc, plan, operator_ip)
    return doc
