# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/cloud/aws.py

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from valnode.cloud.interface import IngressRule, SecurityGroup
from valnode.config.models import CloudSettings
from valnode.errors import CloudError
from valnode.models.node import AWS_CLOUD_SERVICE

log = logging.getLogger("valnode")

DEFAULT_PROFILE = "default"
EIP_QUOTA_CODE = "L-0263D0A3"      # EC2-VPC Elastic IPs
DEFAULT_EIP_QUOTA = 5

NO_CREDENTIALS_HINT = (
    "No AWS credentials found in ~/.aws/credentials or in AWS_ACCESS_KEY_ID / "
    "AWS_SECRET_ACCESS_KEY. Make sure the [{profile}] section is set."
)


class AwsProvider:
    """EC2 lookups for a single region, backed by a boto3 session."""

    cloud_service = AWS_CLOUD_SERVICE

    def __init__(
        self,
        region: str,
        *,
        profile: str = DEFAULT_PROFILE,
        settings: Optional[CloudSettings] = None,
        session: Optional[boto3.Session] = None,
    ):
        self.region = region
        self.profile = profile
        self.settings = settings or CloudSettings()
        if session is None:
            try:
                session = boto3.Session(profile_name=profile, region_name=region)
            except BotoCoreError as exc:
                raise CloudError(NO_CREDENTIALS_HINT.format(profile=profile)) from exc
        self.session = session
        self.ec2 = session.client("ec2", region_name=region)

    def _fail(self, action: str, exc: Exception) -> CloudError:
        return CloudError(f"AWS[{self.region}] {action} failed: {exc}")

    # ------------------------- key pairs -------------------------

    def key_pair_exists(self, name: str) -> bool:
        try:
            self.ec2.describe_key_pairs(KeyNames=[name])
        except ClientError as exc:
            if exc.response["Error"]["Code"] == "InvalidKeyPair.NotFound":
                return False
            raise self._fail(f"describe key pair {name}", exc) from exc
        return True

    # ------------------------- security groups -------------------------

    def find_security_group(self, name: str) -> Optional[SecurityGroup]:
        try:
            response = self.ec2.describe_security_groups(
                Filters=[{"Name": "group-name", "Values": [name]}]
            )
        except ClientError as exc:
            raise self._fail(f"describe security group {name}", exc) from exc
        groups = response.get("SecurityGroups", [])
        if not groups:
            return None
        sg = groups[0]
        rules: List[IngressRule] = []
        for perm in sg.get("IpPermissions", []):
            if "FromPort" not in perm:
                continue
            rules.append(
                IngressRule(
                    from_port=perm["FromPort"],
                    to_port=perm["ToPort"],
                    cidrs=[r["CidrIp"] for r in perm.get("IpRanges", []) if "CidrIp" in r],
                )
            )
        return SecurityGroup(name=name, group_id=sg["GroupId"], rules=rules)

    # ------------------------- images -------------------------

    def get_ubuntu_image_id(self) -> str:
        try:
            response = self.ec2.describe_images(
                Filters=[
                    {"Name": "name", "Values": [self.settings.aws_ami_name_filter]},
                    {"Name": "state", "Values": ["available"]},
                    {"Name": "architecture", "Values": ["x86_64"]},
                ],
                Owners=[self.settings.aws_ami_owner],
            )
        except ClientError as exc:
            if "RequestExpired" in str(exc):
                raise CloudError(
                    f"AWS credentials expired; refresh the [{self.profile}] profile or the AWS_* environment"
                ) from exc
            raise self._fail("describe images", exc) from exc

        images = sorted(response.get("Images", []), key=lambda x: x["CreationDate"], reverse=True)
        if not images:
            raise CloudError(f"AWS[{self.region}] no Ubuntu AMI matches {self.settings.aws_ami_name_filter!r}")
        return images[0]["ImageId"]

    # ------------------------- instances -------------------------

    def stop_instance(self, instance_id: str) -> None:
        try:
            self.ec2.stop_instances(InstanceIds=[instance_id])
        except ClientError as exc:
            raise self._fail(f"stop instance {instance_id}", exc) from exc

    def instance_public_ips(self, instance_ids: Sequence[str]) -> Dict[str, str]:
        if not instance_ids:
            return {}
        try:
            response = self.ec2.describe_instances(InstanceIds=list(instance_ids))
        except ClientError as exc:
            raise self._fail("describe instances", exc) from exc
        ips: Dict[str, str] = {}
        for reservation in response.get("Reservations", []):
            for inst in reservation.get("Instances", []):
                if inst.get("PublicIpAddress"):
                    ips[inst["InstanceId"]] = inst["PublicIpAddress"]
        return ips

    def check_eip_quota(self, count: int) -> None:
        try:
            in_use = len(self.ec2.describe_addresses().get("Addresses", []))
        except ClientError as exc:
            raise self._fail("describe addresses", exc) from exc
        try:
            quotas = self.session.client("service-quotas", region_name=self.region)
            limit = int(quotas.get_service_quota(ServiceCode="ec2", QuotaCode=EIP_QUOTA_CODE)["Quota"]["Value"])
        except ClientError as exc:
            log.debug("AWS[%s] EIP quota lookup failed, assuming %d: %s", self.region, DEFAULT_EIP_QUOTA, exc)
            limit = DEFAULT_EIP_QUOTA
        if in_use + count > limit:
            raise CloudError(
                f"AWS[{self.region}] elastic IP quota exceeded: {in_use} in use, {count} requested, limit {limit}"
            )
