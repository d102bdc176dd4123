# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/node/provision.py

from __future__ import annotations

import logging
import shutil
import threading
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from valnode.ansible.inventory import write_inventory
from valnode.cloud.aws import AwsProvider
from valnode.cloud.gcp import GcpProvider
from valnode.cloud.interface import CloudProvider
from valnode.config.models import AppSettings
from valnode.core.results import run_parallel
from valnode.errors import CloudError, ProvisionError, TerraformError
from valnode.models.network import Network
from valnode.models.node import AWS_CLOUD_SERVICE, GCP_CLOUD_SERVICE, Host, NodeConfig, host_alias
from valnode.node.options import check_region_counts
from valnode.observers.dispatcher import EventBus
from valnode.observers.events import (
    InstancesCreated,
    KeyPairResolved,
    ProvisionStarted,
    SecurityGroupResolved,
    TeardownResult,
    new_ctx,
)
from valnode.prompts.prompter import Prompter
from valnode.prompts.validators import validate_non_empty
from valnode.store.app_store import AppStore
from valnode.terraform.runner import EIPLimitError, TerraformCliRunner
from valnode.terraform.spec import (
    RegionPlan,
    build_aws_spec,
    build_gcp_spec,
    ids_output,
    ips_output,
)
from valnode.utils.ssh import public_key_openssh

log = logging.getLogger("valnode")

NAME_SUFFIX = "valnode"
CERT_SUFFIX = "-kp.pem"
SECURITY_GROUP_SUFFIX = "-sg"

ProviderFactory = Callable[[str], CloudProvider]
TerraformFactory = Callable[[Path], TerraformCliRunner]


@dataclass
class ProvisionRequest:
    cluster_name: str
    cloud: str
    network: Network
    regions: List[str]
    num_nodes: List[int]
    instance_type: str
    username: str
    use_static_ip: bool = True
    aws_profile: str = "default"
    gcp_project: str = ""
    gcp_credentials: str = ""
    alternative_key_pair_name: str = ""


@dataclass
class RegionResult:
    region: str
    instance_ids: List[str]
    public_ips: List[str]
    key_pair: str
    cert_path: str
    security_group: str
    image_id: str


@dataclass
class ProvisionResult:
    cloud: str
    regions: Dict[str, RegionResult] = field(default_factory=dict)

    def instance_ids(self) -> List[str]:
        return [i for r in self.regions.values() for i in r.instance_ids]

    def public_ip_map(self) -> Dict[str, str]:
        return {i: ip for r in self.regions.values() for i, ip in zip(r.instance_ids, r.public_ips)}

    def hosts(self, ssh_user: str) -> List[Host]:
        ips = self.public_ip_map()
        return [
            Host(
                node_id=host_alias(self.cloud, instance_id),
                ip=ips.get(instance_id, ""),
                ssh_user=ssh_user,
                ssh_private_key_path=r.cert_path,
            )
            for r in self.regions.values()
            for instance_id in r.instance_ids
        ]


def resource_prefix(username: str, region: str) -> str:
    return f"{username}-{region}-{NAME_SUFFIX}"


class ProvisionOrchestrator:
    """
    Creates the instances of one cluster: resolves key pairs and security
    groups per region, applies one terraform spec for all regions, tears
    down whatever the apply started when it fails, and records the result.
    """

    def __init__(
        self,
        store: AppStore,
        settings: AppSettings,
        provider_factory: ProviderFactory,
        ip_lookup: Callable[[], str],
        prompter: Prompter,
        *,
        terraform_factory: TerraformFactory = TerraformCliRunner,
        bus: Optional[EventBus] = None,
        run_id: Optional[str] = None,
    ):
        self.store = store
        self.settings = settings
        self.provider_factory = provider_factory
        self.terraform_factory = terraform_factory
        self.ip_lookup = ip_lookup
        self.prompter = prompter
        self.bus = bus or EventBus()
        self.run_id = run_id
        # rename prompts may come from several region tasks at once
        self._prompt_lock = threading.Lock()

    # ------------------------- public -------------------------

    def provision(self, req: ProvisionRequest) -> ProvisionResult:
        check_region_counts(req.regions, req.num_nodes)
        ctx = new_ctx(env=req.network.kind.value, context=req.cluster_name, run_id=self.run_id)
        self.bus.emit(ProvisionStarted(cloud=req.cloud, regions=list(req.regions), counts=list(req.num_nodes), **ctx))

        operator_ip = self.ip_lookup()
        providers: Dict[str, CloudProvider] = {r: self.provider_factory(r) for r in req.regions}
        counts = dict(zip(req.regions, req.num_nodes))

        planned = run_parallel(
            req.regions,
            lambda region: self._plan_region(req, providers[region], counts[region], operator_ip, ctx),
        )
        failures = planned.error_hosts()
        if failures:
            detail = "; ".join(f"{region}: {err}" for region, err in sorted(failures.items(), key=lambda kv: kv[0]))
            raise CloudError(f"failed to prepare region(s): {detail}")
        plans = [planned.get(region).value for region in req.regions]

        if req.cloud == GCP_CLOUD_SERVICE:
            spec = build_gcp_spec(
                plans, operator_ip, project=req.gcp_project, credentials_path=req.gcp_credentials or None
            )
        else:
            spec = build_aws_spec(plans, operator_ip, profile=req.aws_profile)

        workdir = self.store.terraform_dir(req.cluster_name)
        # every run starts from an empty terraform state
        shutil.rmtree(workdir, ignore_errors=True)
        terraform = self.terraform_factory(workdir)
        terraform.write_spec(spec)
        terraform.init()

        log.info("Creating new %d instance(s) on %s...", sum(req.num_nodes), req.cloud.upper())
        try:
            terraform.apply()
        except TerraformError as exc:
            self._teardown(req, terraform, providers, exc, ctx)
            raise

        outputs = terraform.outputs()
        result = ProvisionResult(cloud=req.cloud)
        for plan in plans:
            ids = [str(i) for i in outputs.get(ids_output(plan.region)) or []]
            if req.use_static_ip:
                ips = [str(ip) for ip in outputs.get(ips_output(plan.region)) or []]
            else:
                by_id = providers[plan.region].instance_public_ips(ids)
                ips = [by_id.get(i, "") for i in ids]
            if plan.create_key_pair and Path(plan.cert_path).is_file():
                Path(plan.cert_path).chmod(0o600)
            result.regions[plan.region] = RegionResult(
                region=plan.region,
                instance_ids=ids,
                public_ips=ips,
                key_pair=plan.key_pair_name,
                cert_path=plan.cert_path,
                security_group=plan.security_group_name,
                image_id=plan.image_id,
            )
            self.bus.emit(InstancesCreated(region=plan.region, instance_ids=ids, **ctx))

        shutil.rmtree(workdir, ignore_errors=True)
        log.info("New %s instance(s) successfully created!", req.cloud.upper())
        self.record(req, result)
        return result

    def record(self, req: ProvisionRequest, result: ProvisionResult) -> None:
        """Persist node configs, cluster membership, key pairs and the inventory."""
        cfg = self.store.load_clusters_config()
        for region in result.regions.values():
            for i, instance_id in enumerate(region.instance_ids):
                ip = region.public_ips[i] if i < len(region.public_ips) else ""
                self.store.save_node_config(
                    NodeConfig(
                        node_id=instance_id,
                        region=region.region,
                        ami=region.image_id,
                        key_pair=region.key_pair,
                        cert_path=region.cert_path,
                        security_group=region.security_group,
                        elastic_ip=ip if req.use_static_ip else "",
                        cloud_service=req.cloud,
                        use_static_ip=req.use_static_ip,
                    )
                )
                cfg.add_node(req.cluster_name, req.network, instance_id)
            cfg.register_key_pair(region.key_pair, region.cert_path)
        self.store.save_clusters_config(cfg)

        write_inventory(
            self.store.ansible_inventory_dir(req.cluster_name),
            result.hosts(self.settings.ssh.user),
        )

    # ------------------------- per region -------------------------

    def _plan_region(
        self,
        req: ProvisionRequest,
        provider: CloudProvider,
        count: int,
        operator_ip: str,
        ctx: dict,
    ) -> RegionPlan:
        region = provider.region
        image_id = provider.get_ubuntu_image_id()
        if req.use_static_ip:
            provider.check_eip_quota(count)

        prefix = resource_prefix(req.username, region)
        key_pair, cert_name, create = self._resolve_key_pair(req, provider, prefix, f"{prefix}-{region}{CERT_SUFFIX}")
        cert_path = str(self.store.cert_path(cert_name))
        self.bus.emit(KeyPairResolved(region=region, key_pair=key_pair, created=create, **ctx))

        sg_name = f"{prefix}-{region}{SECURITY_GROUP_SUFFIX}"
        sg = provider.find_security_group(sg_name)
        if sg is None:
            log.info("Creating new security group %s in %s[%s]", sg_name, req.cloud.upper(), region)
        else:
            log.info("Using existing security group %s in %s[%s]", sg_name, req.cloud.upper(), region)
        self.bus.emit(SecurityGroupResolved(region=region, name=sg_name, created=sg is None, **ctx))

        ssh_public_key = ""
        if req.cloud == GCP_CLOUD_SERVICE and not create:
            ssh_public_key = public_key_openssh(cert_path)

        return RegionPlan(
            region=region,
            count=count,
            image_id=image_id,
            instance_type=req.instance_type,
            key_pair_name=key_pair,
            cert_path=cert_path,
            create_key_pair=create,
            security_group_name=sg_name,
            security_group=sg,
            use_static_ip=req.use_static_ip,
            volume_size_gb=self.settings.cloud.volume_size_gb,
            ssh_public_key=ssh_public_key,
            instance_prefix=f"{prefix}-{uuid.uuid4().hex[:6]}",
        )

    def _resolve_key_pair(
        self,
        req: ProvisionRequest,
        provider: CloudProvider,
        key_pair: str,
        cert_name: str,
    ) -> tuple[str, str, bool]:
        """
        Returns (key pair name, cert file name, create?).

        cloud  local
          no     no   -> create the default key pair
          no     yes  -> rename, create
          yes    yes  -> reuse
          yes    no   -> rename, create
        """
        region = provider.region
        in_cloud = provider.key_pair_exists(key_pair)
        local = self.store.cert_path(cert_name).is_file()

        if in_cloud and local:
            log.info("Using existing key pair %s in %s[%s]", key_pair, req.cloud.upper(), region)
            return key_pair, cert_name, False
        if not in_cloud and not local:
            log.info("Creating new key pair %s in %s[%s]", key_pair, req.cloud.upper(), region)
            return key_pair, cert_name, True

        if local:
            log.info("Default key pair %s already exists in your ssh directory but not in %s[%s]",
                     key_pair, req.cloud.upper(), region)
        else:
            log.info("Default key pair %s already exists in %s[%s] but its private key is not in your ssh directory",
                     key_pair, req.cloud.upper(), region)
        new_name = self._new_key_pair_name(req, provider)
        return new_name, new_name + CERT_SUFFIX, True

    def _new_key_pair_name(self, req: ProvisionRequest, provider: CloudProvider) -> str:
        name = req.alternative_key_pair_name
        with self._prompt_lock:
            while True:
                if name:
                    if provider.key_pair_exists(name):
                        log.info("Key pair named %s already exists", name)
                    elif self.store.cert_path(name + CERT_SUFFIX).is_file():
                        log.info("Key pair named %s already exists in your ssh directory", name)
                    else:
                        return name
                log.info("What do you want to name your key pair in %s?", provider.region)
                name = self.prompter.capture_string("Key Pair Name", validator=validate_non_empty)

    # ------------------------- teardown -------------------------

    def _teardown(
        self,
        req: ProvisionRequest,
        terraform: TerraformCliRunner,
        providers: Dict[str, CloudProvider],
        cause: TerraformError,
        ctx: dict,
    ) -> None:
        if isinstance(cause, EIPLimitError):
            log.error("Failed to create %s cloud server(s), please try creating again in a different region",
                      req.cloud.upper())
        else:
            log.error("Failed to create %s cloud server(s)", req.cloud.upper())

        log.info("Stopping all created instances due to error to prevent charges for unused instances...")
        try:
            outputs = terraform.outputs()
        except TerraformError as exc:
            raise ProvisionError(
                f"failed to create node(s): {cause}; unable to list created instances: {exc}"
            ) from cause

        stopped: List[str] = []
        failed: Dict[str, Exception] = {}
        for region in req.regions:
            for instance_id in outputs.get(ids_output(region)) or []:
                instance_id = str(instance_id)
                log.info("Stopping cloud server %s...", instance_id)
                try:
                    providers[region].stop_instance(instance_id)
                except CloudError as exc:
                    failed[instance_id] = exc
                    continue
                stopped.append(instance_id)
                log.info("Cloud server instance %s stopped", instance_id)

        self.bus.emit(TeardownResult(stopped=stopped, failed=sorted(failed), **ctx))

        if failed:
            log.error("Failed nodes:")
            for node, err in failed.items():
                log.error("Failed to stop node %s due to %s", node, err)
            log.error("Stop the above instance(s) on the %s console to prevent charges", req.cloud.upper())
            raise ProvisionError(f"failed to stop node(s) {', '.join(sorted(failed))}", stop_failures=failed) from cause
        raise ProvisionError(f"failed to create node(s): {cause}") from cause


def default_provider_factory(req: ProvisionRequest, settings: AppSettings) -> ProviderFactory:
    if req.cloud == AWS_CLOUD_SERVICE:
        return lambda region: AwsProvider(region, profile=req.aws_profile, settings=settings.cloud)

    return lambda zone: GcpProvider(
        zone,
        project=req.gcp_project,
        credentials_path=req.gcp_credentials or None,
        settings=settings.cloud,
    )
