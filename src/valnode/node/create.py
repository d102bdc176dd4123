# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/node/create.py

from __future__ import annotations

import getpass
import logging
from typing import Callable, Optional

from valnode.config.models import AppSettings
from valnode.errors import AuthorizationDenied
from valnode.models.network import Network, NetworkKind
from valnode.models.node import AWS_CLOUD_SERVICE, GCP_CLOUD_SERVICE, host_alias
from valnode.node.bootstrap import BANNER, BootstrapCoordinator, raise_on_failures
from valnode.node.devnet import setup_devnet
from valnode.node.options import (
    CreateOptions,
    check_cloud_flags,
    check_create_options,
    check_region_counts,
    parse_csv,
    parse_csv_ints,
    resolve_instance_type,
    validate_csv_ints,
)
from valnode.node.provision import (
    ProviderFactory,
    ProvisionOrchestrator,
    ProvisionRequest,
    ProvisionResult,
    TerraformFactory,
    default_provider_factory,
)
from valnode.node.waiter import wait_for_hosts
from valnode.observers.dispatcher import EventBus
from valnode.observers.events import LifecycleEvent, new_ctx
from valnode.prompts.options import CloudChoice, NetworkChoice, NodeVersionChoice
from valnode.prompts.prompter import Prompter
from valnode.prompts.validators import validate_non_empty
from valnode.remote.scripts import RemoteScripts
from valnode.store.app_store import AppStore
from valnode.subnet.releases import ReleaseClient
from valnode.terraform.runner import TerraformCliRunner
from valnode.utils.ssh import Connector

log = logging.getLogger("valnode")

LATEST_NODE_VERSION = ""     # let the installer pick the newest release


class NodeCreateService:
    """`node create`: provision, wait, bootstrap, optionally form a devnet."""

    def __init__(
        self,
        store: AppStore,
        settings: AppSettings,
        prompter: Prompter,
        connector: Connector,
        *,
        ip_lookup: Callable[[], str],
        releases: Optional[ReleaseClient] = None,
        scripts: Optional[RemoteScripts] = None,
        provider_factory: Optional[ProviderFactory] = None,
        terraform_factory: TerraformFactory = TerraformCliRunner,
        bus: Optional[EventBus] = None,
        run_id: Optional[str] = None,
    ):
        self.store = store
        self.settings = settings
        self.prompter = prompter
        self.connector = connector
        self.ip_lookup = ip_lookup
        self.releases = releases or ReleaseClient(settings.releases)
        self.scripts = scripts or RemoteScripts(settings)
        self.provider_factory = provider_factory
        self.terraform_factory = terraform_factory
        self.bus = bus or EventBus()
        self.run_id = run_id

    # ------------------------- resolution -------------------------

    def resolve_network(self, opts: CreateOptions) -> Network:
        if opts.use_fuji:
            return Network.fuji()
        if opts.use_devnet:
            return Network.devnet()
        choice = self.prompter.capture_option(
            "Choose a network for the operation", list(NetworkChoice)
        )
        return Network.fuji() if choice is NetworkChoice.FUJI else Network.devnet()

    def resolve_cloud(self, opts: CreateOptions) -> str:
        if opts.use_aws:
            return AWS_CLOUD_SERVICE
        if opts.use_gcp:
            return GCP_CLOUD_SERVICE
        choice = self.prompter.capture_option(
            "Which cloud service would you like to launch your node(s) in?", list(CloudChoice)
        )
        return AWS_CLOUD_SERVICE if choice is CloudChoice.AWS else GCP_CLOUD_SERVICE

    def authorize(self, opts: CreateOptions, cloud: str) -> None:
        if opts.authorize_access:
            return
        log.info("Do you authorize valnode to access your %s account to set up your validator node(s)?", cloud.upper())
        log.info("Please note that you will be charged for cloud usage.")
        log.info("By answering yes, you are authorizing valnode to:")
        log.info("- Set up instance(s) and other components (such as security groups, key pairs and static IPs)")
        log.info("- Set up the instance(s) to validate the Primary Network and Subnets")
        if not self.prompter.capture_yes_no(f"I authorize valnode to access my {cloud.upper()} account"):
            raise AuthorizationDenied(f"user did not give authorization to access the {cloud.upper()} account")

    def resolve_regions(self, opts: CreateOptions) -> tuple[list[str], list[int]]:
        regions = list(opts.regions)
        counts = list(opts.num_nodes)
        if not regions:
            raw = self.prompter.capture_string(
                "Which region(s) do you want to set up your node(s) in? Use comma to separate multiple regions",
                validator=validate_non_empty,
            )
            regions = parse_csv(raw)
        if not counts:
            raw = self.prompter.capture_string(
                "How many nodes do you want to set up in each region? Use comma to separate multiple numbers",
                validator=validate_csv_ints,
            )
            counts = parse_csv_ints(raw)
        check_region_counts(regions, counts)
        return regions, counts

    def resolve_node_version(self, opts: CreateOptions) -> str:
        subnet = ""
        if opts.latest_avalanchego_version:
            return LATEST_NODE_VERSION
        if opts.avalanchego_version_from_subnet:
            subnet = opts.avalanchego_version_from_subnet
        else:
            choice = self.prompter.capture_option(
                "What version of the node software would you like to install?", list(NodeVersionChoice)
            )
            if choice is NodeVersionChoice.LATEST:
                return LATEST_NODE_VERSION
            if choice is NodeVersionChoice.CUSTOM:
                return self.prompter.capture_version(
                    "Which version would you like to install? (Use format v1.10.13)"
                )
            while True:
                subnet = self.prompter.capture_string(
                    "Which Subnet would you like to use to choose the node version?",
                    validator=validate_non_empty,
                )
                if self.store.sidecar_exists(subnet):
                    break
                log.info("no subnet named %s found", subnet)
        sidecar = self.store.load_sidecar(subnet)
        return self.releases.latest_node_version_for_rpc(sidecar.rpc_version)

    # ------------------------- flow -------------------------

    def create(self, opts: CreateOptions) -> ProvisionResult:
        check_create_options(opts)
        network = self.resolve_network(opts)
        cloud = self.resolve_cloud(opts)
        check_cloud_flags(opts, cloud)

        gcp_project = opts.gcp_project
        if cloud == GCP_CLOUD_SERVICE and not gcp_project:
            gcp_project = self.prompter.capture_string("What is the name of your GCP project?", validator=validate_non_empty)

        regions, counts = self.resolve_regions(opts)
        node_version = self.resolve_node_version(opts)
        self.authorize(opts, cloud)

        ctx = new_ctx(env=network.kind.value, context=opts.cluster_name, run_id=self.run_id)
        self.bus.emit(LifecycleEvent(phase="create", status="started", **ctx))

        req = ProvisionRequest(
            cluster_name=opts.cluster_name,
            cloud=cloud,
            network=network,
            regions=regions,
            num_nodes=counts,
            instance_type=resolve_instance_type(opts.node_type, cloud, self.settings.cloud),
            username=opts.username or getpass.getuser(),
            use_static_ip=opts.use_static_ip,
            aws_profile=opts.aws_profile,
            gcp_project=gcp_project,
            gcp_credentials=opts.gcp_credentials,
            alternative_key_pair_name=opts.alternative_key_pair_name,
        )
        orchestrator = ProvisionOrchestrator(
            self.store,
            self.settings,
            self.provider_factory or default_provider_factory(req, self.settings),
            self.ip_lookup,
            self.prompter,
            terraform_factory=self.terraform_factory,
            bus=self.bus,
            run_id=ctx["run_id"],
        )
        result = orchestrator.provision(req)
        hosts = result.hosts(self.settings.ssh.user)

        waited = wait_for_hosts(
            hosts,
            self.connector,
            timeout=self.settings.ssh.wait_timeout,
            delay=self.settings.ssh.wait_delay,
            bus=self.bus,
            ctx=ctx,
        )
        for alias, err in waited.error_hosts().items():
            log.error("Instance %s failed to provision with error %s. Please check instance logs for more information",
                      alias, err)
        raise_on_failures(waited, "provision")

        coordinator = BootstrapCoordinator(
            self.store, self.settings, self.connector, self.scripts, bus=self.bus, ctx=ctx
        )
        booted = coordinator.bootstrap(hosts, network, node_version)
        coordinator.report(hosts, booted)

        if network.kind is NetworkKind.DEVNET:
            devnet = setup_devnet(
                self.store, opts.cluster_name, hosts, coordinator.node_ids, self.connector, self.scripts
            )
            raise_on_failures(devnet, "setup devnet on")

        raise_on_failures(booted, "deploy")
        self.print_results(result)
        self.bus.emit(LifecycleEvent(phase="create", status="done", **ctx))
        return result

    def print_results(self, result: ProvisionResult) -> None:
        log.info(BANNER)
        log.info("AVALANCHE NODE(S) SUCCESSFULLY SET UP!")
        log.info(BANNER)
        log.info("Please wait until the node(s) are successfully bootstrapped to run further commands on the node(s)")
        log.info("")
        log.info("Here are the details of the set up node(s): ")
        for region in result.regions.values():
            log.info("Don't delete or replace your ssh private key file at %s as you won't be able to "
                     "access your cloud server without it", region.cert_path)
            for i, instance_id in enumerate(region.instance_ids):
                ip = region.public_ips[i] if i < len(region.public_ips) else ""
                log.info(BANNER)
                log.info("Node %s details: ", host_alias(result.cloud, instance_id))
                log.info("Cloud Instance ID: %s", instance_id)
                log.info("Public IP: %s", ip)
                log.info("Cloud Region: %s", region.region)
                log.info("")
                log.info("staker.crt and staker.key are stored at %s. If anything happens to your node or the "
                         "machine node runs on, these files can be used to fully recreate your node.",
                         self.store.node_instance_dir(instance_id))
                log.info("")
                log.info("To ssh to node, run: ")
                log.info("")
                log.info("ssh -o IdentitiesOnly=yes %s@%s -i %s", self.settings.ssh.user, ip, region.cert_path)
                log.info("")
                log.info(BANNER)
        log.info("")
        log.info("The node software and the CLI are installed and node(s) are bootstrapping!")
