# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/cli/app.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from valnode.cloud.aws import DEFAULT_PROFILE
from valnode.config.loader import load_settings
from valnode.config.models import AppSettings
from valnode.errors import ValnodeError
from valnode.logging.log import init_logging
from valnode.node.create import NodeCreateService
from valnode.node.deploy import DeployService
from valnode.node.options import CreateOptions, DeployOptions, StatusOptions
from valnode.node.status import ClusterStatus, StatusService, status_rows
from valnode.observers.console import ConsoleObserver
from valnode.observers.dispatcher import EventBus
from valnode.observers.jsonfile import JsonFileObserver
from valnode.observers.logger import LoggerObserver
from valnode.prompts.prompter import TyperPrompter
from valnode.remote.scripts import RemoteScripts
from valnode.store.app_store import AppStore
from valnode.subnet.create import SubnetCreateOptions, SubnetCreator
from valnode.subnet.releases import ReleaseClient
from valnode.utils.net import get_public_ip
from valnode.utils.ssh import make_connector


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Validator node provisioning CLI")
node_app = typer.Typer(help="Set up fuji and devnet validator nodes on AWS or GCP")
subnet_app = typer.Typer(help="Create and manage subnet configurations")
app.add_typer(node_app, name="node")
app.add_typer(subnet_app, name="subnet")


class Runtime:
    """Per-invocation wiring shared by every command."""

    def __init__(self, *, config: Optional[Path], verbose: bool):
        self.settings: AppSettings = load_settings(config)
        self.logger, self.run_id, self.log_path = init_logging(base_dir=self.settings.base_dir, verbose=verbose)
        self.store = AppStore(self.settings.base_dir)

        observers = [
            LoggerObserver(self.logger),
            JsonFileObserver(self.settings.base_dir / "logs" / f"{self.run_id}.jsonl"),
        ]
        if verbose:
            observers.insert(0, ConsoleObserver())
        self.bus = EventBus(observers=observers)

        self.prompter = TyperPrompter()
        self.connector = make_connector(self.settings.ssh.connect_timeout)
        self.scripts = RemoteScripts(self.settings)
        self.releases = ReleaseClient(self.settings.releases)

    def ip_lookup(self) -> str:
        return get_public_ip(self.settings.cloud.ip_lookup_url)


def _fail(err: Exception) -> None:
    typer.echo(f"Error: {err}", err=True)
    raise typer.Exit(code=1)


ConfigOpt = typer.Option(None, "--config", help="Path to config.yaml (default ~/.valnode/config.yaml)")
VerboseOpt = typer.Option(False, "--verbose", "-v", help="Print lifecycle events and debug output")


# ------------------------------------------------------------------------------
# node
# ------------------------------------------------------------------------------

@node_app.command("create")
def node_create(
    cluster_name: str = typer.Argument(..., help="Name of the cluster to create"),
    use_aws: bool = typer.Option(False, "--aws", help="Create node(s) in AWS cloud"),
    use_gcp: bool = typer.Option(False, "--gcp", help="Create node(s) in GCP cloud"),
    region: List[str] = typer.Option([], "--region", help="Cloud region; repeat for multiple regions"),
    num_nodes: List[int] = typer.Option([], "--num-nodes", help="Nodes per region, matched to --region by position"),
    node_type: str = typer.Option("default", "--node-type", help="Cloud instance type; 'default' picks per cloud"),
    use_static_ip: bool = typer.Option(True, "--use-static-ip/--no-static-ip", help="Attach a static public IP"),
    authorize_access: bool = typer.Option(False, "--authorize-access", help="Authorize access to the cloud account"),
    use_fuji: bool = typer.Option(False, "--fuji", help="Create a Fuji validator"),
    use_devnet: bool = typer.Option(False, "--devnet", help="Create a devnet cluster"),
    latest_version: bool = typer.Option(False, "--latest-avalanchego-version", help="Install the latest node release"),
    version_from_subnet: str = typer.Option(
        "", "--avalanchego-version-from-subnet", help="Install the newest node release compatible with this subnet"
    ),
    aws_profile: str = typer.Option(DEFAULT_PROFILE, "--aws-profile", help="AWS profile to use"),
    gcp_project: str = typer.Option("", "--gcp-project", help="GCP project to use"),
    gcp_credentials: str = typer.Option("", "--gcp-credentials", help="Path to a GCP credentials JSON file"),
    alternative_key_pair_name: str = typer.Option(
        "", "--alternative-key-pair-name", help="Key pair name to use when the default one is taken"
    ),
    config: Optional[Path] = ConfigOpt,
    verbose: bool = VerboseOpt,
):
    """Provision cloud instance(s), install the node software and bootstrap them."""
    rt = Runtime(config=config, verbose=verbose)
    opts = CreateOptions(
        cluster_name=cluster_name,
        use_aws=use_aws,
        use_gcp=use_gcp,
        regions=list(region),
        num_nodes=list(num_nodes),
        node_type=node_type,
        use_static_ip=use_static_ip,
        authorize_access=authorize_access,
        use_fuji=use_fuji,
        use_devnet=use_devnet,
        latest_avalanchego_version=latest_version,
        avalanchego_version_from_subnet=version_from_subnet,
        aws_profile=aws_profile,
        gcp_project=gcp_project,
        gcp_credentials=gcp_credentials,
        alternative_key_pair_name=alternative_key_pair_name,
    )
    service = NodeCreateService(
        rt.store,
        rt.settings,
        rt.prompter,
        rt.connector,
        ip_lookup=rt.ip_lookup,
        releases=rt.releases,
        scripts=rt.scripts,
        bus=rt.bus,
        run_id=rt.run_id,
    )
    try:
        service.create(opts)
    except ValnodeError as err:
        rt.logger.debug("node create failed", exc_info=True)
        _fail(err)


@node_app.command("status")
def node_status(
    cluster_name: str = typer.Argument(..., help="Cluster to inspect"),
    subnet: str = typer.Option("", "--subnet", help="Also report the sync status of this subnet"),
    config: Optional[Path] = ConfigOpt,
    verbose: bool = VerboseOpt,
):
    """Report whether each node is bootstrapped and, optionally, synced to a subnet."""
    rt = Runtime(config=config, verbose=verbose)
    service = StatusService(rt.store, rt.connector, rt.scripts)
    rt.logger.info("Checking if node(s) in cluster %s are bootstrapped to Primary Network ...", cluster_name)
    try:
        result = service.status(StatusOptions(cluster_name=cluster_name, subnet_name=subnet))
    except ValnodeError as err:
        _fail(err)
        return
    render_status(result)


def render_status(status: ClusterStatus, console: Optional[Console] = None) -> None:
    console = console or Console()
    rows = status_rows(status)
    table = Table(title=f"STATUS FOR CLUSTER: {status.cluster_name}")
    columns = list(rows[0]) if rows else ["Node", "Primary Network"]
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*(row[c] for c in columns))
    console.print(table)

    summary = status.summary()
    if summary:
        console.print(summary)
    elif status.subnet_name:
        console.print(f"Node(s) {', '.join(status.not_synced())} are not synced to Subnet {status.subnet_name}")
    else:
        console.print(f"Node(s) {', '.join(status.not_bootstrapped())} are not bootstrapped yet")


@node_app.command("deploy")
def node_deploy(
    cluster_name: str = typer.Argument(..., help="Devnet cluster to deploy into"),
    subnet_name: str = typer.Argument(..., help="Locally created subnet to deploy"),
    config: Optional[Path] = ConfigOpt,
    verbose: bool = VerboseOpt,
):
    """Deploy a locally created subnet into a devnet cluster."""
    rt = Runtime(config=config, verbose=verbose)
    try:
        DeployService(rt.store).deploy(DeployOptions(cluster_name=cluster_name, subnet_name=subnet_name))
    except ValnodeError as err:
        _fail(err)


# ------------------------------------------------------------------------------
# subnet
# ------------------------------------------------------------------------------

@subnet_app.command("create")
def subnet_create(
    name: str = typer.Argument(..., help="Subnet name"),
    use_evm: bool = typer.Option(False, "--evm", help="Use Subnet-EVM as the VM"),
    use_custom: bool = typer.Option(False, "--custom", help="Use a custom VM"),
    genesis_file: Optional[Path] = typer.Option(None, "--genesis", help="File path of an existing genesis"),
    evm_chain_id: Optional[int] = typer.Option(None, "--evm-chain-id", help="Chain ID for the Subnet-EVM genesis"),
    evm_token: Optional[str] = typer.Option(None, "--evm-token", help="Token symbol for the Subnet-EVM genesis"),
    evm_defaults: bool = typer.Option(False, "--evm-defaults", help="Use default settings for fees and airdrop"),
    use_latest: bool = typer.Option(False, "--latest", help="Use the latest VM release"),
    use_pre_release: bool = typer.Option(False, "--pre-release", help="Use the latest VM pre-release"),
    vm_version: str = typer.Option("", "--vm-version", help="VM version to use"),
    teleporter: Optional[bool] = typer.Option(None, "--teleporter/--no-teleporter", help="Enable teleporter"),
    warp: bool = typer.Option(True, "--warp/--no-warp", help="Enable warp messaging"),
    external_gas_token: Optional[bool] = typer.Option(
        None, "--external-gas-token/--no-external-gas-token", help="Use a gas token from another blockchain"
    ),
    custom_vm_path: Optional[Path] = typer.Option(None, "--custom-vm-path", help="Path to a custom VM binary"),
    custom_vm_repo_url: str = typer.Option("", "--custom-vm-repo-url", help="Repository to build the custom VM from"),
    custom_vm_branch: str = typer.Option("", "--custom-vm-branch", help="Branch or commit of the custom VM repository"),
    custom_vm_build_script: str = typer.Option(
        "", "--custom-vm-build-script", help="Build script inside the custom VM repository"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing configuration"),
    config: Optional[Path] = ConfigOpt,
    verbose: bool = VerboseOpt,
):
    """Create a subnet configuration and its genesis."""
    rt = Runtime(config=config, verbose=verbose)
    opts = SubnetCreateOptions(
        name=name,
        use_evm=use_evm,
        use_custom=use_custom,
        genesis_file=genesis_file,
        evm_chain_id=evm_chain_id,
        evm_token=evm_token,
        evm_defaults=evm_defaults,
        use_latest_release=use_latest,
        use_latest_pre_release=use_pre_release,
        vm_version=vm_version,
        use_teleporter=teleporter,
        use_warp=warp,
        use_external_gas_token=external_gas_token,
        custom_vm_path=custom_vm_path,
        custom_vm_repo_url=custom_vm_repo_url,
        custom_vm_branch=custom_vm_branch,
        custom_vm_build_script=custom_vm_build_script,
        force=force,
    )
    try:
        SubnetCreator(rt.store, rt.prompter, rt.releases, rt.settings).create(opts)
    except ValnodeError as err:
        _fail(err)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
