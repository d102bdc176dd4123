import itertools
import json

import pytest

from valnode.errors import AuthorizationDenied, NodesFailedError, RegionNodeCountMismatch
from valnode.models.network import NetworkKind
from valnode.models.sidecar import Sidecar, VMType
from valnode.node import bootstrap as bootstrap_mod
from valnode.node.create import NodeCreateService
from valnode.node.identity import StakingIdentity
from valnode.node.options import CreateOptions
from valnode.prompts.options import CloudChoice, NetworkChoice, NodeVersionChoice

from conftest import FakeConnector, FakeScripts, ProviderSet, ScriptedPrompter, TerraformFactory, region_outputs

KEY_PAIR = "alice-us-east-1-valnode"


class FakeReleases:
    def latest_node_version_for_rpc(self, rpc_version):
        return f"v1.10.{rpc_version}"


@pytest.fixture(autouse=True)
def fake_identity(monkeypatch):
    counter = itertools.count(1)

    def _generate():
        return StakingIdentity(
            cert_pem=b"cert", key_pem=b"key", bls_key=b"\x01" * 32, node_id=f"NodeID-{next(counter)}"
        )

    monkeypatch.setattr(bootstrap_mod, "generate_staking_identity", _generate)


def _service(store, settings, *, prompter=None, connector=None, scripts=None, providers=None, terraform=None):
    return NodeCreateService(
        store,
        settings,
        prompter or ScriptedPrompter(),
        connector or FakeConnector(),
        ip_lookup=lambda: "203.0.113.7",
        releases=FakeReleases(),
        scripts=scripts or FakeScripts(),
        provider_factory=providers or ProviderSet(),
        terraform_factory=terraform
        or TerraformFactory(outputs=region_outputs("us-east-1", ["i-1", "i-2"], ["1.1.1.1", "2.2.2.2"])),
    )


def _opts(**kwargs):
    base = dict(
        cluster_name="mycluster",
        use_aws=True,
        regions=["us-east-1"],
        num_nodes=[2],
        authorize_access=True,
        latest_avalanchego_version=True,
        username="alice",
    )
    base.update(kwargs)
    return CreateOptions(**base)


def test_create_two_fuji_nodes_in_one_region(store, settings):
    scripts = FakeScripts()

    result = _service(store, settings, scripts=scripts).create(_opts(use_fuji=True))

    assert result.instance_ids() == ["i-1", "i-2"]
    cfg = store.load_clusters_config()
    assert cfg.clusters["mycluster"].nodes == ["i-1", "i-2"]
    assert cfg.clusters["mycluster"].network.kind is NetworkKind.FUJI
    assert KEY_PAIR in cfg.key_pair
    for instance_id in ("i-1", "i-2"):
        assert store.load_node_config(instance_id).region == "us-east-1"
    hosts = {alias for alias, _ in scripts.calls}
    assert hosts == {"aws_node_i-1", "aws_node_i-2"}
    assert not any(step == "setup_devnet" for _, step in scripts.calls)


def test_prompts_resolve_network_cloud_and_version(store, settings):
    prompter = ScriptedPrompter([NetworkChoice.FUJI, CloudChoice.AWS, NodeVersionChoice.CUSTOM, "v1.10.13"])
    opts = _opts(use_aws=False, latest_avalanchego_version=False)

    _service(store, settings, prompter=prompter).create(opts)

    assert prompter.answers == []


def test_node_version_from_subnet(store, settings):
    store.save_sidecar(Sidecar(name="demo", vm=VMType.SUBNET_EVM, rpc_version=30))
    service = _service(store, settings)
    version = service.resolve_node_version(_opts(latest_avalanchego_version=False, avalanchego_version_from_subnet="demo"))
    assert version == "v1.10.30"


def test_mismatched_regions_fail_before_any_cloud_call(store, settings):
    providers = ProviderSet()
    terraform = TerraformFactory()

    with pytest.raises(RegionNodeCountMismatch):
        _service(store, settings, providers=providers, terraform=terraform).create(
            _opts(use_fuji=True, regions=["us-east-1", "us-west-2"], num_nodes=[1])
        )

    assert providers.providers == {}
    assert terraform.instances == []


def test_declined_authorization_stops_before_provisioning(store, settings):
    terraform = TerraformFactory()
    prompter = ScriptedPrompter([False])

    with pytest.raises(AuthorizationDenied):
        _service(store, settings, prompter=prompter, terraform=terraform).create(
            _opts(use_fuji=True, authorize_access=False)
        )

    assert terraform.instances == []


def test_unreachable_host_fails_before_bootstrap(store, settings):
    scripts = FakeScripts()

    with pytest.raises(NodesFailedError) as excinfo:
        _service(store, settings, scripts=scripts, connector=FakeConnector(unreachable={"aws_node_i-2"})).create(
            _opts(use_fuji=True)
        )

    assert excinfo.value.failed_nodes == ["aws_node_i-2"]
    assert scripts.calls == []


def test_devnet_writes_genesis_and_bootstrap_settings(store, settings):
    scripts = FakeScripts()

    _service(store, settings, scripts=scripts).create(_opts(use_devnet=True))

    network = store.load_clusters_config().clusters["mycluster"].network
    assert network.kind is NetworkKind.DEVNET
    assert network.endpoint == "http://1.1.1.1:9650"

    genesis = json.loads((store.node_instance_dir("i-1") / "genesis.json").read_text())
    assert sorted(s["nodeID"] for s in genesis["initialStakers"]) == ["NodeID-1", "NodeID-2"]

    first = json.loads((store.node_instance_dir("i-1") / "node.json").read_text())
    second = json.loads((store.node_instance_dir("i-2") / "node.json").read_text())
    assert first["bootstrap-ips"] == ""
    assert second["bootstrap-ips"] == "1.1.1.1:9651"
    assert sorted(a for a, s in scripts.calls if s == "setup_devnet") == ["aws_node_i-1", "aws_node_i-2"]
