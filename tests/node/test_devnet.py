import json

from conftest import FakeConnector, FakeScripts

from valnode.models.cluster import ClustersConfig
from valnode.models.network import Network, NetworkKind
from valnode.models.node import Host
from valnode.node.devnet import devnet_genesis, node_settings, setup_devnet

HOSTS = [
    Host(node_id="aws_node_i-1", ip="10.0.0.1"),
    Host(node_id="aws_node_i-2", ip="10.0.0.2"),
    Host(node_id="aws_node_i-3", ip="10.0.0.3"),
]
NODE_IDS = {"aws_node_i-1": "NodeID-A", "aws_node_i-2": "NodeID-B", "aws_node_i-3": "NodeID-C"}


def test_devnet_genesis_stakes_every_node():
    genesis = devnet_genesis(["NodeID-A", "NodeID-B"], start_time=1700000000)

    assert genesis["networkID"] == 1338
    assert genesis["startTime"] == 1700000000
    assert [s["nodeID"] for s in genesis["initialStakers"]] == ["NodeID-A", "NodeID-B"]
    assert json.loads(genesis["cChainGenesis"])["config"]["chainId"] == 43117


def test_node_settings_bootstrap_from_earlier_members():
    settings = node_settings(HOSTS[2], [("NodeID-A", "10.0.0.1"), ("NodeID-B", "10.0.0.2")])

    assert settings["public-ip"] == "10.0.0.3"
    assert settings["bootstrap-ids"] == "NodeID-A,NodeID-B"
    assert settings["bootstrap-ips"] == "10.0.0.1:9651,10.0.0.2:9651"


def test_setup_devnet_writes_files_and_updates_endpoint(store):
    cfg = ClustersConfig()
    for h in HOSTS:
        cfg.add_node("dev", Network.devnet(), h.get_cloud_id())
    store.save_clusters_config(cfg)
    scripts = FakeScripts()

    results = setup_devnet(store, "dev", HOSTS, NODE_IDS, FakeConnector(), scripts)

    assert not results.has_errors()
    assert sorted(scripts.calls) == [(h.node_id, "setup_devnet") for h in HOSTS]

    first = json.loads((store.node_instance_dir("i-1") / "node.json").read_text())
    third = json.loads((store.node_instance_dir("i-3") / "node.json").read_text())
    assert first["bootstrap-ids"] == ""
    assert third["bootstrap-ids"] == "NodeID-A,NodeID-B"

    network = store.get_cluster("dev").network
    assert network.kind is NetworkKind.DEVNET
    assert network.endpoint == "http://10.0.0.1:9650"


def test_setup_devnet_skips_hosts_without_node_id(store):
    scripts = FakeScripts(fail_on={"aws_node_i-2": "setup_devnet"})

    results = setup_devnet(store, "dev", HOSTS, {"aws_node_i-1": "NodeID-A", "aws_node_i-2": "NodeID-B"},
                           FakeConnector(), scripts)

    assert set(results.node_ids()) == {"aws_node_i-1", "aws_node_i-2"}
    assert list(results.error_hosts()) == ["aws_node_i-2"]
    genesis = json.loads((store.node_instance_dir("i-1") / "genesis.json").read_text())
    assert len(genesis["initialStakers"]) == 2
