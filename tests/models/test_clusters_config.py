from valnode.models.cluster import ClustersConfig
from valnode.models.network import Network, NetworkKind
from valnode.models.node import NodeConfig, NodeRole, cloud_id_from_alias, host_alias, parse_roles


def test_key_pair_registry_never_overwrites():
    cfg = ClustersConfig()
    assert cfg.register_key_pair("kp", "/a.pem") == "/a.pem"
    assert cfg.register_key_pair("kp", "/b.pem") == "/a.pem"
    assert cfg.register_key_pair("kp", "/a.pem") == "/a.pem"
    assert cfg.key_pair == {"kp": "/a.pem"}


def test_add_node_creates_cluster_once():
    cfg = ClustersConfig()
    cfg.add_node("c", Network.fuji(), "i-1")
    cfg.add_node("c", Network.devnet(), "i-2")
    cfg.add_node("c", Network.fuji(), "i-1")

    cluster = cfg.clusters["c"]
    assert cluster.nodes == ["i-1", "i-2"]
    assert cluster.network.kind is NetworkKind.FUJI
    assert cfg.cluster_exists("c")


def test_clusters_config_json_round_trip():
    cfg = ClustersConfig()
    cfg.add_node("c", Network.devnet(ip="1.2.3.4"), "i-1")
    cfg.register_key_pair("kp", "/a.pem")

    again = ClustersConfig.model_validate_json(cfg.model_dump_json())

    assert again == cfg
    assert again.clusters["c"].network.endpoint == "http://1.2.3.4:9650"


def test_host_alias_helpers():
    assert host_alias("aws", "i-1") == "aws_node_i-1"
    assert host_alias("gcp", "vm-1") == "gcp_node_vm-1"
    assert cloud_id_from_alias("gcp_node_vm-1") == "vm-1"


def test_node_roles():
    node = NodeConfig(node_id="i-1", region="us-east-1")
    node.add_role(NodeRole.VALIDATOR)
    node.add_role(NodeRole.VALIDATOR)
    assert node.roles == [NodeRole.VALIDATOR]
    assert node.is_validator() and not node.is_api()
    assert parse_roles(["API", " validator", "api"]) == [NodeRole.API, NodeRole.VALIDATOR]


def test_network_from_string():
    assert Network.from_string("Fuji") == Network.fuji()
    assert Network.from_string("bogus").kind is NetworkKind.UNDEFINED
    assert Network.devnet(ip="1.2.3.4").name() == "Devnet http://1.2.3.4:9650"
