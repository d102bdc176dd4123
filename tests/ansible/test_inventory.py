import pytest

from valnode.ansible.inventory import host_aliases, inventory_file, read_hosts, write_inventory
from valnode.errors import AnsibleError
from valnode.models.node import Host


def test_inventory_round_trip(tmp_path):
    hosts = [
        Host(node_id="aws_node_i-1", ip="1.1.1.1", ssh_private_key_path="/keys/kp.pem"),
        Host(node_id="aws_node_i-2", ip="2.2.2.2", ssh_user="admin", port=2222),
    ]
    write_inventory(tmp_path, hosts)

    line = inventory_file(tmp_path).read_text().splitlines()[0]
    assert "ansible_ssh_common_args='-o IdentitiesOnly=yes -o StrictHostKeyChecking=no'" in line
    assert read_hosts(tmp_path) == hosts


def test_rewriting_replaces_existing_alias(tmp_path):
    write_inventory(tmp_path, [Host(node_id="aws_node_i-1", ip="1.1.1.1")])
    write_inventory(tmp_path, [Host(node_id="aws_node_i-1", ip="9.9.9.9"), Host(node_id="aws_node_i-2", ip="2.2.2.2")])

    assert host_aliases(tmp_path) == ["aws_node_i-1", "aws_node_i-2"]
    assert read_hosts(tmp_path)[0].ip == "9.9.9.9"


def test_missing_inventory(tmp_path):
    with pytest.raises(AnsibleError):
        read_hosts(tmp_path / "nope")


def test_malformed_line(tmp_path):
    inventory_file(tmp_path).write_text("aws_node_i-1 garbage\n")
    with pytest.raises(AnsibleError, match="malformed"):
        read_hosts(tmp_path)
