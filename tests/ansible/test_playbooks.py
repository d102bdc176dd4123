import types

import pytest

from valnode.ansible import playbooks as playbooks_mod
from valnode.ansible.playbooks import PlaybookRunner
from valnode.errors import AnsibleError


def _fake_runner(monkeypatch, rc=0):
    calls = []

    def fake_run(**kwargs):
        calls.append(kwargs)
        return types.SimpleNamespace(rc=rc, status="successful" if rc == 0 else "failed")

    monkeypatch.setattr(playbooks_mod.ansible_runner, "run", fake_run)
    return calls


def test_deploy_subnet_limits_to_host(monkeypatch, tmp_path):
    calls = _fake_runner(monkeypatch)
    runner = PlaybookRunner(tmp_path / "ansible", tmp_path / "ansible" / "inventory")

    runner.deploy_subnet("demo", "/tmp/demo_export.dat", "aws_node_i-1")

    kwargs = calls[0]
    assert kwargs["playbook"] == "deploy_subnet.yml"
    assert kwargs["limit"] == "aws_node_i-1"
    assert kwargs["extravars"] == {"subnet_name": "demo", "subnet_export_path": "/tmp/demo_export.dat"}
    assert (tmp_path / "ansible" / "project" / "deploy_subnet.yml").is_file()


def test_failed_playbook_raises(monkeypatch, tmp_path):
    _fake_runner(monkeypatch, rc=2)
    with pytest.raises(AnsibleError, match="export_subnet.yml"):
        PlaybookRunner(tmp_path, tmp_path).export_subnet("/tmp/x", "/tmp", "aws_node_i-1")
