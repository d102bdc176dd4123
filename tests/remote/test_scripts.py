from pathlib import Path

import pytest

from valnode.config.models import AppSettings, ReleaseSettings
from valnode.errors import SSHCommandError
from valnode.models.network import Network
from valnode.remote.scripts import NODE_CONFIG_DIR, STAKING_DIR, RemoteScripts


class RecordingRunner:
    name = "aws_node_i-1"

    def __init__(self, *, fail=False, response=None):
        self.fail = fail
        self.response = response or {}
        self.texts = {}
        self.files = []
        self.commands = []
        self.posts = []

    def put_text(self, content, remote_path):
        self.texts[remote_path] = content

    def put_file(self, local_path, remote_path):
        self.files.append((Path(local_path).name, remote_path))

    def mkdirs(self, remote_dir, *, timeout=None):
        self.commands.append(f"mkdir -p {remote_dir}")

    def check(self, cmd, *, sudo=False, timeout=None):
        self.commands.append(cmd)
        if self.fail:
            raise SSHCommandError("rc=1")
        return ""

    def post_local(self, path, body, *, timeout=None):
        self.posts.append((path, body["method"], body["params"]))
        return self.response


@pytest.fixture
def scripts():
    return RemoteScripts(AppSettings(releases=ReleaseSettings(cli_branch="v1.5.0")))


def test_setup_node_renders_installer_flags(scripts, tmp_path):
    runner = RecordingRunner()
    config = tmp_path / "node_cloud_config.json"

    scripts.setup_node(runner, config, Network.fuji(), node_version="v1.11.0", use_static_ip=False)

    script = runner.texts["/tmp/valnode-setup_node.sh"]
    assert "--ip dynamic --rpc private --state-sync on --fuji --version v1.11.0" in script
    assert runner.commands == ["bash /tmp/valnode-setup_node.sh"]
    assert runner.files == [("node_cloud_config.json", "/home/ubuntu/.valnode/node_cloud_config.json")]


def test_devnet_installs_as_fuji_without_version(scripts, tmp_path):
    runner = RecordingRunner()
    scripts.setup_node(runner, tmp_path / "c.json", Network.devnet())

    script = runner.texts["/tmp/valnode-setup_node.sh"]
    assert script.rstrip().endswith("--ip static --rpc private --state-sync on --fuji")


def test_cli_from_source_uses_branch(scripts):
    runner = RecordingRunner()
    scripts.setup_cli_from_source(runner, "v1.5.0")
    assert "git clone --single-branch -b v1.5.0 https://github.com/ava-labs/avalanche-cli" in (
        runner.texts["/tmp/valnode-setup_cli_from_source.sh"]
    )


def test_failed_script_names_the_step(scripts):
    with pytest.raises(SSHCommandError, match="Setup Build Env failed"):
        scripts.setup_build_env(RecordingRunner(fail=True))


def test_staking_and_devnet_uploads(scripts, tmp_path):
    runner = RecordingRunner()
    scripts.upload_staking_files(runner, tmp_path)
    scripts.setup_devnet(runner, tmp_path)

    assert [remote for _, remote in runner.files] == [
        f"{STAKING_DIR}/staker.crt",
        f"{STAKING_DIR}/staker.key",
        f"{STAKING_DIR}/signer.key",
        f"{NODE_CONFIG_DIR}/genesis.json",
        f"{NODE_CONFIG_DIR}/node.json",
    ]
    assert "bash /tmp/valnode-setup_devnet.sh" in runner.commands


def test_health_queries(scripts):
    runner = RecordingRunner(response={"result": {"isBootstrapped": True}})
    assert scripts.check_bootstrapped(runner) is True
    assert runner.posts[0] == ("/ext/info", "info.isBootstrapped", {"chain": "X"})

    runner = RecordingRunner(response={"result": {"status": "Validating"}})
    assert scripts.subnet_sync_status(runner, "chain-1") == "Validating"
    assert runner.posts[0] == ("/ext/bc/P", "platform.getBlockchainStatus", {"blockchainID": "chain-1"})

    assert scripts.check_bootstrapped(RecordingRunner(response={})) is False
