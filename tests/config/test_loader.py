from pathlib import Path
import textwrap

from valnode.config.loader import load_settings


def test_load_settings_missing_file_uses_defaults(tmp_path: Path):
    cfg = load_settings(tmp_path / "nope.yaml")
    assert cfg.ssh.user == "ubuntu"
    assert cfg.cloud.aws_instance_type == "c5.2xlarge"


def test_load_settings_merges_secrets_and_env(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("VALNODE_SECRETS_FILE", raising=False)
    monkeypatch.setenv("VALNODE_TEST_HOME", str(tmp_path / "home"))
    cfg_text = textwrap.dedent("""
        base_dir: ${VALNODE_TEST_HOME}/.valnode
        ssh:
          wait_timeout: 30
        releases:
          cli_branch: main
    """)
    f = tmp_path / "config.yaml"
    f.write_text(cfg_text)
    (tmp_path / "secrets.yaml").write_text(textwrap.dedent("""
        releases:
          cli_branch: release-1
          github_api: ""
    """))

    cfg = load_settings(f)

    assert cfg.base_dir == tmp_path / "home" / ".valnode"
    assert cfg.ssh.wait_timeout == 30
    assert cfg.ssh.wait_delay == 5.0
    assert cfg.releases.cli_branch == "release-1"
    assert cfg.releases.github_api == "https://api.github.com"


def test_load_settings_from_env_path(tmp_path: Path, monkeypatch):
    f = tmp_path / "other.yaml"
    f.write_text("cloud:\n  volume_size_gb: 50\n")
    monkeypatch.setenv("VALNODE_CONFIG", str(f))

    assert load_settings().cloud.volume_size_gb == 50
