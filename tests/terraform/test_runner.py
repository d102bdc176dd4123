import json
import subprocess
from pathlib import Path

import pytest

from valnode.errors import TerraformError
from valnode.terraform.runner import EIPLimitError, TerraformCliRunner


class DummyCP:
    def __init__(self, rc=0, out="", err=""):
        self.returncode = rc
        self.stdout = out
        self.stderr = err


def test_apply_runs_in_workdir(monkeypatch, tmp_path: Path):
    calls = []

    def fake_run(argv, cwd=None, check=False, text=False, capture_output=False, env=None):
        calls.append((argv, cwd))
        return DummyCP(0)

    monkeypatch.setattr(subprocess, "run", fake_run)

    tf = TerraformCliRunner(tmp_path)
    tf.init()
    tf.apply()

    assert calls[0] == (["terraform", "init", "-input=false", "-no-color"], str(tmp_path))
    assert calls[1][0] == ["terraform", "apply", "-auto-approve", "-input=false", "-no-color"]


def test_write_spec(tmp_path: Path):
    path = TerraformCliRunner(tmp_path / "tf").write_spec({"resource": {}})
    assert json.loads(path.read_text()) == {"resource": {}}


def test_outputs_are_flattened(monkeypatch, tmp_path: Path):
    raw = {"instance_ids_us-east-1": {"sensitive": False, "type": "list", "value": ["i-1", "i-2"]}}
    monkeypatch.setattr(subprocess, "run", lambda argv, **kw: DummyCP(0, json.dumps(raw)))

    tf = TerraformCliRunner(tmp_path)

    assert tf.outputs() == {"instance_ids_us-east-1": ["i-1", "i-2"]}
    assert tf.output_list("instance_ids_us-east-1") == ["i-1", "i-2"]
    with pytest.raises(TerraformError):
        tf.output_list("missing")


def test_eip_limit_is_recognised(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(
        subprocess, "run", lambda argv, **kw: DummyCP(1, "", "Error: AddressLimitExceeded: too many addresses")
    )
    with pytest.raises(EIPLimitError):
        TerraformCliRunner(tmp_path).apply()


def test_failure_carries_stderr(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(subprocess, "run", lambda argv, **kw: DummyCP(1, "", "Error: invalid credentials"))
    with pytest.raises(TerraformError, match="invalid credentials") as excinfo:
        TerraformCliRunner(tmp_path).apply()
    assert not isinstance(excinfo.value, EIPLimitError)
