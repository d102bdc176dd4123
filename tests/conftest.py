import threading
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from valnode.cloud.interface import SecurityGroup
from valnode.config.models import AppSettings, SSHSettings
from valnode.errors import CloudError, TerraformError
from valnode.store.app_store import AppStore
from valnode.terraform.spec import ids_output, ips_output

# ----------------- Prompter -----------------


class ScriptedPrompter:
    """Answers prompts from a fixed script, in order, and records every question."""

    def __init__(self, answers=None):
        self.answers = list(answers or [])
        self.questions: List[str] = []
        self._lock = threading.Lock()

    def _next(self, question):
        with self._lock:
            self.questions.append(question)
            if not self.answers:
                raise AssertionError(f"unexpected prompt: {question}")
            answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer

    def capture_option(self, question, options):
        answer = self._next(question)
        assert answer in list(options), f"{answer!r} not offered for {question!r}"
        return answer

    def capture_index(self, question, items):
        return self._next(question)

    def capture_string(self, question, *, validator=None):
        answer = self._next(question)
        return validator(answer) if validator else answer

    def capture_uint64(self, question, *, allow_zero=True):
        return self._next(question)

    def capture_positive_int(self, question):
        return self._next(question)

    def capture_address(self, question):
        return self._next(question)

    def capture_yes_no(self, question):
        return self._next(question)

    def capture_existing_path(self, question):
        return self._next(question)

    def capture_version(self, question):
        return self._next(question)


# ----------------- Cloud -----------------


class FakeProvider:
    cloud_service = "aws"

    def __init__(
        self,
        region: str,
        *,
        key_pairs=(),
        security_groups: Optional[Dict[str, SecurityGroup]] = None,
        stop_failures=(),
        public_ips: Optional[Dict[str, str]] = None,
    ):
        self.region = region
        self.key_pairs = set(key_pairs)
        self.security_groups = security_groups or {}
        self.stop_failures = set(stop_failures)
        self.public_ips = public_ips or {}
        self.calls: List[tuple] = []

    def key_pair_exists(self, name):
        self.calls.append(("key_pair_exists", name))
        return name in self.key_pairs

    def find_security_group(self, name):
        self.calls.append(("find_security_group", name))
        return self.security_groups.get(name)

    def get_ubuntu_image_id(self):
        self.calls.append(("get_ubuntu_image_id",))
        return f"ami-{self.region}"

    def stop_instance(self, instance_id):
        self.calls.append(("stop_instance", instance_id))
        if instance_id in self.stop_failures:
            raise CloudError(f"cannot stop {instance_id}")

    def instance_public_ips(self, instance_ids):
        self.calls.append(("instance_public_ips", list(instance_ids)))
        return {i: self.public_ips.get(i, "") for i in instance_ids}

    def check_eip_quota(self, count):
        self.calls.append(("check_eip_quota", count))


class ProviderSet:
    """provider_factory that hands out (and remembers) one FakeProvider per region."""

    def __init__(self, **per_region_kwargs):
        self.per_region_kwargs = per_region_kwargs
        self.providers: Dict[str, FakeProvider] = {}

    def __call__(self, region):
        kwargs = self.per_region_kwargs.get(region.replace("-", "_"), {})
        provider = FakeProvider(region, **kwargs)
        self.providers[region] = provider
        return provider


# ----------------- Terraform -----------------


class FakeTerraform:
    def __init__(self, workdir: Path, *, outputs=None, apply_error: Optional[TerraformError] = None):
        self.workdir = Path(workdir)
        self._outputs = outputs or {}
        self.apply_error = apply_error
        self.calls: List[str] = []
        self.spec = None

    def write_spec(self, spec):
        self.calls.append("write_spec")
        self.spec = spec
        return self.workdir / "main.tf.json"

    def init(self):
        self.calls.append("init")

    def apply(self):
        self.calls.append("apply")
        if self.apply_error is not None:
            raise self.apply_error

    def destroy(self):
        self.calls.append("destroy")

    def outputs(self):
        self.calls.append("outputs")
        return dict(self._outputs)


class TerraformFactory:
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.instances: List[FakeTerraform] = []

    def __call__(self, workdir):
        tf = FakeTerraform(workdir, **self.kwargs)
        self.instances.append(tf)
        return tf


def region_outputs(region: str, ids: List[str], ips: Optional[List[str]] = None) -> dict:
    out = {ids_output(region): ids}
    if ips is not None:
        out[ips_output(region)] = ips
    return out


# ----------------- SSH -----------------


class FakeRunner:
    def __init__(self, host, log, *, responses=None, fail_check=False):
        self.host = host
        self.log = log
        self.responses = responses or {}
        self.fail_check = fail_check

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.log.append(("close", self.host.node_id))

    def check(self, cmd, *, sudo=False, timeout=None):
        self.log.append(("check", self.host.node_id, cmd))
        if self.fail_check:
            raise ConnectionError(f"{self.host.node_id} unreachable")
        return "ok"

    def post_local(self, path, payload, *, timeout=None):
        self.log.append(("post_local", self.host.node_id, payload["method"]))
        return self.responses.get(payload["method"], {})


class FakeConnector:
    def __init__(self, *, unreachable=(), responses=None):
        self.unreachable = set(unreachable)
        self.responses = responses or {}
        self.log: List[tuple] = []
        self._lock = threading.Lock()

    def __call__(self, host, *, connect_timeout=None):
        with self._lock:
            self.log.append(("connect", host.node_id))
        return FakeRunner(
            host,
            self.log,
            responses=self.responses.get(host.node_id, {}),
            fail_check=host.node_id in self.unreachable,
        )


class FakeScripts:
    """Records the remote steps run on each host."""

    def __init__(self, *, fail_on=None, bootstrapped=None, sync_status=None):
        self.fail_on = fail_on or {}            # alias -> step name
        self.bootstrapped = bootstrapped or {}
        self.sync_status = sync_status or {}
        self.calls: List[tuple] = []
        self._lock = threading.Lock()

    def _record(self, runner, step):
        with self._lock:
            self.calls.append((runner.host.node_id, step))
        if self.fail_on.get(runner.host.node_id) == step:
            raise RuntimeError(f"{step} failed")

    def upload_staking_files(self, runner, node_dir):
        self._record(runner, "upload_staking_files")

    def setup_node(self, runner, node_config_path, network, *, node_version="", use_static_ip=True):
        self._record(runner, "setup_node")

    def setup_build_env(self, runner):
        self._record(runner, "setup_build_env")

    def setup_cli_from_source(self, runner, branch):
        self._record(runner, "setup_cli_from_source")

    def setup_devnet(self, runner, node_dir):
        self._record(runner, "setup_devnet")

    def check_bootstrapped(self, runner):
        self._record(runner, "check_bootstrapped")
        return self.bootstrapped.get(runner.host.node_id, False)

    def subnet_sync_status(self, runner, blockchain_id):
        self._record(runner, "subnet_sync_status")
        return self.sync_status.get(runner.host.node_id, "")


# ----------------- Fixtures -----------------


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    return AppSettings(
        base_dir=tmp_path / "valnode",
        ssh=SSHSettings(wait_timeout=0, wait_delay=0),
    )


@pytest.fixture
def store(settings: AppSettings) -> AppStore:
    return AppStore(settings.base_dir)
