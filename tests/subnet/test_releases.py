import pytest
import requests

from valnode.config.models import ReleaseSettings
from valnode.errors import ReleaseLookupError
from valnode.subnet.releases import ReleaseClient


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"status {self.status}")

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, routes):
        self.routes = routes
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        return self.routes.get(url, FakeResponse({}, status=404))


SETTINGS = ReleaseSettings(
    github_api="https://gh.test",
    node_compatibility_url="https://raw.test/node.json",
    evm_compatibility_url="https://raw.test/evm.json",
)


def test_latest_release_and_pre_release():
    session = FakeSession({
        "https://gh.test/repos/ava-labs/subnet-evm/releases/latest": FakeResponse({"tag_name": "v0.6.1"}),
        "https://gh.test/repos/ava-labs/subnet-evm/releases": FakeResponse(
            [{"tag_name": "v0.6.2-rc.0"}, {"tag_name": "v0.6.1"}]
        ),
    })
    client = ReleaseClient(SETTINGS, session=session)

    assert client.latest_release("ava-labs/subnet-evm") == "v0.6.1"
    assert client.latest_pre_release("ava-labs/subnet-evm") == "v0.6.2-rc.0"


def test_node_version_from_evm_rpc():
    session = FakeSession({
        "https://raw.test/evm.json": FakeResponse({"rpcChainVMProtocolVersion": {"v0.6.1": 33}}),
        "https://raw.test/node.json": FakeResponse({"33": ["v1.11.0", "v1.11.2", "v1.11.1"]}),
    })
    client = ReleaseClient(SETTINGS, session=session)

    rpc = client.evm_rpc_version("v0.6.1")
    assert rpc == 33
    assert client.latest_node_version_for_rpc(rpc) == "v1.11.2"


def test_lookup_failures():
    client = ReleaseClient(SETTINGS, session=FakeSession({
        "https://raw.test/evm.json": FakeResponse({"rpcChainVMProtocolVersion": {}}),
        "https://raw.test/node.json": FakeResponse({"33": []}),
    }))

    with pytest.raises(ReleaseLookupError, match="failed to fetch"):
        client.latest_release("ava-labs/missing")
    with pytest.raises(ReleaseLookupError, match="no RPC version"):
        client.evm_rpc_version("v9.9.9")
    with pytest.raises(ReleaseLookupError, match="no node release"):
        client.latest_node_version_for_rpc(33)
