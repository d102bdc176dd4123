import pytest
import requests

from valnode.errors import IPLookupError
from valnode.utils.net import get_public_ip


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"status {self.status}")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        return self.response


def test_returns_ip():
    session = FakeSession(FakeResponse({"ip": "203.0.113.7"}))
    assert get_public_ip("https://ip.test", session=session) == "203.0.113.7"
    assert session.urls == ["https://ip.test"]


@pytest.mark.parametrize(
    "response, message",
    [
        (FakeResponse({}), "no IP address found"),
        (FakeResponse({"ip": "not-an-ip"}), "invalid IP address"),
        (FakeResponse({"ip": "1.1.1.1"}, status=503), "unable to determine"),
        (FakeResponse(ValueError("bad json")), "unable to determine"),
    ],
)
def test_lookup_errors(response, message):
    with pytest.raises(IPLookupError, match=message):
        get_public_ip("https://ip.test", session=FakeSession(response))
