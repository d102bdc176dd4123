import pytest

from valnode.utils.versions import is_valid_semver, latest_version, sort_versions


@pytest.mark.parametrize(
    "version, ok",
    [
        ("v1.2.3", True),
        ("v0.6.0-rc.1", True),
        ("v1.2.3+build.5", True),
        ("1.2.3", False),
        ("v1.2", False),
        ("v01.2.3", False),
        ("", False),
    ],
)
def test_is_valid_semver(version, ok):
    assert is_valid_semver(version) is ok


def test_release_sorts_after_its_pre_release():
    assert sort_versions(["v1.10.0", "v1.2.0", "v1.10.0-rc.1"]) == ["v1.2.0", "v1.10.0-rc.1", "v1.10.0"]


def test_latest_version_skips_invalid():
    assert latest_version(["v0.5.0", "nightly", "v0.6.1"]) == "v0.6.1"
    assert latest_version(["nightly"]) is None
