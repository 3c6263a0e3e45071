import pytest

from buildtask.config import ImageConfig
from buildtask.schemas import Build, BuildSpec, Container, ObjectMeta, ServiceAccount
from buildtask.store import InMemoryIdentityStore


@pytest.fixture(autouse=True)
def isolated_home(monkeypatch, tmp_path):
    # Never read the developer's real config or image overrides
    home = tmp_path / "buildtask_home"
    monkeypatch.setenv("BUILDTASK_HOME", str(home))
    for var in ("BUILDTASK_CREDS_IMAGE", "BUILDTASK_GIT_IMAGE",
                "BUILDTASK_GCS_FETCHER_IMAGE", "BUILDTASK_NOP_IMAGE"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def images():
    return ImageConfig(
        creds_image="creds:test",
        git_image="git:test",
        gcs_fetcher_image="gcs:test",
        nop_image="nop:test",
    )


@pytest.fixture
def store():
    """Store holding only the default service account, with no secrets."""
    return InMemoryIdentityStore([ServiceAccount(name="default", namespace="default")])


@pytest.fixture
def make_build():
    """Factory for Builds named "build-1" in the default namespace."""
    def _make(**spec_kwargs) -> Build:
        spec_kwargs.setdefault("steps", (Container(name="build", image="busybox"),))
        return Build(
            metadata=ObjectMeta(name="build-1", namespace="default", uid="uid-1234"),
            spec=BuildSpec(**spec_kwargs),
        )
    return _make
