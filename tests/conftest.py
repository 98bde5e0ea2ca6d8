"""
Global pytest configuration and fixtures for kubectl-artillery tests.
"""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog
from fakes import FakeClusterAccessor, make_container, make_pod, make_service

from kubectl_artillery.kube import ServicePort


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment settings out of the tests."""
    for var in (
        "KUBECTL_ARTILLERY_NAMESPACE",
        "KUBECTL_ARTILLERY_KUBECONFIG",
        "KUBECTL_ARTILLERY_CONTEXT",
        "KUBECTL_ARTILLERY_QUERY_TIMEOUT",
        "KUBECTL_ARTILLERY_MAX_WORKERS",
        "KUBECTL_ARTILLERY_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def cluster() -> FakeClusterAccessor:
    """A namespace with one probed service and one service without pods.

    - ``svc-a`` selects one pod whose container probes named port ``http``
      (8080) on ``/health``
    - ``svc-b`` selects nothing
    """
    svc_a = make_service(
        "svc-a",
        ports=(ServicePort(port=80, target_port="http", name="http"),),
    )
    svc_b = make_service("svc-b", selector={"app": "nothing-here"})
    return FakeClusterAccessor(
        services=[svc_a, svc_b],
        pods={"app=svc-a": [make_pod("svc-a-0", make_container())]},
    )
