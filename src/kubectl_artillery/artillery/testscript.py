"""
Artillery Test Scripts

Projects the liveness endpoints of one Service into an Artillery test script:
a functional environment hitting every endpoint once and expecting a 200.
"""

from __future__ import annotations

import builtins
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ..kube.models import ProbeEndpoint, ServicePort
from ..kube.probes import dedupe_endpoints

FUNCTIONAL_ENVIRONMENT = "functional"
EXPECTED_STATUS_CODE = 200


@dataclass
class TestPhase:
    """A load phase: how long it lasts and how many virtual users arrive."""

    __test__ = False

    duration: int = 1
    arrival_count: int = 1

    def to_dict(self) -> builtins.dict[str, Any]:
        return {"duration": self.duration, "arrivalCount": self.arrival_count}


@dataclass
class TestEnvironment:
    """Named environment overriding the phases and plugins of a script."""

    __test__ = False

    phases: builtins.list[TestPhase] = field(default_factory=lambda: [TestPhase()])
    plugins: builtins.dict[str, Any] = field(default_factory=lambda: {"expect": {}})

    def to_dict(self) -> builtins.dict[str, Any]:
        return {
            "phases": [phase.to_dict() for phase in self.phases],
            "plugins": {name: dict(opts) for name, opts in self.plugins.items()},
        }


@dataclass
class TestStep:
    """An HTTP GET step with its expected status code."""

    __test__ = False

    url: str
    status_code: int = EXPECTED_STATUS_CODE

    def to_dict(self) -> builtins.dict[str, Any]:
        return {"get": {"url": self.url, "expect": [{"statusCode": self.status_code}]}}


@dataclass
class TestScript:
    """Artillery test script document."""

    __test__ = False

    target: str
    steps: builtins.list[TestStep] = field(default_factory=list)
    environments: builtins.dict[str, TestEnvironment] = field(
        default_factory=lambda: {FUNCTIONAL_ENVIRONMENT: TestEnvironment()}
    )

    def to_dict(self) -> builtins.dict[str, Any]:
        """Return the script as the mapping Artillery expects in YAML."""
        return {
            "config": {
                "target": self.target,
                "environments": {
                    name: env.to_dict() for name, env in self.environments.items()
                },
            },
            "scenarios": [{"flow": [step.to_dict() for step in self.steps]}],
        }


def service_host(service_name: str, namespace: str | None = None) -> str:
    """In-cluster DNS name of a Service."""
    if namespace:
        return f"{service_name}.{namespace}"
    return service_name


def project_test_script(
    service_name: str,
    endpoints: Sequence[ProbeEndpoint],
    *,
    namespace: str | None = None,
    ports: Sequence[ServicePort] = (),
) -> TestScript:
    """Build the test script for one Service.

    The target uses the first declared Service port, or the first endpoint's
    port when the Service declares none. Each distinct (port, path) endpoint
    becomes one GET step.
    """
    if not endpoints:
        raise ValueError(f"service {service_name} has no liveness endpoints to project")

    host = service_host(service_name, namespace)
    distinct = dedupe_endpoints(endpoints)
    first = distinct[0]
    target_port = ports[0].port if ports else first.port

    return TestScript(
        target=f"{first.scheme.value}://{host}:{target_port}",
        steps=[
            TestStep(url=f"{e.scheme.value}://{host}:{e.port}{e.path}") for e in distinct
        ],
    )
