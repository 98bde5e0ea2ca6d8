"""
Kubernetes Read Models

Immutable views of the cluster state a scaffold query needs: the Service
being queried, the Pods its selector matches, and the resolved liveness
endpoints.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class ProbeScheme(Enum):
    """URL schemes a liveness probe can be reached with."""

    HTTP = "http"
    HTTPS = "https"

    @classmethod
    def from_probe(cls, scheme: str | None) -> ProbeScheme:
        """Kubernetes spells schemes in upper case and defaults to HTTP."""
        if scheme and scheme.lower() == cls.HTTPS.value:
            return cls.HTTPS
        return cls.HTTP


def _frozen_mapping(values: Mapping[str, object] | None) -> Mapping:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True)
class ServiceQuery:
    """A Service name requested by the user and the namespace it is looked up in."""

    name: str
    namespace: str


@dataclass(frozen=True)
class ServicePort:
    """A port declared on a Service."""

    port: int
    target_port: int | str | None = None
    name: str | None = None


@dataclass(frozen=True)
class ServiceSelection:
    """A Service that was found in the cluster."""

    name: str
    namespace: str
    selector: Mapping[str, str] = field(default_factory=dict)
    ports: tuple[ServicePort, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "selector", _frozen_mapping(self.selector))
        object.__setattr__(self, "ports", tuple(self.ports))


@dataclass(frozen=True)
class HttpProbe:
    """The httpGet part of a container liveness probe.

    ``port`` is either a port number or the name of a container port.
    """

    port: int | str
    path: str | None = None
    scheme: str | None = None

    @property
    def port_number(self) -> int | None:
        """Numeric port reference, or None when the probe refers to a named port."""
        if isinstance(self.port, int):
            return self.port
        if self.port.isdigit():
            return int(self.port)
        return None


@dataclass(frozen=True)
class ContainerView:
    """The parts of a container spec needed to resolve its liveness probe."""

    name: str
    named_ports: Mapping[str, int] = field(default_factory=dict)
    liveness_probe: HttpProbe | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "named_ports", _frozen_mapping(self.named_ports))


@dataclass(frozen=True)
class PodSpecView:
    """A Pod reduced to its name and containers."""

    name: str
    containers: tuple[ContainerView, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "containers", tuple(self.containers))


@dataclass(frozen=True)
class ProbeEndpoint:
    """A resolved HTTP liveness endpoint. The port is always concrete."""

    port: int
    path: str = "/"
    scheme: ProbeScheme = ProbeScheme.HTTP
    container: str | None = None

    @property
    def key(self) -> tuple[int, str]:
        """Identity used to deduplicate endpoints across pods."""
        return self.port, self.path
