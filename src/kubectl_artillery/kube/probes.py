"""
Liveness Probe Resolution

Turns the HTTP liveness probes declared by a Pod's containers into concrete
endpoints. Probes are defined per container, independently of the Service's
own port list, so Service ports are never used to reject an endpoint.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from .models import ContainerView, PodSpecView, ProbeEndpoint, ProbeScheme, ServiceSelection

logger = structlog.get_logger(__name__)


def resolve_probe_endpoints(
    pod: PodSpecView, service: ServiceSelection
) -> list[ProbeEndpoint]:
    """Resolve the liveness endpoints of every container in ``pod``.

    A probe referring to a named port the container does not declare is
    skipped; the remaining containers are still resolved.
    """
    endpoints = []
    for container in pod.containers:
        endpoint = _resolve_container(container)
        if endpoint is None:
            continue
        endpoints.append(endpoint)

    logger.debug(
        "pod_probes_resolved",
        service=service.name,
        pod=pod.name,
        endpoints=len(endpoints),
    )
    return endpoints


def _resolve_container(container: ContainerView) -> ProbeEndpoint | None:
    probe = container.liveness_probe
    if probe is None:
        return None

    port = probe.port_number
    if port is None:
        port = container.named_ports.get(str(probe.port))
        if port is None:
            logger.debug(
                "probe_port_unresolved",
                container=container.name,
                port_name=probe.port,
            )
            return None

    return ProbeEndpoint(
        port=port,
        path=_normalize_path(probe.path),
        scheme=ProbeScheme.from_probe(probe.scheme),
        container=container.name,
    )


def _normalize_path(path: str | None) -> str:
    if not path:
        return "/"
    return path if path.startswith("/") else f"/{path}"


def dedupe_endpoints(endpoints: Iterable[ProbeEndpoint]) -> tuple[ProbeEndpoint, ...]:
    """Drop endpoints sharing a (port, path) with an earlier one, keeping order."""
    seen: dict[tuple[int, str], ProbeEndpoint] = {}
    for endpoint in endpoints:
        seen.setdefault(endpoint.key, endpoint)
    return tuple(seen.values())
