"""
Cluster Accessor

Read-only façade over the two cluster reads a scaffold query performs:
fetching a Service by name and listing the Pods its selector matches.
Each call is a single attempt; retry policy belongs to the caller. A
``request_timeout`` (seconds) bounds the HTTP request itself so a hung API
server cannot outlive the caller's deadline.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import structlog
import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from ..errors import ClusterAccessError, ClusterConfigError
from .models import (
    ContainerView,
    HttpProbe,
    PodSpecView,
    ServicePort,
    ServiceSelection,
)

logger = structlog.get_logger(__name__)

DEFAULT_NAMESPACE = "default"
SERVICE_ACCOUNT_NAMESPACE = Path("/var/run/secrets/kubernetes.io/serviceaccount/namespace")


class ClusterAccessor(Protocol):
    """Read contract the query orchestrator depends on."""

    default_namespace: str

    def get_service(
        self, name: str, namespace: str, request_timeout: float | None = None
    ) -> ServiceSelection | None:
        """Return the Service, or None when it does not exist."""
        ...

    def list_pods_by_selector(
        self,
        selector: Mapping[str, str],
        namespace: str,
        request_timeout: float | None = None,
    ) -> list[PodSpecView]:
        """Return the Pods matching ``selector``; an empty list is not an error."""
        ...


def format_label_selector(selector: Mapping[str, str]) -> str:
    """Render a selector mapping as a Kubernetes equality-based label selector."""
    return ",".join(f"{key}={value}" for key, value in sorted(selector.items()))


class KubernetesClusterAccessor:
    """ClusterAccessor backed by the official Kubernetes Python client."""

    def __init__(
        self,
        core_v1: client.CoreV1Api,
        default_namespace: str = DEFAULT_NAMESPACE,
    ):
        self.core_v1 = core_v1
        self.default_namespace = default_namespace

    @classmethod
    def from_kubeconfig(
        cls, kubeconfig: str | None = None, context: str | None = None
    ) -> KubernetesClusterAccessor:
        """Build an accessor from a kubeconfig file or the in-cluster service account.

        An explicit kubeconfig or context always selects kubeconfig loading.
        Otherwise the in-cluster configuration is tried first, then the
        default kubeconfig location.
        """
        try:
            if kubeconfig is None and context is None:
                try:
                    configuration = client.Configuration()
                    config.load_incluster_config(client_configuration=configuration)
                    logger.debug("cluster_config_loaded", source="in-cluster")
                    return cls(
                        client.CoreV1Api(client.ApiClient(configuration)),
                        _in_cluster_namespace(),
                    )
                except ConfigException:
                    pass

            api_client = config.new_client_from_config(
                config_file=kubeconfig, context=context
            )
            namespace = _kubeconfig_namespace(kubeconfig, context)
            logger.debug(
                "cluster_config_loaded",
                source="kubeconfig",
                kubeconfig=kubeconfig,
                context=context,
                namespace=namespace,
            )
            return cls(client.CoreV1Api(api_client), namespace)

        except (ConfigException, OSError) as e:
            raise ClusterConfigError(
                f"unable to load cluster configuration: {e}", cause=e
            ) from e

    def get_service(
        self, name: str, namespace: str, request_timeout: float | None = None
    ) -> ServiceSelection | None:
        try:
            service = self.core_v1.read_namespaced_service(
                name=name, namespace=namespace, _request_timeout=request_timeout
            )
        except ApiException as e:
            if e.status == 404:
                logger.debug("service_not_found", service=name, namespace=namespace)
                return None
            raise ClusterAccessError(
                f"failed to get service {namespace}/{name}: {e.status} {e.reason}",
                service_name=name,
                cause=e,
            ) from e
        except (urllib3.exceptions.HTTPError, OSError) as e:
            raise ClusterAccessError(
                f"failed to get service {namespace}/{name}: {e}",
                service_name=name,
                cause=e,
            ) from e

        return _service_selection(name, namespace, service)

    def list_pods_by_selector(
        self,
        selector: Mapping[str, str],
        namespace: str,
        request_timeout: float | None = None,
    ) -> list[PodSpecView]:
        # An empty selector would match every pod in the namespace, but a
        # Service without a selector manages no pods at all.
        if not selector:
            return []

        label_selector = format_label_selector(selector)
        try:
            pods = self.core_v1.list_namespaced_pod(
                namespace=namespace,
                label_selector=label_selector,
                _request_timeout=request_timeout,
            )
        except ApiException as e:
            raise ClusterAccessError(
                f"failed to list pods in {namespace} for {label_selector}: "
                f"{e.status} {e.reason}",
                cause=e,
            ) from e
        except (urllib3.exceptions.HTTPError, OSError) as e:
            raise ClusterAccessError(
                f"failed to list pods in {namespace} for {label_selector}: {e}",
                cause=e,
            ) from e

        return [_pod_view(pod) for pod in pods.items or []]


def _service_selection(name: str, namespace: str, service: Any) -> ServiceSelection:
    spec = service.spec
    ports = tuple(
        ServicePort(port=p.port, target_port=p.target_port, name=p.name)
        for p in (spec.ports or [])
    )
    return ServiceSelection(
        name=name,
        namespace=namespace,
        selector=dict(spec.selector or {}),
        ports=ports,
    )


def _pod_view(pod: Any) -> PodSpecView:
    containers = []
    for container in pod.spec.containers or []:
        named_ports = {
            port.name: port.container_port
            for port in container.ports or []
            if port.name
        }
        probe = None
        liveness = container.liveness_probe
        if liveness is not None and liveness.http_get is not None:
            http_get = liveness.http_get
            probe = HttpProbe(port=http_get.port, path=http_get.path, scheme=http_get.scheme)

        containers.append(
            ContainerView(name=container.name, named_ports=named_ports, liveness_probe=probe)
        )

    return PodSpecView(name=pod.metadata.name, containers=tuple(containers))


def _kubeconfig_namespace(kubeconfig: str | None, context: str | None) -> str:
    contexts, active = config.list_kube_config_contexts(config_file=kubeconfig)
    selected = active
    if context is not None:
        selected = next((c for c in contexts if c.get("name") == context), None)
    if not selected:
        return DEFAULT_NAMESPACE
    return selected.get("context", {}).get("namespace") or DEFAULT_NAMESPACE


def _in_cluster_namespace() -> str:
    try:
        return SERVICE_ACCOUNT_NAMESPACE.read_text().strip() or DEFAULT_NAMESPACE
    except OSError:
        return DEFAULT_NAMESPACE
