"""
Kubernetes Service Resolution

Resolves Service names into HTTP liveness endpoints by correlating each
Service's selector with the Pods it matches and their container liveness
probes.

Usage:
    from kubectl_artillery.kube import KubernetesClusterAccessor, run_query

    accessor = KubernetesClusterAccessor.from_kubeconfig()
    results = run_query(["orders", "billing"], accessor.default_namespace, accessor)

    for hit in results.liveness_hits():
        print(hit.selection_service_name, hit.endpoints)
"""

from .accessor import ClusterAccessor, KubernetesClusterAccessor, format_label_selector
from .models import (
    ContainerView,
    HttpProbe,
    PodSpecView,
    ProbeEndpoint,
    ProbeScheme,
    ServicePort,
    ServiceQuery,
    ServiceSelection,
)
from .probes import dedupe_endpoints, resolve_probe_endpoints
from .query import (
    LivenessHit,
    LivenessMiss,
    QueryMiss,
    QueryOutcome,
    QueryResult,
    QueryResultSet,
    do_query,
    query_service,
    run_query,
)

__all__ = [
    "ClusterAccessor",
    "ContainerView",
    "HttpProbe",
    "KubernetesClusterAccessor",
    "LivenessHit",
    "LivenessMiss",
    "PodSpecView",
    "ProbeEndpoint",
    "ProbeScheme",
    "QueryMiss",
    "QueryOutcome",
    "QueryResult",
    "QueryResultSet",
    "ServicePort",
    "ServiceQuery",
    "ServiceSelection",
    "dedupe_endpoints",
    "do_query",
    "format_label_selector",
    "query_service",
    "resolve_probe_endpoints",
    "run_query",
]
