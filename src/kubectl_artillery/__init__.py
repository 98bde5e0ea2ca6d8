"""
kubectl-artillery

Bootstraps Artillery load testing on Kubernetes: scaffolds test scripts from
the HTTP liveness probes behind a set of Services, and generates the Job and
Kustomization manifests that run a test script in-cluster.
"""

__version__ = "0.2.0"

from .errors import (
    ArtilleryError,
    ClusterAccessError,
    ClusterConfigError,
    InvalidArgumentError,
    ManifestWriteError,
    QueryTimeoutError,
)

__all__ = [
    "ArtilleryError",
    "ClusterAccessError",
    "ClusterConfigError",
    "InvalidArgumentError",
    "ManifestWriteError",
    "QueryTimeoutError",
    "__version__",
]
