"""
kubectl-artillery Exceptions

Only infrastructure failures are raised. Per-service outcomes such as a
missing Service or a Service without liveness probes are encoded as query
results, never as exceptions.
"""


class ArtilleryError(Exception):
    """Base exception for kubectl-artillery errors."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ClusterAccessError(ArtilleryError):
    """Raised when the cluster API cannot be read (transport, API or auth failure)."""

    def __init__(
        self,
        message: str,
        service_name: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.service_name = service_name


class ClusterConfigError(ClusterAccessError):
    """Raised when no usable kubeconfig or in-cluster configuration is found."""


class QueryTimeoutError(ClusterAccessError):
    """Raised when a query does not complete before its deadline."""


class ManifestWriteError(ArtilleryError):
    """Raised when a generated document cannot be written to disk."""

    def __init__(self, message: str, path: str | None = None, cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.path = path


class InvalidArgumentError(ArtilleryError):
    """Raised when command input is rejected before touching the cluster."""
