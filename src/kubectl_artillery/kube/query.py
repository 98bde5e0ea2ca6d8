"""
Service Query Orchestration

Resolves a list of Service names into liveness endpoints and classifies every
name into exactly one outcome:

- ``QueryMiss``: no Service with that name exists in the namespace
- ``LivenessMiss``: the Service exists but no HTTP liveness endpoint could be
  resolved, either because its selector matched no pods or because none of the
  matched containers declares a resolvable HTTP liveness probe
- ``LivenessHit``: the Service exists and at least one endpoint was resolved

Not-found and no-probe are data. Only cluster failures are raised, and they
abort the whole query.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum

import structlog

from ..errors import QueryTimeoutError
from .accessor import ClusterAccessor
from .models import ProbeEndpoint, ServiceQuery, ServiceSelection
from .probes import dedupe_endpoints, resolve_probe_endpoints

logger = structlog.get_logger(__name__)

DEFAULT_MAX_WORKERS = 4


class QueryOutcome(Enum):
    """Classification of a queried Service name."""

    QUERY_MISS = "query_miss"
    LIVENESS_MISS = "liveness_miss"
    LIVENESS_HIT = "liveness_hit"


@dataclass(frozen=True)
class QueryMiss:
    """No Service with the queried name exists."""

    query: ServiceQuery

    outcome = QueryOutcome.QUERY_MISS

    @property
    def queried_service_name(self) -> str:
        return self.query.name


@dataclass(frozen=True)
class LivenessMiss:
    """The Service exists but exposes no resolvable HTTP liveness endpoint."""

    query: ServiceQuery
    selection: ServiceSelection
    matched_pods: int = 0

    outcome = QueryOutcome.LIVENESS_MISS

    @property
    def queried_service_name(self) -> str:
        return self.query.name

    @property
    def selection_service_name(self) -> str:
        return self.selection.name


@dataclass(frozen=True)
class LivenessHit:
    """The Service exists and has at least one resolved liveness endpoint."""

    query: ServiceQuery
    selection: ServiceSelection
    endpoints: tuple[ProbeEndpoint, ...]

    outcome = QueryOutcome.LIVENESS_HIT

    @property
    def queried_service_name(self) -> str:
        return self.query.name

    @property
    def selection_service_name(self) -> str:
        return self.selection.name


QueryResult = QueryMiss | LivenessMiss | LivenessHit


class QueryResultSet(Sequence):
    """Query results in the order the names were requested."""

    def __init__(self, results: Sequence[QueryResult]):
        self._results: tuple[QueryResult, ...] = tuple(results)

    def __getitem__(self, index):
        return self._results[index]

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[QueryResult]:
        return iter(self._results)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryResultSet):
            return NotImplemented
        return self._results == other._results

    def __repr__(self) -> str:
        return f"QueryResultSet({list(self._results)!r})"

    def query_misses(self) -> list[QueryMiss]:
        """Names that matched no Service."""
        return [r for r in self._results if isinstance(r, QueryMiss)]

    def liveness_misses(self) -> list[LivenessMiss]:
        """Services found without any resolvable liveness endpoint."""
        return [r for r in self._results if isinstance(r, LivenessMiss)]

    def liveness_hits(self) -> list[LivenessHit]:
        """Services with at least one resolved liveness endpoint."""
        return [r for r in self._results if isinstance(r, LivenessHit)]

    def has_query_hits(self) -> bool:
        """True when at least one name matched a Service."""
        return any(not isinstance(r, QueryMiss) for r in self._results)

    def has_liveness_hits(self) -> bool:
        """True when at least one Service resolved liveness endpoints."""
        return any(isinstance(r, LivenessHit) for r in self._results)


def _remaining(deadline: float | None, namespace: str) -> float | None:
    """Seconds left before ``deadline``; raises once it has passed."""
    if deadline is None:
        return None
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise QueryTimeoutError(
            f"service query in namespace {namespace} exceeded its deadline"
        )
    return remaining


def query_service(
    name: str,
    namespace: str,
    accessor: ClusterAccessor,
    deadline: float | None = None,
) -> QueryResult:
    """Classify a single Service name. Blocking; raises ClusterAccessError.

    ``deadline`` is a ``time.monotonic()`` instant; every cluster read gets
    the time remaining until it as its request timeout.
    """
    query = ServiceQuery(name=name, namespace=namespace)

    selection = accessor.get_service(
        name, namespace, request_timeout=_remaining(deadline, namespace)
    )
    if selection is None:
        return QueryMiss(query=query)

    pods = accessor.list_pods_by_selector(
        selection.selector, namespace, request_timeout=_remaining(deadline, namespace)
    )
    if not pods:
        return LivenessMiss(query=query, selection=selection, matched_pods=0)

    resolved: list[ProbeEndpoint] = []
    for pod in pods:
        resolved.extend(resolve_probe_endpoints(pod, selection))

    endpoints = dedupe_endpoints(resolved)
    if not endpoints:
        return LivenessMiss(query=query, selection=selection, matched_pods=len(pods))

    return LivenessHit(query=query, selection=selection, endpoints=endpoints)


async def do_query(
    names: Sequence[str],
    namespace: str,
    accessor: ClusterAccessor,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout: float | None = None,
) -> QueryResultSet:
    """Query every name concurrently and return results in input order.

    Lookups run on a dedicated thread pool, at most ``max_workers`` at a time.
    The first cluster error stops all remaining lookups and is re-raised.
    ``timeout`` bounds the whole query, not each lookup: each read is handed
    the time left until the deadline, and on timeout or error the pool is
    abandoned without waiting for reads still in flight.
    """
    if max_workers < 1:
        raise ValueError("max_workers must be at least 1")

    loop = asyncio.get_running_loop()
    deadline = None if timeout is None else time.monotonic() + timeout
    executor = ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix="service-lookup"
    )
    semaphore = asyncio.Semaphore(max_workers)
    results: list[QueryResult | None] = [None] * len(names)
    aborted = False

    async def lookup(index: int, name: str) -> None:
        nonlocal aborted
        async with semaphore:
            # A failed lookup sets this before releasing its slot, so queued names never start.
            if aborted:
                return
            try:
                results[index] = await loop.run_in_executor(
                    executor, query_service, name, namespace, accessor, deadline
                )
            except Exception:
                aborted = True
                raise
            logger.debug(
                "service_lookup",
                service=name,
                namespace=namespace,
                outcome=results[index].outcome.value,
            )

    tasks = [asyncio.create_task(lookup(i, name)) for i, name in enumerate(names)]
    try:
        await asyncio.wait_for(asyncio.gather(*tasks), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise QueryTimeoutError(
            f"service query in namespace {namespace} timed out after {timeout}s",
            cause=e,
        ) from e
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        executor.shutdown(wait=False, cancel_futures=True)

    result_set = QueryResultSet(results)
    logger.info(
        "query_completed",
        namespace=namespace,
        services=len(result_set),
        query_misses=len(result_set.query_misses()),
        liveness_hits=len(result_set.liveness_hits()),
    )
    return result_set


def run_query(
    names: Sequence[str],
    namespace: str,
    accessor: ClusterAccessor,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    timeout: float | None = None,
) -> QueryResultSet:
    """Blocking wrapper around :func:`do_query`."""
    return asyncio.run(
        do_query(names, namespace, accessor, max_workers=max_workers, timeout=timeout)
    )
