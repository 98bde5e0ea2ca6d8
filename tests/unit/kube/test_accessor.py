from unittest.mock import MagicMock, patch

import pytest
import urllib3
from kubernetes import client
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from kubectl_artillery.errors import ClusterAccessError, ClusterConfigError
from kubectl_artillery.kube import (
    HttpProbe,
    KubernetesClusterAccessor,
    ServicePort,
    format_label_selector,
)


def _service(selector=None, ports=None) -> client.V1Service:
    return client.V1Service(
        metadata=client.V1ObjectMeta(name="orders", namespace="shop"),
        spec=client.V1ServiceSpec(
            selector=selector,
            ports=ports
            if ports is not None
            else [client.V1ServicePort(name="web", port=80, target_port="http")],
        ),
    )


def _pod(name: str, containers: list[client.V1Container]) -> client.V1Pod:
    return client.V1Pod(
        metadata=client.V1ObjectMeta(name=name),
        spec=client.V1PodSpec(containers=containers),
    )


@pytest.fixture
def core_v1() -> MagicMock:
    return MagicMock(spec=client.CoreV1Api)


@pytest.fixture
def accessor(core_v1) -> KubernetesClusterAccessor:
    return KubernetesClusterAccessor(core_v1, default_namespace="shop")


class TestGetService:
    def test_service_is_mapped_to_selection(self, accessor, core_v1) -> None:
        core_v1.read_namespaced_service.return_value = _service(selector={"app": "orders"})

        selection = accessor.get_service("orders", "shop")

        core_v1.read_namespaced_service.assert_called_once_with(
            name="orders", namespace="shop", _request_timeout=None
        )
        assert selection.name == "orders"
        assert selection.namespace == "shop"
        assert dict(selection.selector) == {"app": "orders"}
        assert selection.ports == (ServicePort(port=80, target_port="http", name="web"),)

    def test_not_found_returns_none(self, accessor, core_v1) -> None:
        core_v1.read_namespaced_service.side_effect = ApiException(status=404, reason="Not Found")

        assert accessor.get_service("orders", "shop") is None

    def test_api_error_is_fatal(self, accessor, core_v1) -> None:
        core_v1.read_namespaced_service.side_effect = ApiException(status=403, reason="Forbidden")

        with pytest.raises(ClusterAccessError) as exc_info:
            accessor.get_service("orders", "shop")

        assert exc_info.value.service_name == "orders"
        assert "403" in str(exc_info.value)

    def test_transport_error_is_fatal(self, accessor, core_v1) -> None:
        core_v1.read_namespaced_service.side_effect = urllib3.exceptions.MaxRetryError(
            pool=None, url="/api/v1/namespaces/shop/services/orders"
        )

        with pytest.raises(ClusterAccessError):
            accessor.get_service("orders", "shop")

    def test_request_timeout_reaches_the_client(self, accessor, core_v1) -> None:
        core_v1.read_namespaced_service.return_value = _service(selector={"app": "orders"})

        accessor.get_service("orders", "shop", request_timeout=2.5)

        core_v1.read_namespaced_service.assert_called_once_with(
            name="orders", namespace="shop", _request_timeout=2.5
        )

    def test_read_timeout_is_fatal(self, accessor, core_v1) -> None:
        core_v1.read_namespaced_service.side_effect = urllib3.exceptions.ReadTimeoutError(
            pool=None, url="/api/v1/namespaces/shop/services/orders", message="timed out"
        )

        with pytest.raises(ClusterAccessError) as exc_info:
            accessor.get_service("orders", "shop", request_timeout=0.1)

        assert exc_info.value.service_name == "orders"

    def test_missing_selector_becomes_empty(self, accessor, core_v1) -> None:
        core_v1.read_namespaced_service.return_value = _service(selector=None, ports=[])

        selection = accessor.get_service("orders", "shop")

        assert dict(selection.selector) == {}
        assert selection.ports == ()


class TestListPods:
    def test_selector_is_rendered_and_pods_mapped(self, accessor, core_v1) -> None:
        container = client.V1Container(
            name="web",
            ports=[
                client.V1ContainerPort(name="http", container_port=8080),
                client.V1ContainerPort(container_port=9000),
            ],
            liveness_probe=client.V1Probe(
                http_get=client.V1HTTPGetAction(path="/health", port="http", scheme="HTTP")
            ),
        )
        sidecar = client.V1Container(
            name="proxy",
            liveness_probe=client.V1Probe(
                _exec=client.V1ExecAction(command=["true"])
            ),
        )
        core_v1.list_namespaced_pod.return_value = client.V1PodList(
            items=[_pod("orders-0", [container, sidecar])]
        )

        [pod] = accessor.list_pods_by_selector({"tier": "web", "app": "orders"}, "shop")

        core_v1.list_namespaced_pod.assert_called_once_with(
            namespace="shop", label_selector="app=orders,tier=web", _request_timeout=None
        )
        assert pod.name == "orders-0"
        web, proxy = pod.containers
        assert dict(web.named_ports) == {"http": 8080}
        assert web.liveness_probe == HttpProbe(port="http", path="/health", scheme="HTTP")
        assert proxy.liveness_probe is None

    def test_empty_selector_matches_no_pods(self, accessor, core_v1) -> None:
        assert accessor.list_pods_by_selector({}, "shop") == []
        core_v1.list_namespaced_pod.assert_not_called()

    def test_no_items_is_not_an_error(self, accessor, core_v1) -> None:
        core_v1.list_namespaced_pod.return_value = client.V1PodList(items=[])

        assert accessor.list_pods_by_selector({"app": "orders"}, "shop") == []

    def test_request_timeout_reaches_the_client(self, accessor, core_v1) -> None:
        core_v1.list_namespaced_pod.return_value = client.V1PodList(items=[])

        accessor.list_pods_by_selector({"app": "orders"}, "shop", request_timeout=1.5)

        core_v1.list_namespaced_pod.assert_called_once_with(
            namespace="shop", label_selector="app=orders", _request_timeout=1.5
        )

    def test_api_error_is_fatal(self, accessor, core_v1) -> None:
        core_v1.list_namespaced_pod.side_effect = ApiException(status=500, reason="boom")

        with pytest.raises(ClusterAccessError):
            accessor.list_pods_by_selector({"app": "orders"}, "shop")


class TestFromKubeconfig:
    def test_kubeconfig_context_namespace_is_default(self) -> None:
        contexts = [
            {"name": "dev", "context": {"cluster": "dev", "namespace": "team-a"}},
            {"name": "prod", "context": {"cluster": "prod"}},
        ]
        with (
            patch("kubectl_artillery.kube.accessor.config") as config,
            patch("kubectl_artillery.kube.accessor.client") as k8s_client,
        ):
            config.list_kube_config_contexts.return_value = (contexts, contexts[0])

            accessor = KubernetesClusterAccessor.from_kubeconfig(kubeconfig="/tmp/kubeconfig")

        config.new_client_from_config.assert_called_once_with(
            config_file="/tmp/kubeconfig", context=None
        )
        config.load_incluster_config.assert_not_called()
        assert accessor.default_namespace == "team-a"
        assert accessor.core_v1 is k8s_client.CoreV1Api.return_value

    def test_explicit_context_without_namespace_uses_default(self) -> None:
        contexts = [
            {"name": "dev", "context": {"cluster": "dev", "namespace": "team-a"}},
            {"name": "prod", "context": {"cluster": "prod"}},
        ]
        with (
            patch("kubectl_artillery.kube.accessor.config") as config,
            patch("kubectl_artillery.kube.accessor.client"),
        ):
            config.list_kube_config_contexts.return_value = (contexts, contexts[0])

            accessor = KubernetesClusterAccessor.from_kubeconfig(context="prod")

        assert accessor.default_namespace == "default"

    def test_falls_back_to_kubeconfig_outside_cluster(self) -> None:
        with (
            patch("kubectl_artillery.kube.accessor.config") as config,
            patch("kubectl_artillery.kube.accessor.client"),
        ):
            config.load_incluster_config.side_effect = ConfigException("not in cluster")
            config.list_kube_config_contexts.return_value = ([], None)

            accessor = KubernetesClusterAccessor.from_kubeconfig()

        config.new_client_from_config.assert_called_once_with(config_file=None, context=None)
        assert accessor.default_namespace == "default"

    def test_missing_configuration_raises(self) -> None:
        with (
            patch("kubectl_artillery.kube.accessor.config") as config,
            patch("kubectl_artillery.kube.accessor.client"),
        ):
            config.load_incluster_config.side_effect = ConfigException("not in cluster")
            config.new_client_from_config.side_effect = ConfigException("no kubeconfig")

            with pytest.raises(ClusterConfigError):
                KubernetesClusterAccessor.from_kubeconfig()


def test_format_label_selector_sorts_keys() -> None:
    assert format_label_selector({"b": "2", "a": "1"}) == "a=1,b=2"
