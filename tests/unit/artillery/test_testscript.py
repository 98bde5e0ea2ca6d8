import pytest
import yaml

from kubectl_artillery.artillery import Generatable, project_test_script, service_host
from kubectl_artillery.kube import ProbeEndpoint, ProbeScheme, ServicePort


def test_one_step_per_endpoint_with_full_url() -> None:
    endpoints = [
        ProbeEndpoint(port=8080, path="/health"),
        ProbeEndpoint(port=8443, path="/secure/health", scheme=ProbeScheme.HTTPS),
    ]

    script = project_test_script(
        "orders", endpoints, namespace="shop", ports=(ServicePort(port=80, target_port=8080),)
    )

    assert script.target == "http://orders.shop:80"
    assert [step.url for step in script.steps] == [
        "http://orders.shop:8080/health",
        "https://orders.shop:8443/secure/health",
    ]


def test_target_falls_back_to_first_endpoint_port() -> None:
    script = project_test_script("orders", [ProbeEndpoint(port=8080, path="/")])

    assert script.target == "http://orders:8080"
    assert [step.url for step in script.steps] == ["http://orders:8080/"]


def test_duplicate_port_and_path_produce_one_step() -> None:
    endpoints = [
        ProbeEndpoint(port=8080, path="/health", container="a"),
        ProbeEndpoint(port=8080, path="/health", container="b"),
    ]

    script = project_test_script("orders", endpoints)

    assert len(script.steps) == 1


def test_no_endpoints_is_rejected() -> None:
    with pytest.raises(ValueError):
        project_test_script("orders", [])


def test_document_matches_artillery_layout() -> None:
    script = project_test_script("orders", [ProbeEndpoint(port=8080, path="/health")])

    assert script.to_dict() == {
        "config": {
            "target": "http://orders:8080",
            "environments": {
                "functional": {
                    "phases": [{"duration": 1, "arrivalCount": 1}],
                    "plugins": {"expect": {}},
                }
            },
        },
        "scenarios": [
            {
                "flow": [
                    {
                        "get": {
                            "url": "http://orders:8080/health",
                            "expect": [{"statusCode": 200}],
                        }
                    }
                ]
            }
        ],
    }


def test_rendered_yaml_keeps_key_order(temp_dir) -> None:
    script = project_test_script("orders", [ProbeEndpoint(port=8080, path="/health")])

    rendered = Generatable(path=temp_dir / "s.yaml", document=script).marshal()

    assert rendered.index("config:") < rendered.index("scenarios:")
    assert yaml.safe_load(rendered) == script.to_dict()


def test_service_host() -> None:
    assert service_host("orders") == "orders"
    assert service_host("orders", "shop") == "orders.shop"
