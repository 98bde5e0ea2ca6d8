"""
Test Job Manifests

Kubernetes manifests that run an existing Artillery test script in-cluster:
a Job whose workers mount the script from a ConfigMap, and the Kustomization
that generates that ConfigMap from the script file.
"""

from __future__ import annotations

import builtins
from pathlib import Path
from typing import Any

from ..config.settings import DEFAULT_WORKER_IMAGE

LABEL_PREFIX = "artillery-io"
TEST_FILENAME = "test-job.yaml"
KUSTOMIZATION_FILENAME = "kustomization.yaml"
TEST_SCRIPT_VOLUME = "test-script"
TEST_SCRIPT_MOUNT_PATH = "/data"


def labels(test_name: str, component: str) -> builtins.dict[str, str]:
    """Labels used to scope and select the resources of one test."""
    return {
        "artillery.io/test-name": test_name,
        "artillery.io/component": component,
        "artillery.io/part-of": LABEL_PREFIX,
    }


def config_map_name(test_name: str) -> str:
    return f"{test_name}-test-script"


def new_test_job(
    test_name: str,
    namespace: str,
    config_map: str,
    script_filename: str,
    count: int = 1,
    worker_image: str = DEFAULT_WORKER_IMAGE,
) -> builtins.dict[str, Any]:
    """Return a batch/v1 Job running ``count`` Artillery workers once each."""
    workers = max(count, 1)

    return {
        "apiVersion": "batch/v1",
        "kind": "Job",
        "metadata": {
            "name": test_name,
            "namespace": namespace,
            "labels": labels(test_name, "test-worker-master"),
        },
        "spec": {
            "parallelism": workers,
            "completions": workers,
            "backoffLimit": 0,
            "template": {
                "metadata": {"labels": labels(test_name, "test-worker")},
                "spec": {
                    "containers": [
                        {
                            "name": test_name,
                            "image": worker_image,
                            "imagePullPolicy": "Always",
                            "args": ["run", f"{TEST_SCRIPT_MOUNT_PATH}/{script_filename}"],
                            # WORKER_ID ties published metrics back to the worker pod
                            "env": [
                                {
                                    "name": "WORKER_ID",
                                    "valueFrom": {
                                        "fieldRef": {"fieldPath": "metadata.name"}
                                    },
                                }
                            ],
                            "volumeMounts": [
                                {
                                    "name": TEST_SCRIPT_VOLUME,
                                    "mountPath": TEST_SCRIPT_MOUNT_PATH,
                                }
                            ],
                        }
                    ],
                    "volumes": [
                        {
                            "name": TEST_SCRIPT_VOLUME,
                            "configMap": {"name": config_map},
                        }
                    ],
                    "restartPolicy": "Never",
                },
            },
        },
    }


def new_kustomization(
    job_filename: str,
    namespace: str,
    config_map: str,
    script_path: str | Path,
    label_prefix: str = LABEL_PREFIX,
) -> builtins.dict[str, Any]:
    """Return a Kustomization applying the Job and generating its script ConfigMap."""
    return {
        "apiVersion": "kustomize.config.k8s.io/v1beta1",
        "kind": "Kustomization",
        "namespace": namespace,
        "resources": [job_filename],
        "configMapGenerator": [
            {
                "name": config_map,
                "files": [Path(script_path).name],
            }
        ],
        "generatorOptions": {
            "disableNameSuffixHash": True,
            "labels": {"artillery.io/part-of": label_prefix},
        },
    }
