"""Artillery test scripts, test Job manifests and their YAML output."""

from .generate import Generatable, copy_file_to, generate, mkdir_target_or_default
from .manifests import (
    KUSTOMIZATION_FILENAME,
    LABEL_PREFIX,
    TEST_FILENAME,
    config_map_name,
    new_kustomization,
    new_test_job,
)
from .testscript import TestScript, TestStep, project_test_script, service_host

__all__ = [
    "Generatable",
    "KUSTOMIZATION_FILENAME",
    "LABEL_PREFIX",
    "TEST_FILENAME",
    "TestScript",
    "TestStep",
    "config_map_name",
    "copy_file_to",
    "generate",
    "mkdir_target_or_default",
    "new_kustomization",
    "new_test_job",
    "project_test_script",
    "service_host",
]
