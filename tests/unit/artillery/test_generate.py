from unittest.mock import patch

import pytest
import yaml

from kubectl_artillery.artillery import (
    Generatable,
    copy_file_to,
    generate,
    mkdir_target_or_default,
)
from kubectl_artillery.errors import ManifestWriteError


def test_generate_writes_yaml_and_summarizes(temp_dir) -> None:
    first = temp_dir / "a.yaml"
    second = temp_dir / "b.yaml"

    message = generate(
        [
            Generatable(path=first, document={"kind": "Job", "spec": {"items": [1, 2]}}),
            Generatable(path=second, document={"kind": "Kustomization"}),
        ]
    )

    assert yaml.safe_load(first.read_text()) == {"kind": "Job", "spec": {"items": [1, 2]}}
    assert "  items:\n    - 1\n    - 2\n" in first.read_text()
    assert message == f"{first} generated\n{second} generated"


def test_generate_reports_write_failures(temp_dir) -> None:
    target = temp_dir / "missing-dir" / "a.yaml"

    with pytest.raises(ManifestWriteError) as exc_info:
        generate([Generatable(path=target, document={"kind": "Job"})])

    assert exc_info.value.path == str(target)


def test_mkdir_defaults_under_working_dir(temp_dir) -> None:
    target = mkdir_target_or_default(temp_dir, None, "artillery-scripts")

    assert target == temp_dir / "artillery-scripts"
    assert target.is_dir()


def test_mkdir_prefers_out_path(temp_dir) -> None:
    out = temp_dir / "custom" / "nested"

    target = mkdir_target_or_default(temp_dir, str(out), "artillery-scripts")

    assert target == out
    assert out.is_dir()
    assert not (temp_dir / "artillery-scripts").exists()


def test_mkdir_failure_raises(temp_dir) -> None:
    with patch("pathlib.Path.mkdir", side_effect=PermissionError("denied")):
        with pytest.raises(ManifestWriteError):
            mkdir_target_or_default(temp_dir, None, "artillery-scripts")


def test_copy_file_to(temp_dir) -> None:
    source = temp_dir / "script.yaml"
    source.write_text("config: {}\n")
    target_dir = temp_dir / "out"
    target_dir.mkdir()

    copied = copy_file_to(target_dir, source)

    assert copied == (target_dir / "script.yaml").resolve()
    assert copied.read_text() == "config: {}\n"
    # copying a file onto itself is a no-op
    assert copy_file_to(temp_dir, source) == source.resolve()
