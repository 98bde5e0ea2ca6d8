"""
Generated File Writing

Resolves output directories and writes test scripts and manifests as YAML.
"""

from __future__ import annotations

import builtins
import shutil
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

from ..errors import ManifestWriteError

logger = structlog.get_logger(__name__)


class _IndentDumper(yaml.SafeDumper):
    """Indents block sequences under their parent key."""

    def increase_indent(self, flow: bool = False, indentless: bool = False):
        return super().increase_indent(flow, False)


@dataclass
class Generatable:
    """A document and the path it is written to."""

    path: Path
    document: Any

    def marshal(self, indent: int = 2) -> str:
        document = self.document.to_dict() if hasattr(self.document, "to_dict") else self.document
        return yaml.dump(
            document,
            Dumper=_IndentDumper,
            indent=indent,
            default_flow_style=False,
            sort_keys=False,
        )


def generate(generatables: Iterable[Generatable], indent: int = 2) -> str:
    """Write every document and return a summary of the files written."""
    written: builtins.list[str] = []
    for item in generatables:
        path = Path(item.path)
        try:
            path.write_text(item.marshal(indent), encoding="utf-8")
        except (OSError, yaml.YAMLError) as e:
            raise ManifestWriteError(f"could not write {path}: {e}", path=str(path), cause=e) from e

        logger.info("file_generated", path=str(path))
        written.append(str(path))

    return "\n".join(f"{path} generated" for path in written)


def mkdir_target_or_default(
    working_dir: str | Path, out_path: str | None, default_dir: str
) -> Path:
    """Create and return the output directory.

    ``out_path`` wins when given; otherwise ``default_dir`` under ``working_dir``.
    """
    target = Path(out_path) if out_path else Path(working_dir) / default_dir
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ManifestWriteError(
            f"could not create directory {target}: {e}", path=str(target), cause=e
        ) from e
    return target


def copy_file_to(target_dir: str | Path, file_path: str | Path) -> Path:
    """Copy ``file_path`` into ``target_dir`` unless it already lives there."""
    source = Path(file_path).resolve()
    destination = Path(target_dir).resolve() / source.name
    if destination == source:
        return destination
    try:
        shutil.copyfile(source, destination)
    except OSError as e:
        raise ManifestWriteError(
            f"could not copy {source} to {destination}: {e}", path=str(destination), cause=e
        ) from e
    return destination
