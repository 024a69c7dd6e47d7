"""Manifest load and snapshot helpers.

This module reads manifests from YAML/JSON files and writes the
effective manifest back out as a YAML snapshot. Snapshots are
deterministic: the same manifest always serializes to the same bytes.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from release_builder.manifest.schema import Manifest

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.yaml"


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping, got {type(data).__name__}")
    return data


def load_json(path: Path) -> dict[str, Any]:
    """Load a JSON file and return its contents as a dict."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def load_manifest(path: Path) -> Manifest:
    """Load and validate a manifest file.

    File format is determined by extension (.yaml, .yml for YAML,
    .json for JSON). A relative ``directory`` is resolved against the
    directory holding the manifest file.

    Args:
        path: Path to the manifest file.

    Returns:
        Validated Manifest instance.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If data does not match the schema.
        ValueError: If the extension is unsupported or content is not a mapping.
    """
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = load_yaml(path)
    elif suffix == ".json":
        data = load_json(path)
    else:
        raise ValueError(
            f"Unsupported file extension '{suffix}'. Use .yaml, .yml, or .json"
        )

    directory = data.get("directory")
    if isinstance(directory, str) and not Path(directory).is_absolute():
        data["directory"] = str(path.parent / directory)
    return Manifest.model_validate(data)


def manifest_to_dict(manifest: Manifest) -> dict[str, Any]:
    """Convert a manifest to plain JSON-compatible data."""
    return manifest.model_dump(mode="json")


def manifest_to_yaml_string(manifest: Manifest) -> str:
    """Serialize a manifest to YAML with sorted keys."""
    result: str = yaml.safe_dump(
        manifest_to_dict(manifest),
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=True,
    )
    return result


def manifest_to_json_string(manifest: Manifest) -> str:
    """Serialize a manifest to JSON with sorted keys."""
    return json.dumps(manifest_to_dict(manifest), indent=2, sort_keys=True)


def write_manifest(
    manifest: Manifest,
    directory: Path,
    mode: int = 0o640,
) -> Path:
    """Write the manifest snapshot to ``manifest.yaml`` in a directory.

    The file is written in a single call; the directory must exist.

    Args:
        manifest: Manifest to snapshot.
        directory: Destination directory.
        mode: Permission bits for a newly created file.

    Returns:
        Path to the written file.

    Raises:
        OSError: If the file cannot be written.
    """
    output_path = directory / MANIFEST_FILENAME
    content = manifest_to_yaml_string(manifest)
    output_path.write_text(content, encoding="utf-8")
    output_path.chmod(mode)
    logger.info("Wrote manifest to %s", output_path)
    return output_path


__all__ = [
    "MANIFEST_FILENAME",
    "load_json",
    "load_manifest",
    "load_yaml",
    "manifest_to_dict",
    "manifest_to_json_string",
    "manifest_to_yaml_string",
    "write_manifest",
]
