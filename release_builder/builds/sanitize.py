"""Helm chart sanitizer.

Charts in the source tree carry development versions and registry
settings. Before any chart is packaged they are rewritten in place to
point at the release: chart ``version``/``appVersion`` become the
release version, and ``global.hub``/``global.tag`` in values files
become the release registry and tag.

Rewriting is idempotent; files already matching the release are left
untouched.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import yaml

from release_builder.manifest.schema import Manifest

logger = logging.getLogger(__name__)

CHART_FILENAME = "Chart.yaml"
VALUES_FILENAME = "values.yaml"


class SanitizeError(Exception):
    """Raised when a chart cannot be sanitized."""

    def __init__(self, message: str, path: Path, code: str = "sanitize_error") -> None:
        super().__init__(message)
        self.path = path
        self.code = code


GLOBAL_PATTERN = re.compile(r"^global:[ \t]*(#.*)?$")


def _load(path: Path, text: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SanitizeError(f"invalid YAML in {path}: {e}", path) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SanitizeError(
            f"expected a mapping in {path}, got {type(data).__name__}", path
        )
    return data


def _render_scalar(value: str) -> str:
    """Render a string as a single-line YAML scalar, quoting if needed."""
    rendered: str = yaml.safe_dump(value, default_flow_style=True)
    return rendered.splitlines()[0]


def _set_key(
    lines: list[str],
    key: str,
    value: str,
    indent: str = "",
    start: int = 0,
    end: int | None = None,
) -> bool:
    """Replace the value of ``key`` on its own line, keeping any comment.

    Only lines indented by exactly ``indent`` within ``lines[start:end]``
    are considered.

    Returns:
        True if a matching line was found.
    """
    pattern = re.compile(
        rf"^{re.escape(indent)}{re.escape(key)}:[ \t]*"
        r"(?P<value>[^#\r\n]*?)(?P<comment>[ \t]+#.*)?(?P<eol>\r?\n)?$"
    )
    stop = len(lines) if end is None else end
    for i in range(start, stop):
        match = pattern.match(lines[i])
        if match:
            comment = match.group("comment") or ""
            eol = match.group("eol") or ""
            lines[i] = f"{indent}{key}: {_render_scalar(value)}{comment}{eol}"
            return True
    return False


def _is_content(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("#")


def _global_block(lines: list[str]) -> tuple[int, int, str] | None:
    """Locate the top-level ``global:`` block.

    Returns:
        (first line, end line, child indentation), or None if the block
        is not written in block style.
    """
    for i, line in enumerate(lines):
        if GLOBAL_PATTERN.match(line.rstrip("\r\n")):
            start = i + 1
            break
    else:
        return None

    end = len(lines)
    indent: str | None = None
    for j in range(start, len(lines)):
        line = lines[j]
        if not _is_content(line):
            continue
        if not line[0].isspace():
            end = j
            break
        if indent is None:
            indent = line[: len(line) - len(line.lstrip())]
    if indent is None:
        return None
    return start, end, indent


def sanitize_chart_file(path: Path, version: str) -> bool:
    """Set chart version and appVersion.

    Only the affected lines change; comments and layout are kept.
    Missing keys are appended.

    Returns:
        True if the file was rewritten.
    """
    text = path.read_text(encoding="utf-8")
    data = _load(path, text)
    lines = text.splitlines(keepends=True)

    changed = False
    for key in ("version", "appVersion"):
        if data.get(key) == version:
            continue
        if not _set_key(lines, key, version):
            if lines and not lines[-1].endswith("\n"):
                lines[-1] += "\n"
            lines.append(f"{key}: {_render_scalar(version)}\n")
        changed = True

    if changed:
        path.write_text("".join(lines), encoding="utf-8")
    return changed


def sanitize_values_file(path: Path, hub: str | None, tag: str) -> bool:
    """Point global image settings at the release.

    Only keys already present under ``global`` are rewritten; ``hub`` is
    left alone when no registry is configured. Comments and layout are
    kept.

    Returns:
        True if the file was rewritten.

    Raises:
        SanitizeError: If a key to update is not on a line of its own.
    """
    text = path.read_text(encoding="utf-8")
    data = _load(path, text)
    global_values = data.get("global")
    if not isinstance(global_values, dict):
        return False

    updates: dict[str, str] = {}
    if "hub" in global_values and hub is not None and global_values["hub"] != hub:
        updates["hub"] = hub
    if "tag" in global_values and global_values["tag"] != tag:
        updates["tag"] = tag
    if not updates:
        return False

    lines = text.splitlines(keepends=True)
    block = _global_block(lines)
    if block is None:
        raise SanitizeError(f"global is not a block mapping in {path}", path)
    start, end, indent = block
    for key, value in updates.items():
        if not _set_key(lines, key, value, indent, start, end):
            raise SanitizeError(f"cannot rewrite global.{key} in {path}", path)

    path.write_text("".join(lines), encoding="utf-8")
    return True


def find_charts(root: Path) -> list[Path]:
    """Return chart directories under root, sorted."""
    if not root.is_dir():
        return []
    return sorted(p.parent for p in root.rglob(CHART_FILENAME) if p.is_file())


def sanitize_charts(manifest: Manifest) -> list[Path]:
    """Sanitize every chart under the staged source tree.

    Args:
        manifest: Manifest providing the source tree, version and hub.

    Returns:
        Files that were rewritten.

    Raises:
        SanitizeError: If a chart file is not valid YAML.
    """
    charts = find_charts(manifest.source_dir)
    rewritten: list[Path] = []

    for chart_dir in charts:
        chart_file = chart_dir / CHART_FILENAME
        if sanitize_chart_file(chart_file, manifest.version):
            rewritten.append(chart_file)

        values_file = chart_dir / VALUES_FILENAME
        if values_file.is_file() and sanitize_values_file(
            values_file, manifest.docker_hub, manifest.version
        ):
            rewritten.append(values_file)

    logger.info(
        "Sanitized %d chart(s), rewrote %d file(s)", len(charts), len(rewritten)
    )
    return rewritten


__all__ = [
    "CHART_FILENAME",
    "VALUES_FILENAME",
    "SanitizeError",
    "find_charts",
    "sanitize_chart_file",
    "sanitize_charts",
    "sanitize_values_file",
]
