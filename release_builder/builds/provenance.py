"""Provenance outputs produced by every release run.

This module handles:
- Bundling the staged source tree into sources.tar.gz
- Snapshotting the effective manifest to manifest.yaml
- Generating the dependency LICENSES report
"""

from __future__ import annotations

import logging
from pathlib import Path

from release_builder.builds.runner import CommandExecutionError, CommandRunner
from release_builder.config import Settings
from release_builder.manifest.io import write_manifest
from release_builder.manifest.schema import Manifest

logger = logging.getLogger(__name__)

SOURCES_ARCHIVE = "sources.tar.gz"
LICENSES_FILENAME = "LICENSES"


class LicenseReportError(Exception):
    """Raised when the license scan fails."""

    def __init__(self, message: str, code: str = "license_report_error") -> None:
        super().__init__(message)
        self.code = code


def bundle_sources(
    manifest: Manifest,
    runner: CommandRunner,
    archive_command: str = "tar",
) -> Path:
    """Archive the staged source tree into the output directory.

    Runs ``tar -czf out/sources.tar.gz sources`` from the working
    directory.

    Returns:
        Path to the archive.

    Raises:
        CommandExecutionError: If the archiver fails.
    """
    archive_rel = Path(manifest.out_dir.name) / SOURCES_ARCHIVE
    runner.run(
        [archive_command, "-czf", archive_rel.as_posix(), manifest.source_dir.name],
        cwd=manifest.directory,
    )
    archive_path = manifest.out_dir / SOURCES_ARCHIVE
    logger.info("Bundled sources into %s", archive_path)
    return archive_path


def snapshot_manifest(manifest: Manifest, mode: int = 0o640) -> Path:
    """Write the manifest snapshot into the output directory."""
    return write_manifest(manifest, manifest.out_dir, mode=mode)


def write_license(
    manifest: Manifest,
    runner: CommandRunner,
    settings: Settings,
) -> Path:
    """Write a LICENSES file covering all dependencies of a repository.

    Dependencies are downloaded first since the scanner reads them from
    the local module cache. The report file is only created once the
    download has succeeded.

    Args:
        manifest: Manifest locating the repository and output directory.
        runner: Command runner.
        settings: Settings naming the repository, tools and scan config.

    Returns:
        Path to the LICENSES file.

    Raises:
        CommandExecutionError: If the dependency download fails.
        LicenseReportError: If the license scan fails.
    """
    repo = settings.license_repo
    repo_dir = manifest.repo_dir(repo)

    runner.run(list(settings.dependency_fetch_command), cwd=repo_dir)

    report_path = manifest.out_dir / LICENSES_FILENAME
    cmd = [*settings.license_command, "--config", settings.license_config, "--report"]
    with report_path.open("w", encoding="utf-8") as report:
        try:
            runner.run(cmd, cwd=repo_dir, stdout=report)
        except CommandExecutionError as e:
            raise LicenseReportError(
                f"unable to generate license report for the {repo} repo: {e}"
            ) from e

    logger.info("Wrote license report to %s", report_path)
    return report_path


__all__ = [
    "LICENSES_FILENAME",
    "SOURCES_ARCHIVE",
    "LicenseReportError",
    "bundle_sources",
    "snapshot_manifest",
    "write_license",
]
