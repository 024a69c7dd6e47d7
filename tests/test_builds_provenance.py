"""Tests for builds/provenance.py module.

External tools are replaced by a recording runner.
"""

import tarfile

import pytest

from release_builder.builds.provenance import (
    LICENSES_FILENAME,
    SOURCES_ARCHIVE,
    LicenseReportError,
    bundle_sources,
    snapshot_manifest,
    write_license,
)
from release_builder.builds.runner import CommandExecutionError, CommandRunner
from release_builder.config import Settings
from release_builder.manifest.schema import UnknownRepositoryError


class TestBundleSources:
    """Tests for bundle_sources function."""

    def test_command(self, manifest, fake_runner, workdir):
        """Should archive sources into out/ from the working directory."""
        path = bundle_sources(manifest, fake_runner)

        assert fake_runner.calls == [
            (["tar", "-czf", "out/sources.tar.gz", "sources"], workdir)
        ]
        assert path == workdir / "out" / SOURCES_ARCHIVE
        assert path.exists()

    def test_failure(self, manifest, make_runner):
        runner = make_runner(fail={"tar"})
        with pytest.raises(CommandExecutionError):
            bundle_sources(manifest, runner)

    def test_real_archive(self, manifest, workdir):
        """Should produce a gzip tarball of the whole source tree."""
        path = bundle_sources(manifest, CommandRunner())

        with tarfile.open(path, "r:gz") as tar:
            names = tar.getnames()
        assert "sources/istio/go.mod" in names


class TestSnapshotManifest:
    """Tests for snapshot_manifest function."""

    def test_writes_to_out_dir(self, manifest, workdir):
        path = snapshot_manifest(manifest)
        assert path == workdir / "out" / "manifest.yaml"
        assert "version: 1.20.0" in path.read_text()


class TestWriteLicense:
    """Tests for write_license function."""

    def test_fetch_then_scan(self, manifest, fake_runner, settings, workdir):
        """Should download dependencies before scanning."""
        write_license(manifest, fake_runner, settings)

        repo_dir = workdir / "sources" / "istio"
        assert fake_runner.calls == [
            (["go", "mod", "download"], repo_dir),
            (
                [
                    "license-lint",
                    "--config",
                    "common/config/license-lint.yml",
                    "--report",
                ],
                repo_dir,
            ),
        ]

    def test_report_captured(self, manifest, fake_runner, settings, workdir):
        path = write_license(manifest, fake_runner, settings)
        assert path == workdir / "out" / LICENSES_FILENAME
        assert path.read_text() == "github.com/example/dep  Apache-2.0\n"

    def test_fetch_failure_propagates_unchanged(
        self, manifest, settings, workdir, make_runner
    ):
        """Fetch failure should be raised as-is with no report file."""
        runner = make_runner(fail={"go"})
        with pytest.raises(CommandExecutionError):
            write_license(manifest, runner, settings)

        assert runner.commands == ["go"]
        assert not (workdir / "out" / LICENSES_FILENAME).exists()

    def test_scan_failure_wrapped(self, manifest, settings, make_runner):
        runner = make_runner(fail={"license-lint"})
        with pytest.raises(LicenseReportError) as exc_info:
            write_license(manifest, runner, settings)

        message = str(exc_info.value)
        assert "unable to generate license report for the istio repo" in message
        assert "exited with status 1" in message
        assert isinstance(exc_info.value.__cause__, CommandExecutionError)

    def test_unknown_repository(self, manifest, fake_runner):
        settings = Settings(_env_file=None, license_repo="proxy")
        with pytest.raises(UnknownRepositoryError):
            write_license(manifest, fake_runner, settings)
        assert fake_runner.calls == []
