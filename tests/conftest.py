"""Shared fixtures for release_builder tests."""

from pathlib import Path
from typing import IO

import pytest

from release_builder.builds.runner import CommandExecutionError
from release_builder.config import Settings
from release_builder.manifest.schema import Manifest


class FakeRunner:
    """Command runner double that records calls instead of executing.

    ``tar`` calls create the requested archive; license scans write a
    fixed report to the captured stdout. Commands whose first element is
    in ``fail`` raise CommandExecutionError.
    """

    def __init__(self, fail: set[str] | None = None) -> None:
        self.calls: list[tuple[list[str], Path]] = []
        self.envs: list[dict[str, str] | None] = []
        self.fail = fail or set()

    def run(
        self,
        cmd: list[str],
        cwd: Path,
        stdout: IO[str] | None = None,
        env_override: dict[str, str] | None = None,
    ) -> None:
        self.calls.append((list(cmd), Path(cwd)))
        self.envs.append(env_override)
        if cmd[0] in self.fail:
            raise CommandExecutionError(
                f"{cmd[0]} exited with status 1", exit_code=1
            )
        if cmd[0] == "tar":
            (Path(cwd) / cmd[2]).write_bytes(b"fake-archive")
        if stdout is not None:
            stdout.write("github.com/example/dep  Apache-2.0\n")

    @property
    def commands(self) -> list[str]:
        return [cmd[0] for cmd, _ in self.calls]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Prepared working tree with sources, output dir and a repository."""
    (tmp_path / "out").mkdir()
    repo = tmp_path / "sources" / "istio"
    repo.mkdir(parents=True)
    (repo / "go.mod").write_text("module istio.io/istio\n")
    return tmp_path


@pytest.fixture
def manifest(workdir: Path) -> Manifest:
    return Manifest(
        version="1.20.0",
        docker_hub="docker.io/istio",
        directory=workdir,
        repositories={"istio": "sources/istio"},
    )


@pytest.fixture
def make_runner():
    """Factory for runners that fail on selected commands."""

    def _make(fail: set[str] | None = None) -> FakeRunner:
        return FakeRunner(fail=fail)

    return _make
