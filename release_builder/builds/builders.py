"""Command-backed artifact builders.

Artifact builders are external tools. Each adapter here runs one build
command inside a repository of the working tree, passing the release
coordinates through the environment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from release_builder.builds.runner import CommandRunner
from release_builder.config import Settings
from release_builder.manifest.schema import Manifest
from release_builder.types import BuildOutput

logger = logging.getLogger(__name__)


def build_env(manifest: Manifest) -> dict[str, str]:
    """Environment passed to build commands."""
    env = {
        "VERSION": manifest.version,
        "TAG": manifest.version,
        "OUT_DIR": str(manifest.out_dir),
    }
    if manifest.docker_hub:
        env["HUB"] = manifest.docker_hub
    return env


@dataclass
class CommandBuilder:
    """Build one output kind by running an external command.

    Attributes:
        output: Output kind this builder produces.
        command: Command to run.
        repo: Repository (from the manifest locator) to run it in.
        runner: Command runner.
    """

    output: BuildOutput
    command: list[str]
    repo: str
    runner: CommandRunner

    def __call__(self, manifest: Manifest) -> None:
        logger.info("Building %s", self.output.value)
        self.runner.run(
            list(self.command),
            cwd=manifest.repo_dir(self.repo),
            env_override=build_env(manifest),
        )


def default_builders(
    settings: Settings,
    runner: CommandRunner,
) -> dict[BuildOutput, CommandBuilder]:
    """Create a builder for every output kind from settings."""
    commands = {
        BuildOutput.DOCKER: settings.docker_command,
        BuildOutput.HELM: settings.helm_command,
        BuildOutput.DEBIAN: settings.debian_command,
        BuildOutput.ARCHIVE: settings.archive_build_command,
    }
    return {
        output: CommandBuilder(
            output=output,
            command=command,
            repo=settings.build_repo,
            runner=runner,
        )
        for output, command in commands.items()
    }


__all__ = ["CommandBuilder", "build_env", "default_builders"]
