"""Runner for external build commands.

This module handles:
- Executing external tools (archiver, license scanner, builders)
- Streaming their output to the caller's stdout/stderr
- Turning non-zero exits into exceptions

Commands block until they finish; there is no timeout.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import IO

logger = logging.getLogger(__name__)


class CommandExecutionError(Exception):
    """Raised when an external command fails."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        code: str = "command_failed",
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.code = code


class CommandRunner:
    """Synchronous external command execution.

    Output streams are inherited from the current process unless a
    ``stdout`` handle is given, so progress stays visible while the
    pipeline runs.
    """

    def run(
        self,
        cmd: list[str],
        cwd: Path,
        stdout: IO[str] | None = None,
        env_override: dict[str, str] | None = None,
    ) -> None:
        """Run a command and wait for it.

        Args:
            cmd: Command as list of strings.
            cwd: Working directory.
            stdout: Optional file handle receiving standard output.
            env_override: Optional environment variable overrides.

        Raises:
            CommandExecutionError: If the command cannot start or exits non-zero.
        """
        cmd_str = shlex.join(cmd)
        logger.info("Running: %s", cmd_str)
        logger.debug("Working directory: %s", cwd)

        env: dict[str, str] | None = None
        if env_override:
            env = dict(os.environ)
            env.update(env_override)

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                stdout=stdout,
                env=env,
                check=False,
            )
        except OSError as e:
            raise CommandExecutionError(
                f"failed to execute {cmd_str}: {e}",
                exit_code=None,
                code="execution_error",
            ) from e

        if result.returncode != 0:
            message = f"{cmd_str} exited with status {result.returncode}"
            logger.error(message)
            raise CommandExecutionError(message, exit_code=result.returncode)


__all__ = ["CommandExecutionError", "CommandRunner"]
