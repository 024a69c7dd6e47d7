"""Shared type definitions for release_builder.

This module contains enums and dataclasses shared across subpackages
to avoid circular imports.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class BuildOutput(str, Enum):
    """Kind of artifact a release run can produce."""

    DOCKER = "docker"
    HELM = "helm"
    DEBIAN = "debian"
    ARCHIVE = "archive"


class RunState(str, Enum):
    """State of an orchestrator run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class StepRecord:
    """Record of a single executed pipeline step."""

    name: str
    started_at: datetime
    finished_at: datetime
    success: bool
    error_message: str | None = None

    @property
    def duration(self) -> float:
        """Step duration in seconds."""
        return (self.finished_at - self.started_at).total_seconds()


__all__ = [
    "BuildOutput",
    "RunState",
    "StepRecord",
]
