"""Release build orchestration.

This module provides the high-level build API:
- Orchestrator: runs the ordered pipeline for one manifest
- build(): main entry point wiring the default pipeline

The run is fail-fast: the first failing step stops the pipeline and is
reported as a StepFailure. Nothing is rolled back; files written by
earlier steps stay in the output directory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from functools import partial

from release_builder.builds.builders import default_builders
from release_builder.builds.provenance import (
    bundle_sources,
    snapshot_manifest,
    write_license,
)
from release_builder.builds.runner import CommandRunner
from release_builder.builds.sanitize import sanitize_charts
from release_builder.builds.steps import Step, StepAction, default_pipeline
from release_builder.config import Settings, get_settings
from release_builder.manifest.schema import Manifest
from release_builder.types import BuildOutput, RunState, StepRecord

logger = logging.getLogger(__name__)


class StepFailure(Exception):
    """Raised when a pipeline step fails.

    Attributes:
        step: Name of the failing step.
        message: Human-readable context for the step.
        cause: Underlying exception.
    """

    def __init__(
        self,
        step: str,
        message: str,
        cause: BaseException,
        code: str = "step_failed",
    ) -> None:
        super().__init__(f"{message}: {cause}")
        self.step = step
        self.message = message
        self.cause = cause
        self.code = code


class OrchestratorError(Exception):
    """Raised when an orchestrator is used outside its lifecycle."""

    def __init__(self, message: str, code: str = "orchestrator_error") -> None:
        super().__init__(message)
        self.code = code


class Orchestrator:
    """Run a fixed sequence of steps against one manifest.

    An orchestrator runs once. Its state moves from NOT_STARTED to
    RUNNING and ends in SUCCEEDED or FAILED.
    """

    def __init__(self, steps: Iterable[Step]) -> None:
        self.steps: tuple[Step, ...] = tuple(steps)
        self.state = RunState.NOT_STARTED
        self.current_step: str | None = None
        self.records: list[StepRecord] = []
        self.failure: StepFailure | None = None

    def plan(self, manifest: Manifest) -> list[Step]:
        """Return the steps that run for this manifest, in order."""
        return [step for step in self.steps if step.applies_to(manifest)]

    def run(self, manifest: Manifest) -> list[StepRecord]:
        """Execute the pipeline.

        Args:
            manifest: Manifest for this run.

        Returns:
            Records of the executed steps.

        Raises:
            StepFailure: If any step fails; later steps are not run.
            OrchestratorError: If this orchestrator has already run.
        """
        if self.state is not RunState.NOT_STARTED:
            raise OrchestratorError(
                f"orchestrator already used (state={self.state.value})"
            )

        selected = self.plan(manifest)
        logger.info(
            "Starting release build %s: %s",
            manifest.version,
            ", ".join(step.name for step in selected),
        )
        self.state = RunState.RUNNING

        for step in selected:
            self.current_step = step.name
            started_at = datetime.now(timezone.utc)
            logger.info("Running step: %s", step.name)
            try:
                step.action(manifest)
            except Exception as e:
                failure = StepFailure(step.name, step.description, e)
                self.records.append(
                    StepRecord(
                        name=step.name,
                        started_at=started_at,
                        finished_at=datetime.now(timezone.utc),
                        success=False,
                        error_message=str(failure),
                    )
                )
                self.state = RunState.FAILED
                self.failure = failure
                logger.error("Step %s failed: %s", step.name, failure)
                raise failure from e

            record = StepRecord(
                name=step.name,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc),
                success=True,
            )
            self.records.append(record)
            logger.info("Step %s finished in %.1fs", step.name, record.duration)

        self.current_step = None
        self.state = RunState.SUCCEEDED
        logger.info("Release build %s succeeded", manifest.version)
        return list(self.records)


def create_pipeline(
    settings: Settings,
    runner: CommandRunner,
    builders: Mapping[BuildOutput, StepAction] | None = None,
    sanitizer: StepAction | None = None,
) -> tuple[Step, ...]:
    """Create the default pipeline bound to settings and a runner.

    Args:
        settings: Application settings.
        runner: Command runner used by external steps.
        builders: Builder overrides; missing kinds use command builders.
        sanitizer: Sanitizer override.

    Returns:
        Ordered steps.
    """
    effective_builders: dict[BuildOutput, StepAction] = dict(
        default_builders(settings, runner)
    )
    if builders:
        effective_builders.update(builders)

    return default_pipeline(
        builders=effective_builders,
        sanitizer=sanitizer or sanitize_charts,
        bundler=partial(
            bundle_sources, runner=runner, archive_command=settings.archive_command
        ),
        manifest_writer=partial(snapshot_manifest, mode=settings.manifest_file_mode),
        license_reporter=partial(write_license, runner=runner, settings=settings),
    )


def build(
    manifest: Manifest,
    settings: Settings | None = None,
    runner: CommandRunner | None = None,
    builders: Mapping[BuildOutput, StepAction] | None = None,
    sanitizer: StepAction | None = None,
) -> list[StepRecord]:
    """Create all artifacts required by the manifest.

    Assumes the working directory has been prepared and sources staged,
    and that the output directory exists.

    Returns:
        Records of the executed steps.

    Raises:
        StepFailure: If any step fails.
    """
    if settings is None:
        settings = get_settings()
    if runner is None:
        runner = CommandRunner()

    steps = create_pipeline(settings, runner, builders=builders, sanitizer=sanitizer)
    return Orchestrator(steps).run(manifest)


__all__ = [
    "Orchestrator",
    "OrchestratorError",
    "StepFailure",
    "build",
    "create_pipeline",
]
