"""Pipeline step definitions.

The release pipeline is a fixed, ordered table of steps. Conditional
steps carry the output kind that enables them; unconditional steps
carry none and run on every release.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from release_builder.manifest.schema import Manifest
from release_builder.types import BuildOutput

StepAction = Callable[[Manifest], None]

# Display names used in error context, in pipeline order
OUTPUT_LABELS: dict[BuildOutput, str] = {
    BuildOutput.DOCKER: "Docker",
    BuildOutput.HELM: "Helm",
    BuildOutput.DEBIAN: "Debian",
    BuildOutput.ARCHIVE: "Archive",
}


@dataclass(frozen=True)
class Step:
    """One unit of pipeline work.

    Attributes:
        name: Stable step identifier.
        description: Context prefixed to the error when the step fails.
        action: Callable doing the work; raises on failure.
        output: Output kind gating the step, or None to always run.
    """

    name: str
    description: str
    action: StepAction
    output: BuildOutput | None = None

    @property
    def conditional(self) -> bool:
        return self.output is not None

    def applies_to(self, manifest: Manifest) -> bool:
        """Return True if the step runs for this manifest."""
        return self.output is None or manifest.wants(self.output)


def builder_step(output: BuildOutput, action: StepAction) -> Step:
    """Create the conditional step for an artifact builder."""
    label = OUTPUT_LABELS[output]
    return Step(
        name=output.value,
        description=f"failed to build {label}",
        action=action,
        output=output,
    )


def default_pipeline(
    builders: Mapping[BuildOutput, StepAction],
    sanitizer: StepAction,
    bundler: StepAction,
    manifest_writer: StepAction,
    license_reporter: StepAction,
) -> tuple[Step, ...]:
    """Compose the release pipeline.

    Order: image, chart sanitizer, chart repo, OS package, archive,
    then source bundle, manifest snapshot and license report.

    Args:
        builders: Builder callable for every output kind.
        sanitizer: Chart sanitizer; always runs.
        bundler: Source bundler; always runs.
        manifest_writer: Manifest snapshot writer; always runs.
        license_reporter: License report generator; always runs.

    Returns:
        Ordered tuple of steps.

    Raises:
        ValueError: If a builder is missing for an output kind.
    """
    missing = [o.value for o in BuildOutput if o not in builders]
    if missing:
        raise ValueError(f"No builder registered for: {', '.join(missing)}")

    return (
        builder_step(BuildOutput.DOCKER, builders[BuildOutput.DOCKER]),
        Step("sanitize", "failed to sanitize charts", sanitizer),
        builder_step(BuildOutput.HELM, builders[BuildOutput.HELM]),
        builder_step(BuildOutput.DEBIAN, builders[BuildOutput.DEBIAN]),
        builder_step(BuildOutput.ARCHIVE, builders[BuildOutput.ARCHIVE]),
        Step("sources", "failed to bundle sources", bundler),
        Step("manifest", "failed to write manifest", manifest_writer),
        Step("license", "failed to package license file", license_reporter),
    )


__all__ = [
    "OUTPUT_LABELS",
    "Step",
    "StepAction",
    "builder_step",
    "default_pipeline",
]
