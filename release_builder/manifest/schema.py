"""Pydantic model for the release manifest.

The manifest is the single input of a release run: which outputs to
build and where the working tree lives. It is frozen so that no step
can alter it once a run has started.
"""

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from release_builder.types import BuildOutput


class UnknownRepositoryError(KeyError):
    """Raised when a repository name is not in the manifest locator."""

    def __init__(self, name: str, code: str = "unknown_repository") -> None:
        super().__init__(name)
        self.name = name
        self.code = code

    def __str__(self) -> str:
        return f"repository not found in manifest: {self.name}"


class Manifest(BaseModel):
    """Declarative description of a release run.

    Attributes:
        version: Release version recorded in artifacts and charts.
        docker_hub: Registry the container images are tagged for.
        directory: Root of the prepared working tree.
        build_outputs: Output kinds to build this run.
        repositories: Logical repository name to path relative to directory.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: str = Field(min_length=1, description="Release version")
    docker_hub: str | None = Field(
        default=None, description="Container registry for built images"
    )
    directory: Path = Field(
        description=(
            "Root of the prepared working tree; relative paths in manifest "
            "files resolve against the file's directory"
        )
    )
    build_outputs: frozenset[BuildOutput] = Field(
        default_factory=frozenset,
        description="Output kinds to build",
    )
    repositories: Mapping[str, str] = Field(
        default_factory=lambda: MappingProxyType({}),
        description="Repository name to path relative to directory",
    )

    @field_validator("repositories")
    @classmethod
    def validate_repositories(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        """Validate repository paths and freeze the locator."""
        for name, rel in v.items():
            if Path(rel).is_absolute() or ".." in Path(rel).parts:
                raise ValueError(
                    f"repository path for '{name}' must be relative "
                    f"to the working directory, got '{rel}'"
                )
        return MappingProxyType(dict(v))

    @field_serializer("repositories")
    def serialize_repositories(self, v: Mapping[str, str]) -> dict[str, str]:
        return dict(sorted(v.items()))

    @field_serializer("build_outputs")
    def serialize_build_outputs(self, v: frozenset[BuildOutput]) -> list[str]:
        """Emit outputs in a stable order."""
        return sorted(o.value for o in v)

    @property
    def out_dir(self) -> Path:
        """Directory receiving artifacts and provenance files."""
        return self.directory / "out"

    @property
    def source_dir(self) -> Path:
        """Directory holding the staged source tree."""
        return self.directory / "sources"

    def repo_dir(self, name: str) -> Path:
        """Resolve a repository name to its on-disk path.

        Raises:
            UnknownRepositoryError: If the name is not in the locator.
        """
        try:
            return self.directory / self.repositories[name]
        except KeyError:
            raise UnknownRepositoryError(name) from None

    def wants(self, output: BuildOutput) -> bool:
        """Return True if the output kind was requested."""
        return output in self.build_outputs


__all__ = ["Manifest", "UnknownRepositoryError"]
