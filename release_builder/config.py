"""Configuration settings for release_builder.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the
    RELEASE_BUILDER_ prefix. List values are given as JSON arrays.
    """

    model_config = SettingsConfigDict(
        env_prefix="RELEASE_BUILDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # License report
    license_repo: str = Field(
        default="istio",
        description="Repository whose dependency licenses are reported",
    )
    license_config: str = Field(
        default="common/config/license-lint.yml",
        description="License scan configuration, relative to the repository",
    )
    license_command: list[str] = Field(
        default_factory=lambda: ["license-lint"],
        description="License scan tool invocation",
    )
    dependency_fetch_command: list[str] = Field(
        default_factory=lambda: ["go", "mod", "download"],
        description="Command that downloads all declared dependencies",
    )

    # Provenance
    archive_command: str = Field(
        default="tar",
        description="Archiving tool used to bundle sources",
    )
    manifest_file_mode: int = Field(
        default=0o640,
        ge=0,
        le=0o777,
        description="Permission bits for the manifest snapshot",
    )

    # Artifact builders
    build_repo: str = Field(
        default="istio",
        description="Repository the artifact builders run in",
    )
    docker_command: list[str] = Field(
        default_factory=lambda: ["make", "docker.save"],
        description="Container image build command",
    )
    helm_command: list[str] = Field(
        default_factory=lambda: ["make", "helm.package"],
        description="Chart repository build command",
    )
    debian_command: list[str] = Field(
        default_factory=lambda: ["make", "deb"],
        description="Debian package build command",
    )
    archive_build_command: list[str] = Field(
        default_factory=lambda: ["make", "istioctl-all"],
        description="Release archive build command",
    )


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
