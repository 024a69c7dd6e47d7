"""Thin CLI wrapper for release_builder.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from release_builder import __version__
from release_builder.config import get_settings, print_settings_json

if TYPE_CHECKING:
    from release_builder.manifest.schema import Manifest

app = typer.Typer(
    name="release-builder",
    help="Release Builder - build release artifacts from a manifest",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"release-builder version {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Release Builder - build release artifacts from a manifest."""
    configure_logging(get_settings().log_level)


def _load_manifest_or_exit(
    path: Path, outputs: list[str] | None = None
) -> "Manifest":
    """Load a manifest, applying --output overrides, or exit with an error."""
    import yaml
    from pydantic import ValidationError

    from release_builder.manifest.io import load_manifest
    from release_builder.types import BuildOutput

    if not path.exists():
        console.print(f"[red]Manifest not found: {escape(str(path))}[/red]")
        raise typer.Exit(code=1)

    try:
        manifest = load_manifest(path)
    except ValidationError as e:
        console.print("[red]Invalid manifest:[/red]")
        console.print(str(e), markup=False)
        raise typer.Exit(code=1) from None
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Invalid manifest: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    if outputs:
        try:
            selected = frozenset(BuildOutput(o) for o in outputs)
        except ValueError:
            valid = ", ".join(o.value for o in BuildOutput)
            console.print(
                f"[red]Invalid output kind in: {escape(', '.join(outputs))}[/red]"
            )
            console.print(f"Valid values: {valid}")
            raise typer.Exit(code=1) from None
        manifest = manifest.model_copy(update={"build_outputs": selected})

    return manifest


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings))
        return

    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]License report:[/bold]")
    console.print(f"  Repository:          {settings.license_repo}")
    console.print(f"  Scan config:         {settings.license_config}")
    console.print(f"  Scan command:        {' '.join(settings.license_command)}")
    console.print(
        f"  Fetch command:       {' '.join(settings.dependency_fetch_command)}"
    )
    console.print()
    console.print("[bold]Builders:[/bold]")
    console.print(f"  Build repository:    {settings.build_repo}")
    console.print(f"  Docker:              {' '.join(settings.docker_command)}")
    console.print(f"  Helm:                {' '.join(settings.helm_command)}")
    console.print(f"  Debian:              {' '.join(settings.debian_command)}")
    console.print(f"  Archive:             {' '.join(settings.archive_build_command)}")
    console.print()
    console.print("[bold]Operational:[/bold]")
    console.print(f"  Log level:           {settings.log_level}")
    console.print(f"  Archiver:            {settings.archive_command}")
    console.print(f"  Manifest file mode:  {settings.manifest_file_mode:o}")


@app.command("build")
def build_cmd(
    manifest_path: Annotated[Path, typer.Argument(help="Path to manifest file")],
    outputs: Annotated[
        list[str] | None,
        typer.Option(
            "--output", "-o", help="Output kind to build (can be repeated)"
        ),
    ] = None,
) -> None:
    """Build all artifacts required by a manifest."""
    from release_builder.builds.orchestrator import StepFailure, build

    manifest = _load_manifest_or_exit(manifest_path, outputs)
    settings = get_settings()

    if not manifest.out_dir.is_dir():
        console.print(
            f"[red]Output directory does not exist: "
            f"{escape(str(manifest.out_dir))}[/red]"
        )
        raise typer.Exit(code=1)

    try:
        records = build(manifest, settings=settings)
    except StepFailure as e:
        console.print(
            f"[red]✗ Build failed at step '{escape(e.step)}': "
            f"{escape(str(e))}[/red]"
        )
        raise typer.Exit(code=1) from None

    console.print(f"[green]✓ Release {manifest.version} built[/green]")
    for record in records:
        console.print(f"  {record.name} ({record.duration:.1f}s)")


@app.command("plan")
def plan_cmd(
    manifest_path: Annotated[Path, typer.Argument(help="Path to manifest file")],
    outputs: Annotated[
        list[str] | None,
        typer.Option(
            "--output", "-o", help="Output kind to build (can be repeated)"
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show the steps a build would run, without running them."""
    from release_builder.builds.orchestrator import Orchestrator, create_pipeline
    from release_builder.builds.runner import CommandRunner

    manifest = _load_manifest_or_exit(manifest_path, outputs)
    steps = create_pipeline(get_settings(), CommandRunner())
    planned = Orchestrator(steps).plan(manifest)

    if json_output:
        output = [
            {"name": s.name, "conditional": s.conditional} for s in planned
        ]
        console.print(json.dumps(output, indent=2))
        return

    console.print(f"[bold]Planned steps for {manifest.version}:[/bold]")
    for i, step in enumerate(planned, start=1):
        marker = "" if step.conditional else " [dim](always)[/dim]"
        console.print(f"  {i}. {step.name}{marker}")


manifest_app = typer.Typer(help="Inspect release manifests")
app.add_typer(manifest_app, name="manifest")


@manifest_app.command("show")
def manifest_show(
    manifest_path: Annotated[Path, typer.Argument(help="Path to manifest file")],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show the normalized manifest snapshot."""
    from release_builder.manifest.io import (
        manifest_to_json_string,
        manifest_to_yaml_string,
    )

    manifest = _load_manifest_or_exit(manifest_path)
    if json_output:
        console.print(manifest_to_json_string(manifest))
    else:
        console.print(manifest_to_yaml_string(manifest))


if __name__ == "__main__":
    app()
