"""CLI commands for release phase management."""

import typer

from relman.core.executor.maven import ForkedMavenExecutor
from relman.core.release.phase_registry import PhaseRegistry, get_default_registry
from relman.core.scm.repository import ScmRepositoryConfigurator
from relman.core.settings import RelmanSettings

app = typer.Typer(help="Release phase management commands")


def _get_registry() -> PhaseRegistry:
    settings = RelmanSettings.from_env()
    return get_default_registry(
        ScmRepositoryConfigurator(), ForkedMavenExecutor(settings.maven_executable)
    )


@app.command("list")
def list_phases() -> None:
    """List the release phases in execution order."""
    registry = _get_registry()

    typer.echo("Release phases:\n")
    for i, name in enumerate(registry.names, 1):
        phase = registry.get(name)
        implementation = type(phase).__name__ if phase is not None else "<missing>"
        typer.echo(f"  {i:2}. {name} ({implementation})")


@app.command("validate")
def validate_registry() -> None:
    """Validate the phase registry.

    Checks that every phase in the execution order has an implementation.
    """
    registry = _get_registry()
    missing = registry.missing_implementations()

    if not missing:
        typer.echo(f"Phase registry is valid - {len(registry)} phases registered")
        return

    typer.echo("Phase registry validation issues:\n", err=True)
    for name in missing:
        typer.echo(f"  - No implementation for phase '{name}'", err=True)
    raise typer.Exit(1)
