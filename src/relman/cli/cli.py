"""Relman CLI - Maven release management."""

from pathlib import Path
from typing import NoReturn, Optional

import typer
from dotenv import load_dotenv

from relman import __version__
from relman.cli.phase import app as phase_app
from relman.core.executor.maven import ForkedMavenExecutor
from relman.core.release import (
    FileConfigurationStore,
    ReleaseConfiguration,
    ReleaseError,
    ReleaseFailureError,
    ReleaseManager,
    ReleaseScmRepositoryError,
    get_default_registry,
)
from relman.core.release.pom import PomError
from relman.core.release.shared import resolve_coordinates
from relman.core.scm.git import GitScmProvider
from relman.core.scm.repository import ScmRepositoryConfigurator
from relman.core.settings import RelmanSettings
from relman.core.utils import make_release_id, setup_logger

# Load environment variables
load_dotenv()

app = typer.Typer(
    invoke_without_command=True,
    no_args_is_help=True,
    help="Relman CLI - Maven release management",
)
app.add_typer(phase_app, name="phase")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"Relman CLI version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Relman CLI - Maven release management."""
    pass


def _load_settings() -> RelmanSettings:
    try:
        return RelmanSettings.from_env()
    except ValueError as e:
        typer.echo(f"Error: invalid settings: {e}", err=True)
        raise typer.Exit(1)


def build_manager(settings: RelmanSettings, state_dir: Optional[Path] = None) -> ReleaseManager:
    """Wire a ReleaseManager with the default phases and collaborators."""
    scm_configurator = ScmRepositoryConfigurator(
        {"git": lambda: GitScmProvider(settings.git_executable)}
    )
    maven_executor = ForkedMavenExecutor(settings.maven_executable)
    return ReleaseManager(
        registry=get_default_registry(scm_configurator, maven_executor),
        config_store=FileConfigurationStore(state_dir),
        scm_configurator=scm_configurator,
        maven_executor=maven_executor,
    )


def _build_configuration(
    working_dir: Path,
    pom: str,
    group_id: Optional[str] = None,
    artifact_id: Optional[str] = None,
    **parameters,
) -> ReleaseConfiguration:
    """Create the requested configuration, taking coordinates from the POM if needed."""
    values = {name: value for name, value in parameters.items() if value is not None}
    config = ReleaseConfiguration(
        group_id=group_id,
        artifact_id=artifact_id,
        working_directory=str(working_dir),
        pom_file_name=pom,
        **values,
    )
    try:
        return resolve_coordinates(config)
    except PomError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _report_release_error(error: ReleaseError) -> NoReturn:
    """Print a release error and exit with its code.

    Rule failures exit with 1, tooling errors with 2.
    """
    if isinstance(error, ReleaseFailureError):
        typer.echo(f"Release failed: {error}", err=True)
        raise typer.Exit(1)
    if isinstance(error, ReleaseScmRepositoryError):
        typer.echo(f"Error: {error.message}", err=True)
        for message in error.validation_messages:
            typer.echo(f"  - {message}", err=True)
        raise typer.Exit(2)
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(2)


WORKING_DIR_OPTION = typer.Option(
    Path("."), "--working-dir", "-w", help="Directory of the project to release"
)
POM_OPTION = typer.Option("pom.xml", "--pom", "-f", help="POM file name in the working directory")
STATE_DIR_OPTION = typer.Option(
    None, "--state-dir", help="Directory of release records (defaults to ~/.relman/releases)"
)


@app.command()
def prepare(
    working_dir: Path = WORKING_DIR_OPTION,
    pom: str = POM_OPTION,
    state_dir: Optional[Path] = STATE_DIR_OPTION,
    scm_url: Optional[str] = typer.Option(None, "--scm-url", help="SCM URL, e.g. scm:git:<url>"),
    scm_username: Optional[str] = typer.Option(None, "--scm-username", help="SCM user name"),
    scm_password: Optional[str] = typer.Option(
        None, "--scm-password", envvar="RELMAN_SCM_PASSWORD", help="SCM password"
    ),
    tag: Optional[str] = typer.Option(None, "--tag", help="Release label (tag name)"),
    release_version: Optional[str] = typer.Option(None, "--release-version"),
    development_version: Optional[str] = typer.Option(None, "--development-version"),
    additional_arguments: Optional[str] = typer.Option(
        None, "--arguments", help="Additional arguments passed to every build"
    ),
    preparation_goals: Optional[str] = typer.Option(
        None, "--preparation-goals", help="Goals run to verify the release"
    ),
    batch_mode: bool = typer.Option(
        False, "--batch-mode", "-B", help="Run builds non-interactively"
    ),
    resume: bool = typer.Option(
        True, "--resume/--no-resume", help="Resume from the last checkpoint"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Simulate the phases only"),
):
    """Prepare a release: rewrite versions, verify, commit and tag.

    Example:
        relman prepare --working-dir ~/src/project --batch-mode
        relman prepare --dry-run
    """
    settings = _load_settings()
    setup_logger(make_release_id(), "prepare", console_level=settings.log_level)

    config = _build_configuration(
        working_dir,
        pom,
        scm_source_url=scm_url,
        scm_username=scm_username,
        scm_password=scm_password,
        release_label=tag,
        release_version=release_version,
        development_version=development_version,
        additional_arguments=additional_arguments,
        preparation_goals=preparation_goals,
        interactive=not batch_mode,
    )
    manager = build_manager(settings, state_dir)

    try:
        result = manager.prepare(config, resume=resume, dry_run=dry_run)
    except ReleaseError as e:
        _report_release_error(e)

    typer.echo(f"Release {result.key} prepared through phase '{result.completed_phase}'")


@app.command()
def perform(
    working_dir: Path = WORKING_DIR_OPTION,
    pom: str = POM_OPTION,
    state_dir: Optional[Path] = STATE_DIR_OPTION,
    checkout_dir: Optional[Path] = typer.Option(
        None, "--checkout-dir", help="Checkout directory (defaults to target/checkout)"
    ),
    goals: str = typer.Option("deploy", "--goals", help="Goals of the release build"),
    use_release_profile: bool = typer.Option(
        True, "--use-release-profile/--no-release-profile", help="Enable the release profile"
    ),
    scm_url: Optional[str] = typer.Option(None, "--scm-url", help="SCM URL when not prepared"),
    scm_username: Optional[str] = typer.Option(None, "--scm-username", help="SCM user name"),
    scm_password: Optional[str] = typer.Option(
        None, "--scm-password", envvar="RELMAN_SCM_PASSWORD", help="SCM password"
    ),
    tag: Optional[str] = typer.Option(None, "--tag", help="Release label when not prepared"),
    batch_mode: bool = typer.Option(
        False, "--batch-mode", "-B", help="Run builds non-interactively"
    ),
):
    """Check out the prepared release and run the release build.

    Example:
        relman perform --goals "deploy site-deploy"
    """
    settings = _load_settings()
    setup_logger(make_release_id(), "perform", console_level=settings.log_level)

    config = _build_configuration(
        working_dir,
        pom,
        scm_source_url=scm_url,
        scm_username=scm_username,
        scm_password=scm_password,
        release_label=tag,
        interactive=not batch_mode,
    )
    manager = build_manager(settings, state_dir)
    target = checkout_dir or (working_dir / "target" / "checkout")

    try:
        manager.perform(config, target, goals, use_release_profile=use_release_profile)
    except ReleaseError as e:
        _report_release_error(e)

    typer.echo(f"Release {config.key} performed")


@app.command()
def clean(
    working_dir: Path = WORKING_DIR_OPTION,
    pom: str = POM_OPTION,
    state_dir: Optional[Path] = STATE_DIR_OPTION,
):
    """Discard the release record and any files left by the phases."""
    settings = _load_settings()
    setup_logger(make_release_id(), "clean", console_level=settings.log_level)

    config = _build_configuration(working_dir, pom)
    build_manager(settings, state_dir).clean(config)
    typer.echo(f"Release {config.key} cleaned")


@app.command()
def status(
    working_dir: Path = WORKING_DIR_OPTION,
    pom: str = POM_OPTION,
    state_dir: Optional[Path] = STATE_DIR_OPTION,
    raw: bool = typer.Option(False, "--raw", "-r", help="Output the raw JSON record"),
):
    """Show the persisted progress of a release."""
    settings = _load_settings()
    config = _build_configuration(working_dir, pom)
    manager = build_manager(settings, state_dir)

    try:
        stored = manager.status(config)
    except ReleaseError as e:
        _report_release_error(e)

    if stored is None:
        typer.echo(f"No release in progress for {config.key}")
        return

    if raw:
        typer.echo(stored.model_dump_json())
        return

    names = manager.registry.names
    done = manager.registry.index_of(stored.completed_phase) + 1
    typer.echo(f"Release: {stored.key}")
    typer.echo(f"Release label: {stored.release_label or '-'}")
    typer.echo(f"Progress: {done}/{len(names)} phases")
    for index, name in enumerate(names):
        marker = "x" if index < done else " "
        typer.echo(f"  [{marker}] {name}")


if __name__ == "__main__":
    app()
