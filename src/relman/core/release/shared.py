"""Helpers shared by the release manager and the release phases."""

from pathlib import Path
from typing import Optional, Tuple, TypeVar

from relman.core.release.configuration import ReleaseConfiguration
from relman.core.release.pom import read_pom
from relman.core.release.exceptions import (
    ReleaseExecutionError,
    ReleaseScmCommandError,
    ReleaseScmRepositoryError,
)
from relman.core.scm.base import (
    NoSuchScmProviderError,
    ScmProvider,
    ScmRepository,
    ScmRepositoryError,
    ScmResult,
)
from relman.core.scm.repository import ScmRepositoryConfigurator

R = TypeVar("R", bound=ScmResult)

RELEASE_PROFILE_ARGUMENT = "-DperformRelease=true"


def get_working_dir(config: ReleaseConfiguration) -> Path:
    """Working copy directory of the release."""
    return Path(config.working_directory)


def get_pom_path(config: ReleaseConfiguration) -> Path:
    """POM file of the release."""
    return get_working_dir(config) / config.pom_file_name


def resolve_scm(
    configurator: ScmRepositoryConfigurator, config: ReleaseConfiguration
) -> Tuple[ScmRepository, ScmProvider]:
    """Resolve the SCM repository and provider for ``config``.

    Raises:
        ReleaseScmRepositoryError: If the SCM URL fails validation
        ReleaseExecutionError: If no provider handles the SCM URL
    """
    try:
        repository = configurator.get_configured_repository(config)
        provider = configurator.get_repository_provider(repository)
    except ScmRepositoryError as e:
        raise ReleaseScmRepositoryError(str(e), e.validation_messages) from e
    except NoSuchScmProviderError as e:
        raise ReleaseExecutionError(f"Unable to configure SCM repository: {e}", e) from e
    return repository, provider


def require_success(result: R, message: str) -> R:
    """Return ``result`` or raise ReleaseScmCommandError when it did not succeed."""
    if not result.success:
        raise ReleaseScmCommandError(message, result)
    return result


def with_release_profile(additional_arguments: Optional[str]) -> str:
    """Append the release profile flag to the build arguments."""
    if additional_arguments:
        return f"{additional_arguments} {RELEASE_PROFILE_ARGUMENT}"
    return RELEASE_PROFILE_ARGUMENT


def resolve_coordinates(config: ReleaseConfiguration) -> ReleaseConfiguration:
    """Fill unset groupId and artifactId from the POM.

    The coordinates form the record key, so they must be settled before the
    store is read or written. Returns ``config`` itself when both are set,
    otherwise an updated copy.

    Raises:
        PomError: If a coordinate is missing and the POM cannot be read
    """
    if config.group_id and config.artifact_id:
        return config
    project = read_pom(get_pom_path(config))
    return config.model_copy(
        update={
            "group_id": config.group_id or project.group_id,
            "artifact_id": config.artifact_id or project.artifact_id,
        }
    )
