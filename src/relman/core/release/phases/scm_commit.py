"""Commit the rewritten POM."""

import logging
from abc import abstractmethod

from relman.core.release.configuration import ReleaseConfiguration
from relman.core.release.exceptions import ReleaseExecutionError
from relman.core.release.phase_base import ReleasePhase
from relman.core.release.phase_registry import ReleasePhaseName
from relman.core.release.shared import get_working_dir, require_success, resolve_scm
from relman.core.scm.base import ScmError, ScmFileSet
from relman.core.scm.repository import ScmRepositoryConfigurator

logger = logging.getLogger(__name__)


class AbstractScmCommitPhase(ReleasePhase):
    """Check in the POM with a phase-specific message."""

    def __init__(self, scm_configurator: ScmRepositoryConfigurator) -> None:
        self._scm_configurator = scm_configurator

    @abstractmethod
    def commit_message(self, config: ReleaseConfiguration) -> str:
        ...

    def execute(self, config: ReleaseConfiguration) -> None:
        repository, provider = resolve_scm(self._scm_configurator, config)
        message = self.commit_message(config)
        fileset = ScmFileSet(get_working_dir(config), [config.pom_file_name])

        logger.info("Checking in modified POM: %s", message)
        try:
            result = provider.checkin(repository, fileset, message)
        except ScmError as e:
            raise ReleaseExecutionError(
                f"An error occurred during the checkin process: {e}", e
            ) from e
        require_success(result, "Unable to commit files")

    def simulate(self, config: ReleaseConfiguration) -> None:
        logger.info(
            "Dry run: would commit %s with message '%s'",
            config.pom_file_name,
            self.commit_message(config),
        )


class ScmCommitReleasePhase(AbstractScmCommitPhase):
    @property
    def name(self) -> str:
        return ReleasePhaseName.SCM_COMMIT_RELEASE.value

    def commit_message(self, config: ReleaseConfiguration) -> str:
        return f"{config.scm_comment_prefix} prepare release {config.release_label}"


class ScmCommitDevelopmentPhase(AbstractScmCommitPhase):
    @property
    def name(self) -> str:
        return ReleasePhaseName.SCM_COMMIT_DEVELOPMENT.value

    def commit_message(self, config: ReleaseConfiguration) -> str:
        return f"{config.scm_comment_prefix} prepare for next development iteration"
