"""Refuse to release from a working copy with local modifications."""

import logging
from pathlib import PurePath
from typing import List

from relman.core.release.configuration import ReleaseConfiguration
from relman.core.release.exceptions import ReleaseExecutionError, ReleaseFailureError
from relman.core.release.phase_base import ReleasePhase
from relman.core.release.phase_registry import ReleasePhaseName
from relman.core.release.shared import get_working_dir, require_success, resolve_scm
from relman.core.release.store import RECORD_SUFFIX
from relman.core.scm.base import ScmError, ScmFileSet
from relman.core.scm.repository import ScmRepositoryConfigurator

logger = logging.getLogger(__name__)

# Files relman itself leaves next to the POM.
RELEASE_FILE_SUFFIXES = (".tag", ".next", ".releaseBackup")


class ScmCheckModificationsPhase(ReleasePhase):
    """Fail when the working copy has changes other than relman's own files."""

    def __init__(self, scm_configurator: ScmRepositoryConfigurator) -> None:
        self._scm_configurator = scm_configurator

    @property
    def name(self) -> str:
        return ReleasePhaseName.SCM_CHECK_MODIFICATIONS.value

    @staticmethod
    def _excluded_names(config: ReleaseConfiguration) -> List[str]:
        return [config.pom_file_name + suffix for suffix in RELEASE_FILE_SUFFIXES]

    def execute(self, config: ReleaseConfiguration) -> None:
        repository, provider = resolve_scm(self._scm_configurator, config)

        try:
            result = provider.status(repository, ScmFileSet(get_working_dir(config)))
        except ScmError as e:
            raise ReleaseExecutionError(f"An error occurred during the status check: {e}", e) from e
        require_success(result, "Unable to check for local modifications")

        excluded = self._excluded_names(config)
        modified = [
            changed.path
            for changed in result.changed_files
            if PurePath(changed.path).name not in excluded
            and not changed.path.endswith(RECORD_SUFFIX)
        ]

        if modified:
            listing = "\n".join(f"  {path}" for path in modified)
            raise ReleaseFailureError(
                f"Cannot prepare the release because you have local modifications:\n{listing}"
            )

        logger.info("Verified there are no local modifications")

    def simulate(self, config: ReleaseConfiguration) -> None:
        self.execute(config)
