"""Tag the release in the SCM."""

import logging

from relman.core.release.configuration import ReleaseConfiguration
from relman.core.release.exceptions import ReleaseExecutionError, ReleaseFailureError
from relman.core.release.phase_base import ReleasePhase
from relman.core.release.phase_registry import ReleasePhaseName
from relman.core.release.shared import get_working_dir, require_success, resolve_scm
from relman.core.scm.base import ScmError, ScmFileSet
from relman.core.scm.repository import ScmRepositoryConfigurator

logger = logging.getLogger(__name__)


class ScmTagPhase(ReleasePhase):
    """Create and publish the release label as a tag."""

    def __init__(self, scm_configurator: ScmRepositoryConfigurator) -> None:
        self._scm_configurator = scm_configurator

    @property
    def name(self) -> str:
        return ReleasePhaseName.SCM_TAG.value

    @staticmethod
    def _label(config: ReleaseConfiguration) -> str:
        if not config.release_label:
            raise ReleaseFailureError("No release label has been mapped")
        return config.release_label

    def execute(self, config: ReleaseConfiguration) -> None:
        label = self._label(config)
        repository, provider = resolve_scm(self._scm_configurator, config)
        message = f"{config.scm_comment_prefix} copy for tag {label}"

        logger.info("Tagging release with the label %s...", label)
        try:
            result = provider.tag(repository, ScmFileSet(get_working_dir(config)), label, message)
        except ScmError as e:
            raise ReleaseExecutionError(f"An error occurred during the tag process: {e}", e) from e
        require_success(result, "Unable to tag SCM")

    def simulate(self, config: ReleaseConfiguration) -> None:
        logger.info("Dry run: would tag the working copy with the label %s", self._label(config))
