"""Check that the project can be released."""

import logging

from relman.core.release.configuration import ReleaseConfiguration
from relman.core.release.exceptions import ReleaseFailureError
from relman.core.release.phase_base import ReleasePhase
from relman.core.release.phase_registry import ReleasePhaseName
from relman.core.release.pom import PomError, read_pom
from relman.core.release.shared import get_pom_path
from relman.core.release.versions import is_snapshot

logger = logging.getLogger(__name__)


class CheckPomsPhase(ReleasePhase):
    """Verify the coordinates are set, the POM is a snapshot and an SCM URL is known.

    Fills ``scm_source_url`` from the POM's ``<scm>`` section when the
    configuration does not set one.
    """

    @property
    def name(self) -> str:
        return ReleasePhaseName.CHECK_POMS.value

    def execute(self, config: ReleaseConfiguration) -> None:
        pom_path = get_pom_path(config)
        try:
            project = read_pom(pom_path)
        except PomError as e:
            raise ReleaseFailureError(str(e), e) from e

        # The coordinates key the release record; they are resolved before any phase runs.
        if not config.group_id or not config.artifact_id:
            raise ReleaseFailureError(
                f"Missing release coordinates: groupId and artifactId must be set in {pom_path}"
            )

        if project.version is None or not is_snapshot(project.version):
            raise ReleaseFailureError(
                f"You don't have a SNAPSHOT project to release: "
                f"{project.artifact_id} is at version {project.version}"
            )

        if not config.scm_source_url:
            if not project.scm_url:
                raise ReleaseFailureError(
                    "Missing required setting: scm connection or developerConnection "
                    f"must be specified in {pom_path} or the release configuration"
                )
            config.scm_source_url = project.scm_url
            logger.info("Using SCM URL from POM: %s", project.scm_url)

        logger.info("Releasing %s from version %s", config.key, project.version)

    def simulate(self, config: ReleaseConfiguration) -> None:
        self.execute(config)
