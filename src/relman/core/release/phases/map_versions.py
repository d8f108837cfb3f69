"""Decide the release and next development versions."""

import logging

from relman.core.release.configuration import ReleaseConfiguration
from relman.core.release.exceptions import ReleaseFailureError
from relman.core.release.phase_base import ReleasePhase
from relman.core.release.phase_registry import ReleasePhaseName
from relman.core.release.pom import PomError, read_pom
from relman.core.release.shared import get_pom_path
from relman.core.release.versions import next_development_version, to_release_version

logger = logging.getLogger(__name__)


class MapReleaseVersionsPhase(ReleasePhase):
    """Default the release version and label from the snapshot version.

    Values already present in the configuration are kept, so a resumed
    release never recomputes them from an already rewritten POM.
    """

    @property
    def name(self) -> str:
        return ReleasePhaseName.MAP_RELEASE_VERSIONS.value

    def execute(self, config: ReleaseConfiguration) -> None:
        if config.release_version is None:
            try:
                project = read_pom(get_pom_path(config))
                config.release_version = to_release_version(project.version or "")
            except (PomError, ValueError) as e:
                raise ReleaseFailureError(f"Unable to determine the release version: {e}", e) from e

        if config.release_label is None:
            config.release_label = f"{config.artifact_id}-{config.release_version}"

        logger.info(
            "Release version: %s (tag %s)", config.release_version, config.release_label
        )

    def simulate(self, config: ReleaseConfiguration) -> None:
        self.execute(config)


class MapDevelopmentVersionsPhase(ReleasePhase):
    """Default the next development version from the release version."""

    @property
    def name(self) -> str:
        return ReleasePhaseName.MAP_DEVELOPMENT_VERSIONS.value

    def execute(self, config: ReleaseConfiguration) -> None:
        if config.release_version is None:
            raise ReleaseFailureError("The release version has not been mapped")

        if config.development_version is None:
            try:
                config.development_version = next_development_version(config.release_version)
            except ValueError as e:
                raise ReleaseFailureError(
                    f"Unable to determine the development version: {e}", e
                ) from e

        logger.info("Next development version: %s", config.development_version)

    def simulate(self, config: ReleaseConfiguration) -> None:
        self.execute(config)
