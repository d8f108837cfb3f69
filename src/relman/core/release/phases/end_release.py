"""Terminal phase marking preparation as complete."""

import logging

from relman.core.release.configuration import ReleaseConfiguration
from relman.core.release.phase_base import ReleasePhase
from relman.core.release.phase_registry import ReleasePhaseName

logger = logging.getLogger(__name__)


class EndReleasePhase(ReleasePhase):
    @property
    def name(self) -> str:
        return ReleasePhaseName.END_RELEASE.value

    def execute(self, config: ReleaseConfiguration) -> None:
        logger.info(
            "Release %s prepared as %s; run perform to build and deploy it",
            config.key,
            config.release_label,
        )

    def simulate(self, config: ReleaseConfiguration) -> None:
        logger.info("Dry run complete for %s", config.key)
