"""Abstract base class for release phases."""

import logging
from abc import ABC, abstractmethod

from relman.core.release.configuration import ReleaseConfiguration

logger = logging.getLogger(__name__)


class ReleasePhase(ABC):
    """A single named step of release preparation.

    Phases are run by the ReleaseManager in registry order. A phase signals
    failure by raising a ReleaseError; returning normally means success.

    Phases may be re-executed after an interruption (the checkpoint is written
    only after a phase returns), so ``execute`` must be safe to run again.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique phase name used in the registry and the progress marker."""
        ...

    @abstractmethod
    def execute(self, config: ReleaseConfiguration) -> None:
        """Perform the phase for real.

        Args:
            config: Release configuration, which the phase may update
        """
        ...

    def simulate(self, config: ReleaseConfiguration) -> None:
        """Dry-run the phase: validate and report without real side effects.

        Args:
            config: Release configuration, which the phase may update
        """
        logger.info("[%s] nothing to simulate", self.name)

    def clean(self, config: ReleaseConfiguration) -> None:
        """Remove any residue left by ``execute`` or ``simulate``.

        Must be a no-op when there is nothing to remove.

        Args:
            config: Release configuration
        """
        return None
