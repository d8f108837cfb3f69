"""Rewrite the POM version for the release and for the next iteration."""

import logging
import shutil
from abc import abstractmethod
from pathlib import Path
from typing import Optional

from relman.core.release.configuration import ReleaseConfiguration
from relman.core.release.exceptions import ReleaseExecutionError, ReleaseFailureError
from relman.core.release.phase_base import ReleasePhase
from relman.core.release.phase_registry import ReleasePhaseName
from relman.core.release.pom import PomError, rewrite_version
from relman.core.release.shared import get_pom_path

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".releaseBackup"


def _remove(path: Path) -> None:
    if path.exists():
        path.unlink()
        logger.debug("Removed %s", path)


class AbstractRewritePomsPhase(ReleasePhase):
    """Set the POM version; a dry run writes the result beside the POM instead."""

    #: Suffix of the file a dry run writes, e.g. ``pom.xml.tag``
    simulate_suffix: str = ""

    @abstractmethod
    def target_version(self, config: ReleaseConfiguration) -> Optional[str]:
        """Version to write into the POM."""
        ...

    def _require_version(self, config: ReleaseConfiguration) -> str:
        version = self.target_version(config)
        if not version:
            raise ReleaseFailureError(f"No version mapped for phase '{self.name}'")
        return version

    def _rewrite(self, pom_path: Path, version: str, destination: Optional[Path] = None) -> None:
        try:
            rewrite_version(pom_path, version, destination)
        except PomError as e:
            raise ReleaseExecutionError(f"Unable to rewrite POM: {e}", e) from e

    def execute(self, config: ReleaseConfiguration) -> None:
        pom_path = get_pom_path(config)
        version = self._require_version(config)
        self._rewrite(pom_path, version)
        logger.info("Rewrote %s to version %s", pom_path, version)

    def simulate(self, config: ReleaseConfiguration) -> None:
        pom_path = get_pom_path(config)
        version = self._require_version(config)
        destination = pom_path.with_name(pom_path.name + self.simulate_suffix)
        self._rewrite(pom_path, version, destination)
        logger.info("Dry run: wrote version %s to %s", version, destination)

    def clean(self, config: ReleaseConfiguration) -> None:
        pom_path = get_pom_path(config)
        _remove(pom_path.with_name(pom_path.name + self.simulate_suffix))


class RewritePomsForReleasePhase(AbstractRewritePomsPhase):
    """Back up the POM and set the release version."""

    simulate_suffix = ".tag"

    @property
    def name(self) -> str:
        return ReleasePhaseName.REWRITE_POMS_FOR_RELEASE.value

    def target_version(self, config: ReleaseConfiguration) -> Optional[str]:
        return config.release_version

    def execute(self, config: ReleaseConfiguration) -> None:
        pom_path = get_pom_path(config)
        backup = pom_path.with_name(pom_path.name + BACKUP_SUFFIX)
        # A backup from an earlier attempt already holds the snapshot POM.
        if not backup.exists():
            try:
                shutil.copy2(pom_path, backup)
            except OSError as e:
                raise ReleaseExecutionError(f"Unable to back up {pom_path}: {e}", e) from e
        super().execute(config)

    def clean(self, config: ReleaseConfiguration) -> None:
        super().clean(config)
        pom_path = get_pom_path(config)
        _remove(pom_path.with_name(pom_path.name + BACKUP_SUFFIX))


class RewritePomsForDevelopmentPhase(AbstractRewritePomsPhase):
    """Set the next development version."""

    simulate_suffix = ".next"

    @property
    def name(self) -> str:
        return ReleasePhaseName.REWRITE_POMS_FOR_DEVELOPMENT.value

    def target_version(self, config: ReleaseConfiguration) -> Optional[str]:
        return config.development_version
