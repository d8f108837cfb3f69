"""Ordered registry of release phases.

The registry pairs an ordered sequence of phase names (the execution order)
with a read-only mapping from name to ReleasePhase implementation. Ordering is
the whole contract: there is no dependency graph between phases.
"""

import logging
from enum import Enum, unique
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from relman.core.release.phase_base import ReleasePhase

if TYPE_CHECKING:
    from relman.core.executor.maven import MavenExecutor
    from relman.core.scm.repository import ScmRepositoryConfigurator

logger = logging.getLogger(__name__)


@unique
class ReleasePhaseName(str, Enum):
    """Names of the built-in release phases."""

    CHECK_POMS = "check-poms"
    SCM_CHECK_MODIFICATIONS = "scm-check-modifications"
    MAP_RELEASE_VERSIONS = "map-release-versions"
    MAP_DEVELOPMENT_VERSIONS = "map-development-versions"
    REWRITE_POMS_FOR_RELEASE = "rewrite-poms-for-release"
    RUN_TESTS = "run-tests"
    SCM_COMMIT_RELEASE = "scm-commit-release"
    SCM_TAG = "scm-tag"
    REWRITE_POMS_FOR_DEVELOPMENT = "rewrite-poms-for-development"
    SCM_COMMIT_DEVELOPMENT = "scm-commit-development"
    END_RELEASE = "end-release"

    def __str__(self) -> str:
        return self.value


# Execution order of the built-in phases.
DEFAULT_PHASE_ORDER: Tuple[ReleasePhaseName, ...] = (
    ReleasePhaseName.CHECK_POMS,
    ReleasePhaseName.SCM_CHECK_MODIFICATIONS,
    ReleasePhaseName.MAP_RELEASE_VERSIONS,
    ReleasePhaseName.MAP_DEVELOPMENT_VERSIONS,
    ReleasePhaseName.REWRITE_POMS_FOR_RELEASE,
    ReleasePhaseName.RUN_TESTS,
    ReleasePhaseName.SCM_COMMIT_RELEASE,
    ReleasePhaseName.SCM_TAG,
    ReleasePhaseName.REWRITE_POMS_FOR_DEVELOPMENT,
    ReleasePhaseName.SCM_COMMIT_DEVELOPMENT,
    ReleasePhaseName.END_RELEASE,
)


class PhaseRegistry:
    """Immutable ordered sequence of phase names with their implementations."""

    def __init__(self, order: Sequence[str], phases: Iterable[ReleasePhase]) -> None:
        """Build the registry.

        Args:
            order: Phase names in execution order
            phases: Phase implementations, looked up by their ``name``

        Raises:
            ValueError: If the order is empty or lists a name twice, or if two
                implementations share a name
        """
        names = tuple(str(name) for name in order)
        if not names:
            raise ValueError("Phase order cannot be empty")
        if len(set(names)) != len(names):
            raise ValueError(f"Phase order contains duplicate names: {list(names)}")

        implementations: Dict[str, ReleasePhase] = {}
        for phase in phases:
            if phase.name in implementations:
                raise ValueError(f"Duplicate phase implementation: {phase.name}")
            implementations[phase.name] = phase
            logger.debug("Registered phase: %s", phase.name)

        self._order = names
        self._phases: Mapping[str, ReleasePhase] = MappingProxyType(implementations)

    @property
    def names(self) -> Tuple[str, ...]:
        """Phase names in execution order."""
        return self._order

    @property
    def terminal_phase(self) -> str:
        """Name of the last phase; a release is prepared once it completes."""
        return self._order[-1]

    def __len__(self) -> int:
        return len(self._order)

    def get(self, name: str) -> Optional[ReleasePhase]:
        """Get the implementation registered for ``name``, or None."""
        return self._phases.get(name)

    def index_of(self, name: Optional[str]) -> int:
        """Position of ``name`` in the execution order, -1 if unset or unknown."""
        if name is None:
            return -1
        try:
            return self._order.index(name)
        except ValueError:
            return -1

    def implementations(self) -> List[ReleasePhase]:
        """All registered implementations, including ones not in the order."""
        return list(self._phases.values())

    def missing_implementations(self) -> List[str]:
        """Names in the execution order with no registered implementation."""
        return [name for name in self._order if name not in self._phases]


def get_default_registry(
    scm_configurator: "ScmRepositoryConfigurator",
    maven_executor: "MavenExecutor",
) -> PhaseRegistry:
    """Create the registry of built-in phases in their default order.

    Args:
        scm_configurator: Resolves the SCM repository and provider for SCM phases
        maven_executor: Runs the build for the run-tests phase

    Returns:
        PhaseRegistry covering every ReleasePhaseName
    """
    # Import here to avoid circular imports
    from relman.core.release.phases import (
        CheckPomsPhase,
        EndReleasePhase,
        MapDevelopmentVersionsPhase,
        MapReleaseVersionsPhase,
        RewritePomsForDevelopmentPhase,
        RewritePomsForReleasePhase,
        RunTestsPhase,
        ScmCheckModificationsPhase,
        ScmCommitDevelopmentPhase,
        ScmCommitReleasePhase,
        ScmTagPhase,
    )

    phases: List[ReleasePhase] = [
        CheckPomsPhase(),
        ScmCheckModificationsPhase(scm_configurator),
        MapReleaseVersionsPhase(),
        MapDevelopmentVersionsPhase(),
        RewritePomsForReleasePhase(),
        RunTestsPhase(maven_executor),
        ScmCommitReleasePhase(scm_configurator),
        ScmTagPhase(scm_configurator),
        RewritePomsForDevelopmentPhase(),
        ScmCommitDevelopmentPhase(scm_configurator),
        EndReleasePhase(),
    ]

    return PhaseRegistry(DEFAULT_PHASE_ORDER, phases)
