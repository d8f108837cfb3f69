"""Release orchestration package.

This package drives a release as an ordered, checkpointed sequence of named
phases. Each phase implements the common ReleasePhase interface; the
ReleaseManager persists progress after every phase so that preparation can be
resumed, simulated or cleaned.

Main components:
- configuration: ReleaseConfiguration model with the completed-phase marker
- store: ConfigurationStore contract and the JSON file implementation
- phase_base: Abstract ReleasePhase
- phase_registry: Ordered PhaseRegistry and the built-in phase names
- manager: ReleaseManager (prepare, perform, clean)
- phases/: Built-in phase implementations
- exceptions: Release error taxonomy
"""

from relman.core.release.configuration import ReleaseConfiguration
from relman.core.release.exceptions import (
    ConfigurationNotFoundError,
    ConfigurationStoreError,
    ReleaseError,
    ReleaseExecutionError,
    ReleaseFailureError,
    ReleaseScmCommandError,
    ReleaseScmRepositoryError,
)
from relman.core.release.manager import ReleaseManager
from relman.core.release.phase_base import ReleasePhase
from relman.core.release.phase_registry import (
    DEFAULT_PHASE_ORDER,
    PhaseRegistry,
    ReleasePhaseName,
    get_default_registry,
)
from relman.core.release.store import ConfigurationStore, FileConfigurationStore

__all__ = [
    # Orchestration
    "ReleaseManager",
    "ReleaseConfiguration",
    # Phases
    "ReleasePhase",
    "PhaseRegistry",
    "ReleasePhaseName",
    "DEFAULT_PHASE_ORDER",
    "get_default_registry",
    # Persistence
    "ConfigurationStore",
    "FileConfigurationStore",
    # Errors
    "ReleaseError",
    "ReleaseExecutionError",
    "ReleaseFailureError",
    "ReleaseScmRepositoryError",
    "ReleaseScmCommandError",
    "ConfigurationStoreError",
    "ConfigurationNotFoundError",
]
