"""Release manager: checkpointed orchestration of the release phases."""

import logging
import shutil
from pathlib import Path
from typing import Optional

from relman.core.executor.maven import MavenExecutor, MavenExecutorError
from relman.core.release.configuration import ReleaseConfiguration
from relman.core.release.exceptions import (
    ConfigurationNotFoundError,
    ConfigurationStoreError,
    ReleaseExecutionError,
    ReleaseFailureError,
)
from relman.core.release.phase_registry import PhaseRegistry
from relman.core.release.pom import PomError
from relman.core.release.shared import (
    get_working_dir,
    require_success,
    resolve_coordinates,
    resolve_scm,
    with_release_profile,
)
from relman.core.release.store import ConfigurationStore
from relman.core.scm.base import ScmError, ScmFileSet
from relman.core.scm.repository import ScmRepositoryConfigurator
from relman.core.utils import log_release_event

logger = logging.getLogger(__name__)


class ReleaseManager:
    """Prepare, perform and clean up releases.

    ``prepare`` runs the registry's phases in order, writing the release record
    after every phase so that an interrupted preparation resumes where it
    stopped. ``perform`` checks out the prepared tag and runs the release
    build. ``clean`` discards the record and any phase residue.
    """

    def __init__(
        self,
        registry: PhaseRegistry,
        config_store: ConfigurationStore,
        scm_configurator: ScmRepositoryConfigurator,
        maven_executor: MavenExecutor,
    ) -> None:
        """Initialize the manager with its collaborators.

        Args:
            registry: Ordered release phases
            config_store: Persistence of release records
            scm_configurator: Resolves SCM repositories for perform
            maven_executor: Runs the release build for perform
        """
        self._registry = registry
        self._config_store = config_store
        self._scm_configurator = scm_configurator
        self._maven_executor = maven_executor

    @property
    def registry(self) -> PhaseRegistry:
        return self._registry

    def _identify(self, config: ReleaseConfiguration) -> ReleaseConfiguration:
        """Settle the coordinates that key the release record.

        Raises:
            ReleaseFailureError: If they are unset and the POM cannot be read
        """
        try:
            return resolve_coordinates(config)
        except PomError as e:
            raise ReleaseFailureError(
                f"Unable to determine the release coordinates: {e}", e
            ) from e

    def _read_stored(self, config: ReleaseConfiguration) -> Optional[ReleaseConfiguration]:
        """Read the persisted record, None when there is none.

        Raises:
            ReleaseExecutionError: If the record exists but cannot be read
        """
        try:
            return self._config_store.read(config)
        except ConfigurationNotFoundError:
            return None
        except ConfigurationStoreError as e:
            raise ReleaseExecutionError(f"Error reading stored configuration: {e}", e) from e

    def status(self, config: ReleaseConfiguration) -> Optional[ReleaseConfiguration]:
        """Get the persisted record for ``config``, or None if there is none."""
        return self._read_stored(self._identify(config))

    def prepare(
        self,
        config: ReleaseConfiguration,
        resume: bool = True,
        dry_run: bool = False,
    ) -> ReleaseConfiguration:
        """Run the release phases from the last checkpoint onwards.

        Args:
            config: Requested release configuration; with ``resume`` it is only
                the lookup key once a persisted record exists
            resume: Continue from the persisted record if there is one
            dry_run: Simulate each phase instead of executing it

        Returns:
            The effective configuration, with ``completed_phase`` updated

        Raises:
            ReleaseExecutionError: On store failures or a missing phase
            ReleaseFailureError: If the coordinates cannot be determined
            ReleaseError: Whatever a failing phase raised
        """
        config = self._identify(config)
        if resume:
            stored = self._read_stored(config)
            effective = stored if stored is not None else config
        else:
            effective = config.model_copy(update={"completed_phase": None})

        names = self._registry.names
        index = self._registry.index_of(effective.completed_phase)

        if index == len(names) - 1:
            logger.info(
                "Release preparation already completed. You can now continue with perform, "
                "or start again with --no-resume"
            )
            return effective
        if index >= 0:
            logger.info("Resuming release from phase '%s'", names[index + 1])

        for name in names[index + 1 :]:
            phase = self._registry.get(name)
            if phase is None:
                raise ReleaseExecutionError(f"Unable to find phase '{name}' to execute")

            log_release_event(logger, name, "started", "dry run" if dry_run else None)
            try:
                if dry_run:
                    phase.simulate(effective)
                else:
                    phase.execute(effective)
            except Exception as e:
                log_release_event(logger, name, "failed", str(e))
                raise

            effective.completed_phase = name
            try:
                self._config_store.write(effective)
            except ConfigurationStoreError as e:
                raise ReleaseExecutionError(
                    f"Error writing release configuration after completing phase '{name}'", e
                ) from e
            log_release_event(logger, name, "completed")

        logger.info("Release preparation complete")
        return effective

    def perform(
        self,
        config: ReleaseConfiguration,
        checkout_directory: Path,
        goals: str,
        use_release_profile: bool = True,
    ) -> None:
        """Check out the release label and run the release build.

        Args:
            config: Release configuration (the persisted record takes precedence)
            checkout_directory: Directory to check the release out into;
                replaced if it already exists
            goals: Goals of the release build, e.g. "deploy"
            use_release_profile: Enable the release profile in the build

        Raises:
            ReleaseFailureError: If preparation stopped mid-way, or the checkout
                directory is or contains the working directory
            ReleaseScmRepositoryError: If the SCM URL fails validation
            ReleaseScmCommandError: If the checkout did not succeed
            ReleaseExecutionError: On any other failure
        """
        logger.info("Checking out the project to perform the release ...")

        config = self._identify(config)
        stored = self._read_stored(config)
        effective = stored if stored is not None else config

        completed = effective.completed_phase
        if completed is not None and completed != self._registry.terminal_phase:
            raise ReleaseFailureError(
                "Cannot perform release - the preparation step was stopped mid-way. "
                "Please re-run prepare to continue, or perform the release from an SCM tag."
            )

        repository, provider = resolve_scm(self._scm_configurator, effective)

        checkout_directory = Path(checkout_directory)
        target = checkout_directory.resolve()
        working_directory = get_working_dir(effective).resolve()
        if target == working_directory or target in working_directory.parents:
            raise ReleaseFailureError(
                f"Refusing to check out into {checkout_directory}: it would replace "
                f"the working directory {working_directory}"
            )
        if checkout_directory.exists():
            try:
                shutil.rmtree(checkout_directory)
            except OSError as e:
                raise ReleaseExecutionError(
                    f"Unable to remove old checkout directory: {e}", e
                ) from e
        try:
            checkout_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ReleaseExecutionError(f"Unable to create checkout directory: {e}", e) from e

        try:
            result = provider.checkout(
                repository, ScmFileSet(checkout_directory), effective.release_label
            )
        except ScmError as e:
            raise ReleaseExecutionError(
                f"An error occurred in the checkout process: {e}", e
            ) from e
        require_success(result, "Unable to checkout from SCM")

        additional_arguments = effective.additional_arguments
        if use_release_profile:
            additional_arguments = with_release_profile(additional_arguments)

        try:
            self._maven_executor.execute_goals(
                checkout_directory,
                goals,
                effective.interactive,
                effective.pom_file_name,
                additional_arguments,
            )
        except MavenExecutorError as e:
            raise ReleaseExecutionError(f"Error executing Maven: {e}", e) from e

        self.clean(effective)

    def clean(self, config: ReleaseConfiguration) -> None:
        """Delete the release record and let every phase remove its residue.

        Never raises; failures are logged.
        """
        logger.info("Cleaning up after release...")

        try:
            config = resolve_coordinates(config)
        except PomError as e:
            logger.error("Unable to determine the release coordinates: %s", e)

        try:
            self._config_store.delete(config)
        except Exception as e:
            logger.error("Failed to delete release record for %s: %s", config.key, e)

        for phase in self._registry.implementations():
            try:
                phase.clean(config)
            except Exception as e:
                logger.error("Failed to clean up phase '%s': %s", phase.name, e)
