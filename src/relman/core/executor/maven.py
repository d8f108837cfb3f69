"""Run Maven builds for release preparation and perform."""

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


class MavenExecutorError(Exception):
    """A Maven build could not be run or did not succeed.

    Attributes:
        returncode: Exit code of the build, None if it never started
    """

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class MavenExecutor(ABC):
    """Contract for running Maven goals against a project directory."""

    @abstractmethod
    def execute_goals(
        self,
        working_directory: Path,
        goals: str,
        interactive: bool,
        pom_file_name: Optional[str] = None,
        additional_arguments: Optional[str] = None,
    ) -> None:
        """Run ``goals`` in ``working_directory``.

        Args:
            working_directory: Directory containing the project
            goals: Space-separated goals and phases, e.g. "clean deploy"
            interactive: Whether the build may prompt the operator
            pom_file_name: Optional POM file name relative to the directory
            additional_arguments: Extra command-line arguments, shell-quoted

        Raises:
            MavenExecutorError: If the build cannot start or fails
        """
        ...


class ForkedMavenExecutor(MavenExecutor):
    """Run Maven as a child process, streaming its output to the console.

    No timeout is applied: a release build runs as long as it needs to.
    """

    def __init__(self, executable: str = "mvn") -> None:
        self._executable = executable

    def build_command(
        self,
        goals: str,
        interactive: bool,
        pom_file_name: Optional[str] = None,
        additional_arguments: Optional[str] = None,
    ) -> List[str]:
        """Assemble the Maven command line.

        Raises:
            MavenExecutorError: If the additional arguments cannot be parsed
        """
        cmd = [self._executable]
        if not interactive:
            cmd.append("--batch-mode")
        if pom_file_name:
            cmd += ["-f", pom_file_name]
        if additional_arguments:
            try:
                cmd += shlex.split(additional_arguments)
            except ValueError as e:
                raise MavenExecutorError(
                    f"Unable to parse additional arguments '{additional_arguments}': {e}"
                ) from e
        cmd += goals.split()
        return cmd

    def execute_goals(
        self,
        working_directory: Path,
        goals: str,
        interactive: bool,
        pom_file_name: Optional[str] = None,
        additional_arguments: Optional[str] = None,
    ) -> None:
        if not goals.strip():
            raise MavenExecutorError("No goals given to execute")

        cmd = self.build_command(goals, interactive, pom_file_name, additional_arguments)
        logger.info("Executing goals '%s' in %s", goals, working_directory)
        logger.debug("Command: %s", " ".join(cmd))

        try:
            proc = subprocess.run(
                cmd,
                cwd=str(working_directory),
                stdin=None if interactive else subprocess.DEVNULL,
            )
        except FileNotFoundError as e:
            raise MavenExecutorError(
                f"{self._executable} command not found - ensure Maven is installed and in PATH"
            ) from e
        except OSError as e:
            raise MavenExecutorError(f"Unable to start Maven: {e}") from e

        if proc.returncode != 0:
            raise MavenExecutorError(
                f"Maven execution failed (exit code {proc.returncode})",
                returncode=proc.returncode,
            )

        logger.debug("Goals '%s' completed successfully", goals)
