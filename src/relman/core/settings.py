"""Environment-driven settings for Relman."""

import os
from dataclasses import dataclass

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class RelmanSettings:
    """Settings for the Relman command line.

    Attributes:
        maven_executable: Maven command used for builds
        git_executable: git command used by the git SCM provider
        log_level: Console logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    maven_executable: str = "mvn"
    git_executable: str = "git"
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration values."""
        if not self.maven_executable:
            raise ValueError("maven_executable cannot be empty")

        if not self.git_executable:
            raise ValueError("git_executable cannot be empty")

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}")

        # Normalize log level to uppercase
        self.log_level = self.log_level.upper()

    @classmethod
    def from_env(cls) -> "RelmanSettings":
        """Build settings from RELMAN_* environment variables."""
        return cls(
            maven_executable=os.environ.get("RELMAN_MAVEN_EXECUTABLE", "mvn"),
            git_executable=os.environ.get("RELMAN_GIT_EXECUTABLE", "git"),
            log_level=os.environ.get("RELMAN_LOG_LEVEL", "INFO"),
        )
