"""Exception types for release orchestration.

The release manager separates two families of failure:

- ``ReleaseExecutionError``: something went wrong with the tooling itself
  (persisting state, a missing phase implementation, a build that could not
  be launched). These are reported with full context.
- ``ReleaseFailureError``: an expected, business-rule failure such as
  performing a release whose preparation stopped mid-way. These are reported
  to the operator as a normal build failure.

Collaborator errors (store, SCM, build executor) are wrapped into one of the
release errors before they reach the caller of the manager.
"""

from typing import Any, List, Optional


class ReleaseError(Exception):
    """Base exception for all release errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ReleaseExecutionError(ReleaseError):
    """Fatal, unexpected condition while running a release operation."""


class ReleaseFailureError(ReleaseError):
    """Expected failure of a release rule (e.g. unfinished preparation)."""


class ReleaseScmRepositoryError(ReleaseError):
    """The SCM repository could not be configured from the release configuration.

    Attributes:
        validation_messages: Human-readable problems found with the SCM URL
    """

    def __init__(self, message: str, validation_messages: Optional[List[str]] = None):
        super().__init__(message)
        self.validation_messages: List[str] = list(validation_messages or [])

    def __str__(self) -> str:
        if not self.validation_messages:
            return self.message
        details = "\n".join(f"  - {msg}" for msg in self.validation_messages)
        return f"{self.message}\n{details}"


class ReleaseScmCommandError(ReleaseError):
    """An SCM command completed without raising but reported failure.

    Attributes:
        result: The provider result object, kept for diagnostics
    """

    def __init__(self, message: str, result: Any):
        super().__init__(message)
        self.result = result

    def __str__(self) -> str:
        provider_message = getattr(self.result, "provider_message", None)
        command_output = getattr(self.result, "command_output", None)
        text = self.message
        if provider_message:
            text += f"\nProvider message: {provider_message}"
        if command_output:
            text += f"\nCommand output:\n{command_output}"
        return text


class ConfigurationStoreError(Exception):
    """The release configuration store could not be read or written."""


class ConfigurationNotFoundError(ConfigurationStoreError):
    """No persisted release configuration exists for the requested key."""
