"""SCM provider contract and result types.

Providers report command outcomes as ScmResult objects. A result with
``success=False`` means the command ran but did not succeed; problems reaching
the SCM at all (missing executable, process failure) are raised as ScmError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

ScmFileStatus = Literal["added", "modified", "deleted", "renamed", "conflict", "unknown"]


class ScmError(Exception):
    """The SCM command could not be run."""


class ScmRepositoryError(Exception):
    """An SCM URL failed validation.

    Attributes:
        validation_messages: Problems found with the URL
    """

    def __init__(self, message: str, validation_messages: Optional[List[str]] = None):
        super().__init__(message)
        self.validation_messages: List[str] = list(validation_messages or [])


class NoSuchScmProviderError(Exception):
    """No provider is registered for the SCM type named in a URL."""


@dataclass
class ScmFileSet:
    """Files an SCM command operates on.

    Attributes:
        basedir: Root of the working copy
        files: Paths relative to basedir; empty means the whole working copy
    """

    basedir: Path
    files: List[str] = field(default_factory=list)


class ScmRepository(BaseModel):
    """A configured SCM repository.

    Attributes:
        provider: SCM type, e.g. "git"
        url: Provider-specific part of the SCM URL
        username: Optional user name
        password: Optional password (never serialized)
    """

    provider: str
    url: str
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, exclude=True, repr=False)


class ScmFile(BaseModel):
    """A file reported by an SCM status command."""

    path: str
    status: ScmFileStatus


class ScmResult(BaseModel):
    """Outcome of an SCM command.

    Attributes:
        success: Whether the command succeeded
        command_line: The command that was run (credentials masked)
        provider_message: Short description of the outcome
        command_output: Raw output of the command
    """

    success: bool
    command_line: Optional[str] = None
    provider_message: Optional[str] = None
    command_output: Optional[str] = None


class CheckOutScmResult(ScmResult):
    checkout_dir: Optional[str] = None


class StatusScmResult(ScmResult):
    changed_files: List[ScmFile] = Field(default_factory=list)


class CheckInScmResult(ScmResult):
    checked_in_files: List[str] = Field(default_factory=list)


class TagScmResult(ScmResult):
    tag: Optional[str] = None


class ScmProvider(ABC):
    """Contract for SCM back ends used by the release phases."""

    @property
    @abstractmethod
    def provider_type(self) -> str:
        """SCM type handled by this provider, as it appears in SCM URLs."""
        ...

    @abstractmethod
    def validate_url(self, url: str) -> List[str]:
        """Validate the provider-specific part of an SCM URL.

        Returns:
            List of validation messages; empty when the URL is valid
        """
        ...

    @abstractmethod
    def checkout(
        self, repository: ScmRepository, fileset: ScmFileSet, tag: Optional[str] = None
    ) -> CheckOutScmResult:
        """Check out ``tag`` (or the default branch) into ``fileset.basedir``."""
        ...

    @abstractmethod
    def status(self, repository: ScmRepository, fileset: ScmFileSet) -> StatusScmResult:
        """Report locally modified files of the working copy."""
        ...

    @abstractmethod
    def checkin(
        self, repository: ScmRepository, fileset: ScmFileSet, message: str
    ) -> CheckInScmResult:
        """Commit ``fileset.files`` and publish them to the repository."""
        ...

    @abstractmethod
    def tag(
        self, repository: ScmRepository, fileset: ScmFileSet, tag: str, message: str
    ) -> TagScmResult:
        """Tag the working copy and publish the tag."""
        ...

    @abstractmethod
    def tag_exists(self, repository: ScmRepository, fileset: ScmFileSet, tag: str) -> bool:
        """Whether ``tag`` already exists in the working copy."""
        ...
