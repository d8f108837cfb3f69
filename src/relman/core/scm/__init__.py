"""SCM abstraction used by the release phases and perform."""

from relman.core.scm.base import (
    CheckInScmResult,
    CheckOutScmResult,
    NoSuchScmProviderError,
    ScmError,
    ScmFile,
    ScmFileSet,
    ScmProvider,
    ScmRepository,
    ScmRepositoryError,
    ScmResult,
    StatusScmResult,
    TagScmResult,
)
from relman.core.scm.repository import ScmRepositoryConfigurator, parse_scm_url

__all__ = [
    "ScmProvider",
    "ScmRepository",
    "ScmRepositoryConfigurator",
    "ScmFileSet",
    "ScmFile",
    "ScmResult",
    "CheckOutScmResult",
    "StatusScmResult",
    "CheckInScmResult",
    "TagScmResult",
    "ScmError",
    "ScmRepositoryError",
    "NoSuchScmProviderError",
    "parse_scm_url",
]
