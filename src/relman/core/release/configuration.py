"""Release configuration model.

A ReleaseConfiguration holds every parameter of a release together with the
``completed_phase`` progress marker that makes preparation resumable.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_POM_FILE_NAME = "pom.xml"
DEFAULT_PREPARATION_GOALS = "clean verify"
DEFAULT_COMMENT_PREFIX = "[relman]"


class ReleaseConfiguration(BaseModel):
    """Parameters and progress of a single release.

    Attributes:
        group_id: Maven groupId of the project being released
        artifact_id: Maven artifactId of the project being released
        working_directory: Directory holding the project's working copy
        scm_source_url: SCM connection URL, e.g. ``scm:git:https://host/repo.git``
        scm_username: Optional SCM user name
        scm_password: Optional SCM password (never persisted)
        completed_phase: Name of the last successfully finished phase
        release_label: Tag name the release is recorded under
        release_version: Version the project is released as
        development_version: Version the project moves to after the release
        additional_arguments: Extra arguments passed to every build invocation
        preparation_goals: Goals run to verify the release before committing
        interactive: Whether the build may prompt the operator
        pom_file_name: POM file name relative to the working directory
        use_release_profile: Whether ``perform`` enables the release profile
        scm_comment_prefix: Prefix of every commit message relman creates
    """

    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    working_directory: str = "."
    scm_source_url: Optional[str] = None
    scm_username: Optional[str] = None
    scm_password: Optional[str] = Field(default=None, exclude=True, repr=False)
    completed_phase: Optional[str] = None
    release_label: Optional[str] = None
    release_version: Optional[str] = None
    development_version: Optional[str] = None
    additional_arguments: Optional[str] = None
    preparation_goals: str = DEFAULT_PREPARATION_GOALS
    interactive: bool = True
    pom_file_name: str = DEFAULT_POM_FILE_NAME
    use_release_profile: bool = True
    scm_comment_prefix: str = DEFAULT_COMMENT_PREFIX

    @field_validator("completed_phase", "release_label", "additional_arguments", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Normalize empty or whitespace-only strings to None."""
        # Non-strings are left for pydantic's type check to reject.
        if not isinstance(v, str):
            return v
        trimmed = v.strip()
        return trimmed or None

    @property
    def key(self) -> str:
        """Identity of the release record in a ConfigurationStore."""
        return f"{self.group_id or 'unknown'}:{self.artifact_id or 'unknown'}"
