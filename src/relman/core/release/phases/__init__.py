"""Built-in release phases, in the order the default registry runs them."""

from relman.core.release.phases.check_poms import CheckPomsPhase
from relman.core.release.phases.end_release import EndReleasePhase
from relman.core.release.phases.map_versions import (
    MapDevelopmentVersionsPhase,
    MapReleaseVersionsPhase,
)
from relman.core.release.phases.rewrite_poms import (
    RewritePomsForDevelopmentPhase,
    RewritePomsForReleasePhase,
)
from relman.core.release.phases.run_tests import RunTestsPhase
from relman.core.release.phases.scm_check_modifications import ScmCheckModificationsPhase
from relman.core.release.phases.scm_commit import ScmCommitDevelopmentPhase, ScmCommitReleasePhase
from relman.core.release.phases.scm_tag import ScmTagPhase

__all__ = [
    "CheckPomsPhase",
    "ScmCheckModificationsPhase",
    "MapReleaseVersionsPhase",
    "MapDevelopmentVersionsPhase",
    "RewritePomsForReleasePhase",
    "RunTestsPhase",
    "ScmCommitReleasePhase",
    "ScmTagPhase",
    "RewritePomsForDevelopmentPhase",
    "ScmCommitDevelopmentPhase",
    "EndReleasePhase",
]
