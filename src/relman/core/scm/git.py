"""Git SCM provider backed by the git command line."""

import logging
import re
import subprocess
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote, urlsplit, urlunsplit

from relman.core.scm.base import (
    CheckInScmResult,
    CheckOutScmResult,
    ScmError,
    ScmFile,
    ScmFileSet,
    ScmFileStatus,
    ScmProvider,
    ScmRepository,
    StatusScmResult,
    TagScmResult,
)

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    "M": "modified",
    "T": "modified",
    "A": "added",
    "D": "deleted",
    "R": "renamed",
    "C": "added",
    "U": "conflict",
}


def _parse_porcelain_line(line: str) -> Optional[ScmFile]:
    """Parse one line of ``git status --porcelain`` output."""
    if len(line) < 4:
        return None
    code, path = line[:2], line[3:]
    if " -> " in path:
        path = path.split(" -> ", 1)[1]
    path = path.strip().strip('"')

    status: ScmFileStatus = "unknown"
    if code != "??":
        for char in code:
            if char in _STATUS_CODES:
                status = _STATUS_CODES[char]  # type: ignore[assignment]
                break
    return ScmFile(path=path, status=status)


class GitScmProvider(ScmProvider):
    """Run release SCM operations through ``git``.

    Check-ins and tags are pushed to the repository URL straight away so the
    remote reflects every completed release phase.
    """

    def __init__(self, executable: str = "git") -> None:
        self._executable = executable

    @property
    def provider_type(self) -> str:
        return "git"

    def validate_url(self, url: str) -> List[str]:
        messages: List[str] = []
        if not url.strip():
            messages.append("The git repository URL cannot be empty.")
        elif re.search(r"\s", url):
            messages.append(f"The git repository URL cannot contain whitespace: {url}")
        return messages

    def _remote_url(self, repository: ScmRepository) -> str:
        """Repository URL with credentials embedded for http(s) remotes."""
        if not repository.username:
            return repository.url
        parts = urlsplit(repository.url)
        if parts.scheme not in ("http", "https") or "@" in parts.netloc:
            return repository.url
        credentials = quote(repository.username, safe="")
        if repository.password:
            credentials += ":" + quote(repository.password, safe="")
        return urlunsplit(parts._replace(netloc=f"{credentials}@{parts.netloc}"))

    def _run(
        self, args: List[str], cwd: Path, masked: Optional[List[str]] = None
    ) -> subprocess.CompletedProcess:
        """Run a git command.

        Args:
            args: Arguments after the git executable
            cwd: Directory to run in
            masked: Arguments to show in logs instead of ``args``

        Raises:
            ScmError: If git cannot be launched
        """
        cmd = [self._executable, *args]
        display = " ".join([self._executable, *(masked or args)])
        logger.debug("Running: %s (cwd=%s)", display, cwd)
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=str(cwd),
            )
        except FileNotFoundError as e:
            raise ScmError(
                f"{self._executable} command not found - ensure git is installed and in PATH"
            ) from e
        except (OSError, subprocess.SubprocessError) as e:
            raise ScmError(f"Failed to run '{display}': {e}") from e

    @staticmethod
    def _output(proc: subprocess.CompletedProcess) -> str:
        return ((proc.stdout or "") + (proc.stderr or "")).strip()

    def checkout(
        self, repository: ScmRepository, fileset: ScmFileSet, tag: Optional[str] = None
    ) -> CheckOutScmResult:
        args = ["clone"]
        if tag:
            args += ["--branch", tag]
        target = str(fileset.basedir.resolve())
        masked = args + [repository.url, target]
        args = args + [self._remote_url(repository), target]

        proc = self._run(args, cwd=fileset.basedir.resolve().parent, masked=masked)
        command_line = " ".join(["git", *masked])
        if proc.returncode != 0:
            return CheckOutScmResult(
                success=False,
                command_line=command_line,
                provider_message=f"git clone failed (exit code {proc.returncode})",
                command_output=self._output(proc),
            )

        logger.info("Checked out %s into %s", tag or "default branch", fileset.basedir)
        return CheckOutScmResult(
            success=True,
            command_line=command_line,
            command_output=self._output(proc),
            checkout_dir=str(fileset.basedir),
        )

    def status(self, repository: ScmRepository, fileset: ScmFileSet) -> StatusScmResult:
        args = ["status", "--porcelain"]
        if fileset.files:
            args += ["--", *fileset.files]
        proc = self._run(args, cwd=fileset.basedir)
        command_line = " ".join(["git", *args])
        if proc.returncode != 0:
            return StatusScmResult(
                success=False,
                command_line=command_line,
                provider_message=f"git status failed (exit code {proc.returncode})",
                command_output=self._output(proc),
            )

        changed: List[ScmFile] = []
        for line in (proc.stdout or "").splitlines():
            scm_file = _parse_porcelain_line(line)
            if scm_file is not None:
                changed.append(scm_file)
        return StatusScmResult(success=True, command_line=command_line, changed_files=changed)

    def checkin(
        self, repository: ScmRepository, fileset: ScmFileSet, message: str
    ) -> CheckInScmResult:
        paths = fileset.files or ["."]
        add = self._run(["add", "--", *paths], cwd=fileset.basedir)
        if add.returncode != 0:
            return CheckInScmResult(
                success=False,
                command_line=" ".join(["git", "add", "--", *paths]),
                provider_message=f"git add failed (exit code {add.returncode})",
                command_output=self._output(add),
            )

        # Nothing staged means a previous run already committed these files.
        staged = self._run(["diff", "--cached", "--quiet"], cwd=fileset.basedir)
        if staged.returncode == 0:
            logger.info("Nothing to commit for '%s'", message)
        else:
            commit = self._run(["commit", "-m", message], cwd=fileset.basedir)
            if commit.returncode != 0:
                return CheckInScmResult(
                    success=False,
                    command_line=f"git commit -m {message!r}",
                    provider_message=f"git commit failed (exit code {commit.returncode})",
                    command_output=self._output(commit),
                )

        push_masked = ["push", repository.url, "HEAD"]
        push = self._run(
            ["push", self._remote_url(repository), "HEAD"], cwd=fileset.basedir, masked=push_masked
        )
        if push.returncode != 0:
            return CheckInScmResult(
                success=False,
                command_line=" ".join(["git", *push_masked]),
                provider_message=f"git push failed (exit code {push.returncode})",
                command_output=self._output(push),
            )

        return CheckInScmResult(
            success=True,
            command_line=f"git commit -m {message!r}",
            checked_in_files=list(paths),
        )

    def tag(
        self, repository: ScmRepository, fileset: ScmFileSet, tag: str, message: str
    ) -> TagScmResult:
        if not self.tag_exists(repository, fileset, tag):
            create = self._run(["tag", "-a", tag, "-m", message], cwd=fileset.basedir)
            if create.returncode != 0:
                return TagScmResult(
                    success=False,
                    command_line=f"git tag -a {tag}",
                    provider_message=f"git tag failed (exit code {create.returncode})",
                    command_output=self._output(create),
                )

        push_masked = ["push", repository.url, f"refs/tags/{tag}"]
        push = self._run(
            ["push", self._remote_url(repository), f"refs/tags/{tag}"],
            cwd=fileset.basedir,
            masked=push_masked,
        )
        if push.returncode != 0:
            return TagScmResult(
                success=False,
                command_line=" ".join(["git", *push_masked]),
                provider_message=f"git push of tag {tag} failed (exit code {push.returncode})",
                command_output=self._output(push),
            )

        return TagScmResult(success=True, command_line=f"git tag -a {tag}", tag=tag)

    def tag_exists(self, repository: ScmRepository, fileset: ScmFileSet, tag: str) -> bool:
        proc = self._run(["rev-parse", "-q", "--verify", f"refs/tags/{tag}"], cwd=fileset.basedir)
        return proc.returncode == 0
