"""Thin async wrapper around the git command line.

Every git invocation made by deploymark goes through ``GitRepository._run``.
Commands are executed as argument vectors, never through a shell, so tag and
remote names are passed to git verbatim.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from deploymark.constants import GIT_COMMAND_TIMEOUT, GIT_STDERR_LIMIT
from deploymark.errors import CurrentBranchError, GitCommandError
from deploymark.logging import get_logger

log = get_logger("deploymark.git")

DETACHED_HEAD = "HEAD"


@dataclass
class GitResult:
    """Outcome of a single git invocation."""

    command: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class GitRepository:
    """A git working tree addressed by path."""

    def __init__(
        self,
        path: str = ".",
        git_binary: str = "git",
        timeout: int = GIT_COMMAND_TIMEOUT,
    ) -> None:
        self._path = path
        self._git = git_binary
        self._timeout = timeout

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def current_branch(self) -> str:
        """Return the checked-out branch name, or ``HEAD`` when detached."""
        try:
            result = await self._run("rev-parse", "--abbrev-ref", "HEAD")
        except GitCommandError as exc:
            raise CurrentBranchError(
                exc.command, exc.returncode, exc.stderr, f"cannot determine current branch: {exc}"
            ) from exc
        branch = result.stdout.strip()
        if not branch:
            raise CurrentBranchError(
                result.command, result.returncode, message="git reported an empty branch name"
            )
        return branch

    async def resolve_tag(self, tag: str) -> str | None:
        """Resolve *tag* to a commit sha.

        Returns None when the tag does not exist, including names that are
        not valid tag names (``last-deploy~1`` is a revision, not a tag).
        Any other failure, such as running outside a repository, raises
        ``GitCommandError``.
        """
        name_check = await self._run("check-ref-format", f"refs/tags/{tag}", check=False)
        if not name_check.ok:
            log.debug("tag_name_invalid", tag=tag)
            return None

        result = await self._run(
            "rev-parse", "--verify", "--quiet", f"refs/tags/{tag}^{{commit}}", check=False
        )
        if result.ok:
            return result.stdout.strip()
        if result.returncode == 1 and not result.stderr.strip():
            return None
        raise GitCommandError(result.command, result.returncode, _trim(result.stderr))

    async def count_ahead(self, base: str, head: str = "HEAD") -> int:
        """Count commits reachable from *head* but not from *base*."""
        result = await self._run("rev-list", "--count", f"{base}..{head}")
        raw = result.stdout.strip()
        try:
            count = int(raw)
        except ValueError:
            raise GitCommandError(
                result.command, result.returncode, message=f"unexpected rev-list output: {raw!r}"
            ) from None
        return count

    async def list_tags(self) -> list[str]:
        result = await self._run("for-each-ref", "--format=%(refname:short)", "refs/tags")
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def force_tag(self, tag: str, target: str = "HEAD") -> None:
        """Create *tag* at *target*, moving it if it already exists."""
        await self._run("tag", "--force", tag, target)

    async def force_push_tag(self, remote: str, tag: str) -> None:
        """Publish *tag* to *remote*, overwriting the remote's copy."""
        refspec = f"refs/tags/{tag}:refs/tags/{tag}"
        await self._run("push", "--force", remote, refspec)

    # ------------------------------------------------------------------
    # Subprocess helper
    # ------------------------------------------------------------------

    async def _run(self, *args: str, check: bool = True) -> GitResult:
        """Run ``git <args>`` in the working tree and capture its output."""
        command = [self._git, *args]
        log.debug("git_cmd", cmd=command, cwd=self._path)
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self._path,
            )
        except OSError as exc:
            raise GitCommandError(command, None, message=f"cannot run {self._git}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except TimeoutError:
            proc.kill()
            await proc.wait()
            raise GitCommandError(
                command, None, message=f"{' '.join(command)} timed out after {self._timeout}s"
            ) from None

        result = GitResult(
            command=command,
            returncode=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )
        if check and not result.ok:
            log.warning(
                "git_cmd_failed",
                cmd=command,
                returncode=result.returncode,
                stderr=_trim(result.stderr),
            )
            raise GitCommandError(command, result.returncode, _trim(result.stderr))
        return result


def _trim(text: str) -> str:
    return text.strip()[:GIT_STDERR_LIMIT]
