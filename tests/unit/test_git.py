"""Tests for deploymark.git.GitRepository command handling."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from deploymark.errors import CurrentBranchError, GitCommandError
from deploymark.git import GitRepository, GitResult

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _result(returncode: int = 0, stdout: str = "", stderr: str = "") -> GitResult:
    return GitResult(command=["git"], returncode=returncode, stdout=stdout, stderr=stderr)


def _make_proc(returncode: int = 0, stdout: bytes = b"", stderr: bytes = b"") -> MagicMock:
    """Return a mock asyncio Process."""
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.wait = AsyncMock(return_value=returncode)
    return proc


# ---------------------------------------------------------------------------
# _run
# ---------------------------------------------------------------------------


class TestRun:
    """Tests for the subprocess helper."""

    @pytest.mark.asyncio
    async def test_runs_argument_vector_in_repo(self) -> None:
        repo = GitRepository(path="/work", git_binary="/usr/bin/git")
        proc = _make_proc(stdout=b"main\n")

        with patch(
            "deploymark.git.asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            return_value=proc,
        ) as mock_exec:
            result = await repo._run("rev-parse", "--abbrev-ref", "HEAD")

        args, kwargs = mock_exec.call_args
        assert args == ("/usr/bin/git", "rev-parse", "--abbrev-ref", "HEAD")
        assert kwargs["cwd"] == "/work"
        assert result.ok
        assert result.stdout == "main\n"

    @pytest.mark.asyncio
    async def test_failure_raises_with_stderr(self) -> None:
        repo = GitRepository()
        proc = _make_proc(returncode=128, stderr=b"fatal: not a git repository\n")

        with patch(
            "deploymark.git.asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            return_value=proc,
        ):
            with pytest.raises(GitCommandError) as exc_info:
                await repo._run("status")

        assert exc_info.value.returncode == 128
        assert exc_info.value.stderr == "fatal: not a git repository"
        assert "not a git repository" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_failure_without_check_returns_result(self) -> None:
        repo = GitRepository()
        proc = _make_proc(returncode=1)

        with patch(
            "deploymark.git.asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            return_value=proc,
        ):
            result = await repo._run("rev-parse", "--verify", check=False)

        assert result.returncode == 1
        assert not result.ok

    @pytest.mark.asyncio
    async def test_missing_binary(self) -> None:
        repo = GitRepository(git_binary="no-such-git")

        with patch(
            "deploymark.git.asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            side_effect=FileNotFoundError("no-such-git"),
        ):
            with pytest.raises(GitCommandError) as exc_info:
                await repo._run("status")

        assert exc_info.value.returncode is None
        assert "no-such-git" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self) -> None:
        repo = GitRepository(timeout=1)
        proc = _make_proc()
        proc.communicate = AsyncMock(side_effect=TimeoutError)

        with patch(
            "deploymark.git.asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            return_value=proc,
        ):
            with pytest.raises(GitCommandError, match="timed out"):
                await repo._run("push", "origin")

        proc.kill.assert_called_once()


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestQueries:
    """Tests for output parsing of query commands."""

    @pytest.mark.asyncio
    async def test_current_branch(self) -> None:
        repo = GitRepository()
        with patch.object(repo, "_run", new_callable=AsyncMock, return_value=_result(stdout="main\n")):
            assert await repo.current_branch() == "main"

    @pytest.mark.asyncio
    async def test_current_branch_failure(self) -> None:
        repo = GitRepository()
        with patch.object(
            repo,
            "_run",
            new_callable=AsyncMock,
            side_effect=GitCommandError(["git", "rev-parse"], 128, "fatal"),
        ):
            with pytest.raises(CurrentBranchError, match="cannot determine current branch"):
                await repo.current_branch()

    @pytest.mark.asyncio
    async def test_current_branch_empty_output(self) -> None:
        repo = GitRepository()
        with patch.object(repo, "_run", new_callable=AsyncMock, return_value=_result(stdout="\n")):
            with pytest.raises(CurrentBranchError):
                await repo.current_branch()

    @pytest.mark.asyncio
    async def test_resolve_tag_found(self) -> None:
        repo = GitRepository()
        with patch.object(
            repo,
            "_run",
            new_callable=AsyncMock,
            side_effect=[_result(), _result(stdout="abc123\n")],
        ) as mock_run:
            assert await repo.resolve_tag("last-deploy") == "abc123"

        assert mock_run.await_args_list[0].args == ("check-ref-format", "refs/tags/last-deploy")
        mock_run.assert_awaited_with(
            "rev-parse", "--verify", "--quiet", "refs/tags/last-deploy^{commit}", check=False
        )

    @pytest.mark.asyncio
    async def test_resolve_tag_absent(self) -> None:
        repo = GitRepository()
        with patch.object(
            repo, "_run", new_callable=AsyncMock, side_effect=[_result(), _result(returncode=1)]
        ):
            assert await repo.resolve_tag("last-deploy") is None

    @pytest.mark.asyncio
    async def test_resolve_tag_revision_expression_is_absent(self) -> None:
        """Test that a name like last-deploy~1 is never resolved as a revision."""
        repo = GitRepository()
        with patch.object(
            repo, "_run", new_callable=AsyncMock, return_value=_result(returncode=1)
        ) as mock_run:
            assert await repo.resolve_tag("last-deploy~1") is None

        mock_run.assert_awaited_once_with(
            "check-ref-format", "refs/tags/last-deploy~1", check=False
        )

    @pytest.mark.asyncio
    async def test_resolve_tag_backend_error(self) -> None:
        repo = GitRepository()
        with patch.object(
            repo,
            "_run",
            new_callable=AsyncMock,
            side_effect=[
                _result(),
                _result(returncode=128, stderr="fatal: not a git repository"),
            ],
        ):
            with pytest.raises(GitCommandError, match="not a git repository"):
                await repo.resolve_tag("last-deploy")

    @pytest.mark.asyncio
    async def test_count_ahead(self) -> None:
        repo = GitRepository()
        with patch.object(
            repo, "_run", new_callable=AsyncMock, return_value=_result(stdout="7\n")
        ) as mock_run:
            assert await repo.count_ahead("abc123") == 7

        mock_run.assert_awaited_once_with("rev-list", "--count", "abc123..HEAD")

    @pytest.mark.asyncio
    async def test_count_ahead_garbage(self) -> None:
        repo = GitRepository()
        with patch.object(repo, "_run", new_callable=AsyncMock, return_value=_result(stdout="x\n")):
            with pytest.raises(GitCommandError, match="unexpected rev-list output"):
                await repo.count_ahead("abc123")

    @pytest.mark.asyncio
    async def test_list_tags(self) -> None:
        repo = GitRepository()
        output = "last-deploy\nv1.0.0\n\n"
        with patch.object(repo, "_run", new_callable=AsyncMock, return_value=_result(stdout=output)):
            assert await repo.list_tags() == ["last-deploy", "v1.0.0"]


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


class TestMutations:
    """Tests for the commands that move and publish tags."""

    @pytest.mark.asyncio
    async def test_force_tag(self) -> None:
        repo = GitRepository()
        with patch.object(repo, "_run", new_callable=AsyncMock, return_value=_result()) as mock_run:
            await repo.force_tag("last-deploy")
        mock_run.assert_awaited_once_with("tag", "--force", "last-deploy", "HEAD")

    @pytest.mark.asyncio
    async def test_force_push_tag(self) -> None:
        repo = GitRepository()
        with patch.object(repo, "_run", new_callable=AsyncMock, return_value=_result()) as mock_run:
            await repo.force_push_tag("origin", "last-deploy")
        mock_run.assert_awaited_once_with(
            "push", "--force", "origin", "refs/tags/last-deploy:refs/tags/last-deploy"
        )
