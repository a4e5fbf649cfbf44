"""Marker publisher: move the marker tag to ``HEAD`` and push it.

Lifecycle:
1. Compare the safety token (the ``base_tag`` an earlier check reported)
   against the tag about to be moved; abort on mismatch
2. Force-move the tag to ``HEAD`` locally
3. Force-push the tag to the remote

There is no lock around the marker. Another run may move it between the
check and the publish; the last push wins.
"""

from __future__ import annotations

from deploymark.constants import DEFAULT_REMOTE, DEFAULT_TAG
from deploymark.errors import GitCommandError
from deploymark.git import GitRepository
from deploymark.logging import get_logger
from deploymark.models import PublishResult, PublishStatus, PublishStep

log = get_logger("deploymark.publisher")


class MarkerPublisher:
    """Relocates a marker tag to the current position and publishes it."""

    def __init__(self, repo: GitRepository) -> None:
        self._repo = repo

    async def publish(
        self,
        tag: str = DEFAULT_TAG,
        remote: str = DEFAULT_REMOTE,
        expected_base_tag: str = "",
    ) -> PublishResult:
        """Move *tag* to ``HEAD`` and push it to *remote*.

        Returns a ``PublishResult``; failures are reported through its
        ``status``/``error`` fields rather than raised. No step is retried.
        """
        result = PublishResult(
            status=PublishStatus.FAILED,
            tag=tag,
            remote=remote,
            expected_base_tag=expected_base_tag,
        )

        # Step 1: safety token
        error = self._precondition_error(tag, remote, expected_base_tag)
        if error is not None:
            result.status = PublishStatus.ABORTED
            result.error = error
            result.failed_step = PublishStep.TOKEN_CHECK
            log.error("publish_aborted", tag=tag, expected_base_tag=expected_base_tag, error=error)
            return result
        result.steps_completed.append(PublishStep.TOKEN_CHECK.value)

        # Step 2: local move
        try:
            await self._repo.force_tag(tag, "HEAD")
            result.target_sha = await self._repo.resolve_tag(tag)
        except GitCommandError as exc:
            result.error = f"failed to move tag '{tag}' to HEAD: {exc}"
            result.failed_step = PublishStep.LOCAL_MOVE
            log.error("publish_local_move_failed", tag=tag, error=str(exc))
            return result
        if result.target_sha is None:
            result.error = f"tag '{tag}' does not resolve to a commit after moving it to HEAD"
            result.failed_step = PublishStep.LOCAL_MOVE
            log.error("publish_local_move_failed", tag=tag, error=result.error)
            return result
        result.steps_completed.append(PublishStep.LOCAL_MOVE.value)
        log.info("marker_moved", tag=tag, target=result.target_sha[:12])

        # Step 3: push
        try:
            await self._repo.force_push_tag(remote, tag)
        except GitCommandError as exc:
            result.error = f"failed to push tag '{tag}' to remote '{remote}': {exc}"
            result.failed_step = PublishStep.PUSH
            log.error("publish_push_failed", tag=tag, remote=remote, error=str(exc))
            return result
        result.steps_completed.append(PublishStep.PUSH.value)

        result.status = PublishStatus.SUCCESS
        log.info("marker_published", tag=tag, remote=remote, target=result.target_sha[:12])
        return result

    @staticmethod
    def _precondition_error(tag: str, remote: str, expected_base_tag: str) -> str | None:
        if not tag:
            return "marker tag name must not be empty"
        if not remote:
            return "remote name must not be empty"
        if expected_base_tag and expected_base_tag != tag:
            return (
                f"safety check failed: expected base tag '{expected_base_tag}' "
                f"but was asked to publish tag '{tag}'; refusing to move a "
                "different marker than the one that was checked"
            )
        return None
