"""Rollup checker: has anything changed since the marker was last moved?"""

from __future__ import annotations

from deploymark.constants import DEFAULT_TAG, SUGGESTION_LIMIT, SUGGESTION_MAX_DISTANCE
from deploymark.errors import GitCommandError, InvalidTagError
from deploymark.git import DETACHED_HEAD, GitRepository
from deploymark.logging import get_logger
from deploymark.models import DivergenceReport, Marker
from deploymark.suggest import similar_names

log = get_logger("deploymark.checker")


class RollupChecker:
    """Compares ``HEAD`` against a marker tag.

    Typical flow:
    1. ``check(tag)`` reports whether ``HEAD`` moved past the marker
    2. The pipeline deploys when ``has_changes`` is true
    3. ``MarkerPublisher.publish(tag, expected_base_tag=report.base_tag)``
    """

    def __init__(
        self,
        repo: GitRepository,
        *,
        ref_name: str | None = None,
        max_distance: int = SUGGESTION_MAX_DISTANCE,
        max_suggestions: int = SUGGESTION_LIMIT,
    ) -> None:
        self._repo = repo
        self._ref_name = ref_name
        self._max_distance = max_distance
        self._max_suggestions = max_suggestions

    async def check(
        self,
        tag: str = DEFAULT_TAG,
        initial_as_changes: bool = True,
    ) -> DivergenceReport:
        """Build a ``DivergenceReport`` for *tag*.

        A missing marker is not an error: the report then carries an empty
        ``base_tag`` and ``has_changes`` follows *initial_as_changes*.

        Raises:
            InvalidTagError: *tag* is empty.
            GitCommandError: the branch could not be determined or git failed
                for a reason other than the tag being absent.
        """
        if not tag:
            raise InvalidTagError("marker tag name must not be empty")

        branch = await self._current_branch()
        target = await self._repo.resolve_tag(tag)

        if target is None:
            suggestions = await self._suggest(tag)
            log.info(
                "marker_absent",
                tag=tag,
                initial_as_changes=initial_as_changes,
                branch=branch,
            )
            return DivergenceReport(
                has_changes=initial_as_changes,
                base_tag="",
                ahead=0,
                current_branch=branch,
                suggestions=suggestions,
            )

        marker = Marker(name=tag, target=target)
        ahead = await self._repo.count_ahead(marker.target)
        log.info(
            "marker_resolved",
            tag=marker.name,
            target=marker.target[:12],
            ahead=ahead,
            branch=branch,
        )
        return DivergenceReport(
            has_changes=ahead > 0,
            base_tag=marker.name,
            ahead=ahead,
            current_branch=branch,
        )

    async def _current_branch(self) -> str:
        branch = await self._repo.current_branch()
        if branch == DETACHED_HEAD and self._ref_name:
            return self._ref_name
        return branch

    async def _suggest(self, tag: str) -> list[str]:
        """Look for existing tags that look like a typo of *tag*."""
        try:
            existing = await self._repo.list_tags()
        except GitCommandError as exc:
            log.warning("marker_suggestions_unavailable", tag=tag, error=str(exc))
            return []

        suggestions = similar_names(
            tag, existing, max_distance=self._max_distance, limit=self._max_suggestions
        )
        for name in suggestions:
            log.warning(
                "marker_suggestion",
                requested=tag,
                found=name,
                hint=f"tag '{tag}' does not exist; did you mean '{name}'?",
            )
        return suggestions
