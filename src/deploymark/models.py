"""Result types produced by the checker and the publisher.

All models are plain dataclasses with ``to_dict`` for serialisation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass
class Marker:
    """A named tag and the commit it points at."""

    name: str
    target: str


# ------------------------------------------------------------------
# Rollup check
# ------------------------------------------------------------------


@dataclass
class DivergenceReport:
    """How far the current position has moved past a marker."""

    has_changes: bool
    base_tag: str  # empty when no marker was found
    ahead: int
    current_branch: str
    suggestions: list[str] = field(default_factory=list)

    def to_outputs(self) -> dict[str, str]:
        """Render the named step outputs consumed by the pipeline."""
        return {
            "has_changes": "true" if self.has_changes else "false",
            "base_tag": self.base_tag,
            "ahead": str(self.ahead),
            "current_branch": self.current_branch,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_changes": self.has_changes,
            "base_tag": self.base_tag,
            "ahead": self.ahead,
            "current_branch": self.current_branch,
            "suggestions": list(self.suggestions),
        }


# ------------------------------------------------------------------
# Marker publish
# ------------------------------------------------------------------


class PublishStatus(Enum):
    """Terminal state of a publish attempt."""

    ABORTED = "aborted"  # pre-condition failed, nothing was changed
    FAILED = "failed"
    SUCCESS = "success"


class PublishStep(Enum):
    """Which stage a publish failure happened in."""

    TOKEN_CHECK = "token_check"
    LOCAL_MOVE = "local_move"
    PUSH = "push"


@dataclass
class PublishResult:
    """Result of a publish attempt."""

    status: PublishStatus
    tag: str
    remote: str
    expected_base_tag: str = ""
    target_sha: str | None = None
    error: str | None = None
    failed_step: PublishStep | None = None
    steps_completed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status is PublishStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "tag": self.tag,
            "remote": self.remote,
            "expected_base_tag": self.expected_base_tag,
            "target_sha": self.target_sha,
            "error": self.error,
            "failed_step": self.failed_step.value if self.failed_step else None,
            "steps_completed": self.steps_completed,
        }
