"""Step-by-step story analysis sessions with revisable, branching thoughts."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

import pydantic
from pydantic import Field, model_validator

from storybook.config import get_logger
from storybook.exceptions import ThoughtSequenceError
from storybook.models import CamelModel

logger = get_logger(__name__)

MAIN_BRANCH = "main"


class ThoughtContext(CamelModel):
    """The part of the story a thought is about."""

    scene: str | None = None
    theme: list[str] = Field(default_factory=list)
    characters: list[str] = Field(default_factory=list)
    plot_points: list[str] = Field(default_factory=list)


class StoryAnalysisThought(CamelModel):
    """One numbered step in a sequential analysis."""

    thought: str = Field(..., min_length=1)
    thought_number: int = Field(..., ge=1)
    total_thoughts: int = Field(..., ge=1)
    next_thought_needed: bool
    is_revision: bool = False
    revises_thought: int | None = Field(default=None, ge=1)
    narrative_context: ThoughtContext | None = None

    @model_validator(mode="after")
    def check_revision(self) -> StoryAnalysisThought:
        if not self.thought.strip():
            raise ValueError("Thought must be a non-empty string")
        if self.is_revision and self.revises_thought is None:
            raise ValueError("Revision thoughts must specify which thought they revise")
        if self.revises_thought is not None and self.revises_thought >= self.thought_number:
            raise ValueError("Cannot revise a future thought")
        return self


class ThinkingSession:
    """Thought history for one caller, split into named branches.

    The session is owned by whoever drives the analysis; nothing here is
    process-global. Every mutation happens under a lock so concurrent tool
    calls sharing a session cannot interleave an append with its validation.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._branches: dict[str, list[StoryAnalysisThought]] = {MAIN_BRANCH: []}
        self._current = MAIN_BRANCH
        self._revision_count = 0
        self._merge_count = 0

    @property
    def current_branch(self) -> str:
        return self._current

    def process_thought(
        self, thought: StoryAnalysisThought | Mapping[str, Any]
    ) -> StoryAnalysisThought:
        """Validate a thought and append it to the current branch.

        A revision forks a new branch holding the thoughts before the revised
        one followed by the revision, and makes it current.

        Raises:
            ThoughtSequenceError: If the thought is malformed or out of order
        """
        step = _coerce(thought)
        if step.total_thoughts < step.thought_number:
            step = step.model_copy(update={"total_thoughts": step.thought_number})

        with self._lock:
            history = self._branches[self._current]
            if step.is_revision and step.revises_thought is not None:
                if not any(t.thought_number == step.revises_thought for t in history):
                    raise ThoughtSequenceError(
                        f"Thought {step.revises_thought} does not exist on branch "
                        f"'{self._current}'",
                        hint="Revise a thought that was already recorded",
                    )
                self._revision_count += 1
                branch_id = f"revision-{self._revision_count}"
                self._branches[branch_id] = [
                    t for t in history if t.thought_number < step.revises_thought
                ]
                self._branches[branch_id].append(step)
                self._current = branch_id
                logger.debug(
                    "Revision branch created",
                    branch=branch_id,
                    revises=step.revises_thought,
                )
                return step

            if history and step.thought_number <= history[-1].thought_number:
                raise ThoughtSequenceError(
                    f"Thought number {step.thought_number} must follow "
                    f"{history[-1].thought_number} on branch '{self._current}'",
                    hint="Number thoughts in increasing order",
                )
            history.append(step)
            logger.debug(
                "Thought recorded",
                branch=self._current,
                thought_number=step.thought_number,
            )
            return step

    def branches(self) -> list[str]:
        with self._lock:
            return list(self._branches)

    def switch_branch(self, branch_id: str) -> None:
        """Make another branch current.

        Raises:
            ThoughtSequenceError: If the branch does not exist
        """
        with self._lock:
            if branch_id not in self._branches:
                raise ThoughtSequenceError(
                    f"Unknown branch '{branch_id}'",
                    details={"branches": ", ".join(self._branches)},
                )
            self._current = branch_id

    def history(self, branch_id: str | None = None) -> list[StoryAnalysisThought]:
        """Thoughts on a branch, the current one by default."""
        with self._lock:
            branch = branch_id or self._current
            if branch not in self._branches:
                raise ThoughtSequenceError(f"Unknown branch '{branch}'")
            return list(self._branches[branch])

    def merge_branches(self, source: str, target: str, at_thought: int) -> str:
        """Combine two branches into a new one and return its id.

        The merged branch keeps ``target``'s thoughts numbered below
        ``at_thought`` followed by ``source``'s thoughts from ``at_thought`` on.
        """
        if at_thought < 1:
            raise ThoughtSequenceError("Merge point must be a positive thought number")
        with self._lock:
            missing = [b for b in (source, target) if b not in self._branches]
            if missing:
                raise ThoughtSequenceError(
                    f"Unknown branch '{missing[0]}'",
                    details={"branches": ", ".join(self._branches)},
                )
            merged = [
                t for t in self._branches[target] if t.thought_number < at_thought
            ] + [t for t in self._branches[source] if t.thought_number >= at_thought]
            self._merge_count += 1
            branch_id = f"merge-{self._merge_count}"
            self._branches[branch_id] = merged
            logger.debug(
                "Branches merged",
                source=source,
                target=target,
                branch=branch_id,
                thoughts=len(merged),
            )
            return branch_id

    def status(self) -> dict[str, Any]:
        """Snapshot of the session for tool responses."""
        with self._lock:
            history = self._branches[self._current]
            last = history[-1] if history else None
            return {
                "thoughtNumber": last.thought_number if last else 0,
                "totalThoughts": last.total_thoughts if last else 0,
                "nextThoughtNeeded": last.next_thought_needed if last else True,
                "currentBranch": self._current,
                "branches": list(self._branches),
                "thoughtHistoryLength": len(history),
            }


def _coerce(thought: StoryAnalysisThought | Mapping[str, Any]) -> StoryAnalysisThought:
    if isinstance(thought, StoryAnalysisThought):
        return thought
    try:
        return StoryAnalysisThought.model_validate(dict(thought))
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        raise ThoughtSequenceError(
            f"Invalid thought: {first['msg']}",
            details={
                ".".join(str(p) for p in err["loc"]) or "thought": err["msg"]
                for err in e.errors()
            },
        ) from e
