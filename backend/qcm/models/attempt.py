from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AttemptStatus(str, enum.Enum):
    in_progress = "in_progress"
    completed = "completed"
    abandoned = "abandoned"
    expired = "expired"

    @property
    def is_terminal(self) -> bool:
        return self is not AttemptStatus.in_progress


class QuestionScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    earned_points: int = 0
    max_points: int = 0
    correct: bool = False


class Attempt(BaseModel):
    """Snapshot of one learner's run through a quiz.

    Snapshots are never mutated in place: each transition in
    `qcm.services.lifecycle` returns a new one.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    quiz_id: str
    student_id: str
    attempt_number: int = Field(ge=1)

    status: AttemptStatus = AttemptStatus.in_progress

    started_at: datetime
    expires_at: datetime | None = None
    completed_at: datetime | None = None

    answers: dict[int, frozenset[str]] = Field(default_factory=dict)
    question_scores: dict[int, QuestionScore] = Field(default_factory=dict)

    total_score: int = 0
    max_score: int = 0
    time_spent_seconds: int = 0
    passed: bool | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def score_percentage(self) -> int | None:
        if not self.is_terminal:
            return None
        from qcm.services.scoring import score_percentage

        return score_percentage(self.total_score, self.max_score)
