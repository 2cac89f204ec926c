from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field


class QuestionType(str, enum.Enum):
    single_choice = "single_choice"
    multiple_choice = "multiple_choice"


class Choice(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str = ""


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: QuestionType
    text: str = ""
    choices: tuple[Choice, ...] = ()
    correct_answers: frozenset[str] = frozenset()
    points: int = 1

    @property
    def choice_ids(self) -> frozenset[str]:
        return frozenset(c.id for c in self.choices)


class QuizDefinition(BaseModel):
    """Immutable description of a QCM.

    Structural types are enforced on construction; semantic rules (non-empty,
    positive points, consistent correct answers) are checked by
    `qcm.services.validation.validate_quiz` so the failing question index can
    be reported.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    questions: tuple[Question, ...] = ()

    time_limit_minutes: int | None = Field(default=None, gt=0)
    passing_score: int | None = Field(default=None, ge=0)
    max_attempts: int | None = Field(default=None, gt=0)

    randomize_questions: bool = False
    randomize_choices: bool = False

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def max_score(self) -> int:
        return sum(int(q.points) for q in self.questions)

    @property
    def time_limit_seconds(self) -> int | None:
        return self.time_limit_minutes * 60 if self.time_limit_minutes else None
