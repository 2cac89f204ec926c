from __future__ import annotations

from pydantic import BaseModel, Field

from qcm.models.quiz import Choice, Question, QuestionType, QuizDefinition


class QuizUpsertRequest(BaseModel):
    title: str = ""
    questions: list[Question]
    time_limit_minutes: int | None = Field(default=None, gt=0)
    passing_score: int | None = Field(default=None, ge=0)
    max_attempts: int | None = Field(default=None, gt=0)
    randomize_questions: bool = False
    randomize_choices: bool = False

    def to_definition(self, quiz_id: str) -> QuizDefinition:
        return QuizDefinition(id=quiz_id, **self.model_dump())


class QuizResponse(BaseModel):
    quiz_id: str
    title: str
    question_count: int
    max_score: int
    time_limit_minutes: int | None
    passing_score: int | None
    max_attempts: int | None


class QuizQuestionPublic(BaseModel):
    index: int
    type: QuestionType
    text: str
    points: int
    choices: list[Choice]


def quiz_response(quiz: QuizDefinition) -> QuizResponse:
    return QuizResponse(
        quiz_id=quiz.id,
        title=quiz.title,
        question_count=quiz.question_count,
        max_score=quiz.max_score,
        time_limit_minutes=quiz.time_limit_minutes,
        passing_score=quiz.passing_score,
        max_attempts=quiz.max_attempts,
    )
