from __future__ import annotations

from pydantic import BaseModel

from qcm.models.attempt import Attempt
from qcm.schemas.quiz import QuizQuestionPublic


class AttemptStartRequest(BaseModel):
    student_id: str


class AnswerRequest(BaseModel):
    choices: list[str]


class QuestionScoreOut(BaseModel):
    question_index: int
    earned_points: int
    max_points: int
    correct: bool


class AttemptOut(BaseModel):
    attempt_id: str
    quiz_id: str
    student_id: str
    attempt_no: int
    status: str
    started_at: str
    expires_at: str | None
    completed_at: str | None
    answers: dict[int, list[str]]
    question_scores: list[QuestionScoreOut]
    total_score: int
    max_score: int
    score_percentage: int | None
    time_spent_seconds: int
    passed: bool | None


class AttemptStartResponse(BaseModel):
    resumed: bool
    attempt: AttemptOut


class AnswerResponse(BaseModel):
    answer_recorded: bool
    message: str | None = None
    attempt: AttemptOut


class AttemptQuestionsResponse(BaseModel):
    attempt_id: str
    expires_at: str | None
    questions: list[QuizQuestionPublic]


class AttemptSummaryResponse(BaseModel):
    quiz_id: str
    student_id: str
    attempts_used: int
    max_attempts: int | None
    remaining_attempts: int | None
    can_start: bool
    active_attempt_id: str | None
    best_score: int | None
    max_score: int
    passed: bool


def attempt_out(attempt: Attempt) -> AttemptOut:
    return AttemptOut(
        attempt_id=attempt.id,
        quiz_id=attempt.quiz_id,
        student_id=attempt.student_id,
        attempt_no=attempt.attempt_number,
        status=attempt.status.value,
        started_at=attempt.started_at.isoformat(),
        expires_at=attempt.expires_at.isoformat() if attempt.expires_at else None,
        completed_at=attempt.completed_at.isoformat() if attempt.completed_at else None,
        answers={i: sorted(c) for i, c in sorted(attempt.answers.items())},
        question_scores=[
            QuestionScoreOut(
                question_index=i,
                earned_points=s.earned_points,
                max_points=s.max_points,
                correct=s.correct,
            )
            for i, s in sorted(attempt.question_scores.items())
        ],
        total_score=attempt.total_score,
        max_score=attempt.max_score,
        score_percentage=attempt.score_percentage,
        time_spent_seconds=attempt.time_spent_seconds,
        passed=attempt.passed,
    )
