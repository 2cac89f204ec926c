"""Attempt state machine.

    in_progress -> completed | abandoned | expired

Every function takes the current snapshot plus a caller-supplied `now` and
returns the next snapshot; terminal snapshots have no outgoing transitions.
Callers must serialize transitions per attempt id.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Iterable

from qcm.core.errors import AttemptAlreadyTerminal, QuizMismatch, UnknownChoice, UnknownQuestion
from qcm.models.attempt import Attempt, AttemptStatus
from qcm.models.quiz import QuizDefinition
from qcm.services.scoring import evaluate_pass, score_attempt


log = logging.getLogger(__name__)


def _require_open(attempt: Attempt, quiz: QuizDefinition) -> None:
    if attempt.quiz_id != quiz.id:
        raise QuizMismatch()
    if attempt.is_terminal:
        raise AttemptAlreadyTerminal(attempt.id, attempt.status.value)


def _elapsed_seconds(attempt: Attempt, quiz: QuizDefinition, now: datetime) -> int:
    elapsed = max(0, int((now - attempt.started_at).total_seconds()))
    limit = quiz.time_limit_seconds
    if limit is not None:
        elapsed = min(elapsed, limit)
    return elapsed


def _finish(
    attempt: Attempt,
    quiz: QuizDefinition,
    *,
    status: AttemptStatus,
    completed_at: datetime,
    time_spent_seconds: int,
    force_fail: bool,
) -> Attempt:
    scored = score_attempt(quiz, attempt.answers)
    passed = False if force_fail else evaluate_pass(scored.total_score, quiz)
    return attempt.model_copy(
        update={
            "status": status,
            "completed_at": completed_at,
            "question_scores": scored.question_scores,
            "total_score": scored.total_score,
            "max_score": scored.max_score,
            "time_spent_seconds": int(time_spent_seconds),
            "passed": passed,
        }
    )


def is_expired(attempt: Attempt, now: datetime) -> bool:
    return attempt.expires_at is not None and now > attempt.expires_at


def start(
    quiz: QuizDefinition,
    *,
    student_id: str,
    attempt_number: int,
    now: datetime,
    attempt_id: str | None = None,
) -> Attempt:
    expires_at = now + timedelta(minutes=quiz.time_limit_minutes) if quiz.time_limit_minutes else None
    attempt = Attempt(
        id=attempt_id or str(uuid.uuid4()),
        quiz_id=quiz.id,
        student_id=str(student_id),
        attempt_number=int(attempt_number),
        status=AttemptStatus.in_progress,
        started_at=now,
        expires_at=expires_at,
        max_score=quiz.max_score,
    )
    log.info(
        "start_attempt: attempt_id=%s quiz_id=%s student_id=%s attempt_number=%s expires_at=%s",
        attempt.id,
        quiz.id,
        attempt.student_id,
        attempt.attempt_number,
        expires_at.isoformat() if expires_at else None,
    )
    return attempt


def expire(attempt: Attempt, quiz: QuizDefinition, now: datetime) -> Attempt:
    _require_open(attempt, quiz)

    limit = quiz.time_limit_seconds
    spent = limit if limit is not None else _elapsed_seconds(attempt, quiz, now)
    out = _finish(
        attempt,
        quiz,
        status=AttemptStatus.expired,
        completed_at=attempt.expires_at or now,
        time_spent_seconds=spent,
        force_fail=True,
    )
    log.info(
        "expire_attempt: attempt_id=%s total_score=%s answered=%s",
        out.id,
        out.total_score,
        len(out.answers),
    )
    return out


def submit_answer(
    attempt: Attempt,
    quiz: QuizDefinition,
    question_index: int,
    choices: Iterable[str],
    now: datetime,
) -> Attempt:
    """Record (or overwrite) the answer to one question.

    Past the deadline the answer is discarded and the expired snapshot is
    returned instead.
    """

    _require_open(attempt, quiz)

    if question_index < 0 or question_index >= quiz.question_count:
        raise UnknownQuestion(question_index, quiz.question_count)

    if is_expired(attempt, now):
        log.warning(
            "submit_answer: deadline passed, answer discarded attempt_id=%s question_index=%s",
            attempt.id,
            question_index,
        )
        return expire(attempt, quiz, now)

    submitted = frozenset(str(c) for c in choices)
    unknown = sorted(submitted - quiz.questions[question_index].choice_ids)
    if unknown:
        raise UnknownChoice(question_index, unknown)

    answers = dict(attempt.answers)
    answers[int(question_index)] = submitted
    return attempt.model_copy(update={"answers": answers})


def complete(attempt: Attempt, quiz: QuizDefinition, now: datetime) -> Attempt:
    _require_open(attempt, quiz)

    if is_expired(attempt, now):
        return expire(attempt, quiz, now)

    out = _finish(
        attempt,
        quiz,
        status=AttemptStatus.completed,
        completed_at=now,
        time_spent_seconds=_elapsed_seconds(attempt, quiz, now),
        force_fail=False,
    )
    log.info(
        "complete_attempt: attempt_id=%s total_score=%s max_score=%s passed=%s",
        out.id,
        out.total_score,
        out.max_score,
        out.passed,
    )
    return out


def abandon(attempt: Attempt, quiz: QuizDefinition, now: datetime) -> Attempt:
    _require_open(attempt, quiz)

    if is_expired(attempt, now):
        return expire(attempt, quiz, now)

    # An abandoned attempt never counts as a pass, whatever the partial score.
    out = _finish(
        attempt,
        quiz,
        status=AttemptStatus.abandoned,
        completed_at=now,
        time_spent_seconds=_elapsed_seconds(attempt, quiz, now),
        force_fail=True,
    )
    log.info("abandon_attempt: attempt_id=%s total_score=%s", out.id, out.total_score)
    return out


def sweep_expired(attempt: Attempt, quiz: QuizDefinition, now: datetime) -> Attempt:
    """Expire the attempt if its deadline has passed; otherwise return it unchanged."""

    if attempt.quiz_id != quiz.id:
        raise QuizMismatch()
    if attempt.is_terminal or not is_expired(attempt, now):
        return attempt
    return expire(attempt, quiz, now)
