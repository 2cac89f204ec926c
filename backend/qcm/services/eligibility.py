from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from qcm.core.errors import AttemptNotAllowed
from qcm.models.attempt import Attempt, AttemptStatus
from qcm.models.quiz import QuizDefinition
from qcm.services import lifecycle


log = logging.getLogger(__name__)


def _used(prior_attempts: Sequence[Attempt], attempts_used: int | None) -> int:
    # A store may know of attempts whose snapshots it can no longer load.
    return max(len(prior_attempts), int(attempts_used or 0))


def next_attempt_number(
    quiz: QuizDefinition,
    prior_attempts: Sequence[Attempt],
    *,
    attempts_used: int | None = None,
) -> int:
    used = _used(prior_attempts, attempts_used)
    n = used + 1
    if quiz.max_attempts is not None and n > quiz.max_attempts:
        log.warning(
            "next_attempt_number: refused quiz_id=%s attempts_used=%s max_attempts=%s",
            quiz.id,
            used,
            quiz.max_attempts,
        )
        raise AttemptNotAllowed(max_attempts=quiz.max_attempts, attempts_used=used)
    return n


def can_start_attempt(
    quiz: QuizDefinition,
    prior_attempts: Sequence[Attempt],
    *,
    attempts_used: int | None = None,
) -> bool:
    return quiz.max_attempts is None or _used(prior_attempts, attempts_used) < quiz.max_attempts


def remaining_attempts(
    quiz: QuizDefinition,
    prior_attempts: Sequence[Attempt],
    *,
    attempts_used: int | None = None,
) -> int | None:
    """None means unbounded."""
    if quiz.max_attempts is None:
        return None
    return max(0, quiz.max_attempts - _used(prior_attempts, attempts_used))


def start_attempt(
    quiz: QuizDefinition,
    student_id: str,
    prior_attempts: Sequence[Attempt],
    now: datetime,
    *,
    attempt_id: str | None = None,
    attempts_used: int | None = None,
) -> Attempt:
    number = next_attempt_number(quiz, prior_attempts, attempts_used=attempts_used)
    return lifecycle.start(quiz, student_id=student_id, attempt_number=number, now=now, attempt_id=attempt_id)


def active_attempt(prior_attempts: Sequence[Attempt], now: datetime) -> Attempt | None:
    """The in-progress attempt still inside its time window, if any."""

    open_attempts = [
        a
        for a in prior_attempts
        if a.status == AttemptStatus.in_progress and not lifecycle.is_expired(a, now)
    ]
    if not open_attempts:
        return None
    return max(open_attempts, key=lambda a: a.attempt_number)


def best_score(prior_attempts: Sequence[Attempt]) -> int | None:
    scores = [a.total_score for a in prior_attempts if a.status == AttemptStatus.completed]
    return max(scores) if scores else None


def has_passed(prior_attempts: Sequence[Attempt]) -> bool:
    return any(a.passed is True for a in prior_attempts)
