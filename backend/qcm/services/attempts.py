from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

import redis

from qcm.core.redis_client import get_redis
from qcm.models.attempt import Attempt, AttemptStatus
from qcm.models.quiz import QuizDefinition
from qcm.services import eligibility, lifecycle
from qcm.services.presentation import PresentedQuestion, present_questions
from qcm.services.store import AttemptStore, QuizStore, student_quiz_lock
from qcm.services.validation import validate_quiz


log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AttemptService:
    """Loads snapshots, runs one engine transition under the attempt lock,
    saves the result."""

    def __init__(self, r: redis.Redis | None = None):
        self.r = r if r is not None else get_redis()
        self.quizzes = QuizStore(self.r)
        self.attempts = AttemptStore(self.r)

    def put_quiz(self, quiz: QuizDefinition) -> QuizDefinition:
        validate_quiz(quiz)
        self.quizzes.save(quiz)
        log.info("put_quiz: quiz_id=%s questions=%s max_score=%s", quiz.id, quiz.question_count, quiz.max_score)
        return quiz

    def get_quiz(self, quiz_id: str) -> QuizDefinition:
        return self.quizzes.get(quiz_id)

    def get_attempt(self, attempt_id: str) -> Attempt:
        return self.attempts.get(attempt_id)

    def _sweep_stale(self, prior: list[Attempt], now: datetime) -> list[Attempt]:
        out: list[Attempt] = []
        for a in prior:
            if a.status == AttemptStatus.in_progress and lifecycle.is_expired(a, now):
                a = self._transition(a.id, lambda att, q: lifecycle.sweep_expired(att, q, now))
            out.append(a)
        return out

    def start(self, quiz_id: str, student_id: str, now: datetime | None = None) -> tuple[Attempt, bool]:
        """Returns (attempt, resumed).

        An attempt still in progress is handed back instead of opening a new
        one, so retried /start calls do not burn attempts.
        """

        now = now or _utcnow()
        quiz = self.quizzes.get(quiz_id)
        with student_quiz_lock(self.r, quiz.id, student_id):
            prior = self._sweep_stale(self.attempts.history(quiz.id, student_id), now)

            active = eligibility.active_attempt(prior, now)
            if active is not None:
                log.info("start_attempt: resuming attempt_id=%s student_id=%s", active.id, student_id)
                return active, True

            used = self.attempts.attempts_used(quiz.id, student_id)
            attempt = eligibility.start_attempt(quiz, student_id, prior, now, attempts_used=used)
            self.attempts.add(attempt)
            return attempt, False

    def _transition(self, attempt_id: str, fn: Callable[[Attempt, QuizDefinition], Attempt]) -> Attempt:
        with self.attempts.lock(attempt_id):
            attempt = self.attempts.get(attempt_id)
            quiz = self.quizzes.get(attempt.quiz_id)
            out = fn(attempt, quiz)
            if out is not attempt:
                self.attempts.save(out)
            return out

    def submit_answer(
        self,
        attempt_id: str,
        question_index: int,
        choices: Iterable[str],
        now: datetime | None = None,
    ) -> Attempt:
        now = now or _utcnow()
        return self._transition(
            attempt_id, lambda a, q: lifecycle.submit_answer(a, q, question_index, choices, now)
        )

    def complete(self, attempt_id: str, now: datetime | None = None) -> Attempt:
        now = now or _utcnow()
        return self._transition(attempt_id, lambda a, q: lifecycle.complete(a, q, now))

    def abandon(self, attempt_id: str, now: datetime | None = None) -> Attempt:
        now = now or _utcnow()
        return self._transition(attempt_id, lambda a, q: lifecycle.abandon(a, q, now))

    def sweep(self, attempt_id: str, now: datetime | None = None) -> Attempt:
        now = now or _utcnow()
        return self._transition(attempt_id, lambda a, q: lifecycle.sweep_expired(a, q, now))

    def questions(self, attempt_id: str) -> tuple[Attempt, list[PresentedQuestion]]:
        attempt = self.attempts.get(attempt_id)
        quiz = self.quizzes.get(attempt.quiz_id)
        return attempt, present_questions(quiz, seed=attempt.id)

    def summary(self, quiz_id: str, student_id: str, now: datetime | None = None) -> dict[str, Any]:
        now = now or _utcnow()
        quiz = self.quizzes.get(quiz_id)
        prior = self.attempts.history(quiz.id, student_id)
        used = self.attempts.attempts_used(quiz.id, student_id)
        active = eligibility.active_attempt(prior, now)
        return {
            "quiz_id": quiz.id,
            "student_id": str(student_id),
            "attempts_used": max(used, len(prior)),
            "max_attempts": quiz.max_attempts,
            "remaining_attempts": eligibility.remaining_attempts(quiz, prior, attempts_used=used),
            "can_start": active is not None or eligibility.can_start_attempt(quiz, prior, attempts_used=used),
            "active_attempt_id": active.id if active else None,
            "best_score": eligibility.best_score(prior),
            "max_score": quiz.max_score,
            "passed": eligibility.has_passed(prior),
        }


def get_attempt_service() -> AttemptService:
    return AttemptService()
