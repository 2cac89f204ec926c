from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

import redis

from qcm.core.config import settings
from qcm.core.errors import AttemptBusy, AttemptNotFound, QuizNotFound
from qcm.core.redis_client import get_redis
from qcm.models.attempt import Attempt
from qcm.models.quiz import QuizDefinition


log = logging.getLogger(__name__)

OPEN_ATTEMPTS_KEY = "attempts:open"


def _quiz_key(quiz_id: str) -> str:
    return f"quiz:{quiz_id}"


def _attempt_key(attempt_id: str) -> str:
    return f"attempt:{attempt_id}"


def _history_key(quiz_id: str, student_id: str) -> str:
    return f"attempts:{quiz_id}:{student_id}"


def _lock_key(attempt_id: str) -> str:
    return f"locks:attempt:{attempt_id}"


class QuizStore:
    def __init__(self, r: redis.Redis | None = None):
        self.r = r if r is not None else get_redis()

    def save(self, quiz: QuizDefinition) -> None:
        self.r.set(_quiz_key(quiz.id), quiz.model_dump_json())

    def get(self, quiz_id: str) -> QuizDefinition:
        raw = self.r.get(_quiz_key(quiz_id))
        if raw is None:
            raise QuizNotFound()
        return QuizDefinition.model_validate_json(raw)


class AttemptStore:
    """Attempt snapshots as JSON, plus a per-(quiz, student) history list
    and the attempts still in progress, scored by deadline."""

    def __init__(self, r: redis.Redis | None = None):
        self.r = r if r is not None else get_redis()

    def get(self, attempt_id: str) -> Attempt:
        raw = self.r.get(_attempt_key(attempt_id))
        if raw is None:
            raise AttemptNotFound()
        return Attempt.model_validate_json(raw)

    def add(self, attempt: Attempt) -> None:
        # Snapshots carry no TTL: the history list is the attempt quota.
        pipe = self.r.pipeline(transaction=True)
        pipe.set(_attempt_key(attempt.id), attempt.model_dump_json())
        pipe.rpush(_history_key(attempt.quiz_id, attempt.student_id), attempt.id)
        if not attempt.is_terminal and attempt.expires_at is not None:
            pipe.zadd(OPEN_ATTEMPTS_KEY, {attempt.id: attempt.expires_at.timestamp()})
        pipe.execute()

    def save(self, attempt: Attempt) -> None:
        pipe = self.r.pipeline(transaction=True)
        pipe.set(_attempt_key(attempt.id), attempt.model_dump_json())
        if attempt.is_terminal:
            pipe.zrem(OPEN_ATTEMPTS_KEY, attempt.id)
        pipe.execute()

    def history(self, quiz_id: str, student_id: str) -> list[Attempt]:
        ids = self.r.lrange(_history_key(quiz_id, student_id), 0, -1) or []
        if not ids:
            return []
        rows = self.r.mget([_attempt_key(i) for i in ids])
        out: list[Attempt] = []
        for attempt_id, raw in zip(ids, rows):
            if raw is None:
                log.warning("history: missing snapshot attempt_id=%s", attempt_id)
                continue
            out.append(Attempt.model_validate_json(raw))
        return out

    def attempts_used(self, quiz_id: str, student_id: str) -> int:
        return int(self.r.llen(_history_key(quiz_id, student_id)) or 0)

    def open_attempt_ids(self, limit: int | None = None, *, due_before: datetime | None = None) -> list[str]:
        """Open attempts in deadline order; with `due_before`, only those past it."""

        if due_before is None:
            ids = self.r.zrange(OPEN_ATTEMPTS_KEY, 0, -1) or []
            return list(ids[:limit]) if limit else list(ids)
        if limit:
            return list(
                self.r.zrangebyscore(OPEN_ATTEMPTS_KEY, "-inf", due_before.timestamp(), start=0, num=int(limit))
                or []
            )
        return list(self.r.zrangebyscore(OPEN_ATTEMPTS_KEY, "-inf", due_before.timestamp()) or [])

    def forget_open(self, attempt_id: str) -> None:
        self.r.zrem(OPEN_ATTEMPTS_KEY, attempt_id)

    @contextmanager
    def lock(self, attempt_id: str) -> Iterator[None]:
        """Single writer per attempt id; fails fast instead of waiting."""

        with redis_lock(self.r, _lock_key(attempt_id), busy_id=attempt_id):
            yield


@contextmanager
def redis_lock(r: redis.Redis, key: str, *, busy_id: str) -> Iterator[None]:
    token = uuid.uuid4().hex
    acquired = r.set(key, token, nx=True, ex=max(1, int(settings.attempt_lock_ttl_seconds)))
    if not acquired:
        raise AttemptBusy(busy_id)
    try:
        yield
    finally:
        if r.get(key) == token:
            r.delete(key)


def student_quiz_lock(r: redis.Redis, quiz_id: str, student_id: str):
    """Serializes attempt creation for one (quiz, student) pair."""
    return redis_lock(r, f"locks:start:{quiz_id}:{student_id}", busy_id=f"{quiz_id}:{student_id}")
