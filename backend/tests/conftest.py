import sys
import time
from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

backend_dir = Path(__file__).resolve().parents[1]
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from qcm.main import create_app
from qcm.models.quiz import QuizDefinition

from factories import multi, single


class _MemoryRedis:
    def __init__(self):
        self._data: dict[str, tuple[object, float | None]] = {}

    def flushall(self):
        self._data.clear()
        return True

    def ping(self):
        return True

    def _now(self) -> float:
        return time.time()

    def _get_entry(self, key: str):
        v = self._data.get(key)
        if not v:
            return None
        value, exp = v
        if exp is not None and exp <= self._now():
            self._data.pop(key, None)
            return None
        return value, exp

    def get(self, key: str):
        entry = self._get_entry(key)
        return entry[0] if entry else None

    def mget(self, keys):
        return [self.get(k) for k in keys]

    def set(self, key: str, value: str, ex: int | None = None, nx: bool = False):
        if nx and self._get_entry(key) is not None:
            return None
        exp = (self._now() + int(ex)) if ex else None
        self._data[key] = (value, exp)
        return True

    def delete(self, key: str):
        self._data.pop(key, None)
        return 1

    def rpush(self, key: str, *values):
        entry = self._get_entry(key)
        items = list(entry[0]) if entry else []
        items.extend(values)
        self._data[key] = (items, entry[1] if entry else None)
        return len(items)

    def lrange(self, key: str, start: int, end: int):
        entry = self._get_entry(key)
        items = list(entry[0]) if entry else []
        return items[start:] if end == -1 else items[start : end + 1]

    def llen(self, key: str):
        entry = self._get_entry(key)
        return len(entry[0]) if entry else 0

    def zadd(self, key: str, mapping: dict):
        entry = self._get_entry(key)
        members = dict(entry[0]) if entry else {}
        added = sum(1 for m in mapping if m not in members)
        members.update({m: float(s) for m, s in mapping.items()})
        self._data[key] = (members, None)
        return added

    def zrem(self, key: str, *values):
        entry = self._get_entry(key)
        if not entry:
            return 0
        members = dict(entry[0])
        removed = sum(1 for v in values if members.pop(v, None) is not None)
        self._data[key] = (members, None)
        return removed

    def _zsorted(self, key: str):
        entry = self._get_entry(key)
        members = entry[0] if entry else {}
        return sorted(members.items(), key=lambda kv: (kv[1], kv[0]))

    def zrange(self, key: str, start: int, end: int):
        names = [m for m, _ in self._zsorted(key)]
        return names[start:] if end == -1 else names[start : end + 1]

    def zrangebyscore(self, key: str, min, max, start=None, num=None):
        lo, hi = float(min), float(max)
        names = [m for m, s in self._zsorted(key) if lo <= s <= hi]
        if start is not None and num is not None:
            names = names[start : start + num]
        return names

    def pipeline(self, transaction: bool = True):
        return _MemoryPipeline(self)


class _MemoryPipeline:
    """Queues commands and applies them in order on execute()."""

    def __init__(self, r: _MemoryRedis):
        self._r = r
        self._ops = []

    def __getattr__(self, name: str):
        fn = getattr(self._r, name)

        def queued(*args, **kwargs):
            self._ops.append((fn, args, kwargs))
            return self

        return queued

    def execute(self):
        ops, self._ops = self._ops, []
        return [fn(*args, **kwargs) for fn, args, kwargs in ops]


_mem_redis = _MemoryRedis()

# Stub Redis at import time (snapshot store, attempt locks, cron locks).
import qcm.core.redis_client as redis_client_module

redis_client_module.get_redis = lambda: _mem_redis

import qcm.core.queue as queue_module
queue_module.get_redis = lambda: _mem_redis

import qcm.services.store as store_module
store_module.get_redis = lambda: _mem_redis

import qcm.services.attempts as attempts_module
attempts_module.get_redis = lambda: _mem_redis

import qcm.routers.health as health_router_module
health_router_module.get_redis = lambda: _mem_redis


T0 = datetime(2025, 3, 3, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _clean_redis():
    _mem_redis.flushall()
    yield
    _mem_redis.flushall()


@pytest.fixture()
def redis_stub():
    return _mem_redis


@pytest.fixture()
def t0():
    return T0


@pytest.fixture()
def client():
    return TestClient(create_app())


@pytest.fixture()
def two_question_quiz():
    """Q1 single-choice worth 5, Q2 multi-select worth 10."""
    return QuizDefinition(
        id="quiz-1",
        title="Sécurité au travail",
        questions=(single("a", points=5), multi({"x", "y"}, points=10)),
        time_limit_minutes=30,
        passing_score=12,
        max_attempts=2,
    )


@pytest.fixture()
def quiz_payload():
    return {
        "title": "Sécurité au travail",
        "time_limit_minutes": 30,
        "passing_score": 12,
        "max_attempts": 2,
        "questions": [
            {
                "type": "single_choice",
                "text": "Couleur d'un panneau d'interdiction ?",
                "choices": [{"id": "a", "label": "Rouge"}, {"id": "b", "label": "Bleu"}],
                "correct_answers": ["a"],
                "points": 5,
            },
            {
                "type": "multiple_choice",
                "text": "Équipements de protection individuelle ?",
                "choices": [
                    {"id": "x", "label": "Casque"},
                    {"id": "y", "label": "Gants"},
                    {"id": "z", "label": "Cravate"},
                ],
                "correct_answers": ["x", "y"],
                "points": 10,
            },
        ],
    }
