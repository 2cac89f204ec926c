from __future__ import annotations

from typing import Any, Callable

import redis
from rq import Queue

from qcm.core.config import settings
from qcm.core.redis_client import get_redis


def get_queue(name: str | None = None) -> Queue:
    conn = redis.Redis.from_url(settings.redis_url)
    eff = str(name or "").strip() or str(settings.rq_queue_default)
    return Queue(name=eff, connection=conn)


def enqueue_once(*, lock_key: str, lock_ttl_seconds: int, func: Callable[..., Any], **kwargs: Any) -> dict:
    """Enqueue `func` unless another tick already did within the lock window."""

    r = get_redis()
    acquired = r.set(lock_key, "1", nx=True, ex=max(1, int(lock_ttl_seconds)))
    if not acquired:
        return {"ok": True, "enqueued": False, "reason": "locked"}

    q = get_queue(str(settings.rq_queue_default))
    job = q.enqueue(
        func,
        job_timeout=60 * 10,
        result_ttl=60 * 60,
        failure_ttl=60 * 60,
        **kwargs,
    )
    return {"ok": True, "enqueued": True, "job_id": str(job.id)}
