from __future__ import annotations

from datetime import datetime, timezone
import logging

import redis
from pydantic import ValidationError
from rq import get_current_job

from qcm.core.config import settings
from qcm.core.errors import AttemptNotFound, EngineError, QuizNotFound
from qcm.models.attempt import AttemptStatus
from qcm.services.attempts import AttemptService


log = logging.getLogger(__name__)


def sweep_expired_attempts_job(*, batch_size: int | None = None, now: datetime | None = None) -> dict:
    """Expire every open attempt whose deadline has passed.

    Safe to run repeatedly: sweeping an attempt that is not past its deadline,
    or already terminal, changes nothing.
    """

    try:
        job = get_current_job()
    except Exception:
        job = None

    now = now or datetime.now(timezone.utc)
    limit = int(batch_size if batch_size is not None else settings.expiry_sweep_batch_size)

    svc = AttemptService()
    ids = svc.attempts.open_attempt_ids(limit=limit, due_before=now)

    expired = 0
    failed = 0
    for attempt_id in ids:
        try:
            before = svc.attempts.get(attempt_id)
            if before.is_terminal:
                svc.attempts.forget_open(attempt_id)
                continue
            after = svc.sweep(attempt_id, now=now)
            if after.status == AttemptStatus.expired and before.status != after.status:
                expired += 1
        except (AttemptNotFound, QuizNotFound):
            log.warning("sweep_expired_attempts_job: dropping dangling attempt_id=%s", attempt_id)
            svc.attempts.forget_open(attempt_id)
        except (EngineError, ValidationError, redis.RedisError):
            # Busy, unreadable or unreachable: leave it for the next tick.
            failed += 1
            log.exception("sweep_expired_attempts_job: sweep failed attempt_id=%s", attempt_id)

    out = {
        "ok": True,
        "checked": len(ids),
        "expired": int(expired),
        "failed": int(failed),
        "now": now.isoformat(),
    }

    if job is not None:
        try:
            meta = dict(job.meta or {})
            meta.update(out)
            job.meta = meta
            job.save_meta()
        except Exception:
            pass

    log.info(
        "sweep_expired_attempts_job: checked=%s expired=%s failed=%s",
        len(ids),
        expired,
        failed,
    )

    return out
