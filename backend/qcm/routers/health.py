from fastapi import APIRouter, HTTPException, Request
import hmac

from qcm.core.config import settings
from qcm.core.queue import enqueue_once
from qcm.core.redis_client import get_redis
from qcm.services.expiry_jobs import sweep_expired_attempts_job

router = APIRouter(tags=["health"])

EXPIRY_SWEEP_LOCK_KEY = "locks:expiry_sweep"


def _require_cron_secret(request: Request) -> None:
    secret = str(getattr(settings, "cron_secret", "") or "").strip()
    if not secret:
        raise HTTPException(status_code=404, detail="not found")

    provided = str(request.headers.get("x-cron-secret") or "").strip()
    if not provided or not hmac.compare_digest(provided, secret):
        raise HTTPException(status_code=403, detail="forbidden")


def expiry_sweep_lock_ttl() -> int:
    interval_seconds = max(60, int(settings.expiry_sweep_interval_minutes) * 60)
    return max(30, interval_seconds - 5)


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/health/live")
def live():
    return {"status": "live"}


@router.get("/health/ready")
def ready():
    try:
        r = get_redis()
        r.ping()
    except Exception as e:
        raise HTTPException(status_code=503, detail="redis not ready") from e

    return {"status": "ready"}


@router.post("/health/cron/expiry-sweep")
def cron_expiry_sweep(request: Request):
    _require_cron_secret(request)

    return enqueue_once(
        lock_key=EXPIRY_SWEEP_LOCK_KEY,
        lock_ttl_seconds=expiry_sweep_lock_ttl(),
        func=sweep_expired_attempts_job,
        batch_size=int(settings.expiry_sweep_batch_size),
    )
