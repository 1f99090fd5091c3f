from contextlib import contextmanager
from dataclasses import dataclass
import time
import uuid

from redis.exceptions import WatchError

from leadflow.core.errors import SessionBusy
from leadflow.settings import settings
from leadflow.store.redis_conn import get_redis


@dataclass(frozen=True)
class SessionLease:
    """Proof of lock ownership; writes made under it are fenced on `token`."""
    key: str
    token: str
    ttl_ms: int


def lock_key(session_id: str) -> str:
    return f"lock:form:{session_id}"


@contextmanager
def session_lock(session_id: str, ttl_ms: int = 0):
    """
    Distributed lock to ensure single-writer per form session.
    Load, dispatch and save for one session happen inside this block so two
    API workers can never persist an older state over a newer one. The lock
    can still lapse during a slow collaborator call, so saves check the
    yielded lease (see `FormStateStore.save`).
    """
    r = get_redis()
    ttl_ms = ttl_ms or settings.SESSION_LOCK_TTL_MS
    key = lock_key(session_id)
    token = uuid.uuid4().hex
    acquired = r.set(key, token, px=ttl_ms, nx=True)

    try:
        if not acquired:
            # Short spin; a wizard request holds the lock for milliseconds.
            for _ in range(10):
                time.sleep(0.05)
                if r.set(key, token, px=ttl_ms, nx=True):
                    acquired = True
                    break

            if not acquired:
                raise SessionBusy(f"Could not acquire lock for session {session_id}")

        yield SessionLease(key=key, token=token, ttl_ms=ttl_ms)
    finally:
        if acquired:
            _release(r, key, token)

def _release(r, key: str, token: str) -> None:
    # Release only if we still own it
    with r.pipeline() as pipe:
        try:
            pipe.watch(key)
            if pipe.get(key) == token:
                pipe.multi()
                pipe.delete(key)
                pipe.execute()
            else:
                pipe.unwatch()
        except WatchError:
            pass
