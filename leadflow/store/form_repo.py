import json
from typing import Any, Dict, List, Optional

from redis.exceptions import WatchError

from leadflow.core.actions import Action, AddProduct, ResetForm, SetSeller, SetStep, SetSubmitting, SetUser
from leadflow.core.errors import CorruptPersistedState, SessionBusy
from leadflow.core.steps import AUTH, STEPS
from leadflow.observability.logging import log
from leadflow.settings import settings
from leadflow.store.models import FormState, PRODUCT_FIELDS, SELLER_FIELDS, USER_FIELDS, pick
from leadflow.store.redis_conn import get_redis
from leadflow.utils.lock import SessionLease


def _key(session_id: str) -> str:
    return f"{settings.FORM_STATE_PREFIX}{session_id}"


def _decode(raw: str) -> Dict[str, Any]:
    """
    Parse and shape-check a stored payload. Unknown keys are dropped (top level
    and inside records); anything with the wrong type is corrupt.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise CorruptPersistedState(f"invalid json: {e}", raw)

    if not isinstance(data, dict):
        raise CorruptPersistedState("payload is not an object", raw)

    user = data.get("user")
    seller = data.get("seller")
    products = data.get("products")
    step = data.get("currentStep")
    submitting = data.get("isSubmitting")

    for name, value in (("user", user), ("seller", seller)):
        if value is not None and not isinstance(value, dict):
            raise CorruptPersistedState(f"{name} is not an object", raw)
    if products is None:
        products = []
    if not isinstance(products, list) or not all(isinstance(p, dict) for p in products):
        raise CorruptPersistedState("products is not a list of objects", raw)
    if step is None:
        step = AUTH
    if step not in STEPS:
        raise CorruptPersistedState(f"unknown step {step!r}", raw)
    if submitting is None:
        submitting = False
    if not isinstance(submitting, bool):
        raise CorruptPersistedState("isSubmitting is not a boolean", raw)

    return {
        "user": pick(user, USER_FIELDS) if user is not None else None,
        "seller": pick(seller, SELLER_FIELDS) if seller is not None else None,
        "products": [pick(p, PRODUCT_FIELDS) for p in products],
        "currentStep": step,
        "isSubmitting": submitting,
    }


def replay_actions(data: Dict[str, Any]) -> List[Action]:
    """Reset first, then re-apply every field through the action vocabulary."""
    actions: List[Action] = [ResetForm()]
    if data.get("user") is not None:
        actions.append(SetUser(data["user"]))
    if data.get("seller") is not None:
        actions.append(SetSeller(data["seller"]))
    for product in data.get("products") or []:
        actions.append(AddProduct(product))
    actions.append(SetStep(data.get("currentStep") or AUTH))
    actions.append(SetSubmitting(bool(data.get("isSubmitting"))))
    return actions


class FormStateStore:
    """Redis-backed slot for one form session's state."""

    def load(self, session_id: str) -> Optional[List[Action]]:
        r = get_redis()
        raw = r.get(_key(session_id))
        if raw is None:
            return None

        try:
            data = _decode(raw)
        except CorruptPersistedState as e:
            log(event="form_state_corrupt", sessionId=session_id, reason=e.reason, rawLength=len(raw or ""))
            r.delete(_key(session_id))
            return None

        return replay_actions(data)

    def save(self, session_id: str, state: FormState, lease: Optional[SessionLease] = None) -> None:
        """
        Write the full state. With a lease the write only lands while that
        lease still owns the session lock, and it pushes the lock's expiry out.
        """
        r = get_redis()
        payload = json.dumps(state.to_dict())
        if lease is None:
            r.set(_key(session_id), payload, ex=settings.FORM_STATE_TTL_SEC)
            return

        with r.pipeline() as pipe:
            try:
                pipe.watch(lease.key)
                if pipe.get(lease.key) != lease.token:
                    pipe.unwatch()
                    owned = False
                else:
                    pipe.multi()
                    pipe.set(_key(session_id), payload, ex=settings.FORM_STATE_TTL_SEC)
                    pipe.pexpire(lease.key, lease.ttl_ms)
                    pipe.execute()
                    owned = True
            except WatchError:
                owned = False

        if not owned:
            log(event="form_save_rejected", sessionId=session_id, reason="lock_lost")
            raise SessionBusy(f"Lock for session {session_id} was lost before saving")

    def delete(self, session_id: str) -> None:
        get_redis().delete(_key(session_id))
