from typing import Any, Dict

from leadflow.observability.logging import log
from leadflow.store import records
from leadflow.store.models import UserRecord
from leadflow.utils.time import now_ms


def user_stats(user: UserRecord) -> Dict[str, int]:
    seller_ids = records.seller_ids_for_user(user.id)
    return {
        "totalSellers": len(seller_ids),
        "totalProducts": sum(records.product_count(sid) for sid in seller_ids),
        "lastActive": int(user.updatedAt or user.createdAt or 0),
    }


def authenticate(name: str, phone: str) -> Dict[str, Any]:
    """
    Sign in by phone number: create the user on first sight, rename on a
    changed name. Only writes touch `updatedAt`, so `lastActive` is the last
    profile change. Returns the public record with stats.
    """
    ts = now_ms()
    user = records.get_user_by_phone(phone)
    created = user is None

    if user is None:
        user = UserRecord(id=records.new_id(), name=name, phone=phone, createdAt=ts, updatedAt=ts)
        records.save_user(user)
    elif user.name != name:
        user.name = name
        user.updatedAt = ts
        records.save_user(user)

    log(event="user_authenticated", userId=user.id, created=created, phone=phone)
    out = user.public()
    out["stats"] = user_stats(user)
    return out
