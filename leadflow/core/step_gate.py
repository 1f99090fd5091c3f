from typing import Tuple

from leadflow.core.errors import NotAuthenticated
from leadflow.core.steps import ENTRY_STEP, GATED_STEPS
from leadflow.store.models import FormState


def is_authenticated(state: FormState) -> bool:
    user = state.user or {}
    return bool(user.get("id"))


def resolve_step(state: FormState, requested: str) -> str:
    """Where a navigation request for `requested` actually lands."""
    if requested in GATED_STEPS and not is_authenticated(state):
        return ENTRY_STEP
    return requested


def require_authenticated(state: FormState) -> None:
    if not is_authenticated(state):
        raise NotAuthenticated(redirect_to=ENTRY_STEP)


def can_add_product(state: FormState, maximum: int) -> bool:
    return len(state.products) < maximum


def check_submission_ready(state: FormState, minimum: int) -> Tuple[bool, str]:
    if len(state.products) < minimum:
        return False, "not enough products"
    return True, ""
