from dataclasses import replace
from typing import Any, Dict, List

from leadflow.core.actions import (
    Action,
    AddProduct,
    RemoveProduct,
    ResetForm,
    SetStep,
    SetSeller,
    SetSubmitting,
    SetUser,
    UpdateProduct,
)
from leadflow.core.errors import InvalidIndex, MalformedAction, UnknownAction
from leadflow.core.steps import STEPS
from leadflow.store.models import FormState, initial_state


def _check_index(index: Any, products: List[Dict[str, Any]]) -> int:
    # bool is an int subclass; negative indexes must not wrap around
    if isinstance(index, bool) or not isinstance(index, int) or index < 0 or index >= len(products):
        raise InvalidIndex(index, len(products))
    return index


def form_reducer(state: FormState, action: Action) -> FormState:
    """
    Pure transition: returns a new FormState and never touches `state`.
    No I/O happens here; persistence is the session controller's job.
    Capacity is not checked here either (see FormSession.dispatch).
    """
    if isinstance(action, SetUser):
        return replace(state, user={**(state.user or {}), **action.payload})

    if isinstance(action, SetSeller):
        return replace(state, seller={**(state.seller or {}), **action.payload})

    if isinstance(action, AddProduct):
        return replace(state, products=[*state.products, dict(action.payload)])

    if isinstance(action, UpdateProduct):
        idx = _check_index(action.index, state.products)
        products = list(state.products)
        products[idx] = dict(action.product)
        return replace(state, products=products)

    if isinstance(action, RemoveProduct):
        idx = _check_index(action.index, state.products)
        return replace(state, products=state.products[:idx] + state.products[idx + 1:])

    if isinstance(action, SetStep):
        if action.step not in STEPS:
            raise MalformedAction(f"Unknown step: {action.step!r}", step=action.step)
        return replace(state, currentStep=action.step)

    if isinstance(action, SetSubmitting):
        return replace(state, isSubmitting=bool(action.value))

    if isinstance(action, ResetForm):
        return initial_state()

    raise UnknownAction(f"Unknown action: {type(action).__name__}", type=getattr(action, "TYPE", None))
