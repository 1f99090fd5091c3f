import threading
from contextlib import contextmanager
from typing import Any, Dict, Optional

from leadflow.core.actions import (
    Action,
    AddProduct,
    RemoveProduct,
    ResetForm,
    SetStep,
    SetSubmitting,
    UpdateProduct,
)
from leadflow.core.errors import CapacityExceeded
from leadflow.core.reducer import form_reducer
from leadflow.core.step_gate import can_add_product
from leadflow.observability.logging import log
from leadflow.settings import settings
from leadflow.store.form_repo import FormStateStore
from leadflow.store.models import FormState, initial_state
from leadflow.utils.lock import SessionLease


class FormSession:
    """
    Owner of one wizard session's state.

    Every mutation goes through `dispatch`, which checks capacity, runs the pure
    reducer and persists the result before returning. Calls are serialized by
    an in-process lock. Across processes, pass the lease from
    `leadflow.utils.lock.session_lock`: every save is then fenced on it and
    fails with SessionBusy once the lock has been lost.
    """

    def __init__(
        self,
        session_id: str,
        store: Optional[FormStateStore] = None,
        max_products: Optional[int] = None,
        lease: Optional[SessionLease] = None,
    ):
        self.session_id = session_id
        self.store = store or FormStateStore()
        self.max_products = int(max_products if max_products is not None else settings.MAXIMUM_PRODUCTS)
        self.lease = lease
        self.state: FormState = initial_state()
        self._lock = threading.RLock()

    @classmethod
    def open(cls, session_id: str, store: Optional[FormStateStore] = None, **kwargs) -> "FormSession":
        session = cls(session_id, store=store, **kwargs)
        session.hydrate()
        return session

    def _next(self, action: Action) -> FormState:
        if isinstance(action, AddProduct) and not can_add_product(self.state, self.max_products):
            raise CapacityExceeded(self.max_products)
        return form_reducer(self.state, action)

    def _apply(self, action: Action) -> FormState:
        self.state = self._next(action)
        return self.state

    def dispatch(self, action: Action) -> FormState:
        with self._lock:
            state = self._next(action)
            # In-memory state only moves once the save has landed
            self.store.save(self.session_id, state, lease=self.lease)
            self.state = state
        log(
            event="form_action",
            sessionId=self.session_id,
            action=action.TYPE,
            step=state.currentStep,
            productCount=len(state.products),
        )
        return state

    def hydrate(self) -> FormState:
        """
        Rebuild state from the store by replaying its actions through the
        capacity check. A stored `isSubmitting` is stale by the time anyone can
        load the session (the submitter held the lock), so it is cleared.
        """
        with self._lock:
            actions = self.store.load(self.session_id)
            if actions is None:
                self.state = initial_state()
                return self.state

            dropped = 0
            for action in actions:
                try:
                    self._apply(action)
                except CapacityExceeded:
                    dropped += 1

            stale = self.state.isSubmitting
            if stale:
                self._apply(SetSubmitting(False))
                log(event="form_state_stale_submitting", sessionId=self.session_id)

            if dropped:
                log(
                    event="form_state_truncated",
                    sessionId=self.session_id,
                    dropped=dropped,
                    maxProducts=self.max_products,
                )
            if dropped or stale:
                self.store.save(self.session_id, self.state, lease=self.lease)
            return self.state

    # Convenience wrappers used by the flow and the API

    def add_product(self, product: Dict[str, Any]) -> FormState:
        return self.dispatch(AddProduct(product))

    def update_product(self, index: int, product: Dict[str, Any]) -> FormState:
        return self.dispatch(UpdateProduct(index=index, product=product))

    def remove_product(self, index: int) -> FormState:
        return self.dispatch(RemoveProduct(index=index))

    def set_step(self, step: str) -> FormState:
        return self.dispatch(SetStep(step=step))

    def reset(self) -> FormState:
        return self.dispatch(ResetForm())

    @contextmanager
    def submitting(self):
        """Hold `isSubmitting` for the duration of an outbound submission; always cleared on exit."""
        self.dispatch(SetSubmitting(True))
        try:
            yield self
        finally:
            self.dispatch(SetSubmitting(False))
