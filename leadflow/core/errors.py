"""
Form session error taxonomy.

Every error carries the HTTP status the API layer answers with, so route
handlers never translate them one by one.
"""
from typing import Any, Dict, Optional


class FormError(Exception):
    status_code: int = 400
    code: str = "form_error"

    def __init__(self, message: str = "", **details: Any):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"error": self.code, "message": self.message}
        out.update(self.details)
        return out


class UnknownAction(FormError):
    """Action tag outside the reducer's vocabulary. A wiring bug, never user input we expect."""
    status_code = 400
    code = "unknown_action"


class InvalidIndex(FormError):
    status_code = 404
    code = "invalid_index"

    def __init__(self, index: Any, length: int):
        super().__init__(f"Product index {index} out of range (0..{length - 1})", index=index, length=length)


class CapacityExceeded(FormError):
    status_code = 409
    code = "capacity_exceeded"

    def __init__(self, maximum: int):
        super().__init__(f"Maximum {maximum} products allowed", maximum=maximum)


class NotAuthenticated(FormError):
    status_code = 401
    code = "not_authenticated"

    def __init__(self, message: str = "Sign in first", redirect_to: str = "auth"):
        super().__init__(message, redirectTo=redirect_to)


class NotEnoughProducts(FormError):
    status_code = 400
    code = "not_enough_products"

    def __init__(self, minimum: int, count: int):
        super().__init__(f"Minimum {minimum} products required", minimum=minimum, count=count)


class SubmissionInProgress(FormError):
    status_code = 409
    code = "submission_in_progress"


class SellerRequired(FormError):
    status_code = 409
    code = "seller_required"


class SessionBusy(FormError):
    status_code = 409
    code = "session_busy"


class CorruptPersistedState(FormError):
    """Stored form state failed to parse. Logged and discarded by the store, never surfaced."""
    code = "corrupt_persisted_state"

    def __init__(self, reason: str, raw: Optional[str] = None):
        super().__init__(reason, rawLength=len(raw or ""))
        self.reason = reason


class MalformedAction(FormError):
    status_code = 400
    code = "malformed_action"


class ActionNotAllowed(FormError):
    status_code = 403
    code = "action_not_allowed"
