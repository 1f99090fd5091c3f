"""
Wizard flow: calls the backend collaborators and, only on their success,
drives the form session forward.

Collaborator failures propagate unchanged; the session is left exactly as it
was before the call (apart from `isSubmitting`, which is always cleared).
"""
from typing import Any, Dict, Optional

from leadflow.core import steps
from leadflow.core.actions import ResetForm, SetSeller, SetStep, SetUser
from leadflow.core.errors import NotEnoughProducts, SellerRequired, SubmissionInProgress
from leadflow.core.session import FormSession
from leadflow.core.step_gate import check_submission_ready, require_authenticated
from leadflow.observability.logging import log
from leadflow.services import products as product_service
from leadflow.services import sellers as seller_service
from leadflow.services import users as user_service
from leadflow.settings import settings
from leadflow.storage.s3 import ImageUpload
from leadflow.store.models import PRODUCT_FIELDS, SELLER_FIELDS, USER_FIELDS, pick


def authenticate(session: FormSession, name: str, phone: str) -> Dict[str, Any]:
    user = user_service.authenticate(name, phone)
    session.dispatch(SetUser(pick(user, USER_FIELDS)))
    session.dispatch(SetStep(steps.SELLER))
    return user


def register_seller(
    session: FormSession,
    name: str,
    phone: str,
    gst_number: str,
    shop_image: ImageUpload,
) -> Dict[str, Any]:
    require_authenticated(session.state)
    seller = seller_service.create_seller(
        name=name,
        phone=phone,
        gst_number=gst_number,
        user_id=session.state.user["id"],
        shop_image=shop_image,
    )
    session.dispatch(SetSeller(pick(seller, SELLER_FIELDS)))
    session.dispatch(SetStep(steps.PRODUCTS))
    return seller


def submit_products(session: FormSession, minimum: Optional[int] = None) -> Dict[str, Any]:
    """Submit every draft as one batch, then start a fresh cycle at the entry step."""
    minimum = settings.MINIMUM_PRODUCTS if minimum is None else minimum
    state = session.state

    require_authenticated(state)
    if state.isSubmitting:
        raise SubmissionInProgress("A submission is already running for this session")
    seller_id = (state.seller or {}).get("id")
    if not seller_id:
        raise SellerRequired("Register a seller before submitting products")

    ok, _reason = check_submission_ready(state, minimum)
    if not ok:
        raise NotEnoughProducts(minimum, len(state.products))

    payload = {
        "sellerId": seller_id,
        "products": [pick(p, PRODUCT_FIELDS) for p in state.products],
    }
    with session.submitting():
        result = product_service.submit_batch(payload, minimum=minimum, maximum=session.max_products)

    session.dispatch(ResetForm())
    log(event="form_cycle_completed", sessionId=session.session_id, sellerId=seller_id, count=result.get("count"))
    return result
