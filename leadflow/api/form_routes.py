from contextlib import contextmanager
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError

from leadflow.api.auth import require_api_key
from leadflow.api.schemas import (
    ActionRequest,
    AuthRequest,
    FormStateResponse,
    ProductDraft,
    SellerForm,
    Step,
    StepRequest,
    validation_details,
)
from leadflow.core import flow
from leadflow.core.actions import AddProduct, RemoveProduct, ResetForm, SetStep, UpdateProduct, action_from_dict
from leadflow.core.errors import ActionNotAllowed
from leadflow.core.session import FormSession
from leadflow.core.step_gate import check_submission_ready, is_authenticated, require_authenticated, resolve_step
from leadflow.core.steps import GATED_STEPS
from leadflow.services.errors import ValidationFailed
from leadflow.settings import settings
from leadflow.storage.s3 import ImageUpload
from leadflow.utils.lock import session_lock

router = APIRouter(prefix="/form", tags=["form"], dependencies=[Depends(require_api_key)])

# Actions a client may send through the generic endpoint. Identity and the
# submitting flag only change through auth/seller/submit.
WIRE_ACTIONS = {AddProduct.TYPE, UpdateProduct.TYPE, RemoveProduct.TYPE, SetStep.TYPE, ResetForm.TYPE}


@contextmanager
def open_session(session_id: str):
    """Load, mutate and save one session while holding its lock."""
    with session_lock(session_id) as lease:
        yield FormSession.open(session_id, lease=lease)


def state_view(session: FormSession) -> Dict[str, Any]:
    s = session.state
    ready, _ = check_submission_ready(s, settings.MINIMUM_PRODUCTS)
    return FormStateResponse(
        sessionId=session.session_id,
        **s.to_dict(),
        isAuthenticated=is_authenticated(s),
        canSubmit=ready,
        limits={"minimum": settings.MINIMUM_PRODUCTS, "maximum": session.max_products},
    ).model_dump()


def _draft(payload: Any) -> Dict[str, Any]:
    try:
        return ProductDraft.model_validate(payload or {}).model_dump()
    except ValidationError as e:
        raise ValidationFailed("Invalid product", details=validation_details(e))


@router.get("/{session_id}")
def get_form(session_id: str):
    with open_session(session_id) as session:
        return state_view(session)


@router.delete("/{session_id}")
def reset_form(session_id: str):
    with open_session(session_id) as session:
        session.reset()
        return state_view(session)


@router.post("/{session_id}/auth")
def form_auth(session_id: str, body: AuthRequest):
    with open_session(session_id) as session:
        flow.authenticate(session, body.name, body.phone)
        return state_view(session)


@router.post("/{session_id}/seller")
def form_seller(
    session_id: str,
    name: str = Form(""),
    phone: str = Form(""),
    gstNumber: str = Form(""),
    shopImage: UploadFile = File(...),
):
    try:
        form = SellerForm(name=name, phone=phone, gstNumber=gstNumber)
    except ValidationError as e:
        raise ValidationFailed("Invalid seller", details=validation_details(e))
    image = ImageUpload(
        filename=shopImage.filename or "",
        content_type=shopImage.content_type or "",
        data=shopImage.file.read(),
    )
    with open_session(session_id) as session:
        flow.register_seller(session, form.name, form.phone, form.gstNumber, image)
        return state_view(session)


@router.post("/{session_id}/products")
def add_product(session_id: str, body: ProductDraft):
    with open_session(session_id) as session:
        require_authenticated(session.state)
        session.add_product(body.model_dump())
        return state_view(session)


@router.put("/{session_id}/products/{index}")
def update_product(session_id: str, index: int, body: ProductDraft):
    with open_session(session_id) as session:
        require_authenticated(session.state)
        session.update_product(index, body.model_dump())
        return state_view(session)


@router.delete("/{session_id}/products/{index}")
def remove_product(session_id: str, index: int):
    with open_session(session_id) as session:
        require_authenticated(session.state)
        session.remove_product(index)
        return state_view(session)


@router.post("/{session_id}/step")
def set_step(session_id: str, body: StepRequest):
    with open_session(session_id) as session:
        if body.step in GATED_STEPS:
            require_authenticated(session.state)
        session.set_step(body.step)
        return state_view(session)


@router.get("/{session_id}/step/{step}")
def gate_step(session_id: str, step: Step):
    with open_session(session_id) as session:
        landed = resolve_step(session.state, step)
        return {"requested": step, "step": landed, "redirected": landed != step}


@router.post("/{session_id}/actions")
def dispatch_action(session_id: str, body: ActionRequest):
    action = action_from_dict(body.model_dump())
    if action.TYPE not in WIRE_ACTIONS:
        raise ActionNotAllowed(f"{action.TYPE} is not accepted from clients", type=action.TYPE)
    if isinstance(action, AddProduct):
        action = AddProduct(_draft(action.payload))
    elif isinstance(action, UpdateProduct):
        action = UpdateProduct(index=action.index, product=_draft(action.product))

    with open_session(session_id) as session:
        if isinstance(action, SetStep):
            if action.step in GATED_STEPS:
                require_authenticated(session.state)
        elif not isinstance(action, ResetForm):
            require_authenticated(session.state)
        session.dispatch(action)
        return state_view(session)


@router.post("/{session_id}/submit")
def submit(session_id: str):
    with open_session(session_id) as session:
        result = flow.submit_products(session)
        out = state_view(session)
        out["submission"] = result
        return out
