"""
Form session actions.

One frozen dataclass per action tag; together they form the closed set the
reducer understands. `TYPE` is the wire tag used by `action_from_dict` and in
log lines.
"""
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Union

from leadflow.core.errors import MalformedAction, UnknownAction


@dataclass(frozen=True)
class SetUser:
    TYPE: ClassVar[str] = "SET_USER"
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SetSeller:
    TYPE: ClassVar[str] = "SET_SELLER"
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AddProduct:
    TYPE: ClassVar[str] = "ADD_PRODUCT"
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateProduct:
    TYPE: ClassVar[str] = "UPDATE_PRODUCT"
    index: int
    product: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RemoveProduct:
    TYPE: ClassVar[str] = "REMOVE_PRODUCT"
    index: int


@dataclass(frozen=True)
class SetStep:
    TYPE: ClassVar[str] = "SET_STEP"
    step: str


@dataclass(frozen=True)
class SetSubmitting:
    TYPE: ClassVar[str] = "SET_SUBMITTING"
    value: bool


@dataclass(frozen=True)
class ResetForm:
    TYPE: ClassVar[str] = "RESET_FORM"


Action = Union[SetUser, SetSeller, AddProduct, UpdateProduct, RemoveProduct, SetStep, SetSubmitting, ResetForm]


def _update_product(payload: Any) -> UpdateProduct:
    payload = payload or {}
    return UpdateProduct(index=payload["index"], product=dict(payload.get("product") or {}))


_DECODERS = {
    SetUser.TYPE: lambda p: SetUser(dict(p or {})),
    SetSeller.TYPE: lambda p: SetSeller(dict(p or {})),
    AddProduct.TYPE: lambda p: AddProduct(dict(p or {})),
    UpdateProduct.TYPE: _update_product,
    RemoveProduct.TYPE: lambda p: RemoveProduct(index=p),
    SetStep.TYPE: lambda p: SetStep(step=p),
    SetSubmitting.TYPE: lambda p: SetSubmitting(value=bool(p)),
    ResetForm.TYPE: lambda p: ResetForm(),
}


def action_from_dict(data: Dict[str, Any]) -> Action:
    """Decode a `{type, payload}` wire action. Unknown tags raise UnknownAction."""
    tag = (data or {}).get("type")
    decoder = _DECODERS.get(tag)
    if decoder is None:
        raise UnknownAction(f"Unknown action type: {tag!r}", type=tag)
    try:
        return decoder(data.get("payload"))
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedAction(f"Malformed payload for {tag}: {e}", type=tag)
