from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from leadflow.core.steps import AUTH
from leadflow.utils.time import iso_from_ms

# Keys a partial record may carry inside the form session
USER_FIELDS = ("id", "name", "phone", "stats")
SELLER_FIELDS = ("id", "name", "phone", "gstNumber", "shopImage", "userId")
PRODUCT_FIELDS = ("name", "mrp", "msp", "frontImage", "sideImage", "backImage")


def pick(data: Optional[Dict[str, Any]], allowed) -> Dict[str, Any]:
    """Drop unknown keys so partial records never carry stale or foreign fields."""
    return {k: v for k, v in (data or {}).items() if k in allowed}


@dataclass
class FormState:
    # Partial records accumulated by the wizard
    user: Optional[Dict[str, Any]] = None
    seller: Optional[Dict[str, Any]] = None
    products: List[Dict[str, Any]] = field(default_factory=list)

    # Wizard position, only moved by SET_STEP
    currentStep: str = AUTH

    # Guards concurrent batch submissions
    isSubmitting: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def initial_state() -> FormState:
    return FormState()


@dataclass
class UserRecord:
    id: str
    name: str
    phone: str
    createdAt: int = 0
    updatedAt: int = 0

    def public(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "createdAt": iso_from_ms(self.createdAt),
            "updatedAt": iso_from_ms(self.updatedAt),
        }


@dataclass
class SellerRecord:
    id: str
    name: str
    phone: str
    gstNumber: str
    shopImage: str
    userId: str
    createdAt: int = 0
    updatedAt: int = 0

    def public(self) -> Dict[str, Any]:
        out = asdict(self)
        out["createdAt"] = iso_from_ms(self.createdAt)
        out["updatedAt"] = iso_from_ms(self.updatedAt)
        return out


@dataclass
class ProductRecord:
    id: str
    name: str
    mrp: float
    msp: float
    frontImage: str
    sideImage: str
    backImage: str
    sellerId: str
    createdAt: int = 0
    updatedAt: int = 0

    def public(self) -> Dict[str, Any]:
        out = asdict(self)
        out["createdAt"] = iso_from_ms(self.createdAt)
        out["updatedAt"] = iso_from_ms(self.updatedAt)
        return out
