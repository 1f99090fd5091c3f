import json
import re
from typing import Annotated, Any, Dict, List, Literal, Optional
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, Field, ValidationError, field_validator, model_validator

PHONE_RE = re.compile(r"^([+]?[\s0-9]+)?(\d{3}|[(]?[0-9]+[)])?([-]?[\s]?[0-9])+$")
# Indian GSTIN: 2-digit state code, PAN, entity number, 'Z', checksum
GST_RE = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z]{1}[1-9A-Z]{1}Z[0-9A-Z]{1}$")

Step = Literal["auth", "seller", "products"]


def _phone(v: str) -> str:
    if not PHONE_RE.match(v or ""):
        raise ValueError("Invalid phone number")
    if len(v) != 10:
        raise ValueError("Phone number must be exactly 10 digits.")
    return v


def _http_url(v: str) -> str:
    parsed = urlparse(v or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Must be an http(s) URL")
    return v


Phone = Annotated[str, AfterValidator(_phone)]
HttpUrlStr = Annotated[str, AfterValidator(_http_url)]


class AuthRequest(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    phone: Phone


class SellerForm(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    phone: Phone
    gstNumber: str = Field(min_length=15, max_length=15)

    @field_validator("gstNumber")
    @classmethod
    def _check_gst(cls, v: str) -> str:
        if not GST_RE.match(v):
            raise ValueError("Invalid GST number format.")
        return v


class ProductIn(BaseModel):
    """Batch item: images are already hosted."""
    name: str = Field(min_length=2, max_length=100)
    mrp: float = Field(gt=0)
    msp: float = Field(gt=0)
    frontImage: HttpUrlStr
    sideImage: HttpUrlStr
    backImage: HttpUrlStr


class ProductDraft(ProductIn):
    """Wizard draft: same shape, but pricing is checked as it is entered."""
    mrp: float = Field(ge=1)
    msp: float = Field(ge=1)

    @model_validator(mode="after")
    def _msp_not_above_mrp(self):
        if self.msp > self.mrp:
            raise ValueError("MSP cannot be greater than MRP")
        return self


class ProductBatchRequest(BaseModel):
    sellerId: str = Field(min_length=1)
    products: List[ProductIn]


class DashboardQuery(BaseModel):
    dateRange: Optional[Literal["today", "week", "month", "all"]] = None
    sortBy: Optional[Literal["date", "products", "name"]] = None
    sortOrder: Optional[Literal["asc", "desc"]] = None
    page: int = Field(default=1, gt=0)
    limit: int = Field(default=10, gt=0, le=100)


class StepRequest(BaseModel):
    step: Step


class ActionRequest(BaseModel):
    type: str
    payload: Optional[Any] = None


class FormStateResponse(BaseModel):
    sessionId: str
    user: Optional[Dict[str, Any]] = None
    seller: Optional[Dict[str, Any]] = None
    products: List[Dict[str, Any]] = Field(default_factory=list)
    currentStep: Step = "auth"
    isSubmitting: bool = False
    isAuthenticated: bool = False
    canSubmit: bool = False
    limits: Dict[str, int] = Field(default_factory=dict)


def validation_details(e: ValidationError) -> List[Dict[str, Any]]:
    """JSON-safe list of pydantic errors for 400 responses."""
    return json.loads(e.json(include_url=False))
