from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from leadflow.api.schemas import ProductBatchRequest, validation_details
from leadflow.observability.logging import log
from leadflow.services.errors import NotFound, ValidationFailed
from leadflow.settings import settings
from leadflow.store import records
from leadflow.store.models import ProductRecord
from leadflow.utils.time import now_ms

IMAGE_FIELDS = ("frontImage", "sideImage", "backImage")


def unreachable_image_urls(urls: List[str]) -> List[str]:
    """HEAD every URL; return the ones that did not answer 2xx."""
    bad: List[str] = []
    with httpx.Client(timeout=settings.IMAGE_CHECK_TIMEOUT_SEC, follow_redirects=True) as client:
        for url in urls:
            try:
                resp = client.head(url)
                if not resp.is_success:
                    bad.append(url)
            except httpx.HTTPError:
                bad.append(url)
    return bad


def submit_batch(
    payload: Dict[str, Any],
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Validate and store one seller's product batch.
    Checks, in order: item schema, batch size, seller exists, msp <= mrp per
    item, and (optionally) image reachability. Nothing is written unless all pass.
    """
    minimum = settings.MINIMUM_PRODUCTS if minimum is None else minimum
    maximum = settings.MAXIMUM_PRODUCTS if maximum is None else maximum

    try:
        batch = ProductBatchRequest.model_validate(payload)
    except ValidationError as e:
        raise ValidationFailed("Validation error", details=validation_details(e))

    count = len(batch.products)
    if count < minimum:
        raise ValidationFailed("Validation error", details=f"Minimum {minimum} products required", count=count)
    if count > maximum:
        raise ValidationFailed("Validation error", details=f"Maximum {maximum} products allowed", count=count)

    seller = records.get_seller(batch.sellerId)
    if seller is None:
        raise NotFound("Seller not found", sellerId=batch.sellerId)

    invalid = [p.name for p in batch.products if p.msp > p.mrp]
    if invalid:
        raise ValidationFailed(
            "Invalid product prices",
            details="MSP cannot be greater than MRP for some products",
            products=invalid,
        )

    if settings.VALIDATE_IMAGE_URLS:
        bad = set(unreachable_image_urls([getattr(p, f) for p in batch.products for f in IMAGE_FIELDS]))
        if bad:
            raise ValidationFailed(
                "Unreachable product images",
                products=[p.name for p in batch.products if any(getattr(p, f) in bad for f in IMAGE_FIELDS)],
            )

    ts = now_ms()
    created = [
        ProductRecord(
            id=records.new_id(),
            name=p.name,
            mrp=p.mrp,
            msp=p.msp,
            frontImage=p.frontImage,
            sideImage=p.sideImage,
            backImage=p.backImage,
            sellerId=seller.id,
            createdAt=ts,
            updatedAt=ts,
        )
        for p in batch.products
    ]
    seller.updatedAt = ts
    records.create_products(seller, created)

    log(event="products_submitted", sellerId=seller.id, count=len(created))
    return {
        "message": "Products created successfully",
        "count": len(created),
        "products": [p.public() for p in created],
    }


def list_for_seller(seller_id: str) -> Dict[str, Any]:
    products = records.list_products(seller_id)
    return {"count": len(products), "products": [p.public() for p in products]}


def delete(product_id: str) -> Dict[str, Any]:
    if not records.delete_product(product_id):
        raise NotFound("Product not found", id=product_id)
    log(event="product_deleted", productId=product_id)
    return {"message": "Product deleted successfully"}
