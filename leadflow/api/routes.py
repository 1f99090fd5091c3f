from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from leadflow.api.auth import require_api_key
from leadflow.api.schemas import AuthRequest, DashboardQuery, SellerForm, validation_details
from leadflow.observability.logging import log
from leadflow.services import dashboard as dashboard_service
from leadflow.services import products as product_service
from leadflow.services import sellers as seller_service
from leadflow.services import users as user_service
from leadflow.services.errors import ValidationFailed
from leadflow.storage.s3 import ImageUpload, upload_image

router = APIRouter(prefix="/api", dependencies=[Depends(require_api_key)])


async def read_upload(file: UploadFile) -> ImageUpload:
    return ImageUpload(
        filename=file.filename or "",
        content_type=file.content_type or "",
        data=await file.read(),
    )


@router.post("/auth")
async def auth(payload: Any = Body(None)):
    try:
        body = AuthRequest.model_validate(payload or {})
    except ValidationError as e:
        log(event="auth_invalid", errors=len(e.errors()))
        return JSONResponse(status_code=400, content={"error": "Authentication failed"})
    return await run_in_threadpool(user_service.authenticate, body.name, body.phone)


@router.post("/sellers")
async def create_seller(
    name: str = Form(""),
    phone: str = Form(""),
    gstNumber: str = Form(""),
    userId: str = Form(""),
    shopImage: UploadFile = File(...),
):
    try:
        form = SellerForm(name=name, phone=phone, gstNumber=gstNumber)
    except ValidationError as e:
        raise ValidationFailed("Failed to create seller", details=validation_details(e))
    image = await read_upload(shopImage)
    return await run_in_threadpool(
        seller_service.create_seller, form.name, form.phone, form.gstNumber, userId, image
    )


@router.post("/uploads")
async def upload(file: UploadFile = File(...), folder: str = Form("products")):
    image = await read_upload(file)
    url = await run_in_threadpool(upload_image, image, folder)
    return {"url": url}


@router.post("/products")
async def submit_products(payload: Any = Body(None)):
    if not isinstance(payload, dict):
        raise ValidationFailed("Validation error", details="Expected a JSON object")
    return await run_in_threadpool(product_service.submit_batch, payload)


@router.get("/products")
def list_products(sellerId: Optional[str] = Query(None)):
    if not sellerId:
        return JSONResponse(status_code=400, content={"error": "Seller ID is required"})
    return product_service.list_for_seller(sellerId)


@router.delete("/products")
def delete_product(id: Optional[str] = Query(None)):
    if not id:
        return JSONResponse(status_code=400, content={"error": "Product ID is required"})
    return product_service.delete(id)


@router.get("/dashboard")
def dashboard(request: Request):
    params = {k: v for k, v in request.query_params.items() if v != ""}
    try:
        query = DashboardQuery.model_validate(params)
    except ValidationError as e:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid query parameters", "details": validation_details(e)},
        )
    return dashboard_service.get_dashboard(query)


@router.post("/dashboard")
def analytics(dateRange: Optional[str] = Query(None)):
    try:
        query = DashboardQuery(dateRange=dateRange)
    except ValidationError as e:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid query parameters", "details": validation_details(e)},
        )
    return dashboard_service.get_analytics(query.dateRange)
