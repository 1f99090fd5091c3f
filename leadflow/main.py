from fastapi import FastAPI
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from leadflow.api.routes import router
from leadflow.api.form_routes import router as form_router
from leadflow.core.errors import FormError
from leadflow.observability.logging import log
from leadflow.services.errors import ServiceError
from leadflow.settings import settings

settings.validate_capacity()

app = FastAPI(title="Lead Collection API")

origins = [x.strip() for x in settings.CORS_ORIGINS.split(",") if x.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
app.include_router(form_router)


@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "Lead collection API is running. Start a wizard at /form/{sessionId}.",
    }


@app.get("/health")
def health():
    return {"status": "ok"}


@app.exception_handler(FormError)
async def form_error_handler(request: Request, exc: FormError):
    log(event="form_error", path=request.url.path, code=exc.code, status=exc.status_code, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Same shape as ValidationFailed
    errors = jsonable_encoder(exc.errors())
    log(event="request_invalid", path=request.url.path, errors=len(errors))
    return JSONResponse(status_code=400, content={"error": "Validation error", "details": errors})


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    log(event="service_error", path=request.url.path, error=exc.error, status=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


log(
    event="boot",
    minimumProducts=settings.MINIMUM_PRODUCTS,
    maximumProducts=settings.MAXIMUM_PRODUCTS,
    validateImageUrls=settings.VALIDATE_IMAGE_URLS,
)
