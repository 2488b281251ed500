# src/app/main.py
from __future__ import annotations
import logging
import sys
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.app.config import settings
from src.app.domain.errors import (
    AccountDeletionError,
    InvalidInputError,
    QuotaExceededError,
    RecipeNotFoundError,
    RecipeServiceError,
    RepositoryError,
    UnauthenticatedError,
)
from src.app.routers.auth import router as auth_router
from src.app.routers.recipes import router as recipes_router
from src.services.errors import ServiceError, UpstreamError, UpstreamParseError

# Plain stdout logging (fine for dev and containers)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

_STATUS_BY_ERROR: dict[type[Exception], int] = {
    UnauthenticatedError: status.HTTP_401_UNAUTHORIZED,
    QuotaExceededError: status.HTTP_429_TOO_MANY_REQUESTS,
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    RecipeNotFoundError: status.HTTP_404_NOT_FOUND,
    RepositoryError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    AccountDeletionError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    UpstreamError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    UpstreamParseError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class PreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that answers accepted preflights with an empty 204."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers=request_headers)
        if response.status_code != status.HTTP_200_OK:
            return response
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)


def _status_for(exc: Exception) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_BY_ERROR:
            return _STATUS_BY_ERROR[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(status_code: int, message: str, details: object | None = None) -> JSONResponse:
    content: dict[str, object] = {"error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


app = FastAPI(title="Recipe Lens API", version="0.1.0")

app.add_middleware(
    PreflightCORSMiddleware,
    allow_origins=settings.FRONTEND_CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=CORS_ALLOW_HEADERS,
)

app.include_router(recipes_router)
app.include_router(auth_router)


@app.exception_handler(RecipeServiceError)
async def handle_domain_error(request: Request, exc: RecipeServiceError) -> JSONResponse:
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error("Request failed: %s %s: %s", request.method, request.url.path, exc)
    return _error_response(status_code, str(exc), getattr(exc, "details", None))


@app.exception_handler(ServiceError)
async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    details = None
    if isinstance(exc, UpstreamError):
        details = {"status": exc.status, "body": exc.body}
    logger.error("AI request failed: %s %s: %s", request.method, request.url.path, exc)
    return _error_response(_status_for(exc), str(exc), details)


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body.", details)


@app.get("/health")
def health():
    return {"ok": True}
