# src/app/deps.py (singletons exposed as FastAPI dependencies)

from __future__ import annotations

import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
from supabase import Client, create_client

from src.app.config import settings
from src.app.domain.errors import UnauthenticatedError
from src.app.infra.db.supabase_recipes_repo import (
    SupabaseGenerationRepository,
    SupabaseRecipeRepository,
)
from src.app.services.quota_service import QuotaService
from src.app.services.recipe_generation import RecipeGenerationService
from src.services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

MISSING_AUTH_MESSAGE = "Missing authorization header."
INVALID_TOKEN_MESSAGE = "Invalid or expired token."

_client: Client | None = None
_gemini: GeminiClient | None = None


def get_supabase() -> Client:
    global _client
    if _client is None:
        _client = create_client(str(settings.SUPABASE_URL),
                                settings.SUPABASE_SERVICE_ROLE_KEY)
    return _client


def get_gemini_client() -> GeminiClient:
    global _gemini
    if _gemini is None:
        _gemini = GeminiClient(
            api_key=settings.GEMINI_API_KEY.get_secret_value(),
            model_name=settings.GEMINI_MODEL,
            timeout_seconds=settings.GEMINI_TIMEOUT_SECONDS,
        )
    return _gemini


auth_scheme = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None


async def get_current_user(
    request: Request,
    cred: HTTPAuthorizationCredentials | None = Depends(auth_scheme),
    supa: Client = Depends(get_supabase),
) -> CurrentUser:
    """
    Receives Authorization: Bearer <access_token> issued by Supabase,
    validates it against GoTrue and returns the minimal user data.
    """
    if not request.headers.get("Authorization"):
        raise UnauthenticatedError(MISSING_AUTH_MESSAGE)
    if cred is None or cred.scheme.lower() != "bearer" or not cred.credentials:
        raise UnauthenticatedError(INVALID_TOKEN_MESSAGE)

    try:
        res = await run_in_threadpool(supa.auth.get_user, cred.credentials)
    except Exception as exc:
        logger.info("Token rejected by auth provider: %s", type(exc).__name__)
        raise UnauthenticatedError(INVALID_TOKEN_MESSAGE) from exc

    user = res.user if res else None
    if not user:
        raise UnauthenticatedError(INVALID_TOKEN_MESSAGE)

    name = None
    meta = getattr(user, "user_metadata", None) or {}
    if isinstance(meta, dict):
        name = meta.get("name")

    return CurrentUser(id=str(user.id), email=user.email, name=name)


def get_quota_service(supa: Client = Depends(get_supabase)) -> QuotaService:
    return QuotaService(
        repository=SupabaseGenerationRepository(supa),
        daily_limit=settings.RECIPE_DAILY_LIMIT,
    )


def get_recipe_repository(supa: Client = Depends(get_supabase)) -> SupabaseRecipeRepository:
    return SupabaseRecipeRepository(supa)


def get_generation_service(
    quota: QuotaService = Depends(get_quota_service),
    recipes: SupabaseRecipeRepository = Depends(get_recipe_repository),
) -> RecipeGenerationService:
    return RecipeGenerationService(
        quota=quota,
        recipes=recipes,
        ai_client=get_gemini_client(),
    )
