# src/app/routers/recipes.py
from __future__ import annotations

import base64
import json

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from src.app.deps import (
    CurrentUser,
    get_current_user,
    get_generation_service,
    get_quota_service,
    get_recipe_repository,
)
from src.app.domain.errors import InvalidInputError
from src.app.infra.db.base import RecipeRepository
from src.app.schemas.recipes import (
    ErrorResponse,
    FavoriteUpdate,
    GenerateRecipeRequest,
    RecipeGenerated,
    RecipeResponse,
    UsageResponse,
)
from src.app.services.quota_service import QuotaService
from src.app.services.recipe_generation import RecipeGenerationService


router = APIRouter(prefix="/recipes", tags=["recipes"])

_FORM_IMAGE_FIELDS = ("images", "image")


def _split_preferences(value: object) -> list[str]:
    if not isinstance(value, str):
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


async def _read_multipart(request: Request) -> dict[str, object]:
    form = await request.form()
    images: list[dict[str, str]] = []
    for field_name, item in form.multi_items():
        if field_name not in _FORM_IMAGE_FIELDS:
            continue
        if not isinstance(item, UploadFile):
            raise InvalidInputError(f"Form field '{field_name}' must be a file upload.")
        raw = await item.read()
        images.append({
            "mimeType": item.content_type or "",
            "data": base64.b64encode(raw).decode("ascii"),
        })

    body: dict[str, object] = {
        "images": images,
        "dietaryPreferences": _split_preferences(form.get("dietaryPreferences")),
    }
    for field_name in ("complexity", "otherPreferences"):
        value = form.get(field_name)
        if isinstance(value, str) and value.strip():
            body[field_name] = value.strip()
    return body


async def _read_json(request: Request) -> dict[str, object]:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError as exc:
        raise InvalidInputError("Request body must be valid JSON.") from exc
    if not isinstance(body, dict):
        raise InvalidInputError("Request body must be a JSON object.")
    return body


async def _read_generation_request(request: Request) -> GenerateRecipeRequest:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        body = await _read_multipart(request)
    else:
        body = await _read_json(request)

    try:
        return GenerateRecipeRequest.model_validate(body)
    except ValidationError as exc:
        raise InvalidInputError(
            "Invalid request body.",
            details=json.loads(exc.json(include_url=False)),
        ) from exc


@router.options("/generate", status_code=status.HTTP_204_NO_CONTENT)
async def generate_recipe_preflight() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/generate",
    response_model=RecipeGenerated,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def generate_recipe(
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    service: RecipeGenerationService = Depends(get_generation_service),
) -> RecipeGenerated:
    # body is read only after auth and quota so those failures win over bad payloads
    await run_in_threadpool(service.check_quota, user.id)
    payload = await _read_generation_request(request)
    recipe = await run_in_threadpool(service.generate, user.id, payload.to_domain())
    return RecipeGenerated(recipe=recipe)


@router.get("/usage", response_model=UsageResponse)
async def get_usage(
    user: CurrentUser = Depends(get_current_user),
    quota: QuotaService = Depends(get_quota_service),
) -> UsageResponse:
    check = await run_in_threadpool(quota.check_quota, user.id)
    return UsageResponse(used=check.used, remaining=check.remaining, dailyLimit=check.daily_limit)


@router.get("/", response_model=list[RecipeResponse])
async def list_recipes(
    user: CurrentUser = Depends(get_current_user),
    recipes: RecipeRepository = Depends(get_recipe_repository),
) -> list[RecipeResponse]:
    records = await run_in_threadpool(recipes.list_by_user, user.id)
    return [RecipeResponse.from_record(record) for record in records]


@router.patch("/{recipe_id}/favorite", response_model=RecipeResponse)
async def set_favorite(
    recipe_id: str,
    payload: FavoriteUpdate,
    user: CurrentUser = Depends(get_current_user),
    recipes: RecipeRepository = Depends(get_recipe_repository),
) -> RecipeResponse:
    record = await run_in_threadpool(recipes.set_favorite, recipe_id, user.id, payload.isFavorite)
    return RecipeResponse.from_record(record)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: str,
    user: CurrentUser = Depends(get_current_user),
    recipes: RecipeRepository = Depends(get_recipe_repository),
) -> Response:
    await run_in_threadpool(recipes.delete, recipe_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
