from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from postgrest.exceptions import APIError as PostgrestAPIError
from supabase import Client

from src.app.domain.errors import RecipeNotFoundError, RepositoryError
from src.app.domain.models import GenerationRecord, RecipeRecord
from src.app.infra.db.base import GenerationRepository, RecipeRepository

logger = logging.getLogger(__name__)

_DB_ERRORS = (PostgrestAPIError, httpx.HTTPError, ConnectionError, TimeoutError)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None

    try:
        normalized = value.replace("Z", "+00:00") if value.endswith("Z") else value
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _error_reason(error: Exception) -> str:
    return getattr(error, "message", None) or str(error)


def _row_to_recipe(row: dict[str, object]) -> RecipeRecord:
    return RecipeRecord(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        content=str(row.get("content") or ""),
        created_at=_parse_datetime(row.get("created_at")),
        is_favorite=bool(row.get("is_favorite", False)),
    )


class SupabaseGenerationRepository(GenerationRepository):
    TABLE_NAME = "recipe_generations"

    def __init__(self, client: Client):
        self._client = client

    def count_since(self, user_id: str, since: datetime) -> int:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("*", count="exact", head=True)
                .eq("user_id", user_id)
                .gte("created_at", since.isoformat())
                .execute()
            )
        except _DB_ERRORS as error:
            logger.error("Error counting generations for user=%s: %s", user_id, error)
            raise RepositoryError("count generations", _error_reason(error)) from error

        return int(result.count or 0)

    def insert(self, user_id: str, created_at: Optional[datetime] = None) -> GenerationRecord:
        now = created_at or _now_utc()
        try:
            self._client.table(self.TABLE_NAME).insert(
                {"user_id": user_id, "created_at": now.isoformat()}
            ).execute()
        except _DB_ERRORS as error:
            raise RepositoryError("insert generation", _error_reason(error)) from error

        return GenerationRecord(user_id=user_id, created_at=now)


class SupabaseRecipeRepository(RecipeRepository):
    TABLE_NAME = "recipes"

    def __init__(self, client: Client):
        self._client = client

    def insert(
        self,
        user_id: str,
        content: str,
        created_at: Optional[datetime] = None,
    ) -> RecipeRecord:
        now = created_at or _now_utc()
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .insert({"user_id": user_id, "content": content, "created_at": now.isoformat()})
                .execute()
            )
        except _DB_ERRORS as error:
            raise RepositoryError("insert recipe", _error_reason(error)) from error

        if not result.data:
            raise RepositoryError("insert recipe", "no row returned")
        return _row_to_recipe(result.data[0])

    def list_by_user(self, user_id: str) -> list[RecipeRecord]:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except _DB_ERRORS as error:
            logger.error("Error listing recipes for user=%s: %s", user_id, error)
            raise RepositoryError("list recipes", _error_reason(error)) from error

        return [_row_to_recipe(row) for row in (result.data or [])]

    def set_favorite(self, recipe_id: str, user_id: str, is_favorite: bool) -> RecipeRecord:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .update({"is_favorite": is_favorite})
                .eq("id", recipe_id)
                .eq("user_id", user_id)
                .execute()
            )
        except _DB_ERRORS as error:
            logger.error("Error updating favorite: recipe=%s: %s", recipe_id, error)
            raise RepositoryError("update favorite", _error_reason(error)) from error

        if not result.data:
            raise RecipeNotFoundError(recipe_id)
        return _row_to_recipe(result.data[0])

    def delete(self, recipe_id: str, user_id: str) -> None:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .delete()
                .eq("id", recipe_id)
                .eq("user_id", user_id)
                .execute()
            )
        except _DB_ERRORS as error:
            logger.error("Error deleting recipe=%s: %s", recipe_id, error)
            raise RepositoryError("delete recipe", _error_reason(error)) from error

        if not result.data:
            raise RecipeNotFoundError(recipe_id)
        logger.info("Recipe deleted: id=%s, user=%s", recipe_id, user_id)
