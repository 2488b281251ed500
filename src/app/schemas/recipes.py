from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.app.domain.models import Complexity, GenerationRequest, ImageInput, RecipeRecord


class ImagePayload(BaseModel):
    mimeType: str = ""
    data: str = ""


class GenerateRecipeRequest(BaseModel):
    images: Optional[list[ImagePayload]] = None
    complexity: Optional[Complexity] = None
    dietaryPreferences: list[str] = Field(default_factory=list)
    otherPreferences: Optional[str] = Field(default=None, max_length=1000)

    def to_domain(self) -> GenerationRequest:
        return GenerationRequest(
            images=[ImageInput(mime_type=img.mimeType, data=img.data) for img in self.images or []],
            complexity=self.complexity,
            dietary_preferences=list(self.dietaryPreferences),
            other_preferences=self.otherPreferences,
        )


class RecipeGenerated(BaseModel):
    recipe: str


class RecipeResponse(BaseModel):
    id: str
    title: str
    content: str
    isFavorite: bool = False
    createdAt: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: RecipeRecord) -> "RecipeResponse":
        return cls(
            id=record.id,
            title=record.title,
            content=record.content,
            isFavorite=record.is_favorite,
            createdAt=record.created_at,
        )


class FavoriteUpdate(BaseModel):
    isFavorite: bool


class UsageResponse(BaseModel):
    used: int = Field(..., description="Recipes generated today (UTC)")
    remaining: int = Field(..., description="Recipes left today")
    dailyLimit: int = Field(..., description="Daily generation limit")


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None
