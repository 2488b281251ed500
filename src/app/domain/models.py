# src/app/domain/models.py
"""
Domain models for recipe generation.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

UNTITLED_RECIPE = "Untitled Recipe"


class Complexity(str, Enum):
    """How ambitious the generated recipe should be."""
    SIMPLE = "Simple"
    NORMAL = "Normal"
    EXPERT = "Expert"


@dataclass
class ImageInput:
    """One uploaded photo, still base64 encoded."""
    mime_type: str
    data: str


@dataclass
class GenerationRequest:
    """Everything the model needs to write one recipe."""
    images: list[ImageInput]
    complexity: Optional[Complexity] = None
    dietary_preferences: list[str] = field(default_factory=list)
    other_preferences: Optional[str] = None


@dataclass
class GenerationRecord:
    """Append-only usage row, used only for quota arithmetic."""
    user_id: str
    created_at: datetime


@dataclass
class RecipeRecord:
    """A generated recipe saved in the user's recipe book."""
    id: str
    user_id: str
    content: str
    created_at: Optional[datetime] = None
    is_favorite: bool = False

    @property
    def title(self) -> str:
        """First markdown H1 of the recipe, or a placeholder."""
        for line in self.content.split("\n"):
            if line.startswith("# "):
                return line[2:].strip()
        return UNTITLED_RECIPE


@dataclass
class QuotaCheck:
    """Result of a quota check operation."""
    allowed: bool
    used: int
    remaining: int
    daily_limit: int
    reason: Optional[str] = None
