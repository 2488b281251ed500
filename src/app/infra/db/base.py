# src/app/infra/db/base.py
"""
Abstract base classes for recipe persistence.
These interfaces keep the services testable with in-memory fakes.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from src.app.domain.models import GenerationRecord, RecipeRecord


class GenerationRepository(ABC):
    """
    Append-only log of completed generations, used for quota arithmetic.

    Implementations:
    - SupabaseGenerationRepository: `recipe_generations` table
    """

    @abstractmethod
    def count_since(self, user_id: str, since: datetime) -> int:
        """
        Count generations for a user created at or after `since`.

        Args:
            user_id: The user to count for
            since: Inclusive lower bound on created_at

        Returns:
            Number of matching records
        """
        pass

    @abstractmethod
    def insert(self, user_id: str, created_at: Optional[datetime] = None) -> GenerationRecord:
        """
        Log one generation for the user.

        Args:
            user_id: Owner of the generation
            created_at: Timestamp to store (defaults to now)

        Returns:
            The inserted GenerationRecord
        """
        pass


class RecipeRepository(ABC):
    """
    Storage for generated recipes.

    Implementations:
    - SupabaseRecipeRepository: `recipes` table
    """

    @abstractmethod
    def insert(
        self,
        user_id: str,
        content: str,
        created_at: Optional[datetime] = None,
    ) -> RecipeRecord:
        """
        Save a freshly generated recipe.

        Args:
            user_id: Owner of the recipe
            content: Markdown returned by the model
            created_at: Timestamp to store (defaults to now)

        Returns:
            The created RecipeRecord
        """
        pass

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[RecipeRecord]:
        """Recipes owned by the user, newest first."""
        pass

    @abstractmethod
    def set_favorite(self, recipe_id: str, user_id: str, is_favorite: bool) -> RecipeRecord:
        """
        Update the favorite flag of a recipe owned by the user.

        Raises:
            RecipeNotFoundError: If no such recipe belongs to the user
        """
        pass

    @abstractmethod
    def delete(self, recipe_id: str, user_id: str) -> None:
        """
        Delete a recipe owned by the user.

        Raises:
            RecipeNotFoundError: If no such recipe belongs to the user
        """
        pass
