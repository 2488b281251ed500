# src/app/services/recipe_generation.py
"""
Recipe generation pipeline: quota, validation, model call, bookkeeping.
"""
from __future__ import annotations

import base64
import binascii
import logging
from datetime import datetime, timezone

from src.app.domain.errors import InvalidInputError, RepositoryError
from src.app.domain.models import GenerationRequest, ImageInput, QuotaCheck
from src.app.infra.db.base import RecipeRepository
from src.app.services.quota_service import QuotaService
from src.services.gemini_client import GeminiClient
from src.services.prompt import build_recipe_prompt

logger = logging.getLogger(__name__)

NO_IMAGES_MESSAGE = "No images provided."


def _strip_data_url(data: str) -> str:
    # "data:image/png;base64,AAAA" -> "AAAA"
    if data.startswith("data:") and "," in data:
        return data.split(",", 1)[1]
    return data


def decode_image(image: ImageInput, position: int) -> tuple[str, bytes]:
    mime_type = (image.mime_type or "").strip()
    if not mime_type:
        raise InvalidInputError(f"Image {position} is missing a MIME type.")

    payload = _strip_data_url((image.data or "").strip())
    if not payload:
        raise InvalidInputError(f"Image {position} has no data.")

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidInputError(f"Image {position} is not valid base64.") from exc

    if not raw:
        raise InvalidInputError(f"Image {position} has no data.")
    return mime_type, raw


class RecipeGenerationService:
    """
    Turns photos of ingredients into a saved markdown recipe.

    The quota check and the generation are separate calls so the HTTP layer
    can reject over-quota users before it reads the request body.
    """

    def __init__(
        self,
        quota: QuotaService,
        recipes: RecipeRepository,
        ai_client: GeminiClient,
    ):
        self._quota = quota
        self._recipes = recipes
        self._ai = ai_client

    def check_quota(self, user_id: str) -> QuotaCheck:
        return self._quota.enforce(user_id)

    def generate(self, user_id: str, request: GenerationRequest) -> str:
        """
        Validate the images, ask the model for a recipe and persist it.

        Persistence is best-effort: the recipe text is returned even when
        the usage record or the recipe row could not be written.

        Raises:
            InvalidInputError: No images, or an image without type/data
            UpstreamError: The model endpoint answered with an error
            UpstreamParseError: The model answered without any text
        """
        if not request.images:
            raise InvalidInputError(NO_IMAGES_MESSAGE)

        images = [decode_image(image, index + 1) for index, image in enumerate(request.images)]
        prompt = build_recipe_prompt(
            complexity=request.complexity,
            dietary_preferences=request.dietary_preferences,
            other_preferences=request.other_preferences,
        )

        recipe_text = self._ai.generate_from_images(prompt, images)
        logger.info("Recipe generated: user=%s, images=%d", user_id, len(images))

        self._persist(user_id, recipe_text)
        return recipe_text

    def _persist(self, user_id: str, recipe_text: str) -> None:
        now = datetime.now(timezone.utc)

        try:
            self._quota.record_generation(user_id, now)
        except RepositoryError as error:
            logger.warning("PersistenceWarning: failed to log recipe generation for user=%s: %s", user_id, error)

        try:
            self._recipes.insert(user_id, recipe_text, now)
        except RepositoryError as error:
            logger.warning("PersistenceWarning: failed to save recipe for user=%s: %s", user_id, error)
