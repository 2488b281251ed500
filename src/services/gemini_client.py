from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx
from google import genai
from google.genai import types
from google.genai.errors import APIError

from src.services.errors import GeminiConfigurationError, UpstreamError, UpstreamParseError

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "gemini-2.5-flash"


def extract_text(response: Any) -> Optional[str]:
    """First non-empty text part of the first candidate that has one."""
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            if getattr(part, "thought", False):
                continue
            text = getattr(part, "text", None)
            if text and text.strip():
                return text
    return None


class GeminiClient:
    def __init__(
        self,
        api_key: str,
        model_name: str = DEFAULT_MODEL_NAME,
        timeout_seconds: Optional[float] = None,
        client: Optional[genai.Client] = None,
    ) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self._client = client or self._create_client()

    def _create_client(self) -> genai.Client:
        if not self.api_key:
            raise GeminiConfigurationError("Missing Google API key.")
        http_options = None
        if self.timeout_seconds:
            # HttpOptions.timeout is expressed in milliseconds
            http_options = types.HttpOptions(timeout=int(self.timeout_seconds * 1000))
        return genai.Client(api_key=self.api_key, http_options=http_options)

    def _build_contents(
        self,
        prompt: str,
        images: Sequence[tuple[str, bytes]],
    ) -> list[types.Content]:
        parts = [types.Part.from_text(text=prompt)]
        parts.extend(
            types.Part.from_bytes(data=data, mime_type=mime_type)
            for mime_type, data in images
        )
        return [types.Content(role="user", parts=parts)]

    def generate_from_images(
        self,
        prompt: str,
        images: Sequence[tuple[str, bytes]],
    ) -> str:
        contents = self._build_contents(prompt, images)

        try:
            response = self._client.models.generate_content(
                model=self.model_name,
                contents=contents,
            )
        except APIError as err:
            logger.error("Gemini returned an error: code=%s status=%s", err.code, err.status)
            raise UpstreamError(err.code, err.details or err.message) from err
        except httpx.HTTPError as err:
            logger.error("Network error calling Gemini: %s", err)
            raise UpstreamError(None, str(err)) from err

        text = extract_text(response)
        if not text:
            logger.error("Gemini response did not include text content")
            raise UpstreamParseError()
        return text
