"""Async wrapper around the Gemini API for insight generation."""

import logging
from typing import Optional

import httpx
from google import genai
from google.genai import errors, types

from services.config import settings
from services.exceptions import UpstreamError

logger = logging.getLogger(__name__)


def _create_client(api_key: Optional[str] = None) -> genai.Client:
    api_key = api_key or settings.GOOGLE_API_KEY
    if not api_key:
        raise EnvironmentError(
            "GOOGLE_API_KEY environment variable is not set. "
            "Get an API key at https://aistudio.google.com/apikey"
        )
    return genai.Client(api_key=api_key)


class InsightModelClient:
    """Sends one prompt to the model and returns its text answer.

    The SDK client is created on first use so the service can start without
    credentials; generation then fails with `UpstreamError`.
    """

    def __init__(
        self,
        client: Optional[genai.Client] = None,
        *,
        model: str = settings.INSIGHTS_MODEL,
        api_key: Optional[str] = None,
        timeout: float = settings.INSIGHTS_MODEL_TIMEOUT,
    ):
        self._client = client
        self._api_key = api_key
        self.model = model
        self.timeout = timeout

    def _get_client(self) -> genai.Client:
        if self._client is None:
            try:
                self._client = _create_client(self._api_key)
            except EnvironmentError as e:
                raise UpstreamError(str(e)) from e
        return self._client

    async def generate(self, prompt: str, *, max_tokens: int) -> str:
        """Single, non-retried generation call, bounded by `self.timeout` seconds."""
        client = self._get_client()
        logger.info("Calling %s (max_tokens=%d, prompt_chars=%d)", self.model, max_tokens, len(prompt))
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    max_output_tokens=max_tokens,
                    # SDK timeouts are in milliseconds
                    http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
                ),
            )
        except errors.APIError as e:
            logger.error("Insight model error %s: %s", e.code, e.message)
            raise UpstreamError(f"Insight model error: {e.code}") from e
        except httpx.HTTPError as e:
            logger.error("Insight model unreachable: %s", e)
            raise UpstreamError(f"Insight model unreachable: {e}") from e

        text = response.text
        if not text:
            raise UpstreamError("Insight model returned an empty response")
        return text
