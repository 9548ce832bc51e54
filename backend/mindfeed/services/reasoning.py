"""
Thin async wrapper around the OpenAI Chat Completions API.

Both calls raise EnrichmentUnavailable on any failure; callers decide how to degrade.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional

from openai import AsyncOpenAI, OpenAIError

from mindfeed.config import settings
from mindfeed.errors import EnrichmentUnavailable

logger = logging.getLogger(__name__)


class ReasoningClient:
    """Structured and free-text generation against one chat model."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self.temperature = temperature if temperature is not None else settings.OPENAI_TEMPERATURE
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> AsyncOpenAI:
        """Create the OpenAI client only when needed and an API key is available."""
        if self._client is None:
            if not self.api_key:
                raise EnrichmentUnavailable("OPENAI_API_KEY is not configured")
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def aclose(self) -> None:
        """Close the underlying OpenAI client if this wrapper created it."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    async def _complete(self, messages: list, **kwargs: Any) -> str:
        client = self._get_client()
        start_time = time.perf_counter()
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                **kwargs,
            )
        except OpenAIError as e:
            raise EnrichmentUnavailable(f"{type(e).__name__}: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise EnrichmentUnavailable("Empty response from reasoning service")

        logger.info(
            "Reasoning call to %s finished in %.0fms (%d chars)",
            self.model, (time.perf_counter() - start_time) * 1000, len(content),
        )
        return content.strip()

    async def generate_json(self, system_prompt: str, payload: Any, schema: Dict[str, Any]) -> Any:
        """
        Run a structured-generation call.

        Args:
            system_prompt: Instruction describing the task and profile
            payload: JSON-serializable user content
            schema: JSON schema the response must follow

        Returns:
            The decoded JSON response
        """
        content = await self._complete(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": json.dumps(payload, ensure_ascii=False)},
            ],
            response_format={
                "type": "json_schema",
                "json_schema": {"name": "story_annotations", "schema": schema, "strict": True},
            },
        )
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise EnrichmentUnavailable(f"Unparsable JSON from reasoning service: {e}") from e

    async def generate_text(self, prompt: str) -> str:
        """Run a schema-free completion and return its text."""
        return await self._complete([{"role": "user", "content": prompt}])
