from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol

from openai import OpenAI, OpenAIError

from .config import Settings
from .errors import ProviderError

logger = logging.getLogger(__name__)

Message = Dict[str, str]


class CompletionProvider(Protocol):
    def complete(self, messages: List[Message], temperature: float, max_tokens: int) -> str:
        ...


def _build_client(settings: Settings) -> Optional[OpenAI]:
    if not settings.openai_api_key:
        return None
    return OpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        max_retries=0,
    )


class OpenAIProvider:
    """Chat-completion provider backed by the OpenAI SDK.

    ``OPENAI_BASE_URL`` lets the same client talk to OpenAI-compatible
    endpoints (Groq, local gateways). Requests are never retried.
    """

    def __init__(self, settings: Settings, client: Optional[OpenAI] = None):
        self.model = settings.openai_model
        self._client = client if client is not None else _build_client(settings)
        if self._client is None:
            logger.warning("OPENAI_API_KEY is not configured; completion requests will fail")

    def complete(self, messages: List[Message], temperature: float, max_tokens: int) -> str:
        if self._client is None:
            raise ProviderError("OPENAI_API_KEY is not configured")

        try:
            completion = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as exc:
            raise ProviderError(f"completion request failed: {exc}") from exc

        if not completion.choices:
            raise ProviderError("completion returned no choices")
        return completion.choices[0].message.content or ""
