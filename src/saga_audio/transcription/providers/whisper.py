from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from ...errors import TranscriptionNotConfiguredError
from .base import TranscriptionProvider

logger = logging.getLogger(__name__)


class OpenAIWhisperProvider(TranscriptionProvider):
    """Hosted transcription through the OpenAI audio transcriptions endpoint.

    The SDK client is built lazily so that a missing credential only surfaces
    when a transcript is actually requested. Retries are disabled; callers own
    any retry policy.
    """

    name = "openai"

    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: str = "whisper-1",
        base_url: Optional[str] = None,
        organization: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self._api_key = api_key
        self.model = model
        self._base_url = base_url
        self._organization = organization
        self._timeout = timeout
        self._client = client
        self._owns_client = False

    async def transcribe_file(self, path: str, *, language: str) -> str:
        client = self._ensure_client()
        with open(path, "rb") as audio_file:
            response = await client.audio.transcriptions.create(
                model=self.model,
                file=(os.path.basename(path), audio_file),
                language=language,
                response_format="json",
            )
        return getattr(response, "text", None) or ""

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None
            self._owns_client = False

    def _ensure_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise TranscriptionNotConfiguredError("OPENAI_API_KEY is required for transcription")
            kwargs: Dict[str, Any] = {
                "api_key": self._api_key,
                "base_url": self._base_url,
                "organization": self._organization,
                "max_retries": 0,
            }
            if self._timeout is not None:
                kwargs["timeout"] = self._timeout
            self._client = AsyncOpenAI(**kwargs)
            self._owns_client = True
            logger.debug("transcription.client.created", extra={"model": self.model})
        return self._client
