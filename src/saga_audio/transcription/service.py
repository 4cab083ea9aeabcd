from __future__ import annotations

import logging
import os
from typing import Dict, Optional

from ..errors import TranscriptionFailure
from ..settings import ServiceConfig
from .languages import SUPPORTED_LANGUAGES
from .providers.base import TranscriptionProvider
from .providers.factory import build_provider
from .types import TranscriptResult

logger = logging.getLogger(__name__)


def normalize_language(value: Optional[str], default: str = "en") -> str:
    """Reduce a language hint such as ``en-US`` to its ISO-639-1 code."""

    raw = (value or default or "en").strip().lower().replace("_", "-")
    primary = raw.split("-", 1)[0]
    if primary not in SUPPORTED_LANGUAGES:
        raise TranscriptionFailure(f"unsupported language hint: {value!r}")
    return primary


class TranscriptionService:
    """Obtains plain-text transcripts from a hosted speech model."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        provider: Optional[TranscriptionProvider] = None,
    ) -> None:
        self._config = config or ServiceConfig()
        self._provider = provider or build_provider(self._config)

    @property
    def provider(self) -> TranscriptionProvider:
        return self._provider

    async def transcribe(self, audio_path: str, language: Optional[str] = None) -> str:
        result = await self.transcribe_result(audio_path, language)
        return result.text

    async def transcribe_result(self, audio_path: str, language: Optional[str] = None) -> TranscriptResult:
        """Transcribe ``audio_path`` and return the text with its provenance.

        Every failure, including a missing credential, an HTTP error from the
        hosted model or an empty transcript, is raised as TranscriptionFailure.
        Nothing is retried.
        """

        path = os.fspath(audio_path)
        lang = normalize_language(language, self._config.default_language)
        if not os.path.isfile(path):
            raise TranscriptionFailure(f"audio file not found: {path}")

        provider_name = self._provider.name
        logger.info(
            "transcription.start",
            extra={"path": path, "language": lang, "provider": provider_name},
        )
        try:
            text = await self._provider.transcribe_file(path, language=lang)
        except TranscriptionFailure as exc:
            logger.warning(
                "transcription.error",
                extra={"provider": provider_name, "error": exc.diagnostic},
            )
            raise
        except Exception as exc:
            logger.warning(
                "transcription.error",
                extra={"provider": provider_name, "error": repr(exc)},
            )
            raise TranscriptionFailure(str(exc) or exc.__class__.__name__) from exc

        text = (text or "").strip()
        if not text:
            raise TranscriptionFailure("speech model returned an empty transcript")

        result = TranscriptResult(
            text=text,
            language=lang,
            provider=provider_name,
            model=self._provider.model,
            word_count=len(text.split()),
        )
        logger.info(
            "transcription.complete",
            extra={"path": path, "provider": provider_name, "word_count": result.word_count},
        )
        return result

    @staticmethod
    def supported_languages() -> Dict[str, str]:
        """ISO-639-1 codes accepted as language hints, with their English names."""
        return dict(SUPPORTED_LANGUAGES)

    async def aclose(self) -> None:
        await self._provider.aclose()


__all__ = ["TranscriptionService", "normalize_language"]
