from __future__ import annotations

from ...errors import ConfigurationError
from ...settings import ServiceConfig
from .base import TranscriptionProvider
from .mock import MockTranscriptionProvider
from .whisper import OpenAIWhisperProvider


def build_provider(cfg: ServiceConfig) -> TranscriptionProvider:
    lname = (cfg.transcription_provider or "openai").strip().lower()
    if lname in ("mock", "fake"):
        return MockTranscriptionProvider()
    if lname in ("openai", "whisper", "openai_whisper"):
        return OpenAIWhisperProvider(
            api_key=cfg.api_key,
            model=cfg.transcription_model,
            base_url=cfg.base_url,
            organization=cfg.organization,
            timeout=cfg.request_timeout,
        )
    raise ConfigurationError(f"Unsupported transcription provider: {cfg.transcription_provider}")
