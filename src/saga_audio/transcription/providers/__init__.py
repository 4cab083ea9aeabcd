"""Transcription provider implementations."""

from .base import TranscriptionProvider
from .factory import build_provider
from .mock import MockTranscriptionProvider
from .whisper import OpenAIWhisperProvider

__all__ = [
    "TranscriptionProvider",
    "MockTranscriptionProvider",
    "OpenAIWhisperProvider",
    "build_provider",
]
