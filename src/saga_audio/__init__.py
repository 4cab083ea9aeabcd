"""Audio cleaning and transcription core for Saga story recordings."""

from .audio import AudioMetadata, AudioProcessingService
from .errors import (
    ConfigurationError,
    ProcessingFailure,
    SagaAudioError,
    TranscriptionFailure,
    TranscriptionNotConfiguredError,
)
from .pipeline import StoryAudioPipeline, StoryAudioResult
from .settings import ServiceConfig, load_config
from .transcription import TranscriptionService, TranscriptResult

__all__ = [
    "AudioProcessingService",
    "AudioMetadata",
    "TranscriptionService",
    "TranscriptResult",
    "StoryAudioPipeline",
    "StoryAudioResult",
    "ServiceConfig",
    "load_config",
    "SagaAudioError",
    "ConfigurationError",
    "ProcessingFailure",
    "TranscriptionFailure",
    "TranscriptionNotConfiguredError",
]
