"""Error types surfaced by the audio core."""

from __future__ import annotations


class SagaAudioError(RuntimeError):
    """Base class for terminal failures of a single audio request."""

    def __init__(self, diagnostic: str) -> None:
        super().__init__(diagnostic)
        self.diagnostic = diagnostic


class ConfigurationError(SagaAudioError, ValueError):
    """Raised when a service is built from an unusable configuration."""


class ProcessingFailure(SagaAudioError):
    """Raised when the filter engine cannot read, filter or write an asset."""


class TranscriptionFailure(SagaAudioError):
    """Raised when the hosted speech model call fails."""


class TranscriptionNotConfiguredError(TranscriptionFailure):
    """Raised when transcribing without a credential for the hosted model."""


__all__ = [
    "SagaAudioError",
    "ConfigurationError",
    "ProcessingFailure",
    "TranscriptionFailure",
    "TranscriptionNotConfiguredError",
]
