"""Speech-to-text for processed story recordings."""

from .languages import SUPPORTED_LANGUAGES
from .service import TranscriptionService, normalize_language
from .types import TranscriptResult

__all__ = ["TranscriptionService", "TranscriptResult", "SUPPORTED_LANGUAGES", "normalize_language"]
