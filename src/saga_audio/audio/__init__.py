"""Audio cleaning for story recordings."""

from .engine import EngineResult, FilterEngine
from .filters import STORY_FILTER_CHAIN, FilterChain
from .processor import AudioProcessingService
from .types import AudioMetadata, LoudnessMeasurement, SilenceSpan, TrimWindow

__all__ = [
    "AudioProcessingService",
    "FilterEngine",
    "EngineResult",
    "FilterChain",
    "STORY_FILTER_CHAIN",
    "AudioMetadata",
    "LoudnessMeasurement",
    "SilenceSpan",
    "TrimWindow",
]
