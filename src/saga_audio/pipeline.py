from __future__ import annotations

"""Chains audio cleaning and transcription for a single story recording."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .audio import AudioMetadata, AudioProcessingService
from .settings import ServiceConfig
from .transcription import TranscriptionService, TranscriptResult

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StoryAudioResult:
    output_path: str
    metadata: AudioMetadata
    transcript: TranscriptResult

    def to_story_fields(self) -> Dict[str, Any]:
        """Column values for the story row that owns this recording."""
        return {
            "transcript": self.transcript.text,
            "transcript_confidence": self.transcript.confidence,
            "transcript_provider": self.transcript.provider,
            "transcript_generated_at": self.transcript.generated_at.isoformat(),
            "transcript_word_count": self.transcript.word_count,
            "has_diarization": self.transcript.diarized,
            "duration_seconds": self.metadata.duration_seconds,
        }


class StoryAudioPipeline:
    def __init__(self, processor: AudioProcessingService, transcriber: TranscriptionService) -> None:
        self._processor = processor
        self._transcriber = transcriber

    @classmethod
    def from_config(cls, cfg: ServiceConfig) -> "StoryAudioPipeline":
        return cls(AudioProcessingService(cfg), TranscriptionService(cfg))

    async def run(self, input_path: str, output_path: str, language: Optional[str] = None) -> StoryAudioResult:
        """Clean ``input_path`` into ``output_path`` and transcribe the result.

        Failures of either step propagate unchanged; the source recording is
        never touched.
        """

        logger.info("pipeline.start", extra={"input": input_path, "output": output_path})
        await self._processor.process_audio(input_path, output_path)
        metadata = await self._processor.probe(output_path)
        transcript = await self._transcriber.transcribe_result(output_path, language)
        logger.info(
            "pipeline.complete",
            extra={
                "output": output_path,
                "duration_seconds": metadata.duration_seconds,
                "word_count": transcript.word_count,
            },
        )
        return StoryAudioResult(output_path=output_path, metadata=metadata, transcript=transcript)

    async def aclose(self) -> None:
        await self._transcriber.aclose()


__all__ = ["StoryAudioPipeline", "StoryAudioResult"]
