from __future__ import annotations

from .base import TranscriptionProvider


class MockTranscriptionProvider(TranscriptionProvider):
    name = "mock"
    model = "mock"

    def __init__(self, text: str = "mock transcription") -> None:
        self._text = text

    async def transcribe_file(self, path: str, *, language: str) -> str:
        return self._text
