from __future__ import annotations

import abc
from typing import Optional


class TranscriptionProvider(abc.ABC):
    """Interface for hosted speech-recognition backends."""

    name: str
    model: Optional[str] = None

    @abc.abstractmethod
    async def transcribe_file(self, path: str, *, language: str) -> str:
        """Return the plain-text transcript of the audio file at ``path``."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Allow provider to cleanup resources if needed."""
        return None
