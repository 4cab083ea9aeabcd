from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TranscriptResult(BaseModel):
    """Recognised story text plus the provenance the story schema records."""

    text: str
    language: Optional[str] = None
    provider: str
    model: Optional[str] = None
    generated_at: datetime = Field(default_factory=_utcnow)
    word_count: int = Field(default=0, ge=0)
    # The hosted model reports neither; kept so callers can persist the columns.
    confidence: Optional[float] = None
    diarized: bool = False

    @field_validator("text")
    @classmethod
    def text_must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("transcript text must not be empty")
        return v
