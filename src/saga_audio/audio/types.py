from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(slots=True)
class AudioMetadata:
    """Container and stream metadata reported by the probe binary."""

    duration_seconds: float
    format: str
    bitrate: int
    sample_rate: int
    channels: int
    size: int

    @classmethod
    def from_probe(cls, data: Mapping[str, Any], *, size: int) -> "AudioMetadata":
        streams = data.get("streams") or []
        audio_stream = next(
            (stream for stream in streams if stream.get("codec_type") == "audio"),
            None,
        )
        if audio_stream is None:
            raise ValueError("no audio stream found in file")
        fmt = data.get("format") or {}
        duration = _to_float(fmt.get("duration")) or _to_float(audio_stream.get("duration"))
        return cls(
            duration_seconds=duration,
            format=str(fmt.get("format_name") or "unknown"),
            bitrate=int(_to_float(fmt.get("bit_rate"))),
            sample_rate=int(_to_float(audio_stream.get("sample_rate"))),
            channels=int(audio_stream.get("channels") or 0),
            size=size,
        )


@dataclass(slots=True)
class SilenceSpan:
    """A silent interval; ``end`` is None when it runs to the end of the asset."""

    start: float
    end: Optional[float] = None

    @property
    def duration(self) -> Optional[float]:
        if self.end is None:
            return None
        return self.end - self.start


@dataclass(slots=True)
class TrimWindow:
    """Portion of the asset kept by the edge trim stage."""

    start: float = 0.0
    end: Optional[float] = None

    @property
    def is_noop(self) -> bool:
        return self.start <= 0.0 and self.end is None


@dataclass(slots=True)
class LoudnessMeasurement:
    integrated_lufs: float
    true_peak_dbtp: float
    loudness_range_lu: float
    threshold_lufs: float


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
