from __future__ import annotations

"""Runtime configuration helpers for the Saga audio core."""

import logging
import os
from dataclasses import dataclass


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_optional_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_optional_float(name: str) -> float | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def _env_optional_int(name: str) -> int | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def _env_int(name: str, default: int) -> int:
    parsed = _env_optional_int(name)
    return default if parsed is None else parsed


def _env_log_level(name: str, default: str) -> str:
    value = _env_str(name, default).upper()
    # getLevelName maps known names to their numeric level
    if not isinstance(logging.getLevelName(value), int):
        return default
    return value


@dataclass(frozen=True)
class ServiceConfig:
    """Explicit configuration handed to each service constructor."""

    api_key: str | None = None
    filter_engine_path: str = "ffmpeg"
    probe_path: str = "ffprobe"
    base_url: str | None = None
    organization: str | None = None
    transcription_provider: str = "openai"
    transcription_model: str = "whisper-1"
    default_language: str = "en"
    request_timeout: float | None = None
    max_duration_seconds: float | None = None
    max_size_bytes: int | None = None
    compression_bitrate_kbps: int = 96
    log_level: str = "INFO"


def load_config() -> ServiceConfig:
    """Load configuration from environment variables with sensible defaults."""

    return ServiceConfig(
        api_key=_env_optional_str("OPENAI_API_KEY"),
        filter_engine_path=_env_str("SAGA_FFMPEG_PATH", "ffmpeg"),
        probe_path=_env_str("SAGA_FFPROBE_PATH", "ffprobe"),
        base_url=_env_optional_str("OPENAI_BASE_URL"),
        organization=_env_optional_str("OPENAI_ORG_ID"),
        transcription_provider=_env_str("SAGA_TRANSCRIPTION_PROVIDER", "openai").lower(),
        transcription_model=_env_str("SAGA_TRANSCRIPTION_MODEL", "whisper-1"),
        default_language=_env_str("SAGA_DEFAULT_LANGUAGE", "en"),
        request_timeout=_env_optional_float("SAGA_TRANSCRIPTION_TIMEOUT"),
        max_duration_seconds=_env_optional_float("SAGA_MAX_AUDIO_DURATION_SECONDS"),
        max_size_bytes=_env_optional_int("SAGA_MAX_AUDIO_SIZE_BYTES"),
        compression_bitrate_kbps=_env_int("SAGA_COMPRESSION_BITRATE_KBPS", 96),
        log_level=_env_log_level("SAGA_LOG_LEVEL", "INFO"),
    )


__all__ = ["ServiceConfig", "load_config"]
