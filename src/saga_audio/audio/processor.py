from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import numpy as np
import soundfile as sf

from ..errors import ProcessingFailure
from ..settings import ServiceConfig
from .engine import FilterEngine
from .filters import (
    EDGE_TOLERANCE_SECONDS,
    STORY_FILTER_CHAIN,
    FilterChain,
    edge_trim_window,
    parse_loudness_report,
    parse_silence_spans,
)
from .types import AudioMetadata, LoudnessMeasurement, SilenceSpan

logger = logging.getLogger(__name__)

# MP4-family containers get their index moved to the front for progressive playback.
FASTSTART_SUFFIXES = frozenset({".m4a", ".m4b", ".mp4", ".mov"})

TARGET_CODECS = {"mp3": "libmp3lame", "aac": "aac"}


class AudioProcessingService:
    """Cleans raw story recordings before transcription and storage."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        engine: Optional[FilterEngine] = None,
        chain: FilterChain = STORY_FILTER_CHAIN,
    ) -> None:
        self._config = config or ServiceConfig()
        self._engine = engine or FilterEngine.from_config(self._config)
        self._chain = chain

    @property
    def chain(self) -> FilterChain:
        return self._chain

    async def process_audio(self, input_path: str, output_path: str) -> None:
        """Apply the story filter chain to ``input_path`` and write ``output_path``.

        The render goes to a temporary sibling of ``output_path`` that is moved
        into place only once the engine succeeds, so a failed call never leaves
        a partial file at the destination. When ``max_size_bytes`` is configured
        and the render is larger, it is downmixed to mono at the compression
        bitrate before being moved into place.

        Raises:
            ProcessingFailure: if the source cannot be read, is also the
                destination, exceeds the configured duration limit, or the
                engine fails.
        """

        source = os.fspath(input_path)
        destination = os.fspath(output_path)
        _require_readable(source)
        _require_distinct(source, destination)

        logger.info("audio.process.start", extra={"input": source, "output": destination})
        metadata = await self.probe(source)
        max_duration = self._config.max_duration_seconds
        if max_duration and metadata.duration_seconds > max_duration:
            raise ProcessingFailure(
                f"audio duration {metadata.duration_seconds:.1f}s exceeds maximum allowed ({max_duration:g} seconds)"
            )

        spans = await self.detect_silence(source)
        window = edge_trim_window(spans, metadata.duration_seconds)
        if spans and window.is_noop and spans[0].start <= EDGE_TOLERANCE_SECONDS:
            logger.warning("audio.process.all_silent", extra={"input": source})

        render = ["-vn", "-af", self._chain.render(window)]
        if metadata.sample_rate > 0:
            render.extend(["-ar", str(metadata.sample_rate)])
        with _staged_output(destination) as staged:
            await self._engine.run(_output_args(source, render, staged))
            compressed = await self._enforce_size_limit(staged)

        logger.info(
            "audio.process.complete",
            extra={
                "input": source,
                "output": destination,
                "trim_start": window.start,
                "trim_end": window.end,
                "compressed": compressed,
            },
        )

    async def probe(self, path: str) -> AudioMetadata:
        path = os.fspath(path)
        _require_readable(path)
        data = await self._engine.probe(path)
        try:
            return AudioMetadata.from_probe(data, size=os.path.getsize(path))
        except ValueError as exc:
            raise ProcessingFailure(f"{exc}: {path}") from exc

    async def validate(self, path: str) -> bool:
        """Return True when ``path`` is a usable recording."""
        try:
            metadata = await self.probe(path)
        except ProcessingFailure:
            return False
        if metadata.duration_seconds <= 0 or not metadata.format:
            return False
        max_duration = self._config.max_duration_seconds
        if max_duration and metadata.duration_seconds > max_duration:
            return False
        return True

    async def detect_silence(self, path: str) -> List[SilenceSpan]:
        path = os.fspath(path)
        _require_readable(path)
        result = await self._engine.run(
            ["-i", path, "-af", self._chain.analysis_graph(), "-f", "null", "-"]
        )
        return parse_silence_spans(result.stderr)

    async def measure_loudness(self, path: str) -> LoudnessMeasurement:
        path = os.fspath(path)
        _require_readable(path)
        result = await self._engine.run(
            ["-i", path, "-af", self._chain.loudness_graph(), "-f", "null", "-"]
        )
        try:
            return parse_loudness_report(result.stderr)
        except ValueError as exc:
            raise ProcessingFailure(str(exc)) from exc

    async def compress_audio(
        self, input_path: str, output_path: str, bitrate_kbps: Optional[int] = None
    ) -> AudioMetadata:
        """Downmix to mono at ``bitrate_kbps`` (the configured default when omitted)."""
        bitrate = bitrate_kbps or self._config.compression_bitrate_kbps
        return await self._transcode(input_path, output_path, _compression_args(bitrate))

    async def convert_audio(
        self, input_path: str, output_path: str, target_format: str, bitrate_kbps: int = 128
    ) -> AudioMetadata:
        codec = TARGET_CODECS.get(target_format.lower())
        if codec is None:
            raise ProcessingFailure(f"unsupported target format: {target_format}")
        return await self._transcode(
            input_path, output_path, ["-vn", "-c:a", codec, "-b:a", f"{bitrate_kbps}k"]
        )

    async def optimize_for_streaming(self, input_path: str, output_path: str) -> AudioMetadata:
        """Remux an MP4-family asset with its index first; samples are copied as-is."""
        if Path(os.fspath(output_path)).suffix.lower() not in FASTSTART_SUFFIXES:
            raise ProcessingFailure(f"streaming layout needs an MP4-family container: {output_path}")
        return await self._transcode(input_path, output_path, ["-map", "0:a", "-c", "copy"])

    async def waveform(self, path: str, points: int = 100) -> List[float]:
        """Peak envelope of ``path`` for playback UIs.

        Returns up to ``points`` values in ``[0, 1]``, one per equal slice of
        the decoded mono signal. Shorter assets yield one value per sample.
        """

        if points < 1:
            raise ValueError("points must be at least 1")
        path = os.fspath(path)
        _require_readable(path)

        fd, pcm_path = tempfile.mkstemp(prefix=".waveform.", suffix=".wav")
        os.close(fd)
        try:
            await self._engine.run(["-y", "-i", path, "-vn", "-ac", "1", "-c:a", "pcm_s16le", pcm_path])
            try:
                samples, _ = sf.read(pcm_path, dtype="float32", always_2d=False)
            except RuntimeError as exc:
                raise ProcessingFailure(f"cannot decode waveform for {path}: {exc}") from exc
        finally:
            _discard(pcm_path)
        return _peak_envelope(samples, points)

    async def _transcode(self, input_path: str, output_path: str, args: Sequence[str]) -> AudioMetadata:
        source = os.fspath(input_path)
        destination = os.fspath(output_path)
        _require_readable(source)
        _require_distinct(source, destination)
        with _staged_output(destination) as staged:
            await self._engine.run(_output_args(source, args, staged))
        return await self.probe(destination)

    async def _enforce_size_limit(self, path: str) -> bool:
        limit = self._config.max_size_bytes
        if not limit:
            return False
        size = os.path.getsize(path)
        if size <= limit:
            return False
        logger.info("audio.process.compress", extra={"path": path, "size": size, "limit": limit})
        with _staged_output(path) as staged:
            await self._engine.run(
                _output_args(path, _compression_args(self._config.compression_bitrate_kbps), staged)
            )
        if os.path.getsize(path) > limit:
            logger.warning("audio.process.over_size_limit", extra={"path": path, "limit": limit})
        return True


def _output_args(source: str, args: Sequence[str], target: str) -> List[str]:
    argv = ["-y", "-i", source, *args]
    if Path(target).suffix.lower() in FASTSTART_SUFFIXES:
        argv.extend(["-movflags", "+faststart"])
    argv.append(target)
    return argv


def _compression_args(bitrate_kbps: int) -> List[str]:
    return ["-vn", "-ac", "1", "-b:a", f"{bitrate_kbps}k"]


def _peak_envelope(samples: np.ndarray, points: int) -> List[float]:
    if samples.ndim > 1:
        samples = samples.mean(axis=1)
    if samples.size == 0:
        return []
    magnitudes = np.abs(samples)
    buckets = np.array_split(magnitudes, min(points, magnitudes.size))
    return [round(min(1.0, float(bucket.max())), 4) for bucket in buckets]


@contextmanager
def _staged_output(destination: str) -> Iterator[str]:
    """Yield a temporary sibling of ``destination`` that replaces it on success."""
    target = Path(destination)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{target.stem}.",
            suffix=target.suffix,
            dir=str(target.parent),
        )
        os.close(fd)
    except OSError as exc:
        raise ProcessingFailure(f"cannot write to {destination}: {exc}") from exc

    try:
        yield tmp_path
        # mkstemp creates files owner-only
        os.chmod(tmp_path, _default_file_mode())
        os.replace(tmp_path, destination)
    except OSError as exc:
        _discard(tmp_path)
        raise ProcessingFailure(f"cannot write to {destination}: {exc}") from exc
    except BaseException:
        _discard(tmp_path)
        raise


def _default_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _require_readable(path: str) -> None:
    if not os.path.isfile(path):
        raise ProcessingFailure(f"audio source not found: {path}")
    if not os.access(path, os.R_OK):
        raise ProcessingFailure(f"audio source not readable: {path}")


def _require_distinct(source: str, destination: str) -> None:
    if os.path.exists(destination) and os.path.samefile(source, destination):
        raise ProcessingFailure(f"output path is the audio source: {destination}")


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("audio.process.cleanup_failed", extra={"path": path}, exc_info=True)


__all__ = ["AudioProcessingService", "FASTSTART_SUFFIXES", "TARGET_CODECS"]
