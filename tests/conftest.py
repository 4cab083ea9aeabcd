"""
pytest configuration
Shared fixtures for the audio core tests
"""

import shutil
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from saga_audio.audio.engine import EngineResult, FilterEngine
from saga_audio.errors import ProcessingFailure
from saga_audio.settings import ServiceConfig

HAS_FFMPEG = shutil.which("ffmpeg") is not None and shutil.which("ffprobe") is not None

SILENCE_LOG = """\
[silencedetect @ 0x55d0c8a0c2c0] silence_start: 0
[silencedetect @ 0x55d0c8a0c2c0] silence_end: 1.5 | silence_duration: 1.5
[silencedetect @ 0x55d0c8a0c2c0] silence_start: 2.5
[silencedetect @ 0x55d0c8a0c2c0] silence_end: 4.5 | silence_duration: 2
[silencedetect @ 0x55d0c8a0c2c0] silence_start: 5.5
size=N/A time=00:00:07.00 bitrate=N/A speed= 512x
"""

LOUDNESS_LOG = """\
[Parsed_loudnorm_0 @ 0x5610d3f0f4c0]
{
\t"input_i" : "-16.12",
\t"input_tp" : "-3.40",
\t"input_lra" : "1.10",
\t"input_thresh" : "-26.20",
\t"output_i" : "-16.01",
\t"output_tp" : "-3.28",
\t"output_lra" : "1.00",
\t"output_thresh" : "-26.08",
\t"normalization_type" : "dynamic",
\t"target_offset" : "0.01"
}
"""


def probe_payload(
    *,
    duration: float = 7.0,
    sample_rate: int = 16000,
    channels: int = 1,
    with_audio: bool = True,
) -> Dict[str, Any]:
    streams: List[Dict[str, Any]] = [{"codec_type": "video", "codec_name": "mjpeg"}]
    if with_audio:
        streams.append(
            {
                "codec_type": "audio",
                "codec_name": "pcm_s16le",
                "sample_rate": str(sample_rate),
                "channels": channels,
                "duration": f"{duration:.6f}",
            }
        )
    return {
        "streams": streams,
        "format": {
            "format_name": "wav",
            "duration": f"{duration:.6f}",
            "bit_rate": "256000",
        },
    }


class FakeFilterEngine(FilterEngine):
    """In-memory stand-in for ffmpeg that records every invocation."""

    def __init__(
        self,
        *,
        probe_data: Optional[Dict[str, Any]] = None,
        silence_log: str = "",
        loudness_log: str = LOUDNESS_LOG,
        render_error: Optional[str] = None,
        render_hook: Optional[Callable[[List[str]], None]] = None,
    ) -> None:
        super().__init__(binary_path="fake-ffmpeg", probe_path="fake-ffprobe")
        self.probe_data = probe_data if probe_data is not None else probe_payload()
        self.silence_log = silence_log
        self.loudness_log = loudness_log
        self.render_error = render_error
        self.render_hook = render_hook
        self.probed: List[str] = []
        self.runs: List[List[str]] = []

    async def probe(self, path: str) -> Dict[str, Any]:
        self.probed.append(path)
        return self.probe_data

    async def run(self, args: Sequence[str]) -> EngineResult:
        argv = list(args)
        self.runs.append(argv)
        graph = argv[argv.index("-af") + 1] if "-af" in argv else ""
        if "silencedetect" in graph:
            return EngineResult(returncode=0, stdout="", stderr=self.silence_log)
        if "print_format=json" in graph:
            return EngineResult(returncode=0, stdout="", stderr=self.loudness_log)
        # render: the engine starts writing before it can fail
        if self.render_hook is not None:
            self.render_hook(argv)
        else:
            Path(argv[-1]).write_bytes(b"RIFF....WAVEfmt partial")
        if self.render_error:
            raise ProcessingFailure(self.render_error)
        return EngineResult(returncode=0, stdout="", stderr="")

    @property
    def render_runs(self) -> List[List[str]]:
        return [argv for argv in self.runs if "-y" in argv]


def write_wav(path: Path, parts: Sequence[Tuple[float, Optional[float]]], *, sample_rate: int = 16000, amplitude: float = 0.3) -> Path:
    """Write a mono 16-bit WAV made of (seconds, frequency) parts; None means silence."""
    import numpy as np
    import soundfile as sf

    chunks = []
    for seconds, freq in parts:
        count = int(round(seconds * sample_rate))
        if freq is None:
            chunks.append(np.zeros(count, dtype=np.float32))
        else:
            t = np.arange(count, dtype=np.float32) / sample_rate
            chunks.append((amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32))
    sf.write(str(path), np.concatenate(chunks), sample_rate, subtype="PCM_16")
    return path


@pytest.fixture
def service_config() -> ServiceConfig:
    return ServiceConfig(api_key="test-key", default_language="en")


@pytest.fixture
def source_audio(tmp_path: Path) -> Path:
    path = tmp_path / "story.wav"
    path.write_bytes(b"RIFF....WAVEfmt raw recording")
    return path


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: unit tests")
    config.addinivalue_line("markers", "integration: tests that run the real ffmpeg binaries")
