"""Filter chain applied to story recordings.

The chain always runs in the same order:

1. high-pass at 80 Hz to remove rumble,
2. edge silence trim (leading/trailing silence of at least 1 s below -50 dBFS),
3. EBU R128 loudness normalisation (-16 LUFS, -1.5 dBTP, 11 LU).

Interior pauses are never shortened. The trim stage is driven by an analysis
pass (``silencedetect``) whose output is reduced to a single keep-window, so
the render graph only ever cuts at the edges.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Iterable, List

from .types import LoudnessMeasurement, SilenceSpan, TrimWindow

# Slack allowed when deciding whether a silence touches an edge of the asset.
EDGE_TOLERANCE_SECONDS = 0.05

_NUMBER = r"(-?\d+(?:\.\d+)?(?:e[-+]?\d+)?)"
_SILENCE_START_RE = re.compile(rf"silence_start:\s*{_NUMBER}")
_SILENCE_END_RE = re.compile(rf"silence_end:\s*{_NUMBER}")


@dataclass(frozen=True)
class HighPassFilter:
    cutoff_hz: int = 80

    def render(self) -> str:
        return f"highpass=f={self.cutoff_hz}"


@dataclass(frozen=True)
class EdgeSilenceTrim:
    threshold_db: float = -50.0
    min_duration_seconds: float = 1.0

    def detector(self) -> str:
        return f"silencedetect=noise={self.threshold_db:g}dB:d={self.min_duration_seconds:g}"

    def render(self, window: TrimWindow) -> str:
        bounds = [f"start={window.start:.3f}"]
        if window.end is not None:
            bounds.append(f"end={window.end:.3f}")
        return f"atrim={':'.join(bounds)},asetpts=PTS-STARTPTS"


@dataclass(frozen=True)
class LoudnessNormalization:
    integrated_lufs: float = -16.0
    true_peak_dbtp: float = -1.5
    loudness_range_lu: float = 11.0

    def render(self, *, measure_only: bool = False) -> str:
        graph = (
            f"loudnorm=I={self.integrated_lufs:g}"
            f":TP={self.true_peak_dbtp:g}"
            f":LRA={self.loudness_range_lu:g}"
        )
        if measure_only:
            graph += ":print_format=json"
        return graph


@dataclass(frozen=True)
class FilterChain:
    highpass: HighPassFilter = field(default_factory=HighPassFilter)
    trim: EdgeSilenceTrim = field(default_factory=EdgeSilenceTrim)
    loudness: LoudnessNormalization = field(default_factory=LoudnessNormalization)

    def analysis_graph(self) -> str:
        """Graph used to locate silences as the trim stage would see them."""
        return f"{self.highpass.render()},{self.trim.detector()}"

    def render(self, window: TrimWindow) -> str:
        return ",".join(
            [
                self.highpass.render(),
                self.trim.render(window),
                self.loudness.render(),
            ]
        )

    def loudness_graph(self) -> str:
        return self.loudness.render(measure_only=True)


STORY_FILTER_CHAIN = FilterChain()


def parse_silence_spans(stderr: str) -> List[SilenceSpan]:
    """Collect silence intervals from ``silencedetect`` log output."""

    spans: List[SilenceSpan] = []
    for line in stderr.splitlines():
        start_match = _SILENCE_START_RE.search(line)
        if start_match:
            spans.append(SilenceSpan(start=max(0.0, float(start_match.group(1)))))
            continue
        end_match = _SILENCE_END_RE.search(line)
        if end_match and spans and spans[-1].end is None:
            spans[-1].end = float(end_match.group(1))
    return spans


def edge_trim_window(spans: Iterable[SilenceSpan], duration_seconds: float) -> TrimWindow:
    """Reduce detected silences to the window kept by the edge trim stage.

    Only a silence starting at t=0 and a silence reaching the end of the asset
    are cut. A single silence covering the whole asset leaves it untouched.
    """

    ordered = sorted(spans, key=lambda span: span.start)
    if not ordered:
        return TrimWindow()

    first, last = ordered[0], ordered[-1]
    leading = first if first.start <= EDGE_TOLERANCE_SECONDS else None
    trailing = None
    if last.end is None:
        trailing = last
    elif duration_seconds > 0 and last.end >= duration_seconds - EDGE_TOLERANCE_SECONDS:
        trailing = last

    if leading is not None and leading is trailing:
        return TrimWindow()

    window = TrimWindow()
    if leading is not None and leading.end is not None:
        window.start = leading.end
    if trailing is not None:
        window.end = trailing.start
    return window


def parse_loudness_report(stderr: str) -> LoudnessMeasurement:
    """Extract the JSON summary printed by ``loudnorm`` in analysis mode."""

    start = stderr.rfind("{")
    end = stderr.rfind("}")
    if start == -1 or end < start:
        raise ValueError("loudness report missing from filter output")
    try:
        report = json.loads(stderr[start : end + 1])
        return LoudnessMeasurement(
            integrated_lufs=float(report["input_i"]),
            true_peak_dbtp=float(report["input_tp"]),
            loudness_range_lu=float(report["input_lra"]),
            threshold_lufs=float(report["input_thresh"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"malformed loudness report: {exc}") from exc


__all__ = [
    "EDGE_TOLERANCE_SECONDS",
    "HighPassFilter",
    "EdgeSilenceTrim",
    "LoudnessNormalization",
    "FilterChain",
    "STORY_FILTER_CHAIN",
    "parse_silence_spans",
    "edge_trim_window",
    "parse_loudness_report",
]
