from __future__ import annotations

"""Async wrapper around the external ffmpeg/ffprobe binaries."""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Sequence

from ..errors import ProcessingFailure
from ..settings import ServiceConfig

logger = logging.getLogger(__name__)

# Lines of stderr kept in a failure diagnostic.
_DIAGNOSTIC_TAIL_LINES = 12


@dataclass(slots=True)
class EngineResult:
    returncode: int
    stdout: str
    stderr: str


class FilterEngine:
    """Runs ffmpeg and ffprobe as child processes and reports their output."""

    def __init__(self, *, binary_path: str = "ffmpeg", probe_path: str = "ffprobe") -> None:
        self._binary_path = binary_path
        self._probe_path = probe_path

    @classmethod
    def from_config(cls, cfg: ServiceConfig) -> "FilterEngine":
        return cls(binary_path=cfg.filter_engine_path, probe_path=cfg.probe_path)

    @property
    def binary_path(self) -> str:
        return self._binary_path

    async def run(self, args: Sequence[str]) -> EngineResult:
        """Invoke ffmpeg; a non-zero exit raises ProcessingFailure."""

        cmd = [self._binary_path, "-hide_banner", "-nostats", *args]
        return await self._execute(cmd)

    async def probe(self, path: str) -> Dict[str, Any]:
        cmd = [
            self._probe_path,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            path,
        ]
        result = await self._execute(cmd)
        try:
            return json.loads(result.stdout or "{}")
        except json.JSONDecodeError as exc:
            raise ProcessingFailure(f"unreadable probe output for {path}: {exc}") from exc

    async def _execute(self, cmd: Sequence[str]) -> EngineResult:
        logger.debug("audio.engine.exec", extra={"cmd": list(cmd)})
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ProcessingFailure(f"failed to start {cmd[0]}: {exc}") from exc

        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        result = EngineResult(
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
        if result.returncode != 0:
            diagnostic = _tail(result.stderr) or f"{cmd[0]} exited with status {result.returncode}"
            logger.warning(
                "audio.engine.failed",
                extra={"binary": cmd[0], "returncode": result.returncode, "error": diagnostic},
            )
            raise ProcessingFailure(diagnostic)
        return result


def _tail(text: str) -> str:
    lines = [line for line in text.strip().splitlines() if line.strip()]
    return "\n".join(lines[-_DIAGNOSTIC_TAIL_LINES:])


__all__ = ["EngineResult", "FilterEngine"]
