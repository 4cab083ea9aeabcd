"""Command-line entrypoint for running the audio core by hand.

Usage:
  python -m saga_audio process raw.m4a cleaned.m4a
  python -m saga_audio probe cleaned.m4a
  python -m saga_audio transcribe cleaned.m4a --language en
  python -m saga_audio run raw.m4a cleaned.m4a --language en
  python -m saga_audio waveform cleaned.m4a --points 200
  python -m saga_audio languages
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from typing import List, Optional

from .audio import AudioProcessingService
from .errors import SagaAudioError
from .pipeline import StoryAudioPipeline
from .settings import ServiceConfig, load_config
from .transcription import TranscriptionService

logger = logging.getLogger("saga_audio")


def _positive_int(value: str) -> int:
    parsed = int(value)
    if parsed < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="saga-audio", description="Clean and transcribe story recordings")
    sub = parser.add_subparsers(dest="command", required=True)

    process = sub.add_parser("process", help="apply the story filter chain")
    process.add_argument("input")
    process.add_argument("output")

    probe = sub.add_parser("probe", help="print audio metadata as JSON")
    probe.add_argument("input")

    transcribe = sub.add_parser("transcribe", help="print the transcript of an audio file")
    transcribe.add_argument("input")
    transcribe.add_argument("--language", default=None)

    run = sub.add_parser("run", help="process then transcribe, printing story fields as JSON")
    run.add_argument("input")
    run.add_argument("output")
    run.add_argument("--language", default=None)

    waveform = sub.add_parser("waveform", help="print peak values for a playback waveform as JSON")
    waveform.add_argument("input")
    waveform.add_argument("--points", type=_positive_int, default=100)

    sub.add_parser("languages", help="print supported language hints as JSON")
    return parser


async def _dispatch(args: argparse.Namespace, cfg: ServiceConfig) -> None:
    if args.command == "process":
        await AudioProcessingService(cfg).process_audio(args.input, args.output)
        print(args.output)
    elif args.command == "probe":
        metadata = await AudioProcessingService(cfg).probe(args.input)
        print(json.dumps(dataclasses.asdict(metadata), indent=2))
    elif args.command == "transcribe":
        service = TranscriptionService(cfg)
        try:
            print(await service.transcribe(args.input, args.language))
        finally:
            await service.aclose()
    elif args.command == "run":
        pipeline = StoryAudioPipeline.from_config(cfg)
        try:
            result = await pipeline.run(args.input, args.output, language=args.language)
        finally:
            await pipeline.aclose()
        print(json.dumps(result.to_story_fields(), indent=2, ensure_ascii=False))
    elif args.command == "waveform":
        peaks = await AudioProcessingService(cfg).waveform(args.input, points=args.points)
        print(json.dumps(peaks))
    elif args.command == "languages":
        print(json.dumps(TranscriptionService.supported_languages(), indent=2, ensure_ascii=False))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config()
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        asyncio.run(_dispatch(args, cfg))
    except SagaAudioError as exc:
        logger.error("%s failed: %s", args.command, exc.diagnostic)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
