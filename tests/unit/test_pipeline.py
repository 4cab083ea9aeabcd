import pytest

from conftest import SILENCE_LOG, FakeFilterEngine, probe_payload
from saga_audio.audio.processor import AudioProcessingService
from saga_audio.errors import ProcessingFailure
from saga_audio.pipeline import StoryAudioPipeline
from saga_audio.settings import ServiceConfig
from saga_audio.transcription.providers.mock import MockTranscriptionProvider
from saga_audio.transcription.service import TranscriptionService


def _pipeline(engine: FakeFilterEngine, provider: MockTranscriptionProvider) -> StoryAudioPipeline:
    cfg = ServiceConfig(transcription_provider="mock")
    return StoryAudioPipeline(
        AudioProcessingService(cfg, engine=engine),
        TranscriptionService(cfg, provider=provider),
    )


@pytest.mark.asyncio
async def test_run_processes_then_transcribes_output(tmp_path, source_audio, mocker):
    engine = FakeFilterEngine(probe_data=probe_payload(duration=4.0), silence_log=SILENCE_LOG)
    provider = MockTranscriptionProvider(text="Grandpa built the boat himself")
    spy = mocker.spy(provider, "transcribe_file")
    output = tmp_path / "clean.wav"

    result = await _pipeline(engine, provider).run(str(source_audio), str(output), language="en-GB")

    assert output.exists()
    spy.assert_called_once_with(str(output), language="en")
    assert result.output_path == str(output)
    assert result.metadata.duration_seconds == pytest.approx(4.0)
    assert result.transcript.text == "Grandpa built the boat himself"


@pytest.mark.asyncio
async def test_story_fields_cover_transcript_columns(tmp_path, source_audio):
    engine = FakeFilterEngine(probe_data=probe_payload(duration=4.0))
    pipeline = _pipeline(engine, MockTranscriptionProvider(text="one two three"))

    result = await pipeline.run(str(source_audio), str(tmp_path / "clean.wav"))
    fields = result.to_story_fields()

    assert fields["transcript"] == "one two three"
    assert fields["transcript_provider"] == "mock"
    assert fields["transcript_word_count"] == 3
    assert fields["transcript_confidence"] is None
    assert fields["has_diarization"] is False
    assert fields["duration_seconds"] == pytest.approx(4.0)
    assert fields["transcript_generated_at"].endswith("+00:00")


@pytest.mark.asyncio
async def test_processing_failure_stops_before_transcription(tmp_path, source_audio, mocker):
    engine = FakeFilterEngine(render_error="Conversion failed!")
    provider = MockTranscriptionProvider()
    spy = mocker.spy(provider, "transcribe_file")

    with pytest.raises(ProcessingFailure):
        await _pipeline(engine, provider).run(str(source_audio), str(tmp_path / "clean.wav"))

    spy.assert_not_called()


@pytest.mark.asyncio
async def test_run_accepts_language_positionally(tmp_path, source_audio, mocker):
    provider = MockTranscriptionProvider()
    spy = mocker.spy(provider, "transcribe_file")
    output = tmp_path / "clean.wav"

    await _pipeline(FakeFilterEngine(), provider).run(str(source_audio), str(output), "de-AT")

    spy.assert_called_once_with(str(output), language="de")
