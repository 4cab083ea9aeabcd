from saga_audio.settings import ServiceConfig, load_config

_ENV_VARS = [
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "OPENAI_ORG_ID",
    "SAGA_FFMPEG_PATH",
    "SAGA_FFPROBE_PATH",
    "SAGA_TRANSCRIPTION_PROVIDER",
    "SAGA_TRANSCRIPTION_MODEL",
    "SAGA_DEFAULT_LANGUAGE",
    "SAGA_TRANSCRIPTION_TIMEOUT",
    "SAGA_MAX_AUDIO_DURATION_SECONDS",
    "SAGA_MAX_AUDIO_SIZE_BYTES",
    "SAGA_COMPRESSION_BITRATE_KBPS",
    "SAGA_LOG_LEVEL",
]


def _clear_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_load_config_defaults(monkeypatch):
    _clear_env(monkeypatch)

    cfg = load_config()

    assert cfg == ServiceConfig()
    assert cfg.api_key is None
    assert cfg.filter_engine_path == "ffmpeg"
    assert cfg.transcription_model == "whisper-1"
    assert cfg.default_language == "en"
    assert cfg.max_duration_seconds is None


def test_load_config_from_environment(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("SAGA_FFMPEG_PATH", "/usr/local/bin/ffmpeg")
    monkeypatch.setenv("SAGA_TRANSCRIPTION_PROVIDER", "Mock")
    monkeypatch.setenv("SAGA_MAX_AUDIO_DURATION_SECONDS", "600")
    monkeypatch.setenv("SAGA_LOG_LEVEL", "debug")

    cfg = load_config()

    assert cfg.api_key == "sk-test"
    assert cfg.filter_engine_path == "/usr/local/bin/ffmpeg"
    assert cfg.transcription_provider == "mock"
    assert cfg.max_duration_seconds == 600.0
    assert cfg.log_level == "DEBUG"


def test_invalid_numbers_fall_back_to_defaults(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("SAGA_TRANSCRIPTION_TIMEOUT", "soon")
    monkeypatch.setenv("SAGA_MAX_AUDIO_DURATION_SECONDS", "-5")

    cfg = load_config()

    assert cfg.request_timeout is None
    assert cfg.max_duration_seconds is None


def test_blank_api_key_is_treated_as_missing(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("OPENAI_API_KEY", "   ")

    assert load_config().api_key is None


def test_unknown_log_level_falls_back_to_info(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("SAGA_LOG_LEVEL", "verbose")

    assert load_config().log_level == "INFO"


def test_size_limit_and_compression_bitrate(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("SAGA_MAX_AUDIO_SIZE_BYTES", "52428800")
    monkeypatch.setenv("SAGA_COMPRESSION_BITRATE_KBPS", "not-a-number")

    cfg = load_config()

    assert cfg.max_size_bytes == 52428800
    assert cfg.compression_bitrate_kbps == 96
