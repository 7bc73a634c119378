"""Tests for Gemini text-to-speech synthesis."""
import base64
import struct
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from app.core.config import settings
from app.core.errors import ErrorKind, SynthesisFailed
from app.schemas.voice import VoicePreferences
from app.services.tts import _pcm_to_wav

PCM = b"\x00\x01" * 240


def _audio_response(data=PCM, mime_type="audio/L16;codec=pcm;rate=24000"):
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type))
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


@patch('app.services.tts.get_gemini_client')
@patch('app.services.tts.get')
def test_cache_hit_returns_decoded_audio(mock_get, mock_client):
    """A cached clip is returned as bytes without calling Gemini."""
    from app.services.tts import synthesize

    mock_get.return_value = base64.b64encode(b"cached-mp3").decode("ascii")

    assert synthesize("Hello world", "en-US") == b"cached-mp3"
    mock_client.assert_not_called()


@patch('app.services.tts._wav_to_mp3')
@patch('app.services.tts.get_gemini_client')
@patch('app.services.tts.set')
@patch('app.services.tts.get')
def test_synthesize_uses_voice_and_caches(mock_get, mock_set, mock_client, mock_to_mp3):
    from app.services.tts import synthesize

    mock_get.return_value = None
    mock_client.return_value.models.generate_content.return_value = _audio_response()
    mock_to_mp3.return_value = b"mp3-bytes"

    voice = VoicePreferences(language="ur-PK", voice_gender="FEMALE", speaking_rate=0.5)
    assert synthesize("Assalam o Alaikum", "ur-PK", voice) == b"mp3-bytes"

    kwargs = mock_client.return_value.models.generate_content.call_args.kwargs
    assert kwargs["model"] == settings.tts_model
    assert "Speak in Urdu" in kwargs["contents"]
    assert "slow pace" in kwargs["contents"]
    assert kwargs["config"].speech_config.voice_config.prebuilt_voice_config.voice_name == "Kore"

    wav = mock_to_mp3.call_args[0][0]
    assert wav[:4] == b"RIFF"

    key, value, ttl = mock_set.call_args[0]
    assert key.startswith("tts:ur-PK:")
    assert base64.b64decode(value) == b"mp3-bytes"
    assert ttl == settings.tts_cache_ttl


@patch('app.services.tts.get_gemini_client')
@patch('app.services.tts.set')
@patch('app.services.tts.get')
def test_generation_error_raises_synthesis_failed(mock_get, mock_set, mock_client):
    from app.services.tts import synthesize

    mock_get.return_value = None
    mock_client.return_value.models.generate_content.side_effect = RuntimeError("quota exceeded")

    with pytest.raises(SynthesisFailed) as exc_info:
        synthesize("Hello", "en-US")
    assert exc_info.value.kind == ErrorKind.SYNTHESIS_FAILED
    mock_set.assert_not_called()


@patch('app.services.tts.get_gemini_client')
@patch('app.services.tts.get')
def test_missing_audio_raises_synthesis_failed(mock_get, mock_client):
    from app.services.tts import synthesize

    mock_get.return_value = None
    mock_client.return_value.models.generate_content.return_value = _audio_response(data=b"")

    with pytest.raises(SynthesisFailed):
        synthesize("Hello", "en-US")


@patch('app.services.tts._wav_to_mp3')
@patch('app.services.tts.get_gemini_client')
@patch('app.services.tts.get')
def test_conversion_error_raises_synthesis_failed(mock_get, mock_client, mock_to_mp3):
    from app.services.tts import synthesize

    mock_get.return_value = None
    mock_client.return_value.models.generate_content.return_value = _audio_response()
    mock_to_mp3.side_effect = ValueError("Generated audio is empty")

    with pytest.raises(SynthesisFailed):
        synthesize("Hello", "en-US")


@patch('app.services.tts.get')
@patch('app.services.tts.get_gemini_client')
def test_missing_api_key_raises_synthesis_failed(mock_client, mock_get):
    from app.services.tts import synthesize

    mock_get.return_value = None
    mock_client.side_effect = ValueError("Gemini API key not configured")

    with pytest.raises(SynthesisFailed):
        synthesize("Hello", "en-US")


def test_pcm_to_wav_header():
    wav = _pcm_to_wav(PCM, "audio/L16;codec=pcm;rate=16000")

    assert wav[:4] == b"RIFF"
    assert wav[8:12] == b"WAVE"
    assert len(wav) == 44 + len(PCM)
    channels, sample_rate = struct.unpack("<HI", wav[22:28])
    assert channels == 1
    assert sample_rate == 16000
    assert struct.unpack("<H", wav[34:36])[0] == 16
