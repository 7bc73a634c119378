"""Text-to-Speech capability: Gemini speech generation, returned as MP3 bytes."""
import base64
import logging
import struct
from io import BytesIO
from typing import Optional

from google.genai import types
from pydub import AudioSegment

from app.core.config import settings
from app.core.errors import SynthesisFailed
from app.schemas.voice import VoicePreferences
from app.services.cache import get, make_key, set
from app.services.llm import get_gemini_client
from app.utils.language import SUPPORTED_LANGUAGES

logger = logging.getLogger(__name__)

# Gemini prebuilt voices per requested gender
VOICE_NAMES = {
    "FEMALE": "Kore",
    "MALE": "Puck",
    "NEUTRAL": "Zephyr",
}

LANGUAGE_STYLE_NAMES = {
    "en-US": "English",
    "es-ES": "Spanish",
    "hi-IN": "Hindi",
    "ur-PK": "Urdu",
}


def _style_directive(language_code: str, voice: VoicePreferences) -> str:
    """Delivery instructions derived from the voice preferences."""
    language_name = LANGUAGE_STYLE_NAMES.get(language_code, "English")
    if voice.speaking_rate < 0.9:
        pace = "slow"
    elif voice.speaking_rate > 1.1:
        pace = "fast"
    else:
        pace = "medium"
    if voice.pitch > 2:
        tone = "slightly higher than usual"
    elif voice.pitch < -2:
        tone = "slightly lower than usual"
    else:
        tone = "natural"
    return (
        f"Speak in {language_name} as a friendly food-ordering assistant. "
        f"Warm and clear, {pace} pace, {tone} pitch."
    )


def _parse_audio_mime_type(mime_type: str) -> dict[str, int]:
    """
    Parse bits per sample and rate from an audio MIME type string
    (e.g. "audio/L16;codec=pcm;rate=24000").
    """
    bits_per_sample = 16
    rate = 24000

    if mime_type.startswith("audio/L"):
        try:
            bits_per_sample = int(mime_type.split(";")[0].split("L", 1)[1])
        except (ValueError, IndexError):
            pass

    for param in mime_type.split(";"):
        param = param.strip()
        if param.lower().startswith("rate="):
            try:
                rate = int(param.split("=", 1)[1])
            except (ValueError, IndexError):
                pass

    return {"bits_per_sample": bits_per_sample, "rate": rate}


def _pcm_to_wav(audio_data: bytes, mime_type: str) -> bytes:
    """Prefix raw mono PCM with a WAV header."""
    parameters = _parse_audio_mime_type(mime_type)
    bits_per_sample = parameters["bits_per_sample"]
    sample_rate = parameters["rate"]
    num_channels = 1
    data_size = len(audio_data)
    block_align = num_channels * (bits_per_sample // 8)
    byte_rate = sample_rate * block_align

    header = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,               # PCM fmt chunk size
        1,                # AudioFormat PCM
        num_channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        b"data",
        data_size,
    )
    return header + audio_data


def _wav_to_mp3(wav_bytes: bytes) -> bytes:
    audio = AudioSegment.from_wav(BytesIO(wav_bytes))
    if len(audio) == 0:
        raise ValueError("Generated audio is empty")
    logger.info(f"Audio duration: {len(audio)}ms, frame rate: {audio.frame_rate}Hz")
    out = BytesIO()
    audio.export(out, format="mp3", bitrate="128k")
    return out.getvalue()


def synthesize(
    text: str,
    language_code: str = "en-US",
    voice: Optional[VoicePreferences] = None,
) -> bytes:
    """
    Convert text to speech.

    Args:
        text: Text to speak
        language_code: One of the supported language codes
        voice: Gender, rate and pitch; defaults to neutral at normal speed

    Returns:
        MP3 audio bytes

    Raises:
        SynthesisFailed: on any generation or conversion error
    """
    if voice is None:
        voice = VoicePreferences(language=language_code if language_code in SUPPORTED_LANGUAGES else "en-US")
    voice_name = VOICE_NAMES.get(voice.voice_gender, VOICE_NAMES["NEUTRAL"])

    cache_key = make_key(
        f"tts:{language_code}", text, voice_name, f"{voice.speaking_rate}", f"{voice.pitch}"
    )
    cached = get(cache_key)
    if cached:
        logger.info("Cache hit for TTS audio")
        return base64.b64decode(cached)

    logger.info(f"Converting text to speech: {len(text)} chars, language={language_code}, voice={voice_name}")
    try:
        client = get_gemini_client()
        contents = (
            f"{_style_directive(language_code, voice)}\n\n"
            "Text to speak:\n"
            f"{text.strip()}"
        )
        response = client.models.generate_content(
            model=settings.tts_model,
            contents=contents,
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice_name)
                    )
                ),
            ),
        )
        inline = response.candidates[0].content.parts[0].inline_data
        if inline is None or not inline.data:
            raise ValueError("No audio data in Gemini TTS response")
        mp3_bytes = _wav_to_mp3(_pcm_to_wav(inline.data, inline.mime_type or "audio/L16;rate=24000"))
    except Exception as e:
        logger.error(f"Error converting text to speech: {e}", exc_info=True)
        raise SynthesisFailed("Failed to convert text to speech") from e

    set(cache_key, base64.b64encode(mp3_bytes).decode("ascii"), settings.tts_cache_ttl)
    logger.info("Text to speech conversion successful")
    return mp3_bytes
