"""Speech-to-Text capability backed by local faster-whisper."""
import logging
import math
import os
import tempfile
import threading
from typing import List

from pydantic import BaseModel, Field

from app.core.config import settings
from app.core.errors import STTCallFailed
from app.utils.audio import suffix_for_encoding
from app.utils.device import get_compute_type

logger = logging.getLogger(__name__)

# Lazy-loaded model (loaded on first use); lock prevents double-load under concurrency
_whisper_model = None
_model_lock = threading.Lock()

# Inference lock: one transcription at a time on the device to avoid OOM
_inference_lock = threading.Lock()


class RecognitionConfig(BaseModel):
    """Per-call recognition settings."""
    encoding: str = "WEBM_OPUS"
    sample_rate_hertz: int = 48000
    language_code: str = "en-US"
    alternative_language_codes: List[str] = Field(default_factory=list)
    enable_automatic_punctuation: bool = True
    enable_automatic_language_detection: bool = False
    phrase_hints: List[str] = Field(default_factory=list)
    phrase_boost: float = 0.0


class RecognitionAlternative(BaseModel):
    transcript: str
    confidence: float = Field(ge=0.0, le=1.0)


def _get_whisper_model():
    """Lazy load faster-whisper model. Thread-safe."""
    global _whisper_model
    with _model_lock:
        if _whisper_model is None:
            try:
                from faster_whisper import WhisperModel
            except ImportError:
                logger.error("faster-whisper not installed. Install with: pip install faster-whisper")
                raise STTCallFailed("faster-whisper is not installed. Please install it: pip install faster-whisper")
            device, compute_type = get_compute_type()
            logger.info(
                f"Loading faster-whisper model: {settings.stt_model_size} (device={device}, compute_type={compute_type})"
            )
            _whisper_model = WhisperModel(
                settings.stt_model_size,
                device=device,
                compute_type=compute_type,
            )
            logger.info("faster-whisper model loaded successfully")
    return _whisper_model


def _base_language(language_code: str) -> str:
    """Whisper takes ISO 639-1 codes: "ur-PK" -> "ur"."""
    return language_code.split("-")[0].lower()


def _segment_confidence(segments) -> float:
    """Mean per-segment token probability, clamped to [0, 1]."""
    probabilities = [math.exp(s.avg_logprob) for s in segments]
    if not probabilities:
        return 0.0
    return max(0.0, min(1.0, sum(probabilities) / len(probabilities)))


def recognize(audio_bytes: bytes, config: RecognitionConfig) -> List[RecognitionAlternative]:
    """
    Transcribe audio. Returns at most one alternative; empty when nothing was heard.

    With automatic language detection Whisper picks the language itself;
    otherwise the base language of config.language_code is forced.

    Raises:
        STTCallFailed: model unavailable or transcription error
    """
    model = _get_whisper_model()
    language = None if config.enable_automatic_language_detection else _base_language(config.language_code)
    hotwords = " ".join(config.phrase_hints) if config.phrase_hints and config.phrase_boost > 0 else None

    with _inference_lock:
        with tempfile.NamedTemporaryFile(delete=False, suffix=suffix_for_encoding(config.encoding)) as temp_file:
            temp_file.write(audio_bytes)
            temp_file_path = temp_file.name
        try:
            logger.info(
                f"Transcribing {len(audio_bytes)} bytes (language={language or 'auto'}, "
                f"alternatives={config.alternative_language_codes})"
            )
            segments, info = model.transcribe(
                temp_file_path,
                language=language,
                beam_size=5,
                hotwords=hotwords,
                vad_filter=True,
            )
            segments = list(segments)
        except Exception as e:
            raise STTCallFailed(f"Transcription failed ({config.language_code}): {e}") from e
        finally:
            try:
                os.unlink(temp_file_path)
            except Exception as e:
                logger.warning(f"Failed to delete temp file {temp_file_path}: {e}")

    transcript = " ".join(segment.text.strip() for segment in segments).strip()
    if not transcript:
        return []
    confidence = _segment_confidence(segments)
    logger.info(
        "Transcription: lang=%s (p=%.2f) confidence=%.2f len=%d",
        info.language, info.language_probability, confidence, len(transcript),
    )
    return [RecognitionAlternative(transcript=transcript, confidence=confidence)]


def init_stt_models() -> dict:
    """
    Load the STT model (used by /init-models warmup).
    Returns {"status": "loaded", "model": str} or {"status": "failed", "error": str}.
    """
    try:
        _get_whisper_model()
        return {"status": "loaded", "model": settings.stt_model_size}
    except Exception as e:
        logger.exception("STT init failed")
        return {"status": "failed", "error": str(e)}
