"""
Speech pipeline: audio -> transcript -> detected language -> intent.

Phase A makes one multi-language recognition pass. If it errors, hears
nothing, or is unsure, Phase B retries one candidate language at a time,
ranks each transcript by (engine confidence + language plausibility) / 2,
stops early on a convincing candidate and otherwise keeps the best one.
Everything runs sequentially; each step finishes before the next starts.
"""
import logging
from typing import Callable, List, Optional

from pydantic import BaseModel

from app.core.config import settings
from app.core.errors import RecognitionFailed
from app.schemas.intent import Intent
from app.services.intent import CompletionFn, extract_intent
from app.services.stt import RecognitionAlternative, RecognitionConfig
from app.utils.language import LanguageLabel, detect_language, language_code_for

logger = logging.getLogger(__name__)

RecognizeFn = Callable[[bytes, RecognitionConfig], List[RecognitionAlternative]]

# Phase A acceptance
MIN_TRANSCRIPT_CHARS = 2
MIN_PRIMARY_CONFIDENCE = 0.3

# Phase B scoring
MATCHING_LANGUAGE_SCORE = 0.8
MISMATCHED_LANGUAGE_SCORE = 0.2
UNKNOWN_LANGUAGE_SCORE = 0.5
EARLY_EXIT_SCORE = 0.6

RECOGNITION_FAILED_MESSAGE = (
    "Could not recognize speech in any supported language. "
    "Please ensure audio quality is good and speak clearly."
)


class SpeechOptions(BaseModel):
    """Client-supplied recognition options."""
    encoding: str = "WEBM_OPUS"
    sample_rate_hertz: int = 48000
    language: str = "auto"
    enable_auto_detection: bool = True


class RecognitionResult(BaseModel):
    text: str
    language: str  # Language code, e.g. "ur-PK"
    intent: Intent
    confidence: float


class _Attempt(BaseModel):
    text: str
    language: str
    score: float


def calculate_language_score(text: str, language_code: str) -> float:
    """How plausible it is that text was spoken in language_code, per the local detector."""
    detected = detect_language(text)
    if language_code == "en-US":
        return MATCHING_LANGUAGE_SCORE if detected == LanguageLabel.ENGLISH else MISMATCHED_LANGUAGE_SCORE
    if language_code in ("ur-PK", "hi-IN"):
        return MATCHING_LANGUAGE_SCORE if detected == LanguageLabel.URDU else MISMATCHED_LANGUAGE_SCORE
    return UNKNOWN_LANGUAGE_SCORE


def _primary_config(options: SpeechOptions) -> RecognitionConfig:
    primary = options.language if options.language and options.language != "auto" else settings.stt_primary_language
    return RecognitionConfig(
        encoding=options.encoding,
        sample_rate_hertz=options.sample_rate_hertz,
        language_code=primary,
        alternative_language_codes=[c for c in settings.stt_alternative_languages if c != primary],
        enable_automatic_punctuation=True,
        enable_automatic_language_detection=options.enable_auto_detection,
        phrase_hints=list(settings.stt_phrase_hints),
        phrase_boost=settings.stt_phrase_boost,
    )


def _candidate_config(options: SpeechOptions, language_code: str) -> RecognitionConfig:
    return RecognitionConfig(
        encoding=options.encoding,
        sample_rate_hertz=options.sample_rate_hertz,
        language_code=language_code,
        enable_automatic_punctuation=True,
        enable_automatic_language_detection=False,
    )


def try_individual_languages(
    audio_bytes: bytes,
    options: SpeechOptions,
    recognize: RecognizeFn,
    complete: Optional[CompletionFn] = None,
) -> RecognitionResult:
    """
    Phase B: recognize once per candidate language and keep the best.

    Raises:
        RecognitionFailed: no candidate produced any transcript
    """
    best: Optional[_Attempt] = None

    for language_code in settings.stt_candidate_languages:
        logger.info(f"Trying speech recognition with language: {language_code}")
        try:
            alternatives = recognize(audio_bytes, _candidate_config(options, language_code))
        except Exception as e:
            logger.warning(f"Recognition failed with language {language_code}: {e}")
            continue

        if not alternatives:
            continue
        transcript = alternatives[0].transcript
        if not transcript or not transcript.strip():
            continue

        language_score = calculate_language_score(transcript, language_code)
        combined = (alternatives[0].confidence + language_score) / 2
        logger.info(
            f"Language: {language_code}, API confidence: {alternatives[0].confidence:.2f}, "
            f"language score: {language_score}, combined: {combined:.2f}"
        )

        # Strictly greater: the earliest candidate wins ties
        if best is None or combined > best.score:
            best = _Attempt(text=transcript, language=language_code, score=combined)

        if combined > EARLY_EXIT_SCORE:
            logger.info(f"High confidence ({combined:.2f}) for {language_code}, skipping remaining languages")
            return RecognitionResult(
                text=transcript,
                language=language_code,
                intent=extract_intent(transcript, language_code, complete=complete),
                confidence=combined,
            )

    if best is None:
        raise RecognitionFailed(RECOGNITION_FAILED_MESSAGE)

    logger.info(f"Using best result: {best.language} with score {best.score:.2f}")
    return RecognitionResult(
        text=best.text,
        language=best.language,
        intent=extract_intent(best.text, best.language, complete=complete),
        confidence=best.score,
    )


def recognize_and_understand(
    audio_bytes: bytes,
    options: Optional[SpeechOptions] = None,
    recognize: Optional[RecognizeFn] = None,
    complete: Optional[CompletionFn] = None,
) -> RecognitionResult:
    """
    Transcribe audio and extract the intent.

    Args:
        audio_bytes: Raw audio as uploaded
        options: Encoding, sample rate and language options
        recognize: STT capability; defaults to local faster-whisper
        complete: Completion capability; defaults to Gemini

    Returns:
        RecognitionResult with transcript, language code, intent and confidence

    Raises:
        RecognitionFailed: neither phase produced any transcript
    """
    if options is None:
        options = SpeechOptions()
    if recognize is None:
        from app.services.stt import recognize

    logger.info(f"Processing speech with automatic language detection: {len(audio_bytes)} bytes")

    # Phase A: single multi-language pass
    try:
        alternatives = recognize(audio_bytes, _primary_config(options))
    except Exception as e:
        logger.warning(f"Multi-language recognition failed, trying individual languages: {e}")
        return try_individual_languages(audio_bytes, options, recognize, complete)

    if not alternatives:
        logger.info("No speech detected in primary attempt, trying individual languages")
        return try_individual_languages(audio_bytes, options, recognize, complete)

    transcript = alternatives[0].transcript
    confidence = alternatives[0].confidence
    if not transcript or len(transcript.strip()) < MIN_TRANSCRIPT_CHARS or confidence < MIN_PRIMARY_CONFIDENCE:
        logger.info(f"Low confidence ({confidence:.2f}) or empty transcription, trying individual languages")
        return try_individual_languages(audio_bytes, options, recognize, complete)

    language_code = language_code_for(detect_language(transcript))
    logger.info(f"Speech recognition result: language={language_code} confidence={confidence:.2f}")
    return RecognitionResult(
        text=transcript,
        language=language_code,
        intent=extract_intent(transcript, language_code, complete=complete),
        confidence=confidence,
    )
