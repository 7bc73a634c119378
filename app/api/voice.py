"""Voice endpoints. Blocking inference (STT, LLM, TTS) runs in a thread pool with timeouts."""
import asyncio
import base64
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import RecognitionFailed, SynthesisFailed
from app.database import get_db
from app.schemas.voice import (
    DetectLanguageRequest,
    DetectLanguageResponse,
    Pagination,
    SpeechToTextResponse,
    SupportedLanguage,
    TTSRequest,
    TTSResponse,
    VoiceCommandRequest,
    VoiceHistoryItem,
    VoiceHistoryResponse,
    VoicePreferences,
    VoicePreferencesUpdate,
)
from app.services import history
from app.services.llm import init_llm_client
from app.services.responses import compose_response
from app.services.speech_pipeline import SpeechOptions, recognize_and_understand
from app.services.stt import init_stt_models
from app.services.tts import synthesize
from app.services.voice import VoiceCommandResult, process_voice_command
from app.utils.audio import validate_audio_upload
from app.utils.language import (
    DEFAULT_LANGUAGE_CODE,
    SUPPORTED_LANGUAGES,
    detect_language,
    is_supported_language,
    label_for_language_code,
)

logger = logging.getLogger(__name__)

# User-safe messages (no stack traces or internal detail)
TIMEOUT_MESSAGE = "Request took too long. Please try again."
NOT_UNDERSTOOD_MESSAGE = "Could not understand the audio. Please speak clearly and try again."
TTS_FAILED_MESSAGE = "Failed to convert text to speech."

# Max time for init-models (first-time model download can be slow)
INIT_MODELS_TIMEOUT_SECONDS = 300

router = APIRouter()


def _run_init_models_sync() -> dict:
    """Run all model initializers sequentially (called from thread)."""
    return {"stt": init_stt_models(), "llm": init_llm_client()}


@router.post("/init-models")
async def init_models():
    """Warm up the STT model and the Gemini client to avoid cold-start latency."""
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(_run_init_models_sync),
            timeout=float(INIT_MODELS_TIMEOUT_SECONDS),
        )
    except asyncio.TimeoutError:
        logger.warning("init-models timed out")
        raise HTTPException(status_code=504, detail="Model initialization timed out. Try again or check server logs.")


@router.post("/detect-language", response_model=DetectLanguageResponse)
async def detect_language_endpoint(request: DetectLanguageRequest):
    """Classify text as urdu or english."""
    return DetectLanguageResponse(language=detect_language(request.text))


@router.post("/process", response_model=VoiceCommandResult)
async def process_command(request: VoiceCommandRequest, db: Session = Depends(get_db)):
    """
    Process a typed or transcribed voice command and return the reply with audio.

    With user_id the stored voice preferences apply and the exchange is saved.
    """
    voice: Optional[VoicePreferences] = None
    language = request.language
    if request.user_id:
        voice = history.get_preferences(db, request.user_id)
        language = language or voice.language
    language = language or DEFAULT_LANGUAGE_CODE

    try:
        result = await asyncio.wait_for(
            asyncio.to_thread(process_voice_command, request.text, language, voice),
            timeout=float(settings.llm_timeout_seconds + settings.tts_timeout_seconds),
        )
    except asyncio.TimeoutError:
        logger.warning("Voice command timed out")
        raise HTTPException(status_code=504, detail=TIMEOUT_MESSAGE)
    except SynthesisFailed as e:
        logger.error(f"Voice command TTS failed: {e.message}")
        raise HTTPException(status_code=502, detail=TTS_FAILED_MESSAGE)

    if request.user_id:
        history.save_interaction(
            db,
            request.user_id,
            input_text=request.text,
            output_text=result.response,
            intent=result.intent.intent.value,
            language=language,
        )
    return result


@router.post("/speech-to-text", response_model=SpeechToTextResponse)
async def speech_to_text(
    audio: UploadFile = File(...),
    encoding: str = Form("WEBM_OPUS"),
    sample_rate_hertz: int = Form(48000, alias="sampleRateHertz"),
    language: str = Form("auto"),
    enable_auto_detection: bool = Form(True, alias="enableAutoDetection"),
):
    """Transcribe audio, detect its language, extract the intent and compose a localized reply."""
    if language != "auto" and not is_supported_language(language):
        raise HTTPException(status_code=400, detail=f"Invalid language code: {language}")

    audio_bytes = await audio.read()
    try:
        validate_audio_upload(audio_bytes, audio.content_type, settings.max_audio_size_mb)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    options = SpeechOptions(
        encoding=encoding,
        sample_rate_hertz=sample_rate_hertz,
        language=language,
        enable_auto_detection=enable_auto_detection,
    )
    logger.info(f"Speech to text request: {len(audio_bytes)} bytes, options={options.model_dump()}")

    try:
        result = await asyncio.wait_for(
            asyncio.to_thread(recognize_and_understand, audio_bytes, options),
            timeout=float(settings.stt_timeout_seconds),
        )
    except asyncio.TimeoutError:
        logger.warning("STT request timed out")
        raise HTTPException(status_code=504, detail=TIMEOUT_MESSAGE)
    except RecognitionFailed as e:
        logger.warning(f"Speech not recognized: {e.message}")
        raise HTTPException(status_code=422, detail=NOT_UNDERSTOOD_MESSAGE)

    # Reply language follows the recognized language code
    localized_intent = result.intent.model_copy(
        update={"detected_language": label_for_language_code(result.language)}
    )
    return SpeechToTextResponse(
        text=result.text,
        language=result.language,
        detected_language=result.language,
        intent=result.intent,
        confidence=result.confidence,
        localized_response=compose_response(localized_intent, result.text),
    )


@router.post("/text-to-speech", response_model=TTSResponse)
async def text_to_speech(request: TTSRequest):
    """Synthesize text to base64 MP3."""
    try:
        audio = await asyncio.wait_for(
            asyncio.to_thread(synthesize, request.text, request.language),
            timeout=float(settings.tts_timeout_seconds),
        )
    except asyncio.TimeoutError:
        logger.warning("TTS request timed out")
        raise HTTPException(status_code=504, detail=TIMEOUT_MESSAGE)
    except SynthesisFailed:
        raise HTTPException(status_code=502, detail=TTS_FAILED_MESSAGE)
    return TTSResponse(audio=base64.b64encode(audio).decode("ascii"))


@router.get("/history", response_model=VoiceHistoryResponse)
async def get_voice_history(
    user_id: str = Query(...),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """User's voice interactions, newest first."""
    items, total = history.get_history(db, user_id, page, limit)
    return VoiceHistoryResponse(
        history=[VoiceHistoryItem.model_validate(item) for item in items],
        pagination=Pagination(page=page, limit=limit, total=total),
    )


@router.delete("/history")
async def clear_voice_history(user_id: str = Query(...), db: Session = Depends(get_db)):
    deleted = history.clear_history(db, user_id)
    return {"message": "Voice history cleared successfully", "deleted": deleted}


@router.get("/preferences", response_model=VoicePreferences)
async def get_voice_preferences(user_id: str = Query(...), db: Session = Depends(get_db)):
    return history.get_preferences(db, user_id)


@router.put("/preferences", response_model=VoicePreferences)
async def update_voice_preferences(update: VoicePreferencesUpdate, db: Session = Depends(get_db)):
    return history.update_preferences(db, update)


@router.get("/supported-languages", response_model=List[SupportedLanguage])
async def supported_languages():
    return [
        SupportedLanguage(code=code, name=info["name"], flag=info["flag"])
        for code, info in SUPPORTED_LANGUAGES.items()
    ]
