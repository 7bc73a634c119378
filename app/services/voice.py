"""Text voice-command flow: intent, reply, spoken reply."""
import base64
import logging
from typing import Callable, Optional

from pydantic import BaseModel

from app.schemas.intent import Intent
from app.schemas.voice import VoicePreferences
from app.services.intent import CompletionFn, extract_intent
from app.services.responses import compose_response
from app.utils.language import LanguageLabel, language_code_for

logger = logging.getLogger(__name__)

SynthesizeFn = Callable[[str, str, Optional[VoicePreferences]], bytes]


class VoiceCommandResult(BaseModel):
    original_text: str
    intent: Intent
    response: str
    audio: str  # Base64 MP3
    detected_language: LanguageLabel


def process_voice_command(
    text: str,
    language: str = "en-US",
    voice: Optional[VoicePreferences] = None,
    complete: Optional[CompletionFn] = None,
    synthesize: Optional[SynthesizeFn] = None,
) -> VoiceCommandResult:
    """
    Understand a typed or transcribed command and speak the reply.

    The reply is spoken in Urdu when the command was detected as Urdu,
    English otherwise.

    Raises:
        SynthesisFailed: TTS failed (the reply text is not returned in that case)
    """
    if synthesize is None:
        from app.services.tts import synthesize

    logger.info(f"Processing voice command: {len(text)} chars, language={language}")
    intent = extract_intent(text, language, complete=complete)
    response_text = compose_response(intent, text)

    audio = synthesize(response_text, language_code_for(intent.detected_language), voice)

    logger.info(
        f"Voice command processed: intent={intent.intent.value} "
        f"language={intent.detected_language.value} response_length={len(response_text)}"
    )
    return VoiceCommandResult(
        original_text=text,
        intent=intent,
        response=response_text,
        audio=base64.b64encode(audio).decode("ascii"),
        detected_language=intent.detected_language,
    )
