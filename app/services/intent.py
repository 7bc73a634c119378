"""Intent extraction: Gemini completion with a local rule-based fallback."""
import logging
from typing import Callable, Optional

from app.core.errors import VoicePipelineError
from app.core.prompts import build_intent_prompt, parse_intent_response
from app.schemas.intent import Confidence, Entities, Intent, IntentType
from app.utils.language import LanguageLabel, detect_language

logger = logging.getLogger(__name__)

CompletionFn = Callable[[str], str]

# First match wins, in this order
FALLBACK_RULES = (
    (IntentType.GREETING, ("hello", "hi", "assalam", "namaste")),
    (IntentType.ORDER, ("order", "kar", "chahiye", "want")),
    (IntentType.MENU, ("menu", "kya hai", "what")),
)


def fallback_intent_analysis(text: str, detected_language: Optional[LanguageLabel] = None) -> Intent:
    """Keyword intent used when the completion capability fails or returns garbage."""
    if detected_language is None:
        detected_language = detect_language(text)
    lowered = text.lower()

    intent, confidence = IntentType.OTHER, Confidence.LOW
    for candidate, keywords in FALLBACK_RULES:
        if any(keyword in lowered for keyword in keywords):
            intent, confidence = candidate, Confidence.MEDIUM
            break

    return Intent(
        intent=intent,
        entities=Entities(),
        confidence=confidence,
        detected_language=detected_language,
    )


def extract_intent(
    text: str,
    language_hint: str = "en-US",
    complete: Optional[CompletionFn] = None,
) -> Intent:
    """
    Extract a structured intent from an utterance. Never raises.

    Args:
        text: Transcribed or typed user input
        language_hint: Caller's language code; logged only, detection is local
        complete: Completion capability (prompt -> text); defaults to Gemini

    Returns:
        Intent whose detected_language is always the local detector's label
    """
    if complete is None:
        from app.services.llm import complete

    detected = detect_language(text)
    logger.info(f"Detected language: {detected.value} (hint={language_hint}) for text: {text[:100]!r}")

    try:
        raw = complete(build_intent_prompt(text, detected))
        intent = parse_intent_response(raw, detected)
    except VoicePipelineError as e:
        logger.warning(f"Intent extraction fell back to rules ({e.kind.value}): {e.message}")
        return fallback_intent_analysis(text, detected)
    except Exception as e:
        logger.error(f"Unexpected intent extraction error, using rules: {e}", exc_info=True)
        return fallback_intent_analysis(text, detected)

    logger.info(f"Intent: {intent.intent.value} (confidence={intent.confidence.value})")
    return intent
