"""Prompt templates and completion parsing for intent extraction."""
import json
import re
from typing import Any, Dict

from pydantic import ValidationError

from app.core.errors import MalformedCompletionOutput
from app.schemas.intent import Intent, IntentType
from app.utils.language import LanguageLabel

INTENT_VALUES = ", ".join(i.value for i in IntentType)

INTENT_PROMPT_TEMPLATE = """Analyze this {language_name} food ordering command and return ONLY a valid JSON object:

{{
  "intent": "one of: {intents}",
  "entities": {{
    "restaurant": "restaurant name if mentioned, otherwise null",
    "food_items": ["array of food items mentioned"],
    "quantities": ["array of quantities mentioned"],
    "special_instructions": "any special instructions or null"
  }},
  "confidence": "high, medium, or low",
  "detected_language": "{detected_language}"
}}

Command: "{text}"

Return ONLY the JSON object, no other text."""

# Fence markers Gemini wraps JSON in, e.g. ```json ... ```
_CODE_FENCE = re.compile(r"```(?:json)?\n?", re.IGNORECASE)
# Greedy: first "{" through last "}"
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def build_intent_prompt(text: str, detected_language: LanguageLabel) -> str:
    """Prompt asking for the intent JSON, echoing the locally detected language."""
    language_name = "Urdu/Roman Urdu" if detected_language == LanguageLabel.URDU else "English"
    return INTENT_PROMPT_TEMPLATE.format(
        language_name=language_name,
        intents=INTENT_VALUES,
        detected_language=detected_language.value,
        text=text,
    )


def clean_completion(response_text: str) -> str:
    """Strip markdown code fences and cut out the embedded JSON object, if any."""
    cleaned = _CODE_FENCE.sub("", response_text or "").strip()
    match = _JSON_OBJECT.search(cleaned)
    if match:
        cleaned = match.group(0)
    return cleaned


def parse_intent_response(response_text: str, detected_language: LanguageLabel) -> Intent:
    """
    Parse a completion into an Intent.

    detected_language always comes from the local detector, never from the
    model. Raises MalformedCompletionOutput when the text is not JSON or does
    not fit the Intent shape.
    """
    cleaned = clean_completion(response_text)
    try:
        data: Dict[str, Any] = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedCompletionOutput(f"Completion is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedCompletionOutput("Completion JSON is not an object")

    data["detected_language"] = detected_language.value
    try:
        return Intent.model_validate(data)
    except ValidationError as e:
        raise MalformedCompletionOutput(f"Completion does not match intent schema: {e.error_count()} errors") from e
