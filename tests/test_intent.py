"""Tests for intent extraction and completion parsing."""
import json

import pytest

from app.core.errors import CompletionFailed, ErrorKind, MalformedCompletionOutput
from app.core.prompts import build_intent_prompt, clean_completion, parse_intent_response
from app.schemas.intent import Confidence, IntentType
from app.services.intent import extract_intent, fallback_intent_analysis
from app.utils.language import LanguageLabel

ORDER_JSON = json.dumps({
    "intent": "order",
    "entities": {
        "restaurant": "Pizza Hut",
        "food_items": ["pizza"],
        "quantities": [2],
        "special_instructions": None,
    },
    "confidence": "high",
    "detected_language": "urdu",
})


def _raise_completion_failed(prompt):
    raise CompletionFailed("Gemini unavailable")


def test_extract_intent_from_completion():
    prompts = []

    def complete(prompt):
        prompts.append(prompt)
        return ORDER_JSON

    intent = extract_intent("order two pizzas from Pizza Hut", complete=complete)

    assert intent.intent == IntentType.ORDER
    assert intent.confidence == Confidence.HIGH
    assert intent.entities.restaurant == "Pizza Hut"
    assert intent.entities.food_items == ["pizza"]
    assert intent.entities.quantities == ["2"]
    assert "order two pizzas from Pizza Hut" in prompts[0]


def test_detected_language_comes_from_local_detector():
    """The model claimed urdu; the English utterance keeps the local label."""
    intent = extract_intent("order two pizzas from Pizza Hut", complete=lambda p: ORDER_JSON)
    assert intent.detected_language == LanguageLabel.ENGLISH


def test_fenced_completion_with_prose():
    raw = "Sure! Here is the result:\n```json\n" + ORDER_JSON + "\n```\nLet me know."
    intent = extract_intent("order two pizzas", complete=lambda p: raw)
    assert intent.intent == IntentType.ORDER


def test_clean_completion_strips_fences():
    assert clean_completion('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert clean_completion('```JSON{"a": 1}```') == '{"a": 1}'
    assert clean_completion("no json here") == "no json here"


def test_uppercase_intent_and_null_entities_are_normalised():
    raw = json.dumps({"intent": "MENU", "entities": None, "confidence": "Medium"})
    intent = parse_intent_response(raw, LanguageLabel.URDU)
    assert intent.intent == IntentType.MENU
    assert intent.confidence == Confidence.MEDIUM
    assert intent.entities.food_items == []
    assert intent.detected_language == LanguageLabel.URDU


def test_parse_rejects_unknown_intent():
    raw = json.dumps({"intent": "dance", "entities": {}, "confidence": "high"})
    with pytest.raises(MalformedCompletionOutput) as exc_info:
        parse_intent_response(raw, LanguageLabel.ENGLISH)
    assert exc_info.value.kind == ErrorKind.MALFORMED_COMPLETION_OUTPUT


def test_parse_rejects_non_object_json():
    with pytest.raises(MalformedCompletionOutput):
        parse_intent_response("[1, 2, 3]", LanguageLabel.ENGLISH)


@pytest.mark.parametrize("raw", [
    "I cannot help with that",
    '{"intent": "dance", "confidence": "high"}',
    "{not json at all}",
    "",
])
def test_garbage_completion_falls_back_to_closed_set(raw):
    intent = extract_intent("order two burgers", complete=lambda p: raw)
    assert intent.intent in set(IntentType)
    assert intent.intent == IntentType.ORDER
    assert intent.confidence == Confidence.MEDIUM


def test_completion_failure_never_raises():
    intent = extract_intent("track my parcel", complete=_raise_completion_failed)
    assert intent.intent == IntentType.OTHER
    assert intent.confidence == Confidence.LOW


def test_unexpected_completion_error_never_raises():
    def complete(prompt):
        raise RuntimeError("socket closed")

    intent = extract_intent("menu dikhao", complete=complete)
    assert intent.intent == IntentType.MENU
    assert intent.confidence in (Confidence.MEDIUM, Confidence.LOW)


def test_fallback_greeting_precedes_order():
    intent = fallback_intent_analysis("hi there, I want to order")
    assert intent.intent == IntentType.GREETING
    assert intent.confidence == Confidence.MEDIUM


def test_fallback_order_and_menu():
    assert fallback_intent_analysis("order two burgers").intent == IntentType.ORDER
    assert fallback_intent_analysis("menu dikhao").intent == IntentType.MENU


def test_fallback_entities_are_empty():
    intent = fallback_intent_analysis("order two burgers")
    assert intent.entities.restaurant is None
    assert intent.entities.food_items == []
    assert intent.entities.quantities == []
    assert intent.entities.special_instructions is None


def test_prompt_names_language_and_intents():
    prompt = build_intent_prompt("kya hal hai", LanguageLabel.URDU)
    assert "Urdu/Roman Urdu" in prompt
    assert '"detected_language": "urdu"' in prompt
    for value in IntentType:
        assert value.value in prompt


def test_food_item_objects_use_their_name():
    raw = json.dumps({
        "intent": "order",
        "entities": {"food_items": [{"name": "burger", "qty": 2}], "quantities": [2]},
        "confidence": "high",
    })
    intent = extract_intent("order a burger", complete=lambda p: raw)
    assert intent.intent == IntentType.ORDER
    assert intent.entities.food_items == ["burger"]


def test_unnamed_food_item_objects_fall_back_to_rules():
    raw = json.dumps({
        "intent": "menu",
        "entities": {"food_items": [{"qty": 2}, ["fries"]]},
        "confidence": "high",
    })
    with pytest.raises(MalformedCompletionOutput):
        parse_intent_response(raw, LanguageLabel.ENGLISH)

    intent = extract_intent("order a burger", complete=lambda p: raw)
    assert intent.intent == IntentType.ORDER
    assert intent.confidence == Confidence.MEDIUM
    assert intent.entities.food_items == []
