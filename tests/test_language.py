"""Tests for language detection and language-code routing."""
import pytest

from app.utils.language import (
    LanguageLabel,
    detect_language,
    has_arabic_script,
    is_supported_language,
    label_for_language_code,
    language_code_for,
)


def test_arabic_script_is_urdu():
    assert detect_language("مجھے برگر چاہیے") == LanguageLabel.URDU


def test_arabic_script_wins_over_english_words():
    """A single Arabic-script character outweighs any English word count."""
    assert detect_language("please order the burger and pizza for me ک") == LanguageLabel.URDU


def test_has_arabic_script():
    assert has_arabic_script("سلام")
    assert not has_arabic_script("salam")


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_or_whitespace_is_english(text):
    assert detect_language(text) == LanguageLabel.ENGLISH


def test_roman_urdu_is_urdu():
    assert detect_language("kya hal hai") == LanguageLabel.URDU
    assert detect_language("aap kaise hain") == LanguageLabel.URDU


def test_english_sentence_is_english():
    assert detect_language("can you please help me order a burger") == LanguageLabel.ENGLISH


def test_tie_resolves_to_english():
    # "kya" hits the Urdu lexicon once and contains the English entry "a" once
    assert detect_language("kya") == LanguageLabel.ENGLISH


def test_no_lexicon_hits_is_english():
    assert detect_language("xyz") == LanguageLabel.ENGLISH
    assert detect_language("12345") == LanguageLabel.ENGLISH
    assert detect_language("1234 !!! ###") == LanguageLabel.ENGLISH


def test_detection_is_case_insensitive():
    assert detect_language("KYA HAL HAI") == detect_language("kya hal hai")


def test_language_code_routing():
    assert language_code_for(LanguageLabel.URDU) == "ur-PK"
    assert language_code_for(LanguageLabel.ENGLISH) == "en-US"
    assert label_for_language_code("ur-PK") == LanguageLabel.URDU
    assert label_for_language_code("hi-IN") == LanguageLabel.URDU
    assert label_for_language_code("en-US") == LanguageLabel.ENGLISH
    assert label_for_language_code("es-ES") == LanguageLabel.ENGLISH


def test_supported_languages():
    assert is_supported_language("ur-PK")
    assert not is_supported_language("fr-FR")
