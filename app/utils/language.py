"""Heuristic language detection (Roman Urdu / Urdu script vs English) and language-code routing."""
import logging
import re
from enum import Enum

logger = logging.getLogger(__name__)


class LanguageLabel(str, Enum):
    """Exactly one label per utterance; ambiguity resolves to ENGLISH."""
    URDU = "urdu"
    ENGLISH = "english"


# Arabic, Arabic Supplement, Arabic Extended-A, Presentation Forms A and B
ARABIC_SCRIPT = re.compile(r"[\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFF]")

LATIN_LETTER = re.compile(r"[a-zA-Z]")

# Roman-Urdu marker substrings. "karna" is listed twice and counts twice.
URDU_LEXICON = (
    # Common words
    "kya", "hai", "ka", "ki", "ke", "main", "mein", "aap", "hum", "tum",
    "kar", "sakta", "sakte", "ho", "hain", "lia", "liye", "meray", "mere",
    "aur", "bhi", "se", "par", "pe", "wala", "wali", "chahiye",
    "chahte", "chahtay", "karna", "karte", "karta", "karti",
    "dena", "dedo", "lana", "laiye", "dijiye", "karo", "karna",
    # Greetings
    "assalam", "alaikum", "namaste", "adab",
    # Food and drink
    "khana", "khaana", "peena", "piyo", "kha", "pi",
    # Expressions
    "achha", "acha", "theek", "bilkul", "haan", "nahi", "nahin",
)

ENGLISH_LEXICON = (
    "can", "you", "please", "help", "want", "need", "get", "buy",
    "hello", "hi", "hey", "thank", "thanks", "yes", "no",
    "order", "food", "burger", "pizza", "delivery", "restaurant", "menu",
    "what", "where", "when", "how", "why", "who",
    "the", "and", "or", "but", "for", "with", "from", "to", "a", "an",
)

# Latin-letter share above which an undecided utterance is English
LATIN_RATIO_THRESHOLD = 0.8

# Language codes accepted by the service (STT/TTS/preferences)
SUPPORTED_LANGUAGES = {
    "en-US": {"name": "English (US)", "flag": "🇺🇸"},
    "es-ES": {"name": "Spanish (Spain)", "flag": "🇪🇸"},
    "hi-IN": {"name": "Hindi (India)", "flag": "🇮🇳"},
    "ur-PK": {"name": "Urdu (Pakistan)", "flag": "🇵🇰"},
}
DEFAULT_LANGUAGE_CODE = "en-US"

# Codes whose speakers are routed to the Roman-Urdu response tables
URDU_FAMILY_CODES = ("ur-PK", "hi-IN")


def has_arabic_script(text: str) -> bool:
    """Return True if text contains any Arabic-script character."""
    return ARABIC_SCRIPT.search(text) is not None


def _count_matches(lowered: str, lexicon: tuple) -> int:
    return sum(1 for word in lexicon if word in lowered)


def detect_language(text: str) -> LanguageLabel:
    """
    Classify text as URDU or ENGLISH.

    Script evidence wins outright. Otherwise each lexicon entry found as a
    substring of the lowercased text scores one point for its language; the
    strictly larger non-zero score wins. Ties (including 0-0) are ENGLISH.
    """
    if not text or not text.strip():
        return LanguageLabel.ENGLISH

    if has_arabic_script(text):
        logger.debug("Detected Urdu script characters")
        return LanguageLabel.URDU

    lowered = text.lower()
    urdu_matches = _count_matches(lowered, URDU_LEXICON)
    english_matches = _count_matches(lowered, ENGLISH_LEXICON)
    logger.debug(
        "Language detection: text=%r urdu_matches=%d english_matches=%d",
        text[:50], urdu_matches, english_matches,
    )

    if urdu_matches > english_matches and urdu_matches > 0:
        return LanguageLabel.URDU
    if english_matches > urdu_matches and english_matches > 0:
        return LanguageLabel.ENGLISH

    # Undecided: only a strongly Latin utterance is positively English; the rest defaults to English too
    total_chars = len(re.sub(r"\s", "", text))
    latin_chars = len(LATIN_LETTER.findall(text))
    if total_chars > 0 and latin_chars / total_chars > LATIN_RATIO_THRESHOLD:
        return LanguageLabel.ENGLISH
    return LanguageLabel.ENGLISH


def language_code_for(label: LanguageLabel) -> str:
    """Map a detected label to the STT/TTS language code."""
    return "ur-PK" if label == LanguageLabel.URDU else "en-US"


def label_for_language_code(language_code: str) -> LanguageLabel:
    """Map a language code (ur-PK, hi-IN, en-US, ...) to the response label."""
    return LanguageLabel.URDU if language_code in URDU_FAMILY_CODES else LanguageLabel.ENGLISH


def is_supported_language(language_code: str) -> bool:
    return language_code in SUPPORTED_LANGUAGES
