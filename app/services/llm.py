"""Completion capability: Gemini text generation for intent extraction."""
import logging
from google import genai
from google.genai import types
from app.core.config import settings
from app.core.errors import CompletionFailed
from app.services.cache import get, make_key, set

logger = logging.getLogger(__name__)

# Initialize Gemini client (lazy loaded)
_gemini_client = None


def get_gemini_client():
    """Lazy load Gemini client with request timeout. Client is stateless (HTTP), no lock needed."""
    global _gemini_client
    if _gemini_client is None:
        if not settings.gemini_api_key:
            raise ValueError("Gemini API key not configured. Please set GEMINI_API_KEY in environment.")
        _gemini_client = genai.Client(
            api_key=settings.gemini_api_key,
            http_options=types.HttpOptions(timeout=settings.llm_timeout_seconds * 1000),
        )
        logger.info("Gemini client initialized (timeout=%ss)", settings.llm_timeout_seconds)
    return _gemini_client


def _response_text(response) -> str:
    """Join the text parts of the first candidate."""
    if (
        not response.candidates
        or response.candidates[0].content is None
        or not response.candidates[0].content.parts
    ):
        raise CompletionFailed("No response content from Gemini")

    candidate = response.candidates[0]
    finish_reason = str(getattr(candidate, "finish_reason", None) or "UNKNOWN")
    if "MAX_TOKENS" in finish_reason:
        logger.warning(f"Completion truncated due to MAX_TOKENS (max_output_tokens={settings.llm_max_tokens})")
    elif "SAFETY" in finish_reason or "RECITATION" in finish_reason:
        logger.warning(f"Completion blocked by filters: {finish_reason}")

    parts = [part.text for part in candidate.content.parts if getattr(part, "text", None)]
    if not parts:
        raise CompletionFailed("No text content in Gemini response parts")
    return "".join(parts)


def complete(prompt: str) -> str:
    """
    Return Gemini's completion for prompt.

    Completions are cached by prompt so repeated utterances skip the API.

    Raises:
        CompletionFailed: API key missing, request failed, or empty response
    """
    cache_key = make_key("llm", settings.llm_model, prompt)
    cached = get(cache_key)
    if cached:
        logger.info("Cache hit for completion")
        return cached

    try:
        client = get_gemini_client()
        logger.info(f"Calling Gemini with model: {settings.llm_model}")
        response = client.models.generate_content(
            model=settings.llm_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                thinking_config=types.ThinkingConfig(thinking_budget=0),
                response_mime_type="application/json",
                max_output_tokens=settings.llm_max_tokens,
                temperature=settings.llm_temperature,
            ),
        )
        text = _response_text(response)
    except CompletionFailed:
        raise
    except Exception as e:
        raise CompletionFailed(f"Gemini request failed: {e}") from e

    logger.debug(f"Gemini completion ({len(text)} chars): {text[:500]}")
    set(cache_key, text, settings.llm_cache_ttl)
    return text


def init_llm_client() -> dict:
    """
    Initialize the Gemini client (used by /init-models warmup).
    Returns {"status": "loaded"} or {"status": "failed", "error": str}.
    """
    try:
        get_gemini_client()
        return {"status": "loaded"}
    except Exception as e:
        logger.exception("LLM client init failed")
        return {"status": "failed", "error": str(e)}
