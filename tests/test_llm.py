"""Tests for the Gemini completion adapter."""
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from app.core.config import settings
from app.core.errors import CompletionFailed, ErrorKind
from app.services.cache import make_key


def _response(*texts, finish_reason="STOP"):
    parts = [SimpleNamespace(text=t) for t in texts]
    candidate = SimpleNamespace(content=SimpleNamespace(parts=parts), finish_reason=finish_reason)
    return SimpleNamespace(candidates=[candidate])


@patch('app.services.llm._gemini_client', None)
@patch.object(settings, 'gemini_api_key', None)
@patch('app.services.llm.get')
def test_missing_api_key_raises_completion_failed(mock_get):
    from app.services.llm import complete

    mock_get.return_value = None

    with pytest.raises(CompletionFailed) as exc_info:
        complete("prompt")
    assert exc_info.value.kind == ErrorKind.COMPLETION_FAILED


@patch('app.services.llm.set')
@patch('app.services.llm.get')
@patch('app.services.llm.get_gemini_client')
def test_completion_joins_parts_and_caches(mock_client, mock_get, mock_set):
    from app.services.llm import complete

    mock_get.return_value = None
    mock_client.return_value.models.generate_content.return_value = _response('{"intent": ', '"order"}')

    result = complete("order prompt")

    assert result == '{"intent": "order"}'
    key = make_key("llm", settings.llm_model, "order prompt")
    assert key.startswith("llm:")
    mock_set.assert_called_once_with(key, result, settings.llm_cache_ttl)


@patch('app.services.llm.get')
@patch('app.services.llm.get_gemini_client')
def test_cache_hit_skips_client(mock_client, mock_get):
    from app.services.llm import complete

    mock_get.return_value = '{"intent": "menu"}'

    assert complete("menu prompt") == '{"intent": "menu"}'
    mock_client.assert_not_called()


@patch('app.services.llm.set')
@patch('app.services.llm.get')
@patch('app.services.llm.get_gemini_client')
def test_transport_error_raises_completion_failed(mock_client, mock_get, mock_set):
    from app.services.llm import complete

    mock_get.return_value = None
    mock_client.return_value.models.generate_content.side_effect = ConnectionError("reset by peer")

    with pytest.raises(CompletionFailed):
        complete("prompt")
    mock_set.assert_not_called()


@pytest.mark.parametrize("response", [
    SimpleNamespace(candidates=[]),
    SimpleNamespace(candidates=None),
    SimpleNamespace(candidates=[SimpleNamespace(content=None, finish_reason="SAFETY")]),
    _response(None, "", finish_reason="MAX_TOKENS"),
])
@patch('app.services.llm.get')
@patch('app.services.llm.get_gemini_client')
def test_empty_candidates_raise_completion_failed(mock_client, mock_get, response):
    from app.services.llm import complete

    mock_get.return_value = None
    mock_client.return_value.models.generate_content.return_value = response

    with pytest.raises(CompletionFailed):
        complete("prompt")


@patch('app.services.llm.get_gemini_client')
def test_init_llm_client_reports_failure(mock_client):
    from app.services.llm import init_llm_client

    mock_client.side_effect = ValueError("Gemini API key not configured")
    assert init_llm_client() == {"status": "failed", "error": "Gemini API key not configured"}

    mock_client.side_effect = None
    mock_client.return_value = MagicMock()
    assert init_llm_client() == {"status": "loaded"}
