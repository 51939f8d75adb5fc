"""
Tests for the text-generation client and prompt templates.
"""

import pytest
import requests
from unittest.mock import MagicMock, patch

from apps.conversion.config import ConverterConfig
from apps.conversion.llm import OpenAIChatClient, strip_code_fences
from apps.conversion.prompts import AP_STYLE_V1, PromptTemplate, build_ap_prompt, prompt_registry
from apps.conversion.token_utils import check_within_limit, estimate_tokens, get_model_limit
from apps.core.exceptions import UpstreamError, UpstreamTimeoutError


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def client():
    return OpenAIChatClient(api_key='sk-test', api_url='https://llm.invalid/v1/chat/completions')


def _response(status_code=200, json_data=None, text=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text if text is not None else str(json_data)
    if json_data is None:
        resp.json.side_effect = ValueError("No JSON")
    else:
        resp.json.return_value = json_data
    return resp


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


# ============================================================================
# Client Tests
# ============================================================================

class TestOpenAIChatClient:
    """One request per call, failures mapped to UpstreamError."""

    def test_success(self, client):
        with patch('apps.conversion.llm.requests.post', return_value=_response(json_data=_completion("<p>AP</p>"))) as post:
            assert client.generate("prompt", "gpt-4o-mini") == "<p>AP</p>"

        post.assert_called_once()
        args, kwargs = post.call_args
        assert args[0] == 'https://llm.invalid/v1/chat/completions'
        assert kwargs['json'] == {
            "model": "gpt-4o-mini",
            "messages": [{"role": "user", "content": "prompt"}],
            "max_tokens": 4000,
            "temperature": 0.3,
        }
        assert kwargs['headers']['Authorization'] == 'Bearer sk-test'
        assert kwargs['timeout'] == 60

    def test_timeout(self, client):
        with patch('apps.conversion.llm.requests.post', side_effect=requests.Timeout("read timed out")):
            with pytest.raises(UpstreamTimeoutError):
                client.generate("prompt", "gpt-4o-mini")

    def test_connection_error(self, client):
        with patch('apps.conversion.llm.requests.post', side_effect=requests.ConnectionError("refused")):
            with pytest.raises(UpstreamError) as exc_info:
                client.generate("prompt", "gpt-4o-mini")

        assert not isinstance(exc_info.value, UpstreamTimeoutError)
        assert "refused" in str(exc_info.value)

    def test_api_error_message(self, client):
        body = {"error": {"message": "Incorrect API key provided", "type": "invalid_request_error"}}
        with patch('apps.conversion.llm.requests.post', return_value=_response(401, body)):
            with pytest.raises(UpstreamError) as exc_info:
                client.generate("prompt", "gpt-4o-mini")

        assert str(exc_info.value) == "Incorrect API key provided"

    def test_non_json_response(self, client):
        with patch('apps.conversion.llm.requests.post', return_value=_response(502, None, text="Bad Gateway")):
            with pytest.raises(UpstreamError) as exc_info:
                client.generate("prompt", "gpt-4o-mini")

        assert str(exc_info.value) == "Unexpected API response"

    def test_error_status_without_error_body(self, client):
        with patch('apps.conversion.llm.requests.post', return_value=_response(503, {"status": "down"})):
            with pytest.raises(UpstreamError) as exc_info:
                client.generate("prompt", "gpt-4o-mini")

        assert str(exc_info.value) == "HTTP 503"

    def test_missing_choices(self, client):
        with patch('apps.conversion.llm.requests.post', return_value=_response(json_data={"choices": []})):
            with pytest.raises(UpstreamError) as exc_info:
                client.generate("prompt", "gpt-4o-mini")

        assert str(exc_info.value) == "Unexpected API response"

    def test_no_retry(self, client):
        with patch('apps.conversion.llm.requests.post', side_effect=requests.ConnectionError("refused")) as post:
            with pytest.raises(UpstreamError):
                client.generate("prompt", "gpt-4o-mini")

        assert post.call_count == 1

    def test_from_config(self):
        config = ConverterConfig(api_key='sk-x', api_url='https://llm.invalid/', timeout=10, max_tokens=100, temperature=0.1)
        client = OpenAIChatClient.from_config(config)

        assert client.api_key == 'sk-x'
        assert client.timeout == 10
        assert client.build_payload("p", "gpt-4o")["max_tokens"] == 100


class TestStripCodeFences:

    def test_html_fence(self):
        assert strip_code_fences("```html\n<p>x</p>\n```") == "<p>x</p>"

    def test_bare_fence(self):
        assert strip_code_fences("```\n<p>x</p>\n```") == "<p>x</p>"

    def test_no_fence(self):
        assert strip_code_fences("  <p>x</p>\n") == "<p>x</p>"

    def test_empty(self):
        assert strip_code_fences("") == ""
        assert strip_code_fences(None) == ""


# ============================================================================
# Prompt Tests
# ============================================================================

class TestAPPrompt:
    """The AP prompt is a static substitution of title and body."""

    def test_deterministic(self):
        assert build_ap_prompt("Shop Opens", "<p>Body</p>") == build_ap_prompt("Shop Opens", "<p>Body</p>")

    def test_contains_rules(self):
        prompt = build_ap_prompt("Shop Opens", "<p>Body</p>")

        assert "Lead paragraph: Maximum 35 words" in prompt
        assert "Inverted pyramid structure" in prompt
        assert "Numbers: Spell out one-nine, numerals for 10+" in prompt
        assert "Currency: PKR format" in prompt
        assert "Title: Shop Opens\nContent: <p>Body</p>" in prompt
        assert prompt.endswith("Return ONLY the converted article content in proper HTML format with paragraphs.")

    def test_braces_in_body_are_literal(self):
        prompt = build_ap_prompt("Title", "<p>{not a placeholder}</p>")
        assert "{not a placeholder}" in prompt

    def test_registered(self):
        assert prompt_registry.get("ap_style") is AP_STYLE_V1
        assert prompt_registry.get("ap_style", "1.0") is AP_STYLE_V1
        assert prompt_registry.get("missing") is None

    def test_unknown_version(self):
        with pytest.raises(ValueError):
            build_ap_prompt("Title", "Body", version="9.9")

    def test_missing_variable(self):
        template = PromptTemplate(name="t", template="{title} {content}")
        with pytest.raises(ValueError):
            template.render(title="x")


class TestTokenUtils:

    def test_estimate_tokens(self):
        assert estimate_tokens("") == 0
        assert estimate_tokens("word " * 100) > 50

    def test_model_limits(self):
        assert get_model_limit("gpt-4o-mini") == 128000
        assert get_model_limit("unknown") == 8000

    def test_check_within_limit(self):
        fits, input_tokens, available = check_within_limit("short prompt", None, 4000, "gpt-4o-mini")
        assert fits
        assert available == 128000 - input_tokens
