"""
Text-generation client for AP style conversion.

A thin wrapper over the OpenAI chat-completions endpoint using direct HTTP.
One attempt per call: retries are left to the visitor.
"""

import logging
import os
import re
import time
from typing import Optional, Protocol

import requests

from apps.core.exceptions import UpstreamError, UpstreamTimeoutError
from apps.core.observability import record_upstream_metrics

from .config import ConverterConfig, DEFAULT_API_URL
from .token_utils import check_within_limit, get_model_limit

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"^```(?:html)?\s*\n?(.*?)\n?```$", re.DOTALL | re.IGNORECASE)


def strip_code_fences(raw_text: str) -> str:
    """
    Remove a markdown code fence wrapped around the whole response.
    """
    if not raw_text:
        return ""

    text = raw_text.strip()
    match = _FENCE_PATTERN.match(text)
    if match:
        text = match.group(1).strip()
    return text


class TextGenerationClient(Protocol):
    def generate(self, prompt: str, model: str) -> str:
        """Return the generated text or raise UpstreamError."""
        ...


class OpenAIChatClient:
    """
    Chat-completions client.

    Raises UpstreamTimeoutError when the API does not answer within
    ``timeout`` seconds and UpstreamError for any other failure, keeping the
    provider's message for the logs.
    """

    def __init__(
        self,
        api_key: str,
        api_url: Optional[str] = None,
        max_tokens: int = 4000,
        temperature: float = 0.3,
        timeout: int = 60,
    ):
        self.api_key = api_key
        self.api_url = api_url or DEFAULT_API_URL
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.proxies = {
            k: v for k, v in {
                "http": os.getenv("HTTP_PROXY") or os.getenv("http_proxy"),
                "https": os.getenv("HTTPS_PROXY") or os.getenv("https_proxy"),
            }.items() if v
        } or None

    @classmethod
    def from_config(cls, config: ConverterConfig) -> 'OpenAIChatClient':
        return cls(
            api_key=config.api_key,
            api_url=config.api_url,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            timeout=config.timeout,
        )

    def build_payload(self, prompt: str, model: str) -> dict:
        return {
            "model": model,
            "messages": [
                {
                    "role": "user",
                    "content": prompt,
                }
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    def generate(self, prompt: str, model: str) -> str:
        fits, input_tokens, _ = check_within_limit(prompt, None, self.max_tokens, model)
        if not fits:
            logger.warning(
                "Prompt may exceed model limits: %s input + %s output > %s",
                input_tokens, self.max_tokens, get_model_limit(model),
            )

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        start_time = time.perf_counter()
        try:
            text = self._post(headers, self.build_payload(prompt, model))
        except UpstreamError:
            record_upstream_metrics(model, (time.perf_counter() - start_time) * 1000, success=False)
            raise

        record_upstream_metrics(model, (time.perf_counter() - start_time) * 1000, success=True)
        return text

    def _post(self, headers: dict, payload: dict) -> str:
        try:
            resp = requests.post(
                self.api_url,
                headers=headers,
                json=payload,
                timeout=self.timeout,
                proxies=self.proxies,
            )
        except requests.Timeout as exc:
            logger.warning("Text generation timed out after %ss", self.timeout)
            raise UpstreamTimeoutError(f"Request timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            logger.warning("Text generation HTTP call failed: %s", exc)
            raise UpstreamError(str(exc)) from exc

        raw_text = resp.text or ""
        try:
            data = resp.json()
        except ValueError as exc:
            logger.warning("Text generation response parse error: %s - %s", resp.status_code, raw_text[:400])
            raise UpstreamError("Unexpected API response") from exc

        error = data.get("error") if isinstance(data, dict) else None
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            logger.warning("Text generation API error: %s - %s", resp.status_code, raw_text[:400])
            raise UpstreamError(message or "Unknown API error")

        if resp.status_code != 200:
            logger.warning("Text generation HTTP call failed: %s - %s", resp.status_code, raw_text[:400])
            raise UpstreamError(f"HTTP {resp.status_code}")

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if not isinstance(content, str):
            logger.warning("Unexpected text generation response: %s", raw_text[:400])
            raise UpstreamError("Unexpected API response")

        return content
