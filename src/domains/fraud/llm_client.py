"""Adapter for the external language-model service that writes risk explanations."""

import time
from abc import ABC, abstractmethod

import httpx
import structlog

from .errors import ExternalServiceError

logger = structlog.get_logger()


class ExplanationClient(ABC):
    """Turns a prompt into explanation text. One attempt, no retries."""

    @abstractmethod
    async def explain(self, prompt: str) -> str:
        """Return explanation text or raise ExternalServiceError."""
        ...

    async def aclose(self) -> None:  # noqa: B027
        """Release any held connections."""


class OpenAIExplanationClient(ExplanationClient):
    """Calls an OpenAI-compatible ``/chat/completions`` endpoint over httpx.

    Every failure mode (missing key, timeout, transport error, non-2xx
    response, unexpected payload, empty text) surfaces as
    ExternalServiceError so the caller can fall back.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float = 10.0,
        max_tokens: int = 200,
        temperature: float = 0.2,
        system_prompt: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._system_prompt = system_prompt
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    @property
    def model(self) -> str:
        return self._model

    def _payload(self, prompt: str) -> dict:
        messages = []
        if self._system_prompt:
            messages.append({"role": "system", "content": self._system_prompt})
        messages.append({"role": "user", "content": prompt})
        return {
            "model": self._model,
            "messages": messages,
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
        }

    async def explain(self, prompt: str) -> str:
        if not self._api_key:
            raise ExternalServiceError("no API key configured for the explanation service")

        start = time.perf_counter()
        try:
            response = await self._client.post(
                "/chat/completions",
                json=self._payload(prompt),
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as e:
            raise ExternalServiceError(f"explanation request timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(
                f"explanation service returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"explanation request failed: {e}") from e
        except ValueError as e:
            raise ExternalServiceError("explanation service returned invalid JSON") from e

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ExternalServiceError("explanation response is missing message content") from e

        if not isinstance(content, str) or not content.strip():
            raise ExternalServiceError("explanation response is empty")

        logger.info(
            "explanation_generated",
            model=self._model,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return content.strip()

    async def aclose(self) -> None:
        await self._client.aclose()
