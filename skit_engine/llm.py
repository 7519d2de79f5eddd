"""Text-generation backends for scene scripts.

The orchestrator only needs something awaitable with this shape:

    async def __call__(self, stage: str, prompt: PromptSpec) -> Generation | None: ...

`stage` is a label for log lines ("skit" for scene generation). Returning
None and returning a Generation with blank text both mean "try again".

HttpLLM talks to a completion server over HTTP; EchoLLM hands the prompt
straight back so a hand-written script can be pushed through parsing
without any server.
"""

from __future__ import annotations

import logging
from typing import Literal, NamedTuple, Protocol

import httpx
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Prompt and generation payloads
# ---------------------------------------------------------------------------

class PromptSpec(BaseModel):
    """Prompt text plus the generation knobs a scene request carries."""

    prompt: str
    stop: list[str] = Field(default_factory=list)
    min_tokens: int | None = None
    max_tokens: int = 400
    include_history: bool = True  # only meaningful to chat-style hosts


class Generation(BaseModel):
    result: str


class LLM(Protocol):
    async def __call__(self, stage: str, prompt: PromptSpec) -> Generation | None: ...


class LLMError(RuntimeError):
    """Raised by HttpLLM when a generation call cannot produce text."""


# ---------------------------------------------------------------------------
# HttpLLM
# ---------------------------------------------------------------------------

ProviderFormat = Literal["koboldcpp", "openai"]


class _Wire(NamedTuple):
    path: str
    result_key: str  # list of {"text": ...} objects in the reply
    label: str


_WIRES: dict[str, _Wire] = {
    "koboldcpp": _Wire("/api/v1/generate", "results", "KoboldCpp"),
    "openai": _Wire("/v1/completions", "choices", "OpenAI-compatible"),
}


class HttpLLM:
    """Scene generation against a KoboldCpp or OpenAI-style completion server.

    Both wire formats return the text under ``<result_key>[0].text``; they
    differ in endpoint and in how the token budget and stop strings are
    named. ``include_history`` is never sent since neither endpoint keeps
    a chat log.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "koboldcpp",
        model: str = "",
        timeout: float = 120.0,
    ) -> None:
        self._wire = _WIRES[provider_format]
        self._url = provider_url.rstrip("/") + self._wire.path
        self._openai = provider_format == "openai"
        self._model = model
        self._timeout = timeout
        self._auth = {"Authorization": f"Bearer {api_key}"} if api_key else {}

    def _payload(self, spec: PromptSpec) -> dict:
        if not self._openai:
            body: dict = {"prompt": spec.prompt, "max_length": spec.max_tokens}
            if spec.stop:
                body["stop_sequence"] = spec.stop
            return body

        body = {"prompt": spec.prompt, "max_tokens": spec.max_tokens}
        if self._model:
            body["model"] = self._model
        if spec.stop:
            body["stop"] = spec.stop
        if spec.min_tokens is not None:
            body["min_tokens"] = spec.min_tokens
        return body

    def _text_from(self, data: object) -> str:
        items = data.get(self._wire.result_key) if isinstance(data, dict) else None
        first = items[0] if isinstance(items, list) and items else None
        if not isinstance(first, dict) or "text" not in first:
            raise LLMError(f"Unexpected response format from {self._wire.label} backend")
        return first["text"]

    async def _post(self, body: dict) -> httpx.Response:
        headers = {"Content-Type": "application/json", **self._auth}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self._url, json=body, headers=headers)
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to scene generator at {self._url}") from e
        except httpx.TimeoutException as e:
            raise LLMError(f"Scene generator timed out after {self._timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(f"Scene generator answered HTTP {e.response.status_code}") from e
        return resp

    async def __call__(self, stage: str, prompt: PromptSpec) -> Generation | None:
        logger.debug("POST %s stage=%s prompt_len=%d", self._url, stage, len(prompt.prompt))
        resp = await self._post(self._payload(prompt))
        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError(f"Unexpected response format from {self._wire.label} backend") from e
        text = self._text_from(data)
        logger.debug("stage=%s generated %d chars", stage, len(text))
        return Generation(result=text)


class EchoLLM:
    """Offline stand-in: the prompt comes back as the generated script.

    Posting a hand-written scene to ``/api/script/generate`` with this
    backend exercises retries and parsing end to end.
    """

    async def __call__(self, stage: str, prompt: PromptSpec) -> Generation | None:
        logger.debug("echo stage=%s prompt_len=%d", stage, len(prompt.prompt))
        return Generation(result=prompt.prompt)
