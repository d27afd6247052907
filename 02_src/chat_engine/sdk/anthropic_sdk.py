"""Gateway SDK backed by the Anthropic API.

Loaded by the script host through ``install(namespace, global_name)``;
the engine only reaches it through the namespace entry, the same way it
would reach any other gateway SDK.
"""

import os
from typing import Any, AsyncIterator, Callable

import anthropic

from ..config import DEFAULT_SDK_GLOBAL

DEFAULT_MAX_TOKENS = 8192

# Gateway model ids that need a concrete Anthropic model name
MODEL_ALIASES = {
    "claude-3-7-sonnet": "claude-3-7-sonnet-latest",
    "claude-3-5-sonnet": "claude-3-5-sonnet-latest",
    "claude-3-5-haiku": "claude-3-5-haiku-latest",
}

TEST_MODE_REPLY = "This is a test response. No model was called."


class GatewayAuth:
    """Signed-in state of the gateway."""

    def __init__(self, api_key: str | None):
        self._api_key = api_key

    async def is_signed_in(self) -> bool:
        return bool(self._api_key)


class GatewayAI:
    """Chat, completion and model listing entry points."""

    def __init__(self, api_key: str | None, max_tokens: int = DEFAULT_MAX_TOKENS):
        self._api_key = api_key
        self._max_tokens = max_tokens
        self._client: anthropic.AsyncAnthropic | None = None

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            if not self._api_key:
                raise PermissionError("ANTHROPIC_API_KEY is not set: not signed in")
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self._client

    def _request(self, prompt: Any, options: dict) -> dict:
        system = options.get("system_prompt") or ""
        if isinstance(prompt, str):
            messages = [{"role": "user", "content": prompt}]
        else:
            system_parts = [m["content"] for m in prompt if m.get("role") == "system"]
            if system_parts:
                system = "\n\n".join(system_parts)
            messages = [
                {"role": m["role"], "content": m["content"]}
                for m in prompt
                if m.get("role") != "system"
            ]

        model = options.get("model") or "claude-3-5-sonnet"
        request = {
            "model": MODEL_ALIASES.get(model, model),
            "max_tokens": options.get("max_tokens", self._max_tokens),
            "messages": messages,
        }
        if "temperature" in options:
            # Anthropic accepts 0..1; the gateway range is 0..2
            request["temperature"] = min(max(float(options["temperature"]), 0.0), 1.0)
        if system.strip():
            request["system"] = system.strip()
        return request

    async def _stream(self, request: dict) -> AsyncIterator[dict]:
        async with self._get_client().messages.stream(**request) as stream:
            async for text in stream.text_stream:
                yield {"text": text}

    @staticmethod
    async def _test_stream() -> AsyncIterator[dict]:
        for word in TEST_MODE_REPLY.split(" "):
            yield {"text": word + " "}

    async def chat(self, prompt: Any, test_mode: bool = False, options: dict | None = None) -> Any:
        """Chat with a model.

        Returns an async iterator of ``{"text": ...}`` parts when
        ``options["stream"]`` is set, otherwise a message object.
        """
        options = options or {}
        stream = bool(options.get("stream"))

        if test_mode:
            if stream:
                return self._test_stream()
            return {"message": {"role": "assistant", "content": [{"type": "text", "text": TEST_MODE_REPLY}]}}

        request = self._request(prompt, options)
        if stream:
            return self._stream(request)

        response = await self._get_client().messages.create(**request)
        return {
            "message": {
                "role": "assistant",
                "content": [block.model_dump() for block in response.content],
            }
        }

    async def completion(self, options: dict) -> str:
        """Streaming completion that reports progress through a callback."""
        on_update: Callable[[str], Any] | None = options.get("on_stream_update")
        if options.get("test_mode"):
            parts = self._test_stream()
        else:
            parts = self._stream(self._request(options.get("messages") or [], options))

        full_text = ""
        async for part in parts:
            full_text += part["text"]
            if on_update is not None:
                on_update(part["text"])
        return full_text

    async def list_models(self) -> list[dict]:
        page = await self._get_client().models.list(limit=100)
        return [model.model_dump() for model in page.data]


class GatewaySDK:
    """Object published into the host namespace."""

    def __init__(self, api_key: str | None = None):
        api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        self.ai = GatewayAI(api_key)
        self.auth = GatewayAuth(api_key)


def install(namespace: dict, global_name: str | None = None) -> None:
    """Publish the SDK under ``global_name``, or the configured default."""
    name = global_name or os.getenv("CHAT_ENGINE_SDK_GLOBAL", DEFAULT_SDK_GLOBAL)
    namespace[name] = GatewaySDK()
