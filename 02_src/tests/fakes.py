"""Fake gateway SDK and script host used across tests."""

import asyncio
from unittest.mock import AsyncMock, Mock

SDK_SRC = "tests.fake_sdk"
SDK_GLOBAL = "sdk"


def stream_of(*parts, error=None, hang=False):
    """Factory of async generators yielding ``{"text": part}`` items."""

    async def gen():
        for part in parts:
            yield {"text": part}
        if error is not None:
            raise error
        if hang:
            await asyncio.Event().wait()

    return gen


class FakeAI:
    """Scriptable ``ai`` namespace of a gateway SDK."""

    def __init__(self):
        self.chat_calls = []
        self.completion_calls = []
        # Each entry: Exception to raise, callable producing a response, or a value
        self.responses = [stream_of("Hello", " world.")]
        self.completion_chunks = ["Fallback", " answer."]
        self.completion_error = None
        self.completion_delay = 0.0
        self.models = [
            {"id": "claude-3-5-sonnet", "display_name": "Claude 3.5 Sonnet"},
            {"id": "gpt-4o", "name": "GPT-4o"},
        ]

    async def chat(self, prompt, test_mode=False, options=None):
        self.chat_calls.append((prompt, test_mode, options))
        behavior = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(behavior, Exception):
            raise behavior
        if callable(behavior):
            return behavior()
        return behavior

    async def completion(self, options):
        self.completion_calls.append(options)
        if self.completion_delay:
            await asyncio.sleep(self.completion_delay)
        if self.completion_error is not None:
            raise self.completion_error
        for chunk in self.completion_chunks:
            options["on_stream_update"](chunk)
        return "".join(self.completion_chunks)

    async def list_models(self):
        if isinstance(self.models, Exception):
            raise self.models
        return self.models


class FakeSDK:
    """Gateway SDK object as published into the namespace."""

    def __init__(self, signed_in=True):
        self.ai = FakeAI()
        self.auth = Mock()
        self.auth.is_signed_in = AsyncMock(return_value=signed_in)


class FakeScriptHost:
    """Script host whose injected 'script' publishes a prepared SDK object."""

    def __init__(self, sdk=None, load_delay=0.0, fail=False, global_name=SDK_GLOBAL):
        self.namespace = {}
        self.sdk = sdk
        self.load_delay = load_delay
        self.fail = fail
        self.global_name = global_name
        self.injections = []

    def has_loader(self, src):
        return src in [s for s, _ in self.injections]

    def inject(self, src, fresh=False):
        self.injections.append((src, fresh))
        return asyncio.ensure_future(self._load())

    async def _load(self):
        if self.load_delay:
            await asyncio.sleep(self.load_delay)
        if self.fail:
            raise ImportError("script failed to load")
        if self.sdk is not None:
            self.namespace[self.global_name] = self.sdk

