import inspect
import logging
import json

import httpx
import pytest
from openai import AsyncOpenAI

from scanbrief.services.ai.invoker import ProviderInvoker
from scanbrief.services.ai.settings import AISettings
from scanbrief.services.ai_analyzer import SecurityAnalyzer

OPENAI_KEY = "sk-test-openai-0123456789"
GITHUB_KEY = "ghp_test_github_0123456789"

HOST_DATA = {
    "hosts": [
        {"ip": "1.2.3.4", "services": [{"port": 22, "service": "ssh"}]},
    ]
}


def completion_body(text="Overview: 1 host, risk Low.", choices=None):
    """Minimal chat.completion response envelope."""
    if choices is None:
        choices = [
            {
                "index": 0,
                "message": {"role": "assistant", "content": text},
                "finish_reason": "stop",
            }
        ]
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "test-model",
        "choices": choices,
    }


def error_body(message, code=None):
    return {"error": {"message": message, "type": "invalid_request_error", "code": code}}


class FakeProvider:
    """Stands in for the provider endpoint through an httpx mock transport.

    ``handler`` receives each ``httpx.Request`` and returns an
    ``httpx.Response`` (or raises an httpx transport error). Coroutine
    handlers are awaited.
    """

    def __init__(self, handler=None):
        self.handler = handler or (lambda request: httpx.Response(200, json=completion_body()))
        self.requests = []

    async def _handle(self, request):
        self.requests.append(request)
        response = self.handler(request)
        if inspect.isawaitable(response):
            response = await response
        return response

    def client_factory(self, base_url, api_key, timeout):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self._handle))
        return AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            http_client=http_client,
        )

    @property
    def bodies(self):
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def settings():
    return AISettings()


@pytest.fixture
def env():
    return {"OPENAI_API_KEY": OPENAI_KEY, "GITHUB_TOKEN": GITHUB_KEY}


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def make_analyzer(settings, env):
    def _make(fake, settings=settings, env=env):
        return SecurityAnalyzer(
            settings=settings,
            invoker=ProviderInvoker(client_factory=fake.client_factory),
            env=env,
        )

    return _make


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root = logging.getLogger("scanbrief")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
    root.propagate = True
