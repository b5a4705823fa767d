import asyncio

import httpx
import pytest

from scanbrief.services.ai.errors import ErrorKind
from scanbrief.services.ai.invoker import (
    Invocation,
    InvocationState,
    ProviderInvoker,
    extract_response_text,
    redact,
)
from scanbrief.services.ai.model_table import MODEL_TABLE
from scanbrief.services.ai.prompt_builder import build
from scanbrief.services.ai.request_normalizer import RequestNormalizer
from scanbrief.services.ai.settings import AISettings

from .conftest import OPENAI_KEY, HOST_DATA, FakeProvider, completion_body, error_body


def make_payload(model_key="gpt-4o", settings=None):
    settings = settings or AISettings()
    prompt = build(HOST_DATA, settings.analysis_template, 10000)
    return RequestNormalizer(settings).normalize(prompt, MODEL_TABLE[model_key])


def invoke(fake, payload=None, credential=OPENAI_KEY):
    invoker = ProviderInvoker(client_factory=fake.client_factory)
    return asyncio.run(invoker.invoke(payload or make_payload(), credential))


def test_success_returns_generated_text():
    fake = FakeProvider(lambda request: httpx.Response(200, json=completion_body("All clear.")))

    result = invoke(fake)

    assert result.ok
    assert result.text == "All clear."
    assert len(fake.requests) == 1


def test_request_matches_payload():
    fake = FakeProvider()
    payload = make_payload("gpt-4o")

    invoke(fake, payload)

    request = fake.requests[0]
    assert str(request.url) == "https://api.openai.com/v1/chat/completions"
    assert request.headers["Authorization"] == f"Bearer {OPENAI_KEY}"
    body = fake.bodies[0]
    assert body["model"] == "gpt-4o"
    assert body["max_tokens"] == 4000
    assert body["temperature"] == 0.1
    assert body["top_p"] == 1.0
    assert [m["role"] for m in body["messages"]] == ["system", "user"]


def test_reasoning_request_body_shape():
    fake = FakeProvider()

    invoke(fake, make_payload("github/o1-mini"))

    request = fake.requests[0]
    assert str(request.url) == "https://models.github.ai/inference/chat/completions"
    body = fake.bodies[0]
    assert body["model"] == "openai/o1-mini"
    assert body["max_completion_tokens"] == 16000
    assert "max_tokens" not in body
    assert "temperature" not in body
    assert [m["role"] for m in body["messages"]] == ["user"]


def test_unauthorized_does_not_leak_credential():
    fake = FakeProvider(lambda request: httpx.Response(
        401, json=error_body(f"Incorrect API key provided: {OPENAI_KEY}", code="invalid_api_key"),
    ))

    result = invoke(fake)

    assert not result.ok
    assert result.kind is ErrorKind.UNAUTHORIZED
    assert result.provider_status == 401
    assert OPENAI_KEY not in result.message
    assert OPENAI_KEY not in result.detail
    assert "[REDACTED]" in result.detail
    assert "OPENAI_API_KEY" in result.message


@pytest.mark.parametrize(
    "status,kind",
    [
        (403, ErrorKind.FORBIDDEN),
        (404, ErrorKind.MODEL_NOT_FOUND),
        (429, ErrorKind.RATE_LIMITED),
    ],
)
def test_status_codes_are_classified(status, kind):
    fake = FakeProvider(lambda request: httpx.Response(status, json=error_body("nope")))

    result = invoke(fake)

    assert result.kind is kind
    assert result.provider_status == status
    assert len(fake.requests) == 1


def test_model_not_found_names_the_model():
    fake = FakeProvider(lambda request: httpx.Response(404, json=error_body("The model does not exist")))

    result = invoke(fake, make_payload("gpt-4-turbo"))

    assert result.message == 'Model "gpt-4-turbo" not found. Please check the model name.'


def test_insufficient_quota_is_distinct_from_rate_limit():
    fake = FakeProvider(lambda request: httpx.Response(
        429, json=error_body("You exceeded your current quota", code="insufficient_quota"),
    ))

    result = invoke(fake)

    assert result.kind is ErrorKind.QUOTA_EXCEEDED


def test_other_status_is_provider_error_with_verbatim_message():
    fake = FakeProvider(lambda request: httpx.Response(500, json=error_body("The server had an error")))

    result = invoke(fake)

    assert result.kind is ErrorKind.PROVIDER_ERROR
    assert result.provider_status == 500
    assert result.detail == "The server had an error"
    assert result.message == "OpenAI API error (500): The server had an error"
    assert len(fake.requests) == 1


def test_transport_timeout_is_classified_without_retry():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    fake = FakeProvider(handler)

    result = invoke(fake)

    assert result.kind is ErrorKind.TIMEOUT
    assert len(fake.requests) == 1


def test_wall_clock_timeout_is_enforced():
    async def handler(request):
        await asyncio.sleep(5)
        return httpx.Response(200, json=completion_body())

    fake = FakeProvider(handler)
    payload = make_payload(settings=AISettings(timeout=0.05))

    result = invoke(fake, payload)

    assert result.kind is ErrorKind.TIMEOUT
    assert len(fake.requests) == 1


def test_connection_failure_is_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    fake = FakeProvider(handler)

    result = invoke(fake)

    assert result.kind is ErrorKind.NETWORK_ERROR
    assert result.provider_status is None


@pytest.mark.parametrize(
    "body",
    [
        completion_body(choices=[]),
        completion_body(text=""),
        completion_body(text="   "),
        completion_body(choices=[
            {"index": 0, "message": {"role": "assistant", "content": "a"}, "finish_reason": "stop"},
            {"index": 1, "message": {"role": "assistant", "content": "b"}, "finish_reason": "stop"},
        ]),
    ],
    ids=["no-choices", "empty-text", "blank-text", "two-choices"],
)
def test_unexpected_response_is_malformed(body):
    fake = FakeProvider(lambda request: httpx.Response(200, json=body))

    result = invoke(fake)

    assert result.kind is ErrorKind.MALFORMED_RESPONSE


def test_extract_response_text_handles_missing_attributes():
    assert extract_response_text(object()) is None
    assert extract_response_text("not a response") is None


def test_invocation_lifecycle():
    invocation = Invocation(make_payload())
    assert invocation.state is InvocationState.IDLE

    invocation.transition(InvocationState.SENT)
    invocation.transition(InvocationState.SUCCEEDED)

    assert invocation.state is InvocationState.SUCCEEDED
    with pytest.raises(RuntimeError):
        invocation.transition(InvocationState.FAILED)


def test_redact():
    assert redact("key sk-1 leaked", "sk-1") == "key [REDACTED] leaked"
    assert redact(None, "sk-1") is None
    assert redact("text", None) == "text"


def test_client_side_failure_is_classified():
    fake = FakeProvider()
    credential = "sk-clé-0123456789"

    result = invoke(fake, credential=credential)

    assert result.kind is ErrorKind.PROVIDER_ERROR
    assert "UnicodeEncodeError" in result.detail
    assert credential not in result.detail
    assert fake.requests == []
