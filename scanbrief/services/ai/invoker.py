"""
Provider invocation.

Performs exactly one outbound chat-completions call per analysis with a
bounded wall-clock timeout, extracts the generated text, and classifies
every failure into the :class:`~scanbrief.services.ai.errors.ErrorKind`
taxonomy. This is the only place where external failures become
``AnalysisResult`` failures; nothing here retries.
"""

import asyncio
from enum import Enum
from typing import Any, Callable, Optional

import openai
from openai import AsyncOpenAI

from ...models.analysis import AnalysisResult
from ...utils.logger import get_logger
from .errors import AnalysisError, ErrorKind
from .request_normalizer import ProviderCallPayload

log = get_logger(__name__)

ClientFactory = Callable[[str, str, float], AsyncOpenAI]

_STATUS_KINDS = {
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.MODEL_NOT_FOUND,
    429: ErrorKind.RATE_LIMITED,
}


def default_client_factory(base_url: str, api_key: str, timeout: float) -> AsyncOpenAI:
    """Create an AsyncOpenAI client for one call, with SDK retries disabled."""
    return AsyncOpenAI(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
        max_retries=0,
    )


class InvocationState(str, Enum):
    IDLE = "idle"
    SENT = "sent"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Invocation:
    """
    Lifecycle of a single outbound call: Idle -> Sent -> Succeeded | Failed.

    Attributes:
        payload: The payload being sent
        state: Current InvocationState
    """

    _ALLOWED = {
        InvocationState.IDLE: {InvocationState.SENT, InvocationState.FAILED},
        InvocationState.SENT: {InvocationState.SUCCEEDED, InvocationState.FAILED},
        InvocationState.SUCCEEDED: set(),
        InvocationState.FAILED: set(),
    }

    def __init__(self, payload: ProviderCallPayload):
        self.payload = payload
        self.state = InvocationState.IDLE

    def transition(self, new_state: InvocationState) -> None:
        if new_state not in self._ALLOWED[self.state]:
            raise RuntimeError(f"Invalid invocation transition {self.state.value} -> {new_state.value}")
        log.debug("Invocation %s: %s -> %s", self.payload.model_wire_name,
                  self.state.value, new_state.value)
        self.state = new_state


def redact(text: Optional[str], secret: Optional[str]) -> Optional[str]:
    """Remove every occurrence of *secret* from *text*."""
    if not text or not secret:
        return text
    return text.replace(secret, "[REDACTED]")


def extract_response_text(response: Any) -> Optional[str]:
    """
    Extract generated text from a chat-completions response.

    Returns:
        The message text, or None when the response does not contain
        exactly one choice with non-empty text content
    """
    choices = getattr(response, "choices", None)
    if not choices or len(choices) != 1:
        return None

    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if not isinstance(content, str) or not content.strip():
        return None

    return content


def provider_error_message(error: openai.APIStatusError) -> str:
    """Return the provider-reported message from an error response."""
    body = error.body
    if isinstance(body, dict):
        message = body.get("message")
        nested = body.get("error")
        if not message and isinstance(nested, dict):
            message = nested.get("message")
        if message:
            return str(message)
    return error.message or "Unknown error"


def _provider_error_code(error: openai.APIStatusError) -> Optional[str]:
    code = getattr(error, "code", None)
    if not code and isinstance(error.body, dict):
        code = error.body.get("code")
    return code


class ProviderInvoker:
    """
    Sends provider call payloads and classifies the outcome.

    Attributes:
        client_factory: Callable(base_url, api_key, timeout) -> AsyncOpenAI
    """

    def __init__(self, client_factory: Optional[ClientFactory] = None):
        self.client_factory = client_factory or default_client_factory

    async def invoke(self, payload: ProviderCallPayload, credential: str) -> AnalysisResult:
        """
        Perform one outbound call.

        Args:
            payload: Normalized provider call payload
            credential: Bearer credential for the provider

        Returns:
            AnalysisResult (success with text, or classified failure)
        """
        invocation = Invocation(payload)
        client = self.client_factory(payload.base_url, credential, payload.timeout)

        try:
            invocation.transition(InvocationState.SENT)
            response = await asyncio.wait_for(
                client.chat.completions.create(**payload.to_request_kwargs()),
                timeout=payload.timeout,
            )
        except (asyncio.TimeoutError, openai.APITimeoutError):
            return self._fail(invocation, ErrorKind.TIMEOUT,
                              detail=f"no response within {payload.timeout:g}s")
        except openai.APIConnectionError as e:
            detail = str(e.__cause__ or e)
            return self._fail(invocation, ErrorKind.NETWORK_ERROR, detail=redact(detail, credential))
        except openai.APIStatusError as e:
            return self._fail_status(invocation, e, credential)
        except openai.APIResponseValidationError as e:
            return self._fail(invocation, ErrorKind.MALFORMED_RESPONSE, detail=redact(str(e), credential))
        except openai.APIError as e:
            return self._fail(invocation, ErrorKind.PROVIDER_ERROR, detail=redact(str(e), credential))
        except Exception as e:
            # Raised by the SDK before the request leaves (header or body encoding)
            detail = redact(f"{type(e).__name__}: {e}", credential)
            return self._fail(invocation, ErrorKind.PROVIDER_ERROR, detail=detail)
        finally:
            await client.close()

        text = extract_response_text(response)
        if text is None:
            return self._fail(invocation, ErrorKind.MALFORMED_RESPONSE,
                              detail="response did not contain exactly one generated message")

        invocation.transition(InvocationState.SUCCEEDED)
        return AnalysisResult.success(text)

    def _fail_status(
        self,
        invocation: Invocation,
        error: openai.APIStatusError,
        credential: str
    ) -> AnalysisResult:
        status = error.status_code
        kind = _STATUS_KINDS.get(status, ErrorKind.PROVIDER_ERROR)
        if kind is ErrorKind.RATE_LIMITED and _provider_error_code(error) == "insufficient_quota":
            kind = ErrorKind.QUOTA_EXCEEDED

        detail = redact(provider_error_message(error), credential)
        return self._fail(invocation, kind, detail=detail, status=status)

    def _fail(
        self,
        invocation: Invocation,
        kind: ErrorKind,
        detail: Optional[str] = None,
        status: Optional[int] = None
    ) -> AnalysisResult:
        payload = invocation.payload
        error = AnalysisError(
            kind,
            detail=detail,
            provider_status=status,
            provider=payload.provider_name,
            credential_env=payload.credential_env,
            model=payload.model_wire_name,
        )
        invocation.transition(InvocationState.FAILED)
        log.error("%s call failed (%s): %s", payload.provider_name, kind.value, detail or error.message)
        return AnalysisResult.from_error(error)
