"""
Error taxonomy and user-facing translation for AI analysis failures.

Every failure the adapter can produce is classified into an
:class:`ErrorKind`. :func:`translate` maps each kind to exactly one
canonical message template so the same failure always surfaces the same
guidance to the caller.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Stable classification of analysis failures."""

    UNSUPPORTED_MODEL = "UnsupportedModel"
    TEMPLATE_ERROR = "TemplateError"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    RATE_LIMITED = "RateLimited"
    QUOTA_EXCEEDED = "QuotaExceeded"
    MODEL_NOT_FOUND = "ModelNotFound"
    MALFORMED_RESPONSE = "MalformedResponse"
    TIMEOUT = "Timeout"
    PROVIDER_ERROR = "ProviderError"
    NETWORK_ERROR = "NetworkError"
    MISSING_CREDENTIAL = "MissingCredential"
    INVALID_CREDENTIAL = "InvalidCredential"
    INVALID_INPUT = "InvalidInput"


_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.UNSUPPORTED_MODEL: "Unsupported model: {model}. Available models: {known_models}",
    ErrorKind.TEMPLATE_ERROR: "Analysis prompt template is invalid: {detail}",
    ErrorKind.UNAUTHORIZED: (
        "Invalid {provider} API credential. Please check {credential_env} "
        "and ensure it has not expired."
    ),
    ErrorKind.FORBIDDEN: (
        "Access denied by {provider}. Please ensure the credential in "
        "{credential_env} has the required permissions."
    ),
    ErrorKind.RATE_LIMITED: "{provider} rate limit exceeded. Please try again later.",
    ErrorKind.QUOTA_EXCEEDED: "{provider} API quota exceeded. Please check your account billing.",
    ErrorKind.MODEL_NOT_FOUND: 'Model "{model}" not found. Please check the model name.',
    ErrorKind.MALFORMED_RESPONSE: "Invalid response format from {provider} API.",
    ErrorKind.TIMEOUT: (
        "Request timeout. The analysis is taking too long to complete. "
        "Please try with a smaller dataset or try again later."
    ),
    ErrorKind.PROVIDER_ERROR: "{provider} API error ({status}): {detail}",
    ErrorKind.NETWORK_ERROR: "Network error while contacting {provider}: {detail}",
    ErrorKind.MISSING_CREDENTIAL: (
        "{provider} API credential configuration error. "
        "Please set the {credential_env} environment variable."
    ),
    ErrorKind.INVALID_CREDENTIAL: (
        "{provider} API credential in {credential_env} contains characters "
        "that cannot be sent in an HTTP header. Please check the value."
    ),
    ErrorKind.INVALID_INPUT: "{detail}",
}


class _Context(dict):
    """Format mapping that renders absent values as 'unknown'."""

    def __missing__(self, key):
        return "unknown"


def translate(kind: ErrorKind, **context: Any) -> str:
    """
    Map an error kind to its canonical user-facing message.

    Args:
        kind: The failure classification
        **context: Template parameters such as ``model``, ``known_models``,
                   ``provider``, ``credential_env``, ``status``, ``detail``

    Returns:
        The rendered message
    """
    values = _Context({k: v for k, v in context.items() if v is not None})
    if isinstance(values.get("known_models"), (list, tuple)):
        values["known_models"] = ", ".join(values["known_models"])
    return _MESSAGES[ErrorKind(kind)].format_map(values)


class AnalysisError(Exception):
    """
    Classified analysis failure.

    Raised by the fail-fast stages (model resolution, prompt building,
    credential lookup) and converted into a failed ``AnalysisResult`` by
    the analyzer.

    Attributes:
        kind: ErrorKind classification
        message: Translated user-facing message
        detail: Original provider or diagnostic detail, if any
        provider_status: HTTP status reported by the provider, if any
    """

    def __init__(
        self,
        kind: ErrorKind,
        detail: Optional[str] = None,
        provider_status: Optional[int] = None,
        **context: Any
    ):
        self.kind = ErrorKind(kind)
        self.detail = detail
        self.provider_status = provider_status
        self.context = context
        self.message = translate(self.kind, detail=detail, status=provider_status, **context)
        super().__init__(self.message)
