"""
Request normalization.

Turns a built prompt and a logical model into the provider call payload.
The capability flags of the model are the only input that decides message
framing, sampling parameters, the token-limit field and the timeout.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .model_table import LogicalModel, TokenLimitKind
from .prompt_builder import BuiltPrompt
from .settings import AISettings

_TOKEN_LIMIT_FIELDS = {
    TokenLimitKind.STANDARD: "max_tokens",
    TokenLimitKind.COMPLETION_CONSTRAINED: "max_completion_tokens",
}


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class SamplingParams:
    temperature: float
    top_p: float


@dataclass(frozen=True)
class TokenLimit:
    field_kind: TokenLimitKind
    value: int

    @property
    def field_name(self) -> str:
        return _TOKEN_LIMIT_FIELDS[self.field_kind]


@dataclass(frozen=True)
class ProviderCallPayload:
    """
    Everything needed for one outbound chat-completions call.

    Attributes:
        messages: Ordered chat messages
        model_wire_name: Model identifier sent to the provider
        sampling: Temperature/top-p, or None when the model rejects them
        token_limit: Token budget and which field carries it
        base_url: Provider API base URL
        timeout: Wall-clock timeout in seconds
        provider_name: Human-readable provider name for messages
        credential_env: Environment variable holding the credential
    """

    messages: Tuple[ChatMessage, ...]
    model_wire_name: str
    sampling: Optional[SamplingParams]
    token_limit: TokenLimit
    base_url: str
    timeout: float
    provider_name: str
    credential_env: str

    def to_request_kwargs(self) -> Dict[str, Any]:
        """Render the chat-completions body fields."""
        kwargs: Dict[str, Any] = {
            "model": self.model_wire_name,
            "messages": [m.to_dict() for m in self.messages],
            self.token_limit.field_name: self.token_limit.value,
        }
        if self.sampling is not None:
            kwargs["temperature"] = self.sampling.temperature
            kwargs["top_p"] = self.sampling.top_p
        return kwargs


class RequestNormalizer:
    """
    Builds provider call payloads from capability flags.

    Attributes:
        settings: AISettings with token budgets, sampling values and timeouts
    """

    def __init__(self, settings: AISettings):
        self.settings = settings

    def normalize(self, prompt: BuiltPrompt, model: LogicalModel) -> ProviderCallPayload:
        """
        Construct the payload for *model*.

        Args:
            prompt: Built prompt
            model: Resolved logical model

        Returns:
            ProviderCallPayload

        Raises:
            ValueError: If the model carries an unknown token-limit kind
        """
        caps = model.capabilities
        return ProviderCallPayload(
            messages=self._build_messages(prompt.text, caps.uses_system_role),
            model_wire_name=model.wire_name,
            sampling=self._build_sampling(caps.supports_sampling_params),
            token_limit=self._build_token_limit(caps.token_limit_kind),
            base_url=model.provider.base_url,
            timeout=self._select_timeout(caps.token_limit_kind),
            provider_name=model.provider.display_name,
            credential_env=model.provider.credential_env,
        )

    def _build_messages(self, text: str, uses_system_role: bool) -> Tuple[ChatMessage, ...]:
        messages: List[ChatMessage] = []
        if uses_system_role:
            messages.append(ChatMessage("system", self.settings.system_prompt))
        messages.append(ChatMessage("user", text))
        return tuple(messages)

    def _build_sampling(self, supported: bool) -> Optional[SamplingParams]:
        if not supported:
            return None
        return SamplingParams(self.settings.temperature, self.settings.top_p)

    def _build_token_limit(self, kind: TokenLimitKind) -> TokenLimit:
        if kind is TokenLimitKind.COMPLETION_CONSTRAINED:
            return TokenLimit(kind, self.settings.completion_max_tokens)
        if kind is TokenLimitKind.STANDARD:
            return TokenLimit(kind, self.settings.max_tokens)
        raise ValueError(f"Unknown token limit kind: {kind!r}")

    def _select_timeout(self, kind: TokenLimitKind) -> float:
        # Completion-constrained models get the reasoning timeout
        if kind is TokenLimitKind.COMPLETION_CONSTRAINED:
            return self.settings.reasoning_timeout
        return self.settings.timeout
