"""
Model capability table.

Maps caller-facing logical model keys to the provider family that hosts
them, the exact wire name that provider expects, and the capability flags
that decide the request shape. Onboarding a model means adding one row to
``_MODEL_ROWS``; nothing else in the request path branches on provider or
model identity.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional

from .errors import AnalysisError, ErrorKind


class TokenLimitKind(str, Enum):
    """Which token-budget field a model family accepts."""

    STANDARD = "standard"
    # Reasoning families: budget covers hidden reasoning plus visible output
    COMPLETION_CONSTRAINED = "completion_constrained"


@dataclass(frozen=True)
class ProviderFamily:
    """
    An externally hosted chat-completions endpoint.

    Attributes:
        name: Short identifier ('openai', 'github')
        display_name: Human-readable name used in messages
        base_url: Chat-completions API base URL
        credential_env: Environment variable holding the bearer credential
        max_input_chars: Serialized-data length policy for this provider
    """

    name: str
    display_name: str
    base_url: str
    credential_env: str
    max_input_chars: int


@dataclass(frozen=True)
class ModelCapabilities:
    """Flags that fully determine the provider call payload shape."""

    uses_system_role: bool = True
    token_limit_kind: TokenLimitKind = TokenLimitKind.STANDARD
    supports_sampling_params: bool = True


@dataclass(frozen=True)
class LogicalModel:
    """A model choice exposed to callers, decoupled from its wire name."""

    key: str
    wire_name: str
    provider: ProviderFamily
    capabilities: ModelCapabilities = field(default_factory=ModelCapabilities)

    @property
    def is_reasoning(self) -> bool:
        return self.capabilities.token_limit_kind is TokenLimitKind.COMPLETION_CONSTRAINED

    def to_dict(self) -> dict:
        """Serialize for listings (no credentials involved)."""
        caps = self.capabilities
        return {
            "key": self.key,
            "wire_name": self.wire_name,
            "provider": self.provider.name,
            "uses_system_role": caps.uses_system_role,
            "token_limit_kind": caps.token_limit_kind.value,
            "supports_sampling_params": caps.supports_sampling_params,
        }


OPENAI = ProviderFamily(
    name="openai",
    display_name="OpenAI",
    base_url="https://api.openai.com/v1",
    credential_env="OPENAI_API_KEY",
    max_input_chars=200000,
)

GITHUB_MODELS = ProviderFamily(
    name="github",
    display_name="GitHub Models",
    base_url="https://models.github.ai/inference",
    credential_env="GITHUB_TOKEN",
    max_input_chars=20000,
)

CHAT = ModelCapabilities()
REASONING = ModelCapabilities(
    uses_system_role=False,
    token_limit_kind=TokenLimitKind.COMPLETION_CONSTRAINED,
    supports_sampling_params=False,
)

_MODEL_ROWS = (
    # OpenAI Chat Completions
    LogicalModel("gpt-4o", "gpt-4o", OPENAI, CHAT),
    LogicalModel("gpt-4o-mini", "gpt-4o-mini", OPENAI, CHAT),
    LogicalModel("gpt-4-turbo", "gpt-4-turbo", OPENAI, CHAT),
    LogicalModel("gpt-4", "gpt-4", OPENAI, CHAT),
    LogicalModel("gpt-3.5-turbo", "gpt-3.5-turbo", OPENAI, CHAT),
    LogicalModel("o1-preview", "o1-preview", OPENAI, REASONING),
    LogicalModel("o1-mini", "o1-mini", OPENAI, REASONING),
    LogicalModel("gpt-5", "gpt-5", OPENAI, REASONING),
    LogicalModel("gpt-5-mini", "gpt-5-mini", OPENAI, REASONING),
    LogicalModel("gpt-5-nano", "gpt-5-nano", OPENAI, REASONING),

    # GitHub Models (provider-prefixed wire names)
    LogicalModel("github/gpt-4o", "openai/gpt-4o", GITHUB_MODELS, CHAT),
    LogicalModel("github/gpt-4o-mini", "openai/gpt-4o-mini", GITHUB_MODELS, CHAT),
    LogicalModel("github/gpt-3.5-turbo", "openai/gpt-3.5-turbo", GITHUB_MODELS, CHAT),
    LogicalModel("github/o1-mini", "openai/o1-mini", GITHUB_MODELS, REASONING),
    LogicalModel("Meta-Llama-3.1-8B-Instruct", "meta/llama-3.1-8b-instruct", GITHUB_MODELS, CHAT),
    LogicalModel("Meta-Llama-3.1-70B-Instruct", "meta/llama-3.1-70b-instruct", GITHUB_MODELS, CHAT),
    LogicalModel("Llama-3.2-11B-Vision-Instruct", "meta/llama-3.2-11b-vision-instruct", GITHUB_MODELS, CHAT),
    LogicalModel("Mistral-Large-2407", "mistral/mistral-large-2407", GITHUB_MODELS, CHAT),
    LogicalModel("Mistral-Nemo-Instruct-2407", "mistral/mistral-nemo-instruct-2407", GITHUB_MODELS, CHAT),
    LogicalModel("Ministral-3B", "mistral/ministral-3b", GITHUB_MODELS, CHAT),
    LogicalModel("Cohere-command-r-plus", "cohere/command-r-plus", GITHUB_MODELS, CHAT),
    LogicalModel("Cohere-command-r", "cohere/command-r", GITHUB_MODELS, CHAT),
)


def build_table(rows) -> Mapping[str, LogicalModel]:
    """
    Build a read-only key -> LogicalModel mapping, validating the rows.

    Raises:
        ValueError: On duplicate keys or unknown token-limit kinds
    """
    table = {}
    for model in rows:
        if model.key in table:
            raise ValueError(f"Duplicate model key in capability table: {model.key}")
        if not isinstance(model.capabilities.token_limit_kind, TokenLimitKind):
            raise ValueError(
                f"Model {model.key} has unknown token limit kind "
                f"{model.capabilities.token_limit_kind!r}"
            )
        table[model.key] = model
    return MappingProxyType(table)


MODEL_TABLE: Mapping[str, LogicalModel] = build_table(_MODEL_ROWS)


def known_keys(table: Mapping[str, LogicalModel] = MODEL_TABLE) -> List[str]:
    """Return the known logical model keys, sorted."""
    return sorted(table)


def list_models(table: Mapping[str, LogicalModel] = MODEL_TABLE) -> List[LogicalModel]:
    """Return the table rows in declaration order."""
    return list(table.values())


def credential_envs(table: Mapping[str, LogicalModel] = MODEL_TABLE) -> List[str]:
    """Return the credential environment variables the table's families use."""
    return sorted({m.provider.credential_env for m in table.values()})


def resolve(
    key: Optional[str],
    default_key: str,
    table: Mapping[str, LogicalModel] = MODEL_TABLE
) -> LogicalModel:
    """
    Look up a logical model by key.

    A missing or blank key is replaced by *default_key* before lookup. Any
    other unknown key fails; it is never silently swapped for the default.

    Args:
        key: Caller-requested model key (may be None)
        default_key: Configured default model key
        table: Capability table to search

    Returns:
        The matching LogicalModel

    Raises:
        AnalysisError: kind UnsupportedModel, listing the known keys
    """
    lookup = key.strip() if isinstance(key, str) and key.strip() else default_key
    model = table.get(lookup)
    if model is None:
        keys = known_keys(table)
        raise AnalysisError(
            ErrorKind.UNSUPPORTED_MODEL,
            model=lookup,
            known_models=keys,
        )
    return model
