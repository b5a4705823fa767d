"""
Immutable AI policy settings.

Built once at process start from the configuration dictionary and passed
explicitly to the analyzer, normalizer and invoker.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ...utils.config_loader import ConfigLoader, DEFAULT_CONFIG, DEFAULT_PROMPTS


@dataclass(frozen=True)
class AISettings:
    """
    Request-shaping and timeout policy.

    Attributes:
        default_model: Logical key used when the caller supplies none
        max_tokens: Standard output-token budget
        completion_max_tokens: Budget for completion-constrained models
        temperature: Sampling temperature for models that accept it
        top_p: Nucleus sampling value for models that accept it
        timeout: Wall-clock timeout (seconds) for standard models
        reasoning_timeout: Wall-clock timeout (seconds) for reasoning models
        system_prompt: System-role instruction message
        analysis_template: Prompt template with one ``{data}`` placeholder
    """

    default_model: str = DEFAULT_CONFIG["ai_default_model"]
    max_tokens: int = DEFAULT_CONFIG["ai_max_tokens"]
    completion_max_tokens: int = DEFAULT_CONFIG["ai_completion_max_tokens"]
    temperature: float = DEFAULT_CONFIG["ai_temperature"]
    top_p: float = DEFAULT_CONFIG["ai_top_p"]
    timeout: float = DEFAULT_CONFIG["ai_timeout"]
    reasoning_timeout: float = DEFAULT_CONFIG["ai_reasoning_timeout"]
    system_prompt: str = DEFAULT_PROMPTS["system_prompt"]
    analysis_template: str = DEFAULT_PROMPTS["analysis_template"]

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        prompts: Optional[Dict[str, str]] = None
    ) -> "AISettings":
        """
        Create settings from a configuration dictionary.

        Args:
            config: Dictionary as returned by ConfigLoader.load_config_json()
            prompts: Dictionary as returned by ConfigLoader.load_ai_prompts()

        Returns:
            AISettings instance
        """
        prompts = prompts or DEFAULT_PROMPTS
        return cls(
            default_model=str(config.get("ai_default_model", cls.default_model)),
            max_tokens=int(config.get("ai_max_tokens", cls.max_tokens)),
            completion_max_tokens=int(config.get("ai_completion_max_tokens", cls.completion_max_tokens)),
            temperature=float(config.get("ai_temperature", cls.temperature)),
            top_p=float(config.get("ai_top_p", cls.top_p)),
            timeout=float(config.get("ai_timeout", cls.timeout)),
            reasoning_timeout=float(config.get("ai_reasoning_timeout", cls.reasoning_timeout)),
            system_prompt=prompts.get("system_prompt", cls.system_prompt),
            analysis_template=prompts.get("analysis_template", cls.analysis_template),
        )

    @classmethod
    def load(cls) -> "AISettings":
        """Load settings from config.json, ai_prompts.json and the environment."""
        return cls.from_config(ConfigLoader.load_config_json(), ConfigLoader.load_ai_prompts())
