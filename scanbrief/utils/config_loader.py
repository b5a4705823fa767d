"""
Configuration loader for JSON files and the process environment
"""
import os
import json
from pathlib import Path
from typing import Optional, Dict, Any, Iterable, List, Mapping

from .logger import get_logger

log = get_logger(__name__)


# Policy defaults. A config.json (package config dir or $SCANBRIEF_CONFIG)
# overrides these; environment variables override both.
DEFAULT_CONFIG: Dict[str, Any] = {
    "ai_default_model": "gpt-4o",
    "ai_max_tokens": 4000,
    "ai_completion_max_tokens": 16000,
    "ai_temperature": 0.1,
    "ai_top_p": 1.0,
    "ai_timeout": 120,
    "ai_reasoning_timeout": 300,
    "server_host": "127.0.0.1",
    "server_port": 3001,
}

# Environment variable -> (config key, converter)
ENV_OVERRIDES = {
    "OPENAI_MODEL": ("ai_default_model", str),
    "SCANBRIEF_DEFAULT_MODEL": ("ai_default_model", str),
    "SCANBRIEF_TIMEOUT": ("ai_timeout", float),
    "SCANBRIEF_REASONING_TIMEOUT": ("ai_reasoning_timeout", float),
    "PORT": ("server_port", int),
}

DEFAULT_PROMPTS: Dict[str, str] = {
    "system_prompt": (
        "You are an expert cybersecurity analyst specializing in Censys host data "
        "analysis. Provide detailed, evidence-based security insights with specific "
        "examples from the data."
    ),
    "analysis_template": """You are an expert cybersecurity analyst specializing in Censys host data analysis.

Analyze the provided Censys host dataset and provide a comprehensive, in-depth security assessment.

Your analysis should include:

1. **Overview**: Dataset size, scope, and overall risk level (Critical/High/Medium/Low)
2. **Critical Findings**: Immediate security threats requiring urgent attention
   - Active malware/C2 infrastructure
   - Critical vulnerabilities (CVSS >= 7.0) with CVE numbers
   - Known exploited vulnerabilities
3. **Geographic & Infrastructure Patterns**: Notable hosting providers, ASNs, and geographic clustering
4. **Service Analysis**: Exposed services, unusual ports, and authentication gaps
5. **Security Concerns**: Misconfigurations, outdated software, and suspicious indicators
6. **Immediate Actions**: Top 3 priority recommendations and key IOCs for blocking/monitoring

Analyze the data systematically:
- Inspect the data structure and identify key security indicators
- Calculate statistics for ports, services, and geographic distribution
- Identify high-risk patterns and anomalies
- Provide evidence-based insights with specific examples from the data

Format your final response as clear, structured text with bullet points.
Prioritize actionable insights over descriptive analysis. Include specific technical details (CVE IDs, CVSS scores, ports, IPs) when relevant.

Dataset to analyze:
{data}""",
}


class ConfigLoader:
    """Handles loading configuration files and credentials."""

    @staticmethod
    def get_config_path(filename):
        """
        Get full path to a configuration file shipped with the package.

        Args:
            filename: Configuration filename

        Returns:
            Full path to config file
        """
        base_dir = Path(__file__).parent.parent
        config_dir = base_dir / "config"

        return str(config_dir / filename)

    @staticmethod
    def _read_json(path: str) -> Optional[Dict[str, Any]]:
        """Read a JSON object from *path*, or None if missing or malformed."""
        if not os.path.exists(path):
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.error("Error loading %s: %s", path, e)
            return None

        if not isinstance(data, dict):
            log.error("Ignoring %s: expected a JSON object", path)
            return None

        return data

    @staticmethod
    def load_config_json(
        path: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Load configuration: defaults, then config.json, then environment.

        Args:
            path: Explicit config file path (default: $SCANBRIEF_CONFIG or
                  the package config/config.json)
            env: Environment mapping (default: os.environ)

        Returns:
            Configuration dictionary
        """
        source = os.environ if env is None else env
        config = dict(DEFAULT_CONFIG)

        config_path = path or source.get("SCANBRIEF_CONFIG") or ConfigLoader.get_config_path("config.json")
        file_values = ConfigLoader._read_json(config_path)
        if file_values:
            unknown = sorted(set(file_values) - set(DEFAULT_CONFIG))
            if unknown:
                log.warning("Ignoring unknown config key(s): %s", ", ".join(unknown))
            for key in DEFAULT_CONFIG:
                if key in file_values:
                    config[key] = file_values[key]

        for env_name, (key, convert) in ENV_OVERRIDES.items():
            raw = source.get(env_name, "").strip()
            if not raw:
                continue
            try:
                config[key] = convert(raw)
            except ValueError:
                log.warning("Ignoring %s=%r: not a valid %s", env_name, raw, convert.__name__)

        return config

    @staticmethod
    def load_ai_prompts(path: Optional[str] = None) -> Dict[str, str]:
        """
        Load ai_prompts.json configuration.

        Keys missing from the file fall back to the built-in prompts.

        Returns:
            Dictionary with 'system_prompt' and 'analysis_template'
        """
        prompts = dict(DEFAULT_PROMPTS)
        data = ConfigLoader._read_json(path or ConfigLoader.get_config_path("ai_prompts.json"))
        if data:
            for key in DEFAULT_PROMPTS:
                value = data.get(key)
                if isinstance(value, str) and value.strip():
                    prompts[key] = value
        return prompts

    @staticmethod
    def get_credential(env_name: str, env: Optional[Mapping[str, str]] = None) -> Optional[str]:
        """
        Read a provider credential from the environment.

        Args:
            env_name: Environment variable holding the credential
            env: Environment mapping (default: os.environ)

        Returns:
            The credential, or None if unset or blank
        """
        source = os.environ if env is None else env
        value = source.get(env_name, "").strip()
        return value or None

    @staticmethod
    def get_credentials(
        env_names: Iterable[str],
        env: Optional[Mapping[str, str]] = None
    ) -> List[str]:
        """Return the credentials that are set among *env_names*."""
        values = (ConfigLoader.get_credential(name, env) for name in env_names)
        return [value for value in values if value]


def mask_secret(value: Optional[str]) -> str:
    """Mask a secret for display, keeping at most the first 4 characters.

    Example:
        >>> mask_secret("sk-abcdef123456")
        'sk-a...********'
        >>> mask_secret("")
        '(not set)'
    """
    if not value:
        return "(not set)"
    if len(value) > 8:
        return f"{value[:4]}...{'*' * 8}"
    return '*' * 8
