"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from pathlib import Path

import yaml

from .schema import HelperConfig

CONFIG_PATH_ENV = "AI_ERROR_HELPER_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/config.yaml")

_ENV_REFERENCE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def substitute_env_vars(text: str) -> str:
    """
    Replace ``${VAR_NAME}`` and ``${VAR_NAME:-default}`` with environment values.

    Comment lines are left alone, so a commented-out provider block does not
    require its API key to be exported.

    Args:
        text: YAML text containing ``${VAR_NAME}`` references

    Returns:
        Text with environment variables substituted

    Raises:
        ValueError: If a referenced variable is unset and has no default
    """

    def replacer(match: re.Match[str]) -> str:
        name, default = match.group(1), match.group(2)
        value = os.environ.get(name, default)
        if value is None:
            raise ValueError(f"Environment variable {name} not found")
        return value

    lines = text.splitlines(keepends=True)
    return "".join(
        line if line.lstrip().startswith("#") else _ENV_REFERENCE.sub(replacer, line)
        for line in lines
    )


def resolve_config_path(path: Path | None = None) -> Path:
    """Pick the configuration file: explicit path, then $AI_ERROR_HELPER_CONFIG, then default."""
    if path is not None:
        return path.expanduser()
    from_env = os.environ.get(CONFIG_PATH_ENV)
    return Path(from_env).expanduser() if from_env else DEFAULT_CONFIG_PATH


def load_config(path: Path | None = None) -> HelperConfig:
    """
    Load configuration from a YAML file with environment variable substitution.

    API keys are expected to come from the environment (``${GEMINI_API_KEY}``)
    rather than being written into the file.

    Args:
        path: Path to YAML configuration file (see :func:`resolve_config_path`)

    Returns:
        Validated HelperConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If environment variables are missing or config is invalid
        ValidationError: If config doesn't match schema
    """
    path = resolve_config_path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    data = yaml.safe_load(substitute_env_vars(path.read_text()))
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration in {path} must be a mapping, got {type(data).__name__}")

    config = HelperConfig.model_validate(data)
    validate_config(config)

    return config


def validate_config(config: HelperConfig) -> None:
    """
    Ensure the selected explanation provider has its configuration block.

    Speech is optional: without a murf block, voice features are disabled.

    Args:
        config: Configuration to validate

    Raises:
        ValueError: If provider-specific config is missing
    """
    provider = config.explanation.provider
    if getattr(config.explanation, provider) is None:
        raise ValueError(
            f"{provider.capitalize()} provider selected but {provider} config missing"
        )
