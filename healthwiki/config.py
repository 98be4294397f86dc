"""
Runtime configuration for the Health Wiki Proxy.

Settings are read once from the process environment (and an optional .env
file) at startup and then passed around as a read-only object.
"""

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigurationError

RESPONSE_FORMATS = ("text", "structured")

DEFAULT_SYSTEM_PROMPT = (
    "You are a fact-finding health information assistant, not a doctor. "
    "Only answer questions about health and medical topics, in two or three "
    "short factual sentences. Politely decline anything else."
)


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_system_prompt(path: Optional[str]) -> str:
    """
    Load the completion system prompt from a file.

    Args:
        path (str, optional): Path to a UTF-8 text file

    Returns:
        str: File contents, or the built-in prompt if no usable file is given
    """
    if not path:
        return DEFAULT_SYSTEM_PROMPT
    try:
        with open(path, "r", encoding="utf-8") as f:
            prompt = f.read().strip()
    except FileNotFoundError:
        raise ConfigurationError(f"System prompt file not found: {path}")
    return prompt or DEFAULT_SYSTEM_PROMPT


class Settings(BaseModel):
    """
    Immutable application settings.

    Build with Settings.from_env() in production; tests construct it directly.
    """

    model_config = {"frozen": True}

    wiki_api_url: str = Field(
        "https://en.wikipedia.org/w/api.php",
        description="MediaWiki action API endpoint",
    )
    wiki_article_url: str = Field(
        "https://en.wikipedia.org/wiki/",
        description="Prefix for human-readable article links",
    )
    wiki_root_title: str = Field(
        "Wikipedia",
        description="Title of the site's own landing page, treated as no match",
    )
    extract_chars: int = Field(1200, gt=0, description="Character budget for extracts")
    response_format: str = Field("text", description="Wire format: text or structured")
    http_timeout: float = Field(30.0, gt=0, description="Timeout in seconds for outbound calls")

    completion_fallback: bool = False
    openai_api_key: Optional[str] = None
    openai_api_url: str = "https://api.openai.com/v1/chat/completions"
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.2
    openai_max_tokens: int = 500
    system_prompt: str = DEFAULT_SYSTEM_PROMPT

    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    app_secret: Optional[str] = None
    log_level: str = "INFO"

    @field_validator("response_format")
    @classmethod
    def validate_response_format(cls, v):
        """Only the two known serializers are accepted."""
        fmt = v.strip().lower()
        if fmt not in RESPONSE_FORMATS:
            raise ValueError(f"response_format must be one of {', '.join(RESPONSE_FORMATS)}")
        return fmt

    @field_validator("wiki_article_url")
    @classmethod
    def validate_article_url(cls, v):
        return v if v.endswith("/") else v + "/"

    def require_credentials(self) -> None:
        """
        Fail fast when the completion fallback is enabled without a key.

        Raises:
            ConfigurationError: If OPENAI_API_KEY is missing
        """
        if self.completion_fallback and not self.openai_api_key:
            raise ConfigurationError(
                "OPENAI_API_KEY environment variable must be set when COMPLETION_FALLBACK is enabled"
            )

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        Returns:
            Settings: Validated settings

        Raises:
            ConfigurationError: If a value is invalid or a required credential is missing
        """
        load_dotenv()

        values = {
            "completion_fallback": _env_flag("COMPLETION_FALLBACK"),
            "openai_api_key": os.getenv("OPENAI_API_KEY") or None,
            "system_prompt": load_system_prompt(os.getenv("SYSTEM_PROMPT_FILE")),
            "app_secret": os.getenv("APP_SECRET") or None,
        }
        env_map = {
            "wiki_api_url": "WIKI_API_URL",
            "wiki_article_url": "WIKI_ARTICLE_URL",
            "wiki_root_title": "WIKI_ROOT_TITLE",
            "extract_chars": "WIKI_EXTRACT_CHARS",
            "response_format": "RESPONSE_FORMAT",
            "http_timeout": "HTTP_TIMEOUT",
            "openai_api_url": "OPENAI_API_URL",
            "openai_model": "OPENAI_MODEL",
            "openai_temperature": "OPENAI_TEMPERATURE",
            "openai_max_tokens": "OPENAI_MAX_TOKENS",
            "log_level": "LOG_LEVEL",
        }
        for field, name in env_map.items():
            value = os.getenv(name)
            if value:
                values[field] = value

        origins = os.getenv("CORS_ORIGINS")
        if origins:
            values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

        try:
            settings = cls(**values)
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        settings.require_credentials()
        return settings
