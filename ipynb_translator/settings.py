from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

from dotenv import load_dotenv

from ipynb_translator.exceptions import ConfigurationError
from ipynb_translator.providers import TranslationConfig, resolve_provider

ENV_PREFIX = "IPYNB_TRANSLATOR_"

DEFAULT_PROVIDER = "zhipu"
DEFAULT_MODEL = "glm-4-flash"
DEFAULT_SYSTEM_PROMPT = "请将以下Markdown文本翻译成中文，只返回翻译后的内容，不要包含任何额外说明或Markdown语法外的字符："
DEFAULT_CONCURRENCY = 3

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class TranslatorSettings:
    """Read-only inputs to the translation pipeline."""
    provider: str = DEFAULT_PROVIDER
    api_key: Optional[str] = None
    model_name: str = DEFAULT_MODEL
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    custom_api_url: str = ""
    concurrency: int = DEFAULT_CONCURRENCY
    skip_code_blocks: bool = True
    skip_math_formulas: bool = True
    request_timeout: Optional[float] = None

    def with_overrides(self, **overrides) -> "TranslatorSettings":
        """Copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def translation_config(self) -> TranslationConfig:
        """
        Validate everything a request needs and return it.
        Raises ConfigurationError before any network call.
        """
        if not self.api_key:
            raise ConfigurationError(f"Please configure the API key ({ENV_PREFIX}API_KEY)")
        if self.concurrency < 1:
            raise ConfigurationError(f"Concurrency must be at least 1, got {self.concurrency}")

        # raises for unknown providers and for 'custom' without a URL
        resolve_provider(self.provider, self.custom_api_url)

        return TranslationConfig(
            provider=self.provider,
            api_key=self.api_key,
            model_name=self.model_name,
            system_prompt=self.system_prompt,
            custom_api_url=self.custom_api_url or None,
        )


# -----------------------------
# Environment parsing
# -----------------------------
def _env(name: str) -> Optional[str]:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    if value.lower() in _TRUE:
        return True
    if value.lower() in _FALSE:
        return False
    raise ConfigurationError(f"{ENV_PREFIX}{name} must be a boolean, got {value!r}")


def _env_int(name: str, default: int) -> int:
    value = _env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}") from None


def _env_float(name: str) -> Optional[float]:
    value = _env(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be a number, got {value!r}") from None


def load_settings(dotenv: bool = True) -> TranslatorSettings:
    """Build settings from the environment (and a .env file if present)."""
    if dotenv:
        load_dotenv()

    return TranslatorSettings(
        provider=_env("PROVIDER") or DEFAULT_PROVIDER,
        api_key=_env("API_KEY"),
        model_name=_env("MODEL") or DEFAULT_MODEL,
        system_prompt=_env("SYSTEM_PROMPT") or DEFAULT_SYSTEM_PROMPT,
        custom_api_url=_env("CUSTOM_API_URL") or "",
        concurrency=_env_int("CONCURRENCY", DEFAULT_CONCURRENCY),
        skip_code_blocks=_env_bool("SKIP_CODE_BLOCKS", True),
        skip_math_formulas=_env_bool("SKIP_MATH_FORMULAS", True),
        request_timeout=_env_float("TIMEOUT"),
    )
