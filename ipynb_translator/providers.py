"""
Provider adapter.

Maps a provider name to the concrete shape of an OpenAI-compatible chat
completion request. Every provider is a ProviderConfig strategy held in
PROVIDERS; "custom" is built on demand from a user supplied URL.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ipynb_translator.exceptions import ConfigurationError, TranslationError

CUSTOM_PROVIDER = "custom"
MAX_TOKENS = 10240

# zhipu models advertising this version ship a reasoning mode we switch off
THINKING_MODEL_MARKER = "4.5"


@dataclass(frozen=True)
class TranslationConfig:
    """Everything a translation request needs except the text itself."""
    provider: str
    api_key: str
    model_name: str
    system_prompt: str
    custom_api_url: Optional[str] = None


@dataclass(frozen=True)
class ProviderConfig:
    name: str
    base_url: str
    build_headers: Callable[[str], Dict[str, str]]
    build_body: Callable[[str, str, str], Dict[str, Any]]
    extract_text: Callable[[Any], str]


@dataclass(frozen=True)
class ProviderRequest:
    url: str
    headers: Dict[str, str]
    body: Dict[str, Any]
    extract: Callable[[Any], str]


# -----------------------------
# Shared request pieces
# -----------------------------
def bearer_headers(api_key: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


def extract_chat_content(payload: Any) -> str:
    """
    Pull choices[0].message.content out of a decoded response body.
    Anything else is a TranslationError, never a KeyError.
    """
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise TranslationError(
            f"Unexpected response shape: missing choices[0].message.content ({e!r})"
        ) from e

    if not isinstance(content, str):
        raise TranslationError(
            f"Unexpected response shape: message content is {type(content).__name__}, not str"
        )
    return content


def system_message_body(model_name: str, system_prompt: str, text: str) -> Dict[str, Any]:
    """OpenAI style body with the prompt sent as its own system message."""
    return {
        "model": model_name,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": text},
        ],
        "temperature": 0.7,
        "max_tokens": MAX_TOKENS,
        "stream": False,
    }


def zhipu_body(model_name: str, system_prompt: str, text: str) -> Dict[str, Any]:
    """GLM expects the prompt merged into one user message."""
    body: Dict[str, Any] = {
        "model": model_name,
        "messages": [
            {"role": "user", "content": f"{system_prompt}\n\n{text}"},
        ],
        "temperature": 0.95,
        "top_p": 0.7,
        "stream": False,
        "max_tokens": MAX_TOKENS,
    }

    if THINKING_MODEL_MARKER in model_name:
        body["thinking"] = {"type": "disabled"}

    return body


# -----------------------------
# Registry
# -----------------------------
PROVIDERS: Dict[str, ProviderConfig] = {
    "zhipu": ProviderConfig(
        name="zhipu",
        base_url="https://open.bigmodel.cn/api/paas/v4/chat/completions",
        build_headers=bearer_headers,
        build_body=zhipu_body,
        extract_text=extract_chat_content,
    ),
    "aliyun": ProviderConfig(
        name="aliyun",
        base_url="https://dashscope.aliyuncs.com/compatible-mode/v1/chat/completions",
        build_headers=bearer_headers,
        build_body=system_message_body,
        extract_text=extract_chat_content,
    ),
    "volcano": ProviderConfig(
        name="volcano",
        base_url="https://ark.cn-beijing.volces.com/api/v3/chat/completions",
        build_headers=bearer_headers,
        build_body=system_message_body,
        extract_text=extract_chat_content,
    ),
}


def available_providers() -> List[str]:
    return sorted([*PROVIDERS, CUSTOM_PROVIDER])


def custom_provider(api_url: Optional[str]) -> ProviderConfig:
    if not api_url:
        raise ConfigurationError("Custom API URL is required when provider is 'custom'")
    return ProviderConfig(
        name=CUSTOM_PROVIDER,
        base_url=api_url,
        build_headers=bearer_headers,
        build_body=system_message_body,
        extract_text=extract_chat_content,
    )


def resolve_provider(name: str, custom_api_url: Optional[str] = None) -> ProviderConfig:
    if name == CUSTOM_PROVIDER:
        return custom_provider(custom_api_url)

    provider = PROVIDERS.get(name)
    if provider is None:
        raise ConfigurationError(f"Unsupported provider: {name}")
    return provider


def build_request(config: TranslationConfig, text: str) -> ProviderRequest:
    """Turn a config plus source text into a ready-to-send request descriptor."""
    provider = resolve_provider(config.provider, config.custom_api_url)
    return ProviderRequest(
        url=provider.base_url,
        headers=provider.build_headers(config.api_key),
        body=provider.build_body(config.model_name, config.system_prompt, text),
        extract=provider.extract_text,
    )
