import pytest

from ipynb_translator.exceptions import ConfigurationError, TranslationError
from ipynb_translator.providers import (
    PROVIDERS,
    TranslationConfig,
    available_providers,
    build_request,
    extract_chat_content,
)


def config(provider="zhipu", model="glm-4-flash", url=None):
    return TranslationConfig(
        provider=provider,
        api_key="sk-123",
        model_name=model,
        system_prompt="Translate:",
        custom_api_url=url,
    )


@pytest.mark.parametrize("provider", ["zhipu", "aliyun", "volcano"])
def test_builtin_providers_use_bearer_json_headers(provider):
    request = build_request(config(provider), "Hello")
    assert request.url == PROVIDERS[provider].base_url
    assert request.headers == {"Authorization": "Bearer sk-123", "Content-Type": "application/json"}
    assert request.body["stream"] is False
    assert request.body["max_tokens"] == 10240


def test_zhipu_merges_prompt_into_user_message():
    body = build_request(config("zhipu"), "Hello").body
    assert body["messages"] == [{"role": "user", "content": "Translate:\n\nHello"}]
    assert body["temperature"] == 0.95
    assert body["top_p"] == 0.7


@pytest.mark.parametrize("provider", ["aliyun", "volcano"])
def test_system_prompt_sent_as_own_message(provider):
    body = build_request(config(provider, model="qwen-turbo"), "Hello").body
    assert body["messages"] == [
        {"role": "system", "content": "Translate:"},
        {"role": "user", "content": "Hello"},
    ]
    assert body["temperature"] == 0.7
    assert "top_p" not in body


def test_thinking_disabled_for_marked_model():
    body = build_request(config("zhipu", model="glm-4.5-air"), "Hello").body
    assert body["thinking"] == {"type": "disabled"}


def test_thinking_absent_for_other_models():
    body = build_request(config("zhipu", model="glm-4-flash"), "Hello").body
    assert "thinking" not in body


def test_custom_provider_uses_given_url():
    request = build_request(config("custom", url="http://localhost:9000/v1/chat/completions"), "Hi")
    assert request.url == "http://localhost:9000/v1/chat/completions"
    assert request.body["messages"][0] == {"role": "system", "content": "Translate:"}


def test_custom_provider_without_url_is_configuration_error():
    with pytest.raises(ConfigurationError):
        build_request(config("custom"), "Hi")


def test_unknown_provider_is_named_in_error():
    with pytest.raises(ConfigurationError, match="openai-ish"):
        build_request(config("openai-ish"), "Hi")


def test_available_providers_include_custom():
    assert available_providers() == ["aliyun", "custom", "volcano", "zhipu"]


def test_extract_chat_content():
    payload = {"choices": [{"message": {"content": "你好"}}]}
    assert extract_chat_content(payload) == "你好"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"choices": []},
        {"choices": [{"message": {}}]},
        {"choices": [{"message": {"content": None}}]},
        ["not", "a", "dict"],
    ],
)
def test_extract_rejects_malformed_responses(payload):
    with pytest.raises(TranslationError):
        extract_chat_content(payload)
