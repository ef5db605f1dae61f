import httpx
import pytest
from conftest import echo_transport

from ipynb_translator.llm_client import AsyncTranslationClient
from ipynb_translator.provider_check import CHECK_PROMPT, check_provider, check_providers


@pytest.mark.asyncio
async def test_check_provider_success():
    calls = []
    client = AsyncTranslationClient(transport=echo_transport("OK: ", calls))

    result = await check_provider("volcano", "key", "doubao-lite-4k", client=client)

    assert result.success
    assert result.translated_text == "OK: Hello, world!"
    assert calls[0][2]["messages"][0] == {"role": "system", "content": CHECK_PROMPT}


@pytest.mark.asyncio
async def test_check_provider_reports_http_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(403, json={"error": "forbidden"}))

    result = await check_provider("zhipu", "key", "glm-4-flash", client=AsyncTranslationClient(transport=transport))

    assert not result.success
    assert result.error == '403 - {"error": "forbidden"}'


@pytest.mark.asyncio
async def test_check_providers_skips_unconfigured():
    calls = []
    client = AsyncTranslationClient(transport=echo_transport(calls=calls))

    results = await check_providers(
        {"zhipu": "k1", "aliyun": None, "volcano": "k3"}, client=client, delay=0
    )

    assert sorted(results) == ["volcano", "zhipu"]
    assert all(r.success for r in results.values())
    assert sorted(body["model"] for _, _, body in calls) == ["doubao-lite-4k", "glm-4-flash"]


@pytest.mark.asyncio
async def test_check_providers_model_override():
    calls = []
    client = AsyncTranslationClient(transport=echo_transport(calls=calls))

    await check_providers({"zhipu": "k"}, models={"zhipu": "glm-4.5"}, client=client, delay=0)

    assert calls[0][2]["model"] == "glm-4.5"
    assert calls[0][2]["thinking"] == {"type": "disabled"}
