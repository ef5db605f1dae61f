"""
Smoke test for provider credentials.

Sends one short text to each provider that has an API key configured and
reports which ones answered. Run directly:

    python -m ipynb_translator.provider_check
"""
import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from ipynb_translator.exceptions import IpynbTranslatorError, TranslationError
from ipynb_translator.llm_client import AsyncTranslationClient
from ipynb_translator.providers import PROVIDERS, TranslationConfig

logger = logging.getLogger(__name__)

CHECK_PROMPT = "Translate the following text to Chinese:"
CHECK_TEXT = "Hello, world!"
CHECK_TIMEOUT = 10.0
DELAY_BETWEEN_CHECKS = 1.0

DEFAULT_CHECK_MODELS = {
    "zhipu": "glm-4-flash",
    "aliyun": "qwen-turbo",
    "volcano": "doubao-lite-4k",
}


@dataclass
class ProviderCheckResult:
    provider: str
    success: bool
    translated_text: Optional[str] = None
    error: Optional[str] = None


async def check_provider(
    provider: str,
    api_key: str,
    model_name: str,
    text: str = CHECK_TEXT,
    timeout: float = CHECK_TIMEOUT,
    client: Optional[AsyncTranslationClient] = None,
) -> ProviderCheckResult:
    client = client or AsyncTranslationClient(timeout=timeout)
    config = TranslationConfig(
        provider=provider,
        api_key=api_key,
        model_name=model_name,
        system_prompt=CHECK_PROMPT,
    )

    try:
        translated = await client.translate(text, config)
    except TranslationError as e:
        return ProviderCheckResult(provider=provider, success=False, error=e.describe())
    except IpynbTranslatorError as e:
        return ProviderCheckResult(provider=provider, success=False, error=str(e))

    return ProviderCheckResult(provider=provider, success=True, translated_text=translated)


async def check_providers(
    api_keys: Mapping[str, Optional[str]],
    models: Optional[Mapping[str, str]] = None,
    text: str = CHECK_TEXT,
    timeout: float = CHECK_TIMEOUT,
    client: Optional[AsyncTranslationClient] = None,
    delay: float = DELAY_BETWEEN_CHECKS,
) -> Dict[str, ProviderCheckResult]:
    """
    Check every built-in provider that has a key. Providers without one are
    skipped and absent from the result. Requests go out one at a time with
    `delay` seconds between them to stay clear of rate limits.
    """
    models = {**DEFAULT_CHECK_MODELS, **(models or {})}
    results: Dict[str, ProviderCheckResult] = {}

    for name in PROVIDERS:
        api_key = api_keys.get(name)
        if not api_key:
            logger.info("Skipping %s (API key not configured)", name)
            continue

        if results and delay:
            await asyncio.sleep(delay)

        result = await check_provider(name, api_key, models[name], text, timeout, client)
        if result.success:
            logger.info("%s answered: %s", name, result.translated_text)
        else:
            logger.warning("%s failed: %s", name, result.error)
        results[name] = result

    return results


def keys_from_env() -> Dict[str, Optional[str]]:
    """IPYNB_TRANSLATOR_<PROVIDER>_API_KEY for every built-in provider."""
    load_dotenv()
    return {name: os.getenv(f"IPYNB_TRANSLATOR_{name.upper()}_API_KEY") for name in PROVIDERS}


def print_summary(results: Mapping[str, ProviderCheckResult]) -> None:
    print("\n📊 Provider check summary:")
    if not results:
        print("  (no provider has an API key configured)")
    for name, result in results.items():
        mark = "✅" if result.success else "❌"
        detail = result.translated_text if result.success else result.error
        print(f"{mark} {name}: {detail}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    print_summary(asyncio.run(check_providers(keys_from_env())))
