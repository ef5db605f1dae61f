import json
import logging
from typing import Optional

import httpx

from ipynb_translator.exceptions import TranslationError
from ipynb_translator.providers import TranslationConfig, build_request

logger = logging.getLogger(__name__)


class AsyncTranslationClient:
    """
    Async client that sends one non-streaming chat completion per text.
    Suitable for the batch runner: every call is an independent awaitable.
    """

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        timeout: seconds per request, None waits forever
        transport: optional httpx transport (tests pass httpx.MockTransport)
        """
        self.timeout = timeout
        self.transport = transport

    async def translate(self, text: str, config: TranslationConfig) -> str:
        """
        Translate `text` with the provider described by `config`.
        Raises ConfigurationError before sending anything if the provider is
        unusable, TranslationError for every HTTP or response-shape failure.
        """
        request = build_request(config, text)
        logger.debug("POST %s (provider=%s, model=%s)", request.url, config.provider, config.model_name)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(request.url, headers=request.headers, json=request.body)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise TranslationError(
                    f"Request to {config.provider} failed with status {e.response.status_code}",
                    status_code=e.response.status_code,
                    detail=_response_detail(e.response),
                ) from e
            except httpx.TimeoutException as e:
                raise TranslationError(f"Request to {config.provider} timed out") from e
            except httpx.HTTPError as e:
                raise TranslationError(f"Request to {config.provider} failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise TranslationError(f"Response from {config.provider} is not valid JSON") from e

        return request.extract(payload)


def _response_detail(response: httpx.Response) -> str:
    """Body of an error response, as compact JSON when it parses."""
    try:
        return json.dumps(response.json(), ensure_ascii=False)
    except ValueError:
        return response.text
