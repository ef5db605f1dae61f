from __future__ import annotations

import asyncio
import json
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from ipynb_translator.exceptions import TranslationError
from ipynb_translator.providers import TranslationConfig
from ipynb_translator.settings import TranslatorSettings


def make_notebook(cells: List[tuple], minor: int = 5) -> dict:
    """[("markdown", "text"), ("code", "x = 1"), ...] -> nbformat 4 dict"""
    return {
        "nbformat": 4,
        "nbformat_minor": minor,
        "metadata": {},
        "cells": [
            {
                "cell_type": kind,
                "metadata": {},
                "source": text.splitlines(keepends=True),
                **({"execution_count": None, "outputs": []} if kind == "code" else {}),
            }
            for kind, text in cells
        ],
    }


def chat_response(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def echo_handler(prefix: str = "ZH: ", calls: Optional[list] = None) -> Callable[[httpx.Request], httpx.Response]:
    """Answers every chat completion with prefix + the last message content."""

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if calls is not None:
            calls.append((str(request.url), dict(request.headers), body))
        text = body["messages"][-1]["content"]
        return httpx.Response(200, json=chat_response(prefix + text))

    return handler


def echo_transport(prefix: str = "ZH: ", calls: Optional[list] = None) -> httpx.MockTransport:
    return httpx.MockTransport(echo_handler(prefix, calls))


class FakeClient:
    """
    Stand-in for AsyncTranslationClient.
    `delays` maps text -> seconds to sleep, `failures` maps text -> exception.
    """

    def __init__(
        self,
        delays: Optional[Dict[str, float]] = None,
        failures: Optional[Dict[str, Exception]] = None,
        on_call: Optional[Callable[[str], None]] = None,
    ):
        self.delays = delays or {}
        self.failures = failures or {}
        self.on_call = on_call
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def translate(self, text: str, config: TranslationConfig) -> str:
        self.calls.append(text)
        if self.on_call is not None:
            self.on_call(text)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(text, 0))
            if text in self.failures:
                raise self.failures[text]
            return f"[translated] {text}"
        finally:
            self.in_flight -= 1


@pytest.fixture
def settings() -> TranslatorSettings:
    return TranslatorSettings(provider="zhipu", api_key="test-key", model_name="glm-4-flash")


@pytest.fixture
def timeout_error() -> TranslationError:
    return TranslationError("Request to zhipu timed out")
