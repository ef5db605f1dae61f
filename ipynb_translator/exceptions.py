"""
Error types shared by the provider adapter, the HTTP client and the
batch orchestrator.
"""
from typing import Any, Optional


class IpynbTranslatorError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(IpynbTranslatorError):
    """
    Missing API key, missing custom URL, unknown provider or an invalid
    setting. Always raised before any network call.
    """


class TranslationError(IpynbTranslatorError):
    """
    A single translation request failed: non-2xx status, network error,
    timeout or a response body without choices[0].message.content.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail

    def describe(self) -> str:
        """'404 - {...}' when the server answered, the plain message otherwise."""
        if self.status_code is not None:
            return f"{self.status_code} - {self.detail}"
        return self.message


class TranslationCancelledError(IpynbTranslatorError):
    """Raised by a batch worker when the user cancelled before its request started."""

    pass
