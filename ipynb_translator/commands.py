"""
Top-level command handlers.

These are the only places that turn ConfigurationError / TranslationError
into user-facing messages.
"""
import logging
from typing import Optional

from ipynb_translator.batch_translator import BatchSummary, BatchTranslator, translate_cell
from ipynb_translator.exceptions import ConfigurationError, TranslationError
from ipynb_translator.host_ui import HostUI
from ipynb_translator.llm_client import AsyncTranslationClient
from ipynb_translator.notebook import NotebookDocument
from ipynb_translator.settings import TranslatorSettings

logger = logging.getLogger(__name__)


def format_translation_error(error: TranslationError, prefix: str = "Translation failed") -> str:
    return f"{prefix}: {error.describe()}"


async def translate_cell_command(
    document: NotebookDocument,
    index: int,
    client: AsyncTranslationClient,
    settings: TranslatorSettings,
    ui: HostUI,
) -> Optional[int]:
    """Translate one cell; report failures and return the new cell index or None."""
    try:
        return await translate_cell(document, index, client, settings, ui)
    except ConfigurationError as e:
        ui.error(str(e))
    except TranslationError as e:
        logger.error("Translation error: %s", e.detail if e.detail is not None else e.message)
        ui.error(format_translation_error(e))
    return None


async def translate_all_command(
    document: NotebookDocument,
    client: AsyncTranslationClient,
    settings: TranslatorSettings,
    ui: HostUI,
) -> Optional[BatchSummary]:
    """Translate every eligible cell; None when the configuration was rejected."""
    try:
        return await BatchTranslator(client, settings, ui).translate_all(document)
    except ConfigurationError as e:
        ui.error(str(e))
        return None
