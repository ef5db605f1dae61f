from __future__ import annotations

import copy
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from ipynb_translator.batch_translator import BatchTranslator, translate_cell
from ipynb_translator.commands import format_translation_error
from ipynb_translator.dto import (
    Message,
    ProvidersResponse,
    TranslateCellRequest,
    TranslateCellResponse,
    TranslateNotebookRequest,
    TranslateNotebookResponse,
    TranslationOptions,
)
from ipynb_translator.exceptions import ConfigurationError, TranslationError
from ipynb_translator.host_ui import RecordingUI
from ipynb_translator.llm_client import AsyncTranslationClient
from ipynb_translator.notebook import IpynbDocument
from ipynb_translator.providers import available_providers
from ipynb_translator.settings import TranslatorSettings, load_settings

logger = logging.getLogger(__name__)


# -----------------------------
# Startup
# -----------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = load_settings()
    app.state.settings = settings
    app.state.client = AsyncTranslationClient(timeout=settings.request_timeout)
    logger.info("Server started (provider=%s, model=%s)", settings.provider, settings.model_name)
    yield


app = FastAPI(title="ipynb-translator", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------------
# Helpers
# -----------------------------
def effective_settings(options: TranslationOptions) -> TranslatorSettings:
    """Server settings with the request's overrides applied."""
    settings: TranslatorSettings = app.state.settings
    return settings.with_overrides(**options.model_dump())


def open_notebook(data: dict) -> IpynbDocument:
    try:
        # never mutate the caller's payload in place
        return IpynbDocument(copy.deepcopy(data))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def ui_messages(ui: RecordingUI) -> list[Message]:
    return [Message(level=level, text=text) for level, text in ui.messages]


# -----------------------------
# HTTP Endpoints
# -----------------------------
@app.get("/providers", response_model=ProvidersResponse)
async def list_providers():
    return ProvidersResponse(providers=available_providers())


@app.post("/translate/cell", response_model=TranslateCellResponse)
async def translate_single_cell(req: TranslateCellRequest):
    document = open_notebook(req.notebook)
    if not 0 <= req.cell_index < document.count():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"cell_index {req.cell_index} out of range (notebook has {document.count()} cells)",
        )

    ui = RecordingUI()
    try:
        inserted = await translate_cell(
            document, req.cell_index, app.state.client, effective_settings(req.options), ui
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except TranslationError as e:
        logger.error("Translation error: %s", e.detail if e.detail is not None else e.message)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=format_translation_error(e))

    return TranslateCellResponse(
        notebook=document.data,
        inserted_index=inserted,
        messages=ui_messages(ui),
    )


@app.post("/translate/notebook", response_model=TranslateNotebookResponse)
async def translate_notebook(req: TranslateNotebookRequest):
    document = open_notebook(req.notebook)
    ui = RecordingUI()

    try:
        translator = BatchTranslator(app.state.client, effective_settings(req.options), ui)
        summary = await translator.translate_all(document)
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return TranslateNotebookResponse(
        notebook=document.data,
        outcome=summary.outcome.value,
        candidates=summary.candidates,
        successful=summary.successful,
        failed=summary.failed,
        cancelled=summary.cancelled,
        messages=ui_messages(ui),
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=8000)
