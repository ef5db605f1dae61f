from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class TranslationOptions(BaseModel):
    """Per-request overrides of the server settings; unset fields keep the default."""
    provider: Optional[str] = None
    api_key: Optional[str] = None
    model_name: Optional[str] = None
    system_prompt: Optional[str] = None
    custom_api_url: Optional[str] = None
    concurrency: Optional[int] = Field(default=None, ge=1)
    skip_code_blocks: Optional[bool] = None
    skip_math_formulas: Optional[bool] = None


class Message(BaseModel):
    level: str  # "info", "warning", "error"
    text: str


class TranslateCellRequest(BaseModel):
    notebook: Dict[str, Any]
    cell_index: int
    options: TranslationOptions = Field(default_factory=TranslationOptions)


class TranslateCellResponse(BaseModel):
    notebook: Dict[str, Any]
    inserted_index: Optional[int]
    messages: List[Message]


class TranslateNotebookRequest(BaseModel):
    notebook: Dict[str, Any]
    options: TranslationOptions = Field(default_factory=TranslationOptions)


class TranslateNotebookResponse(BaseModel):
    notebook: Dict[str, Any]
    outcome: str
    candidates: int
    successful: int
    failed: int
    cancelled: int
    messages: List[Message]


class ProvidersResponse(BaseModel):
    providers: List[str]
