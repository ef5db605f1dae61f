"""
Notebook document collaborator.

The batch pipeline only needs count(), cell_at(i) and insert_cells_at(index,
cells); NotebookDocument names that contract and IpynbDocument implements it
on top of an nbformat v4 JSON dict.
"""
from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Protocol, Sequence, Union


class CellKind(str, Enum):
    MARKUP = "markdown"
    CODE = "code"
    RAW = "raw"


@dataclass(frozen=True)
class NotebookCell:
    kind: CellKind
    text: str


class NotebookDocument(Protocol):
    def count(self) -> int: ...

    def cell_at(self, index: int) -> NotebookCell: ...

    def insert_cells_at(self, index: int, cells: Sequence[NotebookCell]) -> None: ...


def _join_source(source: Union[str, List[str]]) -> str:
    if isinstance(source, list):
        return "".join(source)
    return source


def _split_source(text: str) -> List[str]:
    # nbformat stores source as lines that keep their trailing newline
    return text.splitlines(keepends=True)


class IpynbDocument:
    """In-memory .ipynb notebook (nbformat 4)."""

    def __init__(self, data: Dict[str, Any]):
        if not isinstance(data.get("cells"), list):
            raise ValueError("Not a notebook: missing 'cells' list")
        self.data = data

    # -----------------------------
    # Loading / saving
    # -----------------------------
    @classmethod
    def load(cls, path: Union[str, Path]) -> "IpynbDocument":
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            return cls(json.load(f))

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        with path.open("w", encoding="utf-8") as f:
            json.dump(self.data, f, ensure_ascii=False, indent=1)
            f.write("\n")

    # -----------------------------
    # Document contract
    # -----------------------------
    @property
    def cells(self) -> List[Dict[str, Any]]:
        return self.data["cells"]

    def count(self) -> int:
        return len(self.cells)

    def cell_at(self, index: int) -> NotebookCell:
        if not 0 <= index < self.count():
            raise IndexError(f"Cell index {index} out of range (notebook has {self.count()} cells)")
        raw = self.cells[index]
        try:
            kind = CellKind(raw.get("cell_type", "code"))
        except ValueError:
            kind = CellKind.RAW
        return NotebookCell(kind=kind, text=_join_source(raw.get("source", "")))

    def insert_cells_at(self, index: int, cells: Sequence[NotebookCell]) -> None:
        if not 0 <= index <= self.count():
            raise IndexError(f"Insert position {index} out of range (notebook has {self.count()} cells)")
        self.cells[index:index] = [self._to_raw(cell) for cell in cells]

    def _to_raw(self, cell: NotebookCell) -> Dict[str, Any]:
        raw: Dict[str, Any] = {
            "cell_type": cell.kind.value,
            "metadata": {},
            "source": _split_source(cell.text),
        }
        if cell.kind == CellKind.CODE:
            raw["execution_count"] = None
            raw["outputs"] = []
        # cell ids are mandatory from nbformat 4.5 on
        if (self.data.get("nbformat", 4), self.data.get("nbformat_minor", 0)) >= (4, 5):
            raw["id"] = uuid.uuid4().hex[:8]
        return raw


def markdown_cell(text: str) -> NotebookCell:
    return NotebookCell(kind=CellKind.MARKUP, text=text)
