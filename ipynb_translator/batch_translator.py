"""
Translate Markdown cells of a notebook.

BatchTranslator walks Collecting -> Confirming -> Running -> Reconciling ->
Done: it gathers eligible Markdown cells, asks the user, fans the texts out
through the bounded runner and writes every successful translation back
directly below its source cell. translate_cell() is the single-cell path.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from ipynb_translator.eligibility import is_translatable
from ipynb_translator.exceptions import TranslationCancelledError
from ipynb_translator.host_ui import HostUI, ProgressScope
from ipynb_translator.llm_client import AsyncTranslationClient
from ipynb_translator.notebook import CellKind, NotebookDocument, markdown_cell
from ipynb_translator.providers import TranslationConfig
from ipynb_translator.runner import RunnerFailure, run_with_concurrency
from ipynb_translator.settings import TranslatorSettings

logger = logging.getLogger(__name__)

CONFIRM_YES = "Yes"
CONFIRM_NO = "No"


class BatchPhase(str, Enum):
    COLLECTING = "collecting"
    CONFIRMING = "confirming"
    RUNNING = "running"
    RECONCILING = "reconciling"
    DONE = "done"


class BatchOutcome(str, Enum):
    NOTHING_TO_DO = "nothing_to_do"
    DECLINED = "declined"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class CandidateItem:
    """A Markdown cell chosen for translation, at its index when collected."""
    index: int
    text: str


@dataclass
class BatchResultEntry:
    candidate: CandidateItem
    translated_text: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def cancelled(self) -> bool:
        return isinstance(self.error, TranslationCancelledError)


@dataclass
class BatchSummary:
    outcome: BatchOutcome
    candidates: int = 0
    successful: int = 0
    failed: int = 0
    cancelled: int = 0
    entries: List[BatchResultEntry] = field(default_factory=list)


class BatchTranslator:
    """Translate every eligible Markdown cell of one notebook."""

    def __init__(self, client: AsyncTranslationClient, settings: TranslatorSettings, ui: HostUI):
        self.client = client
        self.settings = settings
        self.ui = ui
        self.phase = BatchPhase.COLLECTING

    # --------------------------------------------------
    # Collecting
    # --------------------------------------------------
    def collect_candidates(self, document: NotebookDocument) -> List[CandidateItem]:
        candidates: List[CandidateItem] = []
        for i in range(document.count()):
            cell = document.cell_at(i)
            if cell.kind != CellKind.MARKUP:
                continue
            if is_translatable(cell.text, self.settings.skip_code_blocks, self.settings.skip_math_formulas):
                candidates.append(CandidateItem(index=i, text=cell.text))
        return candidates

    # --------------------------------------------------
    # Full pipeline
    # --------------------------------------------------
    async def translate_all(self, document: NotebookDocument) -> BatchSummary:
        """
        Run the whole batch. Raises ConfigurationError up front, before the
        notebook is scanned; per-cell failures never escape.
        """
        config = self.settings.translation_config()

        self.phase = BatchPhase.COLLECTING
        candidates = self.collect_candidates(document)

        self.phase = BatchPhase.CONFIRMING
        if not candidates:
            self.ui.notify("No translatable Markdown cells found in this notebook")
            self.phase = BatchPhase.DONE
            return BatchSummary(outcome=BatchOutcome.NOTHING_TO_DO)

        count = len(candidates)
        choice = self.ui.confirm(
            f"Found {count} Markdown cells to translate. This will create {count} new cells. Continue?",
            [CONFIRM_YES, CONFIRM_NO],
        )
        if choice != CONFIRM_YES:
            logger.info("Batch translation declined for %d cells", count)
            self.phase = BatchPhase.DONE
            return BatchSummary(outcome=BatchOutcome.DECLINED, candidates=count)

        logger.info(
            "Translating %d cells with %s/%s (concurrency=%d)",
            count, config.provider, config.model_name, self.settings.concurrency,
        )

        with self.ui.progress("Translating all Markdown cells...", cancellable=True) as progress:
            self.phase = BatchPhase.RUNNING
            entries = await self.run(candidates, config, progress)

            self.phase = BatchPhase.RECONCILING
            self.reconcile(document, entries)

        summary = self._summarize(entries)
        self._report(summary)
        self.phase = BatchPhase.DONE
        return summary

    # --------------------------------------------------
    # Running
    # --------------------------------------------------
    async def run(
        self,
        candidates: List[CandidateItem],
        config: TranslationConfig,
        progress: ProgressScope,
    ) -> List[BatchResultEntry]:
        async def translate_candidate(candidate: CandidateItem) -> str:
            if progress.is_cancellation_requested:
                raise TranslationCancelledError("Cancelled by user")
            return await self.client.translate(candidate.text, config)

        def on_progress(completed: int, total: int) -> None:
            progress.report(increment=100 / total, message=f"{completed}/{total} cells translated")

        results = await run_with_concurrency(
            candidates, self.settings.concurrency, translate_candidate, on_progress
        )
        return [self._to_entry(candidate, result) for candidate, result in zip(candidates, results)]

    @staticmethod
    def _to_entry(candidate: CandidateItem, result: Union[str, RunnerFailure]) -> BatchResultEntry:
        if isinstance(result, RunnerFailure):
            if not isinstance(result.error, TranslationCancelledError):
                logger.error("Failed to translate cell %d: %s", candidate.index, result.error)
            return BatchResultEntry(candidate=candidate, error=result.error)
        return BatchResultEntry(candidate=candidate, translated_text=result)

    # --------------------------------------------------
    # Reconciling
    # --------------------------------------------------
    @staticmethod
    def reconcile(document: NotebookDocument, entries: List[BatchResultEntry]) -> List[int]:
        """
        Insert each successful translation right after its source cell.

        Highest index first: an insert only shifts cells after it, so every
        index still to be processed stays valid. Returns the source indices in
        the order they were handled.
        """
        successes = [entry for entry in entries if entry.ok]
        successes.sort(key=lambda entry: entry.candidate.index, reverse=True)

        order: List[int] = []
        for entry in successes:
            index = entry.candidate.index
            document.insert_cells_at(index + 1, [markdown_cell(entry.translated_text)])
            order.append(index)
        return order

    # --------------------------------------------------
    # Done
    # --------------------------------------------------
    @staticmethod
    def _summarize(entries: List[BatchResultEntry]) -> BatchSummary:
        successful = sum(1 for entry in entries if entry.ok)
        cancelled = sum(1 for entry in entries if entry.cancelled)
        failed = len(entries) - successful - cancelled

        # a cancel that arrives after the last item started skips nothing
        outcome = BatchOutcome.CANCELLED if cancelled else BatchOutcome.COMPLETED
        return BatchSummary(
            outcome=outcome,
            candidates=len(entries),
            successful=successful,
            failed=failed,
            cancelled=cancelled,
            entries=entries,
        )

    def _report(self, summary: BatchSummary) -> None:
        if summary.outcome == BatchOutcome.CANCELLED:
            message = (
                f"Translation cancelled by user. {summary.successful} successful, "
                f"{summary.failed} failed, {summary.cancelled} skipped."
            )
        else:
            message = f"Batch translation completed! {summary.successful} successful, {summary.failed} failed."

        if summary.failed > 0:
            self.ui.warn(message)
        else:
            self.ui.notify(message)


async def translate_cell(
    document: NotebookDocument,
    index: int,
    client: AsyncTranslationClient,
    settings: TranslatorSettings,
    ui: HostUI,
) -> Optional[int]:
    """
    Translate one Markdown cell and insert the result below it.
    Returns the index of the new cell, or None when the cell is not Markdown.
    ConfigurationError and TranslationError propagate to the caller.
    """
    cell = document.cell_at(index)
    if cell.kind != CellKind.MARKUP:
        ui.notify("Please select a markdown cell to translate")
        return None

    config = settings.translation_config()

    with ui.progress("Translating...") as progress:
        translated = await client.translate(cell.text, config)
        document.insert_cells_at(index + 1, [markdown_cell(translated)])
        progress.report(increment=100.0)

    ui.notify(f"Translation completed using {config.provider}!")
    return index + 1
