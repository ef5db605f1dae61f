"""
Host UI collaborator.

The orchestrator talks to the user only through HostUI: plain messages, a
yes/no confirmation and a progress scope that also carries the cooperative
cancellation flag.
"""
from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, ContextManager, Iterator, List, Optional, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)


class ProgressScope:
    """Progress of one long-running operation, plus its cancellation flag."""

    def __init__(self, title: str, cancellable: bool = False):
        self.title = title
        self.cancellable = cancellable
        self.percent = 0.0
        self.last_message = ""
        self._cancelled = False

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self.cancellable:
            self._cancelled = True

    def report(self, increment: float = 0.0, message: str = "") -> None:
        self.percent = min(100.0, self.percent + increment)
        if message:
            self.last_message = message


class HostUI(Protocol):
    def notify(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def confirm(self, message: str, options: Sequence[str]) -> Optional[str]: ...

    def progress(self, title: str, cancellable: bool = False) -> ContextManager[ProgressScope]: ...


# -----------------------------
# Terminal
# -----------------------------
class _ConsoleProgress(ProgressScope):
    def report(self, increment: float = 0.0, message: str = "") -> None:
        super().report(increment, message)
        print(f"\r[{self.percent:5.1f}%] {self.title} {self.last_message}", end="", flush=True)


class ConsoleUI:
    """Interactive UI for the command line."""

    def __init__(self, assume_yes: bool = False):
        self.assume_yes = assume_yes

    def notify(self, message: str) -> None:
        print(f"✅ {message}")

    def warn(self, message: str) -> None:
        print(f"⚠️ {message}")

    def error(self, message: str) -> None:
        print(f"❌ {message}")

    def confirm(self, message: str, options: Sequence[str]) -> Optional[str]:
        if self.assume_yes:
            return options[0] if options else None

        answer = input(f"{message} [{'/'.join(options)}] ").strip()
        for option in options:
            if answer.lower() == option.lower() or answer.lower() == option[:1].lower():
                return option
        return None

    @contextmanager
    def progress(self, title: str, cancellable: bool = False) -> Iterator[ProgressScope]:
        scope = _ConsoleProgress(title, cancellable)
        print(title)
        restore = _route_sigint_to(scope) if cancellable else None
        try:
            yield scope
        finally:
            if restore is not None:
                restore()
            print()


def _route_sigint_to(scope: ProgressScope) -> Optional[Callable[[], None]]:
    """
    While a cancellable scope is open, Ctrl-C only sets its cancellation flag.
    Returns the callable that removes the handler again, or None when the
    running loop cannot install signal handlers.
    """
    def request_cancel() -> None:
        scope.cancel()
        print("\n⏹️ Cancelling, waiting for requests in flight...")

    try:
        loop = asyncio.get_running_loop()
        loop.add_signal_handler(signal.SIGINT, request_cancel)
    except (RuntimeError, NotImplementedError):
        return None
    return lambda: loop.remove_signal_handler(signal.SIGINT)


# -----------------------------
# Headless
# -----------------------------
@dataclass
class RecordingUI:
    """
    Non-interactive UI. Answers every confirmation with `answer` and keeps
    all messages so a caller (the HTTP service, tests) can return them.
    """
    answer: Optional[str] = "Yes"
    messages: List[Tuple[str, str]] = field(default_factory=list)
    confirmations: List[str] = field(default_factory=list)
    progress_scopes: List[ProgressScope] = field(default_factory=list)
    cancel_after: Optional[int] = None

    def notify(self, message: str) -> None:
        logger.info(message)
        self.messages.append(("info", message))

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        logger.error(message)
        self.messages.append(("error", message))

    def confirm(self, message: str, options: Sequence[str]) -> Optional[str]:
        self.confirmations.append(message)
        return self.answer

    @contextmanager
    def progress(self, title: str, cancellable: bool = False) -> Iterator[ProgressScope]:
        scope = _CountingProgress(title, cancellable, self.cancel_after)
        self.progress_scopes.append(scope)
        yield scope


class _CountingProgress(ProgressScope):
    """Requests cancellation by itself once `cancel_after` reports arrived."""

    def __init__(self, title: str, cancellable: bool, cancel_after: Optional[int]):
        super().__init__(title, cancellable)
        self.cancel_after = cancel_after
        self.reports = 0

    def report(self, increment: float = 0.0, message: str = "") -> None:
        super().report(increment, message)
        self.reports += 1
        if self.cancel_after is not None and self.reports >= self.cancel_after:
            self.cancel()
