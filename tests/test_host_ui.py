import typing

import pytest

from ipynb_translator.host_ui import ConsoleUI, HostUI, ProgressScope, RecordingUI


def test_progress_contract_is_typed():
    hints = typing.get_type_hints(HostUI.progress)
    assert hints["return"] == typing.ContextManager[ProgressScope]


@pytest.mark.parametrize("ui", [ConsoleUI(), RecordingUI()])
def test_progress_yields_scope(ui):
    with ui.progress("Working...", cancellable=True) as scope:
        assert isinstance(scope, ProgressScope)
        scope.report(increment=50, message="1/2 cells translated")
        scope.cancel()

    assert scope.percent == 50
    assert scope.is_cancellation_requested


def test_scope_not_cancellable_ignores_cancel():
    scope = ProgressScope("Translating...")
    scope.cancel()
    assert not scope.is_cancellation_requested


@pytest.mark.parametrize("answer, expected", [("y", "Yes"), ("YES", "Yes"), ("n", "No"), ("maybe", None)])
def test_console_confirm(monkeypatch, answer, expected):
    monkeypatch.setattr("builtins.input", lambda prompt: answer)
    assert ConsoleUI().confirm("Continue?", ["Yes", "No"]) == expected


def test_console_confirm_assume_yes(monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt: pytest.fail("should not prompt"))
    assert ConsoleUI(assume_yes=True).confirm("Continue?", ["Yes", "No"]) == "Yes"
