import pytest
import typer

from valnode.errors import PromptCancelled
from valnode.prompts import prompter as prompter_mod
from valnode.prompts.options import FeeChoice
from valnode.prompts.prompter import TyperPrompter


def _abort(*args, **kwargs):
    raise typer.Abort()


def test_abort_becomes_prompt_cancelled(monkeypatch):
    monkeypatch.setattr(prompter_mod.typer, "prompt", _abort)

    with pytest.raises(PromptCancelled):
        TyperPrompter().capture_uint64("Chain ID")


def test_abort_on_confirm_becomes_prompt_cancelled(monkeypatch):
    monkeypatch.setattr(prompter_mod.typer, "confirm", _abort)

    with pytest.raises(PromptCancelled):
        TyperPrompter().capture_yes_no("Continue?")


def test_invalid_answer_is_asked_again(monkeypatch):
    answers = iter(["nine", "0", "2"])
    monkeypatch.setattr(prompter_mod.typer, "prompt", lambda question: next(answers))
    monkeypatch.setattr(prompter_mod.typer, "echo", lambda *a, **k: None)

    assert TyperPrompter().capture_option("Fees", list(FeeChoice)) is FeeChoice.MEDIUM
