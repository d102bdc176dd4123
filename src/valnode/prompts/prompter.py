# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/prompts/prompter.py

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence, TypeVar

import typer

from valnode.errors import PromptCancelled
from valnode.prompts.options import PromptOption
from valnode.prompts import validators

E = TypeVar("E", bound=PromptOption)
T = TypeVar("T")


class Prompter(Protocol):
    def capture_option(self, question: str, options: Sequence[E]) -> E: ...

    def capture_index(self, question: str, items: Sequence[str]) -> int: ...

    def capture_string(self, question: str, *, validator: Optional[Callable[[str], str]] = None) -> str: ...

    def capture_uint64(self, question: str, *, allow_zero: bool = True) -> int: ...

    def capture_positive_int(self, question: str) -> int: ...

    def capture_address(self, question: str) -> str: ...

    def capture_yes_no(self, question: str) -> bool: ...

    def capture_existing_path(self, question: str) -> Path: ...

    def capture_version(self, question: str) -> str: ...


class TyperPrompter:
    """
    Terminal prompter. Menus are rendered as numbered lists; free-form
    answers are re-asked until their validator accepts them.
    """

    def _ask(self, question: str, parse: Callable[[str], T]) -> T:
        while True:
            try:
                raw = typer.prompt(question)
            except typer.Abort:
                raise PromptCancelled("prompt cancelled by user")
            try:
                return parse(raw)
            except ValueError as exc:
                typer.echo(f"  invalid input: {exc}")

    def capture_option(self, question: str, options: Sequence[E]) -> E:
        options = list(options)
        typer.echo(question)
        for i, opt in enumerate(options, 1):
            typer.echo(f"  {i}) {opt.label}")
        idx = self._ask("Choose an option", lambda raw: _parse_index(raw, len(options)))
        return options[idx]

    def capture_index(self, question: str, items: Sequence[str]) -> int:
        typer.echo(question)
        for i, item in enumerate(items, 1):
            typer.echo(f"  {i}) {item}")
        return self._ask("Choose an item", lambda raw: _parse_index(raw, len(items)))

    def capture_string(self, question: str, *, validator: Optional[Callable[[str], str]] = None) -> str:
        return self._ask(question, validator or validators.validate_non_empty)

    def capture_uint64(self, question: str, *, allow_zero: bool = True) -> int:
        return self._ask(question, lambda raw: validators.validate_uint64(raw, allow_zero=allow_zero))

    def capture_positive_int(self, question: str) -> int:
        return self._ask(question, validators.validate_positive_int)

    def capture_address(self, question: str) -> str:
        return self._ask(question, validators.validate_address)

    def capture_yes_no(self, question: str) -> bool:
        try:
            return typer.confirm(question)
        except typer.Abort:
            raise PromptCancelled("prompt cancelled by user")

    def capture_existing_path(self, question: str) -> Path:
        return self._ask(question, validators.validate_existing_path)

    def capture_version(self, question: str) -> str:
        return self._ask(question, validators.validate_version)


def _parse_index(raw: str, n: int) -> int:
    try:
        idx = int(raw.strip())
    except ValueError:
        raise ValueError(f"enter a number between 1 and {n}")
    if not 1 <= idx <= n:
        raise ValueError(f"enter a number between 1 and {n}")
    return idx - 1


def option_labels(options: Sequence[PromptOption]) -> List[str]:
    return [o.label for o in options]
