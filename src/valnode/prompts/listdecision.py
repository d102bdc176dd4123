# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/prompts/listdecision.py

from __future__ import annotations

import logging
from typing import Callable, List, Tuple, TypeVar

from valnode.prompts.options import ListDecision
from valnode.prompts.prompter import Prompter

log = logging.getLogger("valnode")

T = TypeVar("T")


def capture_list_decision(
    prompter: Prompter,
    prompt: str,
    capture: Callable[[str], T],
    capture_prompt: str,
    label: str,
    info: str,
) -> Tuple[List[T], bool]:
    """
    Small list editor: add / delete / preview entries until Done.

    Returns (items, cancelled). Cancel discards everything collected.
    """
    items: List[T] = []
    while True:
        decision = prompter.capture_option(prompt, list(ListDecision))
        if decision is ListDecision.ADD:
            item = capture(capture_prompt)
            if item in items:
                log.info("%s already in list", item)
                continue
            items.append(item)
        elif decision is ListDecision.DELETE:
            if not items:
                log.info("No %s added yet", label)
                continue
            idx = prompter.capture_index("Choose item to remove:", [str(i) for i in items])
            items.pop(idx)
        elif decision is ListDecision.PREVIEW:
            if not items:
                log.info("The list is empty")
                continue
            for i, item in enumerate(items, 1):
                log.info("%d. %s", i, item)
        elif decision is ListDecision.MORE_INFO:
            if info:
                log.info(info)
        elif decision is ListDecision.DONE:
            return items, False
        elif decision is ListDecision.CANCEL:
            return [], True
