# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/core/statemachine.py

from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, Mapping, Tuple

from valnode.errors import DuplicateStageError, InvalidBacktrack


class StateDirection(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"
    STOP = "stop"


class StateMachine:
    """
    Linear sequencer over named stages.

    The caller runs the handler for `current_state()` and feeds the direction
    it returned into `next_state()`. Going backward lets an operator revisit
    an earlier answer; handlers hold their own results so revisiting a stage
    only re-runs that stage.
    """

    def __init__(self, stages: Iterable[str]):
        stages = tuple(stages)
        if not stages:
            raise ValueError("state machine needs at least one stage")
        seen = set()
        for name in stages:
            if name in seen:
                raise DuplicateStageError(f"duplicate stage name: {name!r}")
            seen.add(name)
        self._stages: Tuple[str, ...] = stages
        self._index = 0

    @property
    def stages(self) -> Tuple[str, ...]:
        return self._stages

    def current_state(self) -> str:
        if not self.running():
            raise IndexError("state machine has finished")
        return self._stages[self._index]

    def running(self) -> bool:
        return 0 <= self._index < len(self._stages)

    def next_state(self, direction: StateDirection) -> None:
        if direction is StateDirection.FORWARD:
            self._index += 1
        elif direction is StateDirection.BACKWARD:
            if self._index == 0:
                raise InvalidBacktrack(f"cannot go back from first stage {self._stages[0]!r}")
            self._index -= 1
        elif direction is StateDirection.STOP:
            self._index = len(self._stages)
        else:
            raise ValueError(f"unknown direction: {direction!r}")


def run_stages(
    machine: StateMachine,
    handlers: Mapping[str, Callable[[], StateDirection]],
) -> None:
    """Drive `machine` to completion, calling the handler registered for each stage."""
    missing = [s for s in machine.stages if s not in handlers]
    if missing:
        raise ValueError(f"no handler for stage(s): {', '.join(missing)}")
    while machine.running():
        direction = handlers[machine.current_state()]()
        machine.next_state(direction)
