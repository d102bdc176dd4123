# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/observers/dispatcher.py
from __future__ import annotations
import logging
from dataclasses import replace
from typing import List, Optional
from .events import BaseEvent, now_ts

log = logging.getLogger("valnode")


class EventBus:
    def __init__(self, observers: Optional[List] = None):
        self._observers = observers or []

    def emit(self, event: BaseEvent) -> None:
        # events share one run context; ts is the moment of emission
        event = replace(event, ts=now_ts())
        for ob in self._observers:
            try:
                ob.notify(event)
            except Exception as exc:
                # observer failures never reach the caller
                log.debug("observer %s failed: %s", type(ob).__name__, exc)
