# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/core/results.py

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

log = logging.getLogger("valnode")


@dataclass(frozen=True)
class NodeResult:
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class NodeResults:
    """
    Thread-safe node id -> NodeResult map.

    Each fan-out task owns one key and writes it exactly once. Readers consume
    the map after the executor has joined.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._results: Dict[str, NodeResult] = {}

    def add_result(self, node_id: str, value: Any = None, error: Optional[BaseException] = None) -> None:
        with self._lock:
            if node_id in self._results:
                raise ValueError(f"result for {node_id} already recorded")
            self._results[node_id] = NodeResult(value=value, error=error)

    def get(self, node_id: str) -> Optional[NodeResult]:
        with self._lock:
            return self._results.get(node_id)

    def has_errors(self) -> bool:
        with self._lock:
            return any(r.error is not None for r in self._results.values())

    def error_hosts(self) -> Dict[str, BaseException]:
        with self._lock:
            return {k: r.error for k, r in self._results.items() if r.error is not None}

    def node_ids(self) -> List[str]:
        with self._lock:
            return list(self._results)

    def items(self) -> List[Tuple[str, NodeResult]]:
        with self._lock:
            return list(self._results.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def __iter__(self) -> Iterator[str]:
        return iter(self.node_ids())


def run_parallel(
    keys: Iterable[str],
    fn: Callable[[str], Any],
    *,
    results: Optional[NodeResults] = None,
) -> NodeResults:
    """
    Run fn(key) for every key on its own thread and collect outcomes.

    A raised exception becomes that key's error; siblings keep running.
    Returns after every task finished.
    """
    keys = list(keys)
    if len(set(keys)) != len(keys):
        raise ValueError("run_parallel keys must be unique")
    results = results if results is not None else NodeResults()
    if not keys:
        return results

    def _task(key: str) -> None:
        try:
            value = fn(key)
        except Exception as exc:
            log.debug("task %s failed: %s", key, exc)
            results.add_result(key, error=exc)
        else:
            results.add_result(key, value=value)

    with ThreadPoolExecutor(max_workers=len(keys)) as pool:
        for key in keys:
            pool.submit(_task, key)

    return results
