# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/node/waiter.py

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Optional

from valnode.core.results import NodeResults, run_parallel
from valnode.models.node import Host
from valnode.observers.dispatcher import EventBus
from valnode.observers.events import HostReachable, HostUnreachable, new_ctx
from valnode.utils.retry import attempts_for, retry
from valnode.utils.ssh import Connector

log = logging.getLogger("valnode")

# floor for a single connect or command timeout near the deadline
MIN_ATTEMPT_TIMEOUT = 0.1


def wait_for_hosts(
    hosts: Iterable[Host],
    connector: Connector,
    *,
    timeout: float,
    delay: float,
    bus: Optional[EventBus] = None,
    ctx: Optional[dict] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> NodeResults:
    """
    Block until every host answers a shell command or its own timeout runs
    out. Unreachable hosts carry their last error in the returned results.
    No attempt outlives the host's deadline: connect and command timeouts
    are cut down to the time left.
    """
    hosts = list(hosts)
    by_alias = {h.node_id: h for h in hosts}
    bus = bus or EventBus()
    ctx = ctx or new_ctx(env="", context=None)

    def _wait(alias: str) -> None:
        host = by_alias[alias]
        deadline = clock() + timeout

        @retry(
            retries=attempts_for(timeout, delay),
            delay=delay,
            on_retry=lambda attempt, exc: log.debug("[%s] not reachable yet (attempt %d): %s", alias, attempt, exc),
            sleep=sleep,
            deadline=deadline,
            clock=clock,
        )
        def _reach() -> None:
            budget = max(deadline - clock(), MIN_ATTEMPT_TIMEOUT)
            with connector(host, connect_timeout=budget) as runner:
                runner.check("echo ok", timeout=max(min(delay, deadline - clock()), MIN_ATTEMPT_TIMEOUT))

        try:
            _reach()
        except Exception as exc:
            bus.emit(HostUnreachable(host=alias, error=str(exc), **ctx))
            raise
        bus.emit(HostReachable(host=alias, **ctx))

    log.info("Waiting for %d host(s) to accept SSH connections...", len(hosts))
    return run_parallel(list(by_alias), _wait)
