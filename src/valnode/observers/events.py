# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events in a single command invocation
    env: str          # fuji/devnet/local
    context: Optional[str]  # cluster or subnet name

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def now_ts() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def new_ctx(env: str, context: Optional[str], run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": now_ts(),
        "run_id": run_id or str(uuid.uuid4()),
        "env": env,
        "context": context,
    }


# ---------------------------------------------------------------------
# Provisioning
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ProvisionStarted(BaseEvent):
    cloud: str
    regions: List[str]
    counts: List[int]

@dataclass(frozen=True)
class KeyPairResolved(BaseEvent):
    region: str
    key_pair: str
    created: bool

@dataclass(frozen=True)
class SecurityGroupResolved(BaseEvent):
    region: str
    name: str
    created: bool

@dataclass(frozen=True)
class InstancesCreated(BaseEvent):
    region: str
    instance_ids: List[str]

@dataclass(frozen=True)
class TeardownResult(BaseEvent):
    stopped: List[str]
    failed: List[str]


# ---------------------------------------------------------------------
# Fleet (waiter + bootstrap)
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class HostReachable(BaseEvent):
    host: str

@dataclass(frozen=True)
class HostUnreachable(BaseEvent):
    host: str
    error: str

@dataclass(frozen=True)
class NodeIdentityCreated(BaseEvent):
    host: str
    node_id: str

@dataclass(frozen=True)
class BootstrapStepCompleted(BaseEvent):
    host: str
    step: str

@dataclass(frozen=True)
class NodeCreated(BaseEvent):
    host: str
    node_id: str

@dataclass(frozen=True)
class NodeFailed(BaseEvent):
    host: str
    node_id: Optional[str]
    error: str


# ---------------------------------------------------------------------
# Generic lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class LifecycleEvent(BaseEvent):
    phase: str        # provision/wait/bootstrap/devnet/deploy/subnet
    status: str       # started/done/failed
    message: str = ""
