# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/errors.py

from __future__ import annotations

from typing import Dict, List, Optional


class ValnodeError(RuntimeError):
    """Base class for every error raised by valnode."""


# ---------------------------------------------------------------------
# Configuration errors: raised before any cloud resource is touched
# ---------------------------------------------------------------------
class ConfigurationError(ValnodeError, ValueError):
    pass


class FlagConflict(ConfigurationError):
    pass


class RegionNodeCountMismatch(ConfigurationError):
    pass


class InvalidVersionError(ConfigurationError):
    pass


class IllegalNameError(ConfigurationError):
    pass


class AuthorizationDenied(ConfigurationError):
    pass


# ---------------------------------------------------------------------
# Wizard
# ---------------------------------------------------------------------
class DuplicateStageError(ValueError):
    pass


class InvalidBacktrack(RuntimeError):
    pass


class PromptCancelled(ValnodeError):
    pass


class GenesisFormatError(ValnodeError, ValueError):
    pass


# ---------------------------------------------------------------------
# External collaborators
# ---------------------------------------------------------------------
class CloudError(ValnodeError):
    pass


class IPLookupError(CloudError):
    pass


class TerraformError(ValnodeError):
    pass


class AnsibleError(ValnodeError):
    pass


class SSHCommandError(ValnodeError):
    pass


# ---------------------------------------------------------------------
# Fleet
# ---------------------------------------------------------------------
class ProvisionError(ValnodeError):
    """
    Infra apply failed. `stop_failures` maps instance id -> error for every
    instance the teardown could not stop.
    """

    def __init__(self, message: str, stop_failures: Optional[Dict[str, Exception]] = None):
        super().__init__(message)
        self.stop_failures = stop_failures or {}


class NodesFailedError(ValnodeError):
    def __init__(self, message: str, failed_nodes: Optional[List[str]] = None):
        super().__init__(message)
        self.failed_nodes = failed_nodes or []


# ---------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------
class ClusterNotFoundError(ValnodeError):
    pass


class SidecarNotFoundError(ValnodeError):
    pass


class ReleaseLookupError(ValnodeError):
    pass
