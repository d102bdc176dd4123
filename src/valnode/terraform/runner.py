# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/terraform/runner.py

from __future__ import annotations

import json
import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional

from valnode.errors import TerraformError

log = logging.getLogger("valnode")

SPEC_FILE = "main.tf.json"
EIP_LIMIT_ERR = "AddressLimitExceeded"


class EIPLimitError(TerraformError):
    pass


class TerraformCliRunner:
    """
    A thin wrapper around the `terraform` CLI working on one directory that
    holds a JSON-syntax spec. Testable by mocking subprocess.run.
    """

    def __init__(self, workdir: Path, *, binary: str = "terraform", env: Optional[Dict[str, str]] = None):
        self.workdir = Path(workdir)
        self.binary = binary
        self.env = env or {}

    # ------------------------- internal helpers -------------------------

    def _run(self, args: List[str], *, capture: bool = True) -> subprocess.CompletedProcess:
        argv = [self.binary] + args
        log.debug("running %s in %s", " ".join(argv), self.workdir)
        cp = subprocess.run(
            argv,
            cwd=str(self.workdir),
            check=False,
            text=True,
            capture_output=capture,
            env={**os.environ, **self.env},
        )
        if cp.returncode != 0:
            stderr = getattr(cp, "stderr", "") or ""
            if EIP_LIMIT_ERR in stderr:
                raise EIPLimitError(
                    f"elastic IP limit reached ({EIP_LIMIT_ERR}); try a different region or --use-static-ip=false"
                )
            raise TerraformError(f"terraform failed (rc={cp.returncode}) for {argv!r}\n{stderr}")
        return cp

    # ------------------------- operations -------------------------

    def write_spec(self, spec: Dict[str, Any]) -> Path:
        self.workdir.mkdir(parents=True, exist_ok=True)
        path = self.workdir / SPEC_FILE
        path.write_text(json.dumps(spec, indent=2))
        return path

    def init(self) -> None:
        self._run(["init", "-input=false", "-no-color"])

    def apply(self) -> None:
        self._run(["apply", "-auto-approve", "-input=false", "-no-color"])

    def destroy(self) -> None:
        self._run(["destroy", "-auto-approve", "-input=false", "-no-color"])

    def outputs(self) -> Dict[str, Any]:
        """All outputs currently in state, as name -> value."""
        cp = self._run(["output", "-json"])
        try:
            raw = json.loads(cp.stdout or "{}")
        except json.JSONDecodeError as exc:
            raise TerraformError(f"unable to parse terraform output: {exc}") from exc
        return {name: item.get("value") for name, item in raw.items()}

    def output_list(self, name: str) -> List[str]:
        value = self.outputs().get(name)
        if value is None:
            raise TerraformError(f"terraform output {name!r} not found")
        return [str(v) for v in value]
