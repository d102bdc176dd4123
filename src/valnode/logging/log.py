# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/logging/log.py

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

# third-party loggers capped at WARNING
NOISY_LOGGERS = ("paramiko", "botocore", "boto3", "urllib3", "ansible_runner")

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(threadName)s | %(message)s"


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "valnode",
    verbose: bool = False,
) -> tuple[logging.Logger, str, Path]:
    """
    One log file per run under <base_dir>/logs holding everything at DEBUG,
    plus a console handler that prints bare operator-facing messages.

    Returns (logger, run_id, log_path); run_id is shared with the event
    observers so a JSONL event stream can be matched to its log file.
    """
    run_id = str(uuid.uuid4())

    if base_dir is None:
        base_dir = Path.home() / ".valnode"
    logs_dir = Path(base_dir).expanduser() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"{name}-{ts}-{run_id}.log"

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    fh = logging.FileHandler(log_path)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    ch = logging.StreamHandler()
    if verbose:
        ch.setLevel(logging.DEBUG)
        ch.setFormatter(logging.Formatter("%(levelname)-7s %(message)s"))
    else:
        ch.setLevel(logging.INFO)
        ch.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(fh)
    logger.addHandler(ch)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug("=== valnode run started ===")
    logger.debug("run_id=%s", run_id)
    logger.debug("log_file=%s", log_path)

    return logger, run_id, log_path
