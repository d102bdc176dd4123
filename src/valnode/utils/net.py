# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/utils/net.py

from __future__ import annotations

import ipaddress
import logging
from typing import Optional

import requests

from valnode.errors import IPLookupError

log = logging.getLogger("valnode")


def get_public_ip(url: str, *, session: Optional[requests.Session] = None, timeout: float = 10.0) -> str:
    """
    Ask an ipify-style endpoint for the operator's public address.
    Expects a JSON body of the form {"ip": "<dotted quad>"}.
    """
    http = session or requests
    try:
        resp = http.get(url, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as exc:
        raise IPLookupError(f"unable to determine public IP from {url}: {exc}") from exc

    ip = data.get("ip") if isinstance(data, dict) else None
    if not isinstance(ip, str):
        raise IPLookupError("no IP address found")
    try:
        ipaddress.IPv4Address(ip)
    except ValueError as exc:
        raise IPLookupError(f"invalid IP address {ip!r}") from exc

    log.debug("operator public IP is %s", ip)
    return ip
