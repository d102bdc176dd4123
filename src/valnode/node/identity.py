# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/node/identity.py

from __future__ import annotations

import datetime
import hashlib
import secrets
from dataclasses import dataclass
from pathlib import Path

import base58
from Crypto.Hash import RIPEMD160
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from valnode.store.app_store import BLS_KEY_FILE, STAKER_CERT_FILE, STAKER_KEY_FILE

NODE_ID_PREFIX = "NodeID-"
STAKING_KEY_SIZE = 4096
CERT_VALIDITY_DAYS = 100 * 365

# BLS12-381 subgroup order
BLS_CURVE_ORDER = 0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001


@dataclass(frozen=True)
class StakingIdentity:
    cert_pem: bytes
    key_pem: bytes
    bls_key: bytes
    node_id: str


def cb58_encode(data: bytes) -> str:
    """base58 with a 4 byte sha256 checksum suffix."""
    checksum = hashlib.sha256(data).digest()[-4:]
    return base58.b58encode(data + checksum).decode("ascii")


def node_id_from_cert(cert_pem: bytes) -> str:
    cert = x509.load_pem_x509_certificate(cert_pem)
    der = cert.public_bytes(serialization.Encoding.DER)
    digest = RIPEMD160.new(hashlib.sha256(der).digest()).digest()
    return NODE_ID_PREFIX + cb58_encode(digest)


def new_bls_key() -> bytes:
    """32 byte big-endian secret scalar in [1, r)."""
    while True:
        candidate = int.from_bytes(secrets.token_bytes(32), "big") % BLS_CURVE_ORDER
        if candidate:
            return candidate.to_bytes(32, "big")


def new_staking_cert() -> tuple[bytes, bytes]:
    """Self-signed RSA staking certificate. Returns (cert_pem, key_pem)."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=STAKING_KEY_SIZE)
    name = x509.Name([x509.NameAttribute(NameOID.ORGANIZATION_NAME, "valnode")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=CERT_VALIDITY_DAYS))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    cert_pem = cert.public_bytes(serialization.Encoding.PEM)
    key_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    return cert_pem, key_pem


def generate_staking_identity() -> StakingIdentity:
    cert_pem, key_pem = new_staking_cert()
    return StakingIdentity(
        cert_pem=cert_pem,
        key_pem=key_pem,
        bls_key=new_bls_key(),
        node_id=node_id_from_cert(cert_pem),
    )


def write_staking_files(directory: Path, identity: StakingIdentity) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for filename, data in (
        (STAKER_CERT_FILE, identity.cert_pem),
        (STAKER_KEY_FILE, identity.key_pem),
        (BLS_KEY_FILE, identity.bls_key),
    ):
        path = directory / filename
        path.write_bytes(data)
        path.chmod(0o600)
