# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/genesis/evmkeys.py

from __future__ import annotations

from dataclasses import dataclass

from Crypto.Hash import keccak
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat


def keccak256(data: bytes) -> bytes:
    h = keccak.new(digest_bits=256)
    h.update(data)
    return h.digest()


def to_checksum_address(address: str) -> str:
    """EIP-55 mixed-case encoding."""
    raw = address.lower().removeprefix("0x")
    digest = keccak256(raw.encode("ascii")).hex()
    return "0x" + "".join(
        c.upper() if c.isalpha() and int(digest[i], 16) >= 8 else c
        for i, c in enumerate(raw)
    )


@dataclass(frozen=True)
class EvmKey:
    private_key: ec.EllipticCurvePrivateKey

    @classmethod
    def generate(cls) -> "EvmKey":
        return cls(ec.generate_private_key(ec.SECP256K1()))

    @classmethod
    def from_hex(cls, hex_key: str) -> "EvmKey":
        value = int(hex_key.strip().removeprefix("0x"), 16)
        return cls(ec.derive_private_key(value, ec.SECP256K1()))

    def hex(self) -> str:
        return format(self.private_key.private_numbers().private_value, "064x")

    @property
    def address(self) -> str:
        pub = self.private_key.public_key().public_bytes(
            Encoding.X962, PublicFormat.UncompressedPoint
        )
        # drop the 0x04 prefix, address is the last 20 bytes of the hash
        return to_checksum_address(keccak256(pub[1:])[-20:].hex())
