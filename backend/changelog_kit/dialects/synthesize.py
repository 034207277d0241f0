"""
changelog-kit — Pseudo-hash synthesis for imported entries.

Imported changelog bullets rarely carry a git hash. Each one gets a stable
identifier derived from its scope and subject, shaped like a git hash
(40 hex chars, 7-char short form), so re-importing the same text yields
the same identity and merges can deduplicate across runs.
"""

from __future__ import annotations

from dataclasses import dataclass

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
HASH_WIDTH = 40
SHORT_HASH_WIDTH = 7


@dataclass(frozen=True)
class SyntheticHash:
    hash: str
    short_hash: str


def fnv1a_32(data: bytes) -> int:
    """32-bit FNV-1a, masked so the result is the same on every platform."""
    value = FNV_OFFSET_BASIS
    for byte in data:
        value ^= byte
        value = (value * FNV_PRIME) & 0xFFFFFFFF
    return value


def synthesize_hash(subject: str, scope: str | None = None) -> SyntheticHash:
    digest = fnv1a_32(f"{scope or ''}{subject}".encode("utf-8"))
    full = format(digest, "x").rjust(HASH_WIDTH, "0")
    return SyntheticHash(hash=full, short_hash=full[:SHORT_HASH_WIDTH])
