"""Hash-chain algorithm behind score verification.

The chain starts from a canonical prefix built out of the identity fields
and folds every suffix into it:

    h0 = prefix
    hN = sha256(f"{hN-1} {suffixN}").hexdigest()

A suffix is only meaningful on top of every suffix before it, so a chain
can be truncated from the end but never reordered or replayed from the
middle.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import Iterable

from .errors import ZeroScoreError


def iso8601(moment: datetime) -> str:
    """Render an instant as ISO-8601 UTC at second precision, e.g. 2018-06-27T06:22:41Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def prefix(time: datetime, host: str, port: int, invoice: str) -> str:
    """Seed string for the proof-of-work chain."""
    return f"{iso8601(time)} {host} {port} {invoice}"


def extend(base: str, suffix: str) -> str:
    """One link of the chain: lowercase hex SHA256 of ``base + " " + suffix``."""
    return hashlib.sha256(f"{base} {suffix}".encode("utf-8")).hexdigest()


def chain_hash(seed: str, suffixes: Iterable[str]) -> str:
    """Fold all suffixes over the seed and return the final digest.

    Raises:
        ZeroScoreError: if there are no suffixes.
    """
    digest = None
    current = seed
    for suffix in suffixes:
        current = extend(current, suffix)
        digest = current
    if digest is None:
        raise ZeroScoreError("Score has zero value, there is no hash")
    return digest


def meets_strength(digest: str, strength: int) -> bool:
    """True if the digest ends with ``strength`` hex zeros."""
    return digest.endswith("0" * strength)


__all__ = ["chain_hash", "extend", "iso8601", "meets_strength", "prefix"]
