"""Hashing helpers for item identities."""

from __future__ import annotations

import hashlib


def sha1_hex(message: str) -> str:
    """Return the SHA-1 hex digest of the UTF-8 encoded `message`."""
    return hashlib.sha1(message.encode("utf-8")).hexdigest()


__all__ = ["sha1_hex"]
