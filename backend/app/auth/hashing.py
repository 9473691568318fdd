"""
Marketplace API keys: format, hashing and display prefix.

A key looks like ``mk_live_`` followed by 64 hex characters. Only the
SHA-256 hex digest of a key is stored in api_keys.key_hash; the first
DISPLAY_PREFIX_LENGTH characters are kept in api_keys.prefix so a key
can be named in logs and admin output without revealing it.

Keys are high-entropy random tokens, not passwords, so one unsalted
SHA-256 round is enough and keeps lookup a single indexed equality.
"""

import hashlib
import re
import secrets

KEY_PREFIX = "mk_live_"
KEY_TOKEN_BYTES = 32
DISPLAY_PREFIX_LENGTH = 12

_KEY_FORMAT = re.compile(rf"^{re.escape(KEY_PREFIX)}[0-9a-f]{{{KEY_TOKEN_BYTES * 2}}}$")


def is_well_formed(raw_key: str) -> bool:
    """True when raw_key has the shape generate_api_key produces."""
    return bool(_KEY_FORMAT.match(raw_key))


def hash_api_key(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


def display_prefix(raw_key: str) -> str:
    """The part of a key that may appear in logs (never the whole key)."""
    return raw_key[:DISPLAY_PREFIX_LENGTH]


def generate_api_key() -> tuple[str, str]:
    """
    Mint a key for a contractor or worker.

    Returns (raw_key, key_hash). The raw key is handed out once and is
    not recoverable afterwards.
    """
    raw_key = f"{KEY_PREFIX}{secrets.token_hex(KEY_TOKEN_BYTES)}"
    return raw_key, hash_api_key(raw_key)
