"""One-way hashing of raw client identifiers (IP, user agent).

Raw values never reach the database; only these tokens do.
"""

import hashlib

# 32 hex chars = 128 bits, ample for millions of events
TOKEN_LENGTH = 32


def hash_identifier(raw: str) -> str:
    """Return a deterministic, fixed-length SHA-256 token for *raw*."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:TOKEN_LENGTH]
