"""Content fingerprint utilities."""

import hashlib


def md5_bytes(content: bytes) -> str:
    """MD5 hex digest of an in-memory payload (the record etag)."""
    return hashlib.md5(content).hexdigest()
