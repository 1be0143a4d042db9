"""Hashing utilities for gtdindex."""

import hashlib


def md5_hex(content: str) -> str:
    """Calculate MD5 hex digest of text.

    Used for derived note identities, not for security.

    Args:
        content: Text content to hash.

    Returns:
        Hexadecimal MD5 digest.
    """
    return hashlib.md5(content.encode()).hexdigest()


def md5_hex_bytes(content: bytes) -> str:
    """Calculate MD5 hex digest of bytes.

    ENEX resource hashes use the same digest, so references built from it
    line up with the hashes found in en-media tags.

    Args:
        content: Binary content to hash.

    Returns:
        Hexadecimal MD5 digest.
    """
    return hashlib.md5(content).hexdigest()
