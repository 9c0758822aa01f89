"""
Credential Primitives

PIN hashing shared with the web and mobile clients, and bearer header parsing.
"""

import hashlib
import hmac
from typing import Optional

BEARER_PREFIX = "Bearer "


def hash_pin(pin: str) -> str:
    """
    Hash a PIN the same way the clients do.

    Args:
        pin: Plain text PIN

    Returns:
        Lowercase hex SHA-256 digest of the PIN's UTF-8 bytes (64 chars)
    """
    return hashlib.sha256(pin.encode("utf-8")).hexdigest()


def pins_match(pin: str, pin_hash: str) -> bool:
    """Compare a plain PIN against a stored hash in constant time"""
    return hmac.compare_digest(hash_pin(pin), pin_hash.strip().lower())


def extract_bearer_token(header: Optional[str]) -> Optional[str]:
    """
    Extract the token from an Authorization header value.

    The scheme is matched case-sensitively ("Bearer ").

    Args:
        header: Raw Authorization header value (may be None)

    Returns:
        Token string, or None if the header is absent, malformed or empty
    """
    if not header or not isinstance(header, str):
        return None
    if not header.startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None
