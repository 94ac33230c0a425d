"""
Salted one-way hashing of token secrets.

Secrets are stretched with PBKDF2-HMAC-SHA256 and stored as hex digests.
Verification recomputes the digest and compares in constant time.
"""

import hashlib
import hmac
import secrets

from ..constants import DEFAULT_HASH_ITERATIONS, HASH_KEY_BYTES, SALT_BYTES


def generate_salt() -> str:
    """Return a fresh random per-token salt."""
    return secrets.token_hex(SALT_BYTES)


def hash_secret(secret: str, salt: str, iterations: int = DEFAULT_HASH_ITERATIONS) -> str:
    """
    Derive the storable verifier for a secret.

    Args:
        secret: Raw secret material from the display value
        salt: Per-token salt
        iterations: PBKDF2 iteration count

    Returns:
        Hex encoded derived key
    """
    derived = hashlib.pbkdf2_hmac(
        "sha256",
        secret.encode("utf-8"),
        salt.encode("utf-8"),
        iterations,
        dklen=HASH_KEY_BYTES,
    )
    return derived.hex()


def verify_secret(
    secret: str, salt: str, stored_hash: str, iterations: int = DEFAULT_HASH_ITERATIONS
) -> bool:
    """Check a presented secret against a stored hash without leaking timing."""
    if not isinstance(stored_hash, str):
        return False
    try:
        candidate = hash_secret(secret, salt, iterations)
    except (AttributeError, TypeError, UnicodeEncodeError, ValueError):
        return False
    return hmac.compare_digest(candidate.encode("ascii"), stored_hash.encode("utf-8", "replace"))
