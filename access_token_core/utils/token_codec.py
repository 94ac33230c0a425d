"""
Display value codec for personal access tokens.

A display value is the only form of a token ever handed to its owner:

    <salt id: 8 lowercase hex chars><secret: 32 lowercase hex chars>

The salt id is a non-secret lookup key; the secret is only ever stored as a
salted hash. Everything here is pure and stateless.
"""

import re
import secrets
from typing import Any, Tuple

from ..constants import DISPLAY_VALUE_LENGTH, SALT_ID_LENGTH, SECRET_LENGTH
from ..exceptions import InvalidFormatError

_HEX_RE = re.compile(r"[0-9a-f]+")


def _is_hex(value: Any, length: int) -> bool:
    return isinstance(value, str) and len(value) == length and _HEX_RE.fullmatch(value) is not None


def generate_salt_id() -> str:
    """Return a fresh random salt id."""
    return secrets.token_hex(SALT_ID_LENGTH // 2)


def generate_secret() -> str:
    """Return fresh random secret material for a new token."""
    return secrets.token_hex(SECRET_LENGTH // 2)


def encode_display_value(salt_id: str, secret: str) -> str:
    """
    Pack a salt id and secret into a display value.

    Args:
        salt_id: 8 lowercase hex characters
        secret: 32 lowercase hex characters

    Returns:
        The 40-character display value

    Raises:
        InvalidFormatError: If either part has the wrong width or alphabet
    """
    if not _is_hex(salt_id, SALT_ID_LENGTH):
        raise InvalidFormatError("Salt id must be lowercase hex", field="salt_id")
    if not _is_hex(secret, SECRET_LENGTH):
        raise InvalidFormatError("Secret must be lowercase hex", field="secret")
    return salt_id + secret


def decode_display_value(display_value: Any) -> Tuple[str, str]:
    """
    Split a display value into ``(salt_id, secret)``.

    Never raises anything but InvalidFormatError, whatever it is given.
    """
    if not isinstance(display_value, str) or len(display_value) != DISPLAY_VALUE_LENGTH:
        raise InvalidFormatError(f"Access token must be {DISPLAY_VALUE_LENGTH} characters long")

    salt_id = display_value[:SALT_ID_LENGTH]
    secret = display_value[SALT_ID_LENGTH:]

    if not _is_hex(salt_id, SALT_ID_LENGTH):
        raise InvalidFormatError("Access token salt id segment is not valid", field="salt_id")
    if not _is_hex(secret, SECRET_LENGTH):
        raise InvalidFormatError("Access token secret segment is not valid", field="secret")

    return salt_id, secret
