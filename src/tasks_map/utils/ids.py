"""
Short task id generation.
"""

import secrets
import string

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 6


def generate_short_id(length: int = ID_LENGTH) -> str:
    """
    Generate a random lowercase base36 task id.

    Args:
        length: Number of characters (default 6)

    Returns:
        Lowercase alphanumeric string, e.g. "k3x9a0"
    """
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def is_short_id(value: str) -> bool:
    """True if value looks like a generated 6-character id."""
    return len(value) == ID_LENGTH and all(c in ID_ALPHABET for c in value)
