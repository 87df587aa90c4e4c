"""Prefixed ID generation.

All public-facing IDs use a ``{prefix}_{random}`` format so that any
ID can be visually identified by its origin:

- ``chat_a8Kx3nQ9mP2r``   chat session
- ``msg_7_kJ3pW7``        message; the number is the per-session sequence
"""

import secrets
import string

_ALPHABET = string.ascii_letters + string.digits  # a-z A-Z 0-9
_DEFAULT_LENGTH = 12  # ~71 bits of entropy
_SEQUENCE_SUFFIX_LENGTH = 6


def generate_id(prefix: str, length: int = _DEFAULT_LENGTH) -> str:
    """Generate a prefixed random ID.

    Args:
        prefix: Short descriptor (e.g. ``"chat"``).
        length: Number of random alphanumeric characters after the prefix.

    Returns:
        ``"{prefix}_{random}"`` string.
    """
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(length))
    return f"{prefix}_{suffix}"


def generate_sequential_id(prefix: str, sequence: int) -> str:
    """Generate ``"{prefix}_{sequence}_{random}"``; ordering follows ``sequence``."""
    return generate_id(f"{prefix}_{sequence}", _SEQUENCE_SUFFIX_LENGTH)
