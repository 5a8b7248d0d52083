"""Short human-shareable codes.

Used for student linking codes (checked against accounts) and class join
codes (checked against classes). The uniqueness scope is supplied by the
caller as a ``check_exists`` callable.
"""

import logging
import secrets
import string
from typing import Callable

from config import CODE_LENGTH, CODE_MAX_ATTEMPTS

logger = logging.getLogger(__name__)

# Uppercase only, so codes survive case-folding by users and clients
CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_code(length: int = CODE_LENGTH, alphabet: str = CODE_ALPHABET) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_unique_code(
    check_exists: Callable[[str], bool],
    length: int = CODE_LENGTH,
    alphabet: str = CODE_ALPHABET,
    max_attempts: int = CODE_MAX_ATTEMPTS,
) -> str:
    """Generate a code that ``check_exists`` reports as free.

    After ``max_attempts`` consecutive collisions the code grows by one
    character, so a crowded scope cannot loop forever.

    Args:
        check_exists: Returns True if the code is already taken.
        length: Initial code length.
        alphabet: Symbols to draw from.
        max_attempts: Collisions tolerated per length.

    Returns:
        A code not present in the scope at the time of the check. Callers
        must still handle a unique-index violation on insert.
    """
    if length < 1 or max_attempts < 1:
        raise ValueError("length and max_attempts must be positive")

    attempts = 0
    while True:
        code = generate_code(length, alphabet)
        if not check_exists(code):
            return code
        attempts += 1
        if attempts >= max_attempts:
            logger.warning(
                "%d consecutive code collisions at length %d, widening to %d",
                attempts,
                length,
                length + 1,
            )
            length += 1
            attempts = 0
