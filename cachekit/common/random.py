"""Random string generation backed by the OS CSPRNG."""

import secrets

DIGITS = "0123456789"


def random_string_from_charset(length: int, charset: str) -> str:
    """
    Draw ``length`` characters uniformly from ``charset``.

    Raises:
        ValueError: If length is negative or charset is empty
    """
    if length < 0:
        raise ValueError(f"length must be >= 0, got {length}")
    if not charset:
        raise ValueError("charset must not be empty")
    return "".join(secrets.choice(charset) for _ in range(length))
