"""Random values for owners, amounts and currencies, mostly for test data."""

import random

ALPHABET = "abcdefghijklmnopqrstuvwxyz"
CURRENCIES = ("USD", "TRY", "EUR")
OWNER_LENGTH = 30
MAX_AMOUNT = 2500

_rng = random.Random()


def random_int(min_value: int, max_value: int) -> int:
    """Return a random integer in the closed range [min_value, max_value]."""
    if max_value < min_value:
        raise ValueError(
            f"invalid range: max_value {max_value} is less than min_value {min_value}"
        )
    return _rng.randint(min_value, max_value)


def random_string(n: int) -> str:
    """Return a string of ``n`` random lower-case ASCII letters."""
    return "".join(_rng.choice(ALPHABET) for _ in range(n))


def random_owner() -> str:
    """Return a random owner name."""
    return random_string(OWNER_LENGTH)


def random_amount() -> int:
    """Return a random amount of money between 0 and 2500."""
    return random_int(0, MAX_AMOUNT)


def random_currency() -> str:
    """Return one of the supported currency codes at random."""
    return _rng.choice(CURRENCIES)