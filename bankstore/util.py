"""Random values for accounts, balances and currencies."""

import random
import string

ALPHABET = string.ascii_lowercase
CURRENCIES = ("EUR", "USD", "CAD")


def random_int(min_value, max_value):
    """Return a random integer between min_value and max_value, both included."""
    if max_value < min_value:
        raise ValueError(
            f"empty range: min_value {min_value} is greater than max_value {max_value}"
        )
    return random.randint(min_value, max_value)


def random_string(n):
    """Return a random string of n lower-case letters."""
    if n < 0:
        raise ValueError(f"length must not be negative, got {n}")
    return "".join(random.choices(ALPHABET, k=n))


def random_money():
    """Return a random amount of money between 0 and 10000."""
    return random_int(0, 10000)


def random_currency():
    """Return one of the supported currency codes at random."""
    return random.choice(CURRENCIES)