"""
Modular arithmetic helpers.
"""

from threshold.errors import InvalidArgument, NotInvertible


def multiplicative_inverse(value: int, modulus: int) -> int:
    """
    Solve (value * x) % modulus == 1 for x.

    Uses the extended Euclidean algorithm, tracking only the Bezout
    coefficient of ``value``.

    Args:
        value: The value to invert, in [1, modulus).
        modulus: A prime modulus (any modulus >= 2 is accepted; values that
            share a factor with it are rejected).

    Returns:
        The inverse, in [0, modulus).

    Raises:
        InvalidArgument: If value or modulus is out of range.
        NotInvertible: If gcd(value, modulus) > 1.
    """
    if modulus < 2:
        raise InvalidArgument(f"Modulus must be at least 2, got {modulus}")
    if not 1 <= value < modulus:
        raise InvalidArgument(f"Value must be in [1, {modulus}), got {value}")

    t, new_t = 0, 1
    r, new_r = modulus, value

    while new_r != 0:
        quotient = r // new_r
        t, new_t = new_t, t - quotient * new_t
        r, new_r = new_r, r - quotient * new_r

    if r > 1:
        raise NotInvertible(f"{value} is not invertible modulo {modulus}")

    if t < 0:
        t += modulus
    return t
