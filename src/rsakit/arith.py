"""Big integer helpers on top of Python's native arbitrary precision `int`.

Provides the handful of number-theoretic operations the key generator and the transform engine need which the
builtins do not spell out: the Extended Euclidean Algorithm, a modular inverse built upon it, and binary
(square-and-multiply) modular exponentiation.

Typical usage example:

    g, s, t = eea(17, 3120)
    d = mod_inverse(17, 3120)
    c = mod_pow(65, 17, 3233)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsakit.errors import ModularInverseUndefined


def eea(a: int, b: int) -> tuple[int, int, int]:
    """Implements the Extended Euclidean Algorithm.

    Such that a*s0 + b*t0 = r0 = gcd(a, b).

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        Greatest common divisor of two integers.
        As well as the Bezout coefficients.
    """
    r0, r1 = a, b
    s0, s1, t0, t1 = 1, 0, 0, 1
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
        t0, t1 = t1, t0 - q * t1
    return r0, s0, t0


def gcd(a: int, b: int) -> int:
    """Greatest common divisor, by way of `eea`."""
    return eea(a, b)[0]


def mod_inverse(a: int, m: int) -> int:
    """Computes the inverse of `a` modulo `m`.

    Args:
        a: The number to invert. Must be non-negative.
        m: The modulus. Must be greater than 1.

    Returns:
        The unique `x` in `[0, m)` with `a*x % m == 1`.

    Raises:
        ValueError: If `m` is not greater than 1.
        ModularInverseUndefined: If `a` and `m` are not coprime.
    """
    if m < 2:
        raise ValueError("Modulus must be greater than 1.")
    g, s, _ = eea(a % m, m)
    if g != 1:
        raise ModularInverseUndefined(f"{a} has no inverse modulo {m} (gcd is {g}).")
    return s % m


def mod_pow(base: int, exponent: int, modulus: int) -> int:
    """Binary modular exponentiation.

    Scans the exponent from the least significant bit, squaring the base every step and multiplying it into the
    result for each set bit. Not constant time: the number of multiplications follows the exponent's bits.

    Args:
        base: Non-negative base.
        exponent: Non-negative exponent.
        modulus: Positive modulus.

    Returns:
        `base**exponent % modulus`. An exponent of 0 yields `1 % modulus`.

    Raises:
        ValueError: If the exponent is negative or the modulus is not positive.
    """
    if modulus < 1:
        raise ValueError("Modulus must be positive.")
    if exponent < 0:
        raise ValueError("Exponent must be non-negative.")
    result = 1 % modulus
    base %= modulus
    while exponent:
        if exponent & 1:
            result = result * base % modulus
        exponent >>= 1
        base = base * base % modulus
    return result
