"""Core Key Generation Utility, mainly focusing on the generation of random large primes.

This module is responsible for the numbers behind a textbook RSA key pair: probable primes, the modulus, the totient
and both exponents. Primality is established by trial division against a cached table of small primes followed by a
Miller-Rabin test with round counts taken from FIPS 186-5.

Typical usage example:

    p = generate_prime(1024)
    p, q = generate_primes(2048)
    (n, e), (n, d) = generate_key_pair(2048)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import secrets

from rsakit import arith
from rsakit.errors import ExponentNotFound
from rsakit.errors import GenerationTimeout
from rsakit.errors import InvalidKeySize

DEFAULT_EXPONENT: int = 65537
DEFAULT_KEY_SIZE: int = 2048

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0
_MINIMUM_PRIME_SEPARATION: int = 100
_MINIMUM_KEY_SIZE: int = 8
_EXPONENT_SEARCH_WINDOW: int = 2**16


def _sieve(n: int = 10000) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Uses the textbook Sieve of Eratosthenes to generate a set of primes up to `n`.
    Includes memory space optimization and sieving until root.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    i_size = (n - 1) // 2
    candidate: list[bool] = [True] * i_size
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, i_size, r):
                candidate[j] = False
    return [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]


def get_pre_primes(n: int = 10000, change: bool = False) -> list[int]:
    """Get the small primes, automatically generating if necessary.

    Uses the `_SMALL_PRIMES` module cache when it already covers `n`. Regeneration occurs if the requested range is
    greater, forced by `change` or the cache is empty.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.
        change: Whether to force a recomputation of primes. Defaults to False.

    Returns:
        List of primes in ascending order. All primes at least to `n` or more unless `change` is True.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def _trial_division(no: int, n: int = 10000) -> bool:
    """Check the provided `no` against the known small primes.

    Runs a fast pre-check before Miller-Rabin by using modulo division on our known frequent primes.

    Args:
         no: The number to check. Must be integer and non-negative.
         n: The number up to which to use small primes. Defaults to 10000.

    Returns:
        False if `no` cannot be prime, True otherwise.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime * prime > no:
            return True
        if no % prime == 0:
            return False
    return True


def _miller_rabin(w: int, iters: int) -> bool:
    """Perform Miller-Rabin primality test.

    Args:
        w: Odd integer to be tested.
        iters: Number of Miller-Rabin rounds to perform, each with a fresh random base.

    Returns:
        True if `w` is probably prime, False otherwise.
    """
    if w <= 3:
        return w in (2, 3)
    if w % 2 == 0:
        return False
    tw = w - 1
    a = (tw & -tw).bit_length() - 1
    m = tw >> a
    for _ in range(iters):
        b = secrets.randbelow(w - 3) + 2
        z = pow(b, m, w)
        if z in (1, tw):
            continue
        for _ in range(1, a):
            z = pow(z, 2, w)
            if z == tw:
                break
            if z == 1:
                return False
        else:
            return False
    return True


def _default_rounds(bits: int) -> int:
    """Miller-Rabin rounds for a candidate of `bits` bits, as per FIPS 186-5 Appendix C.1."""
    if bits <= 512:
        return 40
    if bits <= 1024:
        return 56
    if bits <= 1536:
        return 64
    if bits <= 2048:
        return 70
    return 74


def check_prime(candidate: int, iters: None | int = None, n: int = 10000) -> bool:
    """Performs a composite Primality test, using a limited amount of trial divisions, before a Miller-Rabin test.

    Args:
        candidate: The candidate prime to test.
        iters: Number of Miller-Rabin iterations to perform.
            If not provided will use defaults as per the FIPS 186-5 Appendix C.1
        n: The number up to which to use small primes for trial division. Defaults to 10000.

    Returns:
        True if `candidate` is probably prime, False otherwise.

    Raises:
        ValueError: If `iters` is given and smaller than 1.
    """
    if iters is not None and iters < 1:
        raise ValueError("Certainty must be at least one Miller-Rabin round.")
    if candidate < 2:
        return False
    if not _trial_division(candidate, n):
        return False
    if iters is None:
        iters = _default_rounds(candidate.bit_length())
    return _miller_rabin(candidate, iters)


def generate_prime(bit_length: int, certainty: int | None = None, other: int | None = None) -> int:
    """Generate a probable prime number of exactly `bit_length` bits.

    Draws random odd candidates with the top bit set until one passes `check_prime`.

    Args:
        bit_length: The size of the prime to generate in bits. Must be >= 2.
        certainty: Miller-Rabin rounds to run on each candidate. Defaults to the FIPS 186-5 table.
        other: The other prime in the pair if this is the second generation. Candidates equal to it, or for wide
            primes too close to it, are rejected.

    Returns:
        A probable prime number.

    Raises:
        InvalidKeySize: If `bit_length` is below 2.
        ValueError: If `certainty` is smaller than 1.
        GenerationTimeout: If generation loops way beyond a reasonable time and a bit.
    """
    if bit_length < 2:
        raise InvalidKeySize("Primes must be at least 2 bits long.")
    if certainty is not None and certainty < 1:
        raise ValueError("Certainty must be at least one Miller-Rabin round.")
    rep_cap = max(bit_length, 64) * 5 * (1 if other is None else 2)
    msk = (1 << (bit_length - 1)) | 1
    for _ in range(rep_cap):
        cand = secrets.randbits(bit_length) | msk
        if other is not None:
            if cand == other:
                continue
            if bit_length > _MINIMUM_PRIME_SEPARATION and abs(other - cand) <= (1 <<
                                                                              (bit_length - _MINIMUM_PRIME_SEPARATION)):
                continue
        if check_prime(cand, certainty):
            return cand
    raise GenerationTimeout(
        f"Run an improbable {rep_cap} amount of loops with no prime found. Check system random number generator.")


def _validate_size(size: int) -> None:
    if size < _MINIMUM_KEY_SIZE:
        raise InvalidKeySize(f"Key size must be at least {_MINIMUM_KEY_SIZE} bits.")
    if size % 2 != 0:
        raise InvalidKeySize("Key size must be an even number.")


def generate_primes(size: int, certainty: int | None = None) -> tuple[int, int]:
    """Generates a pair of distinct primes for a key of `size` bits.

    Args:
        size: The key size to generate the prime pair for. Must be even and at least 8.
        certainty: Miller-Rabin rounds per candidate. Defaults to the FIPS 186-5 table.

    Returns:
        Two distinct probable primes, each `size // 2` bits long.

    Raises:
        InvalidKeySize: If `size` is too small or odd.
    """
    _validate_size(size)
    p = generate_prime(size // 2, certainty)
    q = generate_prime(size // 2, certainty, p)
    while p == q:  # (Un)Likely story.
        q = generate_prime(size // 2, certainty, p)
    return p, q


def select_public_exponent(totient: int, pub: int | None = DEFAULT_EXPONENT) -> int:
    """Picks a public exponent coprime to the totient.

    A preferred exponent is used as is when it fits, otherwise the odd numbers above it are searched. Without a
    preferred exponent the search starts at a random odd point below the totient.

    Args:
        totient: The totient of the modulus.
        pub: The preferred public exponent, or None for a random search. Defaults to 65537.

    Returns:
        An exponent `e` with `1 < e < totient` and `gcd(e, totient) == 1`.

    Raises:
        ValueError: If `pub` is smaller than 3.
        ExponentNotFound: If the bounded search window holds no suitable exponent.
    """
    if pub is not None and pub < 3:
        raise ValueError("Public exponent must be at least 3.")
    if totient <= 3:
        raise ExponentNotFound(f"Totient {totient} leaves no room for a public exponent.")
    if pub is None:
        start = secrets.randbelow(totient - 3) + 3
    elif pub < totient:
        start = pub
    else:
        start = 3
    start |= 1
    for cand in range(start, min(start + 2 * _EXPONENT_SEARCH_WINDOW, totient), 2):
        if arith.gcd(cand, totient) == 1:
            return cand
    raise ExponentNotFound(f"No public exponent coprime to the totient within {_EXPONENT_SEARCH_WINDOW} candidates.")


def derive_private_exponent(pub: int, totient: int) -> int:
    """Computes the private exponent as the inverse of `pub` modulo the totient.

    Raises:
        ModularInverseUndefined: If `pub` is not coprime to the totient.
    """
    return arith.mod_inverse(pub, totient)


def generate_key_pair(size: int,
                      pub: int | None = DEFAULT_EXPONENT,
                      certainty: int | None = None) -> tuple[tuple[int, int], tuple[int, int]]:
    """Generates the numbers of an RSA key pair.

    Selects two primes P and Q, computes N = P*Q and the totient (P-1)*(Q-1), picks the public exponent E and
    derives the private exponent D. Primes and totient are dropped before returning.

    Args:
        size: The key size in bits. Must be even and at least 8.
        pub: The preferred public exponent, or None for a random search. Defaults to 65537.
        certainty: Miller-Rabin rounds per prime candidate. Defaults to the FIPS 186-5 table.

    Returns:
        A tuple of (public, private) sub-tuples of (modulus, exponent).

    Raises:
        InvalidKeySize: If `size` is too small or odd.
        ExponentNotFound: If no public exponent could be selected.
    """
    p, q = generate_primes(size, certainty)
    n = p * q
    totient = (p - 1) * (q - 1)
    del p, q
    e = select_public_exponent(totient, pub)
    d = derive_private_exponent(e, totient)
    del totient
    return (n, e), (n, d)
