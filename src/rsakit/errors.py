"""Exceptions raised by rsakit.

Every error derives from `RSAError` and from the built-in exception that would otherwise describe the situation, so
callers catching `ValueError`, `RuntimeError` or `IOError` keep working.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class RSAError(Exception):
    """Base class of all rsakit errors."""


class GenerationTimeout(RSAError, RuntimeError):
    """The prime search exhausted its retry budget.

    Recoverable by retrying, possibly with a different random source.
    """


class InvalidKeySize(RSAError, ValueError):
    """The requested key (or prime) size cannot be used."""


class ExponentNotFound(RSAError, RuntimeError):
    """No public exponent coprime to the totient was found in the search window."""


class BlockOutOfRange(RSAError, ValueError):
    """A transform input was negative or not below the modulus."""


class ModularInverseUndefined(RSAError, ArithmeticError):
    """An inverse was requested for numbers that are not coprime."""


class KeyFormatError(RSAError, IOError):
    """A key file or PEM payload is malformed, missing or unsupported."""
