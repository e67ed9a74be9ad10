"""Textbook RSA Utilities in an Academic Sense.

Provides RSA key pair generation from random probable primes and the encryption/decryption transform on integer
blocks, plus a block codec for byte messages and PEM import/export of keys. No padding scheme is applied and no
side-channel resistance is claimed.

Typical usage example:

    kp = generate_keypair(2048)
    c = encrypt(65, kp.pub)
    m = decrypt(c, kp.priv)
    ct = encrypt_bytes(b"Hi there!", kp.pub)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from rsakit.codec import decrypt_bytes
from rsakit.codec import encrypt_bytes
from rsakit.errors import BlockOutOfRange
from rsakit.errors import ExponentNotFound
from rsakit.errors import GenerationTimeout
from rsakit.errors import InvalidKeySize
from rsakit.errors import KeyFormatError
from rsakit.errors import ModularInverseUndefined
from rsakit.errors import RSAError
from rsakit.keygen import check_prime
from rsakit.keygen import DEFAULT_EXPONENT
from rsakit.keygen import DEFAULT_KEY_SIZE
from rsakit.keygen import generate_prime
from rsakit.keygen import generate_primes
from rsakit.keygen import get_pre_primes
from rsakit.rsa import decrypt
from rsakit.rsa import default_dir
from rsakit.rsa import default_key_paths
from rsakit.rsa import encrypt
from rsakit.rsa import generate_keypair
from rsakit.rsa import key_paths
from rsakit.rsa import read_key
from rsakit.rsa import RSAKeyPair
from rsakit.rsa import RSAPrivKey
from rsakit.rsa import RSAPubKey

__version__ = "0.1.0"
__all__ = [
    "RSAKeyPair",
    "RSAPrivKey",
    "RSAPubKey",
    "generate_keypair",
    "encrypt",
    "decrypt",
    "encrypt_bytes",
    "decrypt_bytes",
    "read_key",
    "key_paths",
    "default_dir",
    "default_key_paths",
    "generate_prime",
    "generate_primes",
    "check_prime",
    "get_pre_primes",
    "DEFAULT_EXPONENT",
    "DEFAULT_KEY_SIZE",
    "RSAError",
    "GenerationTimeout",
    "InvalidKeySize",
    "ExponentNotFound",
    "BlockOutOfRange",
    "ModularInverseUndefined",
    "KeyFormatError",
]
