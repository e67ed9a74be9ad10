"""Block codec: marshals byte messages into integer blocks below the modulus and back.

Each plaintext chunk of `chunk_size(mod)` bytes is prefixed with a `0x01` sentinel byte and read as a big-endian
integer. The sentinel keeps leading zero bytes and the length of the final short chunk recoverable, and caps the
block below `2**(bits(mod) - 1)`, hence below the modulus. Ciphertext blocks are written big-endian at the fixed
width `block_size(mod)`.

Typical usage example:

    ct = encrypt_bytes(b"Hi there!", kp.pub)
    pt = decrypt_bytes(ct, kp.priv)
    with open("in", "rb") as src, open("out", "wb") as dst:
        encrypt_stream(src, dst, kp.pub)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from collections.abc import Iterable
import logging
from typing import BinaryIO

from rsakit.errors import InvalidKeySize
from rsakit.rsa import RSAPrivKey
from rsakit.rsa import RSAPubKey

logger = logging.getLogger(__name__)

SENTINEL = b"\x01"
_MINIMUM_BLOCK_SIZE = 3


def bytes_to_integer(msg: bytes) -> int:
    """Converts a byte string to an integer in accordance to preset procedures.

    Args:
        msg: The bytes (AKA Octet String) to convert.

    Returns:
        The representative integer.
    """
    return int.from_bytes(msg, byteorder="big", signed=False)


def integer_to_bytes(msg: int, fixedlen: int) -> bytes:
    """Converts an integer to a string, using a fixed-length byte representation.

    Args:
        msg: The integer to unmarshal.
        fixedlen: The target length of the byte string.

    Returns:
        The representative bytes. (AKA Octet String)
    """
    return msg.to_bytes(fixedlen, byteorder="big", signed=False)


def block_size(mod: int) -> int:
    """Bytes needed to hold any block below `mod`."""
    return (mod.bit_length() + 7) // 8


def chunk_size(mod: int) -> int:
    """Plaintext bytes carried per block.

    Raises:
        InvalidKeySize: If the modulus is too small to carry a single byte next to the sentinel.
    """
    size = block_size(mod)
    if size < _MINIMUM_BLOCK_SIZE:
        raise InvalidKeySize(f"A {mod.bit_length()} bit modulus is too small to carry bytes.")
    return size - 2


def encode_blocks(message: bytes, mod: int) -> list[int]:
    """Splits a message into sentinel-prefixed integer blocks below `mod`.

    An empty message encodes to no blocks.
    """
    step = chunk_size(mod)
    return [bytes_to_integer(SENTINEL + message[i:i + step]) for i in range(0, len(message), step)]


def decode_blocks(blocks: Iterable[int], mod: int) -> bytes:
    """Reassembles a message from blocks made by `encode_blocks`.

    Raises:
        ValueError: If a block is out of range or lacks the sentinel byte.
    """
    step = chunk_size(mod)
    out = bytearray()
    for block in blocks:
        if not 0 <= block < mod:
            raise ValueError("Block out of range for modulus.")
        raw = integer_to_bytes(block, block_size(block))
        if raw[:1] != SENTINEL or len(raw) > step + 1:
            raise ValueError("Decoding error: block is missing its sentinel byte.")
        out += raw[1:]
    return bytes(out)


def encrypt_bytes(message: bytes, public_key: RSAPubKey) -> bytes:
    """Encrypts a message block by block, concatenating fixed-width ciphertext blocks."""
    width = block_size(public_key.mod)
    return b"".join(integer_to_bytes(public_key.encrypt(b), width) for b in encode_blocks(message, public_key.mod))


def _split_ciphertext(ciphertext: bytes, width: int) -> list[int]:
    if len(ciphertext) % width:
        raise ValueError(f"Ciphertext length {len(ciphertext)} is not a multiple of the block size {width}.")
    return [bytes_to_integer(ciphertext[i:i + width]) for i in range(0, len(ciphertext), width)]


def decrypt_bytes(ciphertext: bytes, private_key: RSAPrivKey) -> bytes:
    """Decrypts the output of `encrypt_bytes`.

    Raises:
        ValueError: If the ciphertext is truncated or does not decode under this key.
        BlockOutOfRange: If a ciphertext block is not below the modulus.
    """
    width = block_size(private_key.mod)
    blocks = [private_key.decrypt(c) for c in _split_ciphertext(ciphertext, width)]
    return decode_blocks(blocks, private_key.mod)


def encrypt_stream(src: BinaryIO, dst: BinaryIO, public_key: RSAPubKey) -> int:
    """Encrypts a binary stream chunk by chunk.

    Args:
        src: Readable binary file object holding the plaintext.
        dst: Writable binary file object receiving ciphertext blocks.
        public_key: The key to encrypt with.

    Returns:
        The number of blocks written.
    """
    step = chunk_size(public_key.mod)
    width = block_size(public_key.mod)
    count = 0
    while chunk := src.read(step):
        block = public_key.encrypt(bytes_to_integer(SENTINEL + chunk))
        dst.write(integer_to_bytes(block, width))
        count += 1
    logger.debug("Encrypted %d blocks of %d bytes", count, width)
    return count


def decrypt_stream(src: BinaryIO, dst: BinaryIO, private_key: RSAPrivKey) -> int:
    """Decrypts a binary stream written by `encrypt_stream`.

    Returns:
        The number of blocks read.

    Raises:
        ValueError: If the stream ends mid-block or a block does not decode under this key.
    """
    width = block_size(private_key.mod)
    count = 0
    while chunk := src.read(width):
        (block,) = _split_ciphertext(chunk, width)
        dst.write(decode_blocks([private_key.decrypt(block)], private_key.mod))
        count += 1
    logger.debug("Decrypted %d blocks of %d bytes", count, width)
    return count
