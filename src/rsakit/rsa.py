"""Provides core RSA functionalities: key objects, key pair generation, encryption and decryption.

Facilitates "textbook" RSA on integer blocks. A block is an integer in `[0, mod)`; no padding is applied, so the
transform is deterministic and must not be fed raw attacker-influenced plaintext outside of an academic setting.
Turning bytes into blocks is the business of `rsakit.codec`.

Typical usage example:

    kp = generate_keypair(2048)
    c = encrypt(65, kp.pub)
    m = decrypt(c, kp.priv)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import os
import pathlib
import warnings

from rsakit import arith
from rsakit import keyfile
from rsakit import keygen
from rsakit.errors import BlockOutOfRange
from rsakit.errors import KeyFormatError

DEFAULT_PRIVATE_KEY_NAME = "rsakit_key"
PUBLIC_KEY_SUFFIX = ".pub"
DEFAULT_PUBLIC_KEY_NAME = DEFAULT_PRIVATE_KEY_NAME + PUBLIC_KEY_SUFFIX

CONFIG_DIR_NAME = "rsakit"

_VALIDATION_PROBES = (2, 3, 12_345_678)
_WEAK_KEY_SIZE = 512


class RSAKey:
    """The overall RSA key class implementation.

    Holds the two numbers every RSA key consists of. Instances are immutable: the components are exposed through
    read-only properties and can safely be shared between threads.

    Attributes:
        mod: The modulus of the keypair.
        expo: The exponent of the key, whether private or public.
        bsize: The modulus size in bytes.
    """

    __slots__ = ("_mod", "_expo")

    def __init__(self, mod: int, expo: int) -> None:
        if mod < 2:
            raise ValueError("Modulus must be greater than 1.")
        if expo < 1:
            raise ValueError("Exponent must be positive.")
        self._mod = mod
        self._expo = expo

    @property
    def mod(self) -> int:
        return self._mod

    @property
    def n(self) -> int:
        return self._mod

    @property
    def expo(self) -> int:
        return self._expo

    @property
    def bsize(self) -> int:
        return (self._mod.bit_length() + 7) // 8

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._mod == other._mod and self._expo == other._expo

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._mod, self._expo))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mod={self._mod}, expo={self._expo})"

    def c_rsa(self, block: int) -> int:
        """Performs core RSA operation. (Encrypt/Decrypt)

        Args:
            block: The int-marshalled block to transform.

        Returns:
            The transformed block.

        Raises:
            BlockOutOfRange: If the block is out of range for the current key.
        """
        if not 0 <= block < self._mod:
            raise BlockOutOfRange("Block must be in range [0, mod-1]")
        return arith.mod_pow(block, self._expo, self._mod)

    @classmethod
    def _checked(cls, mod: int, expo: int):
        """Builds a key from decoded numbers, reporting bad ones as a key format problem."""
        try:
            return cls(mod, expo)
        except ValueError as exc:
            raise KeyFormatError(f"{cls.__name__} holds invalid numbers: {exc}") from exc


class RSAPubKey(RSAKey):
    """A rather straightforward subclass of RSAKey, for Public Keys."""

    __slots__ = ()

    @property
    def e(self) -> int:
        return self._expo

    def encrypt(self, block: int) -> int:
        """Encrypts a block, computing `block**e % n`."""
        return self.c_rsa(block)

    def to_pem(self) -> str:
        """Serializes the key as PKCS1 PEM text."""
        return keyfile.encode_public(self._mod, self._expo)

    @classmethod
    def from_pem(cls, text: str) -> "RSAPubKey":
        mod, expo = keyfile.decode_public(text)
        return cls._checked(mod, expo)

    def export(self, file: pathlib.Path) -> None:
        """Export the Public RSA key to file.

        We use the PKCS1 export standard for the public key, due to its lack of information regarding identity.

        Args:
            file: The file to export the public key to.
        """
        keyfile.write_text(file, self.to_pem())

    @classmethod
    def import_key(cls, file: pathlib.Path) -> "RSAPubKey":
        """Import the Public RSA key from file.

        Args:
            file: The file to import the public key from.

        Returns:
            An RSAPubKey object with the imported public key.
        """
        return cls.from_pem(keyfile.read_text(file))


class RSAPrivKey(RSAKey):
    """RSA Private Key class implementation.

    Only the modulus and the private exponent are kept. The exponent is left out of `repr` to keep it out of logs
    and tracebacks.
    """

    __slots__ = ()

    @property
    def d(self) -> int:
        return self._expo

    def __repr__(self) -> str:
        return f"RSAPrivKey(mod={self._mod}, expo=<hidden>)"

    def decrypt(self, block: int) -> int:
        """Decrypts a block, computing `block**d % n`."""
        return self.c_rsa(block)

    def to_pem(self) -> str:
        """Serializes the key as rsakit private key PEM text."""
        return keyfile.encode_private(self._mod, self._expo)

    @classmethod
    def from_pem(cls, text: str) -> "RSAPrivKey":
        mod, expo = keyfile.decode_private(text)
        return cls._checked(mod, expo)

    def export(self, file: pathlib.Path) -> None:
        """Exports the RSA Private Key to a file.

        Args:
            file: The file to export to.
        """
        keyfile.write_text(file, self.to_pem())

    @classmethod
    def import_key(cls, file: pathlib.Path) -> "RSAPrivKey":
        """Imports the RSA Private Key from a file.

        Args:
            file: The file to import.

        Returns:
            The imported RSA Private Key.
        """
        return cls.from_pem(keyfile.read_text(file))


class RSAKeyPair:
    """A public key and its matching private key.

    Attributes:
        pub: The public key.
        priv: The private key.
    """

    __slots__ = ("_pub", "_priv")

    def __init__(self, pub: RSAPubKey, priv: RSAPrivKey) -> None:
        if not isinstance(pub, RSAPubKey) or not isinstance(priv, RSAPrivKey):
            raise TypeError("A key pair needs an RSAPubKey and an RSAPrivKey.")
        self._pub = pub
        self._priv = priv

    @property
    def pub(self) -> RSAPubKey:
        return self._pub

    @property
    def priv(self) -> RSAPrivKey:
        return self._priv

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RSAKeyPair):
            return NotImplemented
        return self._pub == other._pub and self._priv == other._priv

    def __hash__(self) -> int:
        return hash((self._pub, self._priv))

    def __repr__(self) -> str:
        return f"RSAKeyPair(pub={self._pub!r}, priv={self._priv!r})"

    def is_valid(self) -> bool:
        """Checks that both keys share a modulus and actually undo each other.

        The exponents must lie in range (`1 < e < n`, `1 <= d < n`) and a few probe blocks have to survive an
        encrypt/decrypt round trip. Probes reducing to 0, 1 or `n - 1` tell nothing about the exponents and are
        skipped; a modulus leaving no usable probe is not valid.
        """
        mod = self._pub.mod
        if self._priv.mod != mod or not 1 < self._pub.expo < mod or not 1 <= self._priv.expo < mod:
            return False
        probes = {p % mod for p in _VALIDATION_PROBES} - {0, 1, mod - 1}
        if not probes:
            return False
        return all(self._priv.c_rsa(self._pub.c_rsa(p)) == p for p in probes)

    @classmethod
    def generate(cls,
                 size: int = keygen.DEFAULT_KEY_SIZE,
                 pub_exp: int | None = keygen.DEFAULT_EXPONENT,
                 certainty: int | None = None) -> "RSAKeyPair":
        """Generates a whole RSA key pair.

        Args:
            size: The size of the RSA Key in bits. Must be even and at least 8.
            pub_exp: The preferred public exponent, or None to search for a random one.
            certainty: Miller-Rabin rounds per prime candidate. Defaults to the FIPS 186-5 table.

        Returns:
            A new RSAKeyPair.
        """
        (n, e), (_, d) = keygen.generate_key_pair(size, pub_exp, certainty)
        if size < _WEAK_KEY_SIZE:
            warnings.warn(f"{size} bit keys are trivially breakable! Please use with care.", RuntimeWarning)
        return cls(RSAPubKey(n, e), RSAPrivKey(n, d))

    def write_to_path(self, path: pathlib.Path) -> tuple[pathlib.Path, pathlib.Path]:
        """Writes both keys to a directory or a file path.

        A directory receives the default key names. Any other path is used for the private key, the public key
        goes next to it with an extra `.pub` suffix.

        Args:
            path: Target directory or private key path.

        Returns:
            Tuple of (private key path, public key path) written.
        """
        return self._write(*key_paths(path))

    def write_to_default(self) -> tuple[pathlib.Path, pathlib.Path]:
        """Writes both keys under their default names in `default_dir()`, creating it if needed."""
        return self._write(*default_key_paths())

    def _write(self, priv_path: pathlib.Path, pub_path: pathlib.Path) -> tuple[pathlib.Path, pathlib.Path]:
        self._priv.export(priv_path)
        self._pub.export(pub_path)
        return priv_path, pub_path

    @classmethod
    def read_from_path(cls, path: pathlib.Path) -> "RSAKeyPair":
        """Reads both keys from a directory or a private key path, mirroring `write_to_path`.

        Raises:
            KeyFormatError: If either key file is missing or malformed.
        """
        return cls._read(*key_paths(path))

    @classmethod
    def read_from_default(cls) -> "RSAKeyPair":
        """Reads both keys from `default_dir()`, mirroring `write_to_default`."""
        return cls._read(*default_key_paths())

    @classmethod
    def _read(cls, priv_path: pathlib.Path, pub_path: pathlib.Path) -> "RSAKeyPair":
        if not (priv_path.is_file() and pub_path.is_file()):
            raise KeyFormatError(f"Key pair is incomplete: need {priv_path} and {pub_path}.")
        return cls(RSAPubKey.import_key(pub_path), RSAPrivKey.import_key(priv_path))


def default_dir() -> pathlib.Path:
    """The per-user directory keys live in when no location is given.

    Follows the XDG layout: `$XDG_CONFIG_HOME/rsakit`, falling back to `~/.config/rsakit`. The directory is not
    created here; writing a key creates it.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = pathlib.Path(config_home) if config_home else pathlib.Path.home() / ".config"
    return base / CONFIG_DIR_NAME


def default_key_paths() -> tuple[pathlib.Path, pathlib.Path]:
    """(private, public) key file paths inside `default_dir()`."""
    base = default_dir()
    return base / DEFAULT_PRIVATE_KEY_NAME, base / DEFAULT_PUBLIC_KEY_NAME


def key_paths(path: pathlib.Path) -> tuple[pathlib.Path, pathlib.Path]:
    """Resolves (private, public) key file paths from a directory or a private key path."""
    path = pathlib.Path(path)
    if path.is_dir():
        return path / DEFAULT_PRIVATE_KEY_NAME, path / DEFAULT_PUBLIC_KEY_NAME
    return path, path.with_name(path.name + PUBLIC_KEY_SUFFIX)


def read_key(file: pathlib.Path) -> RSAPubKey | RSAPrivKey:
    """Reads a key file of either kind, telling them apart by their PEM header.

    Args:
        file: The key file. A directory is searched for the default private, then public, key name.

    Raises:
        KeyFormatError: If no key can be found or parsed.
    """
    file = pathlib.Path(file)
    if file.is_dir():
        for name in (DEFAULT_PRIVATE_KEY_NAME, DEFAULT_PUBLIC_KEY_NAME):
            if (file / name).is_file():
                file = file / name
                break
        else:
            raise KeyFormatError(f"No key file found in directory {file}.")
    text = keyfile.read_text(file)
    if keyfile.pem_subtype(text) == "PKCS1_PUB":
        return RSAPubKey.from_pem(text)
    return RSAPrivKey.from_pem(text)


def generate_keypair(key_size_bits: int = keygen.DEFAULT_KEY_SIZE,
                     pub_exp: int | None = keygen.DEFAULT_EXPONENT,
                     certainty: int | None = None) -> RSAKeyPair:
    """Generates an RSA key pair. See `RSAKeyPair.generate`."""
    return RSAKeyPair.generate(key_size_bits, pub_exp, certainty)


def encrypt(block: int, public_key: RSAPubKey) -> int:
    """Encrypts an integer block with a public key.

    Raises:
        TypeError: If `public_key` is not an RSAPubKey.
        BlockOutOfRange: If the block is not in `[0, n)`.
    """
    if not isinstance(public_key, RSAPubKey):
        raise TypeError("Encryption requires an RSAPubKey.")
    return public_key.encrypt(block)


def decrypt(block: int, private_key: RSAPrivKey) -> int:
    """Decrypts an integer block with a private key.

    Raises:
        TypeError: If `private_key` is not an RSAPrivKey.
        BlockOutOfRange: If the block is not in `[0, n)`.
    """
    if not isinstance(private_key, RSAPrivKey):
        raise TypeError("Decryption requires an RSAPrivKey.")
    return private_key.decrypt(block)
