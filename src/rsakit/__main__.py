"""The Command Line Interface for the utility.

Wraps key generation, block encryption/decryption of messages and files, and key validation into subcommands.

Typical usage example:

    rsakit keygen --out keys/ --keysize 2048
    rsakit encrypt --key keys/rsakit_key.pub --message "Hi there!"
    python -m rsakit validate -p keys/rsakit_key.pub -P keys/rsakit_key
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import base64
import binascii
import logging
import pathlib
import sys
import time
import typing

import rsakit
from rsakit import codec
from rsakit.errors import RSAError

logger = logging.getLogger("rsakit.cli")


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    default: typing.Any = None


help_dict: dict[str, HelpData] = {
    "keygen": HelpData("Key generation utility."),
    "encrypt": HelpData("Encryption utility."),
    "decrypt": HelpData("Decryption utility."),
    "validate": HelpData("Key and key pair validation utility."),
    "out":
        HelpData(
            description=("Directory, or private key path, to save the key pair to. Public key gets a .pub suffix. "
                         "Defaults to the per-user config directory."),
            format=pathlib.Path,
        ),
    "key": HelpData(description="Location of the key file. Defaults to the key in the per-user config directory.",
                    format=pathlib.Path),
    "public_key": HelpData(description="Location of the public key file.", format=pathlib.Path),
    "private_key": HelpData(description="Location of the private key file.", format=pathlib.Path),
    "message": HelpData(description="Message text. Base64 ciphertext when decrypting."),
    "in_path": HelpData(description="Input file path.", format=pathlib.Path),
    "out_path": HelpData(description="Output file path. Without it results are printed.", format=pathlib.Path),
    "encoding": HelpData(description="Text encoding of printed or typed messages.", default="utf-8"),
    "keysize": HelpData(description="Key size (in bits).", format=int, default=rsakit.DEFAULT_KEY_SIZE),
    "pub_exponent":
        HelpData(
            description="Preferred exponent for the public key.",
            format=int,
            default=rsakit.DEFAULT_EXPONENT,
        ),
    "random_exponent": HelpData(description="Search a random public exponent instead."),
    "certainty":
        HelpData(description="Miller-Rabin rounds per prime candidate. Defaults to the FIPS 186-5 table.", format=int),
    "overwrite": HelpData(description="Overwrite existing key files."),
    "results": HelpData(description="Print the generated key numbers."),
}

keyarg = argparse.ArgumentParser(add_help=False)
keyarg.add_argument("--key", "-k", type=help_dict["key"].format, help=help_dict["key"].description)
payloads = argparse.ArgumentParser(add_help=False)
source = payloads.add_mutually_exclusive_group(required=True)
source.add_argument("--message", "-m", type=help_dict["message"].format, help=help_dict["message"].description)
source.add_argument("--in-path", "-i", type=help_dict["in_path"].format, help=help_dict["in_path"].description)
payloads.add_argument("--out-path", "-O", type=help_dict["out_path"].format, help=help_dict["out_path"].description)
payloads.add_argument("--encoding",
                      "-e",
                      default=help_dict["encoding"].default,
                      help=help_dict["encoding"].description)

corep = argparse.ArgumentParser(prog="rsakit")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {rsakit.__version__}")
corep.add_argument("--verbose", "-V", action="store_true", help="Enable debug logging")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands", required=True)

keygen = commands.add_parser("keygen", help=help_dict["keygen"].description)
keygen.add_argument("--out", "-o", type=help_dict["out"].format, help=help_dict["out"].description)
keygen.add_argument("--keysize",
                    "-s",
                    type=help_dict["keysize"].format,
                    default=help_dict["keysize"].default,
                    help=help_dict["keysize"].description)
exponent = keygen.add_mutually_exclusive_group()
exponent.add_argument("--pub-exponent",
                      type=help_dict["pub_exponent"].format,
                      default=help_dict["pub_exponent"].default,
                      help=help_dict["pub_exponent"].description)
exponent.add_argument("--random-exponent", action="store_true", help=help_dict["random_exponent"].description)
keygen.add_argument("--certainty",
                    "-c",
                    type=help_dict["certainty"].format,
                    help=help_dict["certainty"].description)
keygen.add_argument("--overwrite", action="store_true", help=help_dict["overwrite"].description)
keygen.add_argument("--results", "-r", action="store_true", help=help_dict["results"].description)

encrypt = commands.add_parser("encrypt", parents=[keyarg, payloads], help=help_dict["encrypt"].description)
decrypt = commands.add_parser("decrypt", parents=[keyarg, payloads], help=help_dict["decrypt"].description)

validate = commands.add_parser("validate", help=help_dict["validate"].description)
validate.add_argument("--public-key",
                      "-p",
                      type=help_dict["public_key"].format,
                      help=help_dict["public_key"].description)
validate.add_argument("--private-key",
                      "-P",
                      type=help_dict["private_key"].format,
                      help=help_dict["private_key"].description)


def run_keygen(args: argparse.Namespace) -> int:
    priv_path, pub_path = rsakit.default_key_paths() if args.out is None else rsakit.key_paths(args.out)
    if (priv_path.exists() or pub_path.exists()) and not args.overwrite:
        print("Destination private or public key already exists! Use --overwrite to replace.", file=sys.stderr)
        return 1
    pub_exp = None if args.random_exponent else args.pub_exponent
    logger.info("Generating a %d bit key pair (%s public exponent)", args.keysize,
                "random" if pub_exp is None else f"preferred {pub_exp}")
    started = time.perf_counter()
    pair = rsakit.generate_keypair(args.keysize, pub_exp, args.certainty)
    logger.info("Generated a %d bit modulus with E = %d in %.2fs", pair.pub.n.bit_length(), pair.pub.e,
                time.perf_counter() - started)
    if args.out is None:
        pair.write_to_default()
    else:
        pair.write_to_path(args.out)
    logger.info("Wrote private key to %s and public key to %s", priv_path, pub_path)
    if args.results:
        print(f"N = {pair.pub.n}")
        print(f"E = {pair.pub.e}")
        print(f"D = {pair.priv.d}")
        print(f"Modulus bits: {pair.pub.n.bit_length()}")
    print(f"Key pair saved to {priv_path} and {pub_path}")
    return 0


def run_encrypt(args: argparse.Namespace) -> int:
    pub = rsakit.RSAPubKey.import_key(args.key or rsakit.default_key_paths()[1])
    if args.in_path is not None and args.out_path is not None:
        with open(args.in_path, "rb") as src, open(args.out_path, "wb") as dst:
            codec.encrypt_stream(src, dst, pub)
        return 0
    if args.in_path is not None:
        with open(args.in_path, "rb") as f:
            payload = f.read()
    else:
        payload = args.message.encode(args.encoding)
    ciph = codec.encrypt_bytes(payload, pub)
    if args.out_path is not None:
        with open(args.out_path, "wb") as f:
            f.write(ciph)
    else:
        print(base64.b64encode(ciph).decode("ascii"))
    return 0


def run_decrypt(args: argparse.Namespace) -> int:
    priv = rsakit.RSAPrivKey.import_key(args.key or rsakit.default_key_paths()[0])
    if args.in_path is not None and args.out_path is not None:
        with open(args.in_path, "rb") as src, open(args.out_path, "wb") as dst:
            codec.decrypt_stream(src, dst, priv)
        return 0
    if args.in_path is not None:
        with open(args.in_path, "rb") as f:
            ciph = f.read()
    else:
        try:
            ciph = base64.b64decode(args.message.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as exc:
            raise ValueError("Message is not valid base64 ciphertext.") from exc
    clear = codec.decrypt_bytes(ciph, priv)
    if args.out_path is not None:
        with open(args.out_path, "wb") as f:
            f.write(clear)
    else:
        print(clear.decode(args.encoding))
    return 0


def run_validate(args: argparse.Namespace) -> int:
    match args.public_key, args.private_key:
        case None, None:
            print("Specify --public-key, --private-key or both.", file=sys.stderr)
            return 1
        case pub_path, None:
            rsakit.RSAPubKey.import_key(pub_path)
            print("Public Key is valid!")
        case None, priv_path:
            rsakit.RSAPrivKey.import_key(priv_path)
            print("Private Key is valid!")
        case pub_path, priv_path:
            pair = rsakit.RSAKeyPair(rsakit.RSAPubKey.import_key(pub_path), rsakit.RSAPrivKey.import_key(priv_path))
            if not pair.is_valid():
                print("Key Pair is not valid!", file=sys.stderr)
                return 1
            print("Key Pair is valid!")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parses arguments, runs the requested subcommand and returns the exit code."""
    args = corep.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    runners = {"keygen": run_keygen, "encrypt": run_encrypt, "decrypt": run_decrypt, "validate": run_validate}
    try:
        return runners[args.subcommand](args)
    except (RSAError, ValueError, LookupError, OSError) as exc:
        logger.debug("Command %s failed", args.subcommand, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
