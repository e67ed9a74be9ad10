# pylint: disable=missing-module-docstring,redefined-outer-name
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
import logging

import pytest

import rsakit
from rsakit import __main__ as cli
from rsakit import codec


@pytest.fixture
def keydir(tmp_path, generated_pair):
    generated_pair(512).write_to_path(tmp_path)
    return tmp_path


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])
    assert exc.value.code == 0
    assert rsakit.__version__ in capsys.readouterr().out


def test_subcommand_required(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 2


@pytest.mark.filterwarnings("ignore::RuntimeWarning")
def test_keygen(tmp_path, capsys):
    assert cli.main(["keygen", "--out", str(tmp_path), "--keysize", "256", "--results"]) == 0
    out = capsys.readouterr().out
    assert "E = 65537" in out
    pair = rsakit.RSAKeyPair.read_from_path(tmp_path)
    assert pair.is_valid()
    assert pair.pub.n.bit_length() in (255, 256)


@pytest.mark.filterwarnings("ignore::RuntimeWarning")
def test_keygen_random_exponent(tmp_path):
    assert cli.main(["keygen", "-o", str(tmp_path / "k"), "-s", "128", "--random-exponent", "-c", "8"]) == 0
    pair = rsakit.RSAKeyPair.read_from_path(tmp_path / "k")
    assert pair.is_valid()


@pytest.mark.filterwarnings("ignore::RuntimeWarning")
def test_keygen_refuses_overwrite(keydir, capsys):
    before = (keydir / "rsakit_key.pub").read_text(encoding="ascii")
    assert cli.main(["keygen", "--out", str(keydir), "--keysize", "128"]) == 1
    assert "already exists" in capsys.readouterr().err
    assert (keydir / "rsakit_key.pub").read_text(encoding="ascii") == before
    assert cli.main(["keygen", "--out", str(keydir), "--keysize", "128", "--overwrite"]) == 0
    assert (keydir / "rsakit_key.pub").read_text(encoding="ascii") != before


def test_keygen_invalid_size(tmp_path, capsys):
    assert cli.main(["keygen", "--out", str(tmp_path), "--keysize", "7"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_encrypt_decrypt_message(keydir, capsys):
    assert cli.main(["encrypt", "-k", str(keydir / "rsakit_key.pub"), "-m", "Hi there! ünïcode"]) == 0
    ciph = capsys.readouterr().out.strip()
    base64.b64decode(ciph, validate=True)
    assert cli.main(["decrypt", "-k", str(keydir / "rsakit_key"), "-m", ciph]) == 0
    assert capsys.readouterr().out.strip() == "Hi there! ünïcode"


def test_encrypt_decrypt_files(keydir):
    payload = bytes(range(256)) * 4
    (keydir / "plain").write_bytes(payload)
    assert cli.main(["encrypt", "-k", str(keydir / "rsakit_key.pub"), "-i",
                     str(keydir / "plain"), "-O", str(keydir / "cipher")]) == 0
    assert cli.main(["decrypt", "-k", str(keydir / "rsakit_key"), "-i",
                     str(keydir / "cipher"), "-O", str(keydir / "clear")]) == 0
    assert (keydir / "clear").read_bytes() == payload


def test_encrypt_file_to_stdout(keydir, capsys):
    (keydir / "plain").write_bytes(b"file payload")
    assert cli.main(["encrypt", "-k", str(keydir / "rsakit_key.pub"), "-i", str(keydir / "plain")]) == 0
    ciph = base64.b64decode(capsys.readouterr().out.strip())
    priv = rsakit.RSAPrivKey.import_key(keydir / "rsakit_key")
    assert codec.decrypt_bytes(ciph, priv) == b"file payload"


def test_encrypt_message_to_file(keydir, capsys):
    assert cli.main(["encrypt", "-k", str(keydir / "rsakit_key.pub"), "-m", "to disk", "-O",
                     str(keydir / "cipher")]) == 0
    assert cli.main(["decrypt", "-k", str(keydir / "rsakit_key"), "-i", str(keydir / "cipher")]) == 0
    assert capsys.readouterr().out.strip() == "to disk"


def test_encrypt_needs_payload(keydir):
    with pytest.raises(SystemExit):
        cli.main(["encrypt", "-k", str(keydir / "rsakit_key.pub")])


def test_decrypt_bad_base64(keydir, capsys):
    assert cli.main(["decrypt", "-k", str(keydir / "rsakit_key"), "-m", "not base64!"]) == 1
    assert "base64" in capsys.readouterr().err


def test_encrypt_with_private_key_fails(keydir, capsys):
    assert cli.main(["encrypt", "-k", str(keydir / "rsakit_key"), "-m", "nope"]) == 1
    assert "PEM Headline" in capsys.readouterr().err


def test_missing_key_file(tmp_path, capsys):
    assert cli.main(["encrypt", "-k", str(tmp_path / "none.pub"), "-m", "nope"]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_validate(keydir, capsys):
    pub, priv = str(keydir / "rsakit_key.pub"), str(keydir / "rsakit_key")
    assert cli.main(["validate", "-p", pub]) == 0
    assert "Public Key is valid!" in capsys.readouterr().out
    assert cli.main(["validate", "-P", priv]) == 0
    assert "Private Key is valid!" in capsys.readouterr().out
    assert cli.main(["validate", "-p", pub, "-P", priv]) == 0
    assert "Key Pair is valid!" in capsys.readouterr().out


def test_validate_mismatch(keydir, tmp_path_factory, generated_pair, capsys):
    other = tmp_path_factory.mktemp("other")
    generated_pair(1024).write_to_path(other)
    assert cli.main(["validate", "-p", str(keydir / "rsakit_key.pub"), "-P", str(other / "rsakit_key")]) == 1
    assert "not valid" in capsys.readouterr().err


def test_validate_needs_a_key(capsys):
    assert cli.main(["validate"]) == 1
    assert "Specify" in capsys.readouterr().err


def test_validate_wrong_kind(keydir, capsys):
    assert cli.main(["validate", "-p", str(keydir / "rsakit_key")]) == 1
    assert "Error:" in capsys.readouterr().err


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    return tmp_path / "config" / "rsakit"


@pytest.mark.filterwarnings("ignore::RuntimeWarning")
def test_keygen_default_location(config_home, capsys):
    assert cli.main(["keygen", "--keysize", "256"]) == 0
    assert str(config_home) in capsys.readouterr().out
    assert rsakit.RSAKeyPair.read_from_default().is_valid()
    assert cli.main(["keygen", "--keysize", "256"]) == 1


def test_encrypt_decrypt_default_keys(config_home, generated_pair, capsys):
    generated_pair(512).write_to_default()
    assert cli.main(["encrypt", "-m", "default keys"]) == 0
    ciph = capsys.readouterr().out.strip()
    assert cli.main(["decrypt", "-m", ciph]) == 0
    assert capsys.readouterr().out.strip() == "default keys"


def test_default_keys_missing(config_home, capsys):
    assert cli.main(["encrypt", "-m", "nope"]) == 1
    err = capsys.readouterr().err
    assert "does not exist" in err
    assert str(config_home) in err


def test_unknown_encoding(keydir, generated_pair, capsys):
    assert cli.main(["encrypt", "-k", str(keydir / "rsakit_key.pub"), "-m", "hi", "-e", "no-such-codec"]) == 1
    assert "no-such-codec" in capsys.readouterr().err
    ciph = base64.b64encode(codec.encrypt_bytes(b"hi", generated_pair(512).pub)).decode("ascii")
    assert cli.main(["decrypt", "-k", str(keydir / "rsakit_key"), "-m", ciph, "-e", "no-such-codec"]) == 1
    assert "Error:" in capsys.readouterr().err


@pytest.mark.filterwarnings("ignore::RuntimeWarning")
def test_keygen_logs_progress(tmp_path, caplog):
    with caplog.at_level(logging.INFO, logger="rsakit.cli"):
        assert cli.main(["--verbose", "keygen", "--out", str(tmp_path), "--keysize", "128"]) == 0
    messages = [r.getMessage() for r in caplog.records if r.name == "rsakit.cli"]
    assert any(m.startswith("Generating a 128 bit key pair") for m in messages)
    assert any(m.startswith("Generated a ") for m in messages)
    assert any(m.startswith("Wrote private key") for m in messages)
