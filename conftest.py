"""Configures pytest further."""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import pytest

from rsakit import rsa

# P=61, Q=53 -> N=3233, totient 3120, E=17, D=2753
TOY_N = 3233
TOY_E = 17
TOY_D = 2753

_generated: dict[int, rsa.RSAKeyPair] = {}


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests (large keys)")
    parser.addoption("--run-extreme", action="store_true", default=False, help="run extreme key size tests")


def pytest_collection_modifyitems(config, items):
    skipdict = {}
    if config.getoption("--skip-slow"):
        skipdict["slow"] = pytest.mark.skip(reason="Slow test: needs no --skip-slow option")
    if not config.getoption("--run-extreme"):
        skipdict["extreme"] = pytest.mark.skip(reason="Extreme test: needs --run-extreme option")
    if not skipdict:
        return
    for item in items:
        for k, v in skipdict.items():
            if k in item.keywords:
                item.add_marker(v)


@pytest.fixture
def toy_pair() -> rsa.RSAKeyPair:
    return rsa.RSAKeyPair(rsa.RSAPubKey(TOY_N, TOY_E), rsa.RSAPrivKey(TOY_N, TOY_D))


@pytest.fixture(scope="session")
def generated_pair():
    """Returns a factory handing out one generated key pair per size for the whole session."""

    def factory(size: int) -> rsa.RSAKeyPair:
        if size not in _generated:
            _generated[size] = rsa.generate_keypair(size)
        return _generated[size]

    return factory
