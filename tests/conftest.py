# topmark:header:start
#
#   project      : DescParse
#   file         : conftest.py
#   file_relpath : tests/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Pytest configuration for the DescParse test suite.

This file sets up global fixtures, typed mark helpers and a small library of
well-formed sample documents, and customizes the logging configuration for
test runs so that TRACE output is captured.

Notes:
    Sample documents are plain ``str`` constants. Tests derive malformed
    variants with ``str.replace`` so that each test states exactly which line
    it breaks.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar, cast

import pytest

from descparse.config import MutableConfig, logging
from descparse.core.model import Blob, ByteRange, ParsedDescriptor, UnparseableDescriptor
from descparse.kinds.registry import get_grammar
from descparse.pipeline.parser import parse_descriptor

if TYPE_CHECKING:
    from descparse.config import Config
    from descparse.kinds.base import DescriptorRecord, DocumentKind

F = TypeVar("F", bound=Callable[..., object])

# This defines the type for the decorator function itself:
# It takes a Callable (F) and returns the same Callable (F).
DecoratorType = Callable[[F], F]


def as_typed_mark(mark: Any) -> DecoratorType[Any]:
    """Wrap a pytest mark so static type checkers preserve the function type.

    Args:
        mark (Any): A pytest mark decorator such as `pytest.mark.pipeline`.

    Returns:
        DecoratorType[Any]: A decorator that preserves the wrapped function's type.
    """

    def _decorator(func: F) -> F:
        return cast("F", mark(func))

    return _decorator


mark_pipeline: DecoratorType[Any] = as_typed_mark(pytest.mark.pipeline)
mark_cli: DecoratorType[Any] = as_typed_mark(pytest.mark.cli)


def parametrize(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.mark.parametrize`.

    Args:
        *args (Any): Positional arguments forwarded to `pytest.mark.parametrize`.
        **kwargs (Any): Keyword arguments forwarded to `pytest.mark.parametrize`.

    Returns:
        Callable[[F], F]: A decorator that preserves the wrapped function's type.
    """
    mark: pytest.MarkDecorator = pytest.mark.parametrize(*args, **kwargs)
    return as_typed_mark(mark)


def hookimpl(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.hookimpl`."""
    return as_typed_mark(pytest.hookimpl(*args, **kwargs))


@pytest.fixture(autouse=True)
def silence_descparse_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure DescParse's runtime log level is not forced via env during tests.

    This avoids accidental DEBUG/TRACE noise when the developer has exported
    DESCPARSE_LOG_LEVEL in their shell.

    Args:
        monkeypatch (pytest.MonkeyPatch): Pytest monkeypatch fixture used to manipulate
            environment variables.
    """
    monkeypatch.delenv("DESCPARSE_LOG_LEVEL", raising=False)


@hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:  # pylint: disable=unused-argument
    """Set the logging level to TRACE for all tests.

    Args:
        config (pytest.Config): The pytest configuration object.
    """
    logging.setup_logging(level=logging.TRACE_LEVEL)


@pytest.fixture
def isolation(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test in an isolated, config-free working directory.

    Args:
        tmp_path (Path): The pytest-provided temporary directory for the test.
        monkeypatch (pytest.MonkeyPatch): Fixture to change the working directory.

    Returns:
        Path: The isolated working directory.
    """
    cwd: Path = tmp_path / "proj"
    cwd.mkdir()
    monkeypatch.chdir(cwd)
    return cwd


def make_config(**overrides: Any) -> Config:
    """Return a frozen `Config` built from defaults and overrides.

    Args:
        **overrides (Any): Field values to set on the `MutableConfig` draft.

    Returns:
        Config: The frozen configuration.
    """
    draft: MutableConfig = MutableConfig.from_defaults()
    for key, value in overrides.items():
        setattr(draft, key, value)
    return draft.freeze()


def parse_text(
    text: str,
    kind: DocumentKind,
    *,
    fail_unrecognized_lines: bool = False,
) -> ParsedDescriptor[DescriptorRecord]:
    """Parse ``text`` as one whole document of ``kind``.

    Raises:
        DescriptorParseError: Propagated from the parser.
    """
    blob = Blob(text.encode("utf-8"), "sample")
    return parse_descriptor(
        blob,
        ByteRange(0, len(blob)),
        get_grammar(kind),
        fail_unrecognized_lines=fail_unrecognized_lines,
    )


def only_failure(results: list[Any]) -> UnparseableDescriptor:
    """Assert that ``results`` holds exactly one failure and return it."""
    assert len(results) == 1
    result: Any = results[0]
    assert isinstance(result, UnparseableDescriptor), f"unexpected success: {result!r}"
    return result


# --- Sample documents -------------------------------------------------------

EXTRA_INFO = """\
extra-info chaoscomputerclub5 A9C039A5FD02FCA06303DCFAABE25C5912C63B26
published 2012-02-11 09:08:36
write-history 2012-02-11 09:03:39 (900 s) 4713350144,4723824640,4710717440,4572675072
read-history 2012-02-11 09:03:39 (900 s) 4707695616,4699666432,4650004480,4489718784
dirreq-write-history 2012-02-11 09:03:39 (900 s) 81281024,64996352,60625920,67922944
dirreq-read-history 2012-02-11 09:03:39 (900 s) 17074176,16235520,16005120,16209920
router-signature
-----BEGIN SIGNATURE-----
o4j+kH8UQfjBwepUnr99v0ebN8RpzHJ/lqYsTojXHy9kMr1RNI9IDeSzA7PSqTuV
4PL8QsGtlfwthtIoZpB2srZeyN/mcpA9fa1JXUrt/UN9K/+32Cyaad7h0nHE6Xfb
jqpXDpnBpvk4zjmzjjKYnIsUWTnADmu0fo3xTRqXi7g=
-----END SIGNATURE-----
"""

SERVER_DESCRIPTOR = """\
router TorNode1 198.51.100.7 9001 0 9030
identity-ed25519
-----BEGIN ED25519 CERT-----
AQQABhtZAaW2GoBED1IjY3A6f6GNqBEl5A83fD2Za9upGke51JGqAQAgBABnprVR
-----END ED25519 CERT-----
master-key-ed25519 Z6a1UabSK+N21j6KnyM0vGHfI7Z1Wd0zWNRgmqmzIbs
platform Tor 0.4.8.10 on Linux
proto Cons=1-2 Desc=1-2 DirCache=2 Link=1-5 Microdesc=1-2 Relay=1-4
published 2024-01-15 12:00:00
fingerprint A9C0 39A5 FD02 FCA0 6303 DCFA ABE2 5C59 12C6 3B26
uptime 1234567
bandwidth 1073741824 1073741824 20971520
extra-info-digest 1CBD4C4A2B94C4D6EC4E2C64E5A4F3F71C1C5C12 sBH4VyvmLUbyWfv6Dcvz1mGyf0e1Kd0
onion-key
-----BEGIN RSA PUBLIC KEY-----
MIGJAoGBAMhPQtZPaxP3ukybV5LfofKQr20/ljpRk0e9IlGWWMSTkfVvBcHsa6IM
-----END RSA PUBLIC KEY-----
signing-key
-----BEGIN RSA PUBLIC KEY-----
MIGJAoGBALwfDMhDtLg8CqBQtGd2qh2N7q3ZGDjg6Bqk4lCCp+Zb4qR3MzGRmAIp
-----END RSA PUBLIC KEY-----
onion-key-crosscert
-----BEGIN CROSSCERT-----
ZuJg0ndYWlXdNo8dT5h4PuBIpI7rXmkMHvnoX4u0zoqxAtMIwP2uaXBmVuCDOV7R
-----END CROSSCERT-----
ntor-onion-key-crosscert 0
-----BEGIN ED25519 CERT-----
AQoABhteAWe2Ym/iYBtUAxLNk0ukj4kzEDiP3fHeaW5pHBiZbt5sAQAgBABnprVR
-----END ED25519 CERT-----
family $9695DFC35FFEB861329B9F1AB04C46397020CE31 $AAAA39A5FD02FCA06303DCFAABE25C5912C63B26
hidden-service-dir
contact admin AT example DOT org
ntor-onion-key Y7Ft7RDYL4zzlUJbqDOjuklVSgBdxGjpfZK0aQRaVHw
reject 0.0.0.0/8:*
accept *:80
accept *:443
reject *:*
tunnelled-dir-server
router-sig-ed25519 q2ts9CXQWXsfQ4fVF6e8XAxQZyJQ9tZ2R7sGk9Ypf0VvnU8x9ewxaSL2Y4d8s6gV
router-signature
-----BEGIN SIGNATURE-----
jqpXDpnBpvk4zjmzjjKYnIsUWTnADmu0fo3xTRqXi7g4PL8QsGtlfwthtIoZpB2s
-----END SIGNATURE-----
"""

MICRODESCRIPTOR = """\
onion-key
-----BEGIN RSA PUBLIC KEY-----
MIGJAoGBAMhPQtZPaxP3ukybV5LfofKQr20/ljpRk0e9IlGWWMSTkfVvBcHsa6IM
-----END RSA PUBLIC KEY-----
ntor-onion-key Y7Ft7RDYL4zzlUJbqDOjuklVSgBdxGjpfZK0aQRaVHw
a [2001:db8::1]:9001
family $9695DFC35FFEB861329B9F1AB04C46397020CE31
p accept 80,443
p6 reject 1-65535
id ed25519 Z6a1UabSK+N21j6KnyM0vGHfI7Z1Wd0zWNRgmqmzIbs
"""

DIR_KEY_CERTIFICATE = """\
dir-key-certificate-version 3
dir-address 192.0.2.10:80
fingerprint 14C131DFC5C6F93646BE72FA1401C02A8DF2E8B4
dir-key-published 2024-01-01 00:00:00
dir-key-expires 2025-01-01 00:00:00
dir-identity-key
-----BEGIN RSA PUBLIC KEY-----
MIIBigKCAYEAtKpuLgVK8mHdO7tK8e2ND3eIgXSrFCrPvLbNvK6qR+4Gp6Jr9nEM
-----END RSA PUBLIC KEY-----
dir-signing-key
-----BEGIN RSA PUBLIC KEY-----
MIGJAoGBAJ7oYwYa4wpJ0WQdQVeGNtXzwu5TgWg6E+QZT5d0E5m9lDkNtN3eHx5q
-----END RSA PUBLIC KEY-----
dir-key-crosscert
-----BEGIN ID SIGNATURE-----
pNE6gtuh7z6oG2BHm0rxtOv4Yk3LZkUyPPDJo5VgQmWZ+2fRUxAcmGOyPBm6h0hk
-----END ID SIGNATURE-----
dir-key-certification
-----BEGIN SIGNATURE-----
HqcQwbcMNaoHYQgN2c2Nw8zM0s0gVYGgDk8X2Dp8Q1JRu3XPf1cOWUnXcX2fV3bJ
-----END SIGNATURE-----
"""

CONSENSUS = """\
network-status-version 3
vote-status consensus
consensus-method 28
valid-after 2024-01-15 12:00:00
fresh-until 2024-01-15 13:00:00
valid-until 2024-01-15 15:00:00
voting-delay 300 300
client-versions 0.4.7.16,0.4.8.10
server-versions 0.4.7.16,0.4.8.10
known-flags Authority BadExit Exit Fast Guard HSDir Running Stable V2Dir Valid
params CircuitPriorityHalflifeMsec=30000 bwweightscale=10000
dir-source moria1 D586D18309DED4CD6D57C18FDB97EFA96D330566 128.31.0.34 128.31.0.34 9131 9101
contact 1024D/28988BF5 arma mit edu
vote-digest 49015F787433103580E3B66A1707A00E60F2D15B
r seele AAoQ1DAR6kkoo19hBAX5K0QztNw bYlPc8a7tGXFzhyAo3Dnmw3z6ZU 2024-01-15 10:18:53 10.1.2.3 9001 0
s Running Stable V2Dir Valid
v Tor 0.4.8.10
pr Cons=1-2 Desc=1-2
w Bandwidth=76
p reject 1-65535
directory-footer
bandwidth-weights Wbd=0 Wbe=0 Wbg=4203
directory-signature D586D18309DED4CD6D57C18FDB97EFA96D330566 EC7EF69FAA7F3DFB6B2AD0F0B8D0F4CA69ACE8
-----BEGIN SIGNATURE-----
Fc2D7AS3mGxwHXN3Ak3LBaV2rkJ8a9S0qGZT7pYV2DqG4jPZ6KrEcK/MtSPR4Bmd
-----END SIGNATURE-----
"""


@pytest.fixture
def extra_info_text() -> str:
    """Return a well-formed relay extra-info descriptor."""
    return EXTRA_INFO


@pytest.fixture
def server_descriptor_text() -> str:
    """Return a well-formed relay server descriptor."""
    return SERVER_DESCRIPTOR


@pytest.fixture
def microdescriptor_text() -> str:
    """Return a well-formed microdescriptor."""
    return MICRODESCRIPTOR


@pytest.fixture
def certificate_text() -> str:
    """Return a well-formed directory key certificate."""
    return DIR_KEY_CERTIFICATE


@pytest.fixture
def consensus_text() -> str:
    """Return a well-formed network status consensus."""
    return CONSENSUS
