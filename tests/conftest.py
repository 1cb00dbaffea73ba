"""Shared test fixtures for Brokersign test suite."""

from __future__ import annotations

import base64
import json
from collections.abc import Iterable
from unittest.mock import patch

import pytest

from brokersign.config import ClientConfig
from brokersign.network.protocol import KeyEntry, PolicyEntry

API_URL = "https://broker.example/signing-api"


class FakeSignerSDK:
    """In-memory signer SDK recording every call it receives."""

    def __init__(
        self,
        signature: list[int] | None = None,
        policies: list[PolicyEntry] | None = None,
        fail_on: str | Iterable[str] | None = None,
    ) -> None:
        self.signature = signature if signature is not None else [1, 2, 3, 250]
        self.policies = (
            policies
            if policies is not None
            else [PolicyEntry("qualified", (KeyEntry("key-1"), KeyEntry("key-2")))]
        )
        self.fail_on = {fail_on} if isinstance(fail_on, str) else set(fail_on or ())
        self.calls: list[str] = []
        self.saml_assertion: list[int] | None = None
        self.signed_key: KeyEntry | None = None
        self.signed_digest: list[int] | None = None

    def _step(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")

    def initialize(self) -> None:
        self._step("initialize")

    def create_session(self, saml_assertion: list[int]) -> list[PolicyEntry]:
        self.saml_assertion = saml_assertion
        self._step("create_session")
        return self.policies

    def sign(self, key: KeyEntry, digest: list[int]) -> list[int]:
        self.signed_key = key
        self.signed_digest = digest
        self._step("sign")
        return self.signature

    def logoff(self) -> None:
        self._step("logoff")

    def free(self) -> None:
        self._step("free")


def b64(data: bytes | str) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.b64encode(data).decode("ascii")


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


@pytest.fixture
def fake_sdk():
    return FakeSignerSDK()


@pytest.fixture
def client_config():
    return ClientConfig(API_URL, timeout=30)


@pytest.fixture
def make_jws():
    """Build an (unsigned) compact JWS around a parameters dict."""

    def _make(payload: dict) -> str:
        header = b64url(json.dumps({"alg": "PS256"}).encode())
        body = b64url(json.dumps(payload).encode())
        return f"{header}.{body}.c2lnbmF0dXJl"

    return _make


@pytest.fixture
def make_container():
    """Build a Base64 XAdES DTBS container."""

    def _make(
        document: bytes | str,
        transformation: bytes | str | None = None,
        monospace: str | None = None,
    ) -> str:
        parts = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<ds:SignersDocument xmlns:ds="urn:example:signing">',
            f"<ds:Document>{b64(document)}</ds:Document>",
        ]
        if transformation is not None:
            parts.append(f"<ds:Transformation>{b64(transformation)}</ds:Transformation>")
        if monospace is not None:
            parts.append(f"<ds:UseMonoSpaceFont>{monospace}</ds:UseMonoSpaceFont>")
        parts.append("</ds:SignersDocument>")
        return b64("".join(parts))

    return _make


@pytest.fixture
def valid_pdf_bytes():
    """Create a minimal valid PDF using pikepdf."""
    import io

    import pikepdf

    pdf = pikepdf.Pdf.new()
    pdf.add_blank_page(page_size=(612, 792))
    pdf.add_blank_page(page_size=(612, 792))
    buf = io.BytesIO()
    pdf.save(buf)
    return buf.getvalue()


@pytest.fixture
def fake_sdk_cls():
    """The fake SDK class, for tests that configure failures or policies."""
    return FakeSignerSDK


_ENV_CLEAR = {
    "BROKERSIGN_URL": "",
    "BROKERSIGN_TIMEOUT": "",
    "BROKERSIGN_ORIGIN": "",
    "BROKERSIGN_MOCK": "",
}


@pytest.fixture
def config_dir(tmp_path):
    """Redirect config to a temp directory and clear env overrides."""
    config_file = tmp_path / "config.json"
    with (
        patch("brokersign.config._storage.CONFIG_DIR", tmp_path),
        patch("brokersign.config._storage.CONFIG_FILE", config_file),
        patch.dict("os.environ", _ENV_CLEAR),
    ):
        yield tmp_path, config_file
