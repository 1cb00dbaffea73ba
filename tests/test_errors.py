"""Tests for brokersign.errors -- exception hierarchy."""

import pickle

import pytest

from brokersign.errors import (
    BrokerSignError,
    ConfigError,
    DocumentError,
    ServerError,
    SignerError,
    TransportError,
)


def test_base_error_is_exception():
    assert issubclass(BrokerSignError, Exception)


@pytest.mark.parametrize(
    "cls", [ConfigError, DocumentError, ServerError, SignerError, TransportError]
)
def test_errors_inherit_base(cls):
    assert issubclass(cls, BrokerSignError)
    with pytest.raises(BrokerSignError, match="boom"):
        raise cls("boom")


def test_transport_error_default_not_retryable():
    e = TransportError("config issue")
    assert e.retryable is False
    assert str(e) == "config issue"


def test_transport_error_retryable_flag():
    e = TransportError("timed out", retryable=True)
    assert e.retryable is True


def test_transport_error_pickle_roundtrip():
    e = TransportError("timed out", retryable=True)
    restored = pickle.loads(pickle.dumps(e))
    assert isinstance(restored, TransportError)
    assert restored.retryable is True
    assert str(restored) == "timed out"


def test_server_error_status():
    e = ServerError("bad request", status=400)
    assert e.status == 400
    assert ServerError("malformed").status is None


def test_server_error_pickle_roundtrip():
    restored = pickle.loads(pickle.dumps(ServerError("gone", status=410)))
    assert restored.status == 410
    assert str(restored) == "gone"
