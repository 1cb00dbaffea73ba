"""Tests for brokersign.ui.helpers -- CLI file and output helpers."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from brokersign.core.models import SignatureFormat
from brokersign.ui.helpers import (
    atomic_write,
    default_output_path,
    default_preview_path,
    format_size_kb,
    print_flow_failure,
    safe_read_file,
)
from brokersign.ui.workflows import FlowResult

# ── format_size_kb ────────────────────────────────────────────────


def test_format_size_kb():
    assert format_size_kb(0) == "0.0 KB"
    assert format_size_kb(1536) == "1.5 KB"


# ── default paths ─────────────────────────────────────────────────


def test_default_output_path_pades():
    path = default_output_path(Path("/tmp/contract.json"), SignatureFormat.PADES)
    assert path == Path("/tmp/contract_signed.pdf")


def test_default_output_path_xades():
    path = default_output_path(Path("/tmp/contract.json"), SignatureFormat.XADES)
    assert path == Path("/tmp/contract_signed.xml")


def test_default_preview_path():
    assert default_preview_path(Path("/a/doc.json"), ".png") == Path("/a/doc_preview.png")


# ── safe_read_file ────────────────────────────────────────────────


def test_safe_read_file_reads(tmp_path):
    f = tmp_path / "payload.json"
    f.write_bytes(b"{}")
    assert safe_read_file(f, "payload") == b"{}"


def test_safe_read_file_missing(tmp_path, capsys):
    assert safe_read_file(tmp_path / "nope.json", "payload") is None
    assert "payload not found" in capsys.readouterr().err


def test_safe_read_file_oserror(tmp_path, capsys):
    f = tmp_path / "payload.json"
    f.write_bytes(b"{}")
    with patch.object(Path, "read_bytes", side_effect=OSError("denied")):
        assert safe_read_file(f, "payload") is None
    assert "Error reading payload" in capsys.readouterr().err


# ── print_flow_failure ────────────────────────────────────────────


def test_print_flow_failure(capsys):
    result = FlowResult(
        ok=False,
        stage="issue-certificate",
        error_message="HTTP 400",
        status=400,
        correlation_id="corr-1",
    )
    print_flow_failure(result)
    err = capsys.readouterr().err
    assert "FAILED at issue-certificate" in err
    assert "HTTP status: 400" in err
    assert "corr-1" in err


def test_print_flow_failure_retryable_hint(capsys):
    print_flow_failure(FlowResult(ok=False, stage="begin-signature-flow", error_message="x", retryable=True))
    assert "transient" in capsys.readouterr().err


# ── atomic_write ──────────────────────────────────────────────────


def test_atomic_write_creates_file(tmp_path):
    target = tmp_path / "out.pdf"
    atomic_write(target, b"%PDF-1.7")
    assert target.read_bytes() == b"%PDF-1.7"
    assert list(tmp_path.glob("*.tmp")) == []


def test_atomic_write_cleans_up_on_failure(tmp_path):
    target = tmp_path / "out.pdf"
    with patch("os.write", side_effect=OSError("disk full")), pytest.raises(OSError):
        atomic_write(target, b"data")
    assert not target.exists()
    assert list(tmp_path.glob("*.tmp")) == []
