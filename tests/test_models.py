"""Tests for brokersign.core.models -- payloads, parameters and responses."""

import json

import pytest

from brokersign.core.models import (
    BeginSignatureFlowResponse,
    CreateSignatureResponse,
    DocumentFormat,
    FlowType,
    IssueCertificateResponse,
    SignatureFormat,
    SignatureProfile,
    SignatureValue,
    SigningPayload,
    parse_enum,
    parse_signature_parameters,
)
from brokersign.errors import ServerError

PARAMS = {
    "version": 1,
    "flowType": "ServiceProvider",
    "entityID": "https://sp.example",
    "documentFormat": "PDF",
    "signatureFormat": "PAdES",
    "dtbsDigest": "abc",
    "dtbsDigestAlgorithm": "SHA-256",
    "referenceText": "Contract 42",
    "signerSubjectNameID": "urn:uuid:1234",
    "acceptedCertificatePolicies": ["PERSON"],
}


# ── enums ────────────────────────────────────────────────────────────


def test_parse_enum_case_insensitive():
    assert parse_enum(SignatureFormat, "xades", "signatureFormat") is SignatureFormat.XADES
    assert parse_enum(DocumentFormat, DocumentFormat.XML, "documentFormat") is DocumentFormat.XML
    assert parse_enum(SignatureProfile, " lta ", "profile") is SignatureProfile.LTA


def test_parse_enum_invalid():
    with pytest.raises(ValueError, match="Invalid documentFormat 'DOCX'"):
        parse_enum(DocumentFormat, "DOCX", "documentFormat")


# ── signature parameters ─────────────────────────────────────────────


def test_parse_signature_parameters(make_jws):
    params = parse_signature_parameters(make_jws(PARAMS))
    assert params.document_format is DocumentFormat.PDF
    assert params.signature_format is SignatureFormat.PADES
    assert params.flow_type is FlowType.SERVICE_PROVIDER
    assert params.entity_id == "https://sp.example"
    assert params.reference_text == "Contract 42"
    assert params.signer_subject_name_id == "urn:uuid:1234"
    assert params.version == 1
    assert params.raw["acceptedCertificatePolicies"] == ["PERSON"]


def test_parse_signature_parameters_non_ascii(make_jws):
    params = parse_signature_parameters(make_jws({**PARAMS, "referenceText": "Lejeaftale æøå"}))
    assert params.reference_text == "Lejeaftale æøå"


def test_parse_signature_parameters_not_jws():
    with pytest.raises(ValueError, match="3 segments"):
        parse_signature_parameters("abc.def")


def test_parse_signature_parameters_bad_payload():
    with pytest.raises(ValueError, match="Cannot decode"):
        parse_signature_parameters("aGVhZA.!!!.c2ln")


def test_parse_signature_parameters_missing_format(make_jws):
    with pytest.raises(ValueError, match="signatureFormat"):
        parse_signature_parameters(make_jws({"documentFormat": "PDF"}))


# ── signing payload ──────────────────────────────────────────────────


def test_signing_payload_from_json(make_jws):
    jws = make_jws(PARAMS)
    payload = SigningPayload.from_json(json.dumps({"signatureParameters": jws, "dtbs": "JVBERg=="}))
    assert payload.signature_parameters == jws
    assert payload.dtbs == "JVBERg=="
    assert payload.parameters().signature_format is SignatureFormat.PADES


@pytest.mark.parametrize(
    "text", ["not json", "[]", '{"dtbs": "x"}', '{"signatureParameters": 1, "dtbs": "x"}']
)
def test_signing_payload_invalid(text):
    with pytest.raises(ValueError):
        SigningPayload.from_json(text)


# ── API responses ────────────────────────────────────────────────────


def test_begin_response_session_id():
    assert BeginSignatureFlowResponse.from_json({"signingSessionId": "s1"}).signing_session_id == "s1"
    assert BeginSignatureFlowResponse.from_json({"sessionId": "s2"}).signing_session_id == "s2"


def test_begin_response_without_session_id():
    assert BeginSignatureFlowResponse.from_json({}).signing_session_id is None


def test_issue_certificate_response():
    response = IssueCertificateResponse.from_json({"digestToBeSigned": "48656c6c6f", "sad": "U0FE"})
    assert response.digest_to_be_signed == "48656c6c6f"
    assert response.sad == "U0FE"


def test_issue_certificate_response_missing_sad():
    with pytest.raises(ServerError, match="issue-certificate response is missing 'sad'"):
        IssueCertificateResponse.from_json({"digestToBeSigned": "00"})


def test_signature_value_request():
    value = SignatureValue("AQID")
    assert value.to_request() == {"signatureValue": "AQID"}
    assert str(value) == "AQID"


def test_create_signature_response():
    response = CreateSignatureResponse.from_json({"signedDocument": "JVBERi0="}, "create-pades-ltv")
    assert response.signed_document == "JVBERi0="


def test_create_signature_response_missing_document():
    with pytest.raises(ServerError, match="create-pades-lta response is missing"):
        CreateSignatureResponse.from_json({}, "create-pades-lta")
