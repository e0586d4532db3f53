import hashlib

import pytest

from shared.security import compute_signature, verify_signature

KEY = "SB-Mid-server-test-key"
FIELDS = {"order_id": "ORDER-1", "status_code": "200", "gross_amount": "150000.00"}


def test_digest_is_sha512_of_concatenated_fields():
    expected = hashlib.sha512(b"ORDER-1200150000.00" + KEY.encode()).hexdigest()

    assert compute_signature("ORDER-1", "200", "150000.00", KEY) == expected
    assert len(expected) == 128


def test_valid_signature_is_accepted():
    signature = compute_signature(server_key=KEY, **FIELDS)

    assert verify_signature(signature_key=signature, server_key=KEY, **FIELDS)


@pytest.mark.parametrize("field", ["order_id", "status_code", "gross_amount"])
def test_any_altered_field_is_rejected(field):
    signature = compute_signature(server_key=KEY, **FIELDS)
    altered = dict(FIELDS, **{field: FIELDS[field] + "0"})

    assert not verify_signature(signature_key=signature, server_key=KEY, **altered)


def test_wrong_server_key_is_rejected():
    signature = compute_signature(server_key="another-key", **FIELDS)

    assert not verify_signature(signature_key=signature, server_key=KEY, **FIELDS)


def test_serialization_is_exact():
    # "150000.00" and "150000" are different payloads to the gateway
    signature = compute_signature("ORDER-1", "200", "150000", KEY)

    assert not verify_signature(signature_key=signature, server_key=KEY, **FIELDS)


@pytest.mark.parametrize("signature", [None, "", "é" * 128])
def test_missing_or_garbage_signature_is_rejected(signature):
    assert not verify_signature(signature_key=signature, server_key=KEY, **FIELDS)


def test_uppercase_digest_is_rejected():
    signature = compute_signature(server_key=KEY, **FIELDS).upper()

    assert not verify_signature(signature_key=signature, server_key=KEY, **FIELDS)


def test_missing_fields_or_key_are_rejected():
    signature = compute_signature(server_key=KEY, **FIELDS)

    assert not verify_signature(None, "200", "150000.00", signature, KEY)
    assert not verify_signature(signature_key=signature, server_key="", **FIELDS)
