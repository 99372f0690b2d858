"""Payload validation tests — pure functions, no app or database."""

import pytest

from provisioning.errors import MalformedInput
from provisioning.utils.validators import (
    normalize_lookup_username,
    validate_credentials,
    validate_new_client,
    validate_new_user,
)


# --- validate_new_user ----------------------------------------------------------

def test_new_user_returns_fields_unchanged():
    assert validate_new_user({"username": " Alice ", "password": "Secret1"}) == (" Alice ", "Secret1")


@pytest.mark.parametrize("payload", [
    {},
    {"username": "alice"},
    {"password": "pw"},
    {"username": "", "password": "pw"},
    {"username": "alice", "password": ""},
    {"username": None, "password": "pw"},
])
def test_new_user_requires_truthy_fields(payload):
    with pytest.raises(MalformedInput, match="Both username and password are required"):
        validate_new_user(payload)


def test_new_user_stringifies_non_string_values():
    assert validate_new_user({"username": "dave", "password": 12345}) == ("dave", "12345")


def test_new_user_rejects_overlong_username():
    with pytest.raises(MalformedInput, match="at most 8 characters"):
        validate_new_user({"username": "x" * 9, "password": "pw"}, max_username_length=8)


# --- validate_new_client --------------------------------------------------------

def test_new_client_accepts_exact_status():
    payload = {"status": "CREATION_SUCCESS", "account_id": "A1", "name": "bob"}
    assert validate_new_client(payload) == ("CREATION_SUCCESS", "A1", "bob")


@pytest.mark.parametrize("payload", [
    {"status": "creation_success", "account_id": "A1", "name": "bob"},
    {"status": "CREATION_FAILED", "account_id": "A1", "name": "bob"},
    {"status": "CREATION_SUCCESS", "name": "bob"},
    {"status": "CREATION_SUCCESS", "account_id": "A1", "name": ""},
])
def test_new_client_rejects_invalid_payload(payload):
    with pytest.raises(MalformedInput, match="Invalid data format!"):
        validate_new_client(payload)


def test_new_client_uses_configured_status():
    payload = {"status": "DONE", "account_id": "A1", "name": "bob"}
    assert validate_new_client(payload, expected_status="DONE")[0] == "DONE"


# --- validate_credentials -------------------------------------------------------

def test_credentials_are_trimmed():
    assert validate_credentials({"username": "  bob ", "password": " pw1\t"}) == ("bob", "pw1")


@pytest.mark.parametrize("payload", [
    {"username": 1, "password": "pw"},
    {"username": "bob", "password": None},
    {"username": "bob"},
])
def test_credentials_must_be_strings(payload):
    with pytest.raises(MalformedInput, match="must be strings"):
        validate_credentials(payload)


def test_credentials_empty_after_trim_rejected():
    with pytest.raises(MalformedInput, match="are required"):
        validate_credentials({"username": "   ", "password": "pw"})


# --- normalize_lookup_username --------------------------------------------------

def test_lookup_username_trimmed_and_lowercased():
    assert normalize_lookup_username("  BoB ") == "bob"


@pytest.mark.parametrize("raw", [None, ""])
def test_lookup_username_required(raw):
    with pytest.raises(MalformedInput, match="Username is required"):
        normalize_lookup_username(raw)


def test_lookup_whitespace_only_normalizes_to_empty():
    assert normalize_lookup_username("   ") == ""
