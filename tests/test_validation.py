"""Tests for whitelist record validation (pure, no database)."""

import pytest

from app.services.validation import (
    Accepted,
    Rejected,
    Skipped,
    coerce_bool,
    validate_candidate,
    whitelist_doc_id,
)


def test_accepts_and_normalises_record():
    verdict = validate_candidate(
        {"name": "  Ann ", "email": " Ann@Example.COM ", "userId": " u1 ", "deviceId": " d1 "},
        4,
    )
    assert isinstance(verdict, Accepted)
    record = verdict.record
    assert record.name == "Ann"
    assert record.email == "ann@example.com"
    assert record.user_id == "u1"
    assert record.device_id == "d1"
    assert record.is_active is True
    assert record.row_number == 4


def test_missing_email_gets_placeholder():
    verdict = validate_candidate({"name": "Bob", "userId": "u2", "deviceId": "d2"}, 1)
    assert isinstance(verdict, Accepted)
    assert verdict.record.email == "no-email-u2@placeholder.local"


def test_snake_case_keys_are_accepted():
    verdict = validate_candidate(
        {"name": "Cy", "user_id": "u3", "device_id": "d3", "is_active": False}, 1
    )
    assert isinstance(verdict, Accepted)
    assert verdict.record.user_id == "u3"
    assert verdict.record.is_active is False


@pytest.mark.parametrize(
    "raw, reason",
    [
        ({"name": "   ", "userId": "u1", "deviceId": "d1"}, "Name is required"),
        ({"name": "Ann", "email": "not-an-email", "userId": "u1", "deviceId": "d1"}, "Valid email is required"),
        ({"name": "Ann", "userId": " ", "deviceId": "d1"}, "User ID is required"),
        ({"name": "Ann", "userId": "u1"}, "Device ID is required"),
    ],
)
def test_rejections(raw, reason):
    verdict = validate_candidate(raw, 1)
    assert verdict == Rejected(reason)


def test_rules_apply_in_order():
    """An empty name is reported even when every other field is broken too."""
    verdict = validate_candidate({"name": "", "email": "bad", "userId": "", "deviceId": ""}, 1)
    assert verdict == Rejected("Name is required")


def test_batch_duplicate_is_skipped_not_rejected():
    verdict = validate_candidate({"name": "Ann2", "userId": "u1", "deviceId": "d2"}, 2, {"u1"})
    assert verdict == Skipped('Duplicate userId "u1" in import file')


def test_invalid_row_is_rejected_before_duplicate_check():
    verdict = validate_candidate({"name": "", "userId": "u1", "deviceId": "d2"}, 2, {"u1"})
    assert isinstance(verdict, Rejected)


def test_seen_set_is_not_modified():
    seen = {"u9"}
    validate_candidate({"name": "Ann", "userId": "u1", "deviceId": "d1"}, 1, seen)
    assert seen == {"u9"}


def test_non_mapping_row_is_rejected():
    assert validate_candidate(["Ann", "u1", "d1"], 1) == Rejected("Record must be an object")


def test_numeric_fields_are_stringified():
    verdict = validate_candidate({"name": "Num", "userId": 12345, "deviceId": 7}, 1)
    assert isinstance(verdict, Accepted)
    assert verdict.record.user_id == "12345"
    assert verdict.record.device_id == "7"


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, True),
        (True, True),
        (False, False),
        ("false", False),
        ("FALSE", False),
        ("0", False),
        ("no", False),
        ("", False),
        ("true", True),
        ("yes", True),
        (1, True),
        (0, False),
    ],
)
def test_coerce_bool(value, expected):
    assert coerce_bool(value) is expected


def test_doc_id_replaces_unsafe_characters():
    assert whitelist_doc_id("user.one@x/y") == "user_one_x_y"
    assert whitelist_doc_id("Safe-id_01") == "Safe-id_01"
