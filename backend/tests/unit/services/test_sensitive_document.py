"""
Unit tests for envelope shapes, required fields and read-side defaults.
"""

import pytest

from receiptdesk.core.config import settings
from receiptdesk.core.exceptions import ValidationError
from receiptdesk.services.sensitive_document import (
    RECEIPT_REQUIRED_FIELDS,
    RECEIPT_SECTIONS,
    find_missing_fields,
    merge_invoice_payload,
    merge_receipt_payload,
    merge_with_defaults,
    pick_sections,
    require_fields,
)
from tests.factories import receipt_payload


class TestMergeWithDefaults:
    def test_missing_sections_are_filled(self):
        merged = merge_receipt_payload({})
        assert merged["clientInfo"]["name"] == "N/A"
        assert merged["projectDetails"]["technologies"] == []
        assert merged["paymentInfo"]["status"] == "pending"

    def test_freelancer_fallback_comes_from_settings(self):
        merged = merge_receipt_payload({"clientInfo": {"name": "Sam"}})
        assert merged["freelancerInfo"]["name"] == settings.FREELANCER_NAME
        assert merged["freelancerInfo"]["email"] == settings.FREELANCER_EMAIL

    def test_partial_section_keeps_given_leaves(self):
        merged = merge_receipt_payload({"clientInfo": {"name": "Sam", "email": ""}})
        assert merged["clientInfo"]["name"] == "Sam"
        assert merged["clientInfo"]["email"] == "N/A"
        assert merged["clientInfo"]["phone"] == "N/A"

    def test_extra_keys_are_preserved(self):
        merged = merge_receipt_payload({"clientInfo": {"name": "Sam", "vatNumber": "X1"}})
        assert merged["clientInfo"]["vatNumber"] == "X1"

    def test_wrong_types_fall_back(self):
        merged = merge_with_defaults({"a": "text", "b": {"x": 1}}, {"a": {"x": 0}, "b": []})
        assert merged == {"a": {"x": 0}, "b": []}

    def test_zero_is_not_blank(self):
        merged = merge_receipt_payload({"paymentInfo": {"amount": 0, "currency": "EUR"}})
        assert merged["paymentInfo"]["amount"] == 0
        assert merged["paymentInfo"]["currency"] == "EUR"

    def test_invoice_items_are_merged_individually(self):
        merged = merge_invoice_payload({"items": [{"description": "Design", "quantity": 2}]})
        assert merged["items"] == [
            {"description": "Design", "quantity": 2, "rate": 0, "amount": 0, "taxRate": 0, "taxAmount": 0}
        ]
        assert merged["notes"] == ""

    def test_defaults_are_not_shared_between_calls(self):
        first = merge_receipt_payload({})
        first["projectDetails"]["technologies"].append("mutated")
        assert merge_receipt_payload({})["projectDetails"]["technologies"] == []


class TestRequiredFields:
    def test_complete_payload_passes(self):
        assert find_missing_fields(receipt_payload(), RECEIPT_REQUIRED_FIELDS) == []

    def test_lists_every_missing_path(self):
        data = receipt_payload(clientInfo={"name": "Sam", "email": " "})
        missing = find_missing_fields(data, RECEIPT_REQUIRED_FIELDS)
        assert missing == ["clientInfo.email", "clientInfo.phone", "clientInfo.address"]

    def test_require_fields_raises_with_paths(self):
        data = receipt_payload()
        del data["paymentInfo"]
        with pytest.raises(ValidationError) as exc_info:
            require_fields(data, RECEIPT_REQUIRED_FIELDS, "receipt")
        assert exc_info.value.missing_fields == [
            "paymentInfo.amount",
            "paymentInfo.currency",
            "paymentInfo.method",
            "paymentInfo.status",
        ]

    def test_extra_missing_is_appended(self):
        with pytest.raises(ValidationError) as exc_info:
            require_fields(receipt_payload(), RECEIPT_REQUIRED_FIELDS, "receipt", ["items"])
        assert exc_info.value.missing_fields == ["items"]


def test_pick_sections_drops_other_keys():
    data = {**receipt_payload(), "date": "2026-01-01", "sendEmail": True}
    picked = pick_sections(data, RECEIPT_SECTIONS)
    assert set(picked) == set(RECEIPT_SECTIONS)
