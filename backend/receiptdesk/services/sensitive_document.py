"""
Shapes, required fields and read-side defaults of the encrypted sub-documents.

WHAT: Describes what lives inside a receipt or invoice envelope, which
leaves are mandatory on create, and the fallback value of every leaf.

WHY: Envelopes written by older versions may lack whole sections or single
fields. Readers must never see a partial object, so the decrypted payload is
merged leaf by leaf with a complete default shape before it is returned.
The freelancer fallback comes from configuration, never from code.
"""

import copy
from typing import Any, Dict, Iterable, List, Mapping, Optional

from receiptdesk.core.config import settings
from receiptdesk.core.exceptions import ValidationError


RECEIPT_SECTIONS = ("clientInfo", "freelancerInfo", "paymentInfo", "projectDetails")
INVOICE_SECTIONS = ("clientInfo", "freelancerInfo", "items", "paymentInfo", "notes")

RECEIPT_REQUIRED_FIELDS = (
    "clientInfo.name",
    "clientInfo.email",
    "clientInfo.phone",
    "clientInfo.address",
    "freelancerInfo.name",
    "freelancerInfo.email",
    "freelancerInfo.phone",
    "freelancerInfo.address",
    "projectDetails.title",
    "projectDetails.description",
    "paymentInfo.amount",
    "paymentInfo.currency",
    "paymentInfo.method",
    "paymentInfo.status",
)

INVOICE_REQUIRED_FIELDS = (
    "clientInfo.name",
    "clientInfo.email",
    "freelancerInfo.name",
    "freelancerInfo.email",
)

ITEM_REQUIRED_FIELDS = ("description", "quantity", "rate")


def fallback_freelancer_info() -> Dict[str, Any]:
    return dict(settings.freelancer_info)


def receipt_defaults() -> Dict[str, Any]:
    """Complete default shape of a decrypted receipt payload."""
    return {
        "clientInfo": {
            "name": "N/A",
            "email": "N/A",
            "phone": "N/A",
            "address": "N/A",
        },
        "freelancerInfo": fallback_freelancer_info(),
        "projectDetails": {
            "title": "N/A",
            "description": "N/A",
            "technologies": [],
            "deliverables": [],
            "websiteUrl": "",
        },
        "paymentInfo": {
            "amount": 0,
            "currency": "USD",
            "method": "N/A",
            "status": "pending",
            "dueDate": "",
        },
    }


def invoice_defaults() -> Dict[str, Any]:
    """Complete default shape of a decrypted invoice payload."""
    return {
        "clientInfo": {
            "name": "N/A",
            "email": "N/A",
            "phone": "N/A",
            "address": "N/A",
            "companyName": "",
            "taxId": "",
        },
        "freelancerInfo": fallback_freelancer_info(),
        "items": [],
        "paymentInfo": {
            "method": "N/A",
            "transactionId": "",
            "paidDate": "",
        },
        "notes": "",
    }


def item_defaults() -> Dict[str, Any]:
    return {
        "description": "N/A",
        "quantity": 0,
        "rate": 0,
        "amount": 0,
        "taxRate": 0,
        "taxAmount": 0,
    }


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def merge_with_defaults(data: Any, defaults: Any) -> Any:
    """
    Merge ``data`` over ``defaults`` leaf by leaf.

    - dict defaults recurse; a non-dict value in ``data`` is discarded
    - list defaults keep ``data`` only if it is a list
    - scalar defaults replace None or blank strings
    - keys present only in ``data`` are preserved

    The result always contains every leaf of ``defaults``.
    """
    if isinstance(defaults, dict):
        source = data if isinstance(data, dict) else {}
        merged = {key: merge_with_defaults(source.get(key), value) for key, value in defaults.items()}
        for key, value in source.items():
            if key not in merged:
                merged[key] = copy.deepcopy(value)
        return merged
    if isinstance(defaults, list):
        return copy.deepcopy(data) if isinstance(data, list) else list(defaults)
    if _is_blank(data) or isinstance(data, (dict, list)):
        return defaults
    return data


def merge_receipt_payload(payload: Any) -> Dict[str, Any]:
    return merge_with_defaults(payload, receipt_defaults())


def merge_invoice_payload(payload: Any) -> Dict[str, Any]:
    merged = merge_with_defaults(payload, invoice_defaults())
    merged["items"] = [merge_with_defaults(item, item_defaults()) for item in merged["items"]]
    return merged


def _lookup(data: Mapping[str, Any], dotted: str) -> Any:
    current: Any = data
    for part in dotted.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def find_missing_fields(data: Mapping[str, Any], required: Iterable[str]) -> List[str]:
    """Dotted paths in ``required`` that are absent or blank in ``data``."""
    return [path for path in required if _is_blank(_lookup(data, path))]


def require_fields(
    data: Mapping[str, Any],
    required: Iterable[str],
    document: str,
    extra_missing: Optional[List[str]] = None,
) -> None:
    """
    Raise ValidationError listing every missing required field.

    Raises:
        ValidationError: With ``missing_fields`` in its context
    """
    missing = find_missing_fields(data, required) + list(extra_missing or [])
    if missing:
        raise ValidationError(
            message=f"Missing required {document} fields: {', '.join(missing)}",
            missing_fields=missing,
        )


def pick_sections(data: Mapping[str, Any], sections: Iterable[str]) -> Dict[str, Any]:
    """The envelope payload: only the named sections of ``data``."""
    return {section: copy.deepcopy(data.get(section)) for section in sections if section in data}
