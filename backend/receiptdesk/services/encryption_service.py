"""
Field cipher for sensitive sub-documents.

WHAT: Symmetric encryption of JSON payloads into opaque envelopes stored
alongside plaintext columns.

WHY: Client and freelancer contact details, payment detail and invoice line
items are never stored in plaintext. Every receipt and invoice carries one
envelope; reads decrypt it and fail loudly rather than return garbage.

HOW: Uses Fernet (from cryptography library) which provides:
- AES-128-CBC encryption
- HMAC-SHA256 authentication (a wrong key is detected, never silently accepted)
- URL-safe base64 encoding

The configured secret may be any string. A valid Fernet key is used as is;
anything else is stretched to one with HKDF-SHA256.
"""

import base64
import binascii
import json
import logging
from datetime import date, datetime
from decimal import Decimal
from functools import lru_cache
from typing import Any, Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from receiptdesk.core.config import settings
from receiptdesk.core.exceptions import DecryptionError, EncryptionError

logger = logging.getLogger(__name__)

_HKDF_INFO = b"receiptdesk field cipher v1"


def _is_fernet_key(key: str) -> bool:
    try:
        return len(base64.urlsafe_b64decode(key.encode())) == 32
    except (binascii.Error, ValueError):
        return False


@lru_cache(maxsize=16)
def _fernet_for(key: str) -> Fernet:
    """Fernet instance for a secret string (cached per key)."""
    if not key:
        raise EncryptionError(
            message="Encryption key not configured",
            hint="Set ENCRYPTION_KEY environment variable",
        )
    if _is_fernet_key(key):
        return Fernet(key.encode())

    derived = HKDF(
        algorithm=hashes.SHA256(),
        length=32,
        salt=None,
        info=_HKDF_INFO,
    ).derive(key.encode())
    return Fernet(base64.urlsafe_b64encode(derived))


def encrypt(plaintext: str, key: str) -> str:
    """
    Encrypt a string into an envelope.

    Args:
        plaintext: The string to encrypt (may be empty)
        key: Secret string

    Returns:
        URL-safe base64 token

    Raises:
        EncryptionError: If plaintext is None or the key is missing
    """
    if plaintext is None:
        raise EncryptionError(message="Cannot encrypt a missing value")
    return _fernet_for(key).encrypt(plaintext.encode("utf-8")).decode("ascii")


def decrypt(token: str, key: str) -> str:
    """
    Decrypt an envelope back to its plaintext string.

    Raises:
        DecryptionError: If the token is empty, malformed, tampered with,
            or was produced under a different key
    """
    if not token:
        raise DecryptionError(message="Cannot decrypt empty value")

    try:
        return _fernet_for(key).decrypt(token.encode("ascii")).decode("utf-8")
    except (InvalidToken, UnicodeError):
        logger.warning("Decryption failed: invalid token or wrong key")
        raise DecryptionError(
            message="Failed to decrypt data",
            hint="Invalid token - data may be corrupted or key changed",
        )


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class FieldCipher:
    """
    Encrypts and decrypts JSON payloads under one process-wide key.

    Security notes:
    - Never log plaintext payloads or envelopes
    - Invalid envelopes raise DecryptionError (no silent failures)

    Example:
        cipher = FieldCipher("my secret")
        envelope = cipher.encrypt_payload({"clientInfo": {"name": "Sam"}})
        cipher.decrypt_payload(envelope)["clientInfo"]["name"]  # "Sam"
    """

    def __init__(self, key: str):
        if not key:
            logger.error("Encryption key not configured")
            raise EncryptionError(
                message="Encryption key not configured",
                hint="Set ENCRYPTION_KEY environment variable",
            )
        self._key = key
        # Fail at construction, not on first record
        _fernet_for(key)

    def encrypt(self, plaintext: str) -> str:
        return encrypt(plaintext, self._key)

    def decrypt(self, token: str) -> str:
        return decrypt(token, self._key)

    def encrypt_payload(self, payload: Any) -> str:
        """
        Serialize ``payload`` to JSON and encrypt it.

        Dates become ISO strings and Decimals become floats.
        """
        try:
            serialized = json.dumps(payload, sort_keys=True, default=_json_default)
        except (TypeError, ValueError) as e:
            raise EncryptionError(message="Payload is not JSON serializable", error=str(e))
        return self.encrypt(serialized)

    def decrypt_payload(self, envelope: str) -> Any:
        """
        Decrypt an envelope and parse the JSON inside.

        Raises:
            DecryptionError: If decryption fails or the plaintext is not JSON
        """
        plaintext = self.decrypt(envelope)
        try:
            return json.loads(plaintext)
        except json.JSONDecodeError:
            logger.error("Decrypted envelope is not valid JSON")
            raise DecryptionError(message="Stored data is corrupted")

    @staticmethod
    def generate_key() -> str:
        """
        Generate a new random Fernet key for ENCRYPTION_KEY.

        Returns:
            URL-safe base64-encoded 32-byte key (44 characters)
        """
        return Fernet.generate_key().decode()


# =============================================================================
# Module-level instance
# =============================================================================

_field_cipher: Optional[FieldCipher] = None


def get_field_cipher() -> FieldCipher:
    """
    Get or create the process-wide cipher built from settings.ENCRYPTION_KEY.

    Returns:
        FieldCipher instance
    """
    global _field_cipher

    if _field_cipher is None:
        _field_cipher = FieldCipher(settings.ENCRYPTION_KEY)

    return _field_cipher
