"""
Custom exception hierarchy for structured error handling.

WHY: Custom exceptions provide:
1. Consistent error handling across the API
2. HTTP status code mapping for FastAPI
3. Structured error responses with contextual data
4. No sensitive data (keys, envelopes, decrypted payloads) in error messages

Propagation policy:
- ValidationError and AuthError abort the operation immediately.
- DecryptionError aborts a read with an internal error; it is never swallowed.
- DependencyError raised by a secondary workflow step (QR, email, client link)
  is caught by the workflow, logged, and recorded as a warning on the record.
"""

from typing import Any, Dict, List, Optional


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    All custom exceptions inherit from this class so the exception handlers
    in ``receiptdesk.core.exception_handlers`` can map them to responses.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        """
        Initialize exception with message and context.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (overrides class default)
            **context: Additional context for debugging (filtered in to_dict)
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for JSON response.

        Returns:
            Dictionary with error details (sensitive fields filtered out)
        """
        sensitive_fields = {
            "password",
            "token",
            "secret",
            "key",
            "api_key",
            "plaintext",
            "envelope",
        }
        filtered_context = {
            k: v for k, v in self.context.items() if k.lower() not in sensitive_fields
        }

        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": filtered_context if filtered_context else None,
        }


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthError(AppException):
    """
    Raised when a credential is missing, expired or has an invalid signature.

    HTTP Status: 401 Unauthorized
    """

    status_code = 401
    default_message = "Authentication failed"


class TokenExpiredError(AuthError):
    """Raised when the JWT has expired."""

    default_message = "Token has expired"


class TokenInvalidError(AuthError):
    """Raised when the JWT is malformed or its signature does not verify."""

    default_message = "Token is invalid"


class AuthorizationError(AppException):
    """
    Raised when valid claims lack permission for an action.

    WHY: Distinguishing 403 from 401 lets a client tell "log in again"
    from "you are not an admin".

    HTTP Status: 403 Forbidden
    """

    status_code = 403
    default_message = "You do not have permission to perform this action"


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(AppException):
    """
    Raised when required input is missing or malformed.

    The ``missing_fields`` context lists dotted paths such as
    ``clientInfo.email`` so the caller can correct the submission.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Validation failed"

    @property
    def missing_fields(self) -> List[str]:
        return list(self.context.get("missing_fields", []))


# ============================================================================
# Resource Exceptions
# ============================================================================


class ResourceNotFoundError(AppException):
    """
    Raised when an identifier does not resolve to an active record.

    WHY: Soft-deleted records are reported exactly like missing ones.

    HTTP Status: 404 Not Found
    """

    status_code = 404
    default_message = "Resource not found"


class ResourceAlreadyExistsError(AppException):
    """
    Raised when a uniqueness constraint would be violated.

    HTTP Status: 409 Conflict
    """

    status_code = 409
    default_message = "Resource already exists"


class ReceiptNotFoundError(ResourceNotFoundError):
    default_message = "Receipt not found"


class InvoiceNotFoundError(ResourceNotFoundError):
    default_message = "Invoice not found"


class ClientNotFoundError(ResourceNotFoundError):
    default_message = "Client not found"


# ============================================================================
# Encryption Exceptions
# ============================================================================


class EncryptionError(AppException):
    """
    Raised when encryption or decryption operations fail.

    WHY: Messages stay generic so nothing leaks about the key or the payload.

    HTTP Status: 500 Internal Server Error
    """

    status_code = 500
    default_message = "Encryption operation failed"


class DecryptionError(EncryptionError):
    """
    Raised when an envelope cannot be decrypted or parsed back to JSON.

    Indicates data corruption or a key mismatch; surfaced as an internal
    error on the read path rather than returning partial data.
    """

    default_message = "Failed to decrypt stored data"


# ============================================================================
# Dependency Exceptions (secondary steps: QR, email, object storage)
# ============================================================================


class DependencyError(AppException):
    """
    Raised when an external collaborator fails.

    HTTP Status: 502 Bad Gateway (only when surfaced directly; workflow
    steps record these as warnings instead)
    """

    status_code = 502
    default_message = "External service error"


class QRCodeError(DependencyError):
    default_message = "QR code generation failed"


class StorageError(DependencyError):
    default_message = "Object storage error"
