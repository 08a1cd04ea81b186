"""
QR code generation for public document links.

WHAT: Encodes a receipt or invoice URL into a PNG QR code and decides what
ends up in ``qr_code_url``.

WHY: The QR step runs after the record is persisted and must never fail the
creation. Fallback order:
1. storage enabled and upload succeeds: the object URL
2. upload fails or storage disabled: a ``data:image/png;base64`` URL
3. encoding itself fails or times out: the raw public URL

HOW: qrcode + Pillow render the image in a worker thread; every external
step runs under its own timeout.
"""

import asyncio
import base64
import io
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import qrcode

from receiptdesk.core.config import settings
from receiptdesk.core.exceptions import QRCodeError, StorageError
from receiptdesk.services.storage_service import ObjectStorage, get_object_storage

logger = logging.getLogger(__name__)

QR_GENERATION_FAILED = "qr_generation_failed"
QR_UPLOAD_FAILED = "qr_upload_failed"


@dataclass
class QRResult:
    """Value to store in ``qr_code_url`` plus any warnings raised on the way."""

    value: str
    warnings: List[str] = field(default_factory=list)


def public_document_url(kind: str, document_id: str) -> str:
    """
    Public page for a document, e.g. ``https://host/receipt/RCP...``.

    Args:
        kind: "receipt" or "invoice"
        document_id: Public identifier
    """
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/{kind}/{document_id}"


def encode_png(data: str) -> bytes:
    """
    Render ``data`` as a PNG QR code.

    Raises:
        QRCodeError: If the payload cannot be encoded
    """
    try:
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(data)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()
    except (ValueError, OSError, qrcode.exceptions.DataOverflowError) as e:
        raise QRCodeError(message="Failed to encode QR code", error=str(e))


def png_data_url(png: bytes) -> str:
    return f"data:image/png;base64,{base64.b64encode(png).decode()}"


class QRCodeService:
    """Generates and stores QR codes for documents."""

    def __init__(
        self,
        storage: Optional[ObjectStorage] = None,
        storage_enabled: Optional[bool] = None,
        timeout: Optional[float] = None,
    ):
        self.storage = storage
        self.storage_enabled = settings.QR_STORAGE_ENABLED if storage_enabled is None else storage_enabled
        self.timeout = settings.QR_TIMEOUT_SECONDS if timeout is None else timeout

    async def encode(self, url: str) -> bytes:
        """
        Encode a URL to PNG bytes under the configured timeout.

        Raises:
            QRCodeError: On encoding failure or timeout
        """
        try:
            return await asyncio.wait_for(asyncio.to_thread(encode_png, url), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise QRCodeError(message="QR code generation timed out")

    async def generate(self, kind: str, document_id: str) -> QRResult:
        """
        Produce the ``qr_code_url`` value for a document. Never raises.

        Args:
            kind: "receipt" or "invoice"
            document_id: Public identifier
        """
        url = public_document_url(kind, document_id)

        try:
            png = await self.encode(url)
        except QRCodeError as e:
            logger.warning(
                f"QR generation failed for {document_id}: {e.message}",
                extra={"document_id": document_id},
            )
            return QRResult(value=url, warnings=[QR_GENERATION_FAILED])

        if not self.storage_enabled:
            return QRResult(value=png_data_url(png))

        storage = self.storage or get_object_storage()
        key = f"qr-codes/{kind}s/{document_id}.png"
        try:
            stored_url = await asyncio.wait_for(
                storage.upload_bytes(key, png, "image/png"),
                timeout=self.timeout,
            )
            return QRResult(value=stored_url)
        except (StorageError, asyncio.TimeoutError):
            logger.warning(
                f"QR upload failed for {document_id}, storing data URL instead",
                extra={"document_id": document_id},
            )
            return QRResult(value=png_data_url(png), warnings=[QR_UPLOAD_FAILED])


_qr_service: Optional[QRCodeService] = None


def get_qr_service() -> QRCodeService:
    global _qr_service
    if _qr_service is None:
        _qr_service = QRCodeService()
    return _qr_service
