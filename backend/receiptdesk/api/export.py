"""
Export API endpoint.

WHAT: Downloads receipts or invoices as QuickBooks JSON, Xero JSON or CSV.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.auth import TokenClaims
from receiptdesk.core.deps import require_admin
from receiptdesk.db.session import get_db
from receiptdesk.services.export_service import ExportFormat, ExportKind, ExportService


router = APIRouter(prefix="/export", tags=["export"])


@router.get("", summary="Export receipts or invoices", response_class=Response)
async def export_documents(
    kind: ExportKind = Query(..., alias="type"),
    fmt: ExportFormat = Query(..., alias="format"),
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """
    Raises:
        ResourceNotFoundError (404): Nothing dated within the range
    """
    export = await ExportService(db).export(kind, fmt, start_date, end_date)
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
