"""
Tests for the overdue-invoice scheduler.
"""

from datetime import datetime, timedelta

import pytest

from receiptdesk.dao.invoice import InvoiceDAO
from receiptdesk.services import scheduler
from receiptdesk.services.invoice_service import InvoiceService
from receiptdesk.services.qr_service import QRCodeService
from tests.factories import invoice_payload


class TestOverdueSweep:
    @pytest.mark.asyncio
    async def test_sweep_commits_in_own_session(self, session_factory, monkeypatch):
        monkeypatch.setattr(scheduler, "get_session_factory", lambda: session_factory)
        issued = (datetime.utcnow() - timedelta(days=60)).replace(microsecond=0)

        async with session_factory() as session:
            invoice = await InvoiceService(
                session, qr_service=QRCodeService(storage_enabled=False)
            ).create_invoice(invoice_payload(status="sent", date=issued.isoformat()), send_email=False)
            await session.commit()

        assert await scheduler.run_overdue_sweep() == 1

        async with session_factory() as session:
            stored = await InvoiceDAO(session).get_by_invoice_id(invoice.invoice_id)
            assert stored.status == "overdue"

        assert await scheduler.run_overdue_sweep() == 0


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_status_before_start(self):
        status = scheduler.get_scheduler_status()
        assert status["running"] is False
        assert status["jobs"] == []

    @pytest.mark.asyncio
    async def test_start_and_shutdown(self):
        await scheduler.start_scheduler()
        try:
            status = scheduler.get_scheduler_status()
            assert status["running"] is True
            assert [job["id"] for job in status["jobs"]] == [scheduler.OVERDUE_JOB_ID]
        finally:
            await scheduler.shutdown_scheduler()

        assert scheduler.get_scheduler() is None
