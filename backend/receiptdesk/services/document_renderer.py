"""
Template variables and HTML rendering for receipts and invoices.

WHAT: Builds the flat string variable maps that templates consume, and
renders a document through the default Template of its type.

WHY: The template engine only substitutes strings. All formatting (amounts,
dates, the invoice line-item table) happens here so that receipt pages,
invoice pages and notification emails agree on how values look.
"""

import html
from typing import Any, Dict, Iterable, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from receiptdesk.core.exceptions import ResourceNotFoundError
from receiptdesk.dao.template import TemplateDAO
from receiptdesk.models.template import TemplateType
from receiptdesk.services.template_engine import format_amount, format_date, render


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _html_safe(variables: Dict[str, str], markup: Iterable[str] = ()) -> Dict[str, str]:
    """
    Escape every value for HTML text and attribute positions.

    Client and freelancer text is user supplied and the rendered pages are
    public. Names in ``markup`` are trusted HTML built in this module.
    """
    trusted = set(markup)
    return {name: value if name in trusted else html.escape(value) for name, value in variables.items()}


def items_table_html(items: Iterable[Mapping[str, Any]], currency: str) -> str:
    """
    Pre-rendered ``<table>`` of invoice line items.

    WHY: Templates cannot iterate; the whole table is one variable.
    """
    rows = []
    for item in items:
        rows.append(
            "<tr>"
            f"<td>{html.escape(_text(item.get('description')))}</td>"
            f"<td>{html.escape(_text(item.get('quantity')))}</td>"
            f"<td>{format_amount(item.get('rate'))}</td>"
            f"<td>{_text(item.get('taxRate') or 0)}%</td>"
            f"<td>{format_amount(item.get('amount'))} {html.escape(currency)}</td>"
            "</tr>"
        )
    return (
        '<table class="items">'
        "<thead><tr><th>Description</th><th>Qty</th><th>Rate</th><th>Tax</th><th>Amount</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody>"
        "</table>"
    )


def receipt_variables(view: Mapping[str, Any], public_url: str = "") -> Dict[str, str]:
    """
    Variables for receipt templates and ``receipt_sent`` emails.

    Values are HTML-escaped.

    Args:
        view: Decrypted receipt view (see ReceiptService.get_receipt)
        public_url: Public receipt page
    """
    client = view.get("clientInfo", {})
    freelancer = view.get("freelancerInfo", {})
    project = view.get("projectDetails", {})
    payment = view.get("paymentInfo", {})
    return _html_safe({
        "receiptId": _text(view.get("receiptId")),
        "date": format_date(view.get("date")),
        "clientName": _text(client.get("name")),
        "clientEmail": _text(client.get("email")),
        "clientPhone": _text(client.get("phone")),
        "clientAddress": _text(client.get("address")),
        "freelancerName": _text(freelancer.get("name")),
        "freelancerEmail": _text(freelancer.get("email")),
        "freelancerPhone": _text(freelancer.get("phone")),
        "freelancerAddress": _text(freelancer.get("address")),
        "freelancerWebsite": _text(freelancer.get("website")),
        "projectTitle": _text(project.get("title")),
        "projectDescription": _text(project.get("description")),
        "technologies": ", ".join(_text(t) for t in project.get("technologies") or []),
        "deliverables": ", ".join(_text(d) for d in project.get("deliverables") or []),
        "amount": format_amount(payment.get("amount")),
        "currency": _text(payment.get("currency")),
        "paymentMethod": _text(payment.get("method")),
        "paymentStatus": _text(payment.get("status")),
        "receiptUrl": public_url,
        "qrCodeUrl": _text(view.get("qrCodeUrl")),
    })


def invoice_variables(view: Mapping[str, Any], public_url: str = "") -> Dict[str, str]:
    """Variables for invoice templates and ``invoice_sent`` emails (escaped like receipt_variables)."""
    client = view.get("clientInfo", {})
    freelancer = view.get("freelancerInfo", {})
    payment = view.get("paymentInfo", {})
    currency = _text(view.get("currency"))
    return _html_safe({
        "invoiceId": _text(view.get("invoiceId")),
        "date": format_date(view.get("date")),
        "dueDate": format_date(view.get("dueDate")),
        "status": _text(view.get("status")),
        "paymentTerms": _text(view.get("paymentTerms")),
        "clientName": _text(client.get("name")),
        "clientEmail": _text(client.get("email")),
        "clientPhone": _text(client.get("phone")),
        "clientAddress": _text(client.get("address")),
        "clientCompany": _text(client.get("companyName")),
        "freelancerName": _text(freelancer.get("name")),
        "freelancerEmail": _text(freelancer.get("email")),
        "freelancerPhone": _text(freelancer.get("phone")),
        "freelancerAddress": _text(freelancer.get("address")),
        "currency": currency,
        "subtotal": format_amount(view.get("subtotal")),
        "taxTotal": format_amount(view.get("taxTotal")),
        "total": format_amount(view.get("total")),
        "itemsTable": items_table_html(view.get("items") or [], currency),
        "paymentMethod": _text(payment.get("method")),
        "notes": _text(view.get("notes")),
        "invoiceUrl": public_url,
        "qrCodeUrl": _text(view.get("qrCodeUrl")),
    }, markup=("itemsTable",))


def wrap_html(body: str, css: Optional[str]) -> str:
    """Wrap a rendered template body into a standalone HTML page."""
    style = f"<style>{css}</style>" if css else ""
    return f'<!DOCTYPE html><html><head><meta charset="utf-8">{style}</head><body>{body}</body></html>'


class DocumentRenderer:
    """Renders documents through the default Template of their type."""

    def __init__(self, session: AsyncSession):
        self.template_dao = TemplateDAO(session)

    async def render_html(self, template_type: TemplateType, variables: Mapping[str, str]) -> str:
        """
        Render with the default active template of ``template_type``.

        Raises:
            ResourceNotFoundError: If no default template exists for the type
        """
        template = await self.template_dao.get_default(template_type.value)
        if template is None:
            raise ResourceNotFoundError(
                message=f"No default {template_type.value} template configured",
                template_type=template_type.value,
            )
        return wrap_html(render(template.html_template, variables), template.css_styles)
