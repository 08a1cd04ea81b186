"""Seed data installed by MaintenanceService.seed_defaults."""

DEFAULT_CURRENCIES = [
    {"code": "USD", "name": "US Dollar", "symbol": "$", "exchange_rate": 1.0},
    {"code": "EUR", "name": "Euro", "symbol": "€", "exchange_rate": 0.85},
    {"code": "GBP", "name": "British Pound", "symbol": "£", "exchange_rate": 0.73},
    {"code": "CAD", "name": "Canadian Dollar", "symbol": "C$", "exchange_rate": 1.25},
    {"code": "AUD", "name": "Australian Dollar", "symbol": "A$", "exchange_rate": 1.35},
    {"code": "INR", "name": "Indian Rupee", "symbol": "₹", "exchange_rate": 87.44},
    {"code": "JPY", "name": "Japanese Yen", "symbol": "¥", "exchange_rate": 110.0},
]

RECEIPT_TEMPLATE = {
    "name": "Standard Receipt Template",
    "type": "receipt",
    "html_template": """
<div class="document">
  <header><h1>RECEIPT</h1><p>Receipt #{{receiptId}}</p></header>
  <section class="parties">
    <div><h3>FROM</h3><p><strong>{{freelancerName}}</strong></p><p>{{freelancerEmail}}</p>
      <p>{{freelancerPhone}}</p><p>{{freelancerAddress}}</p></div>
    <div><h3>TO</h3><p><strong>{{clientName}}</strong></p><p>{{clientEmail}}</p>
      <p>{{clientPhone}}</p><p>{{clientAddress}}</p></div>
  </section>
  <section class="project">
    <h3>PROJECT DETAILS</h3><h4>{{projectTitle}}</h4><p>{{projectDescription}}</p>
    <p><strong>Date:</strong> {{date}}</p>
  </section>
  <section class="total">
    <h3>TOTAL AMOUNT</h3><p class="amount">{{amount}} {{currency}}</p>
    <p>Payment Status: {{paymentStatus}}</p>
  </section>
  <footer><img src="{{qrCodeUrl}}" alt="QR code" /><p>{{receiptUrl}}</p></footer>
</div>
""".strip(),
    "css_styles": (
        ".document{max-width:800px;margin:0 auto;padding:40px 20px;font-family:Arial,sans-serif}"
        ".parties{display:grid;grid-template-columns:1fr 1fr;gap:40px}"
        ".total{background:#2563eb;color:#fff;padding:20px;text-align:center}"
    ),
    "fields": [
        {"name": "receiptId", "type": "text", "required": True, "label": "Receipt ID"},
        {"name": "clientName", "type": "text", "required": True, "label": "Client Name"},
        {"name": "projectTitle", "type": "text", "required": True, "label": "Project Title"},
        {"name": "amount", "type": "number", "required": True, "label": "Amount"},
    ],
}

INVOICE_TEMPLATE = {
    "name": "Standard Invoice Template",
    "type": "invoice",
    "html_template": """
<div class="document">
  <header><h1>INVOICE</h1><p>Invoice #{{invoiceId}}</p></header>
  <section class="parties">
    <div><h3>FROM</h3><p><strong>{{freelancerName}}</strong></p><p>{{freelancerAddress}}</p></div>
    <div><h3>TO</h3><p><strong>{{clientName}}</strong></p><p>{{clientCompany}}</p><p>{{clientAddress}}</p></div>
  </section>
  <p><strong>Date:</strong> {{date}} &nbsp; <strong>Due:</strong> {{dueDate}} ({{paymentTerms}})</p>
  {{itemsTable}}
  <section class="totals">
    <p>Subtotal: {{subtotal}} {{currency}}</p>
    <p>Tax: {{taxTotal}} {{currency}}</p>
    <p class="amount">Total: {{total}} {{currency}}</p>
  </section>
  <p>{{notes}}</p>
  <footer><img src="{{qrCodeUrl}}" alt="QR code" /><p>{{invoiceUrl}}</p></footer>
</div>
""".strip(),
    "css_styles": (
        ".document{max-width:800px;margin:0 auto;padding:40px 20px;font-family:Arial,sans-serif}"
        ".parties{display:grid;grid-template-columns:1fr 1fr;gap:40px}"
        "table.items{width:100%;border-collapse:collapse}"
        "table.items td,table.items th{border-bottom:1px solid #e5e7eb;padding:8px}"
        ".totals{text-align:right}"
    ),
    "fields": [
        {"name": "invoiceId", "type": "text", "required": True, "label": "Invoice ID"},
        {"name": "clientName", "type": "text", "required": True, "label": "Client Name"},
        {"name": "dueDate", "type": "date", "required": True, "label": "Due Date"},
    ],
}

RECEIPT_SENT_EMAIL = {
    "name": "Receipt Sent",
    "type": "receipt_sent",
    "subject": "Receipt {{receiptId}} from {{freelancerName}}",
    "html_content": (
        "<p>Hi {{clientName}},</p>"
        "<p>Thank you for your payment of <strong>{{amount}} {{currency}}</strong> "
        "for {{projectTitle}}.</p>"
        '<p>Your receipt is available at <a href="{{receiptUrl}}">{{receiptUrl}}</a>.</p>'
        "<p>Best regards,<br>{{freelancerName}}</p>"
    ),
    "text_content": (
        "Hi {{clientName}},\n\n"
        "Thank you for your payment of {{amount}} {{currency}} for {{projectTitle}}.\n"
        "Your receipt: {{receiptUrl}}\n\n"
        "Best regards,\n{{freelancerName}}"
    ),
    "variables": ["clientName", "amount", "currency", "projectTitle", "receiptUrl", "freelancerName", "receiptId"],
}

INVOICE_SENT_EMAIL = {
    "name": "Invoice Sent",
    "type": "invoice_sent",
    "subject": "Invoice {{invoiceId}} from {{freelancerName}}",
    "html_content": (
        "<p>Hi {{clientName}},</p>"
        "<p>Please find invoice {{invoiceId}} for <strong>{{total}} {{currency}}</strong>, "
        "due on {{dueDate}}.</p>"
        '<p>View it online at <a href="{{invoiceUrl}}">{{invoiceUrl}}</a>.</p>'
        "<p>Best regards,<br>{{freelancerName}}</p>"
    ),
    "text_content": (
        "Hi {{clientName}},\n\n"
        "Invoice {{invoiceId}} for {{total}} {{currency}} is due on {{dueDate}}.\n"
        "View it online: {{invoiceUrl}}\n\n"
        "Best regards,\n{{freelancerName}}"
    ),
    "variables": ["clientName", "invoiceId", "total", "currency", "dueDate", "invoiceUrl", "freelancerName"],
}

DEFAULT_TEMPLATES = [RECEIPT_TEMPLATE, INVOICE_TEMPLATE]
DEFAULT_EMAIL_TEMPLATES = [RECEIPT_SENT_EMAIL, INVOICE_SENT_EMAIL]
