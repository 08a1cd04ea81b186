"""Initial schema.

Revision ID: 001
Revises:
Create Date: 2026-01-05 00:00:00.000000

WHAT: Creates every table: receipts, invoices, clients, templates,
email_templates, email_logs, currencies, tax_settings and config.

HOW: Receipts and invoices keep the sensitive sub-document in
``encrypted_data``; only identifiers, status and money columns are plaintext.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    # =========================================================================
    # Receipts
    # =========================================================================
    op.create_table(
        "receipts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("receipt_id", sa.String(40), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("payment_method", sa.String(50), nullable=True),
        sa.Column("payment_status", sa.String(20), nullable=False),
        sa.Column("project_title", sa.String(255), nullable=True),
        sa.Column("encrypted_data", sa.Text(), nullable=False),
        sa.Column("qr_code_url", sa.Text(), nullable=True),
        sa.Column("pdf_url", sa.Text(), nullable=True),
        sa.Column("warnings", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_receipts_id", "receipts", ["id"])
    op.create_index("ix_receipts_receipt_id", "receipts", ["receipt_id"], unique=True)
    op.create_index("ix_receipts_payment_status", "receipts", ["payment_status"])
    op.create_index("ix_receipts_is_active", "receipts", ["is_active"])
    op.create_index("ix_receipts_created_at", "receipts", ["created_at"])

    # =========================================================================
    # Invoices
    # =========================================================================
    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("invoice_id", sa.String(40), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("payment_terms", sa.String(100), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("subtotal", sa.Float(), nullable=False),
        sa.Column("tax_total", sa.Float(), nullable=False),
        sa.Column("total", sa.Float(), nullable=False),
        sa.Column("encrypted_data", sa.Text(), nullable=False),
        sa.Column("qr_code_url", sa.Text(), nullable=True),
        sa.Column("pdf_url", sa.Text(), nullable=True),
        sa.Column("warnings", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_invoices_id", "invoices", ["id"])
    op.create_index("ix_invoices_invoice_id", "invoices", ["invoice_id"], unique=True)
    op.create_index("ix_invoices_due_date", "invoices", ["due_date"])
    op.create_index("ix_invoices_status", "invoices", ["status"])
    op.create_index("ix_invoices_is_active", "invoices", ["is_active"])
    op.create_index("ix_invoices_created_at", "invoices", ["created_at"])

    # =========================================================================
    # Clients
    # =========================================================================
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("client_id", sa.String(40), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("company_name", sa.String(255), nullable=True),
        sa.Column("tax_id", sa.String(100), nullable=True),
        sa.Column("preferred_currency", sa.String(3), nullable=False),
        sa.Column("payment_terms", sa.String(100), nullable=False),
        sa.Column("receipts", sa.JSON(), nullable=False),
        sa.Column("invoices", sa.JSON(), nullable=False),
        sa.Column("total_paid", sa.Float(), nullable=False),
        sa.Column("total_pending", sa.Float(), nullable=False),
        sa.Column("last_contact", sa.DateTime(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_clients_id", "clients", ["id"])
    op.create_index("ix_clients_client_id", "clients", ["client_id"], unique=True)
    op.create_index("ix_clients_email", "clients", ["email"], unique=True)
    op.create_index("ix_clients_last_contact", "clients", ["last_contact"])
    op.create_index("ix_clients_is_active", "clients", ["is_active"])
    op.create_index("ix_clients_created_at", "clients", ["created_at"])

    # =========================================================================
    # Templates
    # =========================================================================
    op.create_table(
        "templates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("html_template", sa.Text(), nullable=False),
        sa.Column("css_styles", sa.Text(), nullable=True),
        sa.Column("fields", sa.JSON(), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_templates_type", "templates", ["type"])
    op.create_index("ix_templates_is_default", "templates", ["is_default"])
    op.create_index("ix_templates_is_active", "templates", ["is_active"])
    op.create_index("ix_templates_created_at", "templates", ["created_at"])

    op.create_table(
        "email_templates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("subject", sa.String(500), nullable=False),
        sa.Column("html_content", sa.Text(), nullable=False),
        sa.Column("text_content", sa.Text(), nullable=True),
        sa.Column("variables", sa.JSON(), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_email_templates_type", "email_templates", ["type"])
    op.create_index("ix_email_templates_is_default", "email_templates", ["is_default"])
    op.create_index("ix_email_templates_is_active", "email_templates", ["is_active"])
    op.create_index("ix_email_templates_created_at", "email_templates", ["created_at"])

    op.create_table(
        "email_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("to", sa.String(255), nullable=False),
        sa.Column("subject", sa.String(500), nullable=False),
        sa.Column("template_type", sa.String(30), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("message_id", sa.String(255), nullable=True),
        sa.Column("receipt_id", sa.String(40), nullable=True),
        sa.Column("invoice_id", sa.String(40), nullable=True),
        sa.Column("sent_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_email_logs_to", "email_logs", ["to"])
    op.create_index("ix_email_logs_status", "email_logs", ["status"])
    op.create_index("ix_email_logs_receipt_id", "email_logs", ["receipt_id"])
    op.create_index("ix_email_logs_invoice_id", "email_logs", ["invoice_id"])
    op.create_index("ix_email_logs_created_at", "email_logs", ["created_at"])

    # =========================================================================
    # Settings
    # =========================================================================
    op.create_table(
        "currencies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(3), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("symbol", sa.String(10), nullable=False),
        sa.Column("exchange_rate", sa.Float(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_updated", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_currencies_code", "currencies", ["code"], unique=True)
    op.create_index("ix_currencies_is_active", "currencies", ["is_active"])
    op.create_index("ix_currencies_created_at", "currencies", ["created_at"])

    op.create_table(
        "tax_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("region", sa.String(100), nullable=False),
        sa.Column("tax_type", sa.String(20), nullable=False),
        sa.Column("rate", sa.Float(), nullable=False),
        sa.Column("applicable_to", sa.String(20), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("rate >= 0 AND rate <= 100", name="ck_tax_settings_rate_range"),
    )
    op.create_index("ix_tax_settings_region", "tax_settings", ["region"])
    op.create_index("ix_tax_settings_is_default", "tax_settings", ["is_default"])
    op.create_index("ix_tax_settings_is_active", "tax_settings", ["is_active"])
    op.create_index("ix_tax_settings_created_at", "tax_settings", ["created_at"])

    op.create_table(
        "config",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("value", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_config_key", "config", ["key"], unique=True)
    op.create_index("ix_config_created_at", "config", ["created_at"])


def downgrade() -> None:
    for table in (
        "config",
        "tax_settings",
        "currencies",
        "email_logs",
        "email_templates",
        "templates",
        "clients",
        "invoices",
        "receipts",
    ):
        op.drop_table(table)
