"""village reporting baseline schema

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-01 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


def _ensure_index(inspector, table: str, name: str, columns: list, unique: bool = False) -> None:
    existing = {index["name"] for index in inspector.get_indexes(table)}
    if name not in existing:
        op.create_index(name, table, columns, unique=unique)


def _money(name: str, nullable: bool = False, precision: int = 15) -> sa.Column:
    return sa.Column(name, sa.Numeric(precision, 2), nullable=nullable)


revision = "0001_baseline"
down_revision = None
branch_labels = None
depends_on = None

TABLES = (
    "audit_logs",
    "narrative_content",
    "attachments",
    "financings",
    "expense_items",
    "expenses",
    "incomes",
    "activities",
    "budget_sub_fields",
    "fiscal_years",
    "officials",
    "village_info",
)


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table("village_info"):
        op.create_table(
            "village_info",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            *[
                sa.Column(name, sa.String(), nullable=True)
                for name in (
                    "name",
                    "code",
                    "address",
                    "postal_code",
                    "sub_district",
                    "district",
                    "province",
                    "phone",
                    "email",
                    "website",
                    "area",
                )
            ],
            sa.Column("population", sa.Integer(), nullable=True),
            sa.Column("bank_account_number", sa.String(), nullable=True),
            sa.Column("bank_name", sa.String(), nullable=True),
            sa.Column("fiscal_year_label", sa.String(), nullable=True),
            sa.Column("reporting_period", sa.String(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )

    if not inspector.has_table("officials"):
        op.create_table(
            "officials",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("role", sa.String(), nullable=False),
            sa.Column("name", sa.String(), nullable=True),
            sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        )

    if not inspector.has_table("fiscal_years"):
        op.create_table(
            "fiscal_years",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("year", sa.Integer(), nullable=False),
            sa.Column("template_year", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    _ensure_index(inspector, "fiscal_years", "ix_fiscal_years_year", ["year"], unique=True)

    if not inspector.has_table("budget_sub_fields"):
        op.create_table(
            "budget_sub_fields",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("fiscal_year", sa.Integer(), nullable=False),
            sa.Column("field_name", sa.String(), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("account_code", sa.String(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    _ensure_index(inspector, "budget_sub_fields", "ix_budget_sub_fields_fiscal_year", ["fiscal_year"])

    if not inspector.has_table("activities"):
        op.create_table(
            "activities",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("fiscal_year", sa.Integer(), nullable=False),
            sa.Column("sub_field_id", sa.Integer(), sa.ForeignKey("budget_sub_fields.id"), nullable=False),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("account_code", sa.String(), nullable=True),
            sa.Column("status", sa.String(length=16), nullable=False, server_default="planned"),
            sa.Column("report_type", sa.String(length=16), nullable=False, server_default="physical"),
            sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
            _money("budget_amount"),
            _money("realized_amount"),
            sa.Column("executor", sa.String(), nullable=False),
            sa.Column("start_date", sa.Date(), nullable=True),
            sa.Column("end_date", sa.Date(), nullable=True),
            sa.Column("location", sa.String(), nullable=True),
            sa.Column("duration_text", sa.String(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    _ensure_index(inspector, "activities", "ix_activities_fiscal_year", ["fiscal_year"])
    _ensure_index(inspector, "activities", "ix_activities_sub_field_id", ["sub_field_id"])

    if not inspector.has_table("incomes"):
        op.create_table(
            "incomes",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("fiscal_year", sa.Integer(), nullable=False),
            sa.Column("account_code", sa.String(), nullable=True),
            sa.Column("source", sa.String(), nullable=False),
            sa.Column("category", sa.String(), nullable=True),
            _money("amount"),
            sa.Column("received_on", sa.Date(), nullable=True),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    _ensure_index(inspector, "incomes", "ix_incomes_fiscal_year", ["fiscal_year"])

    if not inspector.has_table("expenses"):
        op.create_table(
            "expenses",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("fiscal_year", sa.Integer(), nullable=False),
            sa.Column("account_code", sa.String(), nullable=True),
            sa.Column("description", sa.String(), nullable=False),
            sa.Column("category", sa.String(), nullable=True),
            _money("amount"),
            sa.Column("spent_on", sa.Date(), nullable=True),
            sa.Column("recipient", sa.String(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    _ensure_index(inspector, "expenses", "ix_expenses_fiscal_year", ["fiscal_year"])

    if not inspector.has_table("expense_items"):
        op.create_table(
            "expense_items",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("fiscal_year", sa.Integer(), nullable=False),
            sa.Column("expense_id", sa.Integer(), sa.ForeignKey("expenses.id"), nullable=False),
            sa.Column("activity_id", sa.Integer(), nullable=True),
            sa.Column("item_type", sa.String(length=16), nullable=False, server_default="receipt"),
            sa.Column("description", sa.String(), nullable=True),
            sa.Column("paid_to", sa.String(), nullable=True),
            sa.Column("national_id", sa.String(), nullable=True),
            _money("quantity", precision=12),
            sa.Column("unit", sa.String(), nullable=True),
            _money("unit_price"),
            _money("amount"),
            sa.Column("item_date", sa.Date(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    _ensure_index(inspector, "expense_items", "ix_expense_items_fiscal_year", ["fiscal_year"])
    _ensure_index(inspector, "expense_items", "ix_expense_items_expense_id", ["expense_id"])
    _ensure_index(inspector, "expense_items", "ix_expense_items_activity_id", ["activity_id"])

    if not inspector.has_table("financings"):
        op.create_table(
            "financings",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("fiscal_year", sa.Integer(), nullable=False),
            sa.Column("account_code", sa.String(), nullable=True),
            sa.Column("description", sa.String(), nullable=False),
            sa.Column("category", sa.String(), nullable=False),
            _money("amount"),
            sa.Column("transacted_on", sa.Date(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    _ensure_index(inspector, "financings", "ix_financings_fiscal_year", ["fiscal_year"])

    if not inspector.has_table("attachments"):
        op.create_table(
            "attachments",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("fiscal_year", sa.Integer(), nullable=False),
            sa.Column("entity_type", sa.String(length=16), nullable=False),
            sa.Column("entity_id", sa.Integer(), nullable=False),
            sa.Column("file_name", sa.String(), nullable=False),
            sa.Column("file_url", sa.String(), nullable=True),
            sa.Column("stored_path", sa.String(), nullable=True),
            sa.Column("file_size", sa.Integer(), nullable=True),
            sa.Column("content_type", sa.String(), nullable=True),
            sa.Column("caption", sa.String(), nullable=True),
            sa.Column("uploaded_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    _ensure_index(inspector, "attachments", "ix_attachments_fiscal_year", ["fiscal_year"])
    _ensure_index(inspector, "attachments", "ix_attachments_entity_id", ["entity_id"])

    if not inspector.has_table("narrative_content"):
        op.create_table(
            "narrative_content",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("fiscal_year", sa.Integer(), nullable=False),
            *[
                sa.Column(name, sa.Text(), nullable=True)
                for name in (
                    "foreword",
                    "background",
                    "objectives",
                    "legal_basis",
                    "physical_narrative",
                    "financial_narrative",
                    "obstacles",
                    "suggestions",
                )
            ],
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.UniqueConstraint("fiscal_year", name="uq_narrative_content_fiscal_year"),
        )
    _ensure_index(inspector, "narrative_content", "ix_narrative_content_fiscal_year", ["fiscal_year"])

    if not inspector.has_table("audit_logs"):
        op.create_table(
            "audit_logs",
            sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
            sa.Column("timestamp", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("action", sa.String(), nullable=False),
            sa.Column("fiscal_year", sa.Integer(), nullable=True),
            sa.Column("target_entity_type", sa.String(), nullable=True),
            sa.Column("target_entity_id", sa.String(), nullable=True),
            sa.Column("before", sa.Text(), nullable=True),
            sa.Column("after", sa.Text(), nullable=True),
        )
    _ensure_index(inspector, "audit_logs", "ix_audit_logs_timestamp", ["timestamp"])
    _ensure_index(inspector, "audit_logs", "ix_audit_logs_fiscal_year", ["fiscal_year"])


def downgrade() -> None:
    inspector = sa.inspect(op.get_bind())
    for table in TABLES:
        if inspector.has_table(table):
            op.drop_table(table)
