from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)

from ..config import Base


def utcnow():
    return datetime.now(timezone.utc)


class VillageInfo(Base):
    __tablename__ = "village_info"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=True)
    code = Column(String, nullable=True)
    address = Column(String, nullable=True)
    postal_code = Column(String, nullable=True)
    sub_district = Column(String, nullable=True)
    district = Column(String, nullable=True)
    province = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    website = Column(String, nullable=True)
    area = Column(String, nullable=True)
    population = Column(Integer, nullable=True)
    bank_account_number = Column(String, nullable=True)
    bank_name = Column(String, nullable=True)
    fiscal_year_label = Column(String, nullable=True)
    reporting_period = Column(String, nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Official(Base):
    __tablename__ = "officials"

    id = Column(Integer, primary_key=True, index=True)
    role = Column(String, nullable=False)
    name = Column(String, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)


class FiscalYear(Base):
    __tablename__ = "fiscal_years"

    id = Column(Integer, primary_key=True, index=True)
    year = Column(Integer, nullable=False, unique=True, index=True)
    template_year = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class BudgetSubField(Base):
    __tablename__ = "budget_sub_fields"

    id = Column(Integer, primary_key=True, index=True)
    fiscal_year = Column(Integer, nullable=False, index=True)
    field_name = Column(String, nullable=False)
    name = Column(String, nullable=False)
    account_code = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    fiscal_year = Column(Integer, nullable=False, index=True)
    sub_field_id = Column(Integer, ForeignKey("budget_sub_fields.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    account_code = Column(String, nullable=True)
    status = Column(String(16), nullable=False, default="planned")
    report_type = Column(String(16), nullable=False, default="physical")
    progress = Column(Integer, nullable=False, default=0)
    budget_amount = Column(Numeric(15, 2), nullable=False)
    realized_amount = Column(Numeric(15, 2), nullable=False, default=0)
    executor = Column(String, nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    location = Column(String, nullable=True)
    duration_text = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Income(Base):
    __tablename__ = "incomes"

    id = Column(Integer, primary_key=True, index=True)
    fiscal_year = Column(Integer, nullable=False, index=True)
    account_code = Column(String, nullable=True)
    source = Column(String, nullable=False)
    category = Column(String, nullable=True)
    amount = Column(Numeric(15, 2), nullable=False)
    received_on = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    fiscal_year = Column(Integer, nullable=False, index=True)
    account_code = Column(String, nullable=True)
    description = Column(String, nullable=False)
    category = Column(String, nullable=True)
    amount = Column(Numeric(15, 2), nullable=False)
    spent_on = Column(Date, nullable=True)
    recipient = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class ExpenseItem(Base):
    __tablename__ = "expense_items"

    id = Column(Integer, primary_key=True, index=True)
    fiscal_year = Column(Integer, nullable=False, index=True)
    expense_id = Column(Integer, ForeignKey("expenses.id"), nullable=False, index=True)
    activity_id = Column(Integer, nullable=True, index=True)
    item_type = Column(String(16), nullable=False, default="receipt")
    description = Column(String, nullable=True)
    paid_to = Column(String, nullable=True)
    national_id = Column(String, nullable=True)
    quantity = Column(Numeric(12, 2), nullable=False, default=1)
    unit = Column(String, nullable=True)
    unit_price = Column(Numeric(15, 2), nullable=False, default=0)
    amount = Column(Numeric(15, 2), nullable=False)
    item_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Financing(Base):
    __tablename__ = "financings"

    id = Column(Integer, primary_key=True, index=True)
    fiscal_year = Column(Integer, nullable=False, index=True)
    account_code = Column(String, nullable=True)
    description = Column(String, nullable=False)
    category = Column(String, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    transacted_on = Column(Date, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, index=True)
    fiscal_year = Column(Integer, nullable=False, index=True)
    entity_type = Column(String(16), nullable=False)
    entity_id = Column(Integer, nullable=False, index=True)
    file_name = Column(String, nullable=False)
    file_url = Column(String, nullable=True)
    stored_path = Column(String, nullable=True)
    file_size = Column(Integer, nullable=True)
    content_type = Column(String, nullable=True)
    caption = Column(String, nullable=True)
    uploaded_at = Column(DateTime, default=utcnow, nullable=False)


class NarrativeContent(Base):
    __tablename__ = "narrative_content"
    __table_args__ = (UniqueConstraint("fiscal_year", name="uq_narrative_content_fiscal_year"),)

    id = Column(Integer, primary_key=True, index=True)
    fiscal_year = Column(Integer, nullable=False, index=True)
    foreword = Column(Text, nullable=True)
    background = Column(Text, nullable=True)
    objectives = Column(Text, nullable=True)
    legal_basis = Column(Text, nullable=True)
    physical_narrative = Column(Text, nullable=True)
    financial_narrative = Column(Text, nullable=True)
    obstacles = Column(Text, nullable=True)
    suggestions = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime, default=utcnow, index=True, nullable=False)
    action = Column(String, nullable=False)
    fiscal_year = Column(Integer, nullable=True, index=True)
    target_entity_type = Column(String, nullable=True)
    target_entity_id = Column(String, nullable=True)
    before = Column(Text, nullable=True)
    after = Column(Text, nullable=True)
