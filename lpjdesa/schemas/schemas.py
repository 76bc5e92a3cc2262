from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

ActivityStatus = Literal["planned", "ongoing", "completed"]
ReportType = Literal["physical", "non_physical"]
ItemType = Literal["receipt", "worker_day"]
FinancingCategory = Literal["Penerimaan Pembiayaan", "Pengeluaran Pembiayaan"]
EntityType = Literal["activity", "expense"]


class InputModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class RecordModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)


# --- Village profile ---


class OfficialPayload(InputModel):
    role: str = Field(min_length=1)
    name: Optional[str] = None


class OfficialRead(RecordModel):
    id: int
    role: str
    name: Optional[str] = None
    sort_order: int = 0


class VillageProfileBase(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    sub_district: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    area: Optional[str] = None
    population: Optional[int] = Field(default=None, ge=0)
    bank_account_number: Optional[str] = None
    bank_name: Optional[str] = None
    fiscal_year_label: Optional[str] = None
    reporting_period: Optional[str] = None


class VillageProfileUpdate(VillageProfileBase):
    model_config = ConfigDict(str_strip_whitespace=True)

    officials: Optional[List[OfficialPayload]] = None


class VillageProfileRead(VillageProfileBase):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    officials: List[OfficialRead] = []


# --- Classification ---


class SubFieldCreate(InputModel):
    field_name: str = Field(min_length=1)
    name: str = Field(min_length=1)
    account_code: Optional[str] = None


class SubFieldRename(InputModel):
    name: str = Field(min_length=1)
    account_code: Optional[str] = None


class SubFieldRead(RecordModel):
    id: int
    fiscal_year: int
    field_name: str
    name: str
    account_code: Optional[str] = None


class BudgetFieldRead(BaseModel):
    name: str
    code: str
    icon: str
    color: str
    description: str
    sub_fields: List[SubFieldRead] = []


# --- Activities ---


class ActivityBase(InputModel):
    sub_field_id: int
    name: str = Field(min_length=1)
    account_code: Optional[str] = None
    status: ActivityStatus = "planned"
    report_type: ReportType = "physical"
    progress: int = Field(default=0, ge=0, le=100)
    budget_amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)
    realized_amount: Decimal = Field(default=Decimal("0"), ge=0, max_digits=15, decimal_places=2)
    executor: str = Field(min_length=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    location: Optional[str] = None
    duration_text: Optional[str] = None

    @model_validator(mode="after")
    def _check_dates(self) -> "ActivityBase":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("Tanggal selesai tidak boleh sebelum tanggal mulai")
        return self


class ActivityCreate(ActivityBase):
    pass


class ActivityUpdate(InputModel):
    sub_field_id: Optional[int] = None
    name: Optional[str] = None
    account_code: Optional[str] = None
    status: Optional[ActivityStatus] = None
    report_type: Optional[ReportType] = None
    progress: Optional[int] = None
    budget_amount: Optional[Decimal] = None
    realized_amount: Optional[Decimal] = None
    executor: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    location: Optional[str] = None
    duration_text: Optional[str] = None


class ActivityRead(RecordModel):
    id: int
    fiscal_year: int
    sub_field_id: int
    name: str
    account_code: Optional[str] = None
    status: str = "planned"
    report_type: str = "physical"
    progress: int = 0
    budget_amount: Decimal = Decimal("0")
    realized_amount: Decimal = Decimal("0")
    executor: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    location: Optional[str] = None
    duration_text: Optional[str] = None


class ActivityDetail(ActivityRead):
    field_name: Optional[str] = None
    sub_field_name: Optional[str] = None


class ActivitySaved(BaseModel):
    activity: ActivityDetail
    warnings: List[str] = []


# --- Ledger ---


class IncomeCreate(InputModel):
    account_code: Optional[str] = None
    source: str = Field(min_length=1)
    category: Optional[str] = None
    amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)
    received_on: Optional[date] = None
    description: Optional[str] = None


class IncomeRead(RecordModel):
    id: int
    fiscal_year: int
    account_code: Optional[str] = None
    source: str
    category: Optional[str] = None
    amount: Decimal
    received_on: Optional[date] = None
    description: Optional[str] = None


class ExpenseCreate(InputModel):
    account_code: Optional[str] = None
    description: str = Field(min_length=1)
    category: Optional[str] = None
    amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)
    spent_on: Optional[date] = None
    recipient: Optional[str] = None


class ExpenseRead(RecordModel):
    id: int
    fiscal_year: int
    account_code: Optional[str] = None
    description: str
    category: Optional[str] = None
    amount: Decimal
    spent_on: Optional[date] = None
    recipient: Optional[str] = None


class ExpenseItemCreate(InputModel):
    item_type: ItemType = "receipt"
    activity_id: Optional[int] = None
    description: Optional[str] = None
    paid_to: Optional[str] = None
    national_id: Optional[str] = None
    quantity: Decimal = Field(default=Decimal("1"), gt=0)
    unit: Optional[str] = None
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    amount: Optional[Decimal] = None
    item_date: Optional[date] = None

    @model_validator(mode="after")
    def _derive_amount(self) -> "ExpenseItemCreate":
        if self.amount is None:
            self.amount = (self.quantity * self.unit_price).quantize(Decimal("0.01"))
        if self.amount <= 0:
            raise ValueError("Jumlah harus lebih dari nol")
        return self


class ExpenseItemRead(RecordModel):
    id: int
    fiscal_year: int
    expense_id: int
    activity_id: Optional[int] = None
    item_type: str
    description: Optional[str] = None
    paid_to: Optional[str] = None
    national_id: Optional[str] = None
    quantity: Decimal = Decimal("1")
    unit: Optional[str] = None
    unit_price: Decimal = Decimal("0")
    amount: Decimal
    item_date: Optional[date] = None


class FinancingCreate(InputModel):
    account_code: Optional[str] = None
    description: str = Field(min_length=1)
    category: FinancingCategory
    amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)
    transacted_on: Optional[date] = None


class FinancingRead(RecordModel):
    id: int
    fiscal_year: int
    account_code: Optional[str] = None
    description: str
    category: str
    amount: Decimal
    transacted_on: Optional[date] = None


# --- Attachments & narrative ---


class AttachmentCreate(InputModel):
    entity_type: EntityType
    entity_id: int
    file_name: str = Field(min_length=1)
    file_url: Optional[str] = None
    caption: Optional[str] = None
    file_size: Optional[int] = None
    content_type: Optional[str] = None


class AttachmentRead(RecordModel):
    id: int
    fiscal_year: int
    entity_type: str
    entity_id: int
    file_name: str
    file_url: Optional[str] = None
    stored_path: Optional[str] = None
    file_size: Optional[int] = None
    content_type: Optional[str] = None
    caption: Optional[str] = None
    uploaded_at: Optional[datetime] = None


class NarrativeUpdate(InputModel):
    foreword: Optional[str] = None
    background: Optional[str] = None
    objectives: Optional[str] = None
    legal_basis: Optional[str] = None
    physical_narrative: Optional[str] = None
    financial_narrative: Optional[str] = None
    obstacles: Optional[str] = None
    suggestions: Optional[str] = None


class NarrativeRead(RecordModel):
    id: Optional[int] = None
    fiscal_year: int
    foreword: Optional[str] = None
    background: Optional[str] = None
    objectives: Optional[str] = None
    legal_basis: Optional[str] = None
    physical_narrative: Optional[str] = None
    financial_narrative: Optional[str] = None
    obstacles: Optional[str] = None
    suggestions: Optional[str] = None


# --- Fiscal years, rollups, reports ---


class FiscalYearCreate(BaseModel):
    year: Optional[int] = Field(default=None, ge=2000, le=2100)
    template_year: Optional[int] = None


class FiscalYearSwitch(BaseModel):
    year: int = Field(ge=2000, le=2100)


class FiscalYearSummary(BaseModel):
    year: int
    active: bool
    sub_field_count: int
    activity_count: int


class RollupRead(BaseModel):
    label: str
    code: Optional[str] = None
    count: int
    completed: int
    ongoing: int
    planned: int
    total_budget: Decimal
    total_realized: Decimal
    remaining: Decimal
    percent_realized: Decimal


class YearTotalsRead(BaseModel):
    income: Decimal
    expense: Decimal
    surplus: Decimal
    financing_in: Decimal
    financing_out: Decimal
    financing_net: Decimal
    remaining_balance: Decimal


class YearSummaryRead(BaseModel):
    fiscal_year: int
    fields: List[RollupRead]
    activities: RollupRead
    totals: YearTotalsRead


class CascadeReportRead(BaseModel):
    target_type: str
    target_id: int
    activities_removed: int
    items_removed: int
    attachments_removed: int
    attachment_failures: List[str]


class ExportReadinessRead(BaseModel):
    can_export: bool
    errors: List[str]
    warnings: List[str]


class RestoreSummary(BaseModel):
    fiscal_year: int
    inserted: Dict[str, int]
    backup_path: Optional[str] = None
