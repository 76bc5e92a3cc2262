import os
import sys
import tempfile
from collections.abc import Callable, Generator
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep the module-level engine and upload root out of the working tree.
_SCRATCH = Path(tempfile.mkdtemp(prefix="lpjdesa-tests-"))
os.environ.setdefault("LPJ_DATABASE_URL", f"sqlite:///{_SCRATCH / 'app.db'}")
os.environ.setdefault("LPJ_UPLOADS_DIR", str(_SCRATCH / "uploads"))
os.environ.setdefault("LPJ_BACKUP_DIR", str(_SCRATCH / "backups"))
os.environ.setdefault("LPJ_EXPORT_OUTPUT_DIR", str(_SCRATCH / "exports"))

from lpjdesa.config import Base  # noqa: E402
# Import the full models module so every table registers with Base metadata.
from lpjdesa.models import models as _all_models  # noqa: E402,F401
from lpjdesa.schemas.schemas import (  # noqa: E402
    ActivityCreate,
    ActivityRead,
    OfficialPayload,
    VillageProfileRead,
    VillageProfileUpdate,
)
from lpjdesa.services import ledger  # noqa: E402
from lpjdesa.services.fiscal_years import Workspace, YearLocks  # noqa: E402
from lpjdesa.services.record_store import RecordStore  # noqa: E402
from lpjdesa.services.storage import StorageService  # noqa: E402

YEAR = 2026


@pytest.fixture
def db_session(tmp_path) -> Generator[Session, None, None]:
    """Provide a fresh SQLite database for each test."""
    db_path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def records(db_session: Session) -> RecordStore:
    return RecordStore(db_session)


@pytest.fixture
def storage(tmp_path) -> StorageService:
    return StorageService(backend="local", upload_root=tmp_path / "uploads", public_prefix="uploads")


@pytest.fixture
def workspace(records: RecordStore) -> Workspace:
    """A workspace with fiscal year 2026 created from the default catalog and loaded."""
    space = Workspace(locks=YearLocks())
    space.create_year(records, year=YEAR)
    space.switch_year(records, YEAR)
    return space


@pytest.fixture
def profile(records: RecordStore) -> VillageProfileRead:
    return ledger.save_village_profile(
        records,
        VillageProfileUpdate(
            name="Sukamaju",
            address="Jl. Raya Sukamaju No. 1",
            postal_code="16710",
            sub_district="Cibinong",
            district="Bogor",
            province="Jawa Barat",
            reporting_period="Semester II",
            officials=[
                OfficialPayload(role="Kepala Desa", name="H. Ahmad"),
                OfficialPayload(role="Sekretaris Desa", name="Siti"),
                OfficialPayload(role="Bendahara Desa", name="Budi"),
            ],
        ),
    )


@pytest.fixture
def sub_field_id(workspace: Workspace) -> Callable[[str, str], int]:
    def _find(field_name: str = "Pembangunan Desa", name: str = "Pekerjaan Umum & Penataan Ruang") -> int:
        sub_field = workspace.snapshot().tree.find_sub_field(field_name, name)
        assert sub_field is not None, f"{field_name}/{name} missing from the default catalog"
        return sub_field.id

    return _find


@pytest.fixture
def create_activity(
    workspace: Workspace, records: RecordStore, sub_field_id: Callable[..., int]
) -> Callable[..., ActivityRead]:
    counter = {"value": 0}

    def _create(
        name: str = "",
        budget: str = "10000000",
        realized: str = "0",
        status: str = "ongoing",
        account_code: str = "",
        sub_field: int = 0,
        **extra,
    ) -> ActivityRead:
        counter["value"] += 1
        saved = ledger.create_activity(
            workspace,
            records,
            ActivityCreate(
                sub_field_id=sub_field or sub_field_id(),
                name=name or f"Kegiatan {counter['value']}",
                account_code=account_code or f"2.1.{counter['value']:02d}",
                status=status,
                budget_amount=Decimal(budget),
                realized_amount=Decimal(realized),
                executor="TPK Desa",
                **extra,
            ),
        )
        return saved.activity

    return _create
