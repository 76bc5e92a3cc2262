from fastapi import APIRouter, Depends

from ..schemas.schemas import VillageProfileRead, VillageProfileUpdate
from ..services.ledger import get_village_profile, save_village_profile
from ..services.record_store import RecordStore
from .dependencies import get_records

router = APIRouter(prefix="/village", tags=["village"])


@router.get("", response_model=VillageProfileRead)
def read_village(records: RecordStore = Depends(get_records)) -> VillageProfileRead:
    return get_village_profile(records)


@router.put("", response_model=VillageProfileRead)
def update_village(
    payload: VillageProfileUpdate,
    records: RecordStore = Depends(get_records),
) -> VillageProfileRead:
    return save_village_profile(records, payload)
