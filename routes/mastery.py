from datetime import datetime, timezone
from typing import Dict, List, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from config import load_config
from db.database import get_db
from models import DataKind, MasteryRecord, MasteryUpdate, User
from utils.auth import get_viewer, require_access, require_owner
from utils.mastery import WritePolicy
from utils.progress import import_status_codes, load_mastery_records, record_mastery_status

router = APIRouter()


class StatusImport(BaseModel):
    # surah number -> legacy code as found in the tracking sheet, e.g. "V12", 0.5, "AM"
    codes: Dict[int, Union[str, float]]


class MasteryWriteResult(BaseModel):
    record: MasteryRecord
    written: bool


@router.get("/{owner_id}", response_model=List[MasteryRecord])
async def list_mastery(
    owner_id: int,
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.PROGRESS)
    return load_mastery_records(conn, owner.id)


@router.put("/{owner_id}", response_model=MasteryWriteResult)
async def update_mastery(
    owner_id: int,
    update: MasteryUpdate,
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    """Write a status for one surah; the latest write wins."""
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.PROGRESS, edit=True)
    mirror_program = load_config()["mastery"]["mirror_program"]
    record, written = record_mastery_status(
        conn,
        owner.id,
        update,
        datetime.now(timezone.utc),
        WritePolicy.LAST_WRITE_WINS,
        mirror_program,
    )
    return MasteryWriteResult(record=record, written=written)


@router.post("/{owner_id}/import", response_model=List[MasteryWriteResult])
async def import_mastery(
    owner_id: int,
    payload: StatusImport,
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    """Import legacy status codes without downgrading validated or known surahs."""
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.PROGRESS, edit=True)
    mirror_program = load_config()["mastery"]["mirror_program"]
    results = import_status_codes(
        conn,
        owner.id,
        sorted(payload.codes.items()),
        datetime.now(timezone.utc),
        mirror_program,
    )
    return [MasteryWriteResult(record=record, written=written) for record, written in results]
