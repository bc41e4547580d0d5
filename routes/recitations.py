from datetime import datetime, timezone
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from config import load_config
from db.database import get_db
from models import DataKind, MasteryRecord, Recitation, RecitationCreate, User
from utils.auth import get_viewer, require_access, require_owner
from utils.recitations import DEFAULT_HISTORY_LIMIT, group_by_surah, load_recitations, record_recitations

router = APIRouter()


class RecitationResult(BaseModel):
    recitation: Recitation
    mastery: MasteryRecord
    written: bool


@router.post("/{owner_id}", response_model=List[RecitationResult], status_code=status.HTTP_201_CREATED)
async def create_recitations(
    owner_id: int,
    payload: Union[List[RecitationCreate], RecitationCreate],
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    """Record one or several session recitations and update the surahs' mastery."""
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.PROGRESS, edit=True)
    items = payload if isinstance(payload, list) else [payload]
    results = record_recitations(
        conn,
        owner.id,
        items,
        viewer.id,
        datetime.now(timezone.utc),
        load_config()["mastery"]["mirror_program"],
    )
    return [
        RecitationResult(recitation=recitation, mastery=record, written=written)
        for recitation, record, written in results
    ]


@router.get("/{owner_id}")
async def recitation_history(
    owner_id: int,
    surah_number: Optional[int] = Query(default=None, ge=1, le=114),
    limit: int = Query(default=DEFAULT_HISTORY_LIMIT, ge=1, le=500),
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.PROGRESS)
    recitations = load_recitations(conn, owner.id, surah_number, limit)
    if surah_number is not None:
        return {"owner_id": owner.id, "surah_number": surah_number, "recitations": recitations}
    return {
        "owner_id": owner.id,
        "recitations_by_surah": group_by_surah(recitations),
        "total": len(recitations),
    }
