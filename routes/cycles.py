from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from db.database import get_db
from models import CycleKind, DataKind, User
from utils.auth import get_viewer, require_access, require_owner
from utils.cycles import add_cycle, load_cycles, summarize_cycles

router = APIRouter()


class CycleCreate(BaseModel):
    kind: CycleKind
    completed_at: date


@router.get("/{owner_id}")
async def cycle_summary(
    owner_id: int,
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    """Revision and reading passes: count, average length, days since the last one."""
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.PROGRESS)
    cycles = load_cycles(conn, owner.id)
    return {
        "cycles": [cycle.model_dump() for cycle in cycles],
        "summary": summarize_cycles(cycles, datetime.now(timezone.utc).date()),
    }


@router.post("/{owner_id}", status_code=status.HTTP_201_CREATED)
async def create_cycle(
    owner_id: int,
    payload: CycleCreate,
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.PROGRESS, edit=True)
    refreshed = add_cycle(conn, owner.id, payload.kind, payload.completed_at)
    return [cycle.model_dump() for cycle in refreshed]
