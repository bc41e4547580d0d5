from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from db.database import get_db
from models import DataKind, LogEntry, LogEntryCreate, User
from utils.auth import get_viewer, require_access, require_owner
from utils.progress import insert_log_entry, load_log_entries

router = APIRouter()


@router.post("/{owner_id}", response_model=LogEntry, status_code=status.HTTP_201_CREATED)
async def create_log_entry(
    owner_id: int,
    entry: LogEntryCreate,
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    """Log a verse range studied under a program."""
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.PROGRESS, edit=True)
    created = insert_log_entry(conn, owner.id, entry)
    conn.commit()
    return created


@router.get("/{owner_id}", response_model=List[LogEntry])
async def list_log_entries(
    owner_id: int,
    programs: Optional[List[str]] = Query(default=None),
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    owner = require_owner(conn, owner_id)
    require_access(viewer, owner, DataKind.PROGRESS)
    codes = [code.upper() for code in programs] if programs else None
    return load_log_entries(conn, owner.id, codes)
