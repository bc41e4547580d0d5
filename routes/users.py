from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from db.database import get_db
from models import DataKind, User
from utils.auth import get_viewer, require_owner
from utils.visibility import check_visibility, load_group_peers, visible_users

router = APIRouter()


@router.get("/visible")
async def list_visible_users(
    kind: DataKind = Query(DataKind.PROGRESS),
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    """Users whose ``kind`` data the viewer may open, for selectors."""
    peers = load_group_peers(conn, viewer)
    return [asdict(user) for user in visible_users(viewer, peers, kind)]


@router.get("/{owner_id}/visibility")
async def visibility_of(
    owner_id: int,
    kind: DataKind = Query(DataKind.PROGRESS),
    viewer: User = Depends(get_viewer),
    conn=Depends(get_db),
):
    owner = require_owner(conn, owner_id)
    return asdict(check_visibility(viewer, owner, kind))
