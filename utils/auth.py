from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from db.database import get_db
from models import DataKind, User
from utils.visibility import Visibility, check_visibility, load_user

VIEWER_HEADER = "X-User-Id"


def get_viewer(
    x_user_id: Optional[int] = Header(default=None, alias=VIEWER_HEADER),
    conn=Depends(get_db),
) -> User:
    """Resolve the acting user; the session layer in front of the app sets the header."""
    if x_user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Viewer required")
    viewer = load_user(conn, x_user_id)
    if viewer is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown viewer")
    return viewer


def require_owner(conn, owner_id: int) -> User:
    owner = load_user(conn, owner_id)
    if owner is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return owner


def require_access(viewer: User, owner: User, kind: DataKind, edit: bool = False) -> Visibility:
    visibility = check_visibility(viewer, owner, kind)
    allowed = visibility.can_edit if edit else visibility.can_view
    if not allowed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return visibility
