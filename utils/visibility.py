from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from models import DataKind, GroupMembership, GroupRole, User, UserRole

ELEVATED_GROUP_ROLES = frozenset({GroupRole.REFERENT, GroupRole.ADMIN})


@dataclass(frozen=True)
class Visibility:
    can_view: bool
    can_edit: bool
    is_private: bool = False


@dataclass(frozen=True)
class VisibleUser:
    id: int
    name: str
    is_self: bool
    can_view: bool
    can_edit: bool
    is_private: bool


def check_visibility(viewer: User, owner: User, data_kind: DataKind) -> Visibility:
    """Decide whether ``viewer`` may read or change ``owner``'s data of ``data_kind``.

    Rules, first match wins:

    1. the viewer is the owner: full access;
    2. the viewer is a global administrator: full access;
    3. no group in common: no access;
    4. the viewer is referent (or group admin) of a shared group: full access,
       whatever the owner's privacy flag;
    5. otherwise: read-only, and only if the owner left ``data_kind`` public.
    """
    if viewer.id == owner.id:
        return Visibility(can_view=True, can_edit=True)
    if viewer.role is UserRole.ADMIN:
        return Visibility(can_view=True, can_edit=True)
    is_private = owner.is_private(data_kind)
    shared = viewer.group_ids() & owner.group_ids()
    if not shared:
        return Visibility(can_view=False, can_edit=False, is_private=is_private)
    if any(viewer.group_role(group_id) in ELEVATED_GROUP_ROLES for group_id in shared):
        return Visibility(can_view=True, can_edit=True, is_private=is_private)
    return Visibility(can_view=not is_private, can_edit=False, is_private=is_private)


def visible_users(viewer: User, candidates: Iterable[User], data_kind: DataKind) -> List[VisibleUser]:
    """Users the viewer can see for ``data_kind``, self first then by name."""
    result = []
    seen = set()
    for candidate in [viewer, *candidates]:
        if candidate.id in seen:
            continue
        seen.add(candidate.id)
        visibility = check_visibility(viewer, candidate, data_kind)
        if not visibility.can_view:
            continue
        result.append(
            VisibleUser(
                id=candidate.id,
                name=candidate.name,
                is_self=candidate.id == viewer.id,
                can_view=visibility.can_view,
                can_edit=visibility.can_edit,
                is_private=visibility.is_private,
            )
        )
    result.sort(key=lambda user: (not user.is_self, user.name.lower()))
    return result


def load_user(conn, user_id: int) -> Optional[User]:
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT id, name, role, private_attendance, private_progress, private_stats, private_evaluations
        FROM users
        WHERE id = ?
        """,
        (user_id,),
    )
    row = cursor.fetchone()
    if not row:
        return None
    cursor.execute("SELECT group_id, role FROM group_members WHERE user_id = ?", (user_id,))
    memberships = [GroupMembership(group_id=m["group_id"], role=m["role"]) for m in cursor.fetchall()]
    return User(
        id=row["id"],
        name=row["name"],
        role=row["role"],
        private_attendance=bool(row["private_attendance"]),
        private_progress=bool(row["private_progress"]),
        private_stats=bool(row["private_stats"]),
        private_evaluations=bool(row["private_evaluations"]),
        memberships=memberships,
    )


def load_group_peers(conn, user: User) -> List[User]:
    """Every other member of the user's groups, or every user for an administrator."""
    cursor = conn.cursor()
    if user.role is UserRole.ADMIN:
        cursor.execute("SELECT id FROM users WHERE id != ? ORDER BY id", (user.id,))
    else:
        group_ids = sorted(user.group_ids())
        if not group_ids:
            return []
        placeholders = ",".join("?" for _ in group_ids)
        cursor.execute(
            f"SELECT DISTINCT user_id FROM group_members WHERE group_id IN ({placeholders}) AND user_id != ?",
            (*group_ids, user.id),
        )
    peers = []
    for row in cursor.fetchall():
        peer = load_user(conn, row[0])
        if peer is not None:
            peers.append(peer)
    return peers
