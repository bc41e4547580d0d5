from pydantic import BaseModel
from typing import List, Optional
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"


class GroupRole(str, Enum):
    MEMBER = "MEMBER"
    REFERENT = "REFERENT"
    ADMIN = "ADMIN"


class DataKind(str, Enum):
    ATTENDANCE = "attendance"
    PROGRESS = "progress"
    STATS = "stats"
    EVALUATIONS = "evaluations"


class GroupMembership(BaseModel):
    group_id: int
    role: GroupRole = GroupRole.MEMBER

    class Config:
        from_attributes = True
        frozen = True


class UserCreate(BaseModel):
    name: str
    role: UserRole = UserRole.USER
    private_attendance: bool = False
    private_progress: bool = False
    private_stats: bool = False
    private_evaluations: bool = False


class User(UserCreate):
    id: int
    memberships: List[GroupMembership] = []

    class Config:
        from_attributes = True

    def is_private(self, kind: DataKind) -> bool:
        return bool(getattr(self, f"private_{DataKind(kind).value}"))

    def group_ids(self) -> set:
        return {membership.group_id for membership in self.memberships}

    def group_role(self, group_id: int) -> Optional[GroupRole]:
        for membership in self.memberships:
            if membership.group_id == group_id:
                return membership.role
        return None
