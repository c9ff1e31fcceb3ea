# src/schemas/group_member.py
from typing import Literal

from pydantic import BaseModel
from .user import UserOut

class GroupMemberCreate(BaseModel):
    user_id: int
    role: Literal["admin", "member"] = "member"

class GroupMemberOut(BaseModel):
    id: int
    group_id: int
    role: str
    user: UserOut
    class Config:
        from_attributes = True
