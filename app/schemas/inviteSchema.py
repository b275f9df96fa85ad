from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from app.constants.constants import InviteStatus


class InviteCreateRequest(BaseModel):
    to_users: List[str] = Field(..., min_length=1)


class InviteCreated(BaseModel):
    id: int
    to_user: str
    game_id: int
    created_on: datetime

    class Config:
        from_attributes = True


class InviteResponse(BaseModel):
    id: int
    game_id: int
    from_user: str
    to_user: str
    status: InviteStatus
    created_on: datetime

    class Config:
        from_attributes = True


class InviteActionResponse(BaseModel):
    action: InviteStatus
    invite: InviteResponse


class UserInvitesResponse(BaseModel):
    received: List[InviteResponse]
    sent: List[InviteResponse]
