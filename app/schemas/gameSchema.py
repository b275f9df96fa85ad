import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GameCreateRequest(BaseModel):
    """Request schema for hosting a new game."""
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    date: dt.date
    time: dt.time
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=2, max_length=2)


class GameUpdateRequest(BaseModel):
    """Partial game update; unknown keys are rejected."""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    date: Optional[dt.date] = None
    time: Optional[dt.time] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = Field(None, min_length=2, max_length=2)


class GameDetail(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    date: dt.date
    time: dt.time
    address: str
    city: str
    state: str
    created_on: dt.datetime
    created_by: str
    days_diff: int


class GameListItem(BaseModel):
    id: int
    title: str
    date: dt.date
    time: dt.time
    address: str
    city: str
    state: str
    created_by: str
    players: int
    days_diff: int
    is_active: bool


class PlayerResponse(BaseModel):
    username: str
    profile_img: Optional[str] = None


class CommentCreateRequest(BaseModel):
    comment: str = Field(..., min_length=1, max_length=500)


class CommentResponse(BaseModel):
    id: int
    username: str
    comment: str
    created_on: dt.datetime


class GameHistoryGroup(BaseModel):
    pending: List[GameListItem]
    resolved: List[GameListItem]


class GameHistory(BaseModel):
    """Active games a user hosted or joined, split on the game date."""
    hosted: GameHistoryGroup
    joined: GameHistoryGroup
