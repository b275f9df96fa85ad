from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class NewMessageRequest(BaseModel):
    """Message to the thread shared by exactly the users in party."""
    party: List[str] = Field(..., min_length=2)
    message: str = Field(..., min_length=1)


class ThreadReplyRequest(BaseModel):
    message: str = Field(..., min_length=1)


class ThreadResolveRequest(BaseModel):
    party: List[str] = Field(..., min_length=2)


class ThreadIdResponse(BaseModel):
    thread_id: str


class ThreadMemberResponse(BaseModel):
    username: str
    first_name: str
    last_name: str
    profile_img: Optional[str] = None


class MessageResponse(BaseModel):
    thread_id: str
    id: int
    sender_username: str
    body: str
    created_on: datetime


class ThreadDetailResponse(BaseModel):
    thread_id: str
    members: List[ThreadMemberResponse]
    messages: List[MessageResponse]


class ThreadSummaryResponse(BaseModel):
    thread_id: str
    members: List[ThreadMemberResponse]
    last_message: MessageResponse


class HiddenMessagesResponse(BaseModel):
    messages: List[int]
    action: str = "deleted"
