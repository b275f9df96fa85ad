from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class ActivityRecord(BaseModel):
    primary_user: str
    secondary_user: Optional[str] = None
    game_id: Optional[int] = None
    data: Optional[str] = None
    operation: str
    stamp: datetime


class UserActivityResponse(BaseModel):
    activity: List[ActivityRecord]
    my_activity: List[ActivityRecord]
