from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import aget_db
from app.core.security import ensure_correct_user_or_admin
from app.schemas.activitySchema import UserActivityResponse
from app.services.ActivityService import ActivityService

router = APIRouter(
    prefix="/activities",
    tags=["activities"]
)


@router.get(
    "/{username}",
    response_model=UserActivityResponse,
    dependencies=[Depends(ensure_correct_user_or_admin)],
)
async def get_user_activity(username: str, db: AsyncSession = Depends(aget_db)):
    """Feed of followed users plus the user's own activity, newest first."""
    return await ActivityService(db).get_user_activity(username)
