from typing import Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.constants import ActivityOperation
from app.models.activity import ActivityMixin


def record_activity(
    db: AsyncSession,
    table: Type[ActivityMixin],
    operation: ActivityOperation,
    primary_user: str,
    secondary_user: Optional[str] = None,
    game_id: Optional[int] = None,
    data: Optional[str] = None,
) -> None:
    """Append an activity row; it is flushed with the rest of the unit of work."""
    db.add(
        table(
            primary_user=primary_user,
            secondary_user=secondary_user,
            game_id=game_id,
            data=data,
            operation=operation.value,
        )
    )
