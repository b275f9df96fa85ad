"""Games, rosters and game comments."""

import logging
import datetime as dt
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.constants import (
    GAME_FIELD_COLUMNS,
    GAME_NULLABLE_FIELDS,
    ActivityOperation,
    GameField,
    GameStatus,
)
from app.core.exceptions import BadRequestError, NotFoundError, not_found_game
from app.models.activity import GameActivity, GameCommentActivity, UserGameActivity
from app.models.game import Game, GameComment, UserGame
from app.models.user import User
from app.schemas.gameSchema import (
    CommentResponse,
    GameCreateRequest,
    GameDetail,
    GameHistory,
    GameHistoryGroup,
    GameListItem,
    PlayerResponse,
)
from app.utils.activity import record_activity
from app.utils.lookups import require_active_game, require_active_user, require_game, require_user
from app.utils.sql import sql_for_partial_update

logger = logging.getLogger(__name__)


def to_game_detail(game: Game) -> GameDetail:
    return GameDetail(
        id=game.id,
        title=game.title,
        description=game.description,
        date=game.game_date,
        time=game.game_time,
        address=game.game_address,
        city=game.game_city,
        state=game.game_state,
        created_on=game.created_on,
        created_by=game.created_by,
        days_diff=game.days_diff,
    )


def to_comment_response(comment: GameComment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        username=comment.username,
        comment=comment.comment,
        created_on=comment.created_on,
    )


class GameService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_model(self, game_id: int) -> Game:
        result = await self.db.execute(select(Game).where(Game.id == game_id))
        game = result.scalar_one_or_none()
        if not game:
            raise not_found_game(game_id)
        return game

    async def create(self, data: GameCreateRequest, created_by: str) -> GameDetail:
        await require_active_user(self.db, created_by)

        game = Game(
            title=data.title,
            description=data.description,
            game_date=data.date,
            game_time=data.time,
            game_address=data.address,
            game_city=data.city,
            game_state=data.state,
            created_by=created_by,
        )
        self.db.add(game)
        await self.db.flush()

        record_activity(
            self.db, GameActivity, ActivityOperation.created,
            primary_user=created_by, game_id=game.id, data=game.title,
        )
        await self.db.flush()
        logger.info(f"{created_by} created game {game.id}")
        return to_game_detail(game)

    async def get(self, game_id: int) -> GameDetail:
        """Raises NotFoundError / InactiveError for a missing or deactivated game."""
        await require_active_game(self.db, game_id)
        return to_game_detail(await self._get_model(game_id))

    async def find_all(
        self,
        date: Optional[dt.date] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        host: Optional[str] = None,
        joined: Optional[str] = None,
        is_active: Optional[bool] = None,
        game_status: Optional[str] = None,
    ) -> List[GameListItem]:
        """
        Games matching every given filter, by game date then id.

        `game_status` is 'pending' for games today or later and 'resolved'
        for games already played; None leaves the date unrestricted.
        Each game carries the number of its active players.
        """
        players = (
            select(func.count(UserGame.username))
            .join(User, User.username == UserGame.username)
            .where(UserGame.game_id == Game.id, User.is_active == True)
            .correlate(Game)
            .scalar_subquery()
        )
        stmt = select(Game, players.label("players"))

        if date is not None:
            stmt = stmt.where(Game.game_date == date)
        if city:
            stmt = stmt.where(func.lower(Game.game_city).contains(city.lower()))
        if state:
            stmt = stmt.where(Game.game_state == state)
        if host:
            stmt = stmt.where(Game.created_by == host)
        if joined:
            stmt = stmt.where(
                Game.id.in_(select(UserGame.game_id).where(UserGame.username == joined))
            )
        if is_active is not None:
            stmt = stmt.where(Game.is_active == is_active)
        if game_status is not None:
            try:
                status = GameStatus(game_status)
            except ValueError:
                raise BadRequestError(f"Invalid game status: {game_status}")
            today = dt.date.today()
            if status == GameStatus.pending:
                stmt = stmt.where(Game.game_date >= today)
            else:
                stmt = stmt.where(Game.game_date < today)

        result = await self.db.execute(stmt.order_by(Game.game_date, Game.id))
        return [
            GameListItem(
                id=game.id,
                title=game.title,
                date=game.game_date,
                time=game.game_time,
                address=game.game_address,
                city=game.game_city,
                state=game.game_state,
                created_by=game.created_by,
                players=count,
                days_diff=game.days_diff,
                is_active=game.is_active,
            )
            for game, count in result.all()
        ]

    async def game_history(self, username: str) -> GameHistory:
        """Active games the user hosted or joined, split into upcoming and played."""
        await require_user(self.db, username)

        async def group(**filters) -> GameHistoryGroup:
            return GameHistoryGroup(
                pending=await self.find_all(is_active=True, game_status="pending", **filters),
                resolved=await self.find_all(is_active=True, game_status="resolved", **filters),
            )

        return GameHistory(hosted=await group(host=username), joined=await group(joined=username))

    async def update(self, game_id: int, data: Dict[str, Any]) -> GameDetail:
        """
        Partial update; only the declared game fields may be changed.

        Raises:
            NotFoundError / InactiveError: game missing or deactivated.
            BadRequestError: empty payload, an unknown field or a null required field.
        """
        values = sql_for_partial_update(data, GAME_FIELD_COLUMNS, GameField, GAME_NULLABLE_FIELDS)
        await require_active_game(self.db, game_id)

        game = await self._get_model(game_id)
        for column, value in values.items():
            setattr(game, column, value)

        record_activity(
            self.db, GameActivity, ActivityOperation.updated,
            primary_user=game.created_by, game_id=game.id, data=", ".join(sorted(data)),
        )
        await self.db.flush()
        logger.info(f"Game {game_id} updated: {sorted(data)}")
        return to_game_detail(game)

    async def _set_active(self, game_id: int, is_active: bool) -> GameDetail:
        game = await self._get_model(game_id)
        game.is_active = is_active

        operation = ActivityOperation.reactivated if is_active else ActivityOperation.deactivated
        record_activity(
            self.db, GameActivity, operation,
            primary_user=game.created_by, game_id=game.id, data=game.title,
        )
        await self.db.flush()
        logger.info(f"Game {game_id} {operation.value}")
        return to_game_detail(game)

    async def deactivate(self, game_id: int) -> GameDetail:
        return await self._set_active(game_id, False)

    async def reactivate(self, game_id: int) -> GameDetail:
        return await self._set_active(game_id, True)

    # ------------------------------
    # Roster
    # ------------------------------
    async def _roster(self, game_id: int, is_user_active: Optional[bool] = True) -> List[PlayerResponse]:
        stmt = (
            select(User.username, User.profile_img)
            .join(UserGame, UserGame.username == User.username)
            .where(UserGame.game_id == game_id)
        )
        if is_user_active is not None:
            stmt = stmt.where(User.is_active == is_user_active)
        result = await self.db.execute(stmt.order_by(User.username))
        return [PlayerResponse(username=row.username, profile_img=row.profile_img) for row in result]

    async def get_players(self, game_id: int, is_user_active: Optional[bool] = None) -> List[PlayerResponse]:
        """Players of the game by username; None includes inactive accounts."""
        await require_game(self.db, game_id)
        return await self._roster(game_id, is_user_active)

    async def _is_player(self, game_id: int, username: str) -> bool:
        result = await self.db.execute(
            select(UserGame.id).where(UserGame.game_id == game_id, UserGame.username == username)
        )
        return result.first() is not None

    async def enroll(self, game_id: int, username: str) -> bool:
        """Put the user on the roster unless already there; True when a row was added."""
        if await self._is_player(game_id, username):
            return False

        self.db.add(UserGame(game_id=game_id, username=username))
        record_activity(
            self.db, UserGameActivity, ActivityOperation.joined,
            primary_user=username, game_id=game_id,
        )
        await self.db.flush()
        logger.info(f"{username} joined game {game_id}")
        return True

    async def add_player(self, game_id: int, username: str) -> List[PlayerResponse]:
        """
        Join the game. Joining twice leaves a single roster entry.

        Returns the active roster after the change.
        """
        await require_active_game(self.db, game_id)
        await require_active_user(self.db, username)

        await self.enroll(game_id, username)
        return await self._roster(game_id)

    async def remove_player(self, game_id: int, username: str) -> List[PlayerResponse]:
        """Leave the game; returns the active roster after the change."""
        await require_active_game(self.db, game_id)
        await require_active_user(self.db, username)

        result = await self.db.execute(
            select(UserGame).where(UserGame.game_id == game_id, UserGame.username == username)
        )
        entry = result.scalar_one_or_none()
        if entry:
            await self.db.delete(entry)
            record_activity(
                self.db, UserGameActivity, ActivityOperation.left,
                primary_user=username, game_id=game_id,
            )
            await self.db.flush()
            logger.info(f"{username} left game {game_id}")
        return await self._roster(game_id)

    # ------------------------------
    # Comments
    # ------------------------------
    async def add_comment(self, game_id: int, username: str, comment: str) -> CommentResponse:
        await require_user(self.db, username)
        await require_game(self.db, game_id)

        row = GameComment(game_id=game_id, username=username, comment=comment)
        self.db.add(row)
        record_activity(
            self.db, GameCommentActivity, ActivityOperation.commented,
            primary_user=username, game_id=game_id, data=comment,
        )
        await self.db.flush()
        logger.info(f"{username} commented on game {game_id}")
        return to_comment_response(row)

    async def get_comments(
        self,
        game_id: int,
        is_comment_active: Optional[bool] = None,
        is_user_active: Optional[bool] = None,
    ) -> List[CommentResponse]:
        """Comments on the game in posting order; None disables a filter."""
        await require_game(self.db, game_id)

        stmt = (
            select(GameComment)
            .join(User, User.username == GameComment.username)
            .where(GameComment.game_id == game_id)
        )
        if is_comment_active is not None:
            stmt = stmt.where(GameComment.is_active == is_comment_active)
        if is_user_active is not None:
            stmt = stmt.where(User.is_active == is_user_active)

        result = await self.db.execute(stmt.order_by(GameComment.id))
        return [to_comment_response(c) for c in result.scalars().all()]

    async def get_comment(self, comment_id: int) -> GameComment:
        result = await self.db.execute(select(GameComment).where(GameComment.id == comment_id))
        comment = result.scalar_one_or_none()
        if not comment:
            raise NotFoundError(f"No comment: {comment_id}")
        return comment

    async def deactivate_comment(self, comment_id: int) -> CommentResponse:
        comment = await self.get_comment(comment_id)
        comment.is_active = False

        record_activity(
            self.db, GameCommentActivity, ActivityOperation.deactivated,
            primary_user=comment.username, game_id=comment.game_id, data=comment.comment,
        )
        await self.db.flush()
        logger.info(f"Comment {comment_id} deactivated")
        return to_comment_response(comment)
