from datetime import date, time, timedelta
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

from app.constants.constants import InviteStatus
from app.core.config import Settings
from app.core.database import DatabaseSessionManager
from app.core.limiter import limiter
from app.core.security import create_jwt_token, hash_password
from app.main import create_app
from app.models.follow import Follow
from app.models.game import Game, UserGame
from app.models.invite import Invite
from app.models.user import User


@pytest.fixture
def settings():
    return Settings(
        TESTING_MODE=True,
        TEST_DATABASE_URL="sqlite+aiosqlite:///:memory:",
        SECRET_KEY="test-secret",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
async def session_manager(settings):
    manager = DatabaseSessionManager.from_settings(settings)
    await manager.init()
    yield manager
    await manager.close()


def make_user(username, is_active=True, is_admin=False, city="Oakland", state="CA"):
    return User(
        username=username,
        password=hash_password("password1", rounds=4),
        first_name=f"{username}F",
        last_name=f"{username}L",
        current_city=city,
        current_state=state,
        email=f"{username}@email.com",
        is_active=is_active,
        is_admin=is_admin,
    )


def make_game(title, created_by, days_from_today, is_active=True, city="Oakland", state="CA"):
    return Game(
        title=title,
        description=f"{title} description",
        game_date=date.today() + timedelta(days=days_from_today),
        game_time=time(18, 30),
        game_address="100 Court St",
        game_city=city,
        game_state=state,
        created_by=created_by,
        is_active=is_active,
    )


@pytest.fixture
async def seed(session_manager):
    """
    u1, u2, u4 active; u3 inactive; admin is an active admin.
    g1: upcoming, hosted by u1, players u1 and u3.
    g2: upcoming but deactivated, hosted by u2.
    g3: already played, hosted by u1, player u2.
    u1 follows u2 and u3; u2 follows u1.
    One pending invite u1 -> u2 for g1.
    """
    async with session_manager.get_session() as session:
        session.add_all([
            make_user("u1"),
            make_user("u2", city="San Francisco"),
            make_user("u3", is_active=False),
            make_user("u4", state="NY", city="Brooklyn"),
            make_user("admin", is_admin=True),
        ])
        await session.flush()

        g1 = make_game("g1", "u1", 7)
        g2 = make_game("g2", "u2", 3, is_active=False)
        g3 = make_game("g3", "u1", -7, city="San Francisco")
        session.add_all([g1, g2, g3])
        await session.flush()

        session.add_all([
            UserGame(game_id=g1.id, username="u1"),
            UserGame(game_id=g1.id, username="u3"),
            UserGame(game_id=g3.id, username="u2"),
            Follow(following_user="u1", followed_user="u2"),
            Follow(following_user="u1", followed_user="u3"),
            Follow(following_user="u2", followed_user="u1"),
        ])
        invite = Invite(game_id=g1.id, from_user="u1", to_user="u2", status=InviteStatus.pending)
        session.add(invite)
        await session.flush()

        return SimpleNamespace(g1=g1.id, g2=g2.id, g3=g3.id, invite=invite.id)


@pytest.fixture
async def db(session_manager, seed):
    async with session_manager.session_factory() as session:
        yield session


@pytest.fixture
async def client(settings, session_manager, seed):
    app = create_app(settings)
    app.state.session_manager = session_manager
    limiter.reset()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_header(settings):
    def _header(username, is_admin=False):
        token = create_jwt_token({"username": username, "is_admin": is_admin}, settings)
        return {"Authorization": f"Bearer {token}"}
    return _header
