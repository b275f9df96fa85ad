import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_app_settings
from app.core.database import aget_db
from app.core.limiter import auth_rate_limit, limiter
from app.core.security import create_jwt_token
from app.schemas.userSchema import AuthUser, TokenResponse, UserLoginRequest, UserRegisterRequest
from app.services.UserService import UserService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


def token_for(user: AuthUser, settings: Settings) -> TokenResponse:
    return TokenResponse(token=create_jwt_token(user.model_dump(), settings))


@router.post("/token", response_model=TokenResponse)
@limiter.limit(auth_rate_limit)
async def login(
    request: Request,
    data: UserLoginRequest,
    db: AsyncSession = Depends(aget_db),
    settings: Settings = Depends(get_app_settings),
):
    """Exchange username/password for a bearer token."""
    user = await UserService(db, settings).authenticate(data.username, data.password)
    logger.info(f"Issued token for {user.username}")
    return token_for(user, settings)


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserRegisterRequest,
    db: AsyncSession = Depends(aget_db),
    settings: Settings = Depends(get_app_settings),
):
    """Create an account and return a bearer token for it."""
    user = await UserService(db, settings).register(data)
    return token_for(user, settings)
