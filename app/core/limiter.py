from fastapi import FastAPI
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import Settings


class AppLimiter(Limiter):
    """slowapi Limiter that carries the limits of the app it is bound to."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.auth_rate_limit = Settings.model_fields["AUTH_RATE_LIMIT"].default

    def bind(self, app: FastAPI, settings: Settings) -> None:
        self.auth_rate_limit = settings.AUTH_RATE_LIMIT
        app.state.limiter = self


limiter = AppLimiter(key_func=get_remote_address)


def auth_rate_limit() -> str:
    return limiter.auth_rate_limit
