"""Typed errors raised by the services and rendered by the API layer."""

from fastapi import status


class AppError(Exception):
    """Base error carrying the HTTP status the API layer responds with."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": {"message": self.message, "status": self.status_code}}


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not Found"


class UnauthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad Request"


class InactiveError(AppError):
    """Entity exists but is administratively disabled."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Account is currently disabled"


def not_found_user(username: str) -> NotFoundError:
    return NotFoundError(f"No user: {username}")


def inactive_user(username: str) -> InactiveError:
    return InactiveError(f"User inactive: {username}")


def not_found_game(game_id) -> NotFoundError:
    return NotFoundError(f"No game: {game_id}")


def inactive_game(game_id) -> InactiveError:
    return InactiveError(f"Game inactive: {game_id}")
