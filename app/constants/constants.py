"""Constants for invite statuses, game statuses, activity operations and updatable fields."""

from enum import Enum


class InviteStatus(str, Enum):
    """Enumeration of invite statuses."""

    pending = "pending"
    accepted = "accepted"
    denied = "denied"
    cancelled = "cancelled"


class GameStatus(str, Enum):
    """Enumeration of game date statuses."""

    pending = "pending"
    resolved = "resolved"


class ActivityOperation(str, Enum):
    """Enumeration of operations recorded in the activity tables."""

    created = "created"
    updated = "updated"
    deactivated = "deactivated"
    reactivated = "reactivated"
    joined = "joined"
    left = "left"
    commented = "commented"
    followed = "followed"
    unfollowed = "unfollowed"
    invited = "invited"
    accepted = "accepted"
    denied = "denied"
    cancelled = "cancelled"


class FollowAction(str, Enum):
    """Result of toggling a follow edge."""

    followed = "followed"
    unfollowed = "unfollowed"


class UserField(str, Enum):
    """Profile fields a user may change through a partial update."""

    first_name = "first_name"
    last_name = "last_name"
    birth_date = "birth_date"
    city = "city"
    state = "state"
    phone_number = "phone_number"
    profile_img = "profile_img"
    email = "email"
    is_private = "is_private"


class GameField(str, Enum):
    """Game fields a host may change through a partial update."""

    title = "title"
    description = "description"
    date = "date"
    time = "time"
    address = "address"
    city = "city"
    state = "state"


# Logical field -> storage column
USER_FIELD_COLUMNS = {
    UserField.first_name: "first_name",
    UserField.last_name: "last_name",
    UserField.birth_date: "birth_date",
    UserField.city: "current_city",
    UserField.state: "current_state",
    UserField.phone_number: "phone_number",
    UserField.profile_img: "profile_img",
    UserField.email: "email",
    UserField.is_private: "is_private",
}

GAME_FIELD_COLUMNS = {
    GameField.title: "title",
    GameField.description: "description",
    GameField.date: "game_date",
    GameField.time: "game_time",
    GameField.address: "game_address",
    GameField.city: "game_city",
    GameField.state: "game_state",
}

# Fields whose columns accept NULL in a partial update
USER_NULLABLE_FIELDS = {
    UserField.birth_date,
    UserField.city,
    UserField.state,
    UserField.phone_number,
    UserField.profile_img,
}

GAME_NULLABLE_FIELDS = {GameField.description}

# Statuses an invite may be moved to and who may move it there
INVITE_STATUS_VALUES = {status.value for status in InviteStatus}
SENDER_STATUSES = {InviteStatus.cancelled}
RECIPIENT_STATUSES = {InviteStatus.accepted, InviteStatus.denied}
