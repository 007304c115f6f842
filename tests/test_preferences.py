import asyncpg
import pytest

from core import errors
from preferences import service as preferences_service

from factories import make_user


def make_preference(**overrides):
    row = {
        "user_preference_no": 30,
        "user_no": 1,
        "dark_mode": False,
        "is_deleted": False,
        "last_updated": "2024-01-01T00:00:00+00:00",
    }
    row.update(overrides)
    return row


async def test_create_preference(fake_db):
    fake_db.on("fetch_one", "FROM users WHERE user_no", make_user())
    fake_db.on("fetch_val", "INSERT INTO user_preferences", 30)
    fake_db.on("fetch_one", "FROM user_preferences WHERE user_no", make_preference(dark_mode=True))

    preference = await preferences_service.create_user_preference({"user_no": 1, "dark_mode": True})

    assert preference["dark_mode"] is True
    assert fake_db.calls_matching("INSERT INTO user_preferences")[0][1:] == (
        "INSERT INTO user_preferences (user_no, dark_mode) VALUES ($1, $2) RETURNING user_preference_no",
        (1, True),
    )


async def test_second_preference_row_is_a_conflict(fake_db):
    violation = asyncpg.UniqueViolationError("duplicate key")
    violation.constraint_name = "user_preferences_user_no_key"
    fake_db.on("fetch_one", "FROM users WHERE user_no", make_user())
    fake_db.on("fetch_val", "INSERT INTO user_preferences", violation)

    with pytest.raises(errors.ConflictError) as exc_info:
        await preferences_service.create_user_preference({"user_no": 1})

    assert exc_info.value.details == ["User Number is already in use"]


async def test_banned_user_cannot_create_preference(fake_db):
    fake_db.on("fetch_one", "FROM users WHERE user_no", make_user(is_banned=True))

    with pytest.raises(errors.ForbiddenError) as exc_info:
        await preferences_service.create_user_preference({"user_no": 1})

    assert exc_info.value.details == ["User (user_no: 1) does not have access to create a user preference"]


async def test_update_preference_by_user(fake_db):
    fake_db.on("fetch_one", "FROM user_preferences WHERE user_no", make_preference())

    await preferences_service.update_user_preference(1, {"dark_mode": True})

    assert fake_db.calls_matching("UPDATE user_preferences") == [
        (
            "execute",
            "UPDATE user_preferences SET dark_mode = $1, last_updated = now() WHERE user_no = $2",
            (True, 1),
        )
    ]


async def test_missing_preference(fake_db):
    with pytest.raises(errors.NotFoundError) as exc_info:
        await preferences_service.get_user_preference(1)

    assert exc_info.value.details == ["User preference with a user_no of 1 could not be found"]


async def test_delete_preference_is_soft(fake_db):
    fake_db.on("fetch_one", "FROM user_preferences WHERE user_no", make_preference())

    assert await preferences_service.delete_user_preference(1) is True
    assert fake_db.calls_matching("UPDATE user_preferences")[0][2] == (True, 1)


async def test_count_preferences(fake_db):
    fake_db.on("fetch_val", "count(*) FROM user_preferences", 2)

    assert await preferences_service.count_user_preferences({"dark_mode": {"value": True}}) == 2
    assert fake_db.calls[0][2] == (False, True)
