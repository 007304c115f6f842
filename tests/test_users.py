import asyncpg
import bcrypt
import pytest

from auth import security
from core import errors
from users import service as users_service

from factories import make_user


def _with_counts(fake_db, *, posts=0, followers=0, following=0):
    fake_db.on("fetch_val", "count(*) FROM posts", posts)
    fake_db.on("fetch_val", "count(*) FROM follows WHERE user_no", followers)
    fake_db.on("fetch_val", "count(*) FROM follows WHERE follower_user_no", following)


def _signup(**overrides):
    submission = {
        "first_name": " Ada ",
        "last_name": "Lovelace",
        "username": "ada",
        "email": "ada@example.com",
        "password": "analytical",
        "confirm_password": "analytical",
    }
    submission.update(overrides)
    return submission


async def test_create_user_hashes_password_and_returns_counts(fake_db):
    fake_db.on("fetch_val", "INSERT INTO users", 1)
    fake_db.on("fetch_one", "FROM users WHERE user_no", make_user())
    _with_counts(fake_db, posts=3, followers=2, following=5)

    user = await users_service.create_user(_signup())

    _, sql, args = fake_db.calls_matching("INSERT INTO users")[0]
    assert sql == (
        "INSERT INTO users (first_name, last_name, username, email, password) "
        "VALUES ($1, $2, $3, $4, $5) RETURNING user_no"
    )
    assert args[:4] == ("Ada", "Lovelace", "ada", "ada@example.com")
    assert args[4] != "analytical"
    assert bcrypt.checkpw(b"analytical", args[4].encode())

    assert user["user_no"] == 1
    assert (user["post_count"], user["follower_count"], user["following_count"]) == (3, 2, 5)
    assert "password" not in user


async def test_create_user_reports_every_violation(fake_db):
    with pytest.raises(errors.ValidationError) as exc_info:
        await users_service.create_user({"username": "ada", "password": "a", "confirm_password": "b"})

    assert exc_info.value.details == [
        "First Name is a required field",
        "Last Name is a required field",
        "Email is a required field",
        "Passwords must match",
    ]
    assert fake_db.calls == []


async def test_create_user_with_taken_email(fake_db):
    violation = asyncpg.UniqueViolationError("duplicate key")
    violation.detail = "Key (email)=(ada@example.com) already exists."
    fake_db.on("fetch_val", "INSERT INTO users", violation)

    with pytest.raises(errors.ConflictError) as exc_info:
        await users_service.create_user(_signup())

    assert exc_info.value.details == ["Email is already in use"]


async def test_get_missing_user(fake_db):
    with pytest.raises(errors.NotFoundError) as exc_info:
        await users_service.get_user(9)

    assert exc_info.value.details == ["User with a user_no of 9 could not be found"]


async def test_get_user_by_email_is_case_insensitive(fake_db):
    fake_db.on("fetch_one", "lower(email) = $1", make_user())

    user = await users_service.get_user_by_email(" ADA@example.com ")

    assert user["email"] == "ada@example.com"
    assert fake_db.calls_matching("lower(email)")[0][2] == ("ada@example.com",)


async def test_create_user_stores_email_lowercased(fake_db):
    fake_db.on("fetch_val", "INSERT INTO users", 1)
    fake_db.on("fetch_one", "FROM users WHERE user_no", make_user())

    await users_service.create_user(_signup(email="Ada@Example.COM"))

    _, _, args = fake_db.calls_matching("INSERT INTO users")[0]
    assert args[3] == "ada@example.com"


async def test_update_user_stores_email_lowercased(fake_db):
    fake_db.on("fetch_one", "FROM users WHERE user_no", make_user())

    await users_service.update_user(1, {"email": "Ada@Example.com"})

    assert fake_db.calls_matching("UPDATE users") == [
        ("execute", "UPDATE users SET email = $1, last_updated = now() WHERE user_no = $2", ("ada@example.com", 1))
    ]


async def test_email_taken_in_another_case_is_a_conflict(fake_db):
    violation = asyncpg.UniqueViolationError("duplicate key")
    violation.detail = "Key (lower(email::text))=(ada@example.com) already exists."
    violation.constraint_name = "users_email_key"
    fake_db.on("fetch_val", "INSERT INTO users", violation)

    with pytest.raises(errors.ConflictError) as exc_info:
        await users_service.create_user(_signup(email="ADA@example.com"))

    assert exc_info.value.details == ["Email is already in use"]


async def test_get_user_by_unknown_email(fake_db):
    with pytest.raises(errors.NotFoundError) as exc_info:
        await users_service.get_user_by_email("nobody@example.com")

    assert exc_info.value.details == ["User with a email of nobody@example.com could not be found"]


async def test_list_users_decorates_every_row(fake_db):
    fake_db.on("fetch_all", "FROM users", [make_user(), make_user(user_no=2, username="grace")])
    fake_db.on("fetch_val", "count(*) FROM users", 2)
    _with_counts(fake_db, posts=1)

    result = await users_service.list_users(items_per_page=5)

    assert [user["user_no"] for user in result["data"]] == [1, 2]
    assert all(user["post_count"] == 1 for user in result["data"])
    assert result["pagination"]["total_records"] == 2
    assert "WHERE is_deleted = $1" in fake_db.sql("fetch_all")[0]


async def test_count_users_excludes_deleted_by_default(fake_db):
    fake_db.on("fetch_val", "count(*) FROM users", 7)

    assert await users_service.count_users() == 7
    assert fake_db.calls == [("fetch_val", "SELECT count(*) FROM users WHERE is_deleted = $1", (False,))]


async def test_search_users_skips_deleted_and_banned(fake_db):
    await users_service.search_users("ada", ["username"])

    _, sql, args = fake_db.calls[0]
    assert "WHERE is_deleted = $1 AND is_banned = $2 AND (username::text ILIKE" in sql
    assert args[:3] == (False, False, "ada")


async def test_update_user_only_touches_editable_fields(fake_db):
    fake_db.on("fetch_one", "FROM users WHERE user_no", make_user())

    await users_service.update_user(1, {"bio": " hello ", "password": "sneaky", "is_banned": False})

    assert fake_db.calls_matching("UPDATE users") == [
        ("execute", "UPDATE users SET bio = $1, last_updated = now() WHERE user_no = $2", ("hello", 1))
    ]


async def test_update_missing_user_writes_nothing(fake_db):
    with pytest.raises(errors.NotFoundError):
        await users_service.update_user(9, {"bio": "hello"})

    assert fake_db.calls_matching("UPDATE") == []


async def test_update_user_validates_before_reading(fake_db):
    with pytest.raises(errors.ValidationError) as exc_info:
        await users_service.update_user(1, {"bio": "x" * 151})

    assert exc_info.value.details == ["Bio cannot be more than 150 characters"]
    assert fake_db.calls == []


async def test_update_user_rejects_non_numeric_id(fake_db):
    with pytest.raises(errors.BadRequestError) as exc_info:
        await users_service.update_user("1", {"bio": "hello"})

    assert exc_info.value.details == ["Parameter Error: user_no must be a number"]


async def test_delete_user_is_soft(fake_db):
    fake_db.on("fetch_one", "FROM users WHERE user_no", make_user())

    assert await users_service.delete_user(1) is True
    assert fake_db.calls_matching("UPDATE users") == [
        ("execute", "UPDATE users SET is_deleted = $1, last_updated = now() WHERE user_no = $2", (True, 1))
    ]
    assert fake_db.calls_matching("DELETE") == []


async def test_update_password(fake_db):
    fake_db.on("fetch_val", "SELECT password FROM users", security.hash_password("analytical"))
    fake_db.on("fetch_one", "FROM users WHERE user_no", make_user())

    await users_service.update_password(1, "analytical", "difference", "difference")

    _, sql, args = fake_db.calls_matching("UPDATE users")[0]
    assert sql == "UPDATE users SET password = $1, last_updated = now() WHERE user_no = $2"
    assert security.verify_password("difference", args[0])
    assert args[1] == 1


async def test_update_password_with_wrong_current_password(fake_db):
    fake_db.on("fetch_val", "SELECT password FROM users", security.hash_password("analytical"))

    with pytest.raises(errors.UnauthorizedError) as exc_info:
        await users_service.update_password(1, "guess", "difference", "difference")

    assert exc_info.value.status_code == 401
    assert exc_info.value.details == ["Password does not match hashed password"]
    assert fake_db.calls_matching("UPDATE") == []


async def test_update_password_confirmation_mismatch(fake_db):
    with pytest.raises(errors.ValidationError) as exc_info:
        await users_service.update_password(1, "analytical", "difference", "different")

    assert exc_info.value.details == ["Passwords must match"]
    assert fake_db.calls == []


async def test_update_password_for_missing_user(fake_db):
    with pytest.raises(errors.NotFoundError) as exc_info:
        await users_service.update_password(4, "analytical", "difference", "difference")

    assert exc_info.value.details == ["User with a user_no of 4 could not be found"]


async def test_update_last_login_date(fake_db):
    fake_db.on("fetch_one", "FROM users WHERE user_no", make_user())

    await users_service.update_last_login_date(1)

    assert fake_db.calls_matching("UPDATE users")[0][1] == (
        "UPDATE users SET last_login_date = now(), last_updated = now() WHERE user_no = $1"
    )


def test_introspection():
    assert "password" not in users_service.sortable_columns()
    assert users_service.filter_conditions("user_no") == ["eq", "gt", "gte", "lt", "lte"]
    with pytest.raises(errors.BadRequestError):
        users_service.filter_conditions("bio")
