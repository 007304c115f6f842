import pytest

from core import errors
from likes import service as likes_service

from factories import make_comment, make_post, make_user


class LikeStore:
    """
    Emulates the likes table's unique (user_no, reference_table,
    reference_no) key for the upsert statement.
    """

    def __init__(self):
        self.rows: dict[int, dict] = {}

    def upsert(self, sql, args):
        user_no, reference_table, reference_no, is_active = args
        for row in self.rows.values():
            if (row["user_no"], row["reference_table"], row["reference_no"]) == (
                user_no,
                reference_table,
                reference_no,
            ):
                row["is_active"] = is_active
                return row["like_no"]
        like_no = len(self.rows) + 1
        self.rows[like_no] = {
            "like_no": like_no,
            "user_no": user_no,
            "reference_table": reference_table,
            "reference_no": reference_no,
            "is_active": is_active,
        }
        return like_no

    def get(self, sql, args):
        row = self.rows.get(args[0])
        return dict(row) if row else None

    def update(self, sql, args):
        is_active, like_no = args
        self.rows[like_no]["is_active"] = is_active

    def count_active(self, sql, args):
        reference_no, reference_table, is_active = args
        return sum(
            1
            for row in self.rows.values()
            if (row["reference_no"], row["reference_table"], row["is_active"])
            == (reference_no, reference_table, is_active)
        )


@pytest.fixture
def store(fake_db):
    store = LikeStore()
    fake_db.on("fetch_one", "FROM users WHERE user_no", make_user())
    fake_db.on("fetch_one", "FROM posts WHERE post_no", make_post())
    fake_db.on("fetch_one", "FROM comments WHERE comment_no", make_comment())
    fake_db.on("fetch_val", "INSERT INTO likes", store.upsert)
    fake_db.on("fetch_one", "FROM likes WHERE like_no", store.get)
    fake_db.on("fetch_val", "count(*) FROM likes", store.count_active)
    fake_db.on("execute", "UPDATE likes", store.update)
    return store


async def test_like_request_upserts_on_the_relation_key(fake_db, store):
    like = await likes_service.like_request(1, 10, "posts")

    assert like["is_active"] is True
    _, sql, args = fake_db.calls_matching("INSERT INTO likes")[0]
    assert sql == (
        "INSERT INTO likes (user_no, reference_table, reference_no, is_active) VALUES ($1, $2, $3, $4) "
        "ON CONFLICT (user_no, reference_table, reference_no) "
        "DO UPDATE SET is_active = EXCLUDED.is_active, last_updated = now() RETURNING like_no"
    )
    assert args == (1, "posts", 10, True)


async def test_toggle_keeps_one_row_per_pair(fake_db, store):
    await likes_service.like_request(1, 10, "posts", True)
    await likes_service.like_request(1, 10, "posts", True)
    assert await likes_service.get_like_count(10, "posts") == 1

    unliked = await likes_service.like_request(1, 10, "posts", False)

    assert unliked["is_active"] is False
    assert len(store.rows) == 1
    assert await likes_service.get_like_count(10, "posts") == 0


async def test_first_request_can_be_an_unlike(fake_db, store):
    like = await likes_service.like_request(1, 10, "posts", False)

    assert like["is_active"] is False
    assert await likes_service.get_like_count(10, "posts") == 0


async def test_comment_likes_look_up_the_comment(fake_db, store):
    await likes_service.like_request(1, 20, "comments")

    assert fake_db.calls_matching("FROM comments WHERE comment_no")[0][2] == (20,)
    assert fake_db.calls_matching("FROM posts") == []


@pytest.mark.parametrize(
    ("reference_no", "reference_table", "details"),
    [
        (10, "users", ["Reference Table must be one of [comments,posts]"]),
        (0, "posts", ["Reference Number must be greater than 0"]),
    ],
)
async def test_like_request_validation(fake_db, reference_no, reference_table, details):
    with pytest.raises(errors.ValidationError) as exc_info:
        await likes_service.like_request(1, reference_no, reference_table)

    assert exc_info.value.details == details
    assert fake_db.calls == []


@pytest.mark.parametrize(
    ("flag", "detail"),
    [
        ("is_deleted", "User (user_no: 1) has been deleted"),
        ("is_banned", "User (user_no: 1) has been banned"),
    ],
)
async def test_inactive_users_cannot_like(fake_db, flag, detail):
    fake_db.on("fetch_one", "FROM users WHERE user_no", make_user(**{flag: True}))
    fake_db.on("fetch_one", "FROM posts WHERE post_no", make_post())

    with pytest.raises(errors.ForbiddenError) as exc_info:
        await likes_service.like_request(1, 10, "posts")

    assert exc_info.value.details == [detail]
    assert fake_db.calls_matching("INSERT") == []


async def test_like_missing_post(fake_db):
    fake_db.on("fetch_one", "FROM users WHERE user_no", make_user())

    with pytest.raises(errors.NotFoundError) as exc_info:
        await likes_service.like_request(1, 10, "posts")

    assert exc_info.value.details == ["Post with a post_no of 10 could not be found"]


async def test_like_count_query(fake_db):
    await likes_service.get_like_count(10, "posts")

    assert fake_db.calls == [
        (
            "fetch_val",
            "SELECT count(*) FROM likes WHERE reference_no = $1 AND reference_table = $2 AND is_active = $3",
            (10, "posts", True),
        )
    ]


async def test_create_like_defaults_to_active(fake_db, store):
    fake_db.calls.clear()

    await likes_service.create_like({"user_no": 1, "reference_table": "posts", "reference_no": 10})

    _, _, args = fake_db.calls_matching("INSERT INTO likes")[0]
    assert args == (1, "posts", 10, True)


async def test_update_like(fake_db, store):
    await likes_service.like_request(1, 10, "posts")

    like = await likes_service.update_like(1, False)

    assert like["is_active"] is False
    assert fake_db.calls_matching("UPDATE likes")[0][1] == (
        "UPDATE likes SET is_active = $1, last_updated = now() WHERE like_no = $2"
    )


async def test_delete_like_is_hard(fake_db, store):
    await likes_service.like_request(1, 10, "posts")

    assert await likes_service.delete_like(1) is True
    assert fake_db.calls_matching("DELETE FROM likes") == [
        ("execute", "DELETE FROM likes WHERE like_no = $1", (1,))
    ]


async def test_delete_missing_like(fake_db):
    with pytest.raises(errors.NotFoundError) as exc_info:
        await likes_service.delete_like(3)

    assert exc_info.value.details == ["Like with a like_no of 3 could not be found"]
    assert fake_db.calls_matching("DELETE") == []


async def test_list_likes_shows_active_only_by_default(fake_db):
    await likes_service.list_likes({"reference_no": {"value": 10}})

    assert fake_db.calls[0][2] == (True, 10, 10, 0)
