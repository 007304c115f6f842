"""
Shared fixtures.

`fake_db` replaces the `core.db` query helpers with a recorder: every call is
stored as (method, whitespace-normalized SQL, args), and answers come from
responses registered with `fake_db.on(method, sql_fragment, result)`. The
first registered response whose fragment appears in the SQL wins. `result`
may be a value, an exception instance (raised), or a callable
`(sql, args) -> value` (sync or async).
"""

from __future__ import annotations

import copy
import inspect
from typing import Any

import pytest

from core import db

_DEFAULTS: dict[str, Any] = {
    "fetch_one": None,
    "fetch_all": [],
    "fetch_val": None,
    "execute": None,
}


def normalize_sql(sql: str) -> str:
    return " ".join(sql.split())


class FakeDB:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, tuple]] = []
        self._responses: list[tuple[str, str, Any]] = []

    def on(self, method: str, fragment: str, result: Any) -> "FakeDB":
        self._responses.append((method, normalize_sql(fragment), result))
        return self

    def sql(self, method: str | None = None) -> list[str]:
        return [sql for (called, sql, _) in self.calls if method is None or called == method]

    def calls_matching(self, fragment: str) -> list[tuple[str, str, tuple]]:
        fragment = normalize_sql(fragment)
        return [call for call in self.calls if fragment in call[1]]

    def bind(self, method: str):
        async def call(sql: str, *args: Any) -> Any:
            return await self._dispatch(method, sql, args)

        return call

    async def _dispatch(self, method: str, sql: str, args: tuple) -> Any:
        sql = normalize_sql(sql)
        self.calls.append((method, sql, args))
        for registered, fragment, result in self._responses:
            if registered != method or fragment not in sql:
                continue
            if isinstance(result, BaseException):
                raise result
            if callable(result):
                value = result(sql, args)
                if inspect.isawaitable(value):
                    value = await value
                return value
            return copy.deepcopy(result)
        return copy.deepcopy(_DEFAULTS[method])


@pytest.fixture
def fake_db(monkeypatch) -> FakeDB:
    fake = FakeDB()
    for method in _DEFAULTS:
        monkeypatch.setattr(db, method, fake.bind(method))
    return fake


@pytest.fixture(autouse=True)
def _fast_bcrypt(monkeypatch):
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
