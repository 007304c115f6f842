"""
Generic single-table engine.

A `Table` binds a table name, its primary key and its `ColumnRegistry`, and
runs every read/write an entity service needs through `core.db`:

- list: windowed, filtered, sorted page plus a count-only query, issued
  concurrently and combined with pagination metadata
- count / search / get / get_by
- insert / update / upsert / delete

It holds no mutable state, so one module-level instance per entity is shared
by all requests. Filter/sort validation happens before any SQL is issued.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import AsyncIterator, Iterable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import asyncpg

from . import config, db, errors
from .columns import ColumnRegistry, FilterCondition
from .pagination import Pagination, build_pagination
from .query import OrderBy, QueryOptions, QuerySpec, build_query, check_paging, merge_where

logger = logging.getLogger(__name__)


class _Now:
    def __repr__(self) -> str:
        return "NOW"


# Write value rendered as the store's current timestamp.
NOW = _Now()

_KEY_DETAIL_RE = re.compile(r"Key \((?P<columns>[^)]*)\)=")


@dataclass(frozen=True)
class ListResult:
    data: list[dict[str, Any]]
    pagination: Pagination

    def as_dict(self) -> dict:
        return {"data": self.data, "pagination": self.pagination.as_dict()}


class Table:
    def __init__(
        self,
        name: str,
        pk: str,
        registry: ColumnRegistry,
        *,
        record_name: str,
        default_where: Mapping[str, Any] | None = None,
        touch_column: str | None = "last_updated",
    ):
        if pk not in registry:
            raise ValueError(f"Primary key {pk} is not a registered column of {name}")
        self.name = name
        self.pk = pk
        self.registry = registry
        self.record_name = record_name
        self.default_where = dict(default_where or {})
        self.touch_column = touch_column

    # Introspection

    def sortable_columns(self) -> list[str]:
        return self.registry.sortable_columns()

    def filter_conditions(self, key: str) -> list[FilterCondition]:
        return self.registry.filter_conditions(key)

    def _select_list(self) -> str:
        return ", ".join(self.registry.selectable_keys())

    # Parameter checks

    def validate_record_no(self, value: Any, column: str | None = None) -> int:
        column = column or self.pk
        if isinstance(value, bool) or not isinstance(value, int):
            raise errors.BadRequestError(f"Parameter Error: {column} must be a number")
        return value

    def not_found(self, column: str, value: Any) -> errors.NotFoundError:
        return errors.NotFoundError(f"{self.record_name} with a {column} of {value} could not be found")

    # Reads

    def options(
        self,
        where: Mapping[str, Any] | None = None,
        *,
        items_per_page: int | None = None,
        page_no: int = 1,
        order_by: OrderBy | None = None,
    ) -> QueryOptions:
        """
        Build QueryOptions with this table's defaults filled in.
        """
        return QueryOptions(
            where=merge_where(self.default_where, where),
            items_per_page=items_per_page if items_per_page is not None else config.default_items_per_page(),
            page_no=page_no,
            order_by=order_by or OrderBy(column=self.pk),
        )

    def _spec(self, options: QueryOptions) -> QuerySpec:
        paging_errors = check_paging(options)
        try:
            spec = build_query(self.registry, options.where, options.order_by or OrderBy(column=self.pk))
        except errors.BadRequestError as exc:
            exc.details = [*exc.details, *paging_errors]
            raise
        if paging_errors:
            raise errors.BadRequestError(paging_errors)
        return spec

    async def list(self, options: QueryOptions | None = None) -> ListResult:
        options = options or self.options()
        spec = self._spec(options)
        where_sql, args = spec.where_clause()

        page_sql = (
            f"SELECT {self._select_list()} FROM {self.name} {where_sql} {spec.order_clause()} "
            f"LIMIT ${len(args) + 1} OFFSET ${len(args) + 2}"
        )
        count_sql = f"SELECT count(*) FROM {self.name} {where_sql}"

        logger.debug(
            "table_list table=%s page_no=%s items_per_page=%s filters=%s",
            self.name,
            options.page_no,
            options.items_per_page,
            len(spec.predicates),
        )
        async with self.store_errors():
            rows, total = await asyncio.gather(
                db.fetch_all(page_sql, *args, options.items_per_page, options.offset),
                db.fetch_val(count_sql, *args),
            )

        pagination = build_pagination(int(total or 0), options.page_no, options.items_per_page)
        return ListResult(data=list(rows or []), pagination=pagination)

    async def count(self, where: Mapping[str, Any] | None = None) -> int:
        spec = build_query(self.registry, where or {})
        where_sql, args = spec.where_clause()
        async with self.store_errors():
            total = await db.fetch_val(f"SELECT count(*) FROM {self.name} {where_sql}", *args)
        return int(total or 0)

    async def search(
        self,
        term: str,
        columns: Any = None,
        *,
        where: Mapping[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Case-insensitive substring match ORed across `columns` (default: all
        searchable columns), ANDed with `where`.
        """
        spec = build_query(
            self.registry,
            where or {},
            OrderBy(column=self.pk),
            search_term=term,
            search_columns=columns,
        )
        where_sql, args = spec.where_clause()
        sql = (
            f"SELECT {self._select_list()} FROM {self.name} {where_sql} {spec.order_clause()} "
            f"LIMIT ${len(args) + 1}"
        )
        async with self.store_errors():
            return await db.fetch_all(sql, *args, limit or config.search_result_limit())

    async def get(self, value: Any) -> dict[str, Any]:
        return await self.get_by(self.pk, value)

    async def get_by(self, column: str, value: Any) -> dict[str, Any]:
        self.validate_record_no(value, column)
        if column not in self.registry:
            raise ValueError(f"Unknown column {column} for {self.name}")
        async with self.store_errors():
            row = await db.fetch_one(
                f"SELECT {self._select_list()} FROM {self.name} WHERE {column} = $1",
                value,
            )
        if row is None:
            raise self.not_found(column, value)
        return row

    # Writes

    def _assignments(self, values: Mapping[str, Any], start: int) -> tuple[list[str], list[Any]]:
        parts: list[str] = []
        args: list[Any] = []
        for column, value in values.items():
            self._check_column(column)
            if value is NOW:
                parts.append(f"{column} = now()")
            else:
                args.append(value)
                parts.append(f"{column} = ${start + len(args) - 1}")
        return parts, args

    def _check_column(self, column: str) -> None:
        if column not in self.registry and column != self.touch_column:
            raise ValueError(f"Unknown column {column} for {self.name}")

    def _values_clause(self, values: Mapping[str, Any]) -> tuple[str, str, list[Any]]:
        columns: list[str] = []
        placeholders: list[str] = []
        args: list[Any] = []
        for column, value in values.items():
            self._check_column(column)
            columns.append(column)
            if value is NOW:
                placeholders.append("now()")
            else:
                args.append(value)
                placeholders.append(f"${len(args)}")
        return ", ".join(columns), ", ".join(placeholders), args

    async def insert(self, values: Mapping[str, Any]) -> int:
        columns, placeholders, args = self._values_clause(values)
        sql = f"INSERT INTO {self.name} ({columns}) VALUES ({placeholders}) RETURNING {self.pk}"
        async with self.store_errors():
            new_pk = await db.fetch_val(sql, *args)
        logger.info("row_inserted table=%s %s=%s", self.name, self.pk, new_pk)
        return int(new_pk)

    async def update(self, value: Any, values: Mapping[str, Any], *, column: str | None = None) -> None:
        """
        Apply `values` to the row(s) matching `column` (default pk) and touch
        the last-updated column. Empty `values` still touches.
        """
        column = column or self.pk
        values = dict(values)
        if self.touch_column is not None:
            values.setdefault(self.touch_column, NOW)
        if not values:
            return None

        parts, args = self._assignments(values, start=1)
        args.append(value)
        sql = f"UPDATE {self.name} SET {', '.join(parts)} WHERE {column} = ${len(args)}"
        async with self.store_errors():
            await db.execute(sql, *args)
        logger.info("row_updated table=%s %s=%s fields=%s", self.name, column, value, sorted(values))

    async def upsert(
        self,
        values: Mapping[str, Any],
        *,
        conflict: Iterable[str],
        update: Iterable[str],
    ) -> int:
        """
        Insert `values`, or update the `update` columns of the row already
        holding the same `conflict` key. Single statement, so concurrent
        callers cannot create duplicates.
        """
        columns, placeholders, args = self._values_clause(values)
        assignments = [f"{column} = EXCLUDED.{column}" for column in update]
        if self.touch_column is not None:
            assignments.append(f"{self.touch_column} = now()")
        sql = (
            f"INSERT INTO {self.name} ({columns}) VALUES ({placeholders}) "
            f"ON CONFLICT ({', '.join(conflict)}) DO UPDATE SET {', '.join(assignments)} "
            f"RETURNING {self.pk}"
        )
        async with self.store_errors():
            row_pk = await db.fetch_val(sql, *args)
        logger.info("row_upserted table=%s %s=%s", self.name, self.pk, row_pk)
        return int(row_pk)

    async def delete(self, value: Any) -> None:
        async with self.store_errors():
            await db.execute(f"DELETE FROM {self.name} WHERE {self.pk} = $1", value)
        logger.info("row_deleted table=%s %s=%s", self.name, self.pk, value)

    # Store error mapping

    def _conflict_for(self, exc: asyncpg.UniqueViolationError) -> errors.ConflictError | None:
        detail = str(getattr(exc, "detail", None) or "")
        constraint = str(getattr(exc, "constraint_name", None) or "")
        unique_columns = self.registry.unique_columns()

        match = _KEY_DETAIL_RE.search(detail)
        if match:
            keys = {part.strip() for part in match.group("columns").split(",")}
            for column in unique_columns:
                if column.key in keys:
                    return errors.ConflictError(f"{column.label} is already in use")

        for column in unique_columns:
            if re.search(rf"(^|_){re.escape(column.key)}(_|$)", constraint):
                return errors.ConflictError(f"{column.label} is already in use")
        return None

    @asynccontextmanager
    async def store_errors(self) -> AsyncIterator[None]:
        try:
            yield
        except asyncpg.UniqueViolationError as exc:
            conflict = self._conflict_for(exc)
            if conflict is None:
                logger.warning(
                    "unique_violation table=%s constraint=%s",
                    self.name,
                    getattr(exc, "constraint_name", None),
                )
                conflict = errors.ConflictError(f"{self.record_name} already exists")
            raise conflict from exc
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
            logger.exception("store_failed table=%s", self.name)
            raise errors.InternalError() from exc
