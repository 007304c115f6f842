"""
Filter/sort building for single-table queries.

Caller-supplied `where` maps and `order_by` requests are checked against a
`ColumnRegistry` and turned into a `QuerySpec`: a flat list of predicates,
an optional multi-column search group, and one sort column. Nothing reaches
SQL unless it was declared filterable/sortable/searchable.

Rendered SQL fragments use asyncpg positional placeholders ($1, $2, ...).
Column keys are interpolated as identifiers; the registry guarantees they
are plain lowercase identifiers.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from . import errors
from .columns import ColumnRegistry, FilterCondition, OrderDirection


@dataclass
class OrderBy:
    column: str
    direction: str = OrderDirection.DESC.value


@dataclass
class QueryOptions:
    where: dict[str, Any] = field(default_factory=dict)
    items_per_page: int = 10
    page_no: int = 1
    order_by: OrderBy | None = None

    @property
    def offset(self) -> int:
        return (self.page_no - 1) * self.items_per_page


@dataclass(frozen=True)
class Predicate:
    column: str
    condition: FilterCondition
    value: Any


@dataclass(frozen=True)
class Search:
    term: str
    columns: tuple[str, ...]


@dataclass(frozen=True)
class QuerySpec:
    predicates: tuple[Predicate, ...] = ()
    search: Search | None = None
    order_by: OrderBy | None = None

    def where_clause(self, start: int = 1) -> tuple[str, list[Any]]:
        """
        Render `WHERE ...` (or "") plus its positional args, numbering
        placeholders from `start`.
        """
        parts: list[str] = []
        args: list[Any] = []

        for predicate in self.predicates:
            args.append(predicate.value)
            parts.append(f"{predicate.column} {predicate.condition.operator} ${start + len(args) - 1}")

        if self.search is not None and self.search.columns:
            args.append(escape_like(self.search.term))
            placeholder = f"${start + len(args) - 1}"
            group = " OR ".join(
                f"{column}::text ILIKE '%' || {placeholder} || '%'" for column in self.search.columns
            )
            parts.append(f"({group})")

        if not parts:
            return "", args
        return "WHERE " + " AND ".join(parts), args

    def order_clause(self) -> str:
        if self.order_by is None:
            return ""
        return f"ORDER BY {self.order_by.column} {self.order_by.direction.upper()}"


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def merge_where(defaults: Mapping[str, Any] | None, where: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Deep-merge caller filters over entity defaults; caller entries win.
    """
    merged: dict[str, Any] = copy.deepcopy(dict(defaults or {}))
    for key, entry in (where or {}).items():
        base = merged.get(key)
        if isinstance(base, Mapping) and isinstance(entry, Mapping):
            merged[key] = {**base, **entry}
        else:
            merged[key] = copy.deepcopy(entry)
    return merged


def _split_entry(entry: Any) -> tuple[Any, Any]:
    if isinstance(entry, Mapping):
        return entry.get("value"), entry.get("condition")
    return entry, None


def _filter_violations(registry: ColumnRegistry, where: Mapping[str, Any]) -> tuple[list[Predicate], list[str]]:
    predicates: list[Predicate] = []
    violations: list[str] = []

    for key, entry in where.items():
        column = registry.get(key)
        if column is None or column.filter_options is None:
            violations.append(f"You cannot filter by column: {key}")
            continue

        value, raw_condition = _split_entry(entry)
        condition: FilterCondition | None = FilterCondition.EQUAL
        if raw_condition is not None:
            condition = _parse_condition(raw_condition)
            if condition is None or condition not in column.filter_options:
                shown = raw_condition.value if isinstance(raw_condition, FilterCondition) else raw_condition
                violations.append(f"You cannot filter column {key} on condition: {shown}")
                condition = None

        if value is None:
            violations.append(f"You must pass a valid value to filter on column: {key}")
            continue

        if condition is not None:
            predicates.append(Predicate(key, condition, value))

    return predicates, violations


def _parse_condition(raw: Any) -> FilterCondition | None:
    try:
        return FilterCondition(raw)
    except ValueError:
        return None


def _order_violations(registry: ColumnRegistry, order_by: OrderBy) -> tuple[OrderBy | None, list[str]]:
    violations: list[str] = []

    column = registry.get(order_by.column)
    if column is None or not column.is_sortable:
        violations.append(f"You cannot sort by column: {order_by.column}")

    raw_direction = order_by.direction
    if isinstance(raw_direction, OrderDirection):
        raw_direction = raw_direction.value
    direction = raw_direction.lower() if isinstance(raw_direction, str) else raw_direction
    if direction not in (OrderDirection.ASC.value, OrderDirection.DESC.value):
        violations.append(f"You cannot sort by direction: {order_by.direction}")

    if violations:
        return None, violations
    return OrderBy(column=order_by.column, direction=direction), violations


def _search_violations(
    registry: ColumnRegistry,
    term: str,
    columns: Any,
) -> tuple[Search | None, list[str]]:
    if columns is None:
        columns = registry.searchable_keys()
    elif not isinstance(columns, (list, tuple)):
        return None, ["Parameter Error: Search columns must be an array"]
    if not columns:
        return None, ["Parameter Error: Search columns must not be empty"]

    violations: list[str] = []
    for key in columns:
        column = registry.get(key) if isinstance(key, str) else None
        if column is None or not column.is_searchable:
            violations.append(f"You cannot search on column: {key}")

    if violations:
        return None, violations
    return Search(term=str(term or ""), columns=tuple(columns)), violations


def check_paging(options: QueryOptions) -> list[str]:
    violations: list[str] = []
    for name in ("page_no", "items_per_page"):
        value = getattr(options, name)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            violations.append(f"Parameter Error: {name} must be a positive integer")
    return violations


def build_query(
    registry: ColumnRegistry,
    where: Mapping[str, Any] | None = None,
    order_by: OrderBy | None = None,
    *,
    search_term: str | None = None,
    search_columns: Any = None,
) -> QuerySpec:
    """
    Validate filters, sort and (optionally) search against the registry.

    Raises BadRequestError listing every violation found; nothing is built
    when any are present.
    """
    predicates, violations = _filter_violations(registry, where or {})

    order: OrderBy | None = None
    if order_by is not None:
        order, order_errors = _order_violations(registry, order_by)
        violations.extend(order_errors)

    search: Search | None = None
    if search_term is not None:
        search, search_errors = _search_violations(registry, search_term, search_columns)
        violations.extend(search_errors)

    if violations:
        raise errors.BadRequestError(violations)

    return QuerySpec(predicates=tuple(predicates), search=search, order_by=order)
