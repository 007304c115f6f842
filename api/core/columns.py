"""
Column registry: declarative per-table metadata.

Each entity package owns one `ColumnRegistry` built from a static list of
`ColumnDefinition`s. The rest of the table engine (validation, filter/sort
building, selection) reads these flags instead of hard-coding per-entity
rules.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from . import errors

Check = Callable[[Any, Mapping[str, Any]], "str | None"]

_IDENTIFIER_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


class FilterCondition(str, Enum):
    EQUAL = "eq"
    GREATER_THAN = "gt"
    GREATER_THAN_OR_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_THAN_OR_EQUAL = "lte"

    @property
    def operator(self) -> str:
        return _OPERATORS[self]


_OPERATORS = {
    FilterCondition.EQUAL: "=",
    FilterCondition.GREATER_THAN: ">",
    FilterCondition.GREATER_THAN_OR_EQUAL: ">=",
    FilterCondition.LESS_THAN: "<",
    FilterCondition.LESS_THAN_OR_EQUAL: "<=",
}

ALL_CONDITIONS: tuple[FilterCondition, ...] = tuple(FilterCondition)
EQUAL_ONLY: tuple[FilterCondition, ...] = (FilterCondition.EQUAL,)


class OrderDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class ColumnDefinition:
    key: str
    label: str
    is_selectable: bool = True
    is_searchable: bool = False
    is_sortable: bool = False
    filter_options: tuple[FilterCondition, ...] | None = None
    is_required_on_create: bool = False
    can_edit: bool = False
    is_unique: bool = False
    check: Check | None = None


@dataclass(frozen=True)
class FieldRule:
    """
    A column as seen by the submission validator for one operation.
    """

    column: ColumnDefinition
    is_required: bool


class ColumnRegistry:
    """
    Ordered, immutable collection of a table's column definitions.
    """

    def __init__(self, columns: Iterable[ColumnDefinition]):
        self._columns: tuple[ColumnDefinition, ...] = tuple(columns)
        self._by_key: dict[str, ColumnDefinition] = {}
        for column in self._columns:
            if not _IDENTIFIER_RE.match(column.key):
                raise ValueError(f"Invalid column key: {column.key!r}")
            if column.key in self._by_key:
                raise ValueError(f"Duplicate column key: {column.key}")
            self._by_key[column.key] = column

    def __iter__(self) -> Iterator[ColumnDefinition]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def get(self, key: str) -> ColumnDefinition | None:
        return self._by_key.get(key)

    def selectable_keys(self) -> list[str]:
        return [column.key for column in self._columns if column.is_selectable]

    def searchable_keys(self) -> list[str]:
        return [column.key for column in self._columns if column.is_searchable]

    def unique_columns(self) -> list[ColumnDefinition]:
        return [column for column in self._columns if column.is_unique]

    def sortable_columns(self) -> list[str]:
        return [column.key for column in self._columns if column.is_sortable]

    def filter_conditions(self, key: str) -> list[FilterCondition]:
        column = self._by_key.get(key)
        if column is None or column.filter_options is None:
            raise errors.BadRequestError(f"You cannot filter by column: {key}")
        return list(column.filter_options)

    def filterable_columns(self) -> dict[str, list[str]]:
        return {
            column.key: [condition.value for condition in column.filter_options]
            for column in self._columns
            if column.filter_options is not None
        }

    def create_rules(self) -> list[FieldRule]:
        return [FieldRule(column, True) for column in self._columns if column.is_required_on_create]

    def update_rules(self) -> list[FieldRule]:
        return [FieldRule(column, False) for column in self._columns if column.can_edit]


# Reusable checks. Each returns a closure stored on a ColumnDefinition.


def max_length(label: str, limit: int, message: str | None = None) -> Check:
    def check(value: Any, submission: Mapping[str, Any]) -> str | None:
        if len(str(value)) > limit:
            return message or f"{label} cannot be more than {limit} characters"
        return None

    return check


def matches(pattern: str, message: str, *, flags: int = 0) -> Check:
    compiled = re.compile(pattern, flags)

    def check(value: Any, submission: Mapping[str, Any]) -> str | None:
        if not compiled.match(str(value)):
            return message
        return None

    return check


def one_of(label: str, choices: Iterable[str]) -> Check:
    allowed = tuple(choices)

    def check(value: Any, submission: Mapping[str, Any]) -> str | None:
        if value not in allowed:
            return f"{label} must be one of [{','.join(allowed)}]"
        return None

    return check


def greater_than_zero(label: str) -> Check:
    def check(value: Any, submission: Mapping[str, Any]) -> str | None:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return f"{label} must be a number"
        if number <= 0:
            return f"{label} must be greater than 0"
        return None

    return check


def equals_field(other_key: str, message: str) -> Check:
    def check(value: Any, submission: Mapping[str, Any]) -> str | None:
        if value != submission.get(other_key):
            return message
        return None

    return check


def all_of(*checks: Check) -> Check:
    """
    Run checks in order and report the first failure.
    """

    def check(value: Any, submission: Mapping[str, Any]) -> str | None:
        for inner in checks:
            reason = inner(value, submission)
            if reason:
                return reason
        return None

    return check
