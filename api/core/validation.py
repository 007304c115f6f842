"""
Submission validation against a registry's create/update rules.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from . import errors
from .columns import FieldRule


def strip_empty(submission: dict[str, Any]) -> dict[str, Any]:
    """
    Drop keys whose value is None (in place) so omitted optional fields are
    never checked.
    """
    for key in [key for key, value in submission.items() if value is None]:
        del submission[key]
    return submission


def collect_violations(rules: Iterable[FieldRule], submission: dict[str, Any]) -> list[str]:
    strip_empty(submission)

    violations: list[str] = []
    for rule in rules:
        column = rule.column
        required_message = f"{column.label} is a required field"

        if column.key not in submission:
            if rule.is_required:
                violations.append(required_message)
            continue

        value = submission[column.key]
        if rule.is_required and len(str(value).strip()) == 0:
            violations.append(required_message)

        if column.check is not None:
            reason = column.check(value, submission)
            if reason:
                violations.append(str(reason))

    return violations


def clean_values(submission: dict[str, Any], keys: Iterable[str]) -> dict[str, Any]:
    """
    Pick `keys` present in the submission, trimming string values.
    """
    values: dict[str, Any] = {}
    for key in keys:
        if key not in submission:
            continue
        value = submission[key]
        values[key] = value.strip() if isinstance(value, str) else value
    return values


def validate_submission(
    rules: Iterable[FieldRule],
    submission: dict[str, Any],
) -> errors.ValidationError | None:
    """
    Return a ValidationError listing every violation, or None when valid.
    """
    violations = collect_violations(rules, submission)
    if violations:
        return errors.ValidationError(violations)
    return None
