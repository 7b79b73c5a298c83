# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Structured query filters.

A filter is a dictionary mapping field paths (dot notation for nested fields)
to either a literal, meaning equality, or an operator dictionary::

    {"IsRegistered": False, "Children": {"$size": {"$gt": 1}}}

The same filter can be translated to a parameterized Cosmos DB SQL WHERE
clause or evaluated in memory against plain dictionaries.
"""

import re
from typing import Any

from .document_store import DocumentStoreError

MISSING = object()

COMPARISON_OPERATORS = {
    "$eq": "=",
    "$ne": "!=",
    "$gt": ">",
    "$gte": ">=",
    "$lt": "<",
    "$lte": "<=",
}

SUPPORTED_OPERATORS = set(COMPARISON_OPERATORS) | {"$in", "$exists", "$size"}

_FIELD_COMPONENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_valid_field_name(field_name: str) -> bool:
    """Validate a (possibly dotted) field name.

    Each component between dots is checked on its own so crafted nested
    paths such as ``user..email`` are rejected.
    """
    if not isinstance(field_name, str) or not field_name:
        return False
    return all(_FIELD_COMPONENT.match(component) for component in field_name.split("."))


def get_nested_field(doc: dict[str, Any], field_path: str) -> Any:
    """Get a nested field value, returning MISSING when any component is absent."""
    value: Any = doc
    for part in field_path.split("."):
        if not isinstance(value, dict) or part not in value:
            return MISSING
        value = value[part]
    return value


def values_equal(left: Any, right: Any) -> bool:
    """Equality that keeps booleans distinct from numbers, as JSON does."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    return left == right


def compare(left: Any, operator: str, right: Any) -> bool:
    """Evaluate ``left <operator> right`` with SQL-style undefined semantics.

    Missing fields and values of incomparable types never match.
    """
    if left is MISSING:
        return False
    if operator == "$eq":
        return values_equal(left, right)
    if operator == "$ne":
        return not values_equal(left, right)
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    try:
        if operator == "$gt":
            return left > right
        if operator == "$gte":
            return left >= right
        if operator == "$lt":
            return left < right
        if operator == "$lte":
            return left <= right
    except TypeError:
        return False
    raise DocumentStoreError(f"Unsupported comparison operator '{operator}'", status_code=400)


def _validate(filter_dict: dict[str, Any]) -> None:
    if not isinstance(filter_dict, dict):
        raise DocumentStoreError("filter_dict must be a dictionary", status_code=400)

    for key, condition in filter_dict.items():
        if not is_valid_field_name(key):
            raise DocumentStoreError(f"Invalid field name '{key}' in filter", status_code=400)
        if not isinstance(condition, dict):
            continue
        if not condition:
            raise DocumentStoreError(f"Empty operator dict for '{key}'", status_code=400)
        for op, value in condition.items():
            if op not in SUPPORTED_OPERATORS:
                raise DocumentStoreError(f"Unsupported operator '{op}' for '{key}'", status_code=400)
            if op == "$in" and not isinstance(value, list):
                raise DocumentStoreError(
                    f"$in operator requires list value, got {type(value).__name__}", status_code=400
                )
            if op == "$size":
                _validate_size(key, value)


def _validate_size(key: str, value: Any) -> None:
    if isinstance(value, dict):
        unknown = [op for op in value if op not in COMPARISON_OPERATORS]
        if not value or unknown:
            raise DocumentStoreError(f"Invalid $size condition for '{key}': {value!r}", status_code=400)
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise DocumentStoreError(f"$size for '{key}' requires an int or operator dict", status_code=400)


def matches_filter(doc: dict[str, Any], filter_dict: dict[str, Any]) -> bool:
    """Return True if the document satisfies every condition in the filter."""
    _validate(filter_dict)

    for key, condition in filter_dict.items():
        doc_value = get_nested_field(doc, key)

        if not isinstance(condition, dict):
            if not compare(doc_value, "$eq", condition):
                return False
            continue

        for op, value in condition.items():
            if op == "$exists":
                if bool(value) != (doc_value is not MISSING):
                    return False
            elif op == "$in":
                if doc_value is MISSING or not any(values_equal(doc_value, item) for item in value):
                    return False
            elif op == "$size":
                if not isinstance(doc_value, list):
                    return False
                size_condition = value if isinstance(value, dict) else {"$eq": value}
                if not all(compare(len(doc_value), size_op, size_value)
                           for size_op, size_value in size_condition.items()):
                    return False
            elif not compare(doc_value, op, value):
                return False

    return True


def build_where_clause(
    filter_dict: dict[str, Any], alias: str = "c"
) -> tuple[str, list[dict[str, Any]]] | None:
    """Translate a filter into a parameterized SQL WHERE clause.

    Args:
        filter_dict: Structured filter
        alias: Root alias used in the FROM clause

    Returns:
        Tuple of (clause, parameters). The clause is "" for an empty filter.
        Returns None when the filter can never match (``$in`` with an empty list).

    Raises:
        DocumentStoreError: If the filter is invalid
    """
    _validate(filter_dict)

    clauses: list[str] = []
    parameters: list[dict[str, Any]] = []

    def bind(value: Any) -> str:
        name = f"@param{len(parameters)}"
        parameters.append({"name": name, "value": value})
        return name

    for key, condition in filter_dict.items():
        path = f"{alias}.{key}"

        if not isinstance(condition, dict):
            clauses.append(f"{path} = {bind(condition)}")
            continue

        for op, value in condition.items():
            if op == "$exists":
                clauses.append(f"IS_DEFINED({path})" if value else f"NOT IS_DEFINED({path})")
            elif op == "$in":
                if not value:
                    return None
                clauses.append(f"{path} IN ({', '.join(bind(item) for item in value)})")
            elif op == "$size":
                size_condition = value if isinstance(value, dict) else {"$eq": value}
                for size_op, size_value in size_condition.items():
                    clauses.append(f"ARRAY_LENGTH({path}) {COMPARISON_OPERATORS[size_op]} {bind(size_value)}")
            else:
                clauses.append(f"{path} {COMPARISON_OPERATORS[op]} {bind(value)}")

    return " AND ".join(clauses), parameters
