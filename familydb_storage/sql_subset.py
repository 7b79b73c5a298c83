# SPDX-License-Identifier: MIT
# Copyright (c) 2025 FamilyDB contributors

"""Parser for the subset of Cosmos DB SQL understood by the in-memory store.

Supported form::

    SELECT * FROM <root> [<alias>] [WHERE <alias>.<path> <op> <value> [AND ...]]

where ``<op>`` is one of ``= != <> > >= < <=`` and ``<value>`` is an
``@parameter``, a quoted string, a number, ``true``, ``false`` or ``null``.
"""

import re
from dataclasses import dataclass
from typing import Any

from .document_store import DocumentStoreError
from .filters import compare, get_nested_field

_TOKEN_RE = re.compile(
    r"""\s*(?:
        (?P<param>@[A-Za-z_][A-Za-z0-9_]*)
      | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
      | (?P<number>-?\d+(?:\.\d+)?)
      | (?P<op>!=|<>|>=|<=|=|>|<)
      | (?P<ident>[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)
      | (?P<star>\*)
    )""",
    re.VERBOSE,
)

_SQL_OPERATORS = {
    "=": "$eq",
    "!=": "$ne",
    "<>": "$ne",
    ">": "$gt",
    ">=": "$gte",
    "<": "$lt",
    "<=": "$lte",
}

_KEYWORDS = {"select", "from", "where", "and"}


@dataclass
class Condition:
    """A single ``path <op> value`` predicate."""
    path: str
    operator: str
    value: Any


@dataclass
class ParsedQuery:
    """Result of parsing a supported SELECT statement."""
    root: str
    alias: str
    conditions: list[Condition]

    def matches(self, doc: dict[str, Any]) -> bool:
        return all(
            compare(get_nested_field(doc, condition.path), condition.operator, condition.value)
            for condition in self.conditions
        )


def _unsupported(query: str, detail: str) -> DocumentStoreError:
    return DocumentStoreError(f"Unsupported query '{query}': {detail}", status_code=400)


def _tokenize(query: str) -> list[tuple[str, str]]:
    tokens = []
    position = 0
    stripped = query.rstrip()
    while position < len(stripped):
        match = _TOKEN_RE.match(stripped, position)
        if not match or match.end() == position:
            raise _unsupported(query, f"unexpected input at offset {position}")
        kind = match.lastgroup
        tokens.append((kind, match.group(kind)))
        position = match.end()
    return tokens


def _literal(kind: str, text: str, parameters: dict[str, Any], query: str) -> Any:
    if kind == "param":
        if text not in parameters:
            raise _unsupported(query, f"parameter {text} was not supplied")
        return parameters[text]
    if kind == "string":
        body = text[1:-1]
        return re.sub(r"\\(.)", r"\1", body)
    if kind == "number":
        return float(text) if "." in text else int(text)
    if kind == "ident":
        lowered = text.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        if lowered == "null":
            return None
    raise _unsupported(query, f"expected a value, got '{text}'")


def parse_query(query: str, parameters: list[dict[str, Any]] | None = None) -> ParsedQuery:
    """Parse a query string into a ParsedQuery.

    Args:
        query: SQL text
        parameters: Cosmos-style parameter list ``[{"name": "@x", "value": ...}]``

    Raises:
        DocumentStoreError: If the query is outside the supported subset
    """
    bound = {param["name"]: param["value"] for param in (parameters or [])}
    tokens = _tokenize(query)

    def expect_keyword(index: int, keyword: str) -> None:
        if index >= len(tokens) or tokens[index][0] != "ident" or tokens[index][1].lower() != keyword:
            raise _unsupported(query, f"expected {keyword.upper()}")

    expect_keyword(0, "select")
    if len(tokens) < 2 or tokens[1][0] != "star":
        raise _unsupported(query, "only SELECT * is supported")
    expect_keyword(2, "from")
    if len(tokens) < 4 or tokens[3][0] != "ident" or "." in tokens[3][1]:
        raise _unsupported(query, "expected a collection name after FROM")

    root = tokens[3][1]
    alias = root
    index = 4
    if index < len(tokens) and tokens[index][0] == "ident" and tokens[index][1].lower() not in _KEYWORDS:
        alias = tokens[index][1]
        index += 1

    conditions: list[Condition] = []
    if index < len(tokens):
        expect_keyword(index, "where")
        index += 1
        while True:
            if index + 3 > len(tokens):
                raise _unsupported(query, "incomplete WHERE clause")
            (path_kind, path_text), (op_kind, op_text), (value_kind, value_text) = tokens[index:index + 3]
            if path_kind != "ident" or not path_text.startswith(f"{alias}."):
                raise _unsupported(query, f"expected a field of '{alias}', got '{path_text}'")
            if op_kind != "op":
                raise _unsupported(query, f"expected a comparison operator, got '{op_text}'")
            conditions.append(
                Condition(
                    path=path_text[len(alias) + 1:],
                    operator=_SQL_OPERATORS[op_text],
                    value=_literal(value_kind, value_text, bound, query),
                )
            )
            index += 3
            if index == len(tokens):
                break
            expect_keyword(index, "and")
            index += 1

    return ParsedQuery(root=root, alias=alias, conditions=conditions)
