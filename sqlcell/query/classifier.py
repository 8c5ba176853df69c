from __future__ import annotations

import json
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple, Union

from pydantic import BaseModel, Field

from sqlcell.core.errors import EmptyQueryError


class QueryOutcome(str, Enum):
    """Category assigned to a query string; selects the canned payload."""
    SELECT_USERS = "select_users"
    COUNT = "count"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    CREATE_TABLE = "create_table"
    EMPTY_INPUT = "empty_input"
    UNRECOGNIZED = "unrecognized"


Payload = Union[List[Dict[str, Any]], Dict[str, Any]]
Rule = Tuple[Callable[[str], bool], QueryOutcome]


def _contains(keyword: str) -> Callable[[str], bool]:
    def predicate(text: str) -> bool:
        return keyword in text

    return predicate


def _is_blank(text: str) -> bool:
    return not text.strip()


# Evaluated top to bottom, first match wins. Matching is case-sensitive
# substring containment; the blank check runs after every keyword check.
CLASSIFICATION_RULES: Tuple[Rule, ...] = (
    (_contains("SELECT * FROM users"), QueryOutcome.SELECT_USERS),
    (_contains("COUNT"), QueryOutcome.COUNT),
    (_contains("INSERT"), QueryOutcome.INSERT),
    (_contains("UPDATE"), QueryOutcome.UPDATE),
    (_contains("DELETE"), QueryOutcome.DELETE),
    (_contains("CREATE TABLE"), QueryOutcome.CREATE_TABLE),
    (_is_blank, QueryOutcome.EMPTY_INPUT),
)

DEMO_USERS: Tuple[Dict[str, Any], ...] = (
    {"id": 1, "name": "John Doe", "email": "john@example.com", "age": 30},
    {"id": 2, "name": "Jane Smith", "email": "jane@example.com", "age": 25},
    {"id": 3, "name": "Bob Johnson", "email": "bob@example.com", "age": 35},
    {"id": 4, "name": "Alice Brown", "email": "alice@example.com", "age": 28},
    {"id": 5, "name": "Charlie Wilson", "email": "charlie@example.com", "age": 32},
)

UNSUPPORTED_QUERY_MESSAGE = "Query not supported in demo"


class QueryResult(BaseModel):
    """Outcome of a classified query together with its canned payload"""

    outcome: QueryOutcome = Field(..., description="Classification of the input text")
    payload: Payload = Field(..., description="JSON-compatible canned result")

    def to_json(self) -> str:
        """Compact JSON text, field order preserved."""
        return json.dumps(self.payload, separators=(",", ":"), ensure_ascii=False)


def classify(text: str) -> QueryOutcome:
    """Map ``text`` to exactly one outcome. Total and side-effect free."""
    for predicate, outcome in CLASSIFICATION_RULES:
        if predicate(text):
            return outcome
    return QueryOutcome.UNRECOGNIZED


def payload_for(outcome: QueryOutcome, text: str) -> Payload:
    """Build a fresh canned payload for ``outcome``.

    Raises:
        EmptyQueryError: for ``QueryOutcome.EMPTY_INPUT``, which has no payload
    """
    if outcome is QueryOutcome.SELECT_USERS:
        return [dict(user) for user in DEMO_USERS]
    if outcome is QueryOutcome.COUNT:
        return [{"user_count": len(DEMO_USERS)}]
    if outcome is QueryOutcome.INSERT:
        return {"message": "Insert successful", "rows_affected": 1}
    if outcome is QueryOutcome.UPDATE:
        return {"message": "Update successful", "rows_affected": 1}
    if outcome is QueryOutcome.DELETE:
        return {"message": "Delete successful", "rows_affected": 1}
    if outcome is QueryOutcome.CREATE_TABLE:
        return {"message": "Table created successfully"}
    if outcome is QueryOutcome.EMPTY_INPUT:
        raise EmptyQueryError()
    return {"error": UNSUPPORTED_QUERY_MESSAGE, "received_query": text}


def run_query(text: str) -> QueryResult:
    outcome = classify(text)
    return QueryResult(outcome=outcome, payload=payload_for(outcome, text))
