"""Rewrite PostgreSQL-style queries so they run on MySQL.

Every query in the application is written once in the PostgreSQL dialect:
``$n`` placeholders, double-quoted identifiers and a trailing
``RETURNING *``. MySQL understands none of these, so the MySQL backend
passes each statement through :func:`adapt_query` before execution and
through :func:`finish_returning` afterwards.

This is text rewriting, not SQL parsing. It assumes string literals in the
query text never contain ``"`` or ``$n`` sequences.
"""
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple

from .result import ExecutionResult, NativeResult, normalize_result

POSITIONAL_RE = re.compile(r"\$(\d+)")
ISO_TIMESTAMP_RE = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{3})?Z?", re.ASCII)

RETURNING_MARKER = "RETURNING *"
RETURNING_RE = re.compile(r"\s+RETURNING \*", re.IGNORECASE)
INSERT_TABLE_RE = re.compile(r"INSERT INTO `(\w+)`", re.IGNORECASE)
UPDATE_TABLE_RE = re.compile(r"UPDATE `(\w+)`", re.IGNORECASE)

MYSQL_PLACEHOLDER = "?"
MYSQL_QUOTE = "`"

INSERT = "insert"
UPDATE = "update"


@dataclass(frozen=True)
class ReturningIntent:
    """What to fetch after a statement that asked for ``RETURNING *``."""

    kind: str
    table: str
    key_column: str


@dataclass(frozen=True)
class AdaptedQuery:
    text: str
    params: Tuple[Any, ...]
    returning: Optional[ReturningIntent] = None


def bind_positional(
    text: str, params: Sequence[Any], placeholder: str
) -> Tuple[str, Tuple[Any, ...]]:
    """Replace ``$n`` markers with ``placeholder``.

    Drivers with anonymous placeholders bind values left to right, so the
    returned parameters follow the order in which markers appear. For the
    usual ``$1, $2, ...`` sequence this is ``params`` unchanged.
    """
    bound = []

    def _substitute(match):
        index = int(match.group(1))
        if index < 1 or index > len(params):
            raise ValueError(
                f"Query references ${index} but {len(params)} parameter(s) were given"
            )
        bound.append(params[index - 1])
        return placeholder

    rewritten = POSITIONAL_RE.sub(_substitute, text)
    return rewritten, tuple(bound)


def quote_identifiers(text: str) -> str:
    return text.replace('"', MYSQL_QUOTE)


def convert_timestamp(value: Any) -> Any:
    """Turn an ISO-8601 timestamp string into a MySQL DATETIME literal.

    ``"2024-03-01T10:15:30.123Z"`` becomes ``"2024-03-01 10:15:30"``.
    Sub-second digits and the zone suffix are dropped.
    """
    if isinstance(value, str) and ISO_TIMESTAMP_RE.fullmatch(value):
        return value.replace("T", " ").replace("Z", "")[:19]
    return value


def convert_params(params: Sequence[Any]) -> Tuple[Any, ...]:
    return tuple(convert_timestamp(param) for param in params)


def extract_returning(text: str, key_column: str) -> Tuple[str, Optional[ReturningIntent]]:
    """Strip ``RETURNING *`` and record what the caller expected back.

    ``text`` must already use MySQL identifier quoting. Statements other
    than INSERT/UPDATE (e.g. ``DELETE ... RETURNING *``) lose the clause and
    get no intent.
    """
    if RETURNING_MARKER not in text:
        return text, None

    intent = None
    insert_match = INSERT_TABLE_RE.search(text)
    update_match = UPDATE_TABLE_RE.search(text)
    if insert_match:
        intent = ReturningIntent(INSERT, insert_match.group(1), key_column)
    elif update_match:
        intent = ReturningIntent(UPDATE, update_match.group(1), key_column)

    return RETURNING_RE.sub("", text), intent


def adapt_query(text: str, params: Sequence[Any] = (), key_column: str = "ID_reglement") -> AdaptedQuery:
    """Rewrite a PostgreSQL-dialect query into MySQL dialect."""
    rewritten, bound = bind_positional(text, params, MYSQL_PLACEHOLDER)
    rewritten = quote_identifiers(rewritten)
    rewritten, intent = extract_returning(rewritten, key_column)
    return AdaptedQuery(text=rewritten, params=convert_params(bound), returning=intent)


def followup_query(intent: ReturningIntent, insert_id: Any) -> AdaptedQuery:
    """Query that re-reads the row an INSERT just generated."""
    text = (
        f"SELECT * FROM {MYSQL_QUOTE}{intent.table}{MYSQL_QUOTE} "
        f"WHERE {MYSQL_QUOTE}{intent.key_column}{MYSQL_QUOTE} = {MYSQL_PLACEHOLDER}"
    )
    return AdaptedQuery(text=text, params=(insert_id,))


def finish_returning(
    intent: Optional[ReturningIntent],
    native: NativeResult,
    execute: Callable[[str, Tuple[Any, ...]], NativeResult],
) -> ExecutionResult:
    """Build the result a ``RETURNING *`` statement would have produced.

    ``execute`` runs a MySQL-dialect query on the same connection as the
    original statement. Inserts are followed by a lookup on the generated
    key; updates only report how many rows changed.
    """
    if intent is None or isinstance(native, (list, tuple)):
        return normalize_result(native)

    if intent.kind == INSERT and native.get("insertId"):
        lookup = followup_query(intent, native["insertId"])
        return normalize_result(execute(lookup.text, lookup.params))

    affected = native.get("affectedRows") or 0
    if intent.kind == UPDATE and affected > 0:
        return ExecutionResult(rows=[{"affectedRows": affected}], row_count=affected)

    return normalize_result(native)
