import re
from typing import Iterable, NamedTuple

from sqlalchemy import BigInteger, DateTime, Integer

from mediabox.core.exceptions import InvalidFilter
from mediabox.utils.timestamps import to_utc_naive

OPERATORS = (">=", "<=", ">", "<", "=")

# Lazy field: split at the first operator; ">=" / "<=" win over ">" / "<".
_CLAUSE = re.compile(r"^(.*?)(>=|<=|>|<|=)(.*)$", re.DOTALL)
_VALUE_STRIP = " \t\n\r\0\x0b'\""


class Condition(NamedTuple):
    field: str
    operator: str
    value: str


def parse_condition(clause: str) -> Condition | None:
    match = _CLAUSE.match(clause or "")
    if not match:
        return None
    field, operator, value = match.groups()
    field = field.strip()
    if not field:
        return None
    return Condition(field, operator, value.strip(_VALUE_STRIP))


def parse_conditions(filters: str | Iterable[str] | None) -> list[Condition]:
    """Parse ``field<op>value`` clauses joined by ``&`` (or given as a list).

    Clauses without a recognised operator are dropped. Field names are not
    checked here; see :func:`apply_conditions`.
    """
    if filters is None:
        return []
    if isinstance(filters, str):
        filters = filters.split("&")
    conditions = []
    for clause in filters:
        if not isinstance(clause, str):
            continue
        condition = parse_condition(clause.strip())
        if condition is not None:
            conditions.append(condition)
    return conditions


def _coerce(column, condition: Condition):
    column_type = column.type
    try:
        if isinstance(column_type, (Integer, BigInteger)):
            return int(condition.value)
        if isinstance(column_type, DateTime):
            return to_utc_naive(condition.value)
    except ValueError:
        raise InvalidFilter(condition.field, condition.value, "value does not match column type") from None
    return condition.value


def apply_conditions(query, model, conditions: Iterable[Condition], allowed: Iterable[str]):
    """AND every condition onto ``query``; fields outside ``allowed`` are rejected."""
    allowed = set(allowed)
    for condition in conditions:
        if condition.field not in allowed:
            raise InvalidFilter(condition.field, condition.value)
        column = getattr(model, condition.field)
        value = _coerce(column, condition)
        if condition.operator == ">=":
            query = query.where(column >= value)
        elif condition.operator == "<=":
            query = query.where(column <= value)
        elif condition.operator == ">":
            query = query.where(column > value)
        elif condition.operator == "<":
            query = query.where(column < value)
        else:
            query = query.where(column == value)
    return query
