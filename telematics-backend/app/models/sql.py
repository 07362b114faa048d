"""
Dialect-aware SQL constructs for array-valued JSON columns.

Rules store foreign keys as JSON arrays (account, geofence, alert type,
delivery method IDs). Membership tests compile to ``@>`` on PostgreSQL and
to a ``json_each`` lookup on SQLite.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Integer, String, cast, func, literal
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import ColumnElement, FunctionElement
from sqlalchemy.sql.sqltypes import NullType


class json_array_contains(FunctionElement):
    """``json_array_contains(column, value)``: true when the JSON array holds ``value``."""

    type = Boolean()
    name = "json_array_contains"
    inherit_cache = True

    def __init__(self, column, value) -> None:
        # ORM attributes expose __clause_element__ instead of subclassing ColumnElement.
        if not isinstance(value, ColumnElement) and not hasattr(value, "__clause_element__"):
            value = literal(value, type_=Integer() if isinstance(value, int) and not isinstance(value, bool) else String())
        super().__init__(column, value)


def _split(element) -> tuple:
    column, value = list(element.clauses)
    return column, value


@compiles(json_array_contains)
def _compile_json_array_contains(element, compiler, **kw):
    column, value = _split(element)
    value_type = value.type if not isinstance(value.type, NullType) else String()
    return "CAST(%s AS JSONB) @> jsonb_build_array(%s)" % (
        compiler.process(column, **kw),
        compiler.process(cast(value, value_type), **kw),
    )


@compiles(json_array_contains, "sqlite")
def _compile_json_array_contains_sqlite(element, compiler, **kw):
    column, value = _split(element)
    return "EXISTS (SELECT 1 FROM json_each(%s) WHERE json_each.value = %s)" % (
        compiler.process(column, **kw),
        compiler.process(value, **kw),
    )


def icontains(column, value) -> ColumnElement:
    """
    Case-insensitive substring match, portable across PostgreSQL and SQLite.

    ``%`` and ``_`` in ``value`` match literally.
    """
    return func.lower(column).contains(str(value).lower(), autoescape=True)
