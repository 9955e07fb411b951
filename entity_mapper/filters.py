"""Filters select which rows a load or delete targets.

A filter is one of four shapes:

* ``ByColumns({"country": "ca", "isActive": True})`` - equality on every given column key,
* ``ByScalar(37)`` - lookup on the primary key,
* ``ByLiteral("email LIKE :pattern", {"pattern": "%gmail.com"})`` - a raw WHERE fragment,
  used verbatim; values are only safe when passed through ``aux_params``,
* ``All()`` - no WHERE clause at all. Deleting with it empties the table.

Plain Python values are accepted too and converted by :func:`to_filter`.
"""
import re
import typing
from collections.abc import Mapping

import attr
from sqlalchemy import bindparam
from sqlalchemy.sql.elements import BindParameter

from entity_mapper.exceptions import FilterTypeError
from entity_mapper.schema import Schema
from entity_mapper.validation import validate


_NOT_A_TOKEN = re.compile(r" |=|>|<")

AuxParams = typing.Optional[typing.Mapping[str, typing.Any]]


@attr.s(auto_attribs=True, frozen=True)
class BoundParameter:
    name: str
    value: typing.Any
    type_hint: typing.Any = None

    def to_bindparam(self) -> BindParameter:
        if self.type_hint is None:
            return bindparam(self.name, self.value)
        return bindparam(self.name, self.value, type_=self.type_hint)


@attr.s(auto_attribs=True, frozen=True)
class Predicate:
    where_clause: str = ""
    params: typing.Tuple[BoundParameter, ...] = ()

    @property
    def sql(self) -> str:
        if not self.where_clause:
            return ""
        return f" WHERE {self.where_clause}"

    @property
    def param_names(self) -> typing.List[str]:
        return [param.name for param in self.params]


class Filter:
    pass


@attr.s(auto_attribs=True, frozen=True)
class ByColumns(Filter):
    values: typing.Mapping[str, typing.Any]


@attr.s(auto_attribs=True, frozen=True)
class ByScalar(Filter):
    value: typing.Union[int, str]


@attr.s(auto_attribs=True, frozen=True)
class ByLiteral(Filter):
    clause: str
    aux_params: AuxParams = None


@attr.s(auto_attribs=True, frozen=True)
class All(Filter):
    pass


def is_lookup_token(value: typing.Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, str):
        return _NOT_A_TOKEN.search(value) is None
    return False


def to_filter(raw: typing.Any, aux_params: AuxParams = None) -> Filter:
    if isinstance(raw, Filter):
        return raw
    if isinstance(raw, Mapping) and raw:
        return ByColumns(raw)
    if isinstance(raw, (int, str)) and not isinstance(raw, bool) and raw != "":
        if is_lookup_token(raw):
            return ByScalar(raw)
        return ByLiteral(raw, aux_params)
    if raw is True:
        return All()
    raise FilterTypeError(f"Wrong parameter type for filter: {type(raw).__name__}", payload=raw)


def resolve(raw_filter: typing.Any, schema: Schema, aux_params: AuxParams = None) -> Predicate:
    filter_ = to_filter(raw_filter, aux_params)

    if isinstance(filter_, ByColumns):
        if not filter_.values:
            raise FilterTypeError("Column filter needs at least one column", payload=filter_)
        conditions = []
        params = []
        for key, value in filter_.values.items():
            column = schema.column(key)
            validate(column, value, schema.datetime_format)
            conditions.append(f"{column.column_name}=:{key}")
            params.append(BoundParameter(key, value, column.type_hint))
        return Predicate(" AND ".join(conditions), tuple(params))

    if isinstance(filter_, ByScalar):
        column = schema.primary_key_column
        validate(column, filter_.value, schema.datetime_format)
        return Predicate(
            f"{column.column_name}=:{column.key}", (BoundParameter(column.key, filter_.value, column.type_hint),)
        )

    if isinstance(filter_, ByLiteral):
        if not filter_.clause.strip():
            raise FilterTypeError("Literal filter needs a non-blank clause", payload=filter_)
        params = tuple(BoundParameter(name, value) for name, value in (filter_.aux_params or {}).items())
        return Predicate(filter_.clause, params)

    if isinstance(filter_, All):
        return Predicate()

    raise FilterTypeError(f"Unsupported filter: {filter_!r}", payload=filter_)
