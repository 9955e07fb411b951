import enum
import typing
import uuid
from functools import singledispatch

from sqlalchemy.sql.elements import BindParameter

from entity_mapper.filters import BoundParameter


@singledispatch
def to_storage(argument: typing.Any) -> typing.Any:
    return argument


@to_storage.register(uuid.UUID)
def _(argument: uuid.UUID) -> str:
    return str(argument)


@to_storage.register(enum.Enum)
def _(argument: enum.Enum) -> typing.Any:
    return argument.value


def to_bindparam(param: BoundParameter) -> BindParameter:
    return BoundParameter(param.name, to_storage(param.value), param.type_hint).to_bindparam()


def from_storage(row: typing.Mapping[str, typing.Any]) -> typing.Dict[str, typing.Any]:
    return {str(column_name): value for column_name, value in row.items()}
