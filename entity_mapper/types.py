import enum
import typing
from decimal import Decimal

import attr
from sqlalchemy import Boolean, Float, Integer, LargeBinary, String
from sqlalchemy.types import TypeEngine


class DataKind(enum.Enum):
    BOOL = "bool"
    INT = "int"
    DOUBLE = "double"
    STRING = "string"
    BINARY = "binary"
    DATETIME = "datetime"


# kinds checked by runtime type; BINARY and DATETIME are handled by the validator itself
native_types: typing.Dict[DataKind, typing.Tuple[typing.Type, ...]] = {
    DataKind.BOOL: (bool,),
    DataKind.INT: (int,),
    DataKind.DOUBLE: (float, Decimal),
    DataKind.STRING: (str,),
    DataKind.BINARY: (bytes, bytearray, memoryview),
}


@attr.s(auto_attribs=True, frozen=True)
class ColumnType:
    kinds: typing.Tuple[DataKind, ...]
    bind_type: typing.Optional[typing.Type[TypeEngine]] = None

    @property
    def type_hint(self) -> typing.Type[TypeEngine]:
        return self.bind_type or String

    def has_kind(self, kind: DataKind) -> bool:
        return kind in self.kinds

    def matches(self, value: typing.Any) -> bool:
        for kind in self.kinds:
            if kind not in native_types:
                continue
            # bool is a subclass of int, it only ever satisfies BOOL
            if isinstance(value, bool) and kind is not DataKind.BOOL:
                continue
            if isinstance(value, native_types[kind]):
                return True
        return False

    def __str__(self) -> str:
        return "|".join(kind.value for kind in self.kinds)


def union(*column_types: ColumnType) -> ColumnType:
    if not column_types:
        raise TypeError("union() needs at least one column type")
    kinds: typing.List[DataKind] = []
    for column_type in column_types:
        kinds.extend(kind for kind in column_type.kinds if kind not in kinds)
    return ColumnType(tuple(kinds), column_types[0].bind_type)


BOOL = ColumnType((DataKind.BOOL,), Boolean)
INT = ColumnType((DataKind.INT,), Integer)
TINYINT = INT
DOUBLE = ColumnType((DataKind.DOUBLE,), Float)
DECIMAL = DOUBLE
FLOAT = DOUBLE
STRING = ColumnType((DataKind.STRING,), String)
VARCHAR = STRING
BINARY = ColumnType((DataKind.BINARY,), LargeBinary)
# datetimes travel as formatted strings
DATETIME = ColumnType((DataKind.DATETIME,), String)
