import enum
import typing


class ErrorKind(enum.Enum):
    SCHEMA = "SCHEMA"
    READONLY = "READONLY"
    FILTER_TYPE = "FILTER_TYPE"
    DATATYPE = "DATATYPE"
    NOT_FOUND = "NOT_FOUND"
    TOO_MANY_ROWS = "TOO_MANY_ROWS"
    MISSING_VALUE = "MISSING_VALUE"
    STATE = "STATE"
    ROW_COUNT = "ROW_COUNT"
    WARNINGS = "WARNINGS"


class MapperError(Exception):
    kind: typing.ClassVar[ErrorKind]
    code: typing.ClassVar[int] = 0

    def __init__(self, message: str, payload: typing.Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload


class SchemaError(MapperError):
    kind = ErrorKind.SCHEMA
    code = 1


class ReadonlyError(MapperError):
    kind = ErrorKind.READONLY
    code = 2


class FilterTypeError(MapperError, TypeError):
    kind = ErrorKind.FILTER_TYPE
    code = 5


class DatatypeError(MapperError, TypeError):
    kind = ErrorKind.DATATYPE
    code = 15


class NotFoundError(MapperError, LookupError):
    kind = ErrorKind.NOT_FOUND
    code = 17


class TooManyRowsError(MapperError):
    kind = ErrorKind.TOO_MANY_ROWS
    code = 6


class MissingValueError(MapperError, ValueError):
    kind = ErrorKind.MISSING_VALUE
    code = 8


class StateError(MapperError):
    kind = ErrorKind.STATE
    code = 7


class RowCountError(MapperError):
    kind = ErrorKind.ROW_COUNT
    code = 10

    def __init__(
        self,
        message: str,
        affected_rows: int,
        sql: str,
        params: typing.Sequence[typing.Any] = (),
        warnings: typing.Sequence[typing.Any] = (),
    ) -> None:
        super().__init__(message, payload=list(warnings))
        self.affected_rows = affected_rows
        self.sql = sql
        self.params = list(params)
        self.warnings = list(warnings)


class WarningsError(MapperError):
    kind = ErrorKind.WARNINGS
    code = 9

    def __init__(self, message: str, warnings: typing.Sequence[typing.Any], affected_rows: int) -> None:
        super().__init__(message, payload=list(warnings))
        self.warnings = list(warnings)
        self.affected_rows = affected_rows
