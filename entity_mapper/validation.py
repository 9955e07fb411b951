import typing
from datetime import date, datetime

from entity_mapper.exceptions import DatatypeError
from entity_mapper.schema import DEFAULT_DATETIME_FORMAT, ColumnDefinition
from entity_mapper.types import DataKind


def accepts_null(column: ColumnDefinition) -> bool:
    return not column.required or column.value_if_null is not None


def is_valid_datetime(value: typing.Any, datetime_format: str) -> bool:
    if isinstance(value, (datetime, date)):
        return True
    if not isinstance(value, str):
        return False
    try:
        parsed = datetime.strptime(value, datetime_format)
    except ValueError:
        return False
    # strptime tolerates unpadded fields, so "2020-1-5" would otherwise pass for "%Y-%m-%d"
    return parsed.strftime(datetime_format) == value


def validate(
    column: ColumnDefinition, value: typing.Any, datetime_format: typing.Optional[str] = None
) -> None:
    if value is None and accepts_null(column):
        return

    column_type = column.column_type
    if column_type.has_kind(DataKind.DATETIME):
        datetime_format = column.datetime_format or datetime_format or DEFAULT_DATETIME_FORMAT
        if is_valid_datetime(value, datetime_format):
            return
        if not column_type.matches(value):
            raise DatatypeError(
                f"Invalid datetime value for property '{column.key}'. It requires a '{datetime_format}' format",
                payload=value,
            )
        return

    # TODO: validate binary payloads once a storage needs something stricter than bytes-like
    if column_type.has_kind(DataKind.BINARY):
        return

    if not column_type.matches(value):
        raise DatatypeError(
            f"Invalid value datatype for property '{column.key}'. It should be of type '{column_type}'",
            payload=value,
        )


def is_valid(column: ColumnDefinition, value: typing.Any, datetime_format: typing.Optional[str] = None) -> bool:
    try:
        validate(column, value, datetime_format)
    except DatatypeError:
        return False
    return True
