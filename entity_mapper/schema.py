import typing
from collections import OrderedDict

import attr
import inflection

from entity_mapper import types
from entity_mapper.exceptions import SchemaError


DEFAULT_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@attr.s(auto_attribs=True, frozen=True)
class ColumnDefinition:
    key: str
    column_name: str
    column_type: types.ColumnType = types.STRING
    readonly: bool = False
    required: bool = False
    default_value: typing.Any = None
    value_if_null: typing.Any = None
    use_storage_default_when_null: bool = False
    datetime_format: typing.Optional[str] = None

    @property
    def type_hint(self) -> typing.Any:
        return self.column_type.type_hint

    def resolve_value(self, value: typing.Any) -> typing.Any:
        return self.value_if_null if value is None else value


@attr.s(auto_attribs=True)
class Schema:
    table_name: typing.Optional[str] = None
    datetime_format: str = DEFAULT_DATETIME_FORMAT
    use_upsert: bool = False
    primary_key: typing.Optional[str] = None
    _columns: typing.Dict[str, ColumnDefinition] = attr.Factory(OrderedDict)
    _finalized: bool = False

    def register_column(
        self,
        key: str,
        column_name: typing.Optional[str] = None,
        column_type: types.ColumnType = types.STRING,
        readonly: bool = False,
        required: bool = False,
        default_value: typing.Any = None,
        value_if_null: typing.Any = None,
        use_storage_default_when_null: bool = False,
        datetime_format: typing.Optional[str] = None,
    ) -> ColumnDefinition:
        if self._finalized:
            raise SchemaError(f"Schema of '{self.table_name}' is finalized, can not register column '{key}'")
        if key in self._columns:
            raise SchemaError(f"Column key '{key}' is already registered")
        column_name = column_name or inflection.underscore(key)
        if any(column.column_name == column_name for column in self._columns.values()):
            raise SchemaError(f"Column name '{column_name}' is already mapped")

        column = ColumnDefinition(
            key=key,
            column_name=column_name,
            column_type=column_type,
            readonly=readonly,
            required=required,
            default_value=default_value,
            value_if_null=value_if_null,
            use_storage_default_when_null=use_storage_default_when_null,
            datetime_format=datetime_format,
        )
        self._columns[key] = column
        return column

    def set_primary_key(self, key: str) -> None:
        if key not in self._columns:
            raise SchemaError(f"Specified primary key '{key}' isn't registered")
        self.primary_key = key

    def finalize(self) -> "Schema":
        if not self.table_name or not self.primary_key or not self._columns:
            raise SchemaError("Table name, primary key or columns not properly set")
        self._finalized = True
        return self

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def __iter__(self) -> typing.Iterator[ColumnDefinition]:
        return iter(self._columns.values())

    def __contains__(self, key: object) -> bool:
        return key in self._columns

    def __len__(self) -> int:
        return len(self._columns)

    @property
    def keys(self) -> typing.List[str]:
        return list(self._columns)

    def column(self, key: str) -> ColumnDefinition:
        try:
            return self._columns[key]
        except KeyError:
            raise SchemaError(f"Property '{key}' isn't defined in the entity") from None

    def key_for_column(self, column_name: str) -> str:
        for key, column in self._columns.items():
            if column.column_name == column_name:
                return key
        raise SchemaError(f"There is no property mapped to column '{column_name}'")

    @property
    def primary_key_column(self) -> ColumnDefinition:
        if self.primary_key is None:
            raise SchemaError("Primary key is not set")
        return self._columns[self.primary_key]

    def datetime_format_for(self, column: ColumnDefinition) -> str:
        return column.datetime_format or self.datetime_format
