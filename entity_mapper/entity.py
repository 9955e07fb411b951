import abc
import typing

import inflection

from entity_mapper.exceptions import ReadonlyError, StateError
from entity_mapper.schema import ColumnDefinition, Schema
from entity_mapper.validation import validate


def _column_property(key: str) -> property:
    def getter(self: "Entity") -> typing.Any:
        return self.get(key)

    def setter(self: "Entity", value: typing.Any) -> None:
        self.set(key, value)

    return property(getter, setter, doc=f"Value of the '{key}' column")


class EntityMeta(abc.ABCMeta):
    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if name == "Entity" or namespace.get("__abstract__", False):
            return cls

        schema = Schema(table_name=getattr(cls, "__tablename__", None))
        cls.define(schema)
        if not schema.table_name:
            schema.table_name = inflection.pluralize(inflection.underscore(name))
        cls.schema = schema.finalize()

        for column in schema:
            if not hasattr(cls, column.key):
                setattr(cls, column.key, _column_property(column.key))
        return cls


class Entity(metaclass=EntityMeta):
    schema: typing.ClassVar[Schema]

    def __init__(self, **values: typing.Any) -> None:
        self._values: typing.Dict[str, typing.Any] = {column.key: column.default_value for column in self.schema}
        self._primary_key_initial_value: typing.Any = self._values[self.schema.primary_key]
        self._new = True
        self._loaded = False
        self._dirty = False
        self._deleted = False
        for key, value in values.items():
            self.set(key, value)

    @classmethod
    @abc.abstractmethod
    def define(cls, schema: Schema) -> None:
        pass

    @property
    def is_new(self) -> bool:
        return self._new

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def is_dirty(self) -> bool:
        return self._dirty or self._new

    @property
    def is_deleted(self) -> bool:
        return self._deleted

    @property
    def primary_key_initial_value(self) -> typing.Any:
        return self._primary_key_initial_value

    @property
    def primary_key_value(self) -> typing.Any:
        return self._values.get(self.schema.primary_key)

    def get(self, key: str) -> typing.Any:
        self.schema.column(key)
        return self._values.get(key)

    def set(self, key: str, value: typing.Any) -> None:
        if self._deleted:
            raise StateError(f"{self!r} was deleted, it can not be modified")
        column = self.schema.column(key)
        if column.readonly:
            raise ReadonlyError(f"Property '{key}' is readonly")
        validate(column, value, self.schema.datetime_format)

        current = self._values.get(key)
        if (current is None and value is not None) or current != value:
            self._values[key] = value
            self._dirty = True

    def has_value(self, key: str) -> bool:
        return bool(self.get(key))

    def to_dict(self) -> typing.Dict[str, typing.Any]:
        return dict(self._values)

    def _populate(self, row: typing.Mapping[str, typing.Any]) -> None:
        for column_name, value in row.items():
            self._values[self.schema.key_for_column(column_name)] = value
        self._primary_key_initial_value = self._values[self.schema.primary_key]
        self._new = False
        self._loaded = True
        self._dirty = False

    def _mark_saved(self, inserted_key: typing.Any = None) -> None:
        # drivers report 0 when the table has no auto-increment key, sqlite reports its rowid for any table
        if self._new and self._values[self.schema.primary_key] is None and inserted_key not in (None, 0):
            self._values[self.schema.primary_key] = inserted_key
        self._primary_key_initial_value = self._values[self.schema.primary_key]
        self._dirty = False
        self._new = False
        self._loaded = True

    def _mark_deleted(self) -> None:
        self._deleted = True

    def _column_values(self) -> typing.Iterator[typing.Tuple[ColumnDefinition, typing.Any]]:
        for column in self.schema:
            yield column, self._values.get(column.key)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.schema.primary_key}={self.primary_key_value!r})"

