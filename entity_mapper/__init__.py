from entity_mapper import types
from entity_mapper.entity import Entity
from entity_mapper.exceptions import (
    DatatypeError,
    ErrorKind,
    FilterTypeError,
    MapperError,
    MissingValueError,
    NotFoundError,
    ReadonlyError,
    RowCountError,
    SchemaError,
    StateError,
    TooManyRowsError,
    WarningsError,
)
from entity_mapper.filters import All, ByColumns, ByLiteral, ByScalar
from entity_mapper.repository import Repository
from entity_mapper.schema import ColumnDefinition, Schema
from entity_mapper.settings import Settings
from entity_mapper.storages import NoDataFound, Storage, StorageWarning


__all__ = [
    "All",
    "ByColumns",
    "ByLiteral",
    "ByScalar",
    "ColumnDefinition",
    "DatatypeError",
    "Entity",
    "ErrorKind",
    "FilterTypeError",
    "MapperError",
    "MissingValueError",
    "NoDataFound",
    "NotFoundError",
    "ReadonlyError",
    "Repository",
    "RowCountError",
    "Schema",
    "SchemaError",
    "Settings",
    "StateError",
    "Storage",
    "StorageWarning",
    "TooManyRowsError",
    "WarningsError",
    "types",
]
