import logging
import typing
from contextlib import contextmanager

from entity_mapper.entity import Entity
from entity_mapper.exceptions import (
    MissingValueError,
    NotFoundError,
    RowCountError,
    StateError,
    TooManyRowsError,
    WarningsError,
)
from entity_mapper.filters import AuxParams, BoundParameter, Predicate, resolve
from entity_mapper.schema import Schema
from entity_mapper.storages import NoDataFound, Row, Storage, StorageFactory


logger = logging.getLogger(__name__)

EntityType = typing.TypeVar("EntityType", bound=Entity)

STORAGE_DEFAULT = "DEFAULT"
INITIAL_PRIMARY_KEY_PARAM = "_initial_pk"
PRIMARY_KEY_PARAM = "_pk"
UPSERT_PARAM_PREFIX = "u_"
# ON DUPLICATE KEY UPDATE reports 1 for a fresh row and 2 for a rewritten one
UPSERT_AFFECTED_ROWS = (1, 2)


class Repository(typing.Generic[EntityType]):
    """Loads, saves and deletes instances of one entity class.

    Storage is taken from the ``storage`` argument of each call, else from the one given at construction,
    else from ``storage_factory`` (created on first use and kept until closed with ``close_after=True``).
    """

    def __init__(
        self,
        entity_cls: typing.Type[EntityType],
        storage: typing.Optional[Storage] = None,
        storage_factory: typing.Optional[StorageFactory] = None,
    ) -> None:
        self.entity_cls = entity_cls
        self._storage = storage
        self._storage_factory = storage_factory

    @property
    def schema(self) -> Schema:
        return self.entity_cls.schema

    @property
    def table_name(self) -> str:
        return self.schema.table_name

    @contextmanager
    def _using(self, storage: typing.Optional[Storage], close_after: bool) -> typing.Iterator[Storage]:
        if storage is None:
            if self._storage is None:
                if self._storage_factory is None:
                    raise StateError(f"No storage available for {self.entity_cls.__name__} repository")
                self._storage = self._storage_factory()
            storage = self._storage
        try:
            yield storage
        finally:
            if close_after:
                storage.close()
                if storage is self._storage:
                    self._storage = None

    # Reading

    def _select(
        self,
        storage: Storage,
        raw_filter: typing.Any,
        aux_params: AuxParams,
        order: typing.Optional[str],
        limit: typing.Union[int, str, None],
    ) -> typing.Tuple[typing.List[Row], int]:
        predicate = resolve(raw_filter, self.schema, aux_params)
        sql = f"SELECT * FROM {self.table_name}{predicate.sql}"
        # order and limit are passed verbatim, callers have to sanitize them
        if order is not None and order.strip():
            sql += f" ORDER BY {order}"
        if limit is not None and str(limit).strip():
            sql += f" LIMIT {limit}"

        try:
            return storage.execute_query(sql, predicate.params)
        except NoDataFound:
            return [], 0

    def load(
        self,
        entity: EntityType,
        raw_filter: typing.Any,
        aux_params: AuxParams = None,
        order: typing.Optional[str] = None,
        limit: typing.Union[int, str, None] = None,
        storage: typing.Optional[Storage] = None,
        close_after: bool = False,
    ) -> EntityType:
        if entity.is_deleted:
            raise StateError(f"{entity!r} was deleted, it can not be loaded again")

        with self._using(storage, close_after) as storage:
            rows, rows_found = self._select(storage, raw_filter, aux_params, order, limit)

        if rows_found == 0:
            raise NotFoundError(f"No {self.entity_cls.__name__} found for filter {raw_filter!r}", payload=raw_filter)
        if rows_found > 1:
            raise TooManyRowsError(
                f"More than 1 row returned (total {rows_found}), use find() to get a list of entities",
                payload=rows_found,
            )
        entity._populate(rows[0])
        logger.debug("Loaded %r from %s", entity, self.table_name)
        return entity

    def find(
        self,
        raw_filter: typing.Any,
        aux_params: AuxParams = None,
        order: typing.Optional[str] = None,
        limit: typing.Union[int, str, None] = None,
        multi_row: bool = True,
        storage: typing.Optional[Storage] = None,
        close_after: bool = False,
    ) -> typing.Union[typing.List[EntityType], EntityType]:
        if not multi_row:
            return self.load(self.entity_cls(), raw_filter, aux_params, order, limit, storage, close_after)

        with self._using(storage, close_after) as storage:
            rows, _rows_found = self._select(storage, raw_filter, aux_params, order, limit)

        entities = []
        for row in rows:
            entity = self.entity_cls()
            entity._populate(row)
            entities.append(entity)
        logger.debug("Found %s rows in %s", len(entities), self.table_name)
        return entities

    def get(
        self,
        raw_filter: typing.Any,
        aux_params: AuxParams = None,
        storage: typing.Optional[Storage] = None,
        close_after: bool = False,
    ) -> EntityType:
        return self.load(self.entity_cls(), raw_filter, aux_params, storage=storage, close_after=close_after)

    # Writing

    def _check_required(self, entity: EntityType) -> None:
        for column, value in entity._column_values():
            if not column.required:
                continue
            value = column.resolve_value(value)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise MissingValueError(f"Missing value for property '{column.key}'", payload=column.key)

    def _insert_statement(self, entity: EntityType) -> typing.Tuple[str, typing.List[BoundParameter], bool]:
        column_names: typing.List[str] = []
        placeholders: typing.List[str] = []
        upsert_assignments: typing.List[str] = []
        params: typing.List[BoundParameter] = []

        for column, value in entity._column_values():
            value = column.resolve_value(value)
            column_names.append(column.column_name)
            if value is None and column.use_storage_default_when_null:
                placeholders.append(STORAGE_DEFAULT)
                continue

            placeholders.append(f":{column.key}")
            params.append(BoundParameter(column.key, value, column.type_hint))
            if self.schema.use_upsert:
                upsert_name = f"{UPSERT_PARAM_PREFIX}{column.key}"
                upsert_assignments.append(f"{column.column_name}=:{upsert_name}")
                params.append(BoundParameter(upsert_name, value, column.type_hint))

        sql = f"INSERT INTO {self.table_name} ({', '.join(column_names)}) VALUES ({', '.join(placeholders)})"
        if upsert_assignments:
            sql += f" ON DUPLICATE KEY UPDATE {', '.join(upsert_assignments)}"
        return sql, params, bool(upsert_assignments)

    def _update_statement(self, entity: EntityType) -> typing.Tuple[str, typing.List[BoundParameter]]:
        assignments: typing.List[str] = []
        params: typing.List[BoundParameter] = []

        for column, value in entity._column_values():
            value = column.resolve_value(value)
            if value is None and column.use_storage_default_when_null:
                assignments.append(f"{column.column_name}={STORAGE_DEFAULT}")
                continue
            assignments.append(f"{column.column_name}=:{column.key}")
            params.append(BoundParameter(column.key, value, column.type_hint))

        # the primary key may have been changed since loading, target the row it was loaded from
        primary_key = self.schema.primary_key_column
        params.append(BoundParameter(INITIAL_PRIMARY_KEY_PARAM, entity.primary_key_initial_value, primary_key.type_hint))
        sql = (
            f"UPDATE {self.table_name} SET {', '.join(assignments)} "
            f"WHERE {primary_key.column_name}=:{INITIAL_PRIMARY_KEY_PARAM}"
        )
        return sql, params

    def save(
        self, entity: EntityType, storage: typing.Optional[Storage] = None, close_after: bool = False
    ) -> typing.Union[bool, int]:
        if entity.is_deleted:
            raise StateError(f"{entity!r} was previously deleted from the database, save aborted")
        if not entity.is_dirty:
            logger.debug("%r is not dirty, nothing to save", entity)
            return False
        self._check_required(entity)

        is_insert = entity.is_new
        is_upsert = False
        if is_insert:
            sql, params, is_upsert = self._insert_statement(entity)
        else:
            sql, params = self._update_statement(entity)
        expected_rows = UPSERT_AFFECTED_ROWS if is_upsert else (1,)

        with self._using(storage, close_after) as storage:
            affected_rows = storage.execute_write(sql, params)
            warnings = storage.pending_warnings()
            if affected_rows not in expected_rows:
                raise RowCountError(
                    f"A total of {affected_rows} rows were written to {self.table_name}, expected {expected_rows}",
                    affected_rows=affected_rows,
                    sql=sql,
                    params=params,
                    warnings=warnings,
                )
            entity._mark_saved(storage.last_inserted_key() if is_insert else None)
        logger.debug("Saved %r into %s (%s rows)", entity, self.table_name, affected_rows)

        # the write is kept, warnings are surfaced only after the entity state moved on
        if warnings:
            logger.warning("Storage reported %s warnings while saving %r", len(warnings), entity)
            raise WarningsError(
                f"{affected_rows} rows were written to {self.table_name} but storage returned warnings",
                warnings=warnings,
                affected_rows=affected_rows,
            )
        return affected_rows

    def delete(self, entity: EntityType, storage: typing.Optional[Storage] = None, close_after: bool = False) -> int:
        if entity.is_new:
            raise StateError(f"Can't delete {entity!r}, it hasn't been saved yet")
        if entity.is_deleted:
            raise StateError(f"{entity!r} was already deleted")
        if entity.primary_key_value is None:
            raise StateError(f"Can't delete {entity!r}, its primary key '{self.schema.primary_key}' has no value")

        primary_key = self.schema.primary_key_column
        sql = f"DELETE FROM {self.table_name} WHERE {primary_key.column_name}=:{PRIMARY_KEY_PARAM}"
        params = [BoundParameter(PRIMARY_KEY_PARAM, entity.primary_key_value, primary_key.type_hint)]

        with self._using(storage, close_after) as storage:
            affected_rows = storage.execute_write(sql, params)
        if affected_rows != 1:
            raise RowCountError(
                f"A total of {affected_rows} rows were removed from {self.table_name}, expected 1",
                affected_rows=affected_rows,
                sql=sql,
                params=params,
            )
        entity._mark_deleted()
        logger.debug("Deleted %r from %s", entity, self.table_name)
        return affected_rows

    def delete_where(
        self,
        raw_filter: typing.Any,
        aux_params: AuxParams = None,
        per_row_transaction: bool = False,
        storage: typing.Optional[Storage] = None,
        close_after: bool = False,
    ) -> int:
        """Deletes every row matching ``raw_filter`` and returns how many were removed.

        Passing ``True`` as the filter removes ALL rows of the table.
        ``per_row_transaction`` commits once per parameter set, a single DELETE is still one commit.
        """
        predicate: Predicate = resolve(raw_filter, self.schema, aux_params)
        if not predicate.where_clause:
            logger.warning("Deleting every row of %s", self.table_name)
        sql = f"DELETE FROM {self.table_name}{predicate.sql}"

        with self._using(storage, close_after) as storage:
            removed = storage.execute_write(sql, predicate.params, per_row_transaction=per_row_transaction)
        logger.debug("Deleted %s rows from %s", removed, self.table_name)
        return removed
