import logging
import typing

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.sql.elements import TextClause

from entity_mapper.filters import BoundParameter
from entity_mapper.settings import Settings
from entity_mapper.storages import NoDataFound, Params, Row, Storage, StorageFactory, StorageWarning
from entity_mapper.storages.sqlalchemy.types import from_storage, to_bindparam


logger = logging.getLogger(__name__)

WARNING_DIALECTS = ("mysql", "mariadb")


def _statement(sql: str, params: Params) -> TextClause:
    statement = text(sql)
    if params:
        statement = statement.bindparams(*(to_bindparam(param) for param in params))
    return statement


def _is_parameter_sets(params: typing.Sequence[typing.Any]) -> bool:
    return bool(params) and not isinstance(params[0], BoundParameter)


class SqlAlchemyStorage(Storage):
    def __init__(self, engine: Engine, raise_on_no_data: bool = True) -> None:
        self._engine = engine
        self._raise_on_no_data = raise_on_no_data
        self._connection: typing.Optional[Connection] = None
        self._last_inserted_key: typing.Any = None
        self._warnings: typing.List[StorageWarning] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> "SqlAlchemyStorage":
        return cls(create_engine(settings.database_url, echo=settings.echo), settings.raise_on_no_data)

    @classmethod
    def factory(cls, settings: Settings) -> StorageFactory:
        engine = create_engine(settings.database_url, echo=settings.echo)
        return lambda: cls(engine, settings.raise_on_no_data)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            self._connection = self._engine.connect()
        return self._connection

    @property
    def is_closed(self) -> bool:
        return self._connection is None

    def execute_query(self, sql: str, params: Params = ()) -> typing.Tuple[typing.List[Row], int]:
        logger.debug("Querying: %s", sql)
        with self.connection.begin():
            rows = [from_storage(row) for row in self.connection.execute(_statement(sql, params)).mappings()]
        if not rows and self._raise_on_no_data:
            raise NoDataFound(f"No data found for: {sql}")
        return rows, len(rows)

    def execute_write(
        self,
        sql: str,
        params: typing.Union[Params, typing.Sequence[Params]] = (),
        per_row_transaction: bool = False,
    ) -> int:
        parameter_sets = list(params) if _is_parameter_sets(params) else [params]
        self._warnings = []
        self._last_inserted_key = None
        logger.debug("Writing (%s parameter sets): %s", len(parameter_sets), sql)

        affected_rows = 0
        if per_row_transaction:
            for parameter_set in parameter_sets:
                with self.connection.begin():
                    affected_rows += self._write(sql, parameter_set)
        else:
            with self.connection.begin():
                for parameter_set in parameter_sets:
                    affected_rows += self._write(sql, parameter_set)
        return affected_rows

    def _write(self, sql: str, params: Params) -> int:
        result = self.connection.execute(_statement(sql, params))
        if sql.lstrip().upper().startswith("INSERT"):
            self._last_inserted_key = getattr(result, "lastrowid", None)
        # warnings have to be read before the transaction ends
        self._warnings.extend(self._fetch_warnings())
        return result.rowcount

    def _fetch_warnings(self) -> typing.List[StorageWarning]:
        if self._engine.dialect.name not in WARNING_DIALECTS:
            return []
        return [
            StorageWarning(level=str(level), code=int(code), message=str(message))
            for level, code, message in self.connection.execute(text("SHOW WARNINGS"))
        ]

    def last_inserted_key(self) -> typing.Any:
        return self._last_inserted_key

    def pending_warnings(self) -> typing.List[StorageWarning]:
        warnings, self._warnings = self._warnings, []
        return warnings

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
