import typing

import pytest
from _pytest.config.argparsing import Parser

from entity_mapper.filters import BoundParameter
from entity_mapper.storages import NoDataFound, Row, Storage, StorageWarning


def pytest_addoption(parser: Parser) -> None:
    parser.addoption("--sqlalchemy-url", action="store", default="sqlite://")


class RecordingStorage(Storage):
    def __init__(self) -> None:
        self.rows: typing.List[Row] = []
        self.no_data_found = False
        self.affected_rows = 1
        self.inserted_key: typing.Any = None
        self.warnings: typing.List[StorageWarning] = []
        self.queries: typing.List[typing.Tuple[str, typing.List[BoundParameter]]] = []
        self.writes: typing.List[typing.Tuple[str, typing.List[BoundParameter], bool]] = []
        self.closed = False

    def execute_query(self, sql: str, params: typing.Sequence[BoundParameter] = ()) -> typing.Tuple[typing.List[Row], int]:
        self.queries.append((sql, list(params)))
        if self.no_data_found:
            raise NoDataFound(sql)
        return list(self.rows), len(self.rows)

    def execute_write(
        self, sql: str, params: typing.Sequence[BoundParameter] = (), per_row_transaction: bool = False
    ) -> int:
        self.writes.append((sql, list(params), per_row_transaction))
        return self.affected_rows

    def last_inserted_key(self) -> typing.Any:
        return self.inserted_key

    def pending_warnings(self) -> typing.List[StorageWarning]:
        return list(self.warnings)

    def close(self) -> None:
        self.closed = True

    @property
    def last_write(self) -> typing.Tuple[str, typing.List[BoundParameter], bool]:
        return self.writes[-1]

    @property
    def last_query(self) -> typing.Tuple[str, typing.List[BoundParameter]]:
        return self.queries[-1]


@pytest.fixture()
def storage() -> RecordingStorage:
    return RecordingStorage()
