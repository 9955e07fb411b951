from typing import Generator

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table
from sqlalchemy.engine import Engine

from entity_mapper.storages.sqlalchemy import SqlAlchemyStorage


@pytest.fixture()
def metadata() -> MetaData:
    metadata = MetaData()
    Table(
        "members",
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("username", String(255), nullable=False),
        Column("age", Integer),
        Column("country", String(2)),
        Column("date_of_birth", String(10)),
    )
    Table(
        "countries",
        metadata,
        Column("code", String(2), primary_key=True),
        Column("name", String(255), nullable=False),
    )
    return metadata


@pytest.fixture()
def sa_storage(metadata: MetaData, engine: Engine) -> Generator[SqlAlchemyStorage, None, None]:
    metadata.drop_all(engine)
    metadata.create_all(engine)
    storage = SqlAlchemyStorage(engine)
    yield storage
    storage.close()
    metadata.drop_all(engine)
