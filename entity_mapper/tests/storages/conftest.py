import pytest
from _pytest.fixtures import SubRequest
from sqlalchemy.engine import Engine, create_engine
from sqlalchemy.pool import StaticPool


@pytest.fixture()
def engine(request: SubRequest) -> Engine:
    connection_url = request.config.getoption("--sqlalchemy-url")
    assert connection_url, "You have to define --sqlalchemy-url cmd line option!"
    if connection_url.startswith("sqlite"):
        # one shared connection, otherwise every connection sees its own in-memory database
        return create_engine(connection_url, poolclass=StaticPool, connect_args={"check_same_thread": False})
    return create_engine(connection_url)
