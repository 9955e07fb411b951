import abc
import typing

import attr

from entity_mapper.filters import BoundParameter


Row = typing.Mapping[str, typing.Any]
Params = typing.Sequence[BoundParameter]


class NoDataFound(Exception):
    pass


@attr.s(auto_attribs=True, frozen=True)
class StorageWarning:
    level: str
    code: int
    message: str


class Storage(abc.ABC):
    @abc.abstractmethod
    def execute_query(self, sql: str, params: Params = ()) -> typing.Tuple[typing.List[Row], int]:
        pass

    @abc.abstractmethod
    def execute_write(
        self,
        sql: str,
        params: typing.Union[Params, typing.Sequence[Params]] = (),
        per_row_transaction: bool = False,
    ) -> int:
        pass

    @abc.abstractmethod
    def last_inserted_key(self) -> typing.Any:
        pass

    def pending_warnings(self) -> typing.List[StorageWarning]:
        return []

    def close(self) -> None:
        pass


StorageFactory = typing.Callable[[], Storage]
