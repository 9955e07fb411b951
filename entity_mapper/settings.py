import os
import typing

import attr


ENV_PREFIX = "ENTITY_MAPPER_"
TRUTHY = ("1", "true", "yes", "on")


def _as_bool(value: typing.Union[str, bool]) -> bool:
    if isinstance(value, bool):
        return value
    return value.strip().lower() in TRUTHY


@attr.s(auto_attribs=True, frozen=True)
class Settings:
    database_url: str = "sqlite://"
    echo: bool = attr.ib(default=False, converter=_as_bool)
    raise_on_no_data: bool = attr.ib(default=True, converter=_as_bool)

    @classmethod
    def from_env(cls, environ: typing.Optional[typing.Mapping[str, str]] = None) -> "Settings":
        environ = os.environ if environ is None else environ
        kwargs = {}
        for field in attr.fields(cls):
            name = f"{ENV_PREFIX}{field.name.upper()}"
            if name in environ:
                kwargs[field.name] = environ[name]
        return cls(**kwargs)
