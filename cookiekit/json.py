import collections.abc
import dataclasses
import datetime
import decimal
import enum
import json
import typing
import uuid

JSONEncoder = json.JSONEncoder
JSONDecodeError = json.JSONDecodeError

_type_to_encoder: dict[type, typing.Callable] = {
    uuid.UUID: str,
    datetime.timedelta: str,
    datetime.datetime: lambda x: x.isoformat(),
    datetime.date: lambda x: x.isoformat(),
    datetime.time: lambda x: x.isoformat(),
    set: list,
    frozenset: list,
    collections.abc.KeysView: list,
    collections.abc.ValuesView: list,
    decimal.Decimal: str,
    bytes: lambda x: x.decode(),
    enum.Enum: lambda x: x.value,
}


def json_default(o: typing.Any) -> typing.Any:
    """Usage: json.dumps(data, default=json_default)"""
    if hasattr(o, "to_json"):
        return o.to_json()

    if hasattr(o, "__json__"):
        return o.__json__()

    for type_class, encoder in _type_to_encoder.items():
        if isinstance(o, type_class):
            return encoder(o)

    if dataclasses.is_dataclass(o) and not isinstance(o, type):
        return dataclasses.asdict(o)

    return JSONEncoder().default(o)


JSONData = typing.Any  # https://github.com/python/typing/issues/182


def dumps(value: JSONData, **kwargs: typing.Any) -> str:
    """
    Encode value into JSON text.

    Raises TypeError for values the encoder does not know and ValueError for
    undecodable bytes or circular structures.
    """
    if "default" not in kwargs and "cls" not in kwargs:
        kwargs["default"] = json_default
    return json.dumps(value, **kwargs)


loads = json.loads
