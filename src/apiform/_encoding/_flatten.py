"""Flattening of nested request parameters.

Form encoding is ambiguous for nested values, and the API expects nested
parameters in bracket notation. :func:`flatten_params` turns a mapping that
may hold nested mappings and sequences into a flat list of key/value pairs::

    >>> flatten_params({"amount": 234, "items": [{"plan": "gold"}, {"plan": "silver"}]})
    [KeyValuePair(key='amount', value='234'),
     KeyValuePair(key='items[0][plan]', value='gold'),
     KeyValuePair(key='items[1][plan]', value='silver')]

Values always come out as ``str``, except binary payloads which are passed
through untouched. If at least one binary payload is present the body has to
be sent as ``multipart/form-data``; otherwise ``application/x-www-form-urlencoded``
is enough.
"""

import io
import json
from collections.abc import Mapping, Sequence
from enum import Enum
from functools import singledispatch
from pathlib import PurePath
from typing import Any, FrozenSet, List, Optional

from ..models.errors import MalformedParametersError
from ._key_value_pair import KeyValuePair
from ._payload import BinaryPayload


def flatten_params(params: Optional[Mapping[str, Any]]) -> List[KeyValuePair]:
    """Flatten a mapping of request parameters.

    Args:
        params: The parameters. ``None`` is treated as no parameters.

    Returns:
        The flattened pairs, in mapping insertion order.

    Raises:
        MalformedParametersError: If ``params`` is not a mapping or contains
            a reference cycle.
    """
    if params is None:
        return []
    if not isinstance(params, Mapping):
        raise MalformedParametersError(
            f"Request parameters must be a mapping, got {type(params).__name__}"
        )
    return flatten(params)


def flatten(value: Any, key_prefix: Optional[str] = None) -> List[KeyValuePair]:
    """Flatten a single parameter value nested under ``key_prefix``."""
    return _flatten_value(value, key_prefix, frozenset())


def _new_prefix(key: str, key_prefix: Optional[str]) -> str:
    # foo + bar      -> foo[bar]
    # foo + bar[baz] -> foo[bar][baz]
    if not key_prefix:
        return key

    i = key.find("[")
    if i == -1:
        return f"{key_prefix}[{key}]"
    return f"{key_prefix}[{key[:i]}]{key[i:]}"


def _single(key: Optional[str], value: Any) -> List[KeyValuePair]:
    return [KeyValuePair(key, value)]


def _enter(value: Any, key: Optional[str], ancestors: FrozenSet[int]) -> FrozenSet[int]:
    if id(value) in ancestors:
        raise MalformedParametersError.cycle(key)
    return ancestors | {id(value)}


@singledispatch
def _flatten_value(
    value: Any, key_prefix: Optional[str], ancestors: FrozenSet[int]
) -> List[KeyValuePair]:
    return _single(key_prefix, str(value))


@_flatten_value.register(type(None))
def _(value: None, key_prefix: Optional[str], ancestors: FrozenSet[int]):
    return _single(key_prefix, "")


@_flatten_value.register(Mapping)
def _(value: Mapping, key_prefix: Optional[str], ancestors: FrozenSet[int]):
    ancestors = _enter(value, key_prefix, ancestors)

    flat_params: List[KeyValuePair] = []
    for key, item in value.items():
        flat_params.extend(
            _flatten_value(item, _new_prefix(str(key), key_prefix), ancestors)
        )
    return flat_params


@_flatten_value.register(str)
def _(value: str, key_prefix: Optional[str], ancestors: FrozenSet[int]):
    if isinstance(value, Enum):
        return _flatten_enum(value, key_prefix, ancestors)
    return _single(key_prefix, value)


@_flatten_value.register(BinaryPayload)
@_flatten_value.register(bytes)
@_flatten_value.register(bytearray)
@_flatten_value.register(memoryview)
@_flatten_value.register(io.IOBase)
@_flatten_value.register(PurePath)
def _(value: Any, key_prefix: Optional[str], ancestors: FrozenSet[int]):
    return _single(key_prefix, value)


@_flatten_value.register(Sequence)
def _(value: Sequence, key_prefix: Optional[str], ancestors: FrozenSet[int]):
    ancestors = _enter(value, key_prefix, ancestors)

    flat_params: List[KeyValuePair] = []
    for index, item in enumerate(value):
        flat_params.extend(
            _flatten_value(item, f"{key_prefix or ''}[{index}]", ancestors)
        )

    # application/x-www-form-urlencoded has no way to express an empty list,
    # so an empty list is sent as the bare key with an empty value.
    if not flat_params:
        return _single(key_prefix, "")
    return flat_params


@_flatten_value.register(Enum)
def _flatten_enum(value: Enum, key_prefix: Optional[str], ancestors: FrozenSet[int]):
    return _single(key_prefix, _enum_scalar(value.value))


def _enum_scalar(raw: Any) -> str:
    if isinstance(raw, str):
        return raw

    serialized = json.dumps(raw, ensure_ascii=False, default=str)
    # objects serialized through default=str come back as a quoted JSON string
    if len(serialized) >= 2 and serialized[0] == serialized[-1] == '"':
        return json.loads(serialized)
    return serialized


@_flatten_value.register(bool)
def _(value: bool, key_prefix: Optional[str], ancestors: FrozenSet[int]):
    return _single(key_prefix, "true" if value else "false")
