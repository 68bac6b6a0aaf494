from typing import Any, NamedTuple, Optional


class KeyValuePair(NamedTuple):
    """A single flattened request parameter.

    ``value`` is a ``str`` for form fields, or a binary payload (see
    :mod:`apiform._encoding._payload`) for file fields.
    """

    key: Optional[str]
    value: Any
