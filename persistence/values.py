from __future__ import annotations

import copy
import json
from typing import Any

from pydantic import JsonValue, TypeAdapter, ValidationError

from .errors import InvalidBody

# A document is a JSON object: str keys, JSON values (null/bool/number/str/list/object).
Document = dict[str, JsonValue]

_DOCUMENT_ADAPTER: TypeAdapter[Document] = TypeAdapter(Document)


def is_bag(value: Any) -> bool:
    return isinstance(value, dict)


def validate_body(body: Any) -> Document:
    """
    Validate a request body as a JSON object and return a private copy of it.

    Raises InvalidBody for anything that is not a field-bag (arrays, scalars,
    null, objects holding non-JSON values).
    """
    if not is_bag(body):
        raise InvalidBody()
    try:
        return _DOCUMENT_ADAPTER.validate_python(copy.deepcopy(body))
    except ValidationError as e:
        raise InvalidBody(f"invalid request body: {e.error_count()} invalid value(s)") from e


def resolve_path(doc: Any, path: str) -> Any | None:
    """
    Walk a dot-separated path ("address.city") through nested objects.

    Returns None when a segment is missing or an intermediate value is not an object.
    """
    current = doc
    for segment in path.split("."):
        if not is_bag(current) or segment not in current:
            return None
        current = current[segment]
    return current


def canonical_text(value: Any) -> str | None:
    """
    Text used for filter equality. Only scalars have one; null, arrays and
    objects never match a filter.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return json.dumps(value)
    if isinstance(value, (list, dict)):
        return None
    raise TypeError(f"not a JSON value: {type(value).__name__}")
