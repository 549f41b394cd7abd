"""Render arbitrary command values as terminal text."""

import json
from concurrent.futures import Future
from typing import Any

from pydantic import BaseModel


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _to_jsonable(item) for key, item in value.items()}
    return value


def stringify(value: Any) -> str:
    """Convert any value to its display string.

    None renders as "null", booleans as "true"/"false", containers and
    models as indented JSON, and strings as-is.

    Args:
        value: Value returned by a command or expression.

    Returns:
        Display text.
    """
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Future):
        return describe_future(value)
    if isinstance(value, (list, tuple, dict, BaseModel)):
        try:
            return json.dumps(_to_jsonable(value), indent=2)
        except (TypeError, ValueError):
            return str(value)
    return str(value)


def describe_future(future: Future) -> str:
    """Render a promise the way a REPL shows it."""
    if not future.done():
        return "Promise { <pending> }"
    error = future.exception()
    if error is not None:
        return f"Promise {{ <rejected> {error} }}"
    return f"Promise {{ {stringify(future.result())} }}"
