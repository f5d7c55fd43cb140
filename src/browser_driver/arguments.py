"""
Wire argument normalization.

Turns JSON-encoded option blobs and enums-as-strings into the typed structs
defined in models.py. Every decode failure raises MalformedArgumentError so
it is reported before any engine call is attempted.
"""

import json
import logging
from enum import Enum
from typing import Any, List, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .errors import MalformedArgumentError
from .models import OptionDescriptor, OptionMatcher

logger = logging.getLogger(__name__)

StructT = TypeVar("StructT", bound=BaseModel)
EnumT = TypeVar("EnumT", bound=Enum)


def decode_json(raw: str, field_name: str) -> Any:
    """Decode a JSON string field. An empty string decodes to None."""
    if raw is None or not raw.strip():
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedArgumentError(f"Invalid JSON in '{field_name}': {e.msg} (got {raw!r})") from e


def decode_options(raw: str, model: Type[StructT], field_name: str = "options_json") -> StructT:
    """Decode a JSON object blob into an option struct. Empty input yields defaults."""
    data = decode_json(raw, field_name)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedArgumentError(f"'{field_name}' must be a JSON object, got {type(data).__name__}")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedArgumentError(f"Invalid {model.__name__} in '{field_name}': {_summarize(e)}") from e


def decode_matcher(raw: str) -> OptionMatcher:
    """
    Decode a select-option matcher.

    Accepted shapes:
    - "red"                                  -> by value (or label)
    - ["red", "blue"]                        -> by values
    - {"label": "Red"} / {"index": 2}        -> option descriptor
    - [{"value": "red"}, {"index": 0}, "x"]  -> mixed list
    """
    data = decode_json(raw, "matcher_json")
    if data is None:
        raise MalformedArgumentError("'matcher_json' must not be empty")

    items: List[Any] = data if isinstance(data, list) else [data]
    values: List[str] = []
    labels: List[str] = []
    indexes: List[int] = []
    for item in items:
        if isinstance(item, str):
            values.append(item)
        elif isinstance(item, dict):
            try:
                descriptor = OptionDescriptor.model_validate(item)
            except ValidationError as e:
                raise MalformedArgumentError(f"Invalid option descriptor {item!r}: {_summarize(e)}") from e
            if descriptor.value is not None:
                values.append(descriptor.value)
            if descriptor.label is not None:
                labels.append(descriptor.label)
            if descriptor.index is not None:
                indexes.append(descriptor.index)
        else:
            raise MalformedArgumentError(f"Unsupported option matcher {item!r}")

    matcher = OptionMatcher(values=values, labels=labels, indexes=indexes)
    logger.debug(f"Decoded option matcher {raw!r} -> {matcher}")
    return matcher


def parse_enum(raw: str, enum_type: Type[EnumT], field_name: str) -> EnumT:
    """Map an enum-as-string onto its member, case-insensitively."""
    for member in enum_type:
        if raw == member.value or (isinstance(raw, str) and raw.lower() == str(member.value).lower()):
            return member
    allowed = ", ".join(str(member.value) for member in enum_type)
    raise MalformedArgumentError(f"Invalid {field_name} '{raw}', expected one of: {allowed}")


def as_path_list(path: Union[str, List[str]]) -> List[str]:
    paths = [path] if isinstance(path, str) else list(path)
    if not paths or any(not p for p in paths):
        raise MalformedArgumentError("Upload needs at least one non-empty file path")
    return paths


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(loc) for loc in item.get("loc", ())) or "value"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)
