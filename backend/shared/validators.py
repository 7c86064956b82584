"""Shared validation helpers for service settings."""

from __future__ import annotations

import json
import typing
from typing import TYPE_CHECKING, Any

from pydantic_settings import EnvSettingsSource

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo


def parse_string_list(value: str | list[str], *, allow_empty: bool = False) -> list[str]:
    """Parse a string list from an environment variable or config value.

    Accepts:
    - A list of strings (returned as-is)
    - A JSON array string: '["a","b"]'
    - A comma-separated string: 'a, b' (items are stripped, blanks dropped)

    Raises ValueError for blank strings or malformed JSON, and for empty
    lists unless allow_empty is set.
    """
    if isinstance(value, list):
        items = value
    else:
        stripped = value.strip()
        if not stripped:
            raise ValueError("String list value must not be empty")
        items = _parse_json_list(stripped) if stripped.startswith("[") else _parse_csv(stripped)

    if not allow_empty and not items:
        raise ValueError("String list value must not be empty")
    return items


def _parse_json_list(raw: str) -> list[str]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON array: {e}") from e
    if not isinstance(parsed, list) or not all(isinstance(item, str) for item in parsed):
        raise ValueError("JSON value must be an array of strings")
    return parsed


def _parse_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def is_list_field(field: FieldInfo) -> bool:
    return typing.get_origin(field.annotation) is list


class StringListEnvSettingsSource(EnvSettingsSource):
    """Env settings source that hands list-typed fields to validators as raw strings.

    pydantic-settings tries to JSON-decode list-typed fields from env vars
    before validators run, which breaks CSV values like GAME_GEM_TYPES=red,blue.
    This source skips that step for every list field; each such field must
    carry a mode="before" validator calling parse_string_list.
    """

    def prepare_field_value(
        self,
        field_name: str,
        field: FieldInfo,
        value: Any,  # noqa: ANN401
        value_is_complex: bool,  # noqa: FBT001
    ) -> Any:  # noqa: ANN401
        if isinstance(value, str) and is_list_field(field):
            return value
        return super().prepare_field_value(field_name, field, value, value_is_complex)
