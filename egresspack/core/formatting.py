"""Entry formatters: one canonical string rendering per entry kind."""

from __future__ import annotations

import dataclasses
import math
from pprint import pformat
import re
from typing import Any, Protocol

from egresspack.core.canonical import pretty_json
from egresspack.core.exceptions import FormatError
from egresspack.core.types import ENTRY_KINDS, EntryKind

# Default object reprs embed the memory address, which changes between runs.
_ADDRESS_PATTERN = re.compile(r" at 0x[0-9a-fA-F]+>")
# pprint marks a self-reference with the object id.
_RECURSION_MARKER = "<Recursion on "


class EntryFormatter(Protocol):
    """Protocol for a single entry-kind renderer."""

    kind: EntryKind

    def format(self, value: Any) -> str:
        """Render `value` into its canonical string, or raise `FormatError`."""


class SerializeFormatter:
    """Structured rendering via canonical JSON.

    Stable across refactors that keep the data shape.
    """

    kind: EntryKind = "serialize"

    def format(self, value: Any) -> str:
        data = to_json_compatible(value)
        try:
            return pretty_json(data)
        except (TypeError, ValueError) as error:
            raise FormatError(f"value cannot be serialized: {error}") from error


class DebugFormatter:
    """Implementation-oriented dump via `pprint`."""

    kind: EntryKind = "debug"

    def format(self, value: Any) -> str:
        rendered = pformat(_stable_sets(value), width=88, sort_dicts=True)
        _reject_unstable(rendered, value, kind=self.kind)
        return rendered


class DisplayFormatter:
    """User-facing rendering via `str()`."""

    kind: EntryKind = "display"

    def format(self, value: Any) -> str:
        value_type = type(value)
        if value_type.__str__ is object.__str__ and value_type.__repr__ is object.__repr__:
            raise FormatError(
                f"{value_type.__name__} has no display form; define __str__ or use kind='debug'"
            )
        rendered = str(value)
        _reject_unstable(rendered, value, kind=self.kind)
        return rendered


_FORMATTERS: dict[str, EntryFormatter] = {
    "serialize": SerializeFormatter(),
    "debug": DebugFormatter(),
    "display": DisplayFormatter(),
}


def get_formatter(kind: str) -> EntryFormatter:
    formatter = _FORMATTERS.get(kind)
    if formatter is None:
        raise FormatError(
            f"Unsupported entry kind: {kind!r}. Supported kinds: {', '.join(ENTRY_KINDS)}"
        )
    return formatter


def format_value(value: Any, kind: str) -> str:
    """Render a captured value under the requested entry kind."""
    return get_formatter(kind).format(value)


def to_json_compatible(value: Any, *, _active: frozenset[int] = frozenset()) -> Any:
    """Convert a value into plain JSON data or raise `FormatError`.

    Mapping keys become the strings JSON would use for them; two keys that
    map to the same string, and self-referencing values, are rejected.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value

    if id(value) in _active:
        raise FormatError(f"{type(value).__name__} value contains a reference cycle")
    active = _active | {id(value)}

    if isinstance(value, dict):
        converted: dict[str, Any] = {}
        for key, item in value.items():
            json_key = _json_key(key)
            if json_key in converted:
                raise FormatError(f"mapping keys collide as JSON key {json_key!r}")
            converted[json_key] = to_json_compatible(item, _active=active)
        return converted

    if isinstance(value, (list, tuple)):
        return [to_json_compatible(item, _active=active) for item in value]

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            item.name: to_json_compatible(getattr(value, item.name), _active=active)
            for item in dataclasses.fields(value)
        }

    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_json_compatible(to_dict(), _active=active)

    raise FormatError(
        f"{type(value).__name__} has no structured representation; "
        "use a dataclass, a to_dict() method, or kind='debug'"
    )


def _json_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, int):
        return str(key)
    if isinstance(key, float):
        if math.isnan(key) or math.isinf(key):
            raise FormatError(f"mapping key {key!r} cannot be serialized")
        return repr(key)
    raise FormatError(f"mapping key of type {type(key).__name__} cannot be serialized")


def _reject_unstable(rendered: str, value: Any, *, kind: str) -> None:
    if _ADDRESS_PATTERN.search(rendered) or _RECURSION_MARKER in rendered:
        raise FormatError(
            f"{kind} rendering of {type(value).__name__} contains a memory address "
            "or object id and would differ between runs"
        )


class _SortedSetRepr:
    """Stand-in that renders a set with its members in a stable order."""

    __slots__ = ("items", "frozen")

    def __init__(self, items: list[Any], *, frozen: bool) -> None:
        self.items = items
        self.frozen = frozen

    def __repr__(self) -> str:
        if not self.items:
            return "frozenset()" if self.frozen else "set()"
        body = "{" + ", ".join(repr(item) for item in self.items) + "}"
        return f"frozenset({body})" if self.frozen else body


def _stable_sets(value: Any, _active: frozenset[int] = frozenset()) -> Any:
    # Set iteration order depends on string hashing, which is salted per process.
    if isinstance(value, (set, frozenset)):
        items = sorted((_stable_sets(item, _active) for item in value), key=repr)
        return _SortedSetRepr(items, frozen=isinstance(value, frozenset))
    if type(value) not in (dict, list, tuple):
        return value
    if id(value) in _active:
        raise FormatError(f"{type(value).__name__} value contains a reference cycle")
    active = _active | {id(value)}
    if type(value) is dict:
        return {key: _stable_sets(item, active) for key, item in value.items()}
    if type(value) is list:
        return [_stable_sets(item, active) for item in value]
    return tuple(_stable_sets(item, active) for item in value)
