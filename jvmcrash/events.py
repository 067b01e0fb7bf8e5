#!python3
"""
Event records produced by the builders.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple, Optional

from .kinds import EventKind, Role


class RawLine(NamedTuple):
    """A line as supplied by the reader: zero-based position and text."""
    index: int
    text: str


class GrammarDefectError(ValueError):
    """A builder rejected a line that the classifier assigned to its kind."""

    def __init__(self, kind: EventKind, line: str, reason: str = ""):
        self.kind = kind
        self.line = line
        self.reason = reason
        message = f"{kind.name} builder rejected {line!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


def _plain(value: Any) -> Any:
    """Convert field values to JSON-friendly primitives."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if hasattr(value, "bytes"):
        return value.bytes
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return str(value)


@dataclass(frozen=True)
class Event:
    """One classified and field-extracted line."""

    kind: EventKind
    text: str
    role: Role
    fields: Mapping[str, Any] = field(default_factory=dict)
    # Set for mid-report error sentinels attributed to an open section
    truncated: bool = False
    index: Optional[int] = None
    line_hash: Optional[str] = None

    def __post_init__(self):
        # Read-only view so a frozen event cannot be changed through its fields
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def is_throwaway(self) -> bool:
        return self.role is Role.THROWAWAY

    @property
    def is_unknown(self) -> bool:
        return self.kind is EventKind.UNKNOWN

    def to_dict(self) -> dict:
        data = {
            "index": self.index,
            "kind": self.kind.value,
            "role": self.role.value,
            "text": self.text,
            "fields": {key: _plain(value) for key, value in self.fields.items()},
        }
        if self.truncated:
            data["truncated"] = True
        if self.line_hash is not None:
            data["line_hash"] = self.line_hash
        return data
