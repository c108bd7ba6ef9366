"""Node kinds: the pluggable per-type part of a node.

A kind supplies a title, an optional default size and parameter fields.  The
canvas builds the node's inline settings widget from those fields, the same
way plugin descriptors drive auto-generated panels, so graph logic never
needs to know about any concrete kind.

Kinds:
  delay – waits `delay` seconds before the next node in the chain fires.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional

from .errors import UnknownNodeKindError


@dataclass(frozen=True)
class FieldSpec:
    key: str
    label: str
    ftype: str = "float"          # "float" | "int" | "string" | "bool"
    default: Any = 0.0
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def coerce(self, value: Any) -> Any:
        """Convert value to this field's type and clamp numeric ranges.

        Falls back to the default when the value can't be converted.
        """
        try:
            if self.ftype == "float":
                value = float(value)
            elif self.ftype == "int":
                value = int(value)
            elif self.ftype == "bool":
                if isinstance(value, str):
                    value = value.strip().lower() in ("1", "true", "yes", "on")
                else:
                    value = bool(value)
                return value
            else:
                return str(value)
        except (TypeError, ValueError, OverflowError):
            return self.default
        if self.minimum is not None:
            value = max(self.minimum, value)
        if self.maximum is not None:
            value = min(self.maximum, value)
        return value


class NodeKind:
    """Base class for node kinds.  Subclasses override the class attributes
    and, if needed, fields()."""

    name: str = ""
    title: str = ""
    default_size: Optional[tuple[float, float]] = None

    def fields(self) -> list[FieldSpec]:
        return []

    def default_params(self) -> dict:
        return {f.key: f.default for f in self.fields()}

    def serialize_params(self, params: dict) -> dict:
        """Only declared fields, coerced to their types."""
        return {f.key: f.coerce(params.get(f.key, f.default)) for f in self.fields()}

    def deserialize_params(self, data: dict) -> dict:
        params = self.default_params()
        for f in self.fields():
            if f.key in data:
                params[f.key] = f.coerce(data[f.key])
        return params

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class DelayKind(NodeKind):
    name = "delay"
    title = "Delay"

    def fields(self) -> list[FieldSpec]:
        return [FieldSpec("delay", "Duration", "float", 1.0, minimum=0.0)]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

_KINDS: dict[str, NodeKind] = {}


def register_kind(kind: NodeKind) -> NodeKind:
    """Register (or replace) a kind under kind.name.  Returns it."""
    if not kind.name:
        raise ValueError(f"{kind!r} has no name")
    _KINDS[kind.name] = kind
    return kind


def get_kind(name: str) -> NodeKind:
    try:
        return _KINDS[name]
    except KeyError:
        raise UnknownNodeKindError(name) from None


def available_kinds() -> list[NodeKind]:
    """All registered kinds in registration order."""
    return list(_KINDS.values())


register_kind(DelayKind())
