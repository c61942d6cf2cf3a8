"""Resolved value sets and strategies for locating parameter or credential values."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import yaml

_NULL_SCALARS = {"", "~", "null", "Null", "NULL"}


class ValueSet(dict):
    """A set of resolved values, keyed by parameter or credential name."""

    def merge(self, other: dict) -> None:
        """Merge ``other`` into this set; any duplicate name is an error."""
        for key, value in other.items():
            if key in self:
                raise ValueError(
                    f"ambiguous value resolution: {json.dumps(key)} "
                    "is already present in base sets, cannot merge"
                )
            self[key] = value


def is_valid(value_set: dict, key: str) -> bool:
    """Return whether ``key`` names an entry of ``value_set``."""
    return key in value_set


@dataclass
class Source:
    """Where to load a value from on the local host, as a single key/value pair."""

    key: str = ""
    value: str = ""

    def to_raw(self) -> Optional[dict]:
        """Return the mapping form, or None when no key is set."""
        if not self.key:
            return None
        return {self.key: self.value}

    @classmethod
    def from_raw(cls, raw: Optional[dict]) -> "Source":
        """Build a source from a mapping holding at most one pair."""
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ValueError("source must be a mapping of string to string")
        for key, value in raw.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise ValueError("source must be a mapping of string to string")
        if len(raw) == 0:
            return cls()
        if len(raw) > 1:
            raise ValueError(
                "multiple key/value pairs specified for source but only one may be defined"
            )
        (key, value), = raw.items()
        return cls(key=key, value=value)

    def to_json(self) -> str:
        return json.dumps(self.to_raw(), separators=(",", ":"))

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "Source":
        return cls.from_raw(json.loads(data))

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_raw(), default_flow_style=False)

    @classmethod
    def from_yaml(cls, data: Union[str, bytes]) -> "Source":
        # Scalars are read as plain strings so that numbers stay text.
        raw: Any = yaml.load(data, Loader=yaml.BaseLoader)
        if isinstance(raw, str) and raw.strip() in _NULL_SCALARS:
            raw = None
        return cls.from_raw(raw)


@dataclass
class Strategy:
    """How to determine the value of a parameter or credential."""

    name: str = ""
    source: Source = field(default_factory=Source)
    # Holds the loaded value during resolution; never serialized.
    value: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "source": self.source.to_raw()}

    @classmethod
    def from_dict(cls, data: dict) -> "Strategy":
        name = data.get("name", "")
        if not isinstance(name, str):
            raise ValueError("strategy name must be a string")
        return cls(name=name, source=Source.from_raw(data.get("source")))