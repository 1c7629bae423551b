"""Data models for stat-allocation replies."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

_JSON_OBJECT = re.compile(r"\{[^}]+\}")

STAT_KEYS = ("str", "vit", "agi", "int")


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


@dataclass
class StatSplit:
    """Points added to each stat on a level-up."""

    strength: int = 0
    vitality: int = 0
    agility: int = 0
    intelligence: int = 0

    @classmethod
    def from_api(cls, data: dict) -> StatSplit:
        """Build from ``{"str", "vit", "agi", "int"}``; missing or junk values count as 0."""
        return cls(
            strength=_as_int(data.get("str", data.get("strength"))) or 0,
            vitality=_as_int(data.get("vit", data.get("vitality"))) or 0,
            agility=_as_int(data.get("agi", data.get("agility"))) or 0,
            intelligence=_as_int(data.get("int", data.get("intelligence"))) or 0,
        )

    def as_list(self) -> list[int]:
        return [self.strength, self.vitality, self.agility, self.intelligence]

    @classmethod
    def from_list(cls, values: list[int]) -> StatSplit:
        return cls(*values)

    @property
    def total(self) -> int:
        return sum(self.as_list())

    def is_valid(self, budget: int) -> bool:
        return all(v >= 0 for v in self.as_list()) and self.total == budget


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Return the first flat ``{...}`` object in free text (handles code fences)."""
    match = _JSON_OBJECT.search(text or "")
    if not match:
        return None
    try:
        data = json.loads(match.group(0))
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def parse_stat_reply(text: str) -> StatSplit | None:
    """Parse an oracle's text reply. ``None`` when nothing usable is present."""
    data = extract_json_object(text)
    if data is None:
        return None
    if not any(_as_int(data.get(k)) is not None for k in STAT_KEYS):
        return None
    return StatSplit.from_api(data)
