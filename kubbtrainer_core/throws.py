from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .clock import from_iso, now
from .errors import MalformedInputError


class ThrowType(str, Enum):
    KUBB = "kubb"
    KING = "king"


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class BatonThrow:
    """One throw in an 8 meter practice round."""

    is_hit: bool
    throw_type: ThrowType
    throw_number: int
    id: str = field(default_factory=_new_id)
    timestamp: datetime = field(default_factory=now)

    @property
    def kubbs_hit(self) -> int:
        return 1 if self.is_hit else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "is_hit": self.is_hit,
            "throw_type": self.throw_type.value,
            "throw_number": self.throw_number,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BatonThrow":
        try:
            return cls(
                id=str(data["id"]),
                is_hit=bool(data["is_hit"]),
                throw_type=ThrowType(data["throw_type"]),
                throw_number=int(data["throw_number"]),
                timestamp=from_iso(data["timestamp"]),
            )
        except MalformedInputError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedInputError(f"Invalid baton throw payload: {exc}") from exc


@dataclass(frozen=True)
class InkastBatonThrow:
    """One throw while blasting an Inkast & Blast round."""

    is_hit: bool
    kubbs_hit: int
    throw_number: int
    id: str = field(default_factory=_new_id)
    timestamp: datetime = field(default_factory=now)

    @property
    def kubbs_knocked_down(self) -> int:
        return self.kubbs_hit if self.is_hit else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "is_hit": self.is_hit,
            "kubbs_hit": self.kubbs_hit,
            "throw_number": self.throw_number,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InkastBatonThrow":
        try:
            return cls(
                id=str(data["id"]),
                is_hit=bool(data["is_hit"]),
                kubbs_hit=int(data["kubbs_hit"]),
                throw_number=int(data["throw_number"]),
                timestamp=from_iso(data["timestamp"]),
            )
        except MalformedInputError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedInputError(f"Invalid inkast baton throw payload: {exc}") from exc
