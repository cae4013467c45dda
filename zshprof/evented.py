"""
evented.py

Evented profile format: a time-bounded sequence of open/close frame events
referencing a shared frame table. Serializes to the speedscope file format.

Design Invariants:
- Pure data structures, immutable after creation
- Events are kept in emission order
- start_value/end_value are the times of the first and last events
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from zshprof.records import Frame

SPEEDSCOPE_SCHEMA = "https://www.speedscope.app/file-format-schema.json"
EXPORTER = "zshprof"


class ProfileType(Enum):
    EVENTED = "evented"


class EventType(Enum):
    OPEN_FRAME = "O"
    CLOSE_FRAME = "C"


@dataclass(frozen=True)
class FrameEvent:
    """
    One open or close event.

    frame is an index into the frame table. executed_code is only set on
    OPEN_FRAME events and holds the source line that ran.
    """
    type: EventType
    at: float
    frame: int
    executed_code: Optional[str] = None

    @classmethod
    def open(cls, at: float, frame: int, executed_code: str) -> "FrameEvent":
        return cls(EventType.OPEN_FRAME, at, frame, executed_code)

    @classmethod
    def close(cls, at: float, frame: int) -> "FrameEvent":
        return cls(EventType.CLOSE_FRAME, at, frame)

    def to_dict(self) -> Dict[str, Any]:
        result = {"type": self.type.value, "at": self.at, "frame": self.frame}
        if self.type is EventType.OPEN_FRAME and self.executed_code is not None:
            result["executedCode"] = self.executed_code
        return result


@dataclass(frozen=True)
class EventedProfile:
    """An evented profile as consumed by the call-tree builder."""
    name: str
    unit: str
    start_value: float
    end_value: float
    events: Tuple[FrameEvent, ...]

    @property
    def type(self) -> ProfileType:
        return ProfileType.EVENTED

    @property
    def duration(self) -> float:
        return self.end_value - self.start_value

    def count(self, event_type: EventType) -> int:
        """Number of events of the given type."""
        return sum(1 for event in self.events if event.type is event_type)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a speedscope evented-profile dictionary."""
        return {
            "type": self.type.value,
            "name": self.name,
            "unit": self.unit,
            "startValue": self.start_value,
            "endValue": self.end_value,
            "events": [event.to_dict() for event in self.events],
        }

    def to_speedscope(self, frames: Sequence[Frame], name: Optional[str] = None) -> Dict[str, Any]:
        """
        Wrap this profile and its frame table into a speedscope file.

        Args:
            frames: Frame table the events refer to
            name: File-level name, defaults to the profile name

        Returns:
            Dictionary ready for json.dump
        """
        return {
            "$schema": SPEEDSCOPE_SCHEMA,
            "name": name or self.name,
            "exporter": EXPORTER,
            "shared": {"frames": [frame.to_dict() for frame in frames]},
            "profiles": [self.to_dict()],
            "activeProfileIndex": 0,
        }

    def to_json(self, frames: Sequence[Frame], name: Optional[str] = None, *, indent: Optional[int] = 2) -> str:
        """Serialize the speedscope file to a JSON string."""
        return json.dumps(self.to_speedscope(frames, name), indent=indent, ensure_ascii=False)
