"""
records.py

Value types shared by the tokenizer and the stack reconstructor.
 TraceRecord: one parsed xtrace entry.
 Frame: de-duplicated call site, referenced by index from events.
 CallStackFrame: runtime stack entry while reconstructing calls.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class TraceRecord:
    """A single line executed by the traced shell.

    level is the evaluation depth reported by the prompt (%e); timestamp is
    seconds since the epoch and is not guaranteed to be monotonic in file
    order.
    """
    level: int
    timestamp: float
    name: str
    file: str
    lineno: int
    code: str

    @property
    def frame_key(self) -> str:
        # file is deliberately not part of the key
        return f"{self.name}:{self.lineno}"


@dataclass(frozen=True)
class Frame:
    """A call site as stored in the shared frame table."""
    name: str
    file: str
    line: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "file": self.file, "line": self.line}

    @classmethod
    def from_record(cls, record: TraceRecord) -> "Frame":
        return cls(name=record.name, file=record.file, line=record.lineno)


@dataclass(frozen=True)
class CallStackFrame:
    """An open invocation: which frame, at which depth, opened when."""
    frame_id: int
    level: int
    timestamp: float
