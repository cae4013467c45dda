"""
errors.py

Error system for zshprof.

Design principles:
- Every error carries a stable error code
- Input errors point at the physical line of the trace file
- Builder errors name the frames involved
- Explain what went wrong in plain language
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class ErrorLocation:
    """Location of a problem inside a trace file."""
    line: int
    column: int = 0
    source_line: str = ""

    def format(self) -> str:
        """Format location as 'line N' or 'line N, column M'."""
        if self.column > 0:
            return f"line {self.line}, column {self.column}"
        return f"line {self.line}"


class ZshProfError(Exception):
    """
    Base class for all zshprof errors.

    Errors format as ``[CODE] message`` in their short form. The full form
    adds the offending source line and a list of suggestions.
    """

    def __init__(
        self,
        message: str,
        location: Optional[ErrorLocation] = None,
        *,
        explanation: str = "",
        suggestions: Optional[List[str]] = None,
        error_code: str = "E000",
    ):
        self.message = message
        self.location = location
        self.explanation = explanation
        self.suggestions = suggestions or []
        self.error_code = error_code
        super().__init__(self.format_short())

    def format_short(self) -> str:
        """Format as single-line error message."""
        parts = [f"[{self.error_code}]"]
        if self.location:
            parts.append(f"Line {self.location.line}:")
        parts.append(self.message)
        return " ".join(parts)

    def format_full(self) -> str:
        """Format as multi-line human-readable error."""
        header = f"Error {self.error_code}"
        if self.location:
            header += f" at {self.location.format()}"
        lines = [header, "", f"  {self.message}"]

        if self.location and self.location.source_line:
            lines.append("")
            lines.append(f"    {self.location.line} | {self.location.source_line}")
            if self.location.column > 0:
                pointer_offset = len(str(self.location.line)) + 7 + self.location.column - 1
                lines.append(" " * pointer_offset + "^")

        if self.explanation:
            lines.append("")
            lines.append(f"  {self.explanation}")

        if self.suggestions:
            lines.append("")
            lines.append("  Suggestions:")
            lines.extend(f"    - {suggestion}" for suggestion in self.suggestions)

        return "\n".join(lines)


# === Trace Syntax Errors (E1xx) ===

class TraceSyntaxError(ZshProfError):
    """Base class for problems with the trace text itself."""
    pass


class MalformedLineError(TraceSyntaxError):
    """Raised in strict mode when a non-blank line holds no trace record."""

    def __init__(self, location: ErrorLocation, marker: str = "+Z|"):
        super().__init__(
            message="Line does not contain a trace record",
            location=location,
            explanation=(
                f"Trace records look like "
                f"'{marker}<level>|<timestamp>|<name>|<file>|<lineno>> <code>'."
            ),
            suggestions=[
                "Check that PS4 was set by the tracing hook",
                "Use lenient mode to skip lines written by the traced program",
            ],
            error_code="E101",
        )


class InvalidNumericFieldError(TraceSyntaxError):
    """Raised when a numeric field has the right characters but no value."""

    def __init__(self, field: str, value: str, location: Optional[ErrorLocation] = None):
        super().__init__(
            message=f"Invalid {field} '{value}'",
            location=location,
            explanation=f"The {field} field could not be converted to a number.",
            error_code="E102",
        )
        self.field = field
        self.value = value


# === Profile Build Errors (E2xx) ===

class ProfileBuildError(ZshProfError):
    """Base class for call-tree builder contract violations."""
    pass


class EmptyStackError(ProfileBuildError):
    """Raised when leaving a frame while no frame is open."""

    def __init__(self, frame_name: str, value: float):
        super().__init__(
            message=f"Cannot leave frame '{frame_name}' at {value}: stack is empty",
            error_code="E201",
        )
        self.frame_name = frame_name
        self.value = value


class FrameMismatchError(ProfileBuildError):
    """Raised when leaving a frame that is not on top of the stack."""

    def __init__(self, frame_name: str, top_name: str, value: float):
        super().__init__(
            message=(
                f"Tried to leave frame '{frame_name}' at {value} "
                f"while frame '{top_name}' was on top"
            ),
            explanation="Enter and leave calls must be strictly nested.",
            error_code="E202",
        )
        self.frame_name = frame_name
        self.top_name = top_name
        self.value = value


class UnbalancedStackError(ProfileBuildError):
    """Raised when a profile is built while frames are still open."""

    def __init__(self, open_frames: List[str]):
        super().__init__(
            message=f"Cannot build profile with {len(open_frames)} open frame(s): "
                    f"{', '.join(open_frames)}",
            error_code="E203",
        )
        self.open_frames = open_frames


class TimeReversalError(ProfileBuildError):
    """Raised when an event is replayed before the previous one."""

    def __init__(self, value: float, last_value: float):
        super().__init__(
            message=f"Event at {value} is earlier than previous event at {last_value}",
            explanation="Events must be replayed in non-decreasing time order.",
            error_code="E204",
        )
        self.value = value
        self.last_value = last_value


# === Configuration Errors (E3xx) ===

class ConfigError(ZshProfError):
    """Raised when import options are invalid."""

    def __init__(self, option: str, message: str):
        super().__init__(
            message=f"Invalid option '{option}': {message}",
            error_code="E300",
        )
        self.option = option


def format_error_for_user(error: Exception) -> str:
    """Format any exception for display on the command line."""
    if isinstance(error, ZshProfError):
        return error.format_full()
    return f"Error: {error}"
