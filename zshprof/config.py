"""
config.py

Import options for zshprof.

All options are defaulted; ``DEFAULT_OPTIONS`` is what the importer uses
when the caller passes nothing.
"""

from dataclasses import dataclass
from enum import Enum

from zshprof.errors import ConfigError

# Prompt installed by the tracing hook in ~/.zshenv. %e is the evaluation
# depth, %D{%s.%9.} the epoch time with nanoseconds, %N the function or
# script name, %x the source file and %I the line number inside it.
PS4_FORMAT = "+Z|%e|%D{%s.%9.}|%N|%x|%I> "

DEFAULT_MARKER = "+Z|"
DELIMITER = "|"


class Strictness(Enum):
    """How the tokenizer treats lines that hold no trace record."""
    LENIENT = "lenient"  # drop silently
    STRICT = "strict"    # raise MalformedLineError


@dataclass(frozen=True)
class ImportOptions:
    """
    Options for a single trace import.

    Attributes:
        strictness: Policy for malformed lines
        marker: Prefix that starts every trace record, ending in '|'
        profile_name: Name stored on the evented profile
        unit: Unit of the timestamps
    """
    strictness: Strictness = Strictness.LENIENT
    marker: str = DEFAULT_MARKER
    profile_name: str = "Execution Profile"
    unit: str = "seconds"

    def __post_init__(self):
        if not isinstance(self.strictness, Strictness):
            raise ConfigError(
                "strictness",
                f"expected Strictness, got {type(self.strictness).__name__}",
            )
        if not isinstance(self.marker, str) or len(self.marker) < 2:
            raise ConfigError("marker", "must be a string of at least two characters")
        if not self.marker.endswith(DELIMITER):
            raise ConfigError("marker", f"must end with '{DELIMITER}'")
        if DELIMITER in self.marker[:-1]:
            raise ConfigError("marker", f"must contain '{DELIMITER}' only at the end")
        if not self.unit:
            raise ConfigError("unit", "cannot be empty")

    @property
    def strict(self) -> bool:
        return self.strictness is Strictness.STRICT


DEFAULT_OPTIONS = ImportOptions()
