"""
tokenizer.py

Line tokenizer for zsh xtrace logs. Converts raw trace text to a
time-ordered list of TraceRecords.
No execution, no side effects, deterministic output.

Record grammar (one or more per physical line):

    +Z|<level>|<timestamp>|<name>|<file>|<lineno>> <code>

level and lineno are ASCII digits, timestamp is digits and dots, name and
file are any non-empty text without '|'. Exactly one whitespace character
follows '>'.

zsh writes xtrace output unbuffered while the traced program writes to the
same descriptor, so several records can end up glued onto one line. The
code of a record therefore runs lazily: at least one character, up to the
end of the line or up to the next marker that is followed by a character
other than '%'. The '%' exclusion keeps a literal PS4 assignment
(``PS4='+Z|%e|...'``) inside the code of the record that executes it.
"""

import logging
from operator import attrgetter
from typing import List, Optional, Tuple

from zshprof.config import DEFAULT_OPTIONS, DELIMITER, ImportOptions
from zshprof.errors import ErrorLocation, InvalidNumericFieldError, MalformedLineError
from zshprof.records import TraceRecord

logger = logging.getLogger(__name__)

DIGITS = frozenset("0123456789")
TIMESTAMP_CHARS = DIGITS | {"."}

# (level, timestamp, name, file, lineno) as raw text, with their columns
Header = Tuple[Tuple[str, ...], Tuple[int, ...]]


class LineScanner:
    """Finds trace records inside one trimmed physical line."""

    def __init__(self, text: str, marker: str = DEFAULT_OPTIONS.marker, line_number: int = 0):
        self.text = text
        self.marker = marker
        self.line_number = line_number
        self.pos = 0

    def segments(self) -> List[TraceRecord]:
        """Return every record found anywhere in the line, in line order.

        Text before the first marker and markers whose header does not
        parse are skipped, the same way a global regex search would skip
        them.
        """
        records = []
        search_from = 0
        while True:
            start = self.text.find(self.marker, search_from)
            if start < 0:
                break

            header = self._read_header(start + len(self.marker))
            # code needs at least one character
            if header is None or self.pos >= len(self.text):
                search_from = start + 1
                continue

            code_start = self.pos
            code_end = self._next_boundary(code_start + 1)
            records.append(self._build(header, self.text[code_start:code_end]))
            search_from = code_end

        return records

    def full_line(self) -> Optional[TraceRecord]:
        """Match the whole line as one record whose code is the remainder.

        The line must start with the marker; the code may be empty.
        """
        if not self.text.startswith(self.marker):
            return None
        header = self._read_header(len(self.marker))
        if header is None:
            return None
        return self._build(header, self.text[self.pos:])

    # --- Scanning helpers ---

    def _next_boundary(self, start: int) -> int:
        """Index of the next marker that begins a new record, or end of line."""
        after = len(self.marker)
        idx = self.text.find(self.marker, start)
        while idx >= 0:
            follow = idx + after
            if follow < len(self.text) and self.text[follow] != '%':
                return idx
            idx = self.text.find(self.marker, idx + 1)
        return len(self.text)

    def _read_header(self, pos: int) -> Optional[Header]:
        """Read the five header fields and the separator after '>'.

        On success self.pos points at the first character of the code.
        """
        self.pos = pos
        fields = []
        columns = []

        for allowed, terminator in (
            (DIGITS, DELIMITER),           # level
            (TIMESTAMP_CHARS, DELIMITER),  # timestamp
            (None, DELIMITER),             # name
            (None, DELIMITER),             # file
            (DIGITS, '>'),                 # lineno
        ):
            columns.append(self.pos + 1)
            value = self._read_field(allowed, terminator)
            if value is None:
                return None
            fields.append(value)

        if self.pos >= len(self.text) or not self.text[self.pos].isspace():
            return None
        self.pos += 1
        return tuple(fields), tuple(columns)

    def _read_field(self, allowed, terminator: str) -> Optional[str]:
        """Read a non-empty field up to its terminator and consume both."""
        start = self.pos
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == terminator and self.pos > start:
                value = self.text[start:self.pos]
                self.pos += 1
                return value
            if ch == DELIMITER:
                return None
            if allowed is not None and ch not in allowed:
                return None
            self.pos += 1
        return None

    def _build(self, header: Header, code: str) -> TraceRecord:
        (level, timestamp, name, file, lineno), columns = header
        return TraceRecord(
            level=int(level),
            timestamp=self._to_float(timestamp, columns[1]),
            name=name.strip(),
            file=file.strip(),
            lineno=int(lineno),
            code=code.strip(),
        )

    def _to_float(self, value: str, column: int) -> float:
        try:
            return float(value)
        except ValueError:
            raise InvalidNumericFieldError(
                "timestamp",
                value,
                ErrorLocation(line=self.line_number, column=column, source_line=self.text),
            ) from None


def tokenize_line(
    line: str,
    marker: str = DEFAULT_OPTIONS.marker,
    line_number: int = 0,
) -> List[TraceRecord]:
    """Extract the records of one physical line.

    Segment matching is tried first; if it finds nothing the line is matched
    as a single record. An empty list means the line is malformed.
    """
    scanner = LineScanner(line.strip(), marker, line_number)
    records = scanner.segments()
    if records:
        return records
    record = scanner.full_line()
    return [record] if record is not None else []


def parse_and_sort(contents: str, options: ImportOptions = DEFAULT_OPTIONS) -> List[TraceRecord]:
    """
    Parse trace text into records sorted by timestamp.

    Blank lines are ignored. Lines without a record are dropped, or raise
    MalformedLineError when options.strictness is STRICT. The sort is stable,
    so records with equal timestamps keep their order in the file.

    Args:
        contents: Full text of the trace file
        options: Import options

    Returns:
        List of TraceRecord, non-decreasing in timestamp

    Raises:
        MalformedLineError: Strict mode only
        InvalidNumericFieldError: A timestamp such as '1.2.3'
    """
    records: List[TraceRecord] = []
    dropped = 0

    for line_number, raw_line in enumerate(contents.split("\n"), 1):
        line = raw_line.strip()
        if not line:
            continue

        found = tokenize_line(line, options.marker, line_number)
        if not found:
            if options.strict:
                raise MalformedLineError(
                    ErrorLocation(line=line_number, source_line=line),
                    options.marker,
                )
            dropped += 1
            continue
        records.extend(found)

    if dropped:
        logger.debug("Dropped %d line(s) without a trace record", dropped)

    records.sort(key=attrgetter("timestamp"))
    return records
