"""
reconstruct.py

Stack reconstructor. Turns time-ordered TraceRecords into an evented
profile by simulating the call stack from the per-line evaluation depth.

xtrace output has no explicit return markers. A record at depth D closes
every open invocation at depth >= D: deeper ones have returned, and one at
exactly D is a sibling that has finished. Whatever is still open at the end
of the input is closed at the time of the last emitted event.
"""

from typing import Dict, Iterable, List, Tuple

from zshprof.config import DEFAULT_OPTIONS, ImportOptions
from zshprof.evented import EventedProfile, FrameEvent
from zshprof.records import CallStackFrame, Frame, TraceRecord


class FrameTable:
    """First-seen table of frames keyed by name and line number."""

    def __init__(self):
        self.frames: List[Frame] = []
        self._index: Dict[str, int] = {}

    def resolve(self, record: TraceRecord) -> int:
        """Return the index for the record's frame, creating it if new."""
        key = record.frame_key
        index = self._index.get(key)
        if index is None:
            index = len(self.frames)
            self._index[key] = index
            self.frames.append(Frame.from_record(record))
        return index

    def __len__(self) -> int:
        return len(self.frames)


def reconstruct_events(records: Iterable[TraceRecord]) -> Tuple[List[Frame], List[FrameEvent]]:
    """
    Replay records through a simulated call stack.

    Args:
        records: TraceRecords sorted by timestamp

    Returns:
        (frame table in first-seen order, events in emission order)
    """
    table = FrameTable()
    events: List[FrameEvent] = []
    call_stack: List[CallStackFrame] = []

    for record in records:
        frame_id = table.resolve(record)

        while call_stack and call_stack[-1].level >= record.level:
            finished = call_stack.pop()
            events.append(FrameEvent.close(record.timestamp, finished.frame_id))

        events.append(FrameEvent.open(record.timestamp, frame_id, record.code))
        call_stack.append(CallStackFrame(frame_id, record.level, record.timestamp))

    if call_stack:
        final_timestamp = events[-1].at
        while call_stack:
            finished = call_stack.pop()
            events.append(FrameEvent.close(final_timestamp, finished.frame_id))

    return table.frames, events


def convert_to_evented_profile(
    records: Iterable[TraceRecord],
    options: ImportOptions = DEFAULT_OPTIONS,
) -> Tuple[EventedProfile, List[Frame]]:
    """Build the evented profile and its frame table from sorted records."""
    frames, events = reconstruct_events(records)

    start_value = events[0].at if events else 0
    end_value = events[-1].at if events else 0

    profile = EventedProfile(
        name=options.profile_name,
        unit=options.unit,
        start_value=start_value,
        end_value=end_value,
        events=tuple(events),
    )
    return profile, frames
