"""
importer.py

Top-level zsh trace import.

    text -> parse_and_sort -> convert_to_evented_profile
         -> import_evented_profile -> ProfileGroup

import_from_zsh_trace never returns a partial profile: any failure is
logged and reported as None. The lower-level functions propagate errors.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from zshprof.config import DEFAULT_OPTIONS, ImportOptions
from zshprof.evented import EventedProfile, EventType
from zshprof.profile import CallTreeProfileBuilder, FrameInfo, Profile, ProfileBuilder, ProfileGroup
from zshprof.records import Frame
from zshprof.reconstruct import convert_to_evented_profile
from zshprof.tokenizer import parse_and_sort

logger = logging.getLogger(__name__)


def replay_events(
    evented: EventedProfile,
    frames: Sequence[Frame],
    builder: ProfileBuilder,
) -> ProfileBuilder:
    """
    Replay events into a builder in order, at times relative to the start.

    Args:
        evented: Evented profile to replay
        frames: Frame table the events refer to
        builder: Receives enter_frame/leave_frame calls

    Returns:
        The same builder, for chaining
    """
    frame_infos: List[FrameInfo] = [
        FrameInfo(key=i, name=frame.name, file=frame.file, line=frame.line)
        for i, frame in enumerate(frames)
    ]
    start_value = evented.start_value

    for event in evented.events:
        if event.type is EventType.OPEN_FRAME:
            builder.enter_frame(frame_infos[event.frame], event.at - start_value, event.executed_code)
        elif event.type is EventType.CLOSE_FRAME:
            builder.leave_frame(frame_infos[event.frame], event.at - start_value)

    return builder


def import_evented_profile(evented: EventedProfile, frames: Sequence[Frame]) -> Profile:
    """Materialize a call-tree Profile from an evented profile."""
    builder = CallTreeProfileBuilder(evented.duration, unit=evented.unit)
    replay_events(evented, frames, builder)
    profile = builder.build()
    profile.name = evented.name
    return profile


def import_from_zsh_trace(
    contents: str,
    file_name: str,
    options: Optional[ImportOptions] = None,
) -> Optional[ProfileGroup]:
    """
    Convert zsh xtrace text into a profile group.

    Args:
        contents: Full text of the trace log
        file_name: Display name for the group and its profile
        options: Import options, DEFAULT_OPTIONS when omitted

    Returns:
        ProfileGroup holding one profile, or None if the import failed
    """
    options = options or DEFAULT_OPTIONS
    try:
        records = parse_and_sort(contents, options)
        evented, frames = convert_to_evented_profile(records, options)
        profile = import_evented_profile(evented, frames)
        profile.name = file_name
    except Exception:
        logger.exception("Failed to parse zsh trace %r", file_name)
        return None

    logger.debug(
        "Imported %s: %d records, %d frames, %d events",
        file_name, len(records), len(frames), len(evented.events),
    )
    return ProfileGroup(name=file_name, profiles=(profile,), index_to_view=0)


def import_from_file(
    path: Union[str, Path],
    options: Optional[ImportOptions] = None,
) -> Optional[ProfileGroup]:
    """Read a trace log from disk and import it under its file name."""
    path = Path(path)
    contents = path.read_text(encoding="utf-8", errors="ignore")
    return import_from_zsh_trace(contents, path.name, options)
