"""
zshprof: zsh startup profiler
=============================

Converts the execution trace written by zsh's xtrace option into a
call-tree profile. The trace is produced by a hook in ~/.zshenv that sets
PS4 to ``PS4_FORMAT`` and redirects stderr to a log file until the first
prompt.

Pipeline
--------
::

    text -> parse_and_sort()               # TraceRecords, sorted by time
         -> convert_to_evented_profile()   # EventedProfile + frame table
         -> import_evented_profile()       # call-tree Profile

``import_from_zsh_trace`` runs all three and returns a ProfileGroup, or
None when the trace cannot be converted.

Example
-------
::

    from zshprof import import_from_zsh_trace

    group = import_from_zsh_trace(text, "zsh.1700000000.4242.zsh-trace.log")
    if group is not None:
        for frame in group.active_profile.top_frames(10):
            print(frame.name, frame.self_weight)
"""

__version__ = "0.1.0"

__all__ = [
    # --- Package Metadata ---
    "__version__",

    # --- Configuration ---
    "ImportOptions",
    "Strictness",
    "DEFAULT_OPTIONS",
    "PS4_FORMAT",

    # --- Records ---
    "TraceRecord",
    "Frame",
    "CallStackFrame",

    # --- Pipeline ---
    "LineScanner",
    "tokenize_line",
    "parse_and_sort",
    "reconstruct_events",
    "convert_to_evented_profile",
    "replay_events",
    "import_evented_profile",
    "import_from_zsh_trace",
    "import_from_file",

    # --- Evented Profile ---
    "EventType",
    "ProfileType",
    "FrameEvent",
    "EventedProfile",

    # --- Call-tree Profile ---
    "FrameInfo",
    "ProfileFrame",
    "CallTreeNode",
    "Profile",
    "ProfileGroup",
    "ProfileBuilder",
    "CallTreeProfileBuilder",

    # --- Exceptions ---
    "ErrorLocation",
    "ZshProfError",
    "TraceSyntaxError",
    "MalformedLineError",
    "InvalidNumericFieldError",
    "ProfileBuildError",
    "EmptyStackError",
    "FrameMismatchError",
    "UnbalancedStackError",
    "TimeReversalError",
    "ConfigError",
]

from zshprof.config import DEFAULT_OPTIONS, PS4_FORMAT, ImportOptions, Strictness
from zshprof.errors import (
    ConfigError,
    EmptyStackError,
    ErrorLocation,
    FrameMismatchError,
    InvalidNumericFieldError,
    MalformedLineError,
    ProfileBuildError,
    TimeReversalError,
    TraceSyntaxError,
    UnbalancedStackError,
    ZshProfError,
)
from zshprof.evented import EventedProfile, EventType, FrameEvent, ProfileType
from zshprof.importer import (
    import_evented_profile,
    import_from_file,
    import_from_zsh_trace,
    replay_events,
)
from zshprof.profile import (
    CallTreeNode,
    CallTreeProfileBuilder,
    FrameInfo,
    Profile,
    ProfileBuilder,
    ProfileFrame,
    ProfileGroup,
)
from zshprof.records import CallStackFrame, Frame, TraceRecord
from zshprof.reconstruct import convert_to_evented_profile, reconstruct_events
from zshprof.tokenizer import LineScanner, parse_and_sort, tokenize_line
