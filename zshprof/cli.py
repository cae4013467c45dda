"""
cli.py

Command-line converter from a zsh trace log to a speedscope JSON file.

    python -m zshprof ~/.zsh-trace/zsh.1700000000.4242.zsh-trace.log
    python -m zshprof trace.log -o startup.json --summary 15
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from zshprof.config import DEFAULT_MARKER, ImportOptions, Strictness
from zshprof.errors import format_error_for_user
from zshprof.importer import import_evented_profile
from zshprof.profile import Profile
from zshprof.reconstruct import convert_to_evented_profile
from zshprof.tokenizer import parse_and_sort

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zshprof",
        description="Convert a zsh xtrace log into a speedscope profile.",
    )
    parser.add_argument("trace", type=Path, help="Trace log written by the zshenv hook")
    parser.add_argument(
        "-o",
        "--out",
        type=Path,
        help="Output file (default: trace path with a .json extension)",
    )
    parser.add_argument(
        "--marker",
        default=DEFAULT_MARKER,
        help=f"Prefix that starts each trace record (default: {DEFAULT_MARKER!r})",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on lines that hold no trace record instead of skipping them",
    )
    parser.add_argument(
        "--summary",
        type=int,
        metavar="N",
        default=0,
        help="Print the N frames with the highest self time",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def format_summary(profile: Profile, limit: int) -> str:
    """Table of the heaviest frames by self time, in milliseconds."""
    lines = [f"{'self ms':>10} {'total ms':>10}  frame"]
    for frame in profile.top_frames(limit):
        location = f"{frame.info.file}:{frame.info.line}"
        lines.append(
            f"{frame.self_weight * 1e3:10.3f} {frame.total_weight * 1e3:10.3f}  "
            f"{frame.name} ({location})"
        )
    lines.append(f"total: {profile.total_weight * 1e3:.3f} ms")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    out = args.out or args.trace.with_suffix(".json")
    if out.resolve() == args.trace.resolve():
        print(f"Error: output {out} would overwrite the trace, pass -o", file=sys.stderr)
        return 1

    try:
        options = ImportOptions(
            strictness=Strictness.STRICT if args.strict else Strictness.LENIENT,
            marker=args.marker,
        )
        contents = args.trace.read_text(encoding="utf-8", errors="ignore")
        records = parse_and_sort(contents, options)
        evented, frames = convert_to_evented_profile(records, options)
        profile = import_evented_profile(evented, frames)
    except Exception as e:
        logger.debug("Conversion of %s failed", args.trace, exc_info=True)
        print(format_error_for_user(e), file=sys.stderr)
        return 1

    out.write_text(evented.to_json(frames, name=args.trace.name), encoding="utf-8")
    print(f"Profile written to: {out}")

    if args.summary > 0:
        print(format_summary(profile, args.summary))

    return 0


if __name__ == "__main__":
    sys.exit(main())
