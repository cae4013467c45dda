"""
demo.py

Minimal demo for zshprof.
- Uses a hardcoded zsh startup trace (what the ~/.zshenv hook writes)
- Converts it into a call-tree profile
- Prints the heaviest frames and writes a speedscope file to demo.json
"""

from pathlib import Path

from zshprof import convert_to_evented_profile, import_evented_profile, parse_and_sort
from zshprof.cli import format_summary


def main():
    # --- Hardcoded trace, as written with PS4='+Z|%e|%D{%s.%9.}|%N|%x|%I> ' ---
    trace = "\n".join([
        "+Z|1|1700000000.000000000|zsh|/home/u/.zshrc|1> source ~/.oh-my-zsh/oh-my-zsh.sh",
        "+Z|2|1700000000.004000000|/home/u/.oh-my-zsh/oh-my-zsh.sh|/home/u/.oh-my-zsh/oh-my-zsh.sh|12> autoload -U compinit",
        "+Z|2|1700000000.009000000|/home/u/.oh-my-zsh/oh-my-zsh.sh|/home/u/.oh-my-zsh/oh-my-zsh.sh|40> compinit -d ~/.zcompdump",
        "+Z|3|1700000000.011000000|compinit|/usr/share/zsh/functions/compinit|85> typeset -gHA _comps",
        "+Z|3|1700000000.061000000|compinit|/usr/share/zsh/functions/compinit|502> compdump",
        "+Z|1|1700000000.080000000|zsh|/home/u/.zshrc|3> source ~/.p10k.zsh",
    ])

    # --- Convert ---
    records = parse_and_sort(trace)
    evented, frames = convert_to_evented_profile(records)
    profile = import_evented_profile(evented, frames)

    # --- Result ---
    print(f"{len(records)} records, {len(frames)} frames, {len(evented.events)} events\n")
    print(format_summary(profile, 5))

    out = Path("demo.json")
    out.write_text(evented.to_json(frames, name="demo"), encoding="utf-8")
    print(f"\nProfile written to: {out}")
    print("Open it at https://www.speedscope.app")


if __name__ == "__main__":
    main()
