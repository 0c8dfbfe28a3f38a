"""A tiny demo workload with a handful of commands."""

from __future__ import annotations

import sys
import time
from typing import Sequence

LYRICS = (
    "This is a song that never ends.\nYes, it goes on and on my friends.\nSome people "
    "started singing it not knowing what it was,\nSo they'll continue singing it "
    "forever just because...\n"
)


def main(argv: Sequence[str] | None = None) -> int:
    """Run a demo command; ``argv`` excludes the program name.

    Commands: ``echo WORDS...``, ``sleep SECONDS``, ``exit CODE``,
    ``write FILE WORDS...`` and ``daemon`` (the default), which never returns.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    cmd = args[0] if args else "daemon"

    if cmd == "echo":
        print(" ".join(args[1:]))
    elif cmd == "sleep":
        time.sleep(float(args[1]))
    elif cmd == "exit":
        return int(args[1])
    elif cmd == "write":
        with open(args[1], "w", encoding="utf-8") as handle:
            handle.write(" ".join(args[2:]))
    elif cmd == "daemon":
        while True:
            print(LYRICS, flush=True)
            time.sleep(1)
    else:
        print(f"unknown command: {cmd}", file=sys.stderr)
        return 1

    print("exiting", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())