# isclink/cli/main.py
from __future__ import annotations

from typing import Optional

from isclink.core.errors import IscLinkError

from isclink.cli.args import parse_args
from isclink.cli.commands import (
    cmd_encode,
    cmd_statuses,
    cmd_connect,
)


def main(argv: Optional[list[str]] = None) -> int:
    try:
        args = parse_args(argv)

        if args.cmd == "encode":
            return cmd_encode(args)
        if args.cmd == "statuses":
            return cmd_statuses()
        if args.cmd == "connect":
            return cmd_connect(args)

        return 2
    except IscLinkError as e:
        print(f"ERROR: {e.message}")
        if e.hint:
            print(f"Hint: {e.hint}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
