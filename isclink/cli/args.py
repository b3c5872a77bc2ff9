# isclink/cli/args.py
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence


def parse_bool(v: str) -> bool:
    s = str(v).strip().lower()
    if s in ("1", "true", "on", "high"):
        return True
    if s in ("0", "false", "off", "low"):
        return False
    raise argparse.ArgumentTypeError(f"Invalid bool literal '{v}' (use 1/0, true/false)")


def parse_uint16(v: str) -> int:
    try:
        n = int(str(v), 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer '{v}'") from None
    if not 0 <= n <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"Value {n} outside 0..65535")
    return n


def unescape(v: str) -> str:
    """Decode backslash escapes (\\r, \\n, \\x02, ...) in a CLI argument."""
    return v.encode("latin-1", errors="backslashreplace").decode("unicode_escape")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="isclink")
    sub = parser.add_subparsers(dest="cmd", required=True)

    # ---------------- encode ----------------
    pe = sub.add_parser("encode", help="Print signal frames as hex.")
    esub = pe.add_subparsers(dest="kind", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--index", type=int, default=0, help="0-based index of the first value.")

    pd = esub.add_parser("digital", parents=[common])
    pd.add_argument("values", type=parse_bool, nargs="+")

    pa = esub.add_parser("analog", parents=[common])
    pa.add_argument("values", type=parse_uint16, nargs="+")

    ps = esub.add_parser("serial", parents=[common])
    ps.add_argument("values", type=unescape, nargs="+")

    esub.add_parser("clear", help="Clear-all-outputs control frame.")
    esub.add_parser("status", help="Retransmit-all-outputs control frame.")

    # ---------------- statuses ----------------
    sub.add_parser("statuses", help="List socket status codes.")

    # ---------------- connect ----------------
    pc = sub.add_parser("connect", help="Connect, print status changes and responses.")
    pc.add_argument("--config", type=Path, default=None, help="YAML communicator config.")
    pc.add_argument("--host", default=None)
    pc.add_argument("--port", type=int, default=None)
    pc.add_argument("--id", default=None)
    pc.add_argument("--debug-level", type=int, default=None, choices=range(0, 4))
    pc.add_argument("--retry-delay", type=float, default=None, dest="retry_delay_s")
    pc.add_argument(
        "--send",
        type=unescape,
        action="append",
        default=[],
        help="Command to send once connected (repeatable; escapes like \\r\\n allowed).",
    )
    pc.add_argument("--secs", type=float, default=None, help="Run for N seconds (default: until Ctrl-C).")
    pc.add_argument("--log-file", type=Path, default=None)
    pc.add_argument("-v", "--verbose", action="store_true")

    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
