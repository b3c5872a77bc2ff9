# isclink/cli/commands.py
from __future__ import annotations

import argparse
import threading
import time
from typing import Callable, Optional

from isclink.app.config import CommunicatorConfig, load_config
from isclink.app.lifecycle import Lifecycle
from isclink.app.runner import build_communicator
from isclink.common.logging_config import configure_logging
from isclink.protocol import xsig
from isclink.protocol.text import replace_hex
from isclink.runtime.state import ConnectionStatusChange
from isclink.transport.status import SocketStatus, status_name

Printer = Callable[[str], None]


def format_frame(frame: bytes) -> str:
    return frame.hex(" ").upper()


# ---------------- encode ----------------

def cmd_encode(args: argparse.Namespace, *, out: Printer = print) -> int:
    kind = args.kind
    if kind == "clear":
        frame = xsig.clear_outputs()
    elif kind == "status":
        frame = xsig.send_status()
    elif kind == "digital":
        frame = xsig.encode_digitals(args.index, args.values)
    elif kind == "analog":
        frame = xsig.encode_analogs(args.index, args.values)
    elif kind == "serial":
        frame = xsig.encode_serials(args.index, args.values)
    else:
        return 2

    out(format_frame(frame))
    return 0


# ---------------- statuses ----------------

def cmd_statuses(*, out: Printer = print) -> int:
    for s in SocketStatus:
        out(f"{int(s):>3}  {status_name(s)}")
    return 0


# ---------------- connect ----------------

def resolve_config(args: argparse.Namespace) -> CommunicatorConfig:
    base = load_config(args.config) if args.config else CommunicatorConfig()
    return base.with_overrides(
        host=args.host,
        port=args.port,
        id=args.id,
        debug_level=args.debug_level,
        retry_delay_s=args.retry_delay_s,
    )


def cmd_connect(
    args: argparse.Namespace,
    *,
    out: Printer = print,
    stop: Optional[threading.Event] = None,
) -> int:
    configure_logging(verbose=args.verbose, log_file=args.log_file)
    cfg = resolve_config(args)

    lifecycle = Lifecycle()
    lifecycle.install_atexit()
    comm = lifecycle.register(build_communicator(cfg))

    def on_status(change: ConnectionStatusChange) -> None:
        out(f"STATUS {change.index} {change.status}")

    def on_connected(connected: bool) -> None:
        out(f"CONNECTED {connected}")
        if connected:
            for command in args.send:
                comm.send_command(command)

    def on_response(text: str) -> None:
        out(f"RX {replace_hex(text)}")

    comm.connection_status_change += on_status
    comm.connected_change += on_connected
    comm.response_received += on_response

    stop = stop or threading.Event()
    deadline = None if args.secs is None else time.monotonic() + args.secs
    try:
        comm.connect()
        while not stop.is_set():
            if deadline is not None and time.monotonic() >= deadline:
                break
            stop.wait(0.1)
    except KeyboardInterrupt:
        pass
    finally:
        lifecycle.shutdown()
    return 0
