"""CLI entrypoints for display parsing, connection checks, diagnostics, and replay."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from pathlib import Path

from xsession_core import DiagnosticsExporter, build_doctor_payload, load_config, open_session
from xsession_core.logging_setup import configure_logging
from xsession_display import Connection, ReplayRunner, XSessionError, resolve_display, select_target


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _connection_summary(conn: Connection) -> dict[str, object]:
    setup = conn.setup
    return {
        "host": conn.host,
        "display_number": conn.display_number,
        "default_screen": conn.default_screen,
        "authenticated": conn.authenticated,
        "vendor": setup.vendor,
        "release_number": setup.release_number,
        "protocol": f"{setup.protocol_major}.{setup.protocol_minor}",
        "maximum_request_length": setup.maximum_request_length,
        "screens": [
            {
                "root": f"0x{screen.root:08x}",
                "width": screen.width_in_pixels,
                "height": screen.height_in_pixels,
                "root_depth": screen.root_depth,
            }
            for screen in setup.roots
        ],
    }


def cmd_parse(args: argparse.Namespace) -> int:
    try:
        spec = resolve_display(args.display)
    except XSessionError as exc:
        _print_json({"success": False, "error": str(exc)})
        return 2
    payload = asdict(spec)
    payload["target"] = select_target(spec).describe()
    payload["success"] = True
    _print_json(payload)
    return 0


def cmd_connect(args: argparse.Namespace) -> int:
    cfg = load_config()
    try:
        conn = open_session(
            cfg,
            display=args.display,
            cookie_hex=args.cookie,
            allow_fallback=(False if args.no_fallback else None),
            timeout_s=args.timeout,
        )
    except XSessionError as exc:
        _print_json({"success": False, "error": str(exc), "kind": type(exc).__name__})
        return 2

    with conn:
        payload = _connection_summary(conn)
    payload["success"] = True
    _print_json(payload)
    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    cfg = load_config()
    payload = build_doctor_payload(cfg)

    if args.export:
        exporter = DiagnosticsExporter()
        out_dir = Path(args.out_dir).expanduser().resolve() if args.out_dir else None
        bundle = exporter.bundle(cfg=cfg, doctor_payload=payload, output_dir=out_dir)
        payload["diagnostics_bundle"] = str(bundle)

    _print_json(payload)
    return 0


def cmd_replay(args: argparse.Namespace) -> int:
    runner = ReplayRunner()
    report = runner.run(Path(args.transcript), strict=not args.no_strict)
    payload = asdict(report)
    payload["success"] = len(report.errors) == 0
    _print_json(payload)
    return 0 if not report.errors else 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="xsession", description="X11 connection setup tools")
    sub = parser.add_subparsers(dest="command", required=True)

    parse_cmd = sub.add_parser("parse", help="Parse a display string and show the dial target")
    parse_cmd.add_argument("display", nargs="?", default="", help="Display string, defaults to $DISPLAY")
    parse_cmd.set_defaults(func=cmd_parse)

    connect_cmd = sub.add_parser("connect", help="Run the setup handshake and print the server summary")
    connect_cmd.add_argument("display", nargs="?", default="", help="Display string, defaults to $DISPLAY")
    connect_cmd.add_argument("--cookie", default=None, help="MIT-MAGIC-COOKIE-1 as hex, skips xauth lookup")
    connect_cmd.add_argument("--no-fallback", action="store_true", help="Fail instead of connecting without auth")
    connect_cmd.add_argument("--timeout", type=float, default=None, help="Socket timeout in seconds")
    connect_cmd.set_defaults(func=cmd_connect)

    doctor_cmd = sub.add_parser("doctor", help="Print diagnostics for the current display")
    doctor_cmd.add_argument("--export", action="store_true", help="Export offline diagnostics bundle")
    doctor_cmd.add_argument("--out-dir", default=None, help="Optional output directory for diagnostics bundle")
    doctor_cmd.set_defaults(func=cmd_doctor)

    replay_cmd = sub.add_parser("replay", help="Analyze a captured setup transcript")
    replay_cmd.add_argument("--transcript", required=True, help="Path to JSONL transcript")
    replay_cmd.add_argument("--no-strict", action="store_true", help="Skip mandatory hello/reply checks")
    replay_cmd.set_defaults(func=cmd_replay)

    return parser


def main(argv: list[str] | None = None) -> int:
    cfg = load_config()
    configure_logging(keep_files=cfg.diagnostics.keep_log_files, console=False)
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
