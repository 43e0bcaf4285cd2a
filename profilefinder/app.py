import argparse
import json
import sys
from pathlib import Path

from . import __version__
from .adapters import build_adapters
from .config import get_settings
from .database import get_session, init_database, last_resolved_at, load_resolution, save_resolution
from .engine import ResolutionEngine
from .errors import ResolutionTimeout
from .logger import configure_logger
from .profile import result_to_dict

EXIT_TIMEOUT = 3


def _print_json(data, stream=None) -> None:
    stream = stream or sys.stdout
    json.dump(data, stream, indent=2, ensure_ascii=False)
    stream.write("\n")


def cmd_resolve(args: argparse.Namespace) -> int:
    settings = get_settings()
    logger = configure_logger(settings)
    engine = ResolutionEngine.from_settings(settings)
    timeout = args.timeout if args.timeout is not None else settings.resolution_timeout_seconds

    try:
        result = engine.resolve(args.email, timeout=timeout)
    except ResolutionTimeout as e:
        print(f"Timed out; still pending: {', '.join(e.pending)}", file=sys.stderr)
        _print_json(result_to_dict(e.partial), sys.stderr)
        return EXIT_TIMEOUT
    finally:
        if args.metrics:
            logger.log_metrics_summary()

    if args.save:
        db_path = Path(args.db or settings.db_path)
        init_database(db_path)
        session = get_session(db_path)
        try:
            save_resolution(session, args.email, result)
        finally:
            session.close()

    _print_json(result_to_dict(result))
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    db_path = Path(args.db or get_settings().db_path)
    if not db_path.exists():
        print(f"Database not found: {db_path}", file=sys.stderr)
        return 1
    session = get_session(db_path)
    try:
        result = load_resolution(session, args.email)
        resolved_at = last_resolved_at(session, args.email)
    finally:
        session.close()
    if not result:
        print(f"No stored profiles for {args.email}", file=sys.stderr)
        return 1
    print(f"Resolved at {resolved_at:%Y-%m-%d %H:%M:%S}", file=sys.stderr)
    _print_json(result_to_dict(result))
    return 0


def cmd_adapters(args: argparse.Namespace) -> int:
    settings = get_settings()
    configure_logger(settings)
    for rank, adapter in enumerate(build_adapters(settings), start=1):
        state = "enabled" if adapter.enabled else f"disabled: {adapter.disabled_reason}"
        kind = "conglomerator" if adapter.conglomerator else "direct"
        print(f"{rank:>2}. {adapter.service_name:<12} {kind:<14} {state}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="profilefinder",
        description="Find public profiles for an email address",
    )
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    res = subparsers.add_parser("resolve", help="Look up an email address across all sources")
    res.add_argument("email", help="Email address to resolve")
    res.add_argument("--timeout", type=float, help="Overall deadline in seconds (default: RESOLUTION_TIMEOUT_SECONDS)")
    res.add_argument("--save", action="store_true", help="Store the result in the history database")
    res.add_argument("--db", help="Path to the history database (default: DB_PATH or data/profiles.db)")
    res.add_argument("--metrics", action="store_true", help="Log per-source lookup metrics when done")
    res.set_defaults(func=cmd_resolve)

    hist = subparsers.add_parser("history", help="Show the last stored resolution for an email address")
    hist.add_argument("email", help="Email address")
    hist.add_argument("--db", help="Path to the history database")
    hist.set_defaults(func=cmd_history)

    adp = subparsers.add_parser("adapters", help="List sources in confidence order and whether they are enabled")
    adp.set_defaults(func=cmd_adapters)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    if hasattr(args, "func"):
        return args.func(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
