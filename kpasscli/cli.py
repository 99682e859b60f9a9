"""Command-line interface for kpasscli.

Looks up a single item in a KeePass database and prints one of its fields
(or copies it to the clipboard). The item may be given as:
  /Root/group/entry   absolute path
  group/entry         partial path, matched at any depth
  entry               bare name, matched anywhere

Exit codes:
    0 - Success
    1 - Lookup failed (no items, multiple items, unknown field, ...)
    2 - Database open failed
    3 - Invalid arguments or configuration
"""

import argparse
import logging
import os
import sys

from kpasscli.config import Config
from kpasscli.exceptions import (
    ConfigError,
    FieldNotFoundError,
    KpassError,
    SearchError,
)
from kpasscli.fields import format_entry_details, get_field_value
from kpasscli.otp import generate_totp
from kpasscli.output import (
    Handler,
    clear_clipboard_after,
    resolve_output_type,
)
from kpasscli.reader import (
    PASSWORD_ENV,
    open_database,
    resolve_database_path,
    resolve_password,
)
from kpasscli.search import Finder, SearchOptions, SearchResult


def _error(message) -> None:
    print(f"error: {message}", file=sys.stderr)


def _configure_logging(args) -> None:
    if args.debug:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _open_db(db_path: str, password: str):
    """Open a KDBX database, exiting with code 2 on failure."""
    try:
        return open_database(db_path, password=password)
    except KpassError as exc:
        _error(exc)
        sys.exit(2)


def _lookup_value(result: SearchResult, args) -> str:
    """Return the value to output for the single resolved *result*."""
    if args.totp or args.password_totp:
        try:
            otp_url = get_field_value(result, "otp")
        except FieldNotFoundError:
            otp_url = None
        token = generate_totp(otp_url)
        if args.totp:
            return token
        return get_field_value(result, "Password") + token
    return get_field_value(result, args.field_name)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def cmd_clear_clipboard(args) -> int:
    """Handle --clear-clipboard-after (run by the detached helper process)."""
    try:
        clear_clipboard_after(args.clear_clipboard_after)
    except KpassError as exc:
        _error(exc)
        return 1
    return 0


def cmd_create_config(args) -> int:
    """Handle --create-config."""
    try:
        path = Config.create_example("config.yaml")
    except ConfigError as exc:
        _error(exc)
        return 3
    print(f"Example config file '{path}' created successfully.")
    return 0


def cmd_lookup(args, config: Config) -> int:
    """Resolve the requested item and output one of its fields."""
    try:
        db_path = resolve_database_path(args.kdb_path, config)
        password = resolve_password(
            args.kdb_password, config, os.environ.get(PASSWORD_ENV)
        )
    except ConfigError as exc:
        _error(exc)
        return 3

    kp = _open_db(db_path, password)

    finder = Finder(
        kp.root_group,
        SearchOptions(
            case_sensitive=args.case_sensitive,
            exact_match=args.exact_match,
        ),
    )
    try:
        results = finder.find(args.item)
    except SearchError as exc:
        _error(exc)
        return 1

    if not results:
        _error("no items found")
        return 1
    if len(results) > 1:
        for result in results:
            print(f"- {result.path}", file=sys.stderr)
        _error("multiple items found")
        return 1

    result = results[0]
    try:
        if args.show_all:
            print(format_entry_details(result))
            return 0

        value = _lookup_value(result, args)
        output_type = resolve_output_type(args.out, args.clipboard, config)
        Handler(output_type, config.clipboard_timeout).output(value)
    except KpassError as exc:
        _error(exc)
        return 1
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="kpasscli",
        description="Look up entries and fields in a KeePass database",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__import__('kpasscli').__version__}",
    )
    parser.add_argument(
        "item",
        nargs="?",
        help="Item to look up: /absolute/path, partial/path or name",
    )

    db = parser.add_argument_group("database")
    db.add_argument(
        "-p",
        "--kdb-path",
        default=None,
        help="Path to the .kdbx database (default: KPASSCLI_KDBPATH or config)",
    )
    db.add_argument(
        "-w",
        "--kdb-password",
        default=None,
        help=f"Master password (default: {PASSWORD_ENV}, password file/executable or prompt)",
    )

    search = parser.add_argument_group("search")
    search.add_argument(
        "-C",
        "--case-sensitive",
        action="store_true",
        help="Match titles case-sensitively",
    )
    search.add_argument(
        "-e",
        "--exact-match",
        action="store_true",
        help="Require titles to equal the query instead of containing it",
    )

    out = parser.add_argument_group("output")
    out.add_argument(
        "-f",
        "--field-name",
        default="Password",
        help="Field to output (default: Password)",
    )
    out.add_argument(
        "-o",
        "--out",
        default=None,
        help="Output target: stdout or clipboard (default: KPASSCLI_OUT or config)",
    )
    out.add_argument(
        "-c",
        "--clipboard",
        action="store_true",
        help="Shortcut for --out clipboard",
    )
    out.add_argument(
        "-a",
        "--show-all",
        action="store_true",
        help="Show all entry details except the password",
    )
    otp = out.add_mutually_exclusive_group()
    otp.add_argument(
        "-t",
        "--totp",
        action="store_true",
        help="Output the current TOTP token of the entry",
    )
    otp.add_argument(
        "--password-totp",
        action="store_true",
        help="Output the password immediately followed by the TOTP token",
    )

    cfg = parser.add_argument_group("configuration")
    cfg.add_argument(
        "--config",
        default=None,
        help="Path to the config file (default: KPASSCLI_CONFIG or ~/.config/kpasscli/config.yaml)",
    )
    cfg.add_argument(
        "--create-config",
        action="store_true",
        help="Write an example config.yaml to the current directory",
    )
    cfg.add_argument(
        "--print-config",
        action="store_true",
        help="Print the effective configuration and exit",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-d", "--debug", action="store_true", help="Enable debug logging"
    )
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", help="Only log errors"
    )

    parser.add_argument(
        "--clear-clipboard-after",
        type=int,
        default=None,
        metavar="SECONDS",
        help=argparse.SUPPRESS,
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    if args.clear_clipboard_after is not None:
        return cmd_clear_clipboard(args)
    if args.create_config:
        return cmd_create_config(args)

    try:
        config = Config.load(args.config)
    except ConfigError as exc:
        _error(exc)
        return 3

    if args.print_config:
        print(config.describe())
        return 0

    if not args.item:
        _error("item parameter is required")
        return 3

    return cmd_lookup(args, config)


if __name__ == "__main__":
    sys.exit(main())
