# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""
claudeline entry point.

Reads one session document from stdin, prints one status line, exits.
Only stdin/stdout failures are fatal; missing credentials or a failed
usage fetch just drop the usage bars from this render.
"""

import argparse
import logging
import os
import sys
import tempfile
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Optional, Sequence, TextIO

from usage_quota import CredentialError, CredentialStore, Credentials, QuotaService

from . import __version__
from .config import BRANCH_MAX_LEN, Settings, load_settings
from .git_info import current_branch, current_tag
from .render import build_line, to_ansi
from .session import SessionParseError, parse_session

DEBUG_LOG_FILE = Path(tempfile.gettempdir()) / "claudeline-debug.log"
LOG_FORMAT = "claudeline: %(asctime)s %(message)s"
LOG_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


def build_version() -> str:
    """Installed distribution version, falling back to the package's own."""
    try:
        return version("claudeline")
    except PackageNotFoundError:
        return __version__


def configure_debug_log(
    enabled: bool, path: Optional[Path] = None
) -> logging.Logger:
    """
    Set up the diagnostic sink handed to every component.

    With debug off everything is discarded; with it on, warnings and
    errors (and debug detail) are appended to the debug log file.
    """
    sink = logging.getLogger("claudeline")
    for handler in list(sink.handlers):
        sink.removeHandler(handler)
        handler.close()
    sink.propagate = False

    if enabled:
        path = path or DEBUG_LOG_FILE
        try:
            handler = logging.FileHandler(path, mode="a", encoding="utf-8")
            os.chmod(path, 0o600)
        except OSError:
            sink.addHandler(logging.NullHandler())
            return sink
        handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        sink.addHandler(handler)
        sink.setLevel(logging.DEBUG)
    else:
        sink.addHandler(logging.NullHandler())
        sink.setLevel(logging.WARNING)
    return sink


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="claudeline",
        description="Status line with model, context and usage quota bars.",
    )
    parser.add_argument(
        "--version", action="store_true", help="print version and exit"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help=f"write diagnostics to {DEBUG_LOG_FILE}",
    )
    parser.add_argument(
        "--git-tag",
        dest="git_tag",
        action="store_true",
        default=None,
        help="show git tag in the status line",
    )
    parser.add_argument(
        "--git-tag-max-len",
        type=int,
        default=None,
        help="max display length for git tag (default: 30)",
    )
    return parser


def apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    if args.debug is not None:
        settings.debug = args.debug
    if args.git_tag is not None:
        settings.show_git_tag = args.git_tag
    if args.git_tag_max_len is not None:
        settings.git_tag_max_len = args.git_tag_max_len
    return settings


def resolve_credentials(
    store: CredentialStore, settings: Settings, logger: logging.Logger
) -> Credentials:
    try:
        return store.resolve(settings.profile)
    except CredentialError as e:
        logger.warning(f"credentials: {e}")
        return Credentials()


def render(
    settings: Settings,
    stdin: TextIO,
    store: CredentialStore,
    service: QuotaService,
    logger: logging.Logger,
    cwd: Optional[Path] = None,
) -> str:
    """Produce the ANSI status line for one session document."""
    session = parse_session(stdin.read())

    creds = resolve_credentials(store, settings, logger)
    plan = creds.plan_name

    snapshot = None
    if not creds.access_token:
        logger.warning("usage: no access token found")
    elif not plan:
        logger.warning(
            f"usage: unknown subscription type {creds.subscription_type!r}, "
            "expected pro/max/team"
        )
    else:
        snapshot = service.get_quota(creds.access_token, settings.profile)

    markup = build_line(
        model=session.model_name,
        plan=plan,
        context_pct=session.context_pct,
        warn_pct=settings.warn_pct,
        snapshot=snapshot,
        branch=current_branch(cwd),
        tag=current_tag(cwd) if settings.show_git_tag else "",
        branch_max_len=BRANCH_MAX_LEN,
        tag_max_len=settings.git_tag_max_len,
    )
    return to_ansi(markup)


def main(
    argv: Optional[Sequence[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    store: Optional[CredentialStore] = None,
    service: Optional[QuotaService] = None,
) -> int:
    args = build_parser().parse_args(argv)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    if args.version:
        try:
            print(build_version(), file=stdout)
        except OSError:
            return 1
        return 0

    logger = configure_debug_log(False)
    settings = apply_cli_overrides(load_settings(logger=logger), args)
    if settings.debug:
        logger = configure_debug_log(True)

    store = store or CredentialStore.default(logger=logger)
    service = service or QuotaService(logger=logger)

    try:
        line = render(settings, stdin, store, service, logger)
        print(line, file=stdout)
    except (SessionParseError, UnicodeDecodeError, OSError) as e:
        print(f"claudeline: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
