"""Command-line parsing for shell input.

Turns one line of text into a typed Command. Pure: no I/O, no state.
"""

import argparse
import shlex

from .errors import BadArgumentError, EmptyCommandError, ParseError, QuotingError, UnknownCommandError
from .models import DEFAULT_LIST_LIMIT, Command, Delete, EventKind, Exit, FetchById, ListRecent, Publish, PublishFromFile

COMMANDS = ("gets", "ls", "puts", "cp", "rm", "exit")

# Commands without options: every token is positional, even one starting with "-"
POSITIONAL_ONLY = ("puts", "cp")


class CommandArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises ParseError instead of exiting the process."""

    def error(self, message: str):
        usage = self.format_usage().strip().removeprefix("usage: ")
        raise ParseError(f"{message} (usage: {usage})")

    def exit(self, status: int = 0, message: str | None = None):
        raise ParseError(message.strip() if message else f"{self.prog}: invalid arguments")


def parse_command(line: str) -> Command:
    """Parse one input line into a Command.

    CONTRACT:
      Inputs:
        - line: raw text typed at the prompt

      Outputs:
        - command: exactly one Command variant

      Invariants:
        - Tokens are split shell-style (quotes group words)
        - First token must be in COMMANDS (case-sensitive)
        - Omitted optional arguments take their declared defaults
        - Empty optional string arguments ("") count as omitted

      Properties:
        - Pure: same line always yields same command or same error

      Raises:
        - QuotingError: unbalanced quotes
        - EmptyCommandError: no tokens
        - UnknownCommandError: first token not in COMMANDS
        - BadArgumentError: typed argument not convertible
        - ParseError: missing or unexpected arguments
    """
    tokens = split_line(line)
    if not tokens:
        raise EmptyCommandError("No command given")

    name, args = tokens[0], tokens[1:]
    if name not in COMMANDS:
        raise UnknownCommandError(f"Unknown command: {name!r} (available: {', '.join(COMMANDS)})")

    if name in POSITIONAL_ONLY:
        args = ["--", *args]

    parsed = PARSERS[name].parse_args(args)
    return BUILDERS[name](parsed)


def split_line(line: str) -> list[str]:
    """Split a line into shell-style tokens."""
    try:
        return shlex.split(line)
    except ValueError as e:
        raise QuotingError(f"Invalid quoting: {e}") from None


def parse_int(field: str, value: str | None, default: int) -> int:
    """Convert an optional integer argument, naming the field on failure."""
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise BadArgumentError(field, value, "expected an integer") from None


def optional(value: str | None) -> str | None:
    return value if value else None


def _build_gets(args: argparse.Namespace) -> FetchById:
    return FetchById(id=args.id)


def _build_ls(args: argparse.Namespace) -> ListRecent:
    limit = parse_int("limit", args.limit, DEFAULT_LIST_LIMIT)
    if limit < 0:
        raise BadArgumentError("limit", args.limit, "must not be negative")
    return ListRecent(limit=limit, since=optional(args.since))


def _build_puts(args: argparse.Namespace) -> Publish:
    return Publish(
        message=args.message,
        kind=parse_int("kind", args.kind, EventKind.NOTE),
        title=optional(args.title),
        publish_date=optional(args.publish_date),
        image_url=optional(args.image_url),
    )


def _build_cp(args: argparse.Namespace) -> PublishFromFile:
    return PublishFromFile(
        path=args.path,
        kind=parse_int("kind", args.kind, EventKind.NOTE),
        title=optional(args.title),
        publish_date=optional(args.publish_date),
        image_url=optional(args.image_url),
    )


def _build_rm(args: argparse.Namespace) -> Delete:
    return Delete(id=args.id)


def _build_exit(args: argparse.Namespace) -> Exit:
    return Exit()


def _add_publish_arguments(parser: CommandArgumentParser) -> None:
    parser.add_argument("kind", nargs="?", default=None, help="event kind: 1 (note) or 30023 (article)")
    parser.add_argument("title", nargs="?", default=None)
    parser.add_argument("publish_date", nargs="?", default=None, help="RFC 3339, e.g. 2023-04-13T20:23:00-07:00")
    parser.add_argument("image_url", nargs="?", default=None)


def _build_parsers() -> dict[str, CommandArgumentParser]:
    parsers = {name: CommandArgumentParser(prog=name, add_help=False, allow_abbrev=False) for name in COMMANDS}

    parsers["gets"].add_argument("id", help="event id (note1..., nevent1... or hex)")

    parsers["ls"].add_argument("limit", nargs="?", default=None)
    parsers["ls"].add_argument("--since", default=None, help="only events after this RFC 3339 date-time")

    parsers["puts"].add_argument("message")
    _add_publish_arguments(parsers["puts"])

    parsers["cp"].add_argument("path")
    _add_publish_arguments(parsers["cp"])

    parsers["rm"].add_argument("id", help="event id (note1..., nevent1... or hex)")

    return parsers


PARSERS = _build_parsers()

BUILDERS = {
    "gets": _build_gets,
    "ls": _build_ls,
    "puts": _build_puts,
    "cp": _build_cp,
    "rm": _build_rm,
    "exit": _build_exit,
}
