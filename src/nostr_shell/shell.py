"""Interactive read-eval-print loop."""

import logging
import sys
from collections.abc import Callable
from pathlib import Path

from .commands import Session, process_line

PROMPT = "$ "

logger = logging.getLogger(__name__)


def run_shell(session: Session, read_line: Callable[[str], str], write: Callable[[str], None] = print) -> int:
    """Read lines until exit, EOF or interrupt.

    CONTRACT:
      Inputs:
        - session: command context
        - read_line: prompt -> line; raises EOFError or KeyboardInterrupt to stop
        - write: receives one rendered block per command

      Outputs:
        - number of commands that failed

      Invariants:
        - Blank lines are skipped without output
        - One command runs at a time
        - Failed commands never stop the loop
        - An interrupt during a command abandons that command only
    """
    failures = 0
    while True:
        try:
            line = read_line(PROMPT)
        except (EOFError, KeyboardInterrupt):
            write("Exiting ...")
            return failures

        line = line.strip()
        if not line:
            continue

        try:
            outcome = process_line(line, session)
        except KeyboardInterrupt:
            write("Interrupted")
            failures += 1
            continue

        write(outcome.output)
        if outcome.failed:
            failures += 1
        if outcome.exit:
            return failures


def make_line_reader(history_file: Path | None) -> Callable[[str], str]:
    """Pick a line reader: prompt_toolkit with file history on a terminal, input() otherwise."""
    if not sys.stdin.isatty():
        return input

    from prompt_toolkit import PromptSession
    from prompt_toolkit.history import FileHistory, InMemoryHistory

    history = InMemoryHistory()
    if history_file is not None:
        try:
            history_file.parent.mkdir(parents=True, exist_ok=True)
            history = FileHistory(str(history_file))
        except OSError as e:
            logger.warning("History file %s unavailable, keeping history in memory: %s", history_file, e)

    prompt_session: PromptSession[str] = PromptSession(history=history)
    return prompt_session.prompt
