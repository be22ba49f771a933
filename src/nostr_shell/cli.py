"""CLI entrypoint for nostr-shell.

Loads configuration and identity, connects to relays, then runs the shell.
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from . import __version__
from .commands import DEFAULT_FETCH_TIMEOUT, DEFAULT_PUBLISH_TIMEOUT, Session
from .errors import NostrShellError
from .identity import load_identity
from .nak import NakRelayClient
from .relay import DEFAULT_RELAYS
from .shell import make_line_reader, run_shell

DEFAULT_HISTORY_FILE = Path.home() / ".nostr_shell_history"

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entrypoint.

    CONTRACT:
      Inputs:
        - argv: list of command-line argument strings (or None to use sys.argv)

      Outputs:
        - exit_code: integer, 0 when the session ended normally, 1 on startup failure

      Invariants:
        - .env in the working directory is loaded before reading SECRET_KEY
        - Startup errors end the process before the shell loop starts
        - Per-command errors never change the exit code

      Algorithm:
        1. Parse CLI arguments
        2. Configure logging (WARNING, or DEBUG with --verbose)
        3. Load identity from SECRET_KEY, or generate ephemeral keys
        4. Connect to relays (keep reachable subset)
        5. Run the shell until exit, EOF or interrupt

      Error Handling:
        - NostrShellError during startup: "ERROR: {error_type}: {message}" to stderr, return 1
    """
    args = parse_arguments(argv if argv is not None else sys.argv[1:])
    configure_logging(args["verbose"])
    load_dotenv(find_dotenv(usecwd=True))

    try:
        identity, generated = load_identity()
        if generated:
            print("No secret key specified; generating new keys")
        else:
            print("Reading secret key from environment")
        print(f"Bech32 PubKey: {identity.npub}")

        client = NakRelayClient()
        relays = client.connect(args["relays"], timeout=args["timeout"])
        logger.debug("Connected relays: %s", relays)
    except NostrShellError as e:
        sys.stderr.write(f"ERROR: {type(e).__name__}: {str(e)}\n")
        return 1

    session = Session(
        identity=identity,
        client=client,
        fetch_timeout=args["timeout"],
        publish_timeout=args["publish_timeout"],
    )

    print("Nostr CLI client")
    run_shell(session, make_line_reader(args["history_file"]))
    return 0


def parse_arguments(argv: list[str]) -> dict:
    """Parse CLI arguments into structured dictionary.

    Outputs:
        - args: dictionary with keys relays, timeout, publish_timeout, history_file, verbose

    Invariants:
        - --relay may repeat; defaults to ws://localhost:5001 when absent
        - Timeouts must be positive integers
    """
    parser = argparse.ArgumentParser(prog="nostr-shell", description="Interactive Nostr command shell")

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--relay",
        dest="relays",
        action="append",
        default=[],
        help=f"Relay URL, may be repeated (default: {', '.join(DEFAULT_RELAYS)})",
    )
    parser.add_argument(
        "--timeout",
        dest="timeout",
        type=int,
        default=DEFAULT_FETCH_TIMEOUT,
        help=f"Timeout in seconds for relay queries (default: {DEFAULT_FETCH_TIMEOUT})",
    )
    parser.add_argument(
        "--publish-timeout",
        dest="publish_timeout",
        type=int,
        default=DEFAULT_PUBLISH_TIMEOUT,
        help=f"Timeout in seconds for publish and delete (default: {DEFAULT_PUBLISH_TIMEOUT})",
    )
    parser.add_argument(
        "--history-file",
        dest="history_file",
        default=str(DEFAULT_HISTORY_FILE),
        help=f"Command history file (default: {DEFAULT_HISTORY_FILE})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    parsed = parser.parse_args(argv)

    if parsed.timeout <= 0:
        parser.error("--timeout must be a positive integer")

    if parsed.publish_timeout <= 0:
        parser.error("--publish-timeout must be a positive integer")

    return {
        "relays": parsed.relays or list(DEFAULT_RELAYS),
        "timeout": parsed.timeout,
        "publish_timeout": parsed.publish_timeout,
        "history_file": Path(parsed.history_file).expanduser(),
        "verbose": parsed.verbose,
    }


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s: %(message)s",
    )


if __name__ == "__main__":
    sys.exit(main())
