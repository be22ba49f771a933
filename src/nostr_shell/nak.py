"""Relay client backed by the nak command-line tool.

nak signs, publishes and queries; this module builds its command lines,
runs it as a subprocess, and maps its output and failures onto nostr-shell
types and errors.
"""

import json
import logging
import os
import re
import shutil
import subprocess

from .errors import (
    NakInvocationError,
    RelayConnectionError,
    RelayRejectedError,
    RelayTimeoutError,
    TransportError,
)
from .identity import Identity
from .models import EventDraft, PublishResult, QueryFilter, RelayEvent
from .relay import normalize_relays, warn_insecure_relays
from .utils import single_line

DELETION_KIND = 5
PROBE_TIMEOUT = 5
# nak reads the signing key from here when --sec is absent
NAK_SECRET_ENV = "NOSTR_SECRET_KEY"

PUBLISH_STATUS_RE = re.compile(r"publishing to (?P<relay>\S+?)\.\.\.\s*(?P<status>success|failed:?\s*(?P<reason>.*?))\.?$")
REJECTION_KEYWORDS = ("rejected", "blocked", "restricted", "invalid:", "pow:")
TIMEOUT_KEYWORDS = ("timeout", "timed out", "deadline exceeded")
CONNECT_FAILURE_KEYWORDS = ("failed to connect", "connection refused", "no such host", "dial tcp")

logger = logging.getLogger(__name__)


class NakRelayClient:
    """RelayClient implementation that shells out to nak."""

    def __init__(self, relays: list[str] | None = None, nak_binary: str = "nak"):
        self.relays = list(relays or [])
        self.nak_binary = nak_binary

    def connect(self, relays: list[str], timeout: float = PROBE_TIMEOUT) -> list[str]:
        """Select the reachable subset of relays.

        CONTRACT:
          Inputs:
            - relays: relay URLs (ws:// or wss://), duplicates allowed
            - timeout: seconds to wait for each probe

          Outputs:
            - reachable: relays that answered a one-event REQ, in input order

          Invariants:
            - self.relays is replaced only when at least one relay answers
            - Unreachable relays are logged, not fatal, while one remains

          Raises:
            - InvalidRelayURLError: a URL is not ws:// or wss://
            - NakInvocationError: nak binary not found
            - RelayConnectionError: no relay given or none reachable
        """
        relays = normalize_relays(relays)
        if not relays:
            raise RelayConnectionError("No relays configured")

        if shutil.which(self.nak_binary) is None:
            raise NakInvocationError("nak binary not found in system PATH")

        reachable = []
        for relay in relays:
            try:
                _, stderr = run_nak([self.nak_binary, "req", "--limit", "1", relay], timeout)
            except TransportError as e:
                logger.warning("Relay %s unreachable: %s", relay, e)
                continue
            if unreachable_relays(stderr, [relay]):
                logger.warning("Relay %s unreachable: %s", relay, stderr.strip())
                continue
            reachable.append(relay)

        if not reachable:
            raise RelayConnectionError(f"Could not connect to any relay: {', '.join(relays)}")

        warn_insecure_relays(reachable)
        self.relays = reachable
        return reachable

    def fetch(self, query: QueryFilter, timeout: float) -> list[RelayEvent]:
        """Run a REQ with the filter against all relays and collect matching events."""
        if query.limit == 0:
            return []

        cmd = [self.nak_binary, "req", *filter_arguments(query), *self.relays]
        stdout, stderr = run_nak(cmd, timeout)
        events = parse_req_output(stdout)

        unreachable = unreachable_relays(stderr, self.relays)
        if unreachable and not events and len(unreachable) == len(self.relays):
            raise RelayConnectionError(f"Could not reach any relay: {single_line(stderr)}")
        if unreachable:
            logger.warning("Relay(s) unreachable: %s", ", ".join(unreachable))

        if query.limit is not None:
            events = events[: query.limit]
        return events

    def submit(self, draft: EventDraft, identity: Identity, timeout: float) -> str:
        """Sign the draft with the identity and publish it; returns the hex event id."""
        return self._publish(draft.to_dict(), identity, timeout).event_id

    def delete(self, event_id: str, reason: str, identity: Identity, timeout: float) -> str:
        """Publish a kind 5 deletion request for event_id; returns the deletion event id."""
        deletion = {"kind": DELETION_KIND, "content": reason, "tags": [["e", event_id]]}
        return self._publish(deletion, identity, timeout).event_id

    def _publish(self, event: dict, identity: Identity, timeout: float) -> PublishResult:
        cmd = [self.nak_binary, "event", *self.relays]
        # secret stays off argv
        env = {**os.environ, NAK_SECRET_ENV: identity.secret_key}
        stdout, stderr = run_nak(cmd, timeout, input_text=json.dumps(event), env=env)
        check_publish_status(stdout + "\n" + stderr)
        return parse_nak_output(stdout)


def filter_arguments(query: QueryFilter) -> list[str]:
    """Translate a QueryFilter into nak req flags."""
    args = []
    for event_id in query.ids:
        args.extend(["--id", event_id])
    for author in query.authors:
        args.extend(["--author", author])
    if query.limit is not None:
        args.extend(["--limit", str(query.limit)])
    if query.since is not None:
        args.extend(["--since", str(query.since)])
    return args


def run_nak(
    cmd: list[str], timeout: float, input_text: str | None = None, env: dict[str, str] | None = None
) -> tuple[str, str]:
    """Invoke nak and return (stdout, stderr).

    CONTRACT:
      Inputs:
        - cmd: full command line, nak binary first
        - timeout: seconds to wait for completion
        - input_text: optional text written to stdin
        - env: optional child environment (replaces the inherited one)

      Outputs:
        - (stdout, stderr) of a process that exited with code 0

      Invariants:
        - The process is killed and reaped on timeout, communication failure or interrupt
        - The environment is never logged

      Raises:
        - RelayTimeoutError: timeout expired, or nak reported a timeout
        - RelayRejectedError: nak exited non-zero with a relay rejection
        - NakInvocationError: nak missing, failed to start, or exited non-zero
    """
    logger.debug("Running %s", " ".join(cmd))

    try:
        process = subprocess.Popen(
            cmd, stdin=subprocess.PIPE, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, env=env
        )
    except FileNotFoundError:
        raise NakInvocationError("nak binary not found in system PATH") from None
    except OSError as e:
        raise NakInvocationError(f"Failed to start nak subprocess: {e}") from None

    try:
        stdout, stderr = process.communicate(input=input_text, timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()
        raise RelayTimeoutError(f"Relay request timed out after {timeout:g} seconds") from None
    except Exception as e:
        process.kill()
        process.wait()
        raise NakInvocationError(f"Failed to communicate with nak subprocess: {e}") from None
    except BaseException:
        process.kill()
        process.wait()
        raise

    stdout = stdout or ""
    stderr = stderr or ""

    if process.returncode != 0:
        message = stderr.strip() or f"nak exited with code {process.returncode}"
        lowered = message.lower()
        if any(keyword in lowered for keyword in TIMEOUT_KEYWORDS):
            raise RelayTimeoutError(message)
        if any(keyword in lowered for keyword in REJECTION_KEYWORDS):
            raise RelayRejectedError(message)
        raise NakInvocationError(message)

    return stdout, stderr


def unreachable_relays(stderr: str, relays: list[str]) -> list[str]:
    """Relays that nak reported as unreachable on stderr.

    Failure lines that name no relay count against every relay.
    """
    lines = [line.lower() for line in stderr.splitlines()]
    failures = [line for line in lines if any(keyword in line for keyword in CONNECT_FAILURE_KEYWORDS)]
    if not failures:
        return []
    named = [relay for relay in relays if any(relay.lower() in line for line in failures)]
    return named or list(relays)


def parse_req_output(stdout: str) -> list[RelayEvent]:
    """Parse one JSON event per line from nak req output, in relay order.

    Lines that are not JSON objects (status messages) are ignored.

    Raises:
        - NakInvocationError: a JSON line is malformed or lacks event fields
    """
    events = []
    for line in stdout.split("\n"):
        line = line.strip()
        if not (line.startswith("{") and line.endswith("}")):
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise NakInvocationError(f"Failed to parse nak output as JSON: {e}") from e
        try:
            events.append(RelayEvent.from_dict(data))
        except (KeyError, TypeError, ValueError) as e:
            raise NakInvocationError(f"Malformed event in nak output: {e}") from e
    return events


def check_publish_status(output: str) -> None:
    """Raise when nak reported publish status lines and every relay failed.

    Raises:
        - RelayRejectedError: all reported relays failed, with their reasons
    """
    failures = []
    successes = 0
    for line in output.splitlines():
        match = PUBLISH_STATUS_RE.search(line.strip())
        if match is None:
            continue
        if match.group("status") == "success":
            successes += 1
        else:
            reason = (match.group("reason") or "").strip() or "failed"
            failures.append(f"{match.group('relay')}: {reason}")

    if failures and successes == 0:
        raise RelayRejectedError("; ".join(failures))


def parse_nak_output(stdout: str) -> PublishResult:
    """Parse nak event stdout to extract publish result.

    nak outputs status messages plus the signed event JSON on its own line.

    Raises:
        - NakInvocationError: no JSON event line, invalid JSON, or missing id/pubkey
    """
    json_line = None
    for line in stdout.strip().split("\n"):
        line = line.strip()
        if line.startswith("{") and line.endswith("}"):
            json_line = line
            break

    if not json_line:
        raise NakInvocationError("No JSON event found in nak output")

    try:
        data = json.loads(json_line)
    except json.JSONDecodeError as e:
        raise NakInvocationError(f"Failed to parse nak output as JSON: {e}") from e

    if not isinstance(data, dict):
        raise NakInvocationError("Nak output is not a JSON object")

    event_id = data.get("id")
    if not event_id or not isinstance(event_id, str) or not event_id.strip():
        raise NakInvocationError("Nak output missing required field: id")

    pubkey = data.get("pubkey")
    if not pubkey or not isinstance(pubkey, str) or not pubkey.strip():
        raise NakInvocationError("Nak output missing required field: pubkey")

    return PublishResult(event_id=event_id, pubkey=pubkey)
