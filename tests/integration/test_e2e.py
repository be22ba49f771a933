"""End-to-end integration tests for nostr-shell.

Publishes, fetches, lists and deletes events on a real relay through nak.

CONTRACT:
  Test Environment:
    - Relay reachable at ws://localhost:$NOSTR_SHELL_RELAY_PORT
    - nak on PATH
    - Fresh ephemeral keypair per test

  Test Properties:
    - puts returns an id that gets can read back
    - ls only returns the session's own events, newest relay order
    - rm publishes a deletion request
    - cp publishes file content as a long-form article
"""

import re

import pytest

from nostr_shell.commands import process_line

pytestmark = pytest.mark.integration

SENT_RE = re.compile(r"^Just sent event ID (note1\w+)$")


def publish(line, session):
    outcome = process_line(line, session)
    assert not outcome.failed, outcome.output
    match = SENT_RE.match(outcome.output)
    assert match, outcome.output
    return match.group(1)


def test_publish_then_fetch(live_session):
    note_id = publish('puts "hello from nostr-shell"', live_session)

    outcome = process_line(f"gets {note_id}", live_session)

    assert not outcome.failed, outcome.output
    assert f"Event ID: {note_id}" in outcome.output
    assert "Message: hello from nostr-shell" in outcome.output


def test_list_own_events(live_session):
    publish("puts first", live_session)
    publish("puts second", live_session)

    outcome = process_line("ls", live_session)

    assert "Found 2 events" in outcome.output
    assert "Message: first" in outcome.output
    assert "Message: second" in outcome.output


def test_list_zero(live_session):
    publish("puts ignored", live_session)
    outcome = process_line("ls 0", live_session)
    assert "Found 0 events" in outcome.output


def test_publish_article_from_file(live_session, tmp_path):
    post = tmp_path / "post.md"
    post.write_text("# Powered By Nostr\n\nLong form body.", encoding="utf-8")

    note_id = publish(f'cp {post} 30023 "Powered By Nostr" 2023-04-13T20:23:00-07:00', live_session)

    outcome = process_line(f"gets {note_id}", live_session)
    assert "Message: # Powered By Nostr" in outcome.output


def test_delete(live_session):
    note_id = publish("puts temporary", live_session)

    outcome = process_line(f"rm {note_id}", live_session)

    assert not outcome.failed, outcome.output
    assert outcome.output == f"Deleted event {note_id}"


def test_unknown_id_not_found(live_session):
    outcome = process_line("gets " + "0" * 64, live_session)
    assert outcome.output == "Event not found"
