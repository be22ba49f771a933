"""Unit tests for the interactive loop."""

from unittest.mock import patch

from stubs import StubRelayClient

from nostr_shell.commands import Session
from nostr_shell.shell import PROMPT, make_line_reader, run_shell


def scripted(lines):
    """Line reader that replays lines, then raises EOFError."""
    remaining = list(lines)
    prompts = []

    def read_line(prompt):
        prompts.append(prompt)
        if not remaining:
            raise EOFError
        item = remaining.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    read_line.prompts = prompts
    return read_line


class TestRunShell:
    def test_exit_stops_loop(self, session, client):
        output = []
        reader = scripted(["exit", "ls"])
        assert run_shell(session, reader, output.append) == 0
        assert output == ["Exiting ..."]
        assert client.call_count == 0

    def test_blank_lines_skipped(self, session):
        output = []
        run_shell(session, scripted(["", "   ", "exit"]), output.append)
        assert output == ["Exiting ..."]

    def test_error_does_not_stop_loop(self, session, client):
        output = []
        failures = run_shell(session, scripted(['puts "oops', "ls 0", "exit"]), output.append)
        assert failures == 1
        assert output[0].startswith("ERROR: QuotingError")
        assert "Found 0 events" in output[1]
        assert output[2] == "Exiting ..."

    def test_timeout_then_next_command(self, identity, timeout_client):
        output = []
        session = Session(identity, timeout_client)
        run_shell(session, scripted(["ls", "ls", "exit"]), output.append)
        assert output[0] == output[1]
        assert "RelayTimeoutError" in output[0]
        assert output[2] == "Exiting ..."

    def test_eof_exits_cleanly(self, session):
        output = []
        assert run_shell(session, scripted([]), output.append) == 0
        assert output == ["Exiting ..."]

    def test_interrupt_exits_cleanly(self, session, client):
        output = []
        run_shell(session, scripted([KeyboardInterrupt(), "ls"]), output.append)
        assert output == ["Exiting ..."]
        assert client.call_count == 0

    def test_interrupt_during_command_continues(self, identity):
        client = StubRelayClient(error=KeyboardInterrupt())
        output = []
        failures = run_shell(Session(identity, client), scripted(["ls", "exit"]), output.append)
        assert output == ["Interrupted", "Exiting ..."]
        assert failures == 1
        assert len(client.fetch_calls) == 1

    def test_prompt(self, session):
        reader = scripted(["exit"])
        run_shell(session, reader, lambda text: None)
        assert reader.prompts == [PROMPT]

    def test_commands_run_in_order(self, identity):
        client = StubRelayClient()
        output = []
        run_shell(Session(identity, client), scripted(["puts one", "puts two", "exit"]), output.append)
        assert [call[0].content for call in client.submit_calls] == ["one", "two"]


class TestMakeLineReader:
    def test_non_tty_uses_input(self, tmp_path):
        with patch("sys.stdin") as stdin:
            stdin.isatty.return_value = False
            assert make_line_reader(tmp_path / "history") is input

    def test_unusable_history_file_falls_back_to_memory(self, tmp_path, caplog):
        from prompt_toolkit.history import InMemoryHistory

        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        with patch("sys.stdin") as stdin, patch("prompt_toolkit.PromptSession") as prompt_session:
            stdin.isatty.return_value = True
            make_line_reader(blocker / "history")

        assert isinstance(prompt_session.call_args.kwargs["history"], InMemoryHistory)
        assert "History file" in caplog.text

    def test_history_file_used_when_writable(self, tmp_path):
        from prompt_toolkit.history import FileHistory

        history_file = tmp_path / "nested" / "history"
        with patch("sys.stdin") as stdin, patch("prompt_toolkit.PromptSession") as prompt_session:
            stdin.isatty.return_value = True
            make_line_reader(history_file)

        assert isinstance(prompt_session.call_args.kwargs["history"], FileHistory)
        assert history_file.parent.is_dir()
