import builtins
import json
from typing import Iterator

import pytest

from pragmash import pragmash_repl
from pragmash.pragmash_repl import needs_more_input, print_traceback, start_repl


def feed(monkeypatch: pytest.MonkeyPatch, *lines: str) -> list[str]:
    """Feed `lines` to input() and record the prompts shown."""
    prompts: list[str] = []
    it: Iterator[str] = iter(lines)

    def fake_input(prompt: str) -> str:
        prompts.append(prompt)
        return next(it)

    monkeypatch.setattr(builtins, "input", fake_input)
    return prompts


def test_repl_quit(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, "quit")
    start_repl()
    assert "pragmash REPL" in capsys.readouterr().out


def test_repl_exit_and_empty_input(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, "", "   ", "exit")
    start_repl()
    assert prompts == ["pragmash> "] * 3


def test_repl_prints_command(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, "echo (add 1 2)", "quit")
    start_repl()
    assert "command echo (add 1 2)" in capsys.readouterr().out


def test_repl_buffers_open_body(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, "for x }", "echo x", "}", "quit")
    start_repl()
    out = capsys.readouterr().out
    assert prompts == ["pragmash> ", "...> ", "...> ", "pragmash> "]
    assert "for x\n  command echo x" in out


def test_repl_buffers_line_continuation(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, "echo a \\", "b", "quit")
    start_repl()
    assert prompts[1] == "...> "
    assert "command echo a b" in capsys.readouterr().out


def test_repl_two_blank_lines_abandon_open_body(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, "for x }", "", "", "quit")
    start_repl()
    out = capsys.readouterr().out
    assert "[error] >>> Error at line 1: Missing }." in out
    assert prompts[-1] == "pragmash> "


def test_repl_reports_syntax_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, "while a", "echo ok", "quit")
    start_repl()
    out = capsys.readouterr().out
    assert "[error] >>> Error at line 1: Missing { in while-loop." in out
    assert "command echo ok" in out


def test_repl_verbose_mode_toggle(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, "verbose-mode", "echo hi", "verbose-mode", "quit")
    start_repl()
    out = capsys.readouterr().out
    assert "[mode] >>> Verbose mode ON" in out
    assert "[mode] >>> Verbose mode OFF" in out
    assert '"kind": "command"' in out


def test_repl_json_format(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, "echo hi", "quit")
    start_repl(fmt="json")
    out = capsys.readouterr().out
    payload = out[out.index("[") :]
    assert json.loads(payload)[0]["command"]["name"] == {"text": "echo"}


def test_repl_keyboard_interrupt(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(
        builtins, "input", lambda _: (_ for _ in ()).throw(KeyboardInterrupt())
    )
    start_repl()
    assert "Exiting pragmash REPL." in capsys.readouterr().out


def test_repl_unexpected_error_prints_traceback(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def boom(src: str) -> None:
        raise RuntimeError("boom")

    monkeypatch.setattr(pragmash_repl, "parse_program", boom)
    feed(monkeypatch, "echo", "quit")
    start_repl()
    out = capsys.readouterr().out
    assert "[error] >>>" in out
    assert "RuntimeError: boom" in out


def test_needs_more_input() -> None:
    assert needs_more_input("for x }", SyntaxError("Error at line 1: Missing }."))
    assert not needs_more_input("for x }\n\n", SyntaxError("Error at line 1: Missing }."))
    assert needs_more_input("a \\", SyntaxError("Unexpected end of script after \\ on line 1."))
    assert not needs_more_input("a", SyntaxError("Error at line 1: Missing )."))


def test_print_traceback_outputs_error(capsys: pytest.CaptureFixture[str]) -> None:
    try:
        raise ValueError("bad")
    except ValueError:
        print_traceback()
    out = capsys.readouterr().out
    assert "[error] >>>" in out
    assert "ValueError: bad" in out
