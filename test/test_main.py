"""
Driver tests for stackcalc
Error policies, script mode and the interactive loop
"""

import io
import pytest
import main
from main import handle_line, run_lines, run_script_file, run_interactive_mode, handle_command
from lexing import Token, TokenKind


class TestErrorPolicy:

  def test_abort_exits_with_status_one(self, lexer, machine, capsys):
    with pytest.raises(SystemExit) as exc_info:
      handle_line("y @", lexer, machine)
    assert exc_info.value.code == 1
    assert "Undefined variable: y" in capsys.readouterr().err

  def test_abort_on_lexing_error(self, lexer, machine, capsys):
    with pytest.raises(SystemExit) as exc_info:
      handle_line("1 2 *", lexer, machine, on_error="abort")
    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert "unrecognized token '*'" in err
    assert "^ Error here" in err

  def test_abort_does_not_roll_back(self, lexer, machine):
    with pytest.raises(SystemExit):
      handle_line("1 2 + +", lexer, machine)
    assert machine.stack == ()

  def test_continue_rolls_back_the_line(self, lexer, machine, capsys):
    assert handle_line("1 2", lexer, machine, "continue")
    assert not handle_line("+ @ 5 x = y @", lexer, machine, "continue")
    assert machine.stack == (Token(TokenKind.NUMBER, 1), Token(TokenKind.NUMBER, 2))
    assert machine.variables == {}

    assert handle_line("+ @", lexer, machine, "continue")
    captured = capsys.readouterr()
    assert captured.out == "Top stack value: 3\nTop stack value: 3\n"
    assert "Undefined variable: y" in captured.err

  def test_continue_rejects_oversized_literal(self, lexer, machine, capsys):
    assert handle_line("5", lexer, machine, "continue")
    assert not handle_line("1" * 5000 + " +", lexer, machine, "continue")
    assert machine.stack == (Token(TokenKind.NUMBER, 5),)
    assert "out of range" in capsys.readouterr().err

  def test_abort_on_oversized_literal(self, lexer, machine):
    with pytest.raises(SystemExit) as exc_info:
      handle_line("9" * 5000, lexer, machine)
    assert exc_info.value.code == 1

  def test_run_lines_counts_rejected(self, lexer, machine, capsys):
    rejected = run_lines(["1 x =", "+", "Bad", "x @"], lexer, machine, "continue")
    assert rejected == 2
    assert capsys.readouterr().out == "Top stack value: 1\n"

  def test_empty_stack_print_never_aborts(self, lexer, machine, capsys):
    run_lines(["@", "@"], lexer, machine)
    assert capsys.readouterr().out == "Stack is empty.\nStack is empty.\n"


class TestScriptMode:

  def test_runs_every_line(self, tmp_path, capsys):
    script = tmp_path / "sum.calc"
    script.write_text("10 a =\n32 b =\n\na b + @\n", encoding="utf-8")
    run_script_file(str(script))
    assert capsys.readouterr().out == "Top stack value: 42\n"

  def test_error_stops_the_script(self, tmp_path, capsys):
    script = tmp_path / "bad.calc"
    script.write_text("1 @\nnope @\n2 @\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc_info:
      run_script_file(str(script))
    assert exc_info.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == "Top stack value: 1\n"
    assert "Undefined variable: nope" in captured.err

  def test_continue_mode_finishes_the_script(self, tmp_path, capsys):
    script = tmp_path / "bad.calc"
    script.write_text("1 @\nnope @\n2 @\n", encoding="utf-8")
    run_script_file(str(script), on_error="continue")
    assert capsys.readouterr().out == "Top stack value: 1\nTop stack value: 2\n"

  def test_missing_file(self, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
      run_script_file(str(tmp_path / "missing.calc"))
    assert exc_info.value.code == 1
    assert "not found" in capsys.readouterr().err

  def test_stdin_script(self, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("5 3 -\n@\n"))
    run_script_file("-")
    assert capsys.readouterr().out == "Top stack value: 2\n"


class TestInteractiveMode:

  def test_prompt_and_output(self, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("5 3 -\n@\n"))
    run_interactive_mode()
    out = capsys.readouterr().out
    assert out.startswith("> > Top stack value: 2\n")

  def test_custom_prompt(self, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("@\n"))
    run_interactive_mode(prompt="calc> ")
    assert capsys.readouterr().out.startswith("calc> Stack is empty.\n")

  def test_state_kept_between_lines(self, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("x 10 =\nx @\n"))
    run_interactive_mode(prompt="")
    assert "Top stack value: 10" in capsys.readouterr().out

  def test_quit_command(self, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(":quit\n1 @\n"))
    run_interactive_mode(prompt="")
    assert "Top stack value" not in capsys.readouterr().out

  def test_error_in_abort_mode(self, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("+\n"))
    with pytest.raises(SystemExit) as exc_info:
      run_interactive_mode()
    assert exc_info.value.code == 1

  def test_error_in_continue_mode(self, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("+\n4 @\n"))
    run_interactive_mode(prompt="", on_error="continue")
    captured = capsys.readouterr()
    assert "stack underflow" in captured.err
    assert "Top stack value: 4" in captured.out


class TestCommands:

  def test_stack_command(self, run, machine, capsys):
    run("1 x")
    assert handle_command(":stack", machine)
    assert capsys.readouterr().out == "  [0] 1\n  [1] x\n"

  def test_empty_stack_command(self, machine, capsys):
    handle_command(":stack", machine)
    assert "(empty stack)" in capsys.readouterr().out

  def test_env_command(self, run, machine, capsys):
    run("2 b =", "1 a =")
    handle_command(":env", machine)
    assert capsys.readouterr().out == "  a = 1\n  b = 2\n"

  def test_help_command(self, machine, capsys):
    assert handle_command(" :help ", machine)
    assert ":stack" in capsys.readouterr().out

  def test_unknown_command(self, machine, capsys):
    assert handle_command(":frobnicate", machine)
    assert "Unknown command" in capsys.readouterr().out

  def test_quit(self, machine):
    assert not handle_command(":quit", machine)


class TestCommandLine:

  def test_version(self, capsys):
    with pytest.raises(SystemExit) as exc_info:
      main.main(["--version"])
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.strip() == f"stackcalc {main.VERSION}"

  def test_bad_on_error_value(self):
    with pytest.raises(SystemExit) as exc_info:
      main.main(["--on-error", "retry"])
    assert exc_info.value.code == 2

  def test_script_argument(self, tmp_path, capsys):
    script = tmp_path / "prog.calc"
    script.write_text("2 2 + @\n", encoding="utf-8")
    main.main([str(script)])
    assert capsys.readouterr().out == "Top stack value: 4\n"

  def test_debug_flag(self, tmp_path, capsys):
    script = tmp_path / "prog.calc"
    script.write_text("2 2 +\n", encoding="utf-8")
    main.main(["--debug", str(script)])
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Interpreting: ADD" in captured.err

  def test_no_arguments_starts_repl(self, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("3 @\n"))
    main.main([])
    assert "Top stack value: 3" in capsys.readouterr().out
