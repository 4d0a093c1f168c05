"""
stackcalc - Main Entry Point
A stack-based calculator: integers, variables, + - = @
"""

import sys
import argparse
from typing import Iterable, Optional
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from lexing import Lexer, create_lexer, create_debug_lexer
from interpreter import StackMachine, create_interpreter, create_debug_interpreter
from error_handling import CalcError
from utilities import format_stack, format_bindings


VERSION = "0.1.0"
DEFAULT_PROMPT = "> "
HISTORY_FILE = "~/.stackcalc_history"

ON_ERROR_ABORT = "abort"
ON_ERROR_CONTINUE = "continue"

REPL_COMMANDS = [":help", ":stack", ":env", ":quit"]


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='stackcalc',
      description='stackcalc - a stack-based calculator with variables',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s                          # Interactive mode
  %(prog)s script.calc              # Run every line of a file
  %(prog)s - < script.calc          # Run lines from standard input
  %(prog)s --on-error continue      # Reject bad lines instead of exiting
  %(prog)s --debug                  # Trace tokens and stack contents

Language:
  5 3 -          push 5, push 3, subtract: leaves 2
  x 10 =         assign 10 to x
  x @            print (and pop) the top of the stack
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help="file of input lines to execute, '-' for standard input"
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode (the default without a script)'
  )

  parser.add_argument(
      '--on-error',
      choices=[ON_ERROR_ABORT, ON_ERROR_CONTINUE],
      default=ON_ERROR_ABORT,
      help='abort: end the session on the first error (default); '
           'continue: discard the failing line and keep going'
  )

  parser.add_argument(
      '--prompt',
      default=DEFAULT_PROMPT,
      help='Prompt shown before each interactive read (default: "%(default)s")'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Trace lexing and every interpreted token on stderr'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=f'stackcalc {VERSION}'
  )

  return parser


# ============================================================================
# LINE EXECUTION
# ============================================================================

def report_error(error: CalcError) -> None:
  """Print a diagnostic for a calculator error on stderr"""
  print(f"Error: {error}", file=sys.stderr)


def execute_line(line: str, lexer: Lexer, machine: StackMachine) -> None:
  """Lex one line and feed its tokens to the machine"""
  tokens = lexer.tokenize(line)
  machine.interpret_tokens(tokens)


def handle_line(line: str, lexer: Lexer, machine: StackMachine,
                on_error: str = ON_ERROR_ABORT) -> bool:
  """
  Execute one line under the given error policy

  Returns False if the line was rejected in continue mode. In abort mode an
  error ends the process with status 1, leaving the state as it was.
  """
  state = machine.snapshot() if on_error == ON_ERROR_CONTINUE else None
  try:
    execute_line(line, lexer, machine)
  except CalcError as e:
    report_error(e)
    if on_error == ON_ERROR_ABORT:
      sys.exit(1)
    machine.restore(state)
    return False
  return True


def run_lines(lines: Iterable[str], lexer: Lexer, machine: StackMachine,
              on_error: str = ON_ERROR_ABORT) -> int:
  """Run a sequence of lines; returns the number rejected"""
  rejected = 0
  for line in lines:
    if not handle_line(line, lexer, machine, on_error):
      rejected += 1
  return rejected


def run_script_file(script_path: str, on_error: str = ON_ERROR_ABORT, debug: bool = False) -> None:
  """Run every line of a file, or of stdin for '-', without prompts"""
  lexer = create_debug_lexer() if debug else create_lexer()
  machine = create_debug_interpreter() if debug else create_interpreter()

  try:
    if script_path == '-':
      run_lines(sys.stdin, lexer, machine, on_error)
    else:
      with open(script_path, 'r', encoding='utf-8') as f:
        run_lines(f, lexer, machine, on_error)

  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found", file=sys.stderr)
    print(f"  Hint: Check the file path and make sure the file exists", file=sys.stderr)
    sys.exit(1)
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'", file=sys.stderr)
    sys.exit(1)
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}", file=sys.stderr)
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding", file=sys.stderr)
    sys.exit(1)


# ============================================================================
# INTERACTIVE MODE
# ============================================================================

def setup_readline() -> None:
  """Setup readline with history and command completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet

  readline.set_history_length(1000)

  def completer(text, state):
    options = [cmd for cmd in REPL_COMMANDS if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.set_completer_delims(' \t\n')
  readline.parse_and_bind("tab: complete")

  def save_history():
    try:
      readline.write_history_file(history_file)
    except OSError:
      pass

  import atexit
  atexit.register(save_history)


def show_help() -> None:
  print("REPL Commands:")
  print("  :stack            - Show the stack, bottom first")
  print("  :env              - Show assigned variables")
  print("  :help             - Show this help")
  print("  :quit             - Exit (Ctrl-D works too)")
  print()
  print("Tokens:")
  print("  42                - Push a number")
  print("  x                 - Push a variable name")
  print("  +  -              - Pop two values, push the sum / difference")
  print("  =                 - x 10 = assigns 10 to x")
  print("  @                 - Pop and print the top value")


def handle_command(command: str, machine: StackMachine) -> bool:
  """Run a REPL command; returns False when the session should end"""
  command = command.strip()

  if command == ":quit":
    return False
  elif command == ":help":
    show_help()
  elif command == ":stack":
    for line in format_stack(machine.stack):
      print(line)
  elif command == ":env":
    for line in format_bindings(machine.variables):
      print(line)
  else:
    print(f"Unknown command '{command}', try :help")
  return True


def run_interactive_mode(prompt: str = DEFAULT_PROMPT, on_error: str = ON_ERROR_ABORT,
                         debug: bool = False) -> None:
  """Read-eval-print loop; state accumulates across lines"""
  if sys.stdin.isatty():
    print(f"stackcalc {VERSION} - Interactive Mode")
    print("Type ':help' for commands, Ctrl-D to quit")
    if debug:
      print("Debug mode enabled")
    print()
    setup_readline()

  lexer = create_debug_lexer() if debug else create_lexer()
  machine = create_debug_interpreter() if debug else create_interpreter()

  while True:
    try:
      line = input(prompt)
    except EOFError:
      print()
      break
    except KeyboardInterrupt:
      print()
      break

    if line.lstrip().startswith(':'):
      if not handle_command(line, machine):
        break
      continue

    handle_line(line, lexer, machine, on_error)


def main(argv: Optional[list] = None) -> None:
  """Main entry point for stackcalc"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  try:
    if args.script:
      run_script_file(args.script, on_error=args.on_error, debug=args.debug)
    else:
      run_interactive_mode(prompt=args.prompt, on_error=args.on_error, debug=args.debug)
  except Exception as e:
    print(f"Unexpected error: {e}", file=sys.stderr)
    if args.debug:
      import traceback
      traceback.print_exc()
    sys.exit(1)


if __name__ == "__main__":
  main()
