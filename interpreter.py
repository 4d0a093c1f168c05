"""
stackcalc Interpreter
A stack machine whose whole state is the operand stack and the variable table
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple
import sys

from lexing import Token, TokenKind
from error_handling import CalcSyntaxError, UndefinedVariableError
from utilities import render_tokens
from stdlib import (
  BINARY_OPERATORS,
  STACK_EMPTY_MESSAGE,
  calc_show_top,
)


# (stack, variables) pair as captured by StackMachine.snapshot
MachineState = Tuple[List[Token], Dict[str, int]]


class StackMachine:
  """Applies tokens one at a time to a LIFO stack of operands and a name table"""

  def __init__(self, debug: bool = False, output: Callable[[str], None] = print):
    self._stack: List[Token] = []
    self._names: Dict[str, int] = {}
    self.debug = debug
    self.output = output

  # ==========================================================================
  # STATE
  # ==========================================================================

  @property
  def stack(self) -> Tuple[Token, ...]:
    """Stack contents, bottom first"""
    return tuple(self._stack)

  @property
  def variables(self) -> Dict[str, int]:
    return dict(self._names)

  def snapshot(self) -> MachineState:
    """Copy of the current state; tokens are immutable so a shallow copy is enough"""
    return list(self._stack), dict(self._names)

  def restore(self, state: MachineState) -> None:
    stack, names = state
    self._stack = list(stack)
    self._names = dict(names)

  # ==========================================================================
  # EVALUATION
  # ==========================================================================

  def interpret(self, token: Token) -> None:
    """Apply one token to the machine state"""
    if self.debug:
      print(f"Interpreting: {token}", file=sys.stderr)

    kind = token.kind
    if kind == TokenKind.NUMBER or kind == TokenKind.NAME:
      self._stack.append(token)
    elif kind == TokenKind.PRINT:
      self._print()
    elif kind == TokenKind.ASSIGN:
      self._assign()
    elif kind in BINARY_OPERATORS:
      self._binary(BINARY_OPERATORS[kind])
    else:
      raise CalcSyntaxError(f"Unknown token kind: {kind}")

    if self.debug:
      print(f"  Stack: [{render_tokens(self._stack)}]", file=sys.stderr)

  def interpret_tokens(self, tokens: Iterable[Token]) -> None:
    for token in tokens:
      self.interpret(token)

  def resolve(self) -> int:
    """Pop the top entry and turn it into an integer"""
    if not self._stack:
      raise CalcSyntaxError("stack underflow")

    token = self._stack.pop()
    if token.kind == TokenKind.NUMBER:
      return token.value
    elif token.kind == TokenKind.NAME:
      return self._lookup(token.value)
    # Guard for an unhandled kind; only NAME and NUMBER are ever pushed
    raise CalcSyntaxError(f"cannot take the value of {token}")

  def _lookup(self, name: str) -> int:
    if name not in self._names:
      raise UndefinedVariableError(name)
    return self._names[name]

  def _print(self) -> None:
    # Printing consumes the top value
    if not self._stack:
      self.output(STACK_EMPTY_MESSAGE)
      return
    value = self.resolve()
    self.output(calc_show_top(value))

  def _binary(self, op: Callable[[int, int], int]) -> None:
    a = self.resolve()
    b = self.resolve()
    self._stack.append(Token(TokenKind.NUMBER, op(a, b)))

  def _assign(self) -> None:
    if not self._stack:
      raise CalcSyntaxError("assignment needs a variable name on the stack")

    target = self._stack.pop()
    if target.kind == TokenKind.NUMBER and self._stack and self._stack[-1].kind == TokenKind.NAME:
      # "x 10 =": the literal sits directly on top of its target
      self._names[self._stack.pop().value] = target.value
      return

    if target.kind != TokenKind.NAME:
      raise CalcSyntaxError(f"assignment target must be a variable name, got {target}")
    self._names[target.value] = self.resolve()


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(debug: bool = False, output: Optional[Callable[[str], None]] = None) -> StackMachine:
  """Factory function returning a fresh stack machine"""
  return StackMachine(debug=debug, output=output or print)


def create_debug_interpreter() -> StackMachine:
  """Factory function returning a debug stack machine"""
  return create_interpreter(debug=True)
