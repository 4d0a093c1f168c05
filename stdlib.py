"""
stackcalc Standard Library
Built-in operator implementations and output messages
"""

from typing import Callable, Dict

from lexing import TokenKind


STACK_EMPTY_MESSAGE = "Stack is empty."


# ============================================================================
# PRINT FUNCTIONS
# ============================================================================

def calc_show_top(value: int) -> str:
  """Message shown when a value is printed off the stack"""
  return f"Top stack value: {value}"


# ============================================================================
# ARITHMETIC FUNCTIONS
# ============================================================================

# Operands arrive in pop order: a is the former top of the stack, b sat below it.

def calc_add(a: int, b: int) -> int:
  """Addition"""
  return b + a


def calc_sub(a: int, b: int) -> int:
  """Subtraction, conventional RPN order: `b a -` is b - a"""
  return b - a


BINARY_OPERATORS: Dict[TokenKind, Callable[[int, int], int]] = {
  TokenKind.ADD: calc_add,
  TokenKind.SUBTRACT: calc_sub,
}
