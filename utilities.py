"""
Utilities module for stackcalc
Helpers shared by the lexer, the interpreter and the REPL
"""

from typing import Dict, Iterable, List

from lexing import Token, TokenKind


# Canonical surface form of each operator token
OPERATOR_SYMBOLS = {
  TokenKind.ADD: '+',
  TokenKind.SUBTRACT: '-',
  TokenKind.ASSIGN: '=',
  TokenKind.PRINT: '@',
}


# ==================== RENDERING UTILITIES ====================

def render_token(token: Token) -> str:
  """
  Render a token back to its canonical surface form

  Examples:
    render_token(Token(TokenKind.ADD)) -> "+"
    render_token(Token(TokenKind.NAME, "x")) -> "x"
    render_token(Token(TokenKind.NUMBER, 42)) -> "42"
  """
  if token.kind in OPERATOR_SYMBOLS:
    return OPERATOR_SYMBOLS[token.kind]
  elif token.kind == TokenKind.NAME:
    return token.value
  elif token.kind == TokenKind.NUMBER:
    return str(token.value)
  raise ValueError(f"Unknown token kind: {token.kind}")


def render_tokens(tokens: Iterable[Token]) -> str:
  """Render a token sequence as a single space-separated line"""
  return ' '.join(render_token(token) for token in tokens)


def format_stack(stack: Iterable[Token]) -> List[str]:
  """Display lines for the stack, bottom first"""
  entries = [render_token(token) for token in stack]
  if not entries:
    return ["  (empty stack)"]
  return [f"  [{depth}] {entry}" for depth, entry in enumerate(entries)]


def format_bindings(variables: Dict[str, int]) -> List[str]:
  """Display lines for the variable table, sorted by name"""
  if not variables:
    return ["  (no variables assigned)"]
  return [f"  {name} = {value}" for name, value in sorted(variables.items())]
