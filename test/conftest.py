"""
Test configuration for stackcalc tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from lexing import create_lexer
from interpreter import create_interpreter


@pytest.fixture
def lexer():
  """Provide a fresh lexer for each test"""
  return create_lexer()


@pytest.fixture
def machine():
  """Provide a fresh stack machine for each test"""
  return create_interpreter()


@pytest.fixture
def run(lexer, machine):
  """Feed one or more source lines through the lexer into the shared machine"""
  def run_source(*lines):
    for line in lines:
      machine.interpret_tokens(lexer.tokenize(line))
    return machine
  return run_source
