"""
Error handling for the stackcalc lexer and interpreter
Structured syntax diagnostics with source context and suggestions
"""

from typing import List, Optional, Dict
from pyparsing import ParseBaseException


# ============================================================================
# DATA STRUCTURES (Plain Dictionaries)
# ============================================================================

def make_syntax_error(
    message: str,
    column: int = 0,
    got: Optional[str] = None,
    source_line: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create a syntax error structure"""
    return {
        'message': message,
        'column': column,
        'got': got,
        'source_line': source_line,
        'suggestions': suggestions or []
    }


def format_syntax_error(error: Dict) -> str:
    """Format syntax error as string"""
    if error['column']:
        error_msg = f"Syntax error at column {error['column']}: {error['message']}"
    else:
        error_msg = f"Syntax error: {error['message']}"

    if error['got']:
        error_msg += f"\n  Got: '{error['got']}'"

    if error['source_line'] is not None and error['column']:
        error_msg += "\n" + get_context_line(error['source_line'], error['column'])

    if error['suggestions']:
        error_msg += "\n  Suggestions:"
        for suggestion in error['suggestions']:
            error_msg += f"\n    - {suggestion}"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_line(source_line: str, column: int) -> str:
    """Show the source line with a caret under the given 1-based column"""
    return f"    {source_line}\n    {' ' * (column - 1)}^ Error here"


def generate_suggestions(got: Optional[str]) -> List[str]:
    """Generate helpful suggestions for a rejected token"""
    suggestions = []
    if not got:
        return suggestions

    first = got[0]

    if first.isalpha() and not ('a' <= first <= 'z'):
        suggestions.append("Variable names must start with a lowercase letter (a-z)")

    if first.isdigit() and not got.isdigit():
        if any(c.isalpha() for c in got):
            suggestions.append("Numbers may only contain digits - separate names and numbers with spaces")
        else:
            suggestions.append("Number literals are plain decimal integers")

    if first in "*/%^":
        suggestions.append("Only '+' and '-' are supported as arithmetic operators")

    if first in "([{":
        suggestions.append("Expressions are written in postfix form, no brackets needed: 1 2 +")

    return suggestions


def enhance_parse_exception_dict(exc: ParseBaseException, source_line: str) -> Dict:
    """Convert a pyparsing exception raised by the token grammar into an error dict"""
    loc = exc.loc
    rest = source_line[loc:]
    got = rest.split()[0] if rest.split() else None

    return make_syntax_error(
        message=exc.msg,
        column=loc + 1,
        got=got,
        source_line=source_line,
        suggestions=generate_suggestions(got)
    )


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class CalcError(Exception):
    """Base class for every error the calculator core raises"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CalcSyntaxError(CalcError):
    """Malformed input or malformed stack state"""
    def __init__(self, message: str, column: int = 0, got: Optional[str] = None,
                 source_line: Optional[str] = None, suggestions: Optional[List[str]] = None):
        self.column = column
        self.got = got
        self.source_line = source_line
        self.suggestions = suggestions or []
        super().__init__(message)

    def __str__(self) -> str:
        error_dict = make_syntax_error(
            self.message, self.column, self.got, self.source_line, self.suggestions
        )
        return format_syntax_error(error_dict)


class UndefinedVariableError(CalcError):
    """A name was resolved before anything was assigned to it"""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Undefined variable: {name}")


def enhance_parse_exception(exc: ParseBaseException, source_line: str) -> CalcSyntaxError:
    """Convert a pyparsing exception to a CalcSyntaxError"""
    error_dict = enhance_parse_exception_dict(exc, source_line)
    return CalcSyntaxError(
        message=error_dict['message'],
        column=error_dict['column'],
        got=error_dict['got'],
        source_line=error_dict['source_line'],
        suggestions=error_dict['suggestions']
    )
