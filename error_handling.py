"""
Error handling for the F1WAE interpreter with detailed error messages
Error hierarchy plus conversion of pyparsing failures into syntax errors
"""

from typing import List, Optional, Dict, Sequence
from pyparsing import ParseException
import re


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseException) -> List[str]:
    """Extract expected tokens from exception"""
    expected = []

    # pyparsing doesn't always have .expected, so read it off the message
    msg = str(exc)
    if "Expected" in msg:
        expected_match = re.search(r"Expected\s+(.+?)(?:,\s+found|\s+\(|$)", msg)
        if expected_match:
            expected.append(expected_match.group(1))

    return expected if expected else ["valid syntax"]


def extract_got(source_text: str, line_num: int, col_num: int) -> str:
    """Extract what was actually found at the error location"""
    lines = source_text.split('\n')

    if 0 < line_num <= len(lines):
        error_line = lines[line_num - 1]
        if col_num <= len(error_line):
            start = max(0, col_num - 1)
            end = min(len(error_line), col_num + 10)
            got_text = error_line[start:end].strip()
            if got_text:
                return f"'{got_text}'"
        return "end of line"
    return "end of input"


def generate_suggestions(source_text: str, got: str) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if "(" in got or ")" in got or "[" in got or "]" in got:
        suggestions.append("Use braces {} instead of parentheses () or brackets [] to group forms")

    opened = source_text.count("{")
    closed = source_text.count("}")
    if opened > closed:
        suggestions.append(f"Unbalanced braces: {opened - closed} '{{' left unclosed")
    elif closed > opened:
        suggestions.append(f"Unbalanced braces: {closed - opened} extra '}}'")

    if not source_text.strip():
        suggestions.append("The input is empty - write an expression such as {+ 1 2}")

    return suggestions


def enhance_parse_exception_dict(exc: ParseException, source_text: str) -> Dict:
    """Convert pyparsing exception to an enhanced error dict"""
    line_num = exc.lineno
    col_num = exc.column

    context = get_context_lines(source_text, line_num, col_num)
    expected = extract_expected(exc)
    got = extract_got(source_text, line_num, col_num)
    suggestions = generate_suggestions(source_text, got)

    return make_parse_error(
        message=str(exc),
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=expected,
        got=got,
        context=context,
        suggestions=suggestions
    )


# ============================================================================
# ERROR CLASSES
# ============================================================================

class F1WAEError(Exception):
    """Base class of every error the interpreter surfaces to its callers"""
    kind = "Error"

    def __init__(self, message: str, span=None):
        self.message = message
        self.span = span
        super().__init__(self._format_error())

    def _format_error(self) -> str:
        if self.span:
            return f"{self.kind} at {self.span}: {self.message}"
        return f"{self.kind}: {self.message}"


class F1WAESyntaxError(F1WAEError):
    """Input matched none of the grammar productions"""
    kind = "Syntax error"

    def __init__(self, fragment: str, span=None, context: str = "",
                 suggestions: Sequence[str] = (), message: Optional[str] = None):
        self.fragment = fragment
        self.context = context
        self.suggestions = list(suggestions)
        super().__init__(message or f"bad syntax: {fragment}", span)

    def _format_error(self) -> str:
        result = super()._format_error()
        if self.context:
            result += f"\n  Context:\n{self.context}"
        for suggestion in self.suggestions:
            result += f"\n  Suggestion: {suggestion}"
        return result


class F1WAEUndefinedFunctionError(F1WAEError):
    """Application of a name absent from the function table"""
    kind = "Undefined function"

    def __init__(self, name: str, span=None):
        self.name = name
        super().__init__(f"no function named '{name}'", span)


class F1WAEFreeIdentifierError(F1WAEError):
    """Identifier reached with no binding in scope"""
    kind = "Free identifier"

    def __init__(self, name: str, span=None):
        self.name = name
        super().__init__(f"'{name}' is not bound", span)


def syntax_error_from_parse_exception(exc: ParseException, source_text: str,
                                      span=None) -> F1WAESyntaxError:
    """Convert a pyparsing exception into an F1WAE syntax error"""
    error_dict = enhance_parse_exception_dict(exc, source_text)
    got = error_dict['got']
    # Nothing left to quote at the end of a line or of the input
    fragment = got[1:-1] if got.startswith("'") else ""
    return F1WAESyntaxError(
        fragment,
        span=span,
        context=error_dict['context'],
        suggestions=error_dict['suggestions'],
        message=f"unexpected {got}, expected {', '.join(error_dict['expected'])}"
    )
