"""
F1WAE Reader
Turns brace-delimited concrete syntax into a CST of atoms and forms with source spans
"""

from typing import List, Any, Optional
from dataclasses import dataclass, field

# Import pyparsing with error handling
try:
    from pyparsing import (
        Forward, Group, Located, ParseException, ParserElement, Regex,
        StringEnd, Suppress, ZeroOrMore, col, lineno
    )
    # Enable packrat parsing for performance
    ParserElement.enable_packrat()
except ImportError:
    raise ImportError("pyparsing library not found. Install with: pip install pyparsing")

from error_handling import F1WAESyntaxError, syntax_error_from_parse_exception


@dataclass(frozen=True)
class SourceSpan:
    """Source location information for preserving CST"""
    filename: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int
    text: str = ""

    def __str__(self) -> str:
        if self.start_line == self.end_line:
            return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_col}"
        return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_line}:{self.end_col}"


@dataclass(frozen=True)
class CSTNode:
    """Concrete Syntax Tree node: a NUMBER or SYMBOL atom, or a bracketed FORM"""
    type: str
    value: Any
    children: List['CSTNode'] = field(default_factory=list)
    span: Optional[SourceSpan] = None

    def __str__(self) -> str:
        if self.children:
            children_str = ", ".join(str(child) for child in self.children)
            return f"{self.type}([{children_str}])"
        return f"{self.type}({self.value})"


# Characters that can never appear inside a symbol
DELIMITER_CHARS = r"\s{}()\[\]"


class F1WAEGrammar:
    """F1WAE reader grammar definition using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        """Setup the reader: integers, symbols and {}-bracketed forms"""

        sexpr = Forward()

        # An integer must end at a delimiter, so "12ab" is one symbol
        number = Regex(rf"-?[0-9]+(?![^{DELIMITER_CHARS}])").set_parse_action(
            lambda s, loc, t: ("NUMBER", t[0], loc, loc + len(t[0]))
        )

        symbol = Regex(rf"[^{DELIMITER_CHARS}]+").set_parse_action(
            lambda s, loc, t: ("SYMBOL", t[0], loc, loc + len(t[0]))
        )

        def make_form(s, loc, t):
            located = t[0] if len(t) == 1 else t
            children = list(located["value"][0])
            return ("FORM", children, located["locn_start"], located["locn_end"])

        form = Located(
            Suppress("{") + Group(ZeroOrMore(sexpr)) + Suppress("}")
        ).set_parse_action(make_form)

        # Numbers before symbols: "-5" is a number, "-" a symbol
        sexpr <<= form | number | symbol

        program = ZeroOrMore(sexpr) + StringEnd()
        expression = sexpr + StringEnd()

        # Store the main parsers
        self.sexpr = sexpr
        self.form = form
        self.number = number
        self.symbol = symbol
        self.program = program
        self.expression = expression

    def parse_program(self, text: str, filename: str = "<input>") -> List[CSTNode]:
        """Read every top-level form of a source text"""
        if self.debug:
            print(f"Reading program from {filename} ({len(text)} chars)")
        try:
            result = self.program.parse_string(text, parse_all=True)
        except ParseException as e:
            raise self._syntax_error(e, text, filename) from e
        return self._convert_to_cst(result, text, filename)

    def parse_expression(self, text: str, filename: str = "<input>") -> CSTNode:
        """Read exactly one form"""
        if self.debug:
            print(f"Reading expression from {filename}: {text!r}")
        try:
            result = self.expression.parse_string(text, parse_all=True)
        except ParseException as e:
            raise self._syntax_error(e, text, filename) from e
        return self._convert_to_cst(result, text, filename)[0]

    def _syntax_error(self, exc: ParseException, text: str, filename: str) -> F1WAESyntaxError:
        line_num = getattr(exc, 'lineno', 1)
        col_num = getattr(exc, 'col', 1)
        span = SourceSpan(filename, line_num, col_num, line_num, col_num + 1, "")
        return syntax_error_from_parse_exception(exc, text, span)

    def _convert_to_cst(self, parse_result: Any, text: str, filename: str) -> List[CSTNode]:
        """Convert pyparsing results to CST nodes"""

        def make_span(start: int, end: int) -> SourceSpan:
            return SourceSpan(
                filename,
                lineno(start, text), col(start, text),
                lineno(end, text), col(end, text),
                text[start:end]
            )

        def convert_item(item) -> CSTNode:
            node_type, value, start, end = item
            span = make_span(start, end)
            if node_type == "FORM":
                return CSTNode(node_type, None, [convert_item(v) for v in value], span)
            if node_type == "NUMBER":
                # int() refuses literals past the interpreter's digit limit
                try:
                    value = int(value)
                except ValueError as e:
                    raise F1WAESyntaxError(value, span, message=f"integer literal out of range: {e}") from e
            return CSTNode(node_type, value, [], span)

        return [convert_item(item) for item in parse_result]


class F1WAEParser:
    """Main reader entry point"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = F1WAEGrammar(debug)

    def parse_file(self, filepath: str) -> List[CSTNode]:
        """Read a source file"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                content = f.read()
        except UnicodeDecodeError as e:
            raise F1WAESyntaxError(filepath, message=f"Cannot decode file {filepath}: {e}") from e
        return self.grammar.parse_program(content, filepath)

    def parse_string(self, text: str, filename: str = "<input>") -> List[CSTNode]:
        """Read source code from a string"""
        return self.grammar.parse_program(text, filename)

    def parse_expression(self, text: str, filename: str = "<input>") -> CSTNode:
        """Read a single form"""
        return self.grammar.parse_expression(text, filename)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> F1WAEParser:
    """Create a reader"""
    return F1WAEParser(debug=debug)


# Utility functions for working with CST
def cst_to_text(cst: CSTNode) -> str:
    """Render a CST node back to canonical concrete syntax"""
    if cst.type == "FORM":
        return "{" + " ".join(cst_to_text(child) for child in cst.children) + "}"
    return str(cst.value)


def pretty_print_cst(cst: CSTNode, indent: int = 0) -> str:
    """Pretty print a CST node for debugging"""
    result = "  " * indent + f"{cst.type}"
    if cst.value is not None:
        result += f"({repr(cst.value)})"
    result += "\n"

    for child in cst.children:
        result += pretty_print_cst(child, indent + 1)

    return result
