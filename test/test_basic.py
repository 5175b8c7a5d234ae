"""
Basic reader tests for F1WAE
Tests tokenizing brace forms into the CST
"""

import sys
import pytest
from parsing import F1WAEGrammar, create_parser, cst_to_text, pretty_print_cst
from error_handling import F1WAESyntaxError

# 0 when the interpreter converts integer strings of any length
INT_DIGIT_LIMIT = getattr(sys, "get_int_max_str_digits", lambda: 0)()


class TestBasicReading:
  """Test basic reading functionality"""

  @pytest.fixture
  def grammar(self):
    """Provide a fresh grammar instance for each test"""
    return F1WAEGrammar()

  def test_number(self, grammar):
    node = grammar.parse_expression("42")
    assert node.type == 'NUMBER'
    assert node.value == 42

  def test_negative_number(self, grammar):
    node = grammar.parse_expression("-7")
    assert node.type == 'NUMBER'
    assert node.value == -7

  def test_minus_alone_is_symbol(self, grammar):
    node = grammar.parse_expression("-")
    assert node.type == 'SYMBOL'
    assert node.value == '-'

  def test_digits_followed_by_letters_is_symbol(self, grammar):
    node = grammar.parse_expression("12ab")
    assert node.type == 'SYMBOL'
    assert node.value == '12ab'

  def test_symbol_with_punctuation(self, grammar):
    node = grammar.parse_expression("even?")
    assert node.type == 'SYMBOL'
    assert node.value == 'even?'

  def test_nested_form(self, grammar):
    node = grammar.parse_expression("{+ 1 {- x 2}}")
    assert node.type == 'FORM'
    assert [child.type for child in node.children] == ['SYMBOL', 'NUMBER', 'FORM']
    inner = node.children[2]
    assert [child.value for child in inner.children] == ['-', 'x', 2]

  def test_empty_form(self, grammar):
    node = grammar.parse_expression("{}")
    assert node.type == 'FORM'
    assert node.children == []

  def test_whitespace_and_newlines(self, grammar):
    node = grammar.parse_expression("  {with\n  {x 5}\n  {+ x x}}  ")
    assert cst_to_text(node) == "{with {x 5} {+ x x}}"

  def test_program_with_several_forms(self, grammar):
    nodes = grammar.parse_program("{deffun {f x} x} {f 1} 3")
    assert len(nodes) == 3
    assert nodes[2].value == 3

  def test_empty_program(self, grammar):
    assert grammar.parse_program("") == []


class TestSourceSpans:
  """Test source locations recorded on CST nodes"""

  @pytest.fixture
  def parser(self):
    return create_parser()

  def test_atom_span(self, parser):
    node = parser.parse_expression("   foo", "<test>")
    assert node.span.filename == "<test>"
    assert node.span.start_line == 1
    assert node.span.start_col == 4
    assert node.span.text == "foo"

  def test_form_span_covers_braces(self, parser):
    node = parser.parse_expression("{+ 1 2}")
    assert node.span.start_col == 1
    assert node.span.text == "{+ 1 2}"

  def test_span_on_later_line(self, parser):
    nodes = parser.parse_string("{f 1}\n  {g 2}")
    assert nodes[1].span.start_line == 2
    assert nodes[1].span.start_col == 3


class TestReaderErrors:
  """Test error handling and reporting"""

  @pytest.fixture
  def grammar(self):
    return F1WAEGrammar()

  def test_unclosed_brace(self, grammar):
    with pytest.raises(F1WAESyntaxError) as excinfo:
      grammar.parse_expression("{+ 1 2")
    assert any("Unbalanced braces" in s for s in excinfo.value.suggestions)

  def test_extra_closing_brace(self, grammar):
    with pytest.raises(F1WAESyntaxError):
      grammar.parse_program("{+ 1 2}}")

  def test_parentheses_are_rejected(self, grammar):
    with pytest.raises(F1WAESyntaxError) as excinfo:
      grammar.parse_expression("(+ 1 2)")
    assert any("braces" in s for s in excinfo.value.suggestions)

  def test_empty_expression(self, grammar):
    with pytest.raises(F1WAESyntaxError) as excinfo:
      grammar.parse_expression("   ")
    assert excinfo.value.fragment == ""

  @pytest.mark.skipif(INT_DIGIT_LIMIT == 0, reason="interpreter has no integer digit limit")
  def test_oversized_integer_literal(self, grammar):
    literal = "1" * (INT_DIGIT_LIMIT + 700)
    with pytest.raises(F1WAESyntaxError) as excinfo:
      grammar.parse_expression("{+ " + literal + " 1}")
    assert excinfo.value.fragment == literal
    assert excinfo.value.span.start_col == 4
    assert "out of range" in excinfo.value.message

  def test_two_expressions_where_one_expected(self, grammar):
    with pytest.raises(F1WAESyntaxError):
      grammar.parse_expression("1 2")

  def test_error_has_location(self, grammar):
    with pytest.raises(F1WAESyntaxError) as excinfo:
      grammar.parse_program("{f 1}\n(g 2)", "<test>")
    assert excinfo.value.span.filename == "<test>"
    assert excinfo.value.span.start_line == 2


class TestCSTUtilities:
  """Test CST rendering helpers"""

  def test_cst_to_text_normalizes_spacing(self):
    node = create_parser().parse_expression("{  /   5 3 }")
    assert cst_to_text(node) == "{/ 5 3}"

  def test_pretty_print_cst(self):
    node = create_parser().parse_expression("{f 1}")
    assert pretty_print_cst(node) == "FORM\n  SYMBOL('f')\n  NUMBER(1)\n"
