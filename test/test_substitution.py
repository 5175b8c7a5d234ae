"""
Substitution engine tests for F1WAE
Tests capture-respecting rewriting and agreement between the two evaluators
"""

import pytest
from semantics import Num, Add, Sub, Id, With, App, If0, FunDef, parse, parse_fundefs
from substitution import substitute, evaluate_subst
from interpreter import build_table, evaluate
from error_handling import F1WAEFreeIdentifierError, F1WAEUndefinedFunctionError


class TestSubstitute:
  """Test the structural substitution rules"""

  def test_number_unchanged(self):
    assert substitute(Num(1), "x", Num(5)) == Num(1)

  def test_matching_identifier_replaced(self):
    assert substitute(Id("x"), "x", Num(5)) == Num(5)

  def test_other_identifier_unchanged(self):
    assert substitute(Id("y"), "x", Num(5)) == Id("y")

  def test_arithmetic_recurses_into_both_sides(self):
    expr = Add(Id("x"), Sub(Id("x"), Id("y")))
    assert substitute(expr, "x", Num(5)) == Add(Num(5), Sub(Num(5), Id("y")))

  def test_with_body_substituted_when_not_shadowed(self):
    expr = parse("{with {y x} {+ x y}}")
    assert substitute(expr, "x", Num(5)) == parse("{with {y 5} {+ 5 y}}")

  def test_with_shadowing_stops_at_body(self):
    expr = parse("{with {x {+ x 1}} {+ x x}}")
    assert substitute(expr, "x", Num(5)) == parse("{with {x {+ 5 1}} {+ x x}}")

  def test_application_substitutes_argument_only(self):
    assert substitute(App("f", Id("x")), "x", Num(5)) == App("f", Num(5))

  def test_if0_recurses_into_all_parts(self):
    expr = If0(Id("x"), Id("x"), Id("y"))
    assert substitute(expr, "x", Num(0)) == If0(Num(0), Num(0), Id("y"))

  def test_value_can_be_any_expression(self):
    assert substitute(Id("x"), "x", Add(Num(1), Num(2))) == Add(Num(1), Num(2))

  def test_original_is_not_modified(self):
    expr = parse("{+ x x}")
    substitute(expr, "x", Num(5))
    assert expr == Add(Id("x"), Id("x"))


class TestSubstitutionEvaluator:
  """Test the substitution-driven evaluator"""

  def test_with(self):
    assert evaluate_subst(parse("{with {x 5} {+ x x}}"), ()) == 10

  def test_shadowing(self):
    assert evaluate_subst(parse("{with {x 5} {with {x 3} {+ x x}}}"), ()) == 6

  def test_free_identifier(self):
    with pytest.raises(F1WAEFreeIdentifierError) as excinfo:
      evaluate_subst(parse("{+ 1 z}"), ())
    assert excinfo.value.name == "z"

  def test_undefined_function(self):
    with pytest.raises(F1WAEUndefinedFunctionError):
      evaluate_subst(parse("{g 1}"), ())

  def test_call_site_binding_does_not_leak(self):
    table = build_table([FunDef("f", "p", Id("n"))])
    with pytest.raises(F1WAEFreeIdentifierError) as excinfo:
      evaluate_subst(With("n", Num(5), App("f", Num(10))), table)
    assert excinfo.value.name == "n"

  def test_fib(self, fib_table):
    assert evaluate_subst(parse("{fib 8}"), fib_table) == 21

  def test_debug_tracing(self, capsys):
    evaluate_subst(parse("{with {x 2} x}"), (), debug=True)
    out = capsys.readouterr().out
    assert "Substituting x=2" in out
    assert "Evaluating: 2" in out


LIBRARY = parse_fundefs("""
{deffun {double n} {+ n n}}
{deffun {pred n} {- n 1}}
{deffun {sum n} {if0 n 0 {+ n {sum {pred n}}}}}
{deffun {shadow x} {with {x {+ x 1}} {with {y x} {+ x y}}}}
{deffun {even? n} {if0 n 1 {odd? {- n 1}}}}
{deffun {odd? n} {if0 n 0 {even? {- n 1}}}}
{deffun {fib n} {if0 n 0 {if0 {- n 1} 1 {+ {fib {- n 1}} {fib {- n 2}}}}}}
""")

CLOSED_PROGRAMS = [
    "42",
    "{+ {- 3 {with {x 5} {+ x 2}}} 7}",
    "{with {x 5} {with {x 3} {+ x x}}}",
    "{with {x 5} {with {y {- x 3}} {+ y y}}}",
    "{with {x 5} {with {x {+ x 1}} x}}",
    "{with {x {with {x 2} {+ x x}}} {- x 1}}",
    "{double {double {double 1}}}",
    "{with {n 10} {sum n}}",
    "{shadow 4}",
    "{with {x 3} {+ x {shadow x}}}",
    "{even? 9}",
    "{odd? 9}",
    "{fib 12}",
    "{if0 {with {z 0} z} {double 21} {undefined 0}}",
]


class TestEvaluatorsAgree:
  """Both strategies give identical results on closed programs"""

  @pytest.mark.parametrize("text", CLOSED_PROGRAMS)
  def test_same_result(self, text):
    table = build_table(LIBRARY)
    expr = parse(text)
    assert evaluate(expr, table) == evaluate_subst(expr, table)

  @pytest.mark.parametrize("text", [
      "{with {n 5} {leak 10}}",
      "{with {x 1} {+ x y}}",
      "{leak {with {n 3} n}}",
  ])
  def test_same_error(self, text):
    table = build_table(LIBRARY + [FunDef("leak", "p", Id("n"))])
    expr = parse(text)
    with pytest.raises(F1WAEFreeIdentifierError) as env_error:
      evaluate(expr, table)
    with pytest.raises(F1WAEFreeIdentifierError) as subst_error:
      evaluate_subst(expr, table)
    assert env_error.value.name == subst_error.value.name
