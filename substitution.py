"""
F1WAE Substitution Engine
Capture-respecting term rewriting and the substitution-driven evaluator.
Each substitution walks the whole subtree, so n nested bindings cost O(n^2)
"""

from error_handling import F1WAEFreeIdentifierError
from semantics import Expr, Num, Add, Sub, Id, With, App, If0, show_expr
from interpreter import FunctionTable, lookup_fundef
from utilities import apply_arithmetic


# ============================================================================
# SUBSTITUTION
# ============================================================================

def substitute(expr: Expr, target: str, value: Expr) -> Expr:
  """Replace every free occurrence of target in expr with value"""
  if isinstance(expr, Num):
    return expr
  elif isinstance(expr, Id):
    return value if expr.name == target else expr
  elif isinstance(expr, Add):
    return Add(substitute(expr.lhs, target, value), substitute(expr.rhs, target, value))
  elif isinstance(expr, Sub):
    return Sub(substitute(expr.lhs, target, value), substitute(expr.rhs, target, value))
  elif isinstance(expr, With):
    named_expr = substitute(expr.named_expr, target, value)
    # target is shadowed inside the body
    if expr.name == target:
      return With(expr.name, named_expr, expr.body)
    return With(expr.name, named_expr, substitute(expr.body, target, value))
  elif isinstance(expr, App):
    # The callee's body is resolved through the table at call time
    return App(expr.fun_name, substitute(expr.arg, target, value))
  elif isinstance(expr, If0):
    return If0(
        substitute(expr.test, target, value),
        substitute(expr.then_branch, target, value),
        substitute(expr.else_branch, target, value)
    )
  raise TypeError(f"not an expression: {expr!r}")


# ============================================================================
# EVALUATION
# ============================================================================

def evaluate_subst(expr: Expr, table: FunctionTable, debug: bool = False) -> int:
  """Evaluate by physically substituting values for bound identifiers"""
  if debug:
    print(f"Evaluating: {show_expr(expr)}")

  if isinstance(expr, Num):
    return expr.n
  elif isinstance(expr, Add):
    return apply_arithmetic('+', evaluate_subst(expr.lhs, table, debug), evaluate_subst(expr.rhs, table, debug))
  elif isinstance(expr, Sub):
    return apply_arithmetic('-', evaluate_subst(expr.lhs, table, debug), evaluate_subst(expr.rhs, table, debug))
  elif isinstance(expr, With):
    value = evaluate_subst(expr.named_expr, table, debug)
    if debug:
      print(f"Substituting {expr.name}={value}")
    return evaluate_subst(substitute(expr.body, expr.name, Num(value)), table, debug)
  elif isinstance(expr, Id):
    # Every bound identifier has already been replaced
    raise F1WAEFreeIdentifierError(expr.name)
  elif isinstance(expr, App):
    fundef = lookup_fundef(expr.fun_name, table)
    arg_value = evaluate_subst(expr.arg, table, debug)
    if debug:
      print(f"Calling {fundef.name} with {fundef.param}={arg_value}")
    return evaluate_subst(substitute(fundef.body, fundef.param, Num(arg_value)), table, debug)
  elif isinstance(expr, If0):
    if evaluate_subst(expr.test, table, debug) == 0:
      return evaluate_subst(expr.then_branch, table, debug)
    return evaluate_subst(expr.else_branch, table, debug)
  raise TypeError(f"not an expression: {expr!r}")
