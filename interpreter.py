"""
F1WAE Interpreter - Deferred Substitution
Pure functions over the immutable AST; environments are chained dictionaries
that are created per binding and never mutated
"""

from typing import Dict, Iterable, Optional, Tuple
from error_handling import F1WAEUndefinedFunctionError, F1WAEFreeIdentifierError
from semantics import Expr, Num, Add, Sub, Id, With, App, If0, FunDef, show_expr
from utilities import apply_arithmetic, format_env


FunctionTable = Tuple[FunDef, ...]


# ============================================================================
# FUNCTION TABLE
# ============================================================================

def build_table(defs: Iterable[FunDef]) -> FunctionTable:
  """Freeze function definitions into an ordered, read-only table"""
  return tuple(defs)


def lookup_fundef(name: str, table: FunctionTable) -> FunDef:
  """Find a function by name; the first definition wins"""
  for fundef in table:
    if fundef.name == name:
      return fundef
  raise F1WAEUndefinedFunctionError(name)


# ============================================================================
# ENVIRONMENT OPERATIONS
# ============================================================================

def make_runtime_env(parent: Optional[Dict] = None, bindings: Optional[Dict] = None) -> Dict:
  """Create an immutable runtime environment"""
  return {
      'parent': parent,
      'bindings': bindings or {}
  }


EMPTY_ENV = make_runtime_env()


def env_extend(env: Dict, name: str, value: int) -> Dict:
  """Return a new frame binding name to value, chained onto env"""
  return make_runtime_env(env, {name: value})


def lookup(name: str, env: Dict) -> int:
  """Look up a value in the environment chain, innermost frame first"""
  current = env
  while current is not None:
    if name in current['bindings']:
      return current['bindings'][name]
    current = current['parent']
  raise F1WAEFreeIdentifierError(name)


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def evaluate(expr: Expr, table: FunctionTable, env: Dict = EMPTY_ENV, debug: bool = False) -> int:
  """
  Evaluate an expression under env and return its integer value.
  Function bodies only ever see their own parameter.
  """
  if debug:
    print(f"Evaluating: {show_expr(expr)} in {format_env(env)}")

  if isinstance(expr, Num):
    return expr.n
  elif isinstance(expr, Add):
    return eval_arithmetic('+', expr, table, env, debug)
  elif isinstance(expr, Sub):
    return eval_arithmetic('-', expr, table, env, debug)
  elif isinstance(expr, Id):
    return lookup(expr.name, env)
  elif isinstance(expr, With):
    return eval_with(expr, table, env, debug)
  elif isinstance(expr, App):
    return eval_app(expr, table, env, debug)
  elif isinstance(expr, If0):
    return eval_if0(expr, table, env, debug)
  raise TypeError(f"not an expression: {expr!r}")


def eval_arithmetic(op_name: str, expr, table: FunctionTable, env: Dict, debug: bool = False) -> int:
  """Evaluate both operands under the same environment and combine them"""
  left = evaluate(expr.lhs, table, env, debug)
  right = evaluate(expr.rhs, table, env, debug)
  return apply_arithmetic(op_name, left, right)


def eval_with(expr: With, table: FunctionTable, env: Dict, debug: bool = False) -> int:
  """Named expression in the current scope, body in the current scope extended"""
  value = evaluate(expr.named_expr, table, env, debug)
  return evaluate(expr.body, table, env_extend(env, expr.name, value), debug)


def eval_app(expr: App, table: FunctionTable, env: Dict, debug: bool = False) -> int:
  """Call a function: argument in the caller's scope, body in a fresh scope"""
  fundef = lookup_fundef(expr.fun_name, table)
  arg_value = evaluate(expr.arg, table, env, debug)
  if debug:
    print(f"Calling {fundef.name} with {fundef.param}={arg_value}")
  # Rooted at EMPTY_ENV, not env: chaining the caller's frames here would be dynamic scope
  call_env = env_extend(EMPTY_ENV, fundef.param, arg_value)
  return evaluate(fundef.body, table, call_env, debug)


def eval_if0(expr: If0, table: FunctionTable, env: Dict, debug: bool = False) -> int:
  """Evaluate the test, then exactly one branch"""
  if evaluate(expr.test, table, env, debug) == 0:
    return evaluate(expr.then_branch, table, env, debug)
  return evaluate(expr.else_branch, table, env, debug)


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

STRATEGIES = ('environment', 'substitution')


def create_interpreter(strategy: str = 'environment', debug: bool = False):
  """Factory function returning interpreter(expr, table) -> int for a strategy"""
  if strategy == 'environment':
    def interpreter(expr: Expr, table: FunctionTable) -> int:
      return evaluate(expr, table, EMPTY_ENV, debug)
  elif strategy == 'substitution':
    from substitution import evaluate_subst

    def interpreter(expr: Expr, table: FunctionTable) -> int:
      return evaluate_subst(expr, table, debug)
  else:
    raise ValueError(f"Unknown evaluation strategy: {strategy} (expected one of {', '.join(STRATEGIES)})")

  return interpreter
