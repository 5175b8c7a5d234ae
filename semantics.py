"""
F1WAE Semantics Analysis
Structural recursion over the CST: recognises the grammar shapes and builds the AST
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
from parsing import CSTNode, create_parser, cst_to_text
from error_handling import F1WAESyntaxError
from utilities import is_reserved


# ============================================================================
# DATA STRUCTURES (Immutable AST)
# ============================================================================

class Expr:
  """Base of the expression sum type"""
  __slots__ = ()


@dataclass(frozen=True)
class Num(Expr):
  n: int


@dataclass(frozen=True)
class Add(Expr):
  lhs: Expr
  rhs: Expr


@dataclass(frozen=True)
class Sub(Expr):
  lhs: Expr
  rhs: Expr


@dataclass(frozen=True)
class Id(Expr):
  name: str


@dataclass(frozen=True)
class With(Expr):
  """Binds name to the value of named_expr, visible only inside body"""
  name: str
  named_expr: Expr
  body: Expr


@dataclass(frozen=True)
class App(Expr):
  """Call of a top-level function, resolved by name at call time"""
  fun_name: str
  arg: Expr


@dataclass(frozen=True)
class If0(Expr):
  """then_branch when test evaluates to 0, else_branch otherwise"""
  test: Expr
  then_branch: Expr
  else_branch: Expr


@dataclass(frozen=True)
class FunDef:
  name: str
  param: str
  body: Expr


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def syntax_error(cst: CSTNode, message: Optional[str] = None) -> F1WAESyntaxError:
  """Build a syntax error pointing at the offending CST node"""
  fragment = cst_to_text(cst)
  return F1WAESyntaxError(fragment, cst.span, message=message)


def is_symbol(cst: CSTNode, name: Optional[str] = None) -> bool:
  if cst.type != "SYMBOL":
    return False
  return name is None or cst.value == name


def extract_binding_name(cst: CSTNode, role: str) -> str:
  """Extract a name that is about to be bound or defined"""
  if not is_symbol(cst) or is_reserved(cst.value):
    raise syntax_error(cst, f"expected an identifier for the {role}, got {cst_to_text(cst)}")
  return cst.value


# ============================================================================
# EXPRESSION ANALYSIS
# ============================================================================

def analyze_cst_node(cst: CSTNode, debug: bool = False) -> Expr:
  """Analyze one CST node into an expression"""
  if debug:
    print(f"Analyzing: {cst_to_text(cst)}")

  if cst.type == "NUMBER":
    return Num(cst.value)
  if cst.type == "SYMBOL":
    if is_reserved(cst.value):
      raise syntax_error(cst, f"'{cst.value}' is a keyword and cannot be used as an identifier")
    return Id(cst.value)
  if cst.type == "FORM":
    return analyze_form(cst, debug)
  raise syntax_error(cst)


def analyze_form(cst: CSTNode, debug: bool = False) -> Expr:
  """Dispatch a bracketed form on its head symbol"""
  items = cst.children
  if not items or not is_symbol(items[0]):
    raise syntax_error(cst)

  head = items[0].value
  if head in ('+', '-'):
    if len(items) != 3:
      raise syntax_error(cst, f"'{head}' takes exactly two operands: {cst_to_text(cst)}")
    lhs = analyze_cst_node(items[1], debug)
    rhs = analyze_cst_node(items[2], debug)
    return Add(lhs, rhs) if head == '+' else Sub(lhs, rhs)

  if head == 'with':
    return analyze_with(cst, debug)

  if head == 'if0':
    if len(items) != 4:
      raise syntax_error(cst, f"'if0' takes a test and two branches: {cst_to_text(cst)}")
    return If0(*(analyze_cst_node(item, debug) for item in items[1:]))

  if head == 'deffun':
    raise syntax_error(cst, f"function definitions are only allowed at top level: {cst_to_text(cst)}")

  if len(items) != 2:
    raise syntax_error(cst)
  return App(head, analyze_cst_node(items[1], debug))


def analyze_with(cst: CSTNode, debug: bool = False) -> With:
  """Analyze {with {id named-expr} body}"""
  items = cst.children
  if len(items) != 3 or items[1].type != "FORM" or len(items[1].children) != 2:
    raise syntax_error(cst, f"expected {{with {{id expr}} body}}, got {cst_to_text(cst)}")

  binding = items[1].children
  name = extract_binding_name(binding[0], "with binding")
  named_expr = analyze_cst_node(binding[1], debug)
  body = analyze_cst_node(items[2], debug)
  return With(name, named_expr, body)


def is_fundef_form(cst: CSTNode) -> bool:
  return cst.type == "FORM" and bool(cst.children) and is_symbol(cst.children[0], 'deffun')


def analyze_fundef(cst: CSTNode, debug: bool = False) -> FunDef:
  """Analyze {deffun {name param} body}"""
  items = cst.children if cst.type == "FORM" else []
  if (len(items) != 3 or not is_symbol(items[0], 'deffun')
      or items[1].type != "FORM" or len(items[1].children) != 2):
    raise syntax_error(cst, f"expected {{deffun {{name param}} body}}, got {cst_to_text(cst)}")

  name = extract_binding_name(items[1].children[0], "function name")
  param = extract_binding_name(items[1].children[1], "parameter")
  body = analyze_cst_node(items[2], debug)
  if debug:
    print(f"Defined function: {name}({param})")
  return FunDef(name, param, body)


# ============================================================================
# PROGRAM ANALYSIS
# ============================================================================

def analyze_program(cst_nodes: List[CSTNode], debug: bool = False) -> Tuple[List[FunDef], List[Expr]]:
  """Split top-level forms into function definitions and expressions, keeping order"""
  fundefs = []
  exprs = []
  for cst in cst_nodes:
    if is_fundef_form(cst):
      fundefs.append(analyze_fundef(cst, debug))
    else:
      exprs.append(analyze_cst_node(cst, debug))
  return fundefs, exprs


def analyze_fundefs(cst_nodes: List[CSTNode], debug: bool = False) -> List[FunDef]:
  """Analyze a sequence made only of function definitions"""
  return [analyze_fundef(cst, debug) for cst in cst_nodes]


def parse(text: str, filename: str = "<input>", debug: bool = False) -> Expr:
  """Parse exactly one expression"""
  cst = create_parser(debug).parse_expression(text, filename)
  return analyze_cst_node(cst, debug)


def parse_fundefs(text: str, filename: str = "<input>", debug: bool = False) -> List[FunDef]:
  """Parse a sequence of {deffun ...} forms"""
  return analyze_fundefs(create_parser(debug).parse_string(text, filename), debug)


def parse_program(text: str, filename: str = "<input>", debug: bool = False) -> Tuple[List[FunDef], List[Expr]]:
  """Parse a script mixing function definitions and expressions"""
  return analyze_program(create_parser(debug).parse_string(text, filename), debug)


# ============================================================================
# DISPLAY
# ============================================================================

def show_expr(expr: Expr) -> str:
  """Render an expression back to concrete syntax"""
  if isinstance(expr, Num):
    return str(expr.n)
  if isinstance(expr, Id):
    return expr.name
  if isinstance(expr, Add):
    return f"{{+ {show_expr(expr.lhs)} {show_expr(expr.rhs)}}}"
  if isinstance(expr, Sub):
    return f"{{- {show_expr(expr.lhs)} {show_expr(expr.rhs)}}}"
  if isinstance(expr, With):
    return f"{{with {{{expr.name} {show_expr(expr.named_expr)}}} {show_expr(expr.body)}}}"
  if isinstance(expr, App):
    return f"{{{expr.fun_name} {show_expr(expr.arg)}}}"
  if isinstance(expr, If0):
    return (f"{{if0 {show_expr(expr.test)} {show_expr(expr.then_branch)} "
            f"{show_expr(expr.else_branch)}}}")
  raise TypeError(f"not an expression: {expr!r}")


def show_fundef(fundef: FunDef) -> str:
  return f"{{deffun {{{fundef.name} {fundef.param}}} {show_expr(fundef.body)}}}"


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_analyzer(debug: bool = False):
  """Factory function returning an analyzer"""
  return type('Analyzer', (), {
      'analyze': lambda self, cst_nodes: analyze_program(cst_nodes, debug),
      'analyze_expression': lambda self, cst_node: analyze_cst_node(cst_node, debug),
      'analyze_fundef': lambda self, cst_node: analyze_fundef(cst_node, debug),
  })()
