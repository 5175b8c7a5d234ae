"""
Utilities module for the F1WAE interpreter
Contains common helper functions shared by the analyzer, both evaluators and the CLI
"""

from typing import Any, Callable, Dict, Optional
import operator


# ==================== RESERVED WORDS ====================

# Heads of the special forms; none of them may name an identifier or function
RESERVED_WORDS = frozenset({'+', '-', 'with', 'if0', 'deffun'})


def is_reserved(name: str) -> bool:
  """Check if a symbol is one of the special-form keywords"""
  return name in RESERVED_WORDS


# ==================== ARITHMETIC ====================

ARITHMETIC_OPERATORS: Dict[str, Callable[[int, int], int]] = {
    '+': operator.add,
    '-': operator.sub,
}


def apply_arithmetic(op_name: str, left: int, right: int) -> int:
  """
  Combine two evaluated operands with a binary arithmetic operator

  Args:
    op_name: Operator symbol ('+' or '-')
    left: Left operand value
    right: Right operand value

  Returns:
    The integer result

  Examples:
    apply_arithmetic('+', 1, 2) -> 3
    apply_arithmetic('-', 1, 2) -> -1
  """
  return ARITHMETIC_OPERATORS[op_name](left, right)


# ==================== DISPLAY ====================

def truncate(text: str, limit: int = 60) -> str:
  """Shorten text for one-line display"""
  if len(text) > limit:
    return text[:limit - 3] + "..."
  return text


def format_env(env: Optional[Dict[str, Any]]) -> str:
  """
  Render a runtime environment chain innermost-first

  Examples:
    format_env(<x=3 -> y=4 -> empty>) -> "[x=3, y=4]"
  """
  parts = []
  current = env
  while current is not None:
    for name, value in current['bindings'].items():
      parts.append(f"{name}={value}")
    current = current['parent']
  return "[" + ", ".join(parts) + "]"
