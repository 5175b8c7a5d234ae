"""
Test configuration for F1WAE tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from semantics import parse_fundefs
from interpreter import build_table


FIB_DEFS = """
{deffun {fib n}
  {if0 n 0 {if0 {- n 1} 1 {+ {fib {- n 1}} {fib {- n 2}}}}}}
"""

PARITY_DEFS = """
{deffun {even? n} {if0 n 1 {odd? {- n 1}}}}
{deffun {odd? n} {if0 n 0 {even? {- n 1}}}}
"""


@pytest.fixture
def examples_dir():
  """Get the examples directory path"""
  return project_root / "examples"


@pytest.fixture
def fib_table():
  return build_table(parse_fundefs(FIB_DEFS))


@pytest.fixture
def parity_table():
  return build_table(parse_fundefs(PARITY_DEFS))
