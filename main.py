"""
F1WAE - Main Entry Point
Arithmetic with local bindings and first-order functions
"""

import sys
import argparse
import os
from typing import List, Optional

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from error_handling import F1WAEError, F1WAESyntaxError
from parsing import create_parser, pretty_print_cst
from semantics import (
    analyze_fundefs, create_analyzer, is_fundef_form, parse, parse_fundefs, show_expr, show_fundef
)
from interpreter import STRATEGIES, build_table, create_interpreter
from utilities import truncate

VERSION = "F1WAE v0.1.0"


# ============================================================================
# PROGRAM ENTRY POINT
# ============================================================================

def run(program_text: str, fundefs_text: str = "", strategy: str = 'environment',
        debug: bool = False) -> int:
  """
  Parse the function definitions and the program, then evaluate the program.
  Raises an F1WAEError subclass on any syntax or evaluation error.
  """
  table = build_table(parse_fundefs(fundefs_text, "<fundefs>", debug))
  expr = parse(program_text, "<program>", debug)
  interpreter = create_interpreter(strategy, debug)
  return interpreter(expr, table)


# ============================================================================
# COMMAND LINE
# ============================================================================

def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='f1wae',
      description='F1WAE - arithmetic with local bindings and first-order functions',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.f1wae                    # Run every expression of a script
  %(prog)s --defs lib.f1wae script.f1wae   # Load extra function definitions
  %(prog)s --strategy substitution s.f1wae # Use the substitution evaluator
  %(prog)s --parse script.f1wae            # Show the parsed forms
  %(prog)s -i                              # Interactive mode
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='F1WAE script file to execute'
  )

  parser.add_argument(
      '--defs',
      action='append',
      default=[],
      metavar='FILE',
      help='File of {deffun ...} forms to load before the script (repeatable)'
  )

  parser.add_argument(
      '--strategy',
      choices=STRATEGIES,
      default='environment',
      help='Evaluation strategy (default: environment)'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show the forms instead of evaluating'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def load_fundef_files(paths: List[str], debug: bool = False) -> list:
  """Parse every --defs file in order"""
  parser = create_parser(debug)
  fundefs = []
  for path in paths:
    fundefs.extend(analyze_fundefs(parser.parse_file(path), debug))
  return fundefs


def report_error(script_path: str, e: Exception) -> None:
  if isinstance(e, F1WAEError):
    print(f"Error in '{script_path}': {e}")
  elif isinstance(e, RecursionError):
    print(f"Error in '{script_path}': recursion too deep (nesting or non-terminating recursion)")
  elif isinstance(e, FileNotFoundError):
    print(f"Error: File '{e.filename}' not found")
    print(f"  Hint: Check the file path and make sure the file exists")
  elif isinstance(e, PermissionError):
    print(f"Error: Permission denied reading '{e.filename}'")
  else:
    print(f"Unexpected error while processing '{script_path}': {e}")


def parse_file(script_path: str, defs_paths: List[str], debug: bool = False) -> int:
  """Parse a script and show each top-level form"""
  try:
    parser = create_parser(debug)
    analyzer = create_analyzer(debug)
    fundefs = load_fundef_files(defs_paths, debug)
    cst_nodes = parser.parse_file(script_path)
    if debug:
      for cst in cst_nodes:
        print(pretty_print_cst(cst), end="")
    script_fundefs, exprs = analyzer.analyze(cst_nodes)

    print(f"Parsed {len(fundefs) + len(script_fundefs)} definitions and {len(exprs)} expressions")
    for fundef in fundefs + script_fundefs:
      print(show_fundef(fundef))
    for expr in exprs:
      print(show_expr(expr))
    return 0
  except (F1WAEError, OSError, RecursionError) as e:
    report_error(script_path, e)
    if debug:
      import traceback
      traceback.print_exc()
    return 1


def run_script_file(script_path: str, defs_paths: List[str], strategy: str = 'environment',
                    debug: bool = False) -> int:
  """Run every expression of a script, printing each result"""
  try:
    parser = create_parser(debug)
    analyzer = create_analyzer(debug)
    interpreter = create_interpreter(strategy, debug)

    fundefs = load_fundef_files(defs_paths, debug)
    script_fundefs, exprs = analyzer.analyze(parser.parse_file(script_path))
    table = build_table(fundefs + script_fundefs)
    if debug:
      print(f"Loaded {len(table)} function definitions, {len(exprs)} expressions")

    for expr in exprs:
      print(interpreter(expr, table))
    return 0
  except (F1WAEError, OSError, RecursionError) as e:
    report_error(script_path, e)
    if debug:
      import traceback
      traceback.print_exc()
    return 1


# ============================================================================
# INTERACTIVE MODE
# ============================================================================

def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser("~/.f1wae_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(1000)

  completions = ["with", "if0", "deffun", ":defs", ":parse", ":help", "exit"]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def show_help() -> None:
  print("REPL Commands:")
  print("  :parse <expr>     - Show the parsed expression")
  print("  :defs             - Show the function definitions of this session")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Language:")
  print("  {+ 1 2}                          - Arithmetic (+ and -)")
  print("  {with {x 5} {+ x x}}             - Local binding")
  print("  {if0 x 1 2}                      - 1 when x is 0, else 2")
  print("  {deffun {double n} {+ n n}}      - Function definition")
  print("  {double 4}                       - Function call")


def run_interactive_mode(strategy: str = 'environment', defs_paths: Optional[List[str]] = None,
                         debug: bool = False) -> int:
  """Run F1WAE in interactive mode"""
  print(f"{VERSION} - Interactive Mode ({strategy} evaluator)")
  print("Type 'exit' to quit, ':help' for commands")
  print()

  setup_readline()

  parser = create_parser(debug)
  analyzer = create_analyzer(debug)
  interpreter = create_interpreter(strategy, debug)

  try:
    fundefs = load_fundef_files(defs_paths or [], debug)
  except (F1WAEError, OSError) as e:
    report_error("--defs", e)
    return 1

  while True:
    try:
      code = input("f1wae> ").strip()
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      return 0

    if code == "exit":
      return 0
    if not code:
      continue

    if code == ":help":
      show_help()
      continue

    if code == ":defs":
      if fundefs:
        for fundef in fundefs:
          print(f"  {truncate(show_fundef(fundef), 72)}")
      else:
        print("  (no function definitions)")
      continue

    try:
      if code.startswith(":parse "):
        print(show_expr(analyzer.analyze_expression(parser.parse_expression(code[7:]))))
        continue

      cst = parser.parse_expression(code)
      if is_fundef_form(cst):
        fundef = analyzer.analyze_fundef(cst)
        if any(existing.name == fundef.name for existing in fundefs):
          print(f"Function '{fundef.name}' is already defined; the earlier definition stays in effect")
        else:
          fundefs.append(fundef)
          print(f"Defined function: {fundef.name}")
      else:
        expr = analyzer.analyze_expression(cst)
        print(f"=> {interpreter(expr, build_table(fundefs))}")
    except F1WAESyntaxError as e:
      print(f"Syntax error: {e}")
    except F1WAEError as e:
      print(f"Runtime error: {e}")
    except RecursionError:
      print("Runtime error: recursion too deep")


def main(argv: Optional[List[str]] = None) -> int:
  """Main entry point for F1WAE"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.script:
    if args.parse:
      return parse_file(args.script, args.defs, debug=args.debug)
    return run_script_file(args.script, args.defs, args.strategy, debug=args.debug)

  if args.interactive:
    return run_interactive_mode(args.strategy, args.defs, debug=args.debug)

  arg_parser.print_help()
  return 0


if __name__ == "__main__":
  sys.exit(main())
