"""
Kix Programming Language Interpreter
Usage: kix [options] [script]
"""

import argparse
import sys
import threading
from typing import List, Optional

from kix import __version__
from kix.config import KixConfig
from kix.errors import InternalError
from kix.session import Session

EXIT_OK = 0
EXIT_COMPILE_ERROR = 65  # EX_DATAERR
EXIT_NO_INPUT = 66       # EX_NOINPUT
EXIT_RUNTIME_ERROR = 70  # EX_SOFTWARE

# Each interpreted call costs several host frames; runs get a thread
# whose stack is large enough for the raised limit
RECURSION_LIMIT = 100_000
RUN_STACK_SIZE = 512 * 1024 * 1024


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kix", description="Run a Kix script, or start the interactive prompt."
    )
    parser.add_argument("file", help="script to run (if empty, goes to interactive mode)", nargs="?")
    parser.add_argument("--print-ast", action="store_true",
                        help="print the parsed syntax tree before running")
    parser.add_argument("--explain", action="store_true",
                        help="show error codes and hints under diagnostics")
    parser.add_argument("--color", choices=["auto", "always", "never"], default="auto",
                        help="colorize diagnostics (default: auto)")
    parser.add_argument("--unused", choices=["off", "warn", "error"], default="warn",
                        help="how to treat local variables that are never read (default: warn)")
    parser.add_argument("--unused-functions", action="store_true",
                        help="also check local function names for use")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def report_fatal(message: str):
    print(message, file=sys.stderr)


def run_source(session: Session, source: str):
    """Run source on a worker thread sized for deep interpreted recursion.

    Exceptions raised by the run, RecursionError included, are re-raised
    in the calling thread. Ctrl-C while waiting asks the interpreter to
    stop and is re-raised once the worker has unwound.
    """
    failures = []

    def target():
        try:
            session.run(source)
        except BaseException as e:
            failures.append(e)

    session.interpreter.interrupt_requested = False
    previous = threading.stack_size(RUN_STACK_SIZE)
    try:
        worker = threading.Thread(target=target, name="kix-run", daemon=True)
        worker.start()
    finally:
        threading.stack_size(previous)

    try:
        worker.join()
    except KeyboardInterrupt:
        session.interpreter.interrupt()
        worker.join()
        session.interpreter.interrupt_requested = False
        if not failures:
            raise

    if failures:
        raise failures[0]


def run_file(filename: str, config: KixConfig) -> int:
    """Run a Kix program from a file and return the process exit code"""
    try:
        with open(filename, 'r', encoding='utf-8') as f:
            source = f.read()
    except (OSError, UnicodeDecodeError) as e:
        report_fatal(f"Could not read file '{filename}': {e}")
        return EXIT_NO_INPUT

    session = Session(config)
    try:
        run_source(session, source)
    except RecursionError:
        report_fatal("Fatal: stack overflow.")
        return EXIT_RUNTIME_ERROR
    except InternalError as e:
        report_fatal(f"Internal Error: {e}")
        return EXIT_RUNTIME_ERROR

    if session.reporter.had_error:
        return EXIT_COMPILE_ERROR
    if session.reporter.had_runtime_error:
        return EXIT_RUNTIME_ERROR
    return EXIT_OK


def run_interactive(config: KixConfig) -> int:
    """Run Kix in interactive mode; state persists between lines"""
    session = Session(config)

    while True:
        try:
            line = input("> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("\nUse 'exit' or Ctrl-D to quit.")
            continue

        if line.strip() == 'exit':
            break
        if line.strip() == '':
            continue

        try:
            run_source(session, line)
        except RecursionError:
            report_fatal("Fatal: stack overflow.")
            return EXIT_RUNTIME_ERROR
        except InternalError as e:
            report_fatal(f"Internal Error: {e}")
            return EXIT_RUNTIME_ERROR
        except KeyboardInterrupt:
            print("\nInterrupted.")

        # A mistake on one line must not poison the next
        session.reporter.reset()

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))
    config = KixConfig.from_args(args)

    if args.file is None:
        return run_interactive(config)
    return run_file(args.file, config)


if __name__ == "__main__":
    sys.exit(main())
