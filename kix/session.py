"""
Runs Kix source text through the whole pipeline
"""

import itertools
from typing import List, Optional, TextIO

from kix.ast_nodes import Statement
from kix.ast_printer import AstPrinter
from kix.config import KixConfig
from kix.diagnostics import Reporter
from kix.interpreter import Interpreter
from kix.lexer import scan
from kix.parser import parse
from kix.resolver import resolve


class Session:
    """One interpreter plus its diagnostics, shared by every run.

    Globals, closures and resolved addresses persist from one ``run`` to
    the next, which is what the interactive prompt relies on. Node ids come
    from a single counter so a later parse never reuses an earlier address.
    """

    def __init__(self, config: Optional[KixConfig] = None, reporter: Optional[Reporter] = None,
                 stream: Optional[TextIO] = None):
        self.config = config or KixConfig()
        self.reporter = reporter or Reporter(self.config.make_formatter())
        self.stream = stream
        self.interpreter = Interpreter(self.reporter, stream)
        self.node_ids = itertools.count()

    def compile(self, source: str) -> Optional[List[Statement]]:
        """Scan, parse and resolve; None if any stage reported an error"""
        tokens = scan(source, self.reporter)
        statements = parse(tokens, self.reporter, self.node_ids)
        if self.reporter.had_error:
            return None

        if self.config.print_ast:
            self.interpreter.output.write(AstPrinter().print(statements) + "\n")

        resolve(self.interpreter, statements, self.reporter, self.config)
        if self.reporter.had_error:
            return None
        return statements

    def run(self, source: str):
        statements = self.compile(source)
        if statements is not None:
            self.interpreter.interpret(statements)
