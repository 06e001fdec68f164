"""
Static scope resolver for the Kix scripting language

Walks the tree once before execution. Every reference to a local variable
is given an address (distance, slot): how many frames to walk up from the
current one, and the position of the binding inside that frame. Slots are
handed out in declaration order, which is the same order the interpreter
appends values to a frame. References that match no local scope are left
unresolved and looked up by name in the globals at run time.
"""

from enum import Enum, auto
from typing import Dict, List, Optional

from kix.ast_nodes import *
from kix.config import KixConfig, UnusedVariables
from kix.diagnostics import Reporter
from kix.errors import ResolveError
from kix.tokens import Token


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()


class Binding:
    """Bookkeeping for one declared name in one scope"""

    def __init__(self, token: Token, slot: int, is_function: bool = False):
        self.token = token
        self.slot = slot
        self.is_function = is_function
        self.defined = False
        self.used = False


class Scope:
    def __init__(self):
        self.bindings: Dict[str, Binding] = {}
        self.next_slot = 0

    def __contains__(self, name: str) -> bool:
        return name in self.bindings

    def get(self, name: str) -> Optional[Binding]:
        return self.bindings.get(name)

    def add(self, token: Token, is_function: bool) -> Binding:
        # A redeclaration still takes a fresh slot; the interpreter appends one too
        binding = Binding(token, self.next_slot, is_function)
        self.next_slot += 1
        self.bindings[token.lexeme] = binding
        return binding


class Resolver:
    def __init__(self, interpreter, reporter: Optional[Reporter] = None,
                 config: Optional[KixConfig] = None):
        self.interpreter = interpreter
        self.reporter = reporter or Reporter()
        self.config = config or KixConfig()
        self.scopes: List[Scope] = []  # the global scope is implicit
        self.current_function = FunctionType.NONE

    def resolve(self, statements: List[Statement]):
        for statement in statements:
            self.resolve_statement(statement)

    # Statements
    def resolve_statement(self, stmt: Statement):
        if isinstance(stmt, BlockStatement):
            self.begin_scope()
            self.resolve(stmt.statements)
            self.end_scope()
        elif isinstance(stmt, VarStatement):
            self.declare(stmt.name)
            self.resolve_expression(stmt.initializer)
            self.define(stmt.name)
        elif isinstance(stmt, FunctionStatement):
            # Bound before the body so the function can call itself
            self.declare(stmt.name, is_function=True)
            self.define(stmt.name)
            self.resolve_function(stmt, FunctionType.FUNCTION)
        elif isinstance(stmt, (ExpressionStatement, PrintStatement)):
            self.resolve_expression(stmt.expression)
        elif isinstance(stmt, IfStatement):
            self.resolve_expression(stmt.condition)
            self.resolve_statement(stmt.then_branch)
            self.resolve_statement(stmt.else_branch)
        elif isinstance(stmt, WhileStatement):
            self.resolve_expression(stmt.condition)
            self.resolve_statement(stmt.body)
        elif isinstance(stmt, ReturnStatement):
            if self.current_function == FunctionType.NONE:
                self.reporter.report(ResolveError.return_outside_function(stmt.keyword))
            self.resolve_expression(stmt.value)
        elif isinstance(stmt, NullStatement):
            pass
        else:
            raise TypeError(f"Unknown statement type: {type(stmt).__name__}")

    def resolve_function(self, function: FunctionStatement, function_type: FunctionType):
        enclosing_function = self.current_function
        self.current_function = function_type

        # Parameters and body share one scope, matching the call frame
        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()

        self.current_function = enclosing_function

    # Expressions
    def resolve_expression(self, expr: Expression):
        if isinstance(expr, VariableExpression):
            if self.scopes:
                binding = self.scopes[-1].get(expr.name.lexeme)
                if binding is not None and not binding.defined:
                    self.reporter.report(ResolveError.self_reference(expr.name))
            self.resolve_local(expr, expr.name, is_read=True)
        elif isinstance(expr, AssignExpression):
            self.resolve_expression(expr.value)
            self.resolve_local(expr, expr.name, is_read=False)
        elif isinstance(expr, (BinaryExpression, LogicalExpression)):
            self.resolve_expression(expr.left)
            self.resolve_expression(expr.right)
        elif isinstance(expr, UnaryExpression):
            self.resolve_expression(expr.operand)
        elif isinstance(expr, TernaryExpression):
            self.resolve_expression(expr.condition)
            self.resolve_expression(expr.then_branch)
            self.resolve_expression(expr.else_branch)
        elif isinstance(expr, GroupingExpression):
            self.resolve_expression(expr.expression)
        elif isinstance(expr, CallExpression):
            self.resolve_expression(expr.callee)
            for argument in expr.arguments:
                self.resolve_expression(argument)
        elif isinstance(expr, (LiteralExpression, NullExpression)):
            pass
        else:
            raise TypeError(f"Unknown expression type: {type(expr).__name__}")

    def resolve_local(self, expr: Expression, name: Token, is_read: bool):
        """Record the address of the innermost binding for name, if any"""
        for distance, scope in enumerate(reversed(self.scopes)):
            binding = scope.get(name.lexeme)
            if binding is not None:
                self.interpreter.resolve(expr, distance, binding.slot)
                if is_read:
                    binding.used = True
                return
        # Not found: global, looked up by name at run time

    # Scopes
    def begin_scope(self):
        self.scopes.append(Scope())

    def end_scope(self):
        self.check_unused(self.scopes[-1])
        self.scopes.pop()

    def check_unused(self, scope: Scope):
        if self.config.unused_variables == UnusedVariables.OFF:
            return
        for binding in scope.bindings.values():
            if binding.used:
                continue
            if binding.is_function and not self.config.include_functions:
                continue
            self.reporter.report(
                ResolveError.unused_variable(binding.token, self.config.unused_severity)
            )

    def declare(self, name: Token, is_function: bool = False):
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.reporter.report(ResolveError.duplicate_declaration(name))
        scope.add(name, is_function)

    def define(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1].get(name.lexeme).defined = True


def resolve(interpreter, statements: List[Statement], reporter: Optional[Reporter] = None,
            config: Optional[KixConfig] = None):
    """Resolve local variable addresses into interpreter's table"""
    Resolver(interpreter, reporter, config).resolve(statements)
