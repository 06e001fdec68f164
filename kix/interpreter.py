"""
Main interpreter for the Kix scripting language
"""

import math
import sys
import time
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, List, Optional, TextIO, Tuple

from kix.ast_nodes import *
from kix.diagnostics import Reporter
from kix.environment import Environment, GlobalEnvironment, KixCallable, KixFunction, NativeFunction
from kix.errors import InternalError, KixRuntimeError
from kix.tokens import Token, TokenType


class ControlSignal:
    """Outcome of executing a statement: carry on, or unwind with a return value"""
    __slots__ = ('returning', 'value')

    def __init__(self, returning: bool = False, value: Any = None):
        self.returning = returning
        self.value = value


NORMAL = ControlSignal()


def is_number(value: Any) -> bool:
    # bool is not a number in Kix, and Python's bool is not a float
    return isinstance(value, float)


def stringify(value: Any) -> str:
    """Render a runtime value for display"""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            # whole numbers in full, never in exponent form
            return format(value, ".0f")
        return repr(value)
    return str(value)


def format_rounded(number: float) -> str:
    """Render a number with no decimals, rounding halves away from zero"""
    if not math.isfinite(number):
        return stringify(number)
    with localcontext() as ctx:
        ctx.prec = 400  # enough digits for any finite double
        rounded = Decimal(number).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    if rounded == 0:
        return "0"
    return str(rounded)


def divide(left: float, right: float) -> float:
    """Division with IEEE results for a zero divisor"""
    try:
        return left / right
    except ZeroDivisionError:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)


class Interpreter:
    """Tree-walking interpreter that executes the AST"""

    def __init__(self, reporter: Optional[Reporter] = None, stream: Optional[TextIO] = None):
        self.reporter = reporter or Reporter()
        self.stream = stream
        self.globals = GlobalEnvironment()
        self.environment: Optional[Environment] = None  # None means global scope
        self.locals: Dict[int, Tuple[int, int]] = {}
        self.interrupt_requested = False  # set from another thread to stop a run

        self.define_built_ins()

    @property
    def output(self) -> TextIO:
        return self.stream or sys.stdout

    def define_built_ins(self):
        """Define built-in functions"""

        def clock(interpreter):
            return time.time() * 1000.0

        def print_value(interpreter, value):
            interpreter.output.write(stringify(value))
            return None

        def println_value(interpreter, value):
            interpreter.output.write(stringify(value) + "\n")
            return None

        self.globals.define("clock", NativeFunction("clock", 0, clock))
        self.globals.define("print", NativeFunction("print", 1, print_value))
        self.globals.define("println", NativeFunction("println", 1, println_value))

    def interpret(self, statements: List[Statement]):
        """Execute statements in order; the first runtime error ends the run"""
        try:
            for statement in statements:
                if self.execute(statement).returning:
                    break
        except KixRuntimeError as error:
            self.reporter.runtime_error(error)

    def interrupt(self):
        """Ask a run in progress to stop before its next statement"""
        self.interrupt_requested = True

    def resolve(self, expr: Expression, distance: int, slot: int):
        """Record a local variable address computed by the resolver"""
        self.locals[expr.node_id] = (distance, slot)

    # Statements
    def execute(self, stmt: Statement) -> ControlSignal:
        """Execute a statement"""
        if self.interrupt_requested:
            self.interrupt_requested = False
            raise KeyboardInterrupt

        if isinstance(stmt, ExpressionStatement):
            self.evaluate(stmt.expression)
        elif isinstance(stmt, PrintStatement):
            self.output.write(stringify(self.evaluate(stmt.expression)) + "\n")
        elif isinstance(stmt, VarStatement):
            self.define(stmt.name, self.evaluate(stmt.initializer))
        elif isinstance(stmt, BlockStatement):
            return self.execute_block(stmt.statements, Environment(self.environment))
        elif isinstance(stmt, IfStatement):
            if self.is_truthy(self.evaluate(stmt.condition)):
                return self.execute(stmt.then_branch)
            return self.execute(stmt.else_branch)
        elif isinstance(stmt, WhileStatement):
            return self.execute_while_statement(stmt)
        elif isinstance(stmt, FunctionStatement):
            self.define(stmt.name, KixFunction(stmt, self.environment))
        elif isinstance(stmt, ReturnStatement):
            return ControlSignal(True, self.evaluate(stmt.value))
        elif isinstance(stmt, NullStatement):
            pass
        else:
            raise TypeError(f"Unknown statement type: {type(stmt).__name__}")
        return NORMAL

    def execute_while_statement(self, stmt: WhileStatement) -> ControlSignal:
        while self.is_truthy(self.evaluate(stmt.condition)):
            signal = self.execute(stmt.body)
            if signal.returning:
                return signal
        return NORMAL

    def execute_block(self, statements: List[Statement], environment: Environment) -> ControlSignal:
        """Execute a list of statements in a given environment"""
        previous = self.environment
        try:
            self.environment = environment

            for statement in statements:
                signal = self.execute(statement)
                if signal.returning:
                    return signal
            return NORMAL
        finally:
            self.environment = previous

    def define(self, name: Token, value: Any):
        """Bind a new name in the current scope; shadowing was checked statically"""
        if self.environment is None:
            self.globals.define(name.lexeme, value)
        else:
            self.environment.define(value)

    # Expressions
    def evaluate(self, expr: Expression) -> Any:
        """Evaluate an expression"""
        if isinstance(expr, LiteralExpression):
            return expr.value
        elif isinstance(expr, VariableExpression):
            return self.look_up_variable(expr.name, expr)
        elif isinstance(expr, AssignExpression):
            return self.evaluate_assign_expression(expr)
        elif isinstance(expr, BinaryExpression):
            return self.evaluate_binary_expression(expr)
        elif isinstance(expr, UnaryExpression):
            return self.evaluate_unary_expression(expr)
        elif isinstance(expr, LogicalExpression):
            return self.evaluate_logical_expression(expr)
        elif isinstance(expr, TernaryExpression):
            # Only the taken branch is evaluated
            if self.is_truthy(self.evaluate(expr.condition)):
                return self.evaluate(expr.then_branch)
            return self.evaluate(expr.else_branch)
        elif isinstance(expr, GroupingExpression):
            return self.evaluate(expr.expression)
        elif isinstance(expr, CallExpression):
            return self.evaluate_call_expression(expr)
        elif isinstance(expr, NullExpression):
            return None
        else:
            raise TypeError(f"Unknown expression type: {type(expr).__name__}")

    def look_up_variable(self, name: Token, expr: Expression) -> Any:
        address = self.locals.get(expr.node_id)
        if address is None:
            return self.globals.get(name)

        distance, slot = address
        if self.environment is None:
            raise InternalError.unresolved_slot(name, distance, slot)
        return self.environment.get_at(distance, slot, name)

    def evaluate_assign_expression(self, expr: AssignExpression) -> Any:
        value = self.evaluate(expr.value)

        address = self.locals.get(expr.node_id)
        if address is None:
            self.globals.assign(expr.name, value)
            return value

        distance, slot = address
        if self.environment is None:
            raise InternalError.unresolved_slot(expr.name, distance, slot)
        self.environment.assign_at(distance, slot, expr.name, value)
        return value

    def evaluate_binary_expression(self, expr: BinaryExpression) -> Any:
        """Evaluate binary expression; both operands are evaluated left to right"""
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator
        kind = operator.type

        if kind == TokenType.PLUS:
            return self.add(operator, left, right)
        elif kind == TokenType.BANG_EQUAL:
            return not self.is_equal(left, right)
        elif kind == TokenType.EQUAL_EQUAL:
            return self.is_equal(left, right)

        self.check_number_operands(operator, left, right)
        if kind == TokenType.MINUS:
            return left - right
        elif kind == TokenType.STAR:
            return left * right
        elif kind == TokenType.SLASH:
            return divide(left, right)
        elif kind == TokenType.GREATER:
            return left > right
        elif kind == TokenType.GREATER_EQUAL:
            return left >= right
        elif kind == TokenType.LESS:
            return left < right
        elif kind == TokenType.LESS_EQUAL:
            return left <= right

        raise TypeError(f"Unknown binary operator: {operator.lexeme}")

    def add(self, operator: Token, left: Any, right: Any) -> Any:
        """'+' on numbers adds; with a string on either side it concatenates"""
        if is_number(left) and is_number(right):
            return left + right
        if isinstance(left, str) and isinstance(right, str):
            return left + right
        if isinstance(left, str) and is_number(right):
            return left + format_rounded(right)
        if is_number(left) and isinstance(right, str):
            return format_rounded(left) + right

        raise KixRuntimeError.invalid_plus_operands(operator, stringify(left), stringify(right))

    def evaluate_unary_expression(self, expr: UnaryExpression) -> Any:
        """Evaluate unary expression"""
        operand = self.evaluate(expr.operand)

        if expr.operator.type == TokenType.MINUS:
            self.check_number_operand(expr.operator, operand)
            return -operand
        elif expr.operator.type == TokenType.BANG:
            return not self.is_truthy(operand)

        raise TypeError(f"Unknown unary operator: {expr.operator.lexeme}")

    def evaluate_logical_expression(self, expr: LogicalExpression) -> Any:
        """Evaluate logical expression; yields the operand that decided it"""
        left = self.evaluate(expr.left)

        if expr.operator.type == TokenType.OR:
            if self.is_truthy(left):
                return left
        elif not self.is_truthy(left):
            return left

        return self.evaluate(expr.right)

    def evaluate_call_expression(self, expr: CallExpression) -> Any:
        """Evaluate function call"""
        callee = self.evaluate(expr.callee)

        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, KixCallable):
            raise KixRuntimeError.not_callable(expr.paren)

        if len(arguments) != callee.arity():
            raise KixRuntimeError.wrong_arity(expr.paren, callee.arity(), len(arguments))

        return callee.call(self, arguments)

    # Helpers
    def is_truthy(self, value: Any) -> bool:
        """nil and false are falsy; everything else, 0 and "" included, is truthy"""
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        return True

    def is_equal(self, a: Any, b: Any) -> bool:
        """Check equality; nil equals only nil and values of different types never match"""
        if a is None and b is None:
            return True
        if a is None or b is None:
            return False
        if type(a) is not type(b):
            return False
        return a == b

    def check_number_operand(self, operator: Token, operand: Any):
        """Check that operand is a number"""
        if not is_number(operand):
            raise KixRuntimeError.operand_must_be_number(operator)

    def check_number_operands(self, operator: Token, left: Any, right: Any):
        """Check that both operands are numbers"""
        if not is_number(left) or not is_number(right):
            raise KixRuntimeError.operand_must_be_number(operator)
