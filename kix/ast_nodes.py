"""
Abstract Syntax Tree node definitions for the Kix scripting language

Nodes are built once by the parser and never mutated afterwards. Every
expression built by the parser carries a ``node_id`` that is unique within
a session; the resolver keys its address table on it.
"""

from abc import ABC
from typing import Any, List

from kix.tokens import Token


# Base classes
class ASTNode(ABC):
    """Base class for all AST nodes"""


class Expression(ASTNode):
    """Base class for all expressions"""
    def __init__(self, node_id: int = -1):
        self.node_id = node_id


class Statement(ASTNode):
    """Base class for all statements"""


# Expressions
class LiteralExpression(Expression):
    def __init__(self, value: Any, node_id: int = -1):
        super().__init__(node_id)
        self.value = value


class VariableExpression(Expression):
    def __init__(self, name: Token, node_id: int = -1):
        super().__init__(node_id)
        self.name = name


class AssignExpression(Expression):
    def __init__(self, name: Token, value: Expression, node_id: int = -1):
        super().__init__(node_id)
        self.name = name
        self.value = value


class UnaryExpression(Expression):
    def __init__(self, operator: Token, operand: Expression, node_id: int = -1):
        super().__init__(node_id)
        self.operator = operator
        self.operand = operand


class BinaryExpression(Expression):
    def __init__(self, left: Expression, operator: Token, right: Expression, node_id: int = -1):
        super().__init__(node_id)
        self.left = left
        self.operator = operator
        self.right = right


class LogicalExpression(Expression):
    """'and' / 'or'; short-circuits and yields the deciding operand"""
    def __init__(self, left: Expression, operator: Token, right: Expression, node_id: int = -1):
        super().__init__(node_id)
        self.left = left
        self.operator = operator
        self.right = right


class TernaryExpression(Expression):
    def __init__(self, condition: Expression, then_branch: Expression,
                 else_branch: Expression, node_id: int = -1):
        super().__init__(node_id)
        self.condition = condition
        self.then_branch = then_branch
        self.else_branch = else_branch


class GroupingExpression(Expression):
    def __init__(self, expression: Expression, node_id: int = -1):
        super().__init__(node_id)
        self.expression = expression


class CallExpression(Expression):
    def __init__(self, callee: Expression, paren: Token, arguments: List[Expression],
                 node_id: int = -1):
        super().__init__(node_id)
        self.callee = callee
        self.paren = paren  # closing ')' for runtime error lines
        self.arguments = arguments


class NullExpression(Expression):
    """Fills an optional expression slot that was left empty"""


# Statements
class ExpressionStatement(Statement):
    def __init__(self, expression: Expression):
        self.expression = expression


class PrintStatement(Statement):
    def __init__(self, expression: Expression):
        self.expression = expression


class VarStatement(Statement):
    def __init__(self, name: Token, initializer: Expression):
        self.name = name
        self.initializer = initializer


class BlockStatement(Statement):
    def __init__(self, statements: List[Statement]):
        self.statements = statements


class IfStatement(Statement):
    def __init__(self, condition: Expression, then_branch: Statement, else_branch: Statement):
        self.condition = condition
        self.then_branch = then_branch
        self.else_branch = else_branch


class WhileStatement(Statement):
    def __init__(self, condition: Expression, body: Statement):
        self.condition = condition
        self.body = body


class FunctionStatement(Statement):
    def __init__(self, name: Token, params: List[Token], body: List[Statement]):
        self.name = name
        self.params = params
        self.body = body


class ReturnStatement(Statement):
    def __init__(self, keyword: Token, value: Expression):
        self.keyword = keyword
        self.value = value


class NullStatement(Statement):
    """No-op; stands in for statements that failed to parse"""


NULL_EXPRESSION = NullExpression()
NULL_STATEMENT = NullStatement()
