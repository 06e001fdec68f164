"""
Debug pretty-printer for Kix syntax trees
Renders each statement as one fully parenthesised line
"""

from typing import List

from kix.ast_nodes import *
from kix.interpreter import stringify


class AstPrinter:
    def print(self, statements: List[Statement]) -> str:
        """Render statements, one line each"""
        return "\n".join(self.print_statement(statement) for statement in statements)

    def print_statement(self, stmt: Statement) -> str:
        if isinstance(stmt, ExpressionStatement):
            return self.parenthesize(";", stmt.expression)
        elif isinstance(stmt, PrintStatement):
            return self.parenthesize("print", stmt.expression)
        elif isinstance(stmt, VarStatement):
            return self.parenthesize("var", stmt.name.lexeme, stmt.initializer)
        elif isinstance(stmt, BlockStatement):
            return self.parenthesize("block", *stmt.statements)
        elif isinstance(stmt, IfStatement):
            return self.parenthesize("if", stmt.condition, stmt.then_branch, stmt.else_branch)
        elif isinstance(stmt, WhileStatement):
            return self.parenthesize("while", stmt.condition, stmt.body)
        elif isinstance(stmt, FunctionStatement):
            params = "(" + " ".join(param.lexeme for param in stmt.params) + ")"
            return self.parenthesize("fun", stmt.name.lexeme, params, *stmt.body)
        elif isinstance(stmt, ReturnStatement):
            return self.parenthesize("return", stmt.value)
        elif isinstance(stmt, NullStatement):
            return "nil"
        raise TypeError(f"Unknown statement type: {type(stmt).__name__}")

    def print_expression(self, expr: Expression) -> str:
        if isinstance(expr, LiteralExpression):
            if isinstance(expr.value, str):
                return f'"{expr.value}"'
            return stringify(expr.value)
        elif isinstance(expr, VariableExpression):
            return expr.name.lexeme
        elif isinstance(expr, AssignExpression):
            return self.parenthesize("assign", expr.name.lexeme, expr.value)
        elif isinstance(expr, (BinaryExpression, LogicalExpression)):
            return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)
        elif isinstance(expr, UnaryExpression):
            return self.parenthesize(expr.operator.lexeme, expr.operand)
        elif isinstance(expr, TernaryExpression):
            return self.parenthesize("ternary", expr.condition, expr.then_branch, expr.else_branch)
        elif isinstance(expr, GroupingExpression):
            return self.parenthesize("group", expr.expression)
        elif isinstance(expr, CallExpression):
            return self.parenthesize("call", expr.callee, *expr.arguments)
        elif isinstance(expr, NullExpression):
            return "nil"
        raise TypeError(f"Unknown expression type: {type(expr).__name__}")

    def parenthesize(self, name: str, *parts) -> str:
        rendered = [name]
        for part in parts:
            if isinstance(part, str):
                rendered.append(part)
            elif isinstance(part, Statement):
                rendered.append(self.print_statement(part))
            else:
                rendered.append(self.print_expression(part))
        return "(" + " ".join(rendered) + ")"
