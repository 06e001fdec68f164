"""
Recursive descent parser for the Kix scripting language
"""

import itertools
from typing import Callable, Iterator, List, Optional

from kix.tokens import Token, TokenType
from kix.ast_nodes import *
from kix.errors import ParseError
from kix.diagnostics import Reporter

MAX_PARAMETERS = 255
MAX_ARGUMENTS = 255

# Tokens that plausibly begin a new statement after an error
STATEMENT_STARTS = (
    TokenType.CLASS, TokenType.FUN, TokenType.VAR, TokenType.FOR,
    TokenType.IF, TokenType.WHILE, TokenType.PRINT, TokenType.RETURN,
)


class Parser:
    def __init__(self, tokens: List[Token], reporter: Optional[Reporter] = None,
                 node_ids: Optional[Iterator[int]] = None):
        self.tokens = tokens
        self.reporter = reporter or Reporter()
        self.node_ids = node_ids if node_ids is not None else itertools.count()
        self.current = 0

    def parse(self) -> List[Statement]:
        """Parse tokens into a list of statements"""
        statements = []
        while not self.is_at_end():
            statements.append(self.declaration())
        return statements

    def next_id(self) -> int:
        return next(self.node_ids)

    def declaration(self) -> Statement:
        """Parse declarations (fun, var) or fall through to a statement"""
        try:
            if self.match(TokenType.FUN):
                return self.function_declaration("function")
            if self.match(TokenType.VAR):
                return self.var_declaration()

            return self.statement()
        except ParseError:
            # Already reported; skip to a likely statement boundary
            self.synchronize()
            return NULL_STATEMENT

    def function_declaration(self, kind: str) -> FunctionStatement:
        """Parse a named function with its parameter list and body"""
        name = self.consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self.consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_PARAMETERS:
                    self.reporter.report(ParseError.too_many_parameters(self.peek(), MAX_PARAMETERS))
                params.append(self.consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self.match(TokenType.COMMA):
                    break

        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")
        self.consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        return FunctionStatement(name, params, self.block())

    def var_declaration(self) -> VarStatement:
        """Parse variable declaration"""
        name = self.consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = NULL_EXPRESSION
        if self.match(TokenType.EQUAL):
            initializer = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return VarStatement(name, initializer)

    def statement(self) -> Statement:
        """Parse statements"""
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.RETURN):
            return self.return_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.LEFT_BRACE):
            return BlockStatement(self.block())

        return self.expression_statement()

    def for_statement(self) -> Statement:
        """Parse a for loop and desugar it into a while loop"""
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TokenType.SEMICOLON):
            initializer = NULL_STATEMENT
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        else:
            condition = LiteralExpression(True, self.next_id())
        self.consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = NULL_STATEMENT
        if not self.check(TokenType.RIGHT_PAREN):
            increment = ExpressionStatement(self.expression())
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()

        # { initializer; while (condition) { body; increment; } }
        loop = WhileStatement(condition, BlockStatement([body, increment]))
        return BlockStatement([initializer, loop])

    def if_statement(self) -> IfStatement:
        """Parse if statement"""
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = NULL_STATEMENT
        if self.match(TokenType.ELSE):
            else_branch = self.statement()

        return IfStatement(condition, then_branch, else_branch)

    def print_statement(self) -> PrintStatement:
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return PrintStatement(value)

    def return_statement(self) -> ReturnStatement:
        """Parse return statement"""
        keyword = self.previous()
        value = NULL_EXPRESSION
        if not self.check(TokenType.SEMICOLON):
            value = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return ReturnStatement(keyword, value)

    def while_statement(self) -> WhileStatement:
        """Parse while loop"""
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")

        return WhileStatement(condition, self.statement())

    def block(self) -> List[Statement]:
        """Parse declarations up to the closing brace"""
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            statements.append(self.declaration())

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def expression_statement(self) -> ExpressionStatement:
        """Parse expression statement"""
        expr = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ExpressionStatement(expr)

    def expression(self) -> Expression:
        """Parse expression"""
        return self.assignment()

    def assignment(self) -> Expression:
        """Parse assignment expression"""
        expr = self.ternary()

        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, VariableExpression):
                return AssignExpression(expr.name, value, self.next_id())

            # Reported but not raised: the parser is not confused
            self.reporter.report(ParseError.invalid_assignment_target(equals))

        return expr

    def ternary(self) -> Expression:
        """Parse cond ? a : b"""
        expr = self.logical_or()

        if self.match(TokenType.QUESTION_MARK):
            then_branch = self.expression()
            self.consume(TokenType.COLON, "Expect ':' after then branch of conditional.")
            else_branch = self.expression()
            return TernaryExpression(expr, then_branch, else_branch, self.next_id())

        return expr

    def logical_or(self) -> Expression:
        """Parse logical OR expression"""
        expr = self.logical_and()

        while self.match(TokenType.OR):
            operator = self.previous()
            right = self.logical_and()
            expr = LogicalExpression(expr, operator, right, self.next_id())

        return expr

    def logical_and(self) -> Expression:
        """Parse logical AND expression"""
        expr = self.equality()

        while self.match(TokenType.AND):
            operator = self.previous()
            right = self.equality()
            expr = LogicalExpression(expr, operator, right, self.next_id())

        return expr

    def equality(self) -> Expression:
        return self.left_associative(self.comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def comparison(self) -> Expression:
        return self.left_associative(self.term, TokenType.GREATER, TokenType.GREATER_EQUAL,
                                     TokenType.LESS, TokenType.LESS_EQUAL)

    def term(self) -> Expression:
        return self.left_associative(self.factor, TokenType.MINUS, TokenType.PLUS)

    def factor(self) -> Expression:
        return self.left_associative(self.unary, TokenType.SLASH, TokenType.STAR)

    def left_associative(self, operand: Callable[[], Expression], *types: TokenType) -> Expression:
        """Parse a left-associative chain of binary operators"""
        expr = operand()

        while self.match(*types):
            operator = self.previous()
            right = operand()
            expr = BinaryExpression(expr, operator, right, self.next_id())

        return expr

    def unary(self) -> Expression:
        """Parse unary expressions"""
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            right = self.unary()
            return UnaryExpression(operator, right, self.next_id())

        return self.call()

    def call(self) -> Expression:
        """Parse function calls, including chained calls like f()()"""
        expr = self.primary()

        while self.match(TokenType.LEFT_PAREN):
            expr = self.finish_call(expr)

        return expr

    def finish_call(self, callee: Expression) -> CallExpression:
        """Parse function call arguments"""
        arguments = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.reporter.report(ParseError.too_many_arguments(self.peek(), MAX_ARGUMENTS))
                arguments.append(self.expression())
                if not self.match(TokenType.COMMA):
                    break

        paren = self.consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return CallExpression(callee, paren, arguments, self.next_id())

    def primary(self) -> Expression:
        """Parse primary expressions"""
        if self.match(TokenType.FALSE):
            return LiteralExpression(False, self.next_id())

        if self.match(TokenType.TRUE):
            return LiteralExpression(True, self.next_id())

        if self.match(TokenType.NIL):
            return LiteralExpression(None, self.next_id())

        if self.match(TokenType.NUMBER, TokenType.STRING):
            return LiteralExpression(self.previous().literal, self.next_id())

        if self.match(TokenType.IDENTIFIER):
            return VariableExpression(self.previous(), self.next_id())

        if self.match(TokenType.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return GroupingExpression(expr, self.next_id())

        raise self.error(ParseError.expected_expression(self.peek()))

    # Utility methods
    def match(self, *types: TokenType) -> bool:
        """Check if current token matches any of the given types"""
        for token_type in types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def check(self, token_type: TokenType) -> bool:
        """Check if current token is of given type"""
        if self.is_at_end():
            return False
        return self.peek().type == token_type

    def advance(self) -> Token:
        """Consume current token and return it"""
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self) -> bool:
        """Check if we're at the end of tokens"""
        return self.peek().type == TokenType.EOF

    def peek(self) -> Token:
        """Return current token without advancing"""
        return self.tokens[self.current]

    def previous(self) -> Token:
        """Return previous token"""
        return self.tokens[self.current - 1]

    def consume(self, token_type: TokenType, message: str) -> Token:
        """Consume token of expected type or raise error"""
        if self.check(token_type):
            return self.advance()

        raise self.error(ParseError.expected(self.peek(), message))

    def error(self, error: ParseError) -> ParseError:
        """Report a syntax error and hand it back for the caller to raise"""
        self.reporter.report(error)
        return error

    def synchronize(self):
        """Recover from parse error by finding next statement"""
        self.advance()

        while not self.is_at_end():
            if self.previous().type == TokenType.SEMICOLON:
                return

            if self.peek().type in STATEMENT_STARTS:
                return

            self.advance()


def parse(tokens: List[Token], reporter: Optional[Reporter] = None,
          node_ids: Optional[Iterator[int]] = None) -> List[Statement]:
    """Parse tokens into statements, reporting syntax errors to reporter"""
    return Parser(tokens, reporter, node_ids).parse()
