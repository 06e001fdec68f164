"""
Error handling for the Kix scripting language
Diagnostics, error codes and the exception hierarchy shared by every stage
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional

from kix.tokens import Token, TokenType


class Severity(Enum):
    """Error severity levels"""
    ERROR = "error"
    WARNING = "warning"


class ErrorCode:
    """Error code constants"""
    # Lexical errors (KIX1xxx)
    UNEXPECTED_CHARACTER = "KIX1001"
    UNTERMINATED_STRING = "KIX1002"
    UNTERMINATED_COMMENT = "KIX1003"

    # Syntax errors (KIX2xxx)
    EXPECTED_TOKEN = "KIX2001"
    EXPECTED_EXPRESSION = "KIX2002"
    INVALID_ASSIGNMENT_TARGET = "KIX2003"
    TOO_MANY_PARAMETERS = "KIX2004"
    TOO_MANY_ARGUMENTS = "KIX2005"

    # Resolution errors (KIX3xxx)
    SELF_REFERENCE = "KIX3001"
    DUPLICATE_DECLARATION = "KIX3002"
    RETURN_OUTSIDE_FUNCTION = "KIX3003"
    UNUSED_VARIABLE = "KIX3004"

    # Runtime type errors (KIX4xxx)
    OPERAND_NOT_NUMBER = "KIX4001"
    INVALID_PLUS_OPERANDS = "KIX4002"

    # Runtime name and call errors (KIX5xxx)
    UNDEFINED_VARIABLE = "KIX5001"
    NOT_CALLABLE = "KIX5002"
    WRONG_ARITY = "KIX5003"

    # Internal errors (KIX9xxx)
    UNRESOLVED_SLOT = "KIX9001"


def location_of(token: Token) -> str:
    """Describe where a token sits, for compile-time diagnostics"""
    if token.type == TokenType.EOF:
        return " at end"
    return f" at '{token.lexeme}'"


@dataclass
class Diagnostic:
    """A single reportable problem tied to a source line"""
    code: str
    severity: Severity
    message: str
    line: int
    location: str = ""
    help: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR


class KixError(Exception):
    """Base exception class for all Kix errors with diagnostics support"""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @classmethod
    def from_simple(cls, code: str, message: str, line: int, location: str = "",
                    severity: Severity = Severity.ERROR, help_text: Optional[str] = None):
        """Create error from simple parameters"""
        diagnostic = Diagnostic(
            code=code,
            severity=severity,
            message=message,
            line=line,
            location=location,
            help=help_text
        )
        return cls(diagnostic)

    @classmethod
    def at_token(cls, code: str, token: Token, message: str,
                 severity: Severity = Severity.ERROR, help_text: Optional[str] = None):
        return cls.from_simple(code, message, token.line, location_of(token), severity, help_text)


class LexError(KixError):
    """Lexical analysis errors"""

    @classmethod
    def unexpected_character(cls, line: int, char: str):
        return cls.from_simple(
            ErrorCode.UNEXPECTED_CHARACTER, f"Unexpected character '{char}'.", line,
            help_text="check for typos or unsupported characters"
        )

    @classmethod
    def unterminated_string(cls, line: int):
        return cls.from_simple(
            ErrorCode.UNTERMINATED_STRING, "Unterminated string.", line,
            help_text="add a closing '\"' to terminate the string"
        )

    @classmethod
    def unterminated_comment(cls, line: int):
        return cls.from_simple(
            ErrorCode.UNTERMINATED_COMMENT, "Unterminated block comment.", line,
            help_text="block comments do not nest; close this one with '*/'"
        )


class ParseError(KixError):
    """Parser errors"""

    @classmethod
    def expected(cls, token: Token, message: str):
        return cls.at_token(ErrorCode.EXPECTED_TOKEN, token, message)

    @classmethod
    def expected_expression(cls, token: Token):
        return cls.at_token(
            ErrorCode.EXPECTED_EXPRESSION, token, "Expect expression.",
            help_text="add a valid expression (variable, literal, or function call)"
        )

    @classmethod
    def invalid_assignment_target(cls, token: Token):
        return cls.at_token(
            ErrorCode.INVALID_ASSIGNMENT_TARGET, token, "Invalid assignment target.",
            help_text="only variables can be assigned to"
        )

    @classmethod
    def too_many_parameters(cls, token: Token, limit: int):
        return cls.at_token(
            ErrorCode.TOO_MANY_PARAMETERS, token, f"Can't have more than {limit} parameters."
        )

    @classmethod
    def too_many_arguments(cls, token: Token, limit: int):
        return cls.at_token(
            ErrorCode.TOO_MANY_ARGUMENTS, token, f"Can't have more than {limit} arguments."
        )


class ResolveError(KixError):
    """Static scope resolution errors"""

    @classmethod
    def self_reference(cls, token: Token):
        return cls.at_token(
            ErrorCode.SELF_REFERENCE, token, "Can't read local variable in its own initializer.",
            help_text=f"give '{token.lexeme}' a value that does not mention itself"
        )

    @classmethod
    def duplicate_declaration(cls, token: Token):
        return cls.at_token(
            ErrorCode.DUPLICATE_DECLARATION, token,
            "Variable with this name already declared in this scope.",
            help_text="shadow it from a nested block instead, or rename it"
        )

    @classmethod
    def return_outside_function(cls, token: Token):
        return cls.at_token(
            ErrorCode.RETURN_OUTSIDE_FUNCTION, token, "Can't return from outside function."
        )

    @classmethod
    def unused_variable(cls, token: Token, severity: Severity = Severity.WARNING):
        return cls.at_token(
            ErrorCode.UNUSED_VARIABLE, token, "Variable defined but not used.", severity
        )


class KixRuntimeError(KixError):
    """Runtime errors; the first one raised aborts the run"""

    def __init__(self, diagnostic: Diagnostic, token: Optional[Token] = None):
        super().__init__(diagnostic)
        self.token = token

    @classmethod
    def at(cls, code: str, token: Token, message: str):
        diagnostic = Diagnostic(code=code, severity=Severity.ERROR, message=message, line=token.line)
        return cls(diagnostic, token)

    @classmethod
    def undefined_variable(cls, token: Token):
        return cls.at(ErrorCode.UNDEFINED_VARIABLE, token, f"Undefined variable '{token.lexeme}'.")

    @classmethod
    def operand_must_be_number(cls, operator: Token):
        return cls.at(ErrorCode.OPERAND_NOT_NUMBER, operator, "Operand must be a number.")

    @classmethod
    def invalid_plus_operands(cls, operator: Token, left: str, right: str):
        return cls.at(
            ErrorCode.INVALID_PLUS_OPERANDS, operator, f"Invalid operands: {left} and {right} for '+'."
        )

    @classmethod
    def not_callable(cls, paren: Token):
        return cls.at(ErrorCode.NOT_CALLABLE, paren, "Can only call functions.")

    @classmethod
    def wrong_arity(cls, paren: Token, expected: int, got: int):
        return cls.at(ErrorCode.WRONG_ARITY, paren, f"Expected {expected} arguments but got {got}.")


class InternalError(KixError):
    """Interpreter consistency faults; never a user-facing language error"""

    @classmethod
    def unresolved_slot(cls, token: Token, distance: int, slot: int):
        return cls.from_simple(
            ErrorCode.UNRESOLVED_SLOT,
            f"No storage for '{token.lexeme}' at distance {distance}, slot {slot}.",
            token.line
        )
