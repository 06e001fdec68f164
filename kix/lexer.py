"""
Lexer for the Kix scripting language
Converts source code into tokens
"""

from typing import List, Optional

from kix.tokens import Token, TokenType, KEYWORDS
from kix.errors import LexError
from kix.diagnostics import Reporter


SINGLE_CHAR_TOKENS = {
    '(': TokenType.LEFT_PAREN,
    ')': TokenType.RIGHT_PAREN,
    '{': TokenType.LEFT_BRACE,
    '}': TokenType.RIGHT_BRACE,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    '-': TokenType.MINUS,
    '+': TokenType.PLUS,
    ';': TokenType.SEMICOLON,
    '*': TokenType.STAR,
    '?': TokenType.QUESTION_MARK,
    ':': TokenType.COLON,
}

# first char -> (type when followed by '=', type otherwise)
EQUALS_PAIRS = {
    '!': (TokenType.BANG_EQUAL, TokenType.BANG),
    '=': (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    '<': (TokenType.LESS_EQUAL, TokenType.LESS),
    '>': (TokenType.GREATER_EQUAL, TokenType.GREATER),
}


def is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def is_alpha(c: str) -> bool:
    return ('a' <= c <= 'z') or ('A' <= c <= 'Z') or c == '_'


def is_alphanumeric(c: str) -> bool:
    return is_alpha(c) or is_digit(c)


class Lexer:
    def __init__(self, source: str, reporter: Optional[Reporter] = None):
        self.source = source
        self.reporter = reporter or Reporter()
        self.tokens: List[Token] = []
        self.current = 0
        self.line = 1
        self.start = 0  # Start of current token

    def tokenize(self) -> List[Token]:
        """Tokenize the source code and return a list of tokens ending in EOF"""
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    def is_at_end(self) -> bool:
        """Check if we've reached the end of the source"""
        return self.current >= len(self.source)

    def scan_token(self):
        """Scan and create a token from current position"""
        c = self.advance()

        if c in SINGLE_CHAR_TOKENS:
            self.add_token(SINGLE_CHAR_TOKENS[c])
        elif c in EQUALS_PAIRS:
            with_equals, alone = EQUALS_PAIRS[c]
            self.add_token(with_equals if self.match('=') else alone)
        elif c == '/':
            if self.match('/'):
                # Line comment - consume until end of line
                while self.peek() != '\n' and not self.is_at_end():
                    self.advance()
            elif self.match('*'):
                self.block_comment()
            else:
                self.add_token(TokenType.SLASH)

        # Whitespace
        elif c in (' ', '\r', '\t'):
            pass
        elif c == '\n':
            self.line += 1

        elif c == '"':
            self.string()
        elif is_digit(c):
            self.number()
        elif is_alpha(c):
            self.identifier()

        else:
            # Report and keep scanning from the next character
            self.reporter.report(LexError.unexpected_character(self.line, c))

    def advance(self) -> str:
        """Consume and return the current character"""
        char = self.source[self.current]
        self.current += 1
        return char

    def match(self, expected: str) -> bool:
        """Check if current character matches expected, consume if so"""
        if self.is_at_end():
            return False
        if self.source[self.current] != expected:
            return False

        self.current += 1
        return True

    def peek(self) -> str:
        """Look at current character without consuming"""
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        """Look at next character without consuming"""
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def string(self):
        """Handle string literals; they may span lines and have no escapes"""
        while self.peek() != '"' and not self.is_at_end():
            if self.peek() == '\n':
                self.line += 1
            self.advance()

        if self.is_at_end():
            self.reporter.report(LexError.unterminated_string(self.line))
            return

        # Consume closing quote
        self.advance()

        # Trim the surrounding quotes
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        """Handle numeric literals; every number is a double"""
        while is_digit(self.peek()):
            self.advance()

        # Look for a fractional part
        if self.peek() == '.' and is_digit(self.peek_next()):
            # Consume the '.'
            self.advance()

            while is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        """Handle identifiers and keywords"""
        while is_alphanumeric(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def block_comment(self):
        """Handle /* ... */; the first '*/' always closes the comment"""
        while not (self.peek() == '*' and self.peek_next() == '/') and not self.is_at_end():
            if self.peek() == '\n':
                self.line += 1
            self.advance()

        if self.is_at_end():
            self.reporter.report(LexError.unterminated_comment(self.line))
            return

        self.advance()  # consume '*'
        self.advance()  # consume '/'

    def add_token(self, token_type: TokenType, literal=None):
        """Add a token to the tokens list"""
        text = self.source[self.start:self.current]
        self.tokens.append(Token(token_type, text, literal, self.line))


def scan(source: str, reporter: Optional[Reporter] = None) -> List[Token]:
    """Scan source text into tokens, reporting lexical errors to reporter"""
    return Lexer(source, reporter).tokenize()
