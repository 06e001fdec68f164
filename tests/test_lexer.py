"""Scanner tests."""

import pytest

from kix.lexer import scan
from kix.tokens import TokenType

from conftest import make_reporter


def types_of(source: str) -> list:
    return [token.type for token in scan(source, make_reporter())]


def test_empty_source_is_just_eof():
    tokens = scan("", make_reporter())
    assert len(tokens) == 1
    assert tokens[0].type == TokenType.EOF


def test_single_character_tokens():
    assert types_of("(){},.-+;*?:/") == [
        TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN,
        TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
        TokenType.COMMA, TokenType.DOT, TokenType.MINUS, TokenType.PLUS,
        TokenType.SEMICOLON, TokenType.STAR, TokenType.QUESTION_MARK,
        TokenType.COLON, TokenType.SLASH, TokenType.EOF,
    ]


def test_one_and_two_character_operators():
    assert types_of("! != = == < <= > >=") == [
        TokenType.BANG, TokenType.BANG_EQUAL,
        TokenType.EQUAL, TokenType.EQUAL_EQUAL,
        TokenType.LESS, TokenType.LESS_EQUAL,
        TokenType.GREATER, TokenType.GREATER_EQUAL,
        TokenType.EOF,
    ]


@pytest.mark.parametrize("source,value", [
    ("0", 0.0),
    ("123", 123.0),
    ("3.25", 3.25),
])
def test_numbers_are_floats(source, value):
    token = scan(source, make_reporter())[0]
    assert token.type == TokenType.NUMBER
    assert isinstance(token.literal, float)
    assert token.literal == value


def test_trailing_dot_is_not_part_of_number():
    assert types_of("1.") == [TokenType.NUMBER, TokenType.DOT, TokenType.EOF]


def test_string_literal_is_trimmed_and_raw():
    token = scan('"a\\nb"', make_reporter())[0]
    assert token.type == TokenType.STRING
    assert token.literal == "a\\nb"
    assert token.lexeme == '"a\\nb"'


def test_multiline_string_advances_line():
    tokens = scan('"one\ntwo" x', make_reporter())
    assert tokens[0].literal == "one\ntwo"
    assert tokens[1].lexeme == "x"
    assert tokens[1].line == 2


def test_keywords_and_identifiers():
    tokens = scan("var orchid = nil and fun_1 or this", make_reporter())
    assert [t.type for t in tokens] == [
        TokenType.VAR, TokenType.IDENTIFIER, TokenType.EQUAL, TokenType.NIL,
        TokenType.AND, TokenType.IDENTIFIER, TokenType.OR, TokenType.THIS,
        TokenType.EOF,
    ]
    assert tokens[1].lexeme == "orchid"
    assert tokens[5].lexeme == "fun_1"


def test_line_comment_runs_to_end_of_line():
    tokens = scan("a // b c\nd", make_reporter())
    assert [t.lexeme for t in tokens[:-1]] == ["a", "d"]
    assert tokens[1].line == 2


def test_block_comment_counts_lines():
    tokens = scan("/* one\ntwo\n*/ x", make_reporter())
    assert tokens[0].lexeme == "x"
    assert tokens[0].line == 3


def test_block_comments_do_not_nest():
    # the first */ closes the comment, leaving "c */" as code
    assert types_of("/* a /* b */ c */") == [
        TokenType.IDENTIFIER, TokenType.STAR, TokenType.SLASH, TokenType.EOF,
    ]


def test_unterminated_block_comment_is_an_error():
    reporter = make_reporter()
    scan("/* never closed", reporter)
    assert reporter.had_error
    assert reporter.stream.getvalue() == "[line 1] Error: Unterminated block comment.\n"


def test_unterminated_string_is_an_error():
    reporter = make_reporter()
    tokens = scan('"abc\n', reporter)
    assert reporter.had_error
    assert reporter.stream.getvalue() == "[line 2] Error: Unterminated string.\n"
    assert [t.type for t in tokens] == [TokenType.EOF]


def test_unexpected_character_reported_and_skipped():
    reporter = make_reporter()
    tokens = scan("1 @ # 2", reporter)
    assert [t.type for t in tokens] == [TokenType.NUMBER, TokenType.NUMBER, TokenType.EOF]
    assert reporter.stream.getvalue() == (
        "[line 1] Error: Unexpected character '@'.\n"
        "[line 1] Error: Unexpected character '#'.\n"
    )


def test_eof_carries_last_line():
    tokens = scan("a\nb\n", make_reporter())
    assert tokens[-1].type == TokenType.EOF
    assert tokens[-1].line == 3
