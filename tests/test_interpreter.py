"""Evaluation tests, run through the full pipeline."""

import pytest

from kix.interpreter import Interpreter, format_rounded, stringify

from conftest import make_session


# Values

@pytest.mark.parametrize("source,expected", [
    ("print 1+2;", "3"),
    ("print 2 + 3 * 4 - 6 / 2;", "11"),
    ("print (2 + 3) * 4;", "20"),
    ("print 10 - 4 - 3;", "3"),
    ("print 7 / 2;", "3.5"),
    ("print 0.1 + 0.2;", "0.30000000000000004"),
    ("print -(3);", "-3"),
    ("print 1 / 0;", "Infinity"),
    ("print -1 / 0;", "-Infinity"),
    ("print 0 / 0;", "NaN"),
    ("print 10000000000000000000000;", "10000000000000000000000"),
    ("print 1000000 * 1000000;", "1000000000000"),
])
def test_arithmetic(run, source, expected):
    assert run(source).out == expected + "\n"


@pytest.mark.parametrize("source,expected", [
    ('print "a" + "b";', "ab"),
    ('print "a" + 1;', "a1"),
    ('print "a" + 2.5;', "a3"),
    ('print "a" + -2.5;', "a-3"),
    ('print 1.5 + "x";', "2x"),
    ('print "n" + -0.2;', "n0"),
    ('print "big " + 12345678901234567890;', "big 12345678901234567168"),
    ('print "x" + 1 / 0;', "xInfinity"),
])
def test_string_concatenation(run, source, expected):
    assert run(source).out == expected + "\n"


@pytest.mark.parametrize("source,expected", [
    ("print 1 < 2;", "true"),
    ("print 2 <= 2;", "true"),
    ("print 1 > 2;", "false"),
    ("print 3 >= 4;", "false"),
    ("print 1 == 1;", "true"),
    ('print "a" == "a";', "true"),
    ('print "a" != "b";', "true"),
    ("print nil == nil;", "true"),
    ("print nil == false;", "false"),
    ("print true == 1;", "false"),
    ("print 0 == false;", "false"),
    ('print 1 == "1";', "false"),
])
def test_comparison_and_equality(run, source, expected):
    assert run(source).out == expected + "\n"


@pytest.mark.parametrize("source,expected", [
    ('print 0 ? "t" : "f";', "t"),
    ('print "" ? "t" : "f";', "t"),
    ('print nil ? "t" : "f";', "f"),
    ('print false ? "t" : "f";', "f"),
    ("print !nil;", "true"),
    ("print !0;", "false"),
    ('print true ? "yes" : "no";', "yes"),
])
def test_truthiness(run, source, expected):
    assert run(source).out == expected + "\n"


@pytest.mark.parametrize("source,expected", [
    ('print nil or "x";', "x"),
    ('print "first" or "second";', "first"),
    ("print 1 and 2;", "2"),
    ("print nil and 2;", "nil"),
    ("print false and undefinedThing();", "false"),
    ("print true or undefinedThing();", "true"),
])
def test_logical_operators_yield_deciding_operand(run, source, expected):
    assert run(source).out == expected + "\n"


def test_ternary_evaluates_only_taken_branch(run):
    source = (
        'fun sideEffectA() { print "A"; }\n'
        'fun sideEffectB() { print "B"; }\n'
        "false ? sideEffectA() : sideEffectB();"
    )
    assert run(source).out == "B\n"


# Variables and scope

def test_block_shadowing(run):
    assert run("var a=1; { var a=2; print a; } print a;").out == "2\n1\n"


def test_uninitialized_variable_is_nil(run):
    assert run("var a; print a;").out == "nil\n"


def test_assignment_is_an_expression(run):
    assert run("var a; var b; a = b = 3; print a; print b = 4;").out == "3\n4\n"


def test_assign_to_enclosing_local(run):
    result = run("{ var a = 1; { a = a + 1; } print a; }")
    assert result.out == "2\n"


def test_global_redeclaration_overwrites(run):
    assert run("var a = 1; var a = 2; print a;").out == "2\n"


def test_while_and_for_loops(run):
    assert run("var i = 0; while (i < 3) { print i; i = i + 1; }").out == "0\n1\n2\n"
    assert run("for (var i = 0; i < 3; i = i + 1) print i;").out == "0\n1\n2\n"


def test_multiline_string(run):
    assert run('print "a\nb";').out == "a\nb\n"


# Functions and closures

def test_recursive_fibonacci(run):
    source = "fun fib(n){ if (n<2) return n; return fib(n-1)+fib(n-2); } print fib(10);"
    assert run(source).out == "55\n"


def test_function_without_return_yields_nil(run):
    assert run("fun f() {} print f();").out == "nil\n"


def test_bare_return_yields_nil(run):
    assert run("fun f() { return; print 1; } print f();").out == "nil\n"


def test_return_unwinds_loops(run):
    source = (
        "fun f() { var i = 0; while (true) { if (i == 3) return i; i = i + 1; } }\n"
        "print f();"
    )
    assert run(source).out == "3\n"


def test_closure_captures_declaring_frame(run):
    source = (
        'var a = "global";\n'
        "{ fun show() { print a; } var a = \"block\"; show(); }"
    )
    result = run(source)
    assert result.out == "global\n"
    assert not result.had_error


def test_counter_closure_keeps_state(run):
    source = (
        "fun makeCounter() { var i = 0; fun count() { i = i + 1; return i; } return count; }\n"
        "var c = makeCounter(); var d = makeCounter();\n"
        "print c(); print c(); print d();"
    )
    assert run(source).out == "1\n2\n1\n"


def test_arguments_evaluated_left_to_right(run):
    source = (
        "var log = \"\";\n"
        "fun note(x) { log = log + x; return x; }\n"
        "fun pair(a, b) { return a + b; }\n"
        "pair(note(\"a\"), note(\"b\")); print log;"
    )
    assert run(source).out == "ab\n"


def test_functions_are_first_class(run):
    source = "fun twice(f, x) { return f(f(x)); } fun inc(n) { return n + 1; } print twice(inc, 5);"
    assert run(source).out == "7\n"


def test_callable_display(run):
    assert run("fun f() {} print f; print clock; print println;").out == (
        "<fn f>\n<native fn>\n<native fn>\n"
    )


# Built-ins

def test_println_builtin(run):
    assert run('println("hi"); println(1.5);').out == "hi\n1.5\n"


def test_print_keyword_with_parentheses(run):
    assert run("print(3);").out == "3\n"


def test_clock_returns_milliseconds(run):
    assert run("print clock() > 1000000000000;").out == "true\n"


def test_print_builtin_has_no_newline(capsys):
    interpreter = Interpreter()
    assert "print" in interpreter.globals
    interpreter.globals.values["print"].call(interpreter, [2.0])
    interpreter.globals.values["print"].call(interpreter, ["x"])
    assert capsys.readouterr().out == "2x"


# Runtime errors

@pytest.mark.parametrize("source,message", [
    ("print x;", "Undefined variable 'x'."),
    ("y = 1;", "Undefined variable 'y'."),
    ('print -"a";', "Operand must be a number."),
    ('print 1 < "a";', "Operand must be a number."),
    ("print nil * 2;", "Operand must be a number."),
    ('print "a" + nil;', "Invalid operands: a and nil for '+'."),
    ("print true + 1;", "Invalid operands: true and 1 for '+'."),
    ("var x = 1; x();", "Can only call functions."),
    ('"str"();', "Can only call functions."),
    ("fun f(a) { return a; } f();", "Expected 1 arguments but got 0."),
    ("fun f() {} f(1, 2);", "Expected 0 arguments but got 2."),
])
def test_runtime_errors(run, source, message):
    result = run(source)
    assert result.had_runtime_error
    assert not result.had_error
    assert result.err == f"{message}\n[line 1]\n"


def test_runtime_error_aborts_rest_of_run(run):
    result = run("print 1;\nprint x;\nprint 2;")
    assert result.out == "1\n"
    assert result.err == "Undefined variable 'x'.\n[line 2]\n"


def test_compile_error_prevents_execution(run):
    result = run("print 1;\nprint ;")
    assert result.had_error
    assert result.out == ""


def test_frame_restored_after_runtime_error_in_block(run):
    session = make_session()
    run("{ var a = 1; print a; print nope; }", session=session)
    assert session.interpreter.environment is None
    assert run("var b = 2; print b;", session=session).out == "2\n"


def test_interrupt_stops_before_next_statement():
    session = make_session()
    statements = session.compile("print 1;")
    session.interpreter.interrupt()
    with pytest.raises(KeyboardInterrupt):
        session.interpreter.interpret(statements)
    assert not session.interpreter.interrupt_requested


# Sessions

def test_globals_persist_between_runs(run):
    session = make_session()
    run("var a = 1; fun double(x) { return x * 2; }", session=session)
    assert run("print double(a + 1);", session=session).out == "4\n"


def test_closures_from_earlier_runs_keep_their_addresses(run):
    session = make_session()
    run("fun adder(n) { fun add(x) { return x + n; } return add; }", session=session)
    run("var add5 = adder(5);", session=session)
    assert run("print add5(1);", session=session).out == "6\n"


def test_errors_do_not_leak_into_next_line(run):
    session = make_session()
    assert run("print ;", session=session).had_error
    session.reporter.reset()
    assert run("print 1;", session=session).out == "1\n"


# Display helpers

@pytest.mark.parametrize("value,expected", [
    (None, "nil"),
    (True, "true"),
    (False, "false"),
    (3.0, "3"),
    (1e22, "10000000000000000000000"),
    (123456789012345678.0, "123456789012345680"),
    (-0.0, "-0"),
    (-2.5, "-2.5"),
    (float("inf"), "Infinity"),
    (float("nan"), "NaN"),
    ("text", "text"),
])
def test_stringify(value, expected):
    assert stringify(value) == expected


@pytest.mark.parametrize("value,expected", [
    (0.5, "1"),
    (1.49, "1"),
    (-0.5, "-1"),
    (-0.4, "0"),
    (1e20, "100000000000000000000"),
])
def test_format_rounded(value, expected):
    assert format_rounded(value) == expected
