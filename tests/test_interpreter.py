import math

import pytest

from plox.ast import BlockStmt, ExpressionStmt, Literal, PrintStmt, ReturnStmt, Variable
from plox.errors import LoxRuntimeError
from plox.interpreter import Interpreter, Returning, run_program
from plox.parser import parse_program
from plox.tokens import Token, TokenType
from plox.types import is_equal, is_truthy, to_number, to_string


def run(source, **kwargs):
    statements, errors = parse_program(source)
    assert errors == []
    interpreter = Interpreter(debug_level=0, **kwargs)
    return interpreter, interpreter.interpret(statements)


def output_of(source, capsys):
    _, error = run(source)
    assert error is None
    return capsys.readouterr().out.splitlines()


def test_print_arithmetic(capsys):
    assert output_of('print 1 + 2; print (1 + 2) * (4 - 3); print 7 / 2;', capsys) == ['3', '3', '3.5']


def test_print_formats_values(capsys):
    source ='print nil; print true; print false; print "s"; print -0.5; print 100;'
    assert output_of(source, capsys) == ['nil', 'true', 'false', 's', '-0.5', '100']


def test_block_shadowing_does_not_leak(capsys):
    assert output_of('var a = 1; { var a = 2; print a; } print a;', capsys) == ['2', '1']


def test_assignment_in_block_updates_outer(capsys):
    assert output_of('var a = 1; { a = 2; } print a;', capsys) == ['2']


def test_uninitialized_variable_is_nil(capsys):
    assert output_of('var a; print a;', capsys) == ['nil']


def test_truthiness(capsys):
    source = '''
    if (0) print "0 truthy";
    if ("") print "empty truthy";
    if (nil) print "nil truthy"; else print "nil falsy";
    if (false) print "false truthy"; else print "false falsy";
    print !nil;
    print !0;
    '''
    assert output_of(source, capsys) == [
        '0 truthy', 'empty truthy', 'nil falsy', 'false falsy', 'true', 'false',
    ]


def test_logical_operators_short_circuit_and_return_operands(capsys):
    source = '''
    print nil or "default";
    print "first" or undefined_name;
    print false and undefined_name;
    print 1 and 2;
    '''
    assert output_of(source, capsys) == ['default', 'first', 'false', '2']


def test_equality_has_no_coercion(capsys):
    source = '''
    print nil == nil;
    print nil == false;
    print 1 == 1;
    print "1" == 1;
    print true == 1;
    print "a" != "b";
    '''
    assert output_of(source, capsys) == ['true', 'false', 'true', 'false', 'false', 'true']


def test_comparison_operators(capsys):
    assert output_of('print 1 < 2; print 2 <= 2; print 1 > 2; print 3 >= 4;', capsys) == [
        'true', 'true', 'false', 'false',
    ]


def test_string_concatenation(capsys):
    assert output_of('var s = "a"; print s + "b" + "c";', capsys) == ['abc']


def test_plus_is_numeric_when_either_operand_is_a_number(capsys):
    source = 'print "2" + 1; print 1 + nil; print true + 1; print "a" + 1;'
    assert output_of(source, capsys) == ['3', '1', '2', 'NaN']


def test_plus_coerces_text_like_number_literals(capsys):
    source = '''
    print "1_000" + 1;
    print "inf" + 1;
    print "0x10" + 0;
    print "0b101" + 0;
    print " 12 " + 1;
    print "-1e3" + 0;
    print ".5" + 0;
    print "Infinity" + 1;
    print "1e" + 0;
    '''
    assert output_of(source, capsys) == [
        'NaN', 'NaN', '16', '5', '13', '-1000', '0.5', 'Infinity', 'NaN',
    ]


def test_number_formatting(capsys):
    source = '''
    print 10000000000000000;
    print 0.0000001;
    print 0.000001;
    print -0;
    print 1000000000000000000000;
    print 123456789012.5;
    '''
    assert output_of(source, capsys) == [
        '10000000000000000', '1e-7', '0.000001', '0', '1e+21', '123456789012.5',
    ]


def test_while_loop(capsys):
    source = 'var i = 0; while (i < 3) { print i; i = i + 1; }'
    assert output_of(source, capsys) == ['0', '1', '2']


def test_for_loop_variable_is_scoped_to_loop(capsys):
    source = 'for (var i = 0; i < 2; i = i + 1) print i; print i;'
    _, error = run(source)
    assert capsys.readouterr().out.splitlines() == ['0', '1']
    assert error is not None
    assert error.message == "Undefined variable 'i'."


def test_function_call_and_return(capsys):
    assert output_of('fun add(a,b) { return a + b; } print add(2,3);', capsys) == ['5']


def test_function_without_return_yields_nil(capsys):
    assert output_of('fun f() { 1; } print f(); print f;', capsys) == ['nil', '<fn f>']


def test_return_from_inside_loop(capsys):
    source = '''
    fun firstOver(limit) {
      for (var i = 0; ; i = i + 1) {
        if (i > limit) return i;
      }
    }
    print firstOver(4);
    '''
    assert output_of(source, capsys) == ['5']


def test_recursion(capsys):
    source = 'fun fact(n) { if (n <= 1) return 1; return n * fact(n - 1); } print fact(10);'
    assert output_of(source, capsys) == ['3628800']


def test_closure_keeps_defining_scope(capsys):
    source = '''
    fun make() {
      var count = 0;
      fun inc() { count = count + 1; return count; }
      return inc;
    }
    var c = make();
    c();
    print c();
    '''
    assert output_of(source, capsys) == ['2']


def test_clock_native(capsys):
    assert output_of('print clock() > 0; print clock;', capsys) == ['true', '<native fn>']


def test_wrong_arity_is_a_runtime_error(capsys):
    _, error = run('fun add(a,b) { return a + b; } print add(1);')
    assert isinstance(error, LoxRuntimeError)
    assert error.message == 'Expected 2 arguments but got 1.'
    assert error.token.type == TokenType.RIGHT_PAREN


def test_calling_a_non_callable(capsys):
    _, error = run('"text"();')
    assert error.message == 'Can only call functions and classes.'


def test_division_by_zero_is_a_fault(capsys):
    _, error = run('print 1 / 0;')
    assert error.message == 'Unable to divide by zero.'
    assert capsys.readouterr().out == ''


def test_assigning_undeclared_name_faults_without_creating_global():
    interpreter, error = run('x = 5;')
    assert error.message == "Undefined variable 'x'."
    assert 'x' not in interpreter.globals.values


def test_type_mismatch_messages():
    assert run('print -"a";')[1].message == 'Operand must be a number.'
    assert run('print 1 < "a";')[1].message == 'Operands must be numbers.'
    assert run('print nil + nil;')[1].message == 'Operands must be two numbers or two strings.'


def test_runtime_error_stops_the_whole_run(capsys):
    _, error = run('print "a"; print nil * 2; print "b";')
    assert capsys.readouterr().out.splitlines() == ['a']
    assert str(error) == 'Operands must be numbers.\n[line 1]'


def test_environment_restored_after_fault_inside_block():
    interpreter, error = run('var a = 1; { var a = 2; { print missing; } }')
    assert error is not None
    assert interpreter.environment is interpreter.globals


def test_environment_restored_after_return():
    interpreter, error = run('fun f() { { return 1; } } var r = f();')
    assert error is None
    assert interpreter.environment is interpreter.globals
    assert interpreter.globals.values['r'] == 1.0


def test_top_level_return_stops_interpretation(capsys):
    interpreter = Interpreter()
    statements = [
        PrintStmt(Literal('before')),
        ReturnStmt(None),
        PrintStmt(Literal('after')),
    ]
    assert interpreter.interpret(statements) is None
    assert capsys.readouterr().out.splitlines() == ['before']


def test_execute_returns_returning_completion():
    interpreter = Interpreter()
    result = interpreter.execute(BlockStmt([ExpressionStmt(Literal(1.0)), ReturnStmt(Literal('v'))]))
    assert result == Returning('v')


def test_step_limit_stops_infinite_loop():
    _, error = run('var i = 0;\nwhile (true) {}', max_steps=50)
    assert error.message == 'Step limit of 50 exceeded.'
    assert error.line == 2


def test_deep_recursion_runs(capsys):
    source = 'fun down(n) { if (n <= 0) return 0; return down(n - 1); } print down(1000);'
    assert output_of(source, capsys) == ['0']


def test_unbounded_recursion_is_a_stack_overflow(capsys):
    interpreter, error = run('print "start";\nfun f() { return f(); }\nf();')
    assert isinstance(error, LoxRuntimeError)
    assert error.message == 'Stack overflow.'
    assert error.line == 2
    assert interpreter.environment is interpreter.globals
    assert capsys.readouterr().out == 'start\n'


def test_debug_trace_written_to_file(tmp_path, capsys):
    trace = tmp_path / 'trace.txt'
    statements, _ = parse_program('var a = 1; fun f(x) { return x; } if (a) f(a);')
    interpreter = Interpreter(debug_level=3, debug_file=str(trace))
    assert interpreter.interpret(statements) is None
    interpreter.close()
    lines = trace.read_text().splitlines()
    assert 'declare a: number = 1' in lines
    assert 'define function f/1' in lines
    assert 'if condition 1 -> true' in lines
    assert 'call <fn f> with 1 argument(s) at line 1' in lines
    assert capsys.readouterr().out == ''


def test_run_program_skips_execution_on_syntax_error(capsys):
    result = run_program('print "x"; print ;', debug_level=0)
    assert result.had_error and not result.had_runtime_error
    assert capsys.readouterr().out == ''


def test_run_program_reports_runtime_error(capsys):
    result = run_program('print "x"; print y;')
    assert result.had_runtime_error and not result.had_error
    assert result.runtime_error.line == 1
    assert capsys.readouterr().out == 'x\n'


def test_value_helpers():
    assert not is_truthy(None) and not is_truthy(False)
    assert is_truthy(0.0) and is_truthy('')
    assert is_equal(None, None) and not is_equal(None, 0.0)
    assert not is_equal(True, 1.0)
    assert math.isnan(to_number('abc'))
    assert to_number('  ') == 0.0
    assert to_string(3.0) == '3'
    assert to_string(float('inf')) == 'Infinity'
    assert to_string(float('nan')) == 'NaN'
    assert to_string(-2.25) == '-2.25'
    assert to_string(-0.0) == '0'
    assert to_string(1.5e21) == '1.5e+21'
    assert to_string(1.5e-7) == '1.5e-7'
    assert to_string(-1e16) == '-10000000000000000'
    assert math.isnan(to_number('1_000'))
    assert to_number('0o17') == 15.0


def test_variable_expression_on_globals():
    interpreter = Interpreter()
    interpreter.globals.define('g', 'value')
    token = Token(TokenType.IDENTIFIER, 'g', None, 1)
    assert interpreter.evaluate(Variable(token)) == 'value'
