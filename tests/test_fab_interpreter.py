import io

import pytest

from fab.fab_interpreter import Evaluator
from fab.fab_lexer import tokenize
from fab.fab_parser import parse
from fab.fab_datatypes import (
    Environment, FabMap, InternalInvariantViolation,
    Stmt, Expr, Echo, Assign, StringLiteral, NumberLiteral, VarRef, PathAccess, MapLiteral,
)


@pytest.fixture
def evaluator():
    return Evaluator()


@pytest.fixture
def env():
    return Environment()


def run(evaluator, env, source):
    evaluator.execute(parse(tokenize(source)), env)
    return [e['message'] for e in evaluator.side_effects if e['topics'] == ['stdout']]


# --- Expressions ---

def test_literals(evaluator, env):
    assert evaluator.eval(StringLiteral("hi"), env) == "hi"
    assert evaluator.eval(NumberLiteral(2.5), env) == 2.5


def test_unbound_variable_is_null(evaluator, env):
    assert evaluator.eval(VarRef("missing"), env) is None


def test_bound_variable(evaluator, env):
    env["x"] = "value"
    assert evaluator.eval(VarRef("x"), env) == "value"


def test_map_literal_builds_fresh_map(evaluator, env):
    node = MapLiteral([("a", NumberLiteral(1.0))])
    first = evaluator.eval(node, env)
    second = evaluator.eval(node, env)
    assert isinstance(first, FabMap)
    assert first == {"a": 1.0}
    assert first is not second


def test_map_literal_duplicate_key_keeps_first_position_last_value(evaluator, env):
    node = MapLiteral([
        ("a", NumberLiteral(1.0)),
        ("b", NumberLiteral(2.0)),
        ("a", NumberLiteral(3.0)),
    ])
    result = evaluator.eval(node, env)
    assert list(result.items()) == [("a", 3.0), ("b", 2.0)]


@pytest.mark.parametrize("base", [
    MapLiteral([("other", NumberLiteral(1.0))]),  # map without the key
    StringLiteral("text"),                        # non-map bases
    NumberLiteral(4.0),
    VarRef("unbound"),
])
def test_path_access_misses_are_null(evaluator, env, base):
    assert evaluator.eval(PathAccess(base, "key"), env) is None


def test_path_access_hit(evaluator, env):
    env["user"] = FabMap({"name": "Sebastian"})
    assert evaluator.eval(PathAccess(VarRef("user"), "name"), env) == "Sebastian"


def test_path_chain_through_missing_level_is_null(evaluator, env):
    env["a"] = FabMap({"b": FabMap({"c": "deep"})})
    assert evaluator.eval(PathAccess(PathAccess(VarRef("a"), "b"), "c"), env) == "deep"
    assert evaluator.eval(PathAccess(PathAccess(VarRef("a"), "x"), "c"), env) is None


# --- Statements ---

def test_assign_binds_and_overwrites(evaluator, env):
    evaluator.exec_stmt(Assign("x", NumberLiteral(1.0)), env)
    assert env["x"] == 1.0
    evaluator.exec_stmt(Assign("x", StringLiteral("s")), env)
    assert env["x"] == "s"


def test_echo_records_stdout_side_effect(evaluator, env):
    evaluator.exec_stmt(Echo(StringLiteral("hello")), env)
    assert evaluator.side_effects == [{'topics': ['stdout'], 'message': 'hello'}]


def test_echo_streams_to_output():
    out = io.StringIO()
    ev = Evaluator(output=out)
    ev.execute([Echo(NumberLiteral(1.0)), Echo(StringLiteral("two"))], Environment())
    assert out.getvalue() == "1\ntwo\n"


def test_statements_run_in_order(evaluator, env):
    assert run(evaluator, env, "$a = 1\necho $a\n$a = 2\necho $a") == ["1", "2"]


def test_map_values_are_snapshots_of_variables(evaluator, env):
    out = run(evaluator, env, "$x = 1\n$m = [$v = $x]\n$x = 2\necho $m.$v")
    assert out == ["1"]


def test_environment_is_explicit_state(evaluator):
    env1, env2 = Environment(), Environment()
    evaluator.execute(parse(tokenize('$x = "one"')), env1)
    assert env1["x"] == "one"
    assert "x" not in env2


# --- Invariant violations ---

class BogusStmt(Stmt):
    pass


class BogusExpr(Expr):
    pass


def test_unknown_statement_is_invariant_violation(evaluator, env):
    with pytest.raises(InternalInvariantViolation):
        evaluator.exec_stmt(BogusStmt(), env)


def test_unknown_expression_is_invariant_violation(evaluator, env):
    with pytest.raises(InternalInvariantViolation):
        evaluator.eval(BogusExpr(), env)
