import pytest

from fab import ScriptRunner, ExecutionResult, FabMap


def assert_ok(res, expected_output=None):
    assert res.status == "success", f"expected success, got {res}"
    if expected_output is not None:
        assert res.output == expected_output, f"expected {expected_output!r}, got {res.output!r}"


@pytest.fixture
def runner():
    return ScriptRunner()


# --- Scenarios ---

def test_scenario_echo_variable(runner):
    res = runner.handle_script('$word = "Hello World"\necho $word')
    assert_ok(res, ["Hello World"])


def test_scenario_path_access(runner):
    res = runner.handle_script('$user = [$name = "Sebastian", $age = 17]\necho $user.$name')
    assert_ok(res, ["Sebastian"])


def test_scenario_missing_variable_is_null(runner):
    assert_ok(runner.handle_script("echo $missing"), ["null"])


def test_scenario_duplicate_key(runner):
    assert_ok(runner.handle_script("$m = [$a = 1, $a = 2]\necho $m"), ["[$a = 2]"])


def test_scenario_missing_variable_name(runner):
    res = runner.handle_script("$ = 1")
    assert res.status == "error"
    assert res.error_message.startswith(
        "SyntaxError: Expected variable name after $, found EQUAL '=' (line 1, col 3)"
    )
    assert res.error_token == {'line': 1, 'col': 3}


def test_scenario_unterminated_string(runner):
    res = runner.handle_script('echo "abc')
    assert res.status == "error"
    assert res.error_message.startswith("LexicalError: Unterminated string literal (line 1, col 10)")


# --- Properties ---

def test_commented_example_program(runner):
    src = """/# This is a Comment
$word = "Hello World"
echo $word
#*
This is a Block Comment
*#
$user = [$name = "Sebastian", $age = 17]
echo $user.$name
"""
    assert_ok(runner.handle_script(src), ["Hello World", "Sebastian"])


def test_echo_whole_map_and_nested_maps(runner):
    src = '$u = [$name = "S", $info = [$age = 17, $score = 9.50]]\necho $u\necho $u.$info.$score'
    assert_ok(runner.handle_script(src), ["[$name = S, $info = [$age = 17, $score = 9.5]]", "9.5"])


def test_path_access_leniency(runner):
    src = '$s = "text"\n$m = [$a = 1]\necho $s.$a\necho $m.$b\necho $m.$a.$deeper\necho 3.$x'
    assert_ok(runner.handle_script(src), ["null", "null", "null", "null"])


def test_string_escapes_are_echoed_decoded(runner):
    assert_ok(runner.handle_script(r'echo "tab\there \"q\""'), ['tab\there "q"'])


def test_number_output(runner):
    src = "echo 17\necho -0.5\necho 3.141592653589\necho 10.000\necho 007"
    assert_ok(runner.handle_script(src), ["17", "-0.5", "3.14159265", "10", "7"])


def test_determinism():
    src = '$a = [$x = 1, $y = "two"]\n$b = $a.$y\necho $a\necho $b'
    r1, r2 = ScriptRunner(), ScriptRunner()
    res1, res2 = r1.handle_script(src), r2.handle_script(src)
    assert res1.output == res2.output
    assert r1.environment == r2.environment


def test_final_environment_state(runner):
    assert_ok(runner.handle_script('$a = 1\n$m = [$k = "v"]\n$a = "again"'))
    env = runner.environment
    assert list(env.keys()) == ["a", "m"]
    assert env["a"] == "again"
    assert isinstance(env["m"], FabMap)
    assert env["m"] == {"k": "v"}


BASE = 'echo 1\n$m = [$a = "x"]\necho $m.$a'
COMMENTED = [
    '/# leading\n' + BASE,
    '#* leading block *#' + BASE,
    'echo 1 /# trailing\n$m = [$a = "x"] #* mid *#\necho $m.$a',
    'echo 1\n#* a\nmulti-line\nblock /# with marker *#\n$m = [$a = "x"]\necho $m.$a',
    BASE + '\n/# after',
    BASE + '\n#* after *#',
    'echo #* inline *# 1\n$m = [#* k *#$a = "x"]\necho $m.$a',
]


@pytest.mark.parametrize("source", COMMENTED)
def test_comment_transparency(source):
    expected = ScriptRunner().handle_script(BASE).output
    assert expected == ["1", "x"]
    assert_ok(ScriptRunner().handle_script(source), expected)


def test_no_output_when_parse_fails(runner):
    res = runner.handle_script("echo 1\n$ = 2")
    assert res.status == "error"
    assert res.output == []


def test_environment_persists_across_scripts_on_one_runner(runner):
    assert_ok(runner.handle_script('$greeting = "hi"'))
    assert_ok(runner.handle_script("echo $greeting"), ["hi"])


def test_side_effects_reset_per_script(runner):
    runner.handle_script("echo 1")
    res = runner.handle_script("echo 2")
    assert res.output == ["2"]


def test_execution_result_format_error():
    res = ExecutionResult(status="error", error_message="SyntaxError: boom")
    assert res.format_error() == "Error: SyntaxError: boom"
    assert ExecutionResult(status="success").format_error() == ""
