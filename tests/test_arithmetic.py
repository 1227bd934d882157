import math

import pytest

from mathrepl.evaluator import evaluate_line
from mathrepl.symbols import default_symbols
from mathrepl.value import Real, Value


@pytest.mark.parametrize(
    "code, expected_ret_val",
    [
        pytest.param("1", Real(1.0)),
        pytest.param("-1", Real(-1.0)),
        pytest.param("+1", Real(1.0)),
        pytest.param("+-+3", Real(-3.0)),
        pytest.param("1+2", Real(3.0)),
        pytest.param("(1+2)", Real(3.0)),
        pytest.param("-(1+2)", Real(-3.0)),
        pytest.param("(((1)))", Real(1.0)),
        pytest.param("1 * 4 + 5", Real(9.0)),
        pytest.param("1 + 4 * 5", Real(21.0)),
        pytest.param("2 + 3 * 4", Real(14.0)),
        pytest.param("(2 + 3) * 4", Real(20.0)),
        pytest.param("10 / 5 / 2 / 2", Real(0.5)),
        pytest.param("10 + 2 * (5 + 3 - 1)", Real(24.0)),
        pytest.param("\t1 +\t2", Real(3.0)),
        pytest.param("1 + 2\n", Real(3.0)),
        pytest.param("1 + 2\x00 garbage", Real(3.0)),
        # associativity
        pytest.param("2 - 3 - 4", Real(-5.0)),
        pytest.param("2 ^ 3 ^ 2", Real(512.0)),
        pytest.param("(2 ^ 3) ^ 2", Real(64.0)),
        # unary minus
        pytest.param("-2 - -3", Real(1.0)),
        pytest.param("--2", Real(2.0)),
        pytest.param("-2^2", Real(-4.0)),
        pytest.param("2^-1", Real(0.5)),
        pytest.param("2 * -3", Real(-6.0)),
        # factorial
        pytest.param("3!", Real(6.0)),
        pytest.param("0!", Real(1.0)),
        pytest.param("3!!", Real(720.0)),
        pytest.param("2 * 3!", Real(12.0)),
        pytest.param("2 ^ 3!", Real(64.0)),
        pytest.param("-3!", Real(-6.0)),
        pytest.param("(1 + 2)!", Real(6.0)),
        # literals
        pytest.param("1.", Real(1.0)),
        pytest.param("1e3 + 1", Real(1001.0)),
        pytest.param("2.5E+1", Real(25.0)),
        pytest.param("0 ^ 0", Real(1.0)),
    ],
)
def test_eval_arithmetic(code: str, expected_ret_val: Value) -> None:
    assert evaluate_line(default_symbols(), code) == expected_ret_val


@pytest.mark.parametrize("a", [0.0, 1.0, 2.5, 7.0, 1e-3, 123456.789])
@pytest.mark.parametrize("b", [1.0, 3.0, 0.25, 42.0])
@pytest.mark.parametrize(
    "op, native",
    [
        pytest.param("+", lambda a, b: a + b, id="add"),
        pytest.param("-", lambda a, b: a - b, id="sub"),
        pytest.param("*", lambda a, b: a * b, id="mul"),
        pytest.param("/", lambda a, b: a / b, id="div"),
    ],
)
def test_binary_operation_matches_native(a: float, b: float, op: str, native) -> None:
    result = evaluate_line(default_symbols(), f"{a!r} {op} {b!r}")
    assert isinstance(result, Real)
    assert math.isclose(result.v, native(a, b))


def test_factorial_of_non_integer_uses_gamma() -> None:
    result = evaluate_line(default_symbols(), "4.5!")
    assert isinstance(result, Real)
    assert result.v == pytest.approx(52.3428, abs=1e-4)
    assert result.v == math.gamma(5.5)


@pytest.mark.parametrize(
    "code, expected",
    [
        pytest.param("e", math.e),
        pytest.param("pi", math.pi),
        pytest.param("2 * pi", 2 * math.pi),
        pytest.param("e ^ 2", math.e**2),
    ],
)
def test_eval_constants(code: str, expected: float) -> None:
    assert evaluate_line(default_symbols(), code) == Real(expected)


@pytest.mark.parametrize(
    "code",
    [
        pytest.param("10 ^ 400"),
        pytest.param("0 ^ -1"),
        pytest.param("200!"),
        pytest.param("1e400"),
    ],
)
def test_overflow_is_infinite(code: str) -> None:
    assert evaluate_line(default_symbols(), code) == Real(math.inf)


def test_evaluation_does_not_touch_symbols() -> None:
    symbols = default_symbols()
    before = [(name, symbols.lookup(name)) for name in symbols.names()]
    for code in ["pi * 2", "e + foo", "1 / 0", "(-1)!"]:
        evaluate_line(symbols, code)
    assert [(name, symbols.lookup(name)) for name in symbols.names()] == before


@pytest.mark.parametrize(
    "code, expected",
    [
        pytest.param("(-0) ^ -1", -math.inf),
        pytest.param("(-0) ^ -3", -math.inf),
        pytest.param("(-0) ^ -2", math.inf),
        pytest.param("(-0) ^ -0.5", math.inf),
        pytest.param("0 ^ -3", math.inf),
    ],
)
def test_power_of_zero_pole_keeps_sign(code: str, expected: float) -> None:
    assert evaluate_line(default_symbols(), code) == Real(expected)
