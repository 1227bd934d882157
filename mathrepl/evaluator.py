"""Single-pass evaluation of one line of arithmetic.

Tokens are pulled from the tokenizer one at a time and folded eagerly against an
operator stack using a table of left/right binding precedences, so no expression tree
is ever built. An incoming operator folds the pending one on top of the stack while
``PRECEDENCE[top].right >= PRECEDENCE[incoming].left``: equal pairs give
left-associativity, ``^`` is right-associative because its right precedence is lower
than its left one.
"""

import enum
import logging
import math
from dataclasses import dataclass
from typing import Callable, NamedTuple

from mathrepl.symbols import SymbolTable
from mathrepl.tokenizer import Token, TokenType, next_token
from mathrepl.utils import PrintableEnum
from mathrepl.value import Error, Real, Value

logger = logging.getLogger(__name__)

MAX_STACK_DEPTH = 64


@dataclass
class EvaluationError(Exception):
    errmsg: str
    position: int


@dataclass
class DomainError(Exception):
    errmsg: str


class Precedence(NamedTuple):
    left: int
    right: int


PRECEDENCE: dict[TokenType, Precedence] = {
    TokenType.START_OF_LINE: Precedence(0, 0),
    TokenType.END_OF_LINE: Precedence(1, 0),
    TokenType.BRACKET_CLOSE: Precedence(1, 0),
    TokenType.BRACKET_OPEN: Precedence(99, 0),
    TokenType.UNARY_MINUS: Precedence(59, 59),
    TokenType.PLUS: Precedence(50, 50),
    TokenType.MINUS: Precedence(50, 50),
    TokenType.STAR: Precedence(55, 55),
    TokenType.SLASH: Precedence(55, 55),
    TokenType.CARET: Precedence(61, 60),
    TokenType.BANG: Precedence(62, 62),
}
# values and identifiers never trigger a fold
NON_OPERATOR_PRECEDENCE = Precedence(255, 255)


def get_precedence(token_type: TokenType) -> Precedence:
    return PRECEDENCE.get(token_type, NON_OPERATOR_PRECEDENCE)


def _divide(a: float, b: float) -> float:
    if b == 0.0:
        raise DomainError("divide by zero")
    return a / b


def _power(a: float, b: float) -> float:
    # fractional powers of negative numbers are not real
    if a < 0.0:
        raise DomainError("negative power base")
    try:
        return a**b
    except OverflowError:
        return math.inf
    except ZeroDivisionError:
        # pole at zero keeps the sign of the base for odd integer exponents
        if b.is_integer() and b % 2 == 1:
            return math.copysign(math.inf, a)
        return math.inf


def _factorial(a: float) -> float:
    if a < 0.0:
        raise DomainError("factorial of negative number")
    try:
        return math.gamma(a + 1.0)
    except OverflowError:
        return math.inf


UnaryOperationImpl = Callable[[float], float]
BinaryOperationImpl = Callable[[float, float], float]

unary_impls: dict[TokenType, UnaryOperationImpl] = {
    TokenType.UNARY_MINUS: lambda a: -a,
    TokenType.BANG: _factorial,
}
binary_impls: dict[TokenType, BinaryOperationImpl] = {
    TokenType.PLUS: lambda a, b: a + b,
    TokenType.MINUS: lambda a, b: a - b,
    TokenType.STAR: lambda a, b: a * b,
    TokenType.SLASH: _divide,
    TokenType.CARET: _power,
}


def _apply(impl: Callable[..., float], operator: Token, *operands: Value) -> Value:
    reals: list[float] = []
    for operand in operands:
        if not isinstance(operand, Real):
            raise EvaluationError("wrong data type", operator.position)
        reals.append(operand.v)
    try:
        return Real(impl(*reals))
    except DomainError as e:
        raise EvaluationError(e.errmsg, operator.position) from e


class State(PrintableEnum):
    EXPECT_VALUE = enum.auto()
    EXPECT_OPERATOR = enum.auto()
    DONE = enum.auto()


class LineEvaluator:
    """Working state for a single line: cursor, operator stack and value stack.

    Every call to a state handler consumes exactly one token and returns the next state.
    """

    def __init__(self, symbols: SymbolTable, line: str) -> None:
        self.symbols = symbols
        self.line = line
        self.cursor = 0
        self.operators: list[Token] = [Token(type=TokenType.START_OF_LINE, position=0)]
        self.values: list[Value] = []

    def run(self) -> Value:
        state = State.EXPECT_VALUE
        while state is not State.DONE:
            token, self.cursor = next_token(self.line, self.cursor)
            if token.type is TokenType.ERROR:
                raise EvaluationError(token.errmsg, token.position)
            if state is State.EXPECT_VALUE:
                state = self.expect_value(token)
            else:
                state = self.expect_operator(token)
        return self.values[0]

    def _push_operator(self, token: Token) -> None:
        if len(self.operators) >= MAX_STACK_DEPTH:
            raise EvaluationError("expression too complex", token.position)
        self.operators.append(token)

    def _push_value(self, value: Value, token: Token) -> None:
        if len(self.values) >= MAX_STACK_DEPTH:
            raise EvaluationError("expression too complex", token.position)
        self.values.append(value)

    def expect_value(self, token: Token) -> State:
        if token.type is TokenType.BRACKET_OPEN:
            self._push_operator(token)
            return State.EXPECT_VALUE
        elif token.type is TokenType.PLUS:
            return State.EXPECT_VALUE
        elif token.type is TokenType.MINUS:
            self._push_operator(Token(type=TokenType.UNARY_MINUS, position=token.position, lexeme=token.lexeme))
            return State.EXPECT_VALUE
        elif token.type is TokenType.IDENTIFIER:
            value = self.symbols.lookup(token.lexeme)
            if isinstance(value, Error):
                raise EvaluationError(value.errmsg, token.position)
            self._push_value(value, token)
            return State.EXPECT_OPERATOR
        elif token.type is TokenType.NUMBER:
            self._push_value(Real(token.number), token)
            return State.EXPECT_OPERATOR
        else:
            raise EvaluationError("expected value", token.position)

    def expect_operator(self, token: Token) -> State:
        incoming = get_precedence(token.type)
        while get_precedence(self.operators[-1].type).right >= incoming.left:
            self.fold(self.operators.pop())

        if token.type in binary_impls:
            self._push_operator(token)
            return State.EXPECT_VALUE
        elif token.type is TokenType.BANG:
            self.values[-1] = _apply(unary_impls[TokenType.BANG], token, self.values[-1])
            return State.EXPECT_OPERATOR
        elif token.type is TokenType.END_OF_LINE:
            if len(self.operators) != 1:
                raise EvaluationError("parenthesis not closed", token.position)
            return State.DONE
        elif token.type is TokenType.BRACKET_CLOSE:
            if self.operators[-1].type is not TokenType.BRACKET_OPEN:
                raise EvaluationError("mismatched parenthesis", token.position)
            self.operators.pop()
            return State.EXPECT_OPERATOR
        else:
            raise EvaluationError("expected operator", token.position)

    def fold(self, operator: Token) -> None:
        if operator.type in unary_impls:
            self.values[-1] = _apply(unary_impls[operator.type], operator, self.values[-1])
        elif operator.type in binary_impls:
            right = self.values.pop()
            self.values[-1] = _apply(binary_impls[operator.type], operator, self.values[-1], right)
        else:
            logger.error(f"Unexpected operator on the stack: {operator.type}")
            raise RuntimeError(f"broken parser: cannot fold {operator.type}")
        logger.debug(f"Folded {operator.type} at {operator.position}: {self.values[-1]}")


def evaluate_line(symbols: SymbolTable, line: str) -> Value:
    """Evaluates one line, returning either a Real result or an Error pointing at the fault"""
    try:
        return LineEvaluator(symbols, line).run()
    except EvaluationError as e:
        logger.debug(f"Evaluation of {line!r} failed at {e.position}: {e.errmsg}")
        return Error(e.errmsg, error_offset=e.position)
