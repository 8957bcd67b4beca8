"""
General purpose parsers, built only out of the public combinators.

Can be used as they are or as examples.
"""

from __future__ import annotations
from typing import Any, Callable

from collections.abc import Iterable

import inkcomb.const as const
from inkcomb.main import (
    Parser,
    Values,
    Success,
    Failure,
    Cursor,
    FAILURE,
    Total,
    combinator,
    tuple_of,
    one,
    optional,
    sequence,
    repeat0,
    repeat1,
    map,
    try_map,
    filter,
    foldl,
    foldr,
)


def satisfy(pred: Callable[[Any], Any]) -> Parser:
    """Consumes a single token if `pred` holds for it."""
    return try_map(one(), filter(pred)).named(getattr(pred, "__name__", "satisfy"))

def token(value: Any) -> Parser:
    """Consumes a single token equal to `value`."""
    return satisfy(lambda t: t == value).named(repr(value))

def token_in(values: Iterable[Any]) -> Parser:
    """Consumes a single token equal to any of the `values`."""
    options = tuple(values)
    return satisfy(lambda t: t in options).named("[" + " ".join(repr(value) for value in options) + "]")

@combinator(name="end_of_input", arity=0)
def end_of_input(cursor: Cursor[Any]) -> Success[Values] | Failure:
    """Succeeds with an empty `Values` only at the end of the input."""
    if cursor.at_end():
        return Success(Values(), cursor)
    return FAILURE

def skip(parser: Parser) -> Parser:
    """
    Matches the parser but drops its value, so it doesn't show up in a sequence.

    ```
    parens = sequence(skip(token("(")), expr, skip(token(")")))
    ```
    """
    return map(parser, Total(lambda *_: Values(), arity=0)).named(f"skip({parser.name})")

def separated(parser: Parser, separator: Parser, collection: Callable[[Iterable[Any]], Any] = const.DEFAULT_COLLECTION) -> Parser:
    """
    One or more `parser` separated by `separator`. The separators are dropped.

    ```
    separated(digit, token(",")).parse("1,2,3")     # ["1", "2", "3"]
    ```
    """
    tail = repeat0(sequence(skip(separator), parser))
    def collect(*args: Any) -> Any:
        head, rest = tuple_of(*args[:-1]), args[-1]
        return collection([head, *rest])
    return map(sequence(parser, tail), collect).named(f"separated({parser.name}, {separator.name})")

def chain_left(operand: Parser, operator: Parser) -> Parser:
    """
    `operand (operator operand)*`, folded from the left.

    `operator` has to produce a binary function, `operand` a single value.
    ```
    minus = map(token("-"), lambda _: lambda a, b: a - b)
    chain_left(integer, minus).parse("5-2-1")       # (5 - 2) - 1 == 2
    ```
    """
    rest = repeat0(sequence(operator, operand))
    return map(sequence(operand, rest), foldl(lambda acc, step: step[0](acc, step[1])))

def chain_right(operand: Parser, operator: Parser) -> Parser:
    """
    `(operand operator)* operand`, folded from the right.

    `operator` has to produce a binary function, `operand` a single value.
    ```
    power = map(token("^"), lambda _: lambda a, b: a ** b)
    chain_right(integer, power).parse("2^3^2")      # 2 ** (3 ** 2) == 512
    ```
    """
    init = repeat0(sequence(operand, operator))
    return map(sequence(init, operand), foldr(lambda step, acc: step[1](step[0], acc)))


# character level

digit = satisfy(lambda c: c in const.DECIMAL).named("digit")
letter = satisfy(lambda c: c in const.ALPHABETIC).named("letter")
whitespace = satisfy(lambda c: c in const.WHITESPACES).named("whitespace")
spaces = skip(repeat0(whitespace)).named("spaces")

def lexeme(parser: Parser) -> Parser:
    """Matches the parser, then skips any whitespace after it."""
    return sequence(parser, spaces)

def _to_integer(sign: Any, digits: list[str]) -> int:
    value = int("".join(digits))
    return -value if sign else value

integer = map(sequence(optional(token("-")), repeat1(digit)), _to_integer).named("integer")
"""An optionally negative decimal integer."""

identifier = map(
    sequence(letter | token("_"), repeat0(satisfy(lambda c: c in const.ALNUM or c == "_"))),
    lambda first, rest: first + "".join(rest),
).named("identifier")
"""A letter or underscore followed by letters, digits and underscores."""
