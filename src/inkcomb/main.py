"""
The implementations of the cursors, results and combinators.
"""

from __future__ import annotations
from typing import overload, Any, Self, Literal, TypeVar, Generic, Final, Callable, Protocol

from collections.abc import Sequence, Iterable, Reversible
import itertools
import logging

import inkcomb.const as const


log = logging.getLogger("inkcomb")

_debug: bool = False

def set_debug(enabled: bool = True) -> None:
    """
    Turns the debug-level parsing log on or off.

    While enabled, every parser invocation logs what it tries, what it matched and what failed to `logging.getLogger("inkcomb")`.

    ```
    import logging
    logging.basicConfig(level=logging.DEBUG)
    inkcomb.set_debug()
    ```
    """
    global _debug
    _debug = enabled

def is_debug() -> bool:
    return _debug


_T = TypeVar("_T")
_TokenT = TypeVar("_TokenT")
_TokenCovT = TypeVar("_TokenCovT", covariant=True)
_ValueCovT = TypeVar("_ValueCovT", covariant=True)



class GrammarError(ValueError):
    """
    Raised while a grammar is being constructed, when combinators are put together in a way that can't work.

    Never raised during a parse.
    """

class ParseError(Exception):
    """
    The exception raised by `Parser.parse()` when the input doesn't match.

    The combinators themselves never raise it, they return `FAILURE`.
    """

    def __init__(self, tokens: Sequence[Any], pos: int, msg: str | None = None) -> None:
        """
        `tokens`: The tokens that were being parsed.
        `pos`: The position the parse stopped at.
        `msg`: The reason for the error.
        """
        if msg is None:
            super().__init__()
        else:
            super().__init__(msg)
        self.tokens: Sequence[Any] = tokens
        self.pos: int = pos
        self.append_pos_note(pos)

    def append_pos_note(self, pos: int, msg: str | None = None) -> Self:
        note: list[str] = [] if msg is None else [msg]
        note.append(f"At position {min(pos, len(self.tokens))}")
        self.add_note("\n".join(note))
        return self



class Cursor(Protocol[_TokenCovT]):
    """
    An immutable position in a token stream.

    Cursors are values. `advance()` returns a new cursor and leaves the old one untouched, so backtracking is just reusing an older cursor.

    Cursors must be equality comparable. Two cursors are equal when they point to the same position of the same stream.
    """
    def at_end(self) -> bool:
        """Whether there are no tokens left."""
        ...

    def current(self) -> _TokenCovT:
        """The token under the cursor. Only defined when `at_end()` is false."""
        ...

    def advance(self) -> Self:
        """A new cursor one token further. Only defined when `at_end()` is false."""
        ...

class SequenceCursor(Generic[_TokenT]):
    """
    A `Cursor` over any `Sequence`: a string, a list of lexer tokens, a tuple of records, etc.

    ```
    c = SequenceCursor("1+2")
    c.current()             # "1"
    c.advance().pos         # 1
    ```
    """
    def __init__(self, tokens: Sequence[_TokenT], pos: int = 0) -> None:
        if not 0 <= pos <= len(tokens):
            raise IndexError(f"Position {pos} is outside of the token stream.")
        self.tokens: Final[Sequence[_TokenT]] = tokens
        """The token stream. Must not be modified while it's being parsed."""
        self.pos: Final[int] = pos
        """The index of the current token."""

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def current(self) -> _TokenT:
        if self.at_end():
            raise IndexError("There is no current token at the end of the input.")
        return self.tokens[self.pos]

    def advance(self) -> SequenceCursor[_TokenT]:
        if self.at_end():
            raise IndexError("Can't advance past the end of the input.")
        return SequenceCursor(self.tokens, self.pos + 1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SequenceCursor):
            return NotImplemented
        return self.tokens is other.tokens and self.pos == other.pos

    def __hash__(self) -> int:
        return hash((id(self.tokens), self.pos))

    def __repr__(self) -> str:
        return f"<SequenceCursor {self.pos}/{len(self.tokens)}>"



class Success(Generic[_ValueCovT]):
    """
    Returned from a parser when it matched.

    ```
    r = parser(cursor)
    if r:
        ... # `r` is a `Success`, use `r.value` and `r.next`
    else:
        ... # `r` is `FAILURE`
    ```
    """
    def __init__(self, value: _ValueCovT, next: Cursor[Any]) -> None:
        self.value: Final[_ValueCovT] = value
        """The produced value."""
        self.next: Final[Cursor[Any]] = next
        """The cursor right after the consumed tokens."""

    def __bool__(self) -> Literal[True]:
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Success):
            return NotImplemented
        return self.value == other.value and self.next == other.next

    def __repr__(self) -> str:
        return f"<Success {self.value!r} {self.next!r}>"

class Failure:
    """
    Returned from a parser when it didn't match. Carries nothing.

    Use the `FAILURE` instance instead of creating new ones.
    """
    def __bool__(self) -> Literal[False]:
        return False

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Failure)

    def __hash__(self) -> int:
        return hash(Failure)

    def __repr__(self) -> str:
        return "<Failure>"

FAILURE: Final[Failure] = Failure()

Result = Success[_T] | Failure



class Values(tuple):
    """
    The composite value produced by sequencing.

    Only `Values` get flattened and unwrapped. Any other value, tuples returned by mappers included, is treated as a single component.
    """
    __slots__ = ()

    def __repr__(self) -> str:
        return "Values" + super().__repr__()

def tuple_of(*args: Any) -> Any:
    """Returns the argument itself if there's exactly one, a `Values` of them otherwise."""
    if len(args) == 1:
        return args[0]
    return Values(args)

def as_values(value: Any) -> Values:
    """Wraps the value into a `Values` unless it already is one."""
    if isinstance(value, Values):
        return value
    return Values((value,))

def unwrap(value: Any) -> Any:
    """Unwraps single component `Values`."""
    while isinstance(value, Values) and len(value) == 1:
        value = value[0]
    return value

def concat(*values: Any) -> Any:
    """
    Concatenates the components of the values into one `Values`, flattening exactly one level.

    ```
    concat(1, Values((2, 3)))   # Values(1, 2, 3)
    concat(Values(), 1)         # 1
    ```
    """
    return unwrap(Values(itertools.chain.from_iterable(as_values(value) for value in values)))



class Some(Generic[_ValueCovT]):
    """
    The present case of an optional value.

    Produced by `optional()` and returned by partial mappers.
    """
    def __init__(self, value: _ValueCovT) -> None:
        self.value: Final[_ValueCovT] = value

    def __bool__(self) -> Literal[True]:
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Some):
            return NotImplemented
        return self.value == other.value

    def __hash__(self) -> int:
        return hash((Some, self.value))

    def __repr__(self) -> str:
        return f"Some({self.value!r})"

class Nothing:
    """
    The absent case of an optional value. Use the `NOTHING` instance.
    """
    def __bool__(self) -> Literal[False]:
        return False

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Nothing)

    def __hash__(self) -> int:
        return hash(Nothing)

    def __repr__(self) -> str:
        return "NOTHING"

NOTHING: Final[Nothing] = Nothing()

Option = Some[_T] | Nothing



class ParserFn(Protocol):
    """The function wrapped by a `Parser`."""
    def __call__(self, cursor: Cursor[Any]) -> Success[Any] | Failure: ...

class Parser(Generic[_ValueCovT]):
    """
    A combinator. Call it with a cursor to run it.

    ```
    r = parser(SequenceCursor(tokens))
    if r:
        r.value, r.next
    ```

    Operators:
    - `a & b`: `sequence(a, b)`
    - `a | b`: `alternative(a, b)`
    - `~a`: `optional(a)`
    - `-a`: `repeat0(a)`
    - `+a`: `repeat1(a)`
    - `a[f]`: `map(a, f)`
    """
    def __init__(self, fn: ParserFn, *, name: str | None = None, arity: int | None = None) -> None:
        """
        `fn`: Takes a cursor, returns a `Success` or `FAILURE`.
        `name`: Used in the debug log and in `repr()`.
        `arity`: The number of flattened components of the produced value, if it's known in advance.
        """
        self.fn: Final[ParserFn] = fn
        self.name: str = getattr(fn, "__name__", repr(fn)) if name is None else name
        self.arity: Final[int | None] = arity
        self._chain: tuple[Literal["sequence", "alternative"], tuple[Parser, ...]] | None = None

    def __call__(self, cursor: Cursor[Any]) -> Success[_ValueCovT] | Failure:
        if not _debug:
            return self.fn(cursor)
        log.debug("trying %s at %r", self.name, cursor)
        result = self.fn(cursor)
        if result:
            log.debug("matched %s -> %r", self.name, result.value)
        else:
            log.debug("failed %s", self.name)
        return result

    def named(self, name: str) -> Parser[_ValueCovT]:
        """Returns a copy of this parser with the given name. The parser itself is left untouched."""
        return Parser(self.fn, name=name, arity=self.arity)

    def parse(self, tokens: Sequence[Any], *, full: bool = True) -> _ValueCovT:
        """
        Runs the parser from the start of `tokens` and returns the produced value.

        `full`: Whether all of the tokens have to be consumed.

        Raises a `ParseError` if the parser fails.
        """
        result = self(SequenceCursor(tokens))
        if not result:
            raise ParseError(tokens, 0, f"Failed to parse {self.name}.")
        end = result.next
        if full and not end.at_end():
            raise ParseError(tokens, getattr(end, "pos", 0), "Expected the end of the input.")
        return result.value

    def _parts(self, kind: Literal["sequence", "alternative"]) -> tuple[Parser, ...]:
        if self._chain is not None and self._chain[0] == kind:
            return self._chain[1]
        return (self,)

    def __and__(self, other: Parser) -> Parser:
        _check_parser(other, "sequence")
        parts = self._parts("sequence") + other._parts("sequence")
        parser = sequence(*parts)
        parser._chain = ("sequence", parts)
        return parser

    def __or__(self, other: Parser) -> Parser:
        _check_parser(other, "alternative")
        parts = self._parts("alternative") + other._parts("alternative")
        parser = alternative(*parts)
        parser._chain = ("alternative", parts)
        return parser

    def __invert__(self) -> Parser[Some[_ValueCovT] | Nothing]:
        return optional(self)

    def __neg__(self) -> Parser[list[_ValueCovT]]:
        return repeat0(self)

    def __pos__(self) -> Parser[list[_ValueCovT]]:
        return repeat1(self)

    def __getitem__(self, mapper: Callable[..., Any]) -> Parser:
        return map(self, mapper)

    def optional(self) -> Parser[Some[_ValueCovT] | Nothing]:
        """Same as `optional(self)`"""
        return optional(self)

    def repeat0(self, collection: Callable[[Iterable[Any]], Any] = const.DEFAULT_COLLECTION) -> Parser:
        """Same as `repeat0(self, collection)`"""
        return repeat0(self, collection)

    def repeat1(self, collection: Callable[[Iterable[Any]], Any] = const.DEFAULT_COLLECTION) -> Parser:
        """Same as `repeat1(self, collection)`"""
        return repeat1(self, collection)

    def map(self, mapper: Callable[..., Any]) -> Parser:
        """Same as `map(self, mapper)`"""
        return map(self, mapper)

    def try_map(self, mapper: Callable[..., Option[Any]]) -> Parser:
        """Same as `try_map(self, mapper)`"""
        return try_map(self, mapper)

    def __repr__(self) -> str:
        return f"<Parser {self.name}>"


def _check_parser(parser: object, combinator_name: str) -> None:
    if not isinstance(parser, Parser):
        raise GrammarError(f"The {combinator_name} combinator requires parsers as arguments, got {parser!r}.")

def _check_parsers(parsers: tuple[object, ...], combinator_name: str) -> None:
    if len(parsers) <= 0:
        raise GrammarError("At least one parser required.")
    for parser in parsers:
        _check_parser(parser, combinator_name)

def _check_callable(fn: object, what: str) -> None:
    if not callable(fn):
        raise GrammarError(f"The {what} must be callable, got {fn!r}.")


@overload
def combinator(fn: ParserFn, /) -> Parser: ...
@overload
def combinator(*, name: str | None = None, arity: int | None = None) -> Callable[[ParserFn], Parser]: ...

def combinator(fn: ParserFn | None = None, /, *, name: str | None = None, arity: int | None = None) -> Parser | Callable[[ParserFn], Parser]:
    """
    Turns a function taking a cursor and returning a `Success` or `FAILURE` into a `Parser`.

    Recursive rules are written this way, referring to the other rules inside the body:
    ```
    @combinator
    def expr(cursor):
        return (term & token("+") & expr | term)(cursor)
    ```
    """
    if fn is not None:
        return Parser(fn, name=name, arity=arity)
    def decorator(fn: ParserFn) -> Parser:
        return Parser(fn, name=name, arity=arity)
    return decorator



def succeed() -> Parser[Values]:
    """A parser that always succeeds with an empty `Values`, consuming nothing."""
    def succeed_fn(cursor: Cursor[Any]) -> Success[Values]:
        return Success(Values(), cursor)
    return Parser(succeed_fn, name="succeed", arity=0)

def fail() -> Parser[Any]:
    """A parser that always fails."""
    def fail_fn(cursor: Cursor[Any]) -> Failure:
        return FAILURE
    return Parser(fail_fn, name="fail")

def one() -> Parser[Any]:
    """
    Consumes a single token and succeeds with it.

    Fails at the end of the input.
    """
    def one_fn(cursor: Cursor[Any]) -> Success[Any] | Failure:
        if cursor.at_end():
            return FAILURE
        return Success(cursor.current(), cursor.advance())
    return Parser(one_fn, name="one", arity=1)



def optional(parser: Parser[_T]) -> Parser[Some[_T] | Nothing]:
    """
    Always succeeds.

    Produces `Some(value)` if `parser` matched, `NOTHING` without consuming anything otherwise.
    """
    _check_parser(parser, "optional")
    def optional_fn(cursor: Cursor[Any]) -> Success[Some[_T] | Nothing]:
        if result := parser(cursor):
            return Success(Some(result.value), result.next)
        return Success(NOTHING, cursor)
    return Parser(optional_fn, name=f"~{parser.name}", arity=1)

def sequence(*parsers: Parser) -> Parser:
    """
    Matches all of the parsers one after the other. Fails if any of them fails.

    The produced values are concatenated into a single flat `Values`:
    ```
    sequence(one(), one()).parse("ab")                      # Values("a", "b")
    sequence(sequence(one(), one()), one()).parse("abc")    # Values("a", "b", "c")
    ```

    A sequence of a single parser is that parser.
    """
    _check_parsers(parsers, "sequence")
    if len(parsers) == 1:
        return parsers[0]
    arities = [parser.arity for parser in parsers]
    arity = None if None in arities else sum(arities) # type: ignore[arg-type]

    def sequence_fn(cursor: Cursor[Any]) -> Success[Any] | Failure:
        values: list[Any] = []
        for parser in parsers:
            result = parser(cursor)
            if not result:
                return FAILURE
            values.append(result.value)
            cursor = result.next
        return Success(concat(*values), cursor)
    return Parser(sequence_fn, name="(" + " & ".join(parser.name for parser in parsers) + ")", arity=arity)

def alternative(*parsers: Parser) -> Parser:
    """
    Attempts to match the parsers in order, each from the same starting cursor, and returns the result of the first one that matches. If none match, fails.

    There's no longest match. The first success wins.

    Branches that are known to produce different numbers of components are rejected with a `GrammarError`.
    """
    _check_parsers(parsers, "alternative")
    if len(parsers) == 1:
        return parsers[0]
    known = {parser.arity for parser in parsers if parser.arity is not None}
    if len(known) > 1:
        shapes = ", ".join(f"{parser.name}: {parser.arity}" for parser in parsers if parser.arity is not None)
        raise GrammarError(f"The branches of an alternative must produce the same number of components. ({shapes})")
    arity = known.pop() if known and all(parser.arity is not None for parser in parsers) else None

    def alternative_fn(cursor: Cursor[Any]) -> Success[Any] | Failure:
        for parser in parsers:
            if result := parser(cursor):
                return result
        return FAILURE
    return Parser(alternative_fn, name="(" + " | ".join(parser.name for parser in parsers) + ")", arity=arity)

def repeat0(parser: Parser[_T], collection: Callable[[Iterable[_T]], Any] = const.DEFAULT_COLLECTION) -> Parser:
    """
    Repeatedly matches the parser until it fails. Always succeeds.

    The produced values are collected in order and handed to `collection`. (`list` by default)

    A parser that can succeed without consuming anything never stops repeating.
    """
    _check_parser(parser, "repeat")
    _check_callable(collection, "collection")
    def repeat0_fn(cursor: Cursor[Any]) -> Success[Any]:
        items: list[_T] = []
        while result := parser(cursor):
            items.append(result.value)
            cursor = result.next
        return Success(collection(items), cursor)
    return Parser(repeat0_fn, name=f"{parser.name}*", arity=1)

def repeat1(parser: Parser[_T], collection: Callable[[Iterable[_T]], Any] = const.DEFAULT_COLLECTION) -> Parser:
    """
    Repeatedly matches the parser until it fails. Succeeds if at least one iteration matches.

    The produced values are collected in order and handed to `collection`. (`list` by default)
    """
    _check_parser(parser, "repeat")
    _check_callable(collection, "collection")
    def repeat1_fn(cursor: Cursor[Any]) -> Success[Any] | Failure:
        first = parser(cursor)
        if not first:
            return FAILURE
        items: list[_T] = [first.value]
        cursor = first.next
        while result := parser(cursor):
            items.append(result.value)
            cursor = result.next
        return Success(collection(items), cursor)
    return Parser(repeat1_fn, name=f"+{parser.name}", arity=1)



class Total(Generic[_T]):
    """
    Marks a mapper that always produces a value.

    Plain callables passed to `map()` are treated as total mappers producing a single component. Wrap a mapper in this to declare a different `arity`, e.g. one returning `Values`. (`None` means unknown.)
    """
    def __init__(self, fn: Callable[..., _T], *, arity: int | None = 1) -> None:
        _check_callable(fn, "mapper")
        self.fn: Final[Callable[..., _T]] = fn
        self.arity: Final[int | None] = arity

    def __call__(self, *args: Any) -> _T:
        return self.fn(*args)

    def requires(self) -> int:
        """The smallest number of components this mapper can be applied to."""
        return 0

    def result_arity(self, input_arity: int | None) -> int | None:
        return self.arity

class Partial(Generic[_T]):
    """
    Marks a mapper that may reject its input.

    The wrapped function must return `Some(value)` to succeed or `NOTHING` to make the parse fail.
    """
    def __init__(self, fn: Callable[..., Option[_T]], *, arity: int | None = 1) -> None:
        _check_callable(fn, "mapper")
        self.fn: Final[Callable[..., Option[_T]]] = fn
        self.arity: Final[int | None] = arity

    def __call__(self, *args: Any) -> Option[_T]:
        return self.fn(*args)

    def requires(self) -> int:
        return 0

    def result_arity(self, input_arity: int | None) -> int | None:
        return self.arity

def _as_mapper(mapper: Callable[..., Any]) -> Total[Any] | Partial[Any]:
    if isinstance(mapper, (Total, Partial)):
        return mapper
    return Total(mapper)

def _map_parser(parser: Parser, mapper: Total[Any] | Partial[Any]) -> Parser:
    if parser.arity is not None and parser.arity < mapper.requires():
        raise GrammarError(f"{parser.name} produces {parser.arity} components, the mapper needs at least {mapper.requires()}.")
    arity = mapper.result_arity(parser.arity)

    if isinstance(mapper, Partial):
        def try_map_fn(cursor: Cursor[Any]) -> Success[Any] | Failure:
            if not (result := parser(cursor)):
                return FAILURE
            outcome = mapper(*as_values(result.value))
            if isinstance(outcome, Some):
                return Success(unwrap(outcome.value), result.next)
            if isinstance(outcome, Nothing):
                return FAILURE
            raise TypeError(f"A partial mapper must return `Some(...)` or `NOTHING`, got {outcome!r}.")
        return Parser(try_map_fn, name=f"{parser.name}?", arity=arity)

    def map_fn(cursor: Cursor[Any]) -> Success[Any] | Failure:
        if not (result := parser(cursor)):
            return FAILURE
        return Success(unwrap(mapper(*as_values(result.value))), result.next)
    return Parser(map_fn, name=parser.name, arity=arity)

def map(parser: Parser, mapper: Callable[..., Any]) -> Parser:
    """
    Applies the parser, then calls the mapper with the components of the produced value as arguments.

    A plain callable or a `Total` mapper replaces the value.
    A `Partial` mapper can also make the parse fail by returning `NOTHING`. (Use `try_map()` to pass a plain callable as a partial mapper.)

    ```
    map(sequence(one(), one()), lambda a, b: a + b).parse("ab")    # "ab"
    map(one(), filter(str.isdigit)).parse("a")                      # ParseError
    ```
    """
    _check_parser(parser, "map")
    _check_callable(mapper, "mapper")
    return _map_parser(parser, _as_mapper(mapper))

def try_map(parser: Parser, mapper: Callable[..., Option[Any]]) -> Parser:
    """
    Like `map()`, but the mapper is always partial: it returns `Some(value)` to succeed or `NOTHING` to make the parse fail.

    The consumed tokens are given back on failure.
    """
    _check_parser(parser, "map")
    _check_callable(mapper, "mapper")
    if isinstance(mapper, Partial):
        return _map_parser(parser, mapper)
    if isinstance(mapper, Total):
        return _map_parser(parser, Partial(mapper.fn, arity=mapper.arity))
    return _map_parser(parser, Partial(mapper))



class _Filter(Partial[Any]):
    def __init__(self, pred: Callable[..., Any]) -> None:
        _check_callable(pred, "predicate")
        self.pred: Final[Callable[..., Any]] = pred
        super().__init__(self._filter)

    def _filter(self, *args: Any) -> Option[Any]:
        if self.pred(*args):
            return Some(tuple_of(*args))
        return NOTHING

    def result_arity(self, input_arity: int | None) -> int | None:
        return input_arity

def filter(pred: Callable[..., Any]) -> Partial[Any]:
    """
    A partial mapper that passes the components through unchanged if `pred` holds for them, and fails otherwise.

    ```
    digit = map(one(), filter(str.isdigit))
    ```
    """
    return _Filter(pred)

class _Select(Total[Any]):
    def __init__(self, indices: tuple[int, ...]) -> None:
        self.indices: Final[tuple[int, ...]] = indices
        super().__init__(self._select, arity=len(indices))

    def _select(self, *args: Any) -> Any:
        return tuple_of(*(args[i] for i in self.indices))

    def requires(self) -> int:
        return max(self.indices) + 1

def select(*indices: int) -> Total[Any]:
    """
    A total mapper that keeps the components at the given indices, in the given order. Indices may repeat.

    ```
    parens = map(sequence(token("("), expr, token(")")), select(1))
    ```
    """
    if len(indices) <= 0:
        raise GrammarError("At least one index required.")
    for index in indices:
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            raise GrammarError(f"Select indices must be non-negative integers, got {index!r}.")
    return _Select(indices)

def foldl(op: Callable[[Any, Any], Any]) -> Total[Any]:
    """
    A total mapper taking an initial value and a collection. Folds the collection from the left.

    `foldl(f)(a, [b, c])` is `f(f(a, b), c)`
    """
    _check_callable(op, "fold function")
    def foldl_fn(initial: Any, items: Iterable[Any]) -> Any:
        for item in items:
            initial = op(initial, item)
        return initial
    return Total(foldl_fn)

def foldr(op: Callable[[Any, Any], Any]) -> Total[Any]:
    """
    A total mapper taking a collection and an initial value. Folds the collection from the right.

    `foldr(f)([a, b], c)` is `f(a, f(b, c))`
    """
    _check_callable(op, "fold function")
    def foldr_fn(items: Iterable[Any], initial: Any) -> Any:
        if not isinstance(items, Reversible):
            items = list(items)
        for item in reversed(items):
            initial = op(item, initial)
        return initial
    return Total(foldr_fn)
