"""
Generic parser combinators over any token stream.

Small parsers are composed into bigger ones with a fixed set of combinators. The tokens can be characters, lexer tokens or any other records.

See the objects for more explanations.

See the `inkcomb.general` module for general purpose parsers you can use as examples.

Defining parsers:
```
digit = map(one(), filter(str.isdigit))
number = map(repeat1(digit), lambda digits: int("".join(digits)))
plus = map(token("+"), lambda _: lambda a, b: a + b)
expr = map(sequence(number, repeat0(sequence(plus, number))), foldl(lambda acc, step: step[0](acc, step[1])))

# or with operators
pair = (number & skip(token(",")) & number)[lambda a, b: (a, b)]
```

Using parsers:
```
result = expr(SequenceCursor("1+2"))
if result:
    ... # `result` is a `Success`, `result.value` is 3, `result.next` is the cursor after the input
else:
    ... # `result` is `FAILURE`

expr.parse("1+2")   # 3, raises `ParseError` on failure
```

Recursive rules:
```
@combinator
def nested(cursor):
    return (skip(token("(")) & ~nested & skip(token(")")))(cursor)
```
"""

import inkcomb.const as const
import inkcomb.main
from inkcomb.main import (
    log,
    set_debug,
    is_debug,
    GrammarError,
    ParseError,
    Cursor,
    SequenceCursor,
    Success,
    Failure,
    FAILURE,
    Result,
    Values,
    tuple_of,
    as_values,
    unwrap,
    concat,
    Some,
    Nothing,
    NOTHING,
    Option,
    Parser,
    combinator,
    succeed,
    fail,
    one,
    optional,
    sequence,
    alternative,
    repeat0,
    repeat1,
    Total,
    Partial,
    map,
    try_map,
    filter,
    select,
    foldl,
    foldr,
)
from inkcomb.general import (
    satisfy,
    token,
    token_in,
    end_of_input,
    skip,
    separated,
)
import inkcomb.general as general
