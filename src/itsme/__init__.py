"""
Parser combinators for writing string parsers out of small pieces.

See the objects for more explanations.

See the `itsme.general` module for general purpose parsers you can use as examples.

Defining parsers:
```
number = integer()
numbers = between(character("["), sep_by(number, character(",")), character("]"))
greeting = string("hello") >> skip_whitespace() >> (string("world") | string("there"))

def foo(src: str) -> Result[int]:
    if src.startswith("x"):
        return success(10, src[1:])     # success
    return failure("Expected 'x'.", src)    # fail
custom = Parser(foo)
```

Using parsers:
```
result = numbers.parse("[1,2,3] and the rest")
if result:
    ... # `result` is a `Success` object: `result.value`, `result.remaining`
else:
    ... # `result` is a `Failure` object: `result.message`
```

Set `itsme.main.debug = True` to log every parser call to the `itsme` logger at the DEBUG level.
"""

import itsme.const as const
import itsme.main
from itsme.main import (
    ParseError,
    ResultAccessError,
    Success,
    Failure,
    Result,
    success,
    failure,
    Absent,
    ABSENT,
    Parser,
    Forward,
    forward,
    pure,
    fail,
    eof,
    character,
    satisfy,
    digit,
    letter,
    alphanumeric,
    whitespace,
    string,
    anycase,
    regex,
    many,
    many1,
    optional,
    integer,
    skip_whitespace,
    between,
    sep_by,
    sep_by1,
    seq,
    oneof,
    lookahead,
    inverted,
)
import itsme.general as general
