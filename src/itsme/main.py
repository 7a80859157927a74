"""
The implementations of the main classes and the combinators.
"""

from __future__ import annotations
from typing import Any, Final, Generic, Literal, NoReturn, TypeVar, Callable

from dataclasses import dataclass
import enum
import logging
import re
import sys

import itsme.const as const


log = logging.getLogger("itsme")

debug: bool = False
"""If true, every `Parser.parse()` call is logged at the DEBUG level."""


_T = TypeVar("_T")
_U = TypeVar("_U")
_CovT = TypeVar("_CovT", covariant=True)


def excerpt(src: str, limit: int = const.EXCERPT_LIMIT) -> str:
    """The first `limit` characters of `src`. Appends `...` if anything was cut off."""
    if len(src) > limit:
        return src[:limit] + "..."
    return src


class ResultAccessError(AttributeError):
    """
    Raised when reading an attribute the result's variant doesn't have.

    Reading `value` of a `Failure` (or `message` of a `Success`) is a bug in the calling code. Check the result first:
    ```
    r = parser.parse(src)
    if r:
        r.value     # `r` is a `Success` object
    else:
        r.message   # `r` is a `Failure` object
    ```
    """

class ParseError(Exception):
    """
    The exception that's raised when a failed parse is turned into an error.

    Parsers never raise it themselves. See `Failure.error()` and `Parser.parse_value()`.
    """

    def __init__(self, msg: str, src: str | None = None) -> None:
        """
        `msg`: The reason for the failure.
        `src`: The input at the point of the failure, if known.
        """
        super().__init__(msg)
        self.msg: str = msg
        self.src: str | None = src
        if src is not None:
            self.add_note(f"At: {excerpt(src)!r}" if src else "At: end of input")


@dataclass(frozen=True, slots=True)
class Success(Generic[_CovT]):
    """
    The outcome of a parser that matched.

    `value` is what the parser produced, `remaining` is the part of the input it didn't consume.
    """
    value: _CovT
    remaining: str

    def is_success(self) -> Literal[True]:
        return True

    def is_failure(self) -> Literal[False]:
        return False

    @property
    def message(self) -> NoReturn:
        raise ResultAccessError("A successful result has no error message.")

    def map(self, f: Callable[[_CovT], _U]) -> Success[_U]:
        """Transforms the value. The remaining input is kept as-is."""
        return Success(f(self.value), self.remaining)

    def __bool__(self) -> Literal[True]:
        return True

@dataclass(frozen=True, slots=True)
class Failure:
    """
    The outcome of a parser that didn't match.

    `message` is a human readable reason. `src` is the input at the point of the failure, if the parser that failed recorded it.

    Can be converted into a `ParseError` with `error()`.
    """
    message: str
    src: str | None = None

    def is_success(self) -> Literal[False]:
        return False

    def is_failure(self) -> Literal[True]:
        return True

    @property
    def value(self) -> NoReturn:
        raise ResultAccessError(f"A failed result has no value: {self.message}")

    @property
    def remaining(self) -> NoReturn:
        raise ResultAccessError(f"A failed result has no remaining input: {self.message}")

    def map(self, f: Callable[[Any], Any]) -> Failure:
        """Failures pass through `map()` unchanged."""
        return self

    def error(self) -> ParseError:
        """Converts this to a ParseError."""
        return ParseError(self.message, self.src)

    def __bool__(self) -> Literal[False]:
        return False

Result = Success[_T] | Failure
"""
When used for typing: `Result[ValueType]`

```
r = parser.parse(src)
if r:
    ... # `r` is a `Success` object
else:
    ... # `r` is a `Failure` object
```
"""

def success(value: _T, remaining: str) -> Success[_T]:
    return Success(value, remaining)

def failure(message: str, src: str | None = None) -> Failure:
    return Failure(message, src)


class Absent(enum.Enum):
    """The type of `ABSENT`, what `optional()` produces when its parser doesn't match."""
    ABSENT = enum.auto()

    def __bool__(self) -> Literal[False]:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

ABSENT: Final = Absent.ABSENT



class Parser(Generic[_CovT]):
    """
    Wraps a function that takes the input and returns a `Result`.

    Parsers don't hold any state, so the same parser can be used any number of times, from any number of threads.
    Combining parsers always creates new parsers:
    ```
    number = integer()
    numbers = between(character("["), sep_by(number, character(",")), character("]"))

    numbers.parse("[1,2,3]")      # Success(value=[1, 2, 3], remaining='')
    ```
    """

    def __init__(self, fn: Callable[[str], Result[_CovT]], name: str | None = None) -> None:
        """
        `fn`: Takes the input and returns a `Success` holding the unconsumed suffix of it, or a `Failure`.
        `name`: Used in debug logs and in `repr()`. Defaults to the function's name.
        """
        self.fn: Final[Callable[[str], Result[_CovT]]] = fn
        self.name: Final[str] = name if name is not None else getattr(fn, "__name__", "parser")

    def parse(self, src: str) -> Result[_CovT]:
        """Runs the parser on `src`."""
        if not debug:
            return self.fn(src)
        log.debug("trying %s on %r", self.name, excerpt(src))
        result = self.fn(src)
        log.debug("%s -> %r", self.name, result)
        return result

    def __call__(self, src: str) -> Result[_CovT]:
        """Same as `Parser.parse()`."""
        return self.parse(src)

    def parse_value(self, src: str) -> _CovT:
        """
        Runs the parser on `src` and returns the value.

        Raises a `ParseError` if the parser fails.
        """
        result = self.parse(src)
        if isinstance(result, Failure):
            raise result.error()
        return result.value

    def named(self, name: str) -> Parser[_CovT]:
        """Creates a copy of this parser with the provided name."""
        return Parser(self.fn, name)

    def map(self, f: Callable[[_CovT], _U]) -> Parser[_U]:
        """Transforms the value of a successful parse. Failures pass through unchanged."""
        return Parser(lambda src: self.parse(src).map(f), f"map({self.name})")

    def flat_map(self, f: Callable[[_CovT], Parser[_U]]) -> Parser[_U]:
        """
        Runs this parser, then passes its value to `f` and runs the returned parser on the remaining input.

        Short-circuits if this parser fails.
        """
        def inner(src: str) -> Result[_U]:
            result = self.parse(src)
            if isinstance(result, Failure):
                return result
            return f(result.value).parse(result.remaining)
        return Parser(inner, f"flat_map({self.name})")

    def followed_by(self, other: Parser[Any]) -> Parser[_CovT]:
        """Runs this parser, then `other`. Keeps the value of this parser. Same as `self << other`."""
        return self.flat_map(lambda value: other.map(lambda _: value)).named(f"({self.name} << {other.name})")

    def then(self, other: Parser[_U]) -> Parser[_U]:
        """Runs this parser, then `other`. Keeps the value of `other`. Same as `self >> other`."""
        return self.flat_map(lambda _: other).named(f"({self.name} >> {other.name})")

    def or_(self, other: Parser[_U]) -> Parser[_CovT | _U]:
        """
        Ordered choice. Same as `self | other`.

        If this parser succeeds, its result is returned and `other` is never run.
        Otherwise `other` is run on the same input, and its result is returned as-is, even if it's a failure.
        """
        def inner(src: str) -> Result[_CovT | _U]:
            result = self.parse(src)
            if result:
                return result
            return other.parse(src)
        return Parser(inner, f"({self.name} | {other.name})")

    def __or__(self, other: Parser[_U]) -> Parser[_CovT | _U]:
        return self.or_(other)

    def __rshift__(self, other: Parser[_U]) -> Parser[_U]:
        return self.then(other)

    def __lshift__(self, other: Parser[Any]) -> Parser[_CovT]:
        return self.followed_by(other)

    def __repr__(self) -> str:
        return f"<Parser {self.name}>"

class Forward(Parser[_T]):
    """
    A placeholder for a parser that's defined later. Used for recursive grammars.

    ```
    value = forward("value")
    value.define(integer() | between(character("["), sep_by(value, character(",")), character("]")))
    ```
    """

    def __init__(self, name: str = "forward") -> None:
        super().__init__(self._run, name)
        self.target: Parser[_T] | None = None

    def define(self, parser: Parser[_T]) -> None:
        """Binds the placeholder. Can only be done once."""
        if self.target is not None:
            raise ValueError(f"Forward parser `{self.name}` is already defined.")
        self.target = parser

    def _run(self, src: str) -> Result[_T]:
        if self.target is None:
            raise NotImplementedError(f"Forward parser `{self.name}` was used before being defined.")
        return self.target.parse(src)

def forward(name: str = "forward") -> Forward[Any]:
    """Creates a `Forward` parser. Bind it with `Forward.define()`."""
    return Forward(name)



def pure(value: _T) -> Parser[_T]:
    """Always succeeds with `value`, without consuming anything."""
    return Parser(lambda src: Success(value, src), f"pure({value!r})")

def fail(message: str) -> Parser[NoReturn]:
    """Always fails with `message`."""
    return Parser(lambda src: Failure(message, src), "fail")

def eof() -> Parser[None]:
    """Matches the end of the input."""
    def inner(src: str) -> Result[None]:
        if src:
            return Failure(f'Expected end of input but found "{excerpt(src)}"', src)
        return Success(None, src)
    return Parser(inner, "eof")

def character(c: str) -> Parser[str]:
    """Matches the given character. Case sensitive."""
    if len(c) != 1:
        raise ValueError("Exactly one character required.")
    def inner(src: str) -> Result[str]:
        if not src:
            return Failure(f"Unexpected end of input, expected '{c}'", src)
        if src[0] == c:
            return Success(c, src[1:])
        return Failure(f"Expected '{c}' but found '{src[0]}'", src)
    return Parser(inner, repr(c))

def satisfy(predicate: Callable[[str], bool], description: str) -> Parser[str]:
    """
    Matches a single character that the predicate accepts.

    `description` is used in the failure messages, e.g. "a digit".
    """
    def inner(src: str) -> Result[str]:
        if not src:
            return Failure(f"Unexpected end of input, expected {description}", src)
        if predicate(src[0]):
            return Success(src[0], src[1:])
        return Failure(f"Expected {description} but found '{src[0]}'", src)
    return Parser(inner, description)

def digit() -> Parser[str]:
    return satisfy(str.isdecimal, "a digit")

def letter() -> Parser[str]:
    return satisfy(str.isalpha, "a letter")

def alphanumeric() -> Parser[str]:
    return satisfy(lambda c: c.isalpha() or c.isdecimal(), "an alphanumeric character")

def whitespace() -> Parser[str]:
    return satisfy(str.isspace, "whitespace")

def _literal_failure(s: str, src: str, expected: str) -> Failure:
    if len(src) < len(s):
        return Failure(f"Unexpected end of input, expected {expected}", src)
    found = src[:min(len(s), const.EXCERPT_LIMIT)]
    if len(s) > const.EXCERPT_LIMIT:
        found += "..."
    return Failure(f'Expected {expected} but found "{found}"', src)

def string(s: str) -> Parser[str]:
    """Matches the given string. Case sensitive."""
    def inner(src: str) -> Result[str]:
        if src.startswith(s):
            return Success(s, src[len(s):])
        return _literal_failure(s, src, f'"{s}"')
    return Parser(inner, repr(s))

def anycase(s: str) -> Parser[str]:
    """
    Matches the given string. Non case sensitive.

    Produces the matched part of the input, not `s`.
    """
    folded = s.lower()
    def inner(src: str) -> Result[str]:
        if len(src) >= len(s) and src[:len(s)].lower() == folded:
            return Success(src[:len(s)], src[len(s):])
        return _literal_failure(s, src, f'"{s}" (any case)')
    return Parser(inner, f"anycase({s!r})")

def regex(pattern: str | re.Pattern[str], flags: int | re.RegexFlag = 0) -> Parser[str]:
    """
    Matches the regex at the start of the input. Produces the matched string.

    The pattern is compiled once, when the parser is created.
    """
    compiled = re.compile(pattern, flags)
    def inner(src: str) -> Result[str]:
        m = compiled.match(src)
        if m is not None:
            return Success(m.group(), src[m.end():])
        if not src:
            return Failure(f"Unexpected end of input, expected /{compiled.pattern}/", src)
        return Failure(f'Expected /{compiled.pattern}/ but found "{excerpt(src)}"', src)
    return Parser(inner, f"/{compiled.pattern}/")



def many(parser: Parser[_T]) -> Parser[list[_T]]:
    """
    Repeatedly matches the given parser until it fails. Never fails itself.

    An iteration that succeeds without consuming anything also stops the loop, and its value is dropped.
    """
    def inner(src: str) -> Result[list[_T]]:
        values: list[_T] = []
        remaining = src
        while True:
            result = parser.parse(remaining)
            if isinstance(result, Failure) or len(result.remaining) >= len(remaining):
                break
            values.append(result.value)
            remaining = result.remaining
        return Success(values, remaining)
    return Parser(inner, f"many({parser.name})")

def many1(parser: Parser[_T]) -> Parser[list[_T]]:
    """Repeatedly matches the given parser until it fails. Succeeds if at least one iteration matches."""
    repeated = many(parser)
    def inner(src: str) -> Result[list[_T]]:
        result = repeated.parse(src)
        if isinstance(result, Success) and not result.value:
            return Failure("Expected at least one match", src)
        return result
    return Parser(inner, f"many1({parser.name})")

def optional(parser: Parser[_T]) -> Parser[_T | Absent]:
    """
    Always succeeds.

    If the given parser doesn't match, produces `ABSENT` and consumes nothing.
    """
    def inner(src: str) -> Result[_T | Absent]:
        result = parser.parse(src)
        if result:
            return result
        return Success(ABSENT, src)
    return Parser(inner, f"optional({parser.name})")

def integer() -> Parser[int]:
    """
    Matches one or more digits and produces them as an `int`.

    Python integers have no size limit, but converting more digits than `sys.get_int_max_str_digits()` allows fails.
    """
    def to_int(digits: list[str]) -> Parser[int]:
        limit = sys.get_int_max_str_digits()
        if limit and len(digits) > limit:
            return fail(f"Integer literal too long ({len(digits)} digits)")
        return pure(int("".join(digits)))
    return many1(digit()).flat_map(to_int).named("integer")

def skip_whitespace() -> Parser[None]:
    """Matches zero or more whitespaces. Always succeeds."""
    return many(whitespace()).map(lambda _: None).named("skip_whitespace")

def between(open: Parser[Any], content: Parser[_T], close: Parser[Any]) -> Parser[_T]:
    """Matches `open`, `content` and `close` in sequence. Keeps the value of `content`."""
    return open.then(content).followed_by(close).named(f"between({open.name}, {content.name}, {close.name})")

def sep_by(content: Parser[_T], separator: Parser[Any]) -> Parser[list[_T]]:
    """
    Matches zero or more `content`s separated by `separator`s. Never fails.

    A trailing separator that isn't followed by a `content` is left unconsumed.
    """
    def inner(src: str) -> Result[list[_T]]:
        first = content.parse(src)
        if isinstance(first, Failure):
            return Success([], src)
        values = [first.value]
        remaining = first.remaining
        while True:
            sep_result = separator.parse(remaining)
            if isinstance(sep_result, Failure):
                break
            next_result = content.parse(sep_result.remaining)
            if isinstance(next_result, Failure) or len(next_result.remaining) >= len(remaining):
                break
            values.append(next_result.value)
            remaining = next_result.remaining
        return Success(values, remaining)
    return Parser(inner, f"sep_by({content.name}, {separator.name})")

def sep_by1(content: Parser[_T], separator: Parser[Any]) -> Parser[list[_T]]:
    """Same as `sep_by()`, but fails if there isn't at least one `content`."""
    separated = sep_by(content, separator)
    def inner(src: str) -> Result[list[_T]]:
        result = separated.parse(src)
        if isinstance(result, Success) and not result.value:
            return Failure("Expected at least one match", src)
        return result
    return Parser(inner, f"sep_by1({content.name}, {separator.name})")

def seq(*parsers: Parser[Any]) -> Parser[tuple[Any, ...]]:
    """
    All the given parsers must match in sequence for the parser to succeed.

    Produces a tuple of their values.
    """
    if len(parsers) < 2:
        raise ValueError("At least two parsers required.")
    def inner(src: str) -> Result[tuple[Any, ...]]:
        values: list[Any] = []
        remaining = src
        for parser in parsers:
            result = parser.parse(remaining)
            if isinstance(result, Failure):
                return result
            values.append(result.value)
            remaining = result.remaining
        return Success(tuple(values), remaining)
    return Parser(inner, "seq(" + ", ".join(parser.name for parser in parsers) + ")")

def oneof(*parsers: Parser[Any]) -> Parser[Any]:
    """
    Attempts to match any of the parsers, in sequence, until one matches.

    If none match, returns the failure of the last one.
    """
    if len(parsers) < 2:
        raise ValueError("At least two parsers required.")
    def inner(src: str) -> Result[Any]:
        for parser in parsers:
            result = parser.parse(src)
            if result:
                return result
        return result
    return Parser(inner, "oneof(" + ", ".join(parser.name for parser in parsers) + ")")

def lookahead(parser: Parser[_T]) -> Parser[_T]:
    """Matches without advancing."""
    def inner(src: str) -> Result[_T]:
        result = parser.parse(src)
        if isinstance(result, Failure):
            return result
        return Success(result.value, src)
    return Parser(inner, f"lookahead({parser.name})")

def inverted(parser: Parser[Any]) -> Parser[None]:
    """Succeeds without advancing if the given parser fails, fails if it succeeds."""
    def inner(src: str) -> Result[None]:
        result = parser.parse(src)
        if isinstance(result, Success):
            return Failure(f"Unexpected {result.value!r}", src)
        return Success(None, src)
    return Parser(inner, f"inverted({parser.name})")
