from __future__ import annotations
from typing import Any, Callable

import operator

import itsme.const as const
from itsme import *

# numbers

def _text(value: str | Absent) -> str:
    return "" if value is ABSENT else value

def _join(parts: tuple[Any, ...]) -> str:
    return "".join(_text(part) for part in parts)

def sign() -> Parser[str]:
    return satisfy(lambda c: c in const.SIGNS, "a sign")

def signed_integer() -> Parser[int]:
    """An `integer()` with an optional leading `-` or `+`."""
    return seq(optional(sign()), integer()).map(
        lambda parts: -parts[1] if parts[0] == "-" else parts[1]
    ).named("signed_integer")

def decimal_number() -> Parser[float]:
    """
    `[-+]digits[.digits][e[-+]digits]`, produced as a `float`.

    A number can also start with the decimal point (`.5`), but the point must be followed by digits.
    """
    digits = many1(digit()).map("".join)
    mantissa = (
        seq(digits, optional(seq(character("."), digits).map(_join))).map(_join)
        | seq(character("."), digits).map(_join)
    )
    exponent = seq(anycase("e"), optional(sign()), digits).map(_join)
    return seq(optional(sign()), mantissa, optional(exponent)).map(
        lambda parts: float(_join(parts))
    ).named("decimal_number")

# quoted string

GENERAL_ESCAPES = {
    'b': '\b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
}

def unicode_escape() -> Parser[str]:
    """`u` followed by 4 hexadecimal digits. The part after the escape character."""
    hex_digit = satisfy(lambda c: c in const.HEXADECIMAL, "a hexadecimal digit")
    return character("u").then(seq(hex_digit, hex_digit, hex_digit, hex_digit)).map(
        lambda code: chr(int("".join(code), base=16))
    ).named("unicode_escape")

def quoted_string(
    quote: str = '"',
    escape: str = '\\',
    escapes: dict[str, str] = GENERAL_ESCAPES,
) -> Parser[str]:
    """
    Text between two `quote`s. Produces the text without the quotes, with the escapes resolved.

    After `escape`: a key of `escapes`, a `unicode_escape()`, or any other character, which stands for itself.
    """
    escaped = character(escape).then(oneof(
        satisfy(lambda c: c in escapes, "an escape sequence").map(escapes.__getitem__),
        unicode_escape(),
        satisfy(lambda c: True, "a character to escape"),
    ))
    plain = satisfy(lambda c: c != quote and c != escape, "a string character")
    return between(
        character(quote),
        many(escaped | plain).map("".join),
        character(quote),
    ).named("quoted_string")

# names and tokens

def identifier() -> Parser[str]:
    """A letter or `_`, followed by letters, digits and `_`s."""
    return seq(
        letter() | character("_"),
        many(alphanumeric() | character("_")),
    ).map(lambda parts: parts[0] + "".join(parts[1])).named("identifier")

def lexeme(parser: Parser[Any]) -> Parser[Any]:
    """The given parser, followed by any amount of whitespace."""
    return parser.followed_by(skip_whitespace())

def symbol(s: str) -> Parser[str]:
    return lexeme(string(s))

def comma_list(parser: Parser[Any]) -> Parser[list[Any]]:
    """`[a, b, c]`, whitespace allowed around every part."""
    return skip_whitespace().then(
        between(symbol("["), sep_by(lexeme(parser), symbol(",")), symbol("]"))
    ).named(f"comma_list({parser.name})")

# arithmetic

def _chain(operand: Parser[int], operators: Parser[Callable[[int, int], int]]) -> Parser[int]:
    """`operand (operator operand)*`, folded from the left."""
    def fold(parts: tuple[int, list[tuple[Callable[[int, int], int], int]]]) -> Parser[int]:
        value, rest = parts
        try:
            for op, right in rest:
                value = op(value, right)
        except ZeroDivisionError:
            return fail("Division by zero")
        return pure(value)
    return seq(operand, many(seq(operators, operand))).flat_map(fold)

def arithmetic() -> Parser[int]:
    """
    Integer arithmetic with `+`, `-`, `*`, `/` (integer division) and parentheses.

    `*` and `/` bind tighter than `+` and `-`. All of them are left associative.
    """
    expr = forward("expr")
    factor = lexeme(integer()) | between(symbol("("), expr, symbol(")"))
    term = _chain(factor, oneof(
        symbol("*").map(lambda _: operator.mul),
        symbol("/").map(lambda _: operator.floordiv),
    ))
    expr.define(_chain(term, oneof(
        symbol("+").map(lambda _: operator.add),
        symbol("-").map(lambda _: operator.sub),
    )))
    return skip_whitespace().then(expr).named("arithmetic")
