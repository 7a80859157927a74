"""Tests for the primitive parsers."""

from __future__ import annotations

import re

import pytest

from itsme import (
    Failure,
    Success,
    alphanumeric,
    anycase,
    character,
    digit,
    eof,
    fail,
    letter,
    pure,
    regex,
    satisfy,
    string,
    whitespace,
)


class TestCharacter:
    def test_match(self):
        assert character("a").parse("abc") == Success("a", "bc")

    def test_mismatch(self):
        assert character("a").parse("xyz") == Failure("Expected 'a' but found 'x'", "xyz")

    def test_end_of_input(self):
        assert character("a").parse("") == Failure("Unexpected end of input, expected 'a'", "")

    def test_requires_one_character(self):
        with pytest.raises(ValueError):
            character("ab")
        with pytest.raises(ValueError):
            character("")


class TestSatisfy:
    def test_match(self):
        assert satisfy(str.isupper, "an uppercase letter").parse("Abc") == Success("A", "bc")

    def test_mismatch(self):
        assert satisfy(str.isupper, "an uppercase letter").parse("abc") == Failure(
            "Expected an uppercase letter but found 'a'", "abc"
        )

    def test_end_of_input(self):
        assert satisfy(str.isupper, "an uppercase letter").parse("") == Failure(
            "Unexpected end of input, expected an uppercase letter", ""
        )


class TestCharacterClasses:
    def test_digit(self):
        assert digit().parse("123") == Success("1", "23")
        assert digit().parse("abc") == Failure("Expected a digit but found 'a'", "abc")

    def test_digit_is_decimal_only(self):
        assert digit().parse("٣") == Success("٣", "")  # ARABIC-INDIC DIGIT THREE
        assert digit().parse("²").is_failure()  # SUPERSCRIPT TWO

    def test_letter(self):
        assert letter().parse("abc") == Success("a", "bc")
        assert letter().parse("été") == Success("é", "té")
        assert letter().parse("123") == Failure("Expected a letter but found '1'", "123")

    def test_alphanumeric(self):
        assert alphanumeric().parse("abc").is_success()
        assert alphanumeric().parse("123").is_success()
        assert alphanumeric().parse("!@#") == Failure("Expected an alphanumeric character but found '!'", "!@#")
        assert alphanumeric().parse("_").is_failure()

    def test_whitespace(self):
        assert whitespace().parse(" abc") == Success(" ", "abc")
        assert whitespace().parse("\tabc") == Success("\t", "abc")
        assert whitespace().parse("\nabc") == Success("\n", "abc")
        assert whitespace().parse("abc") == Failure("Expected whitespace but found 'a'", "abc")
        assert whitespace().parse("") == Failure("Unexpected end of input, expected whitespace", "")


class TestString:
    def test_match(self):
        assert string("hello").parse("hello world") == Success("hello", " world")

    def test_exact(self):
        assert string("hello").parse("hello") == Success("hello", "")

    def test_mismatch(self):
        assert string("hello").parse("world") == Failure('Expected "hello" but found "world"', "world")

    def test_mismatch_quotes_as_much_as_the_literal(self):
        assert string("hello").parse("help me") == Failure('Expected "hello" but found "help "', "help me")

    def test_input_shorter_than_literal(self):
        assert string("hello").parse("hel") == Failure('Unexpected end of input, expected "hello"', "hel")
        assert string("hello").parse("") == Failure('Unexpected end of input, expected "hello"', "")

    def test_excerpt_is_bounded(self):
        literal = "abcdefghijklmnop"
        assert string(literal).parse("abcdefghijXXXXXXXXXX") == Failure(
            'Expected "abcdefghijklmnop" but found "abcdefghij..."', "abcdefghijXXXXXXXXXX"
        )

    def test_empty_literal(self):
        assert string("").parse("abc") == Success("", "abc")


class TestAnycase:
    def test_match_keeps_input_case(self):
        assert anycase("select").parse("SELECT *") == Success("SELECT", " *")
        assert anycase("select").parse("SeLeCt") == Success("SeLeCt", "")

    def test_mismatch(self):
        assert anycase("select").parse("update x") == Failure(
            'Expected "select" (any case) but found "update"', "update x"
        )

    def test_end_of_input(self):
        assert anycase("select").parse("selec") == Failure(
            'Unexpected end of input, expected "select" (any case)', "selec"
        )


class TestRegex:
    def test_match(self):
        assert regex(r"[0-9]+").parse("123abc") == Success("123", "abc")

    def test_flags(self):
        assert regex(r"[a-z]+", re.IGNORECASE).parse("ABC1") == Success("ABC", "1")

    def test_compiled_pattern(self):
        assert regex(re.compile(r"\d+")).parse("42!") == Success("42", "!")

    def test_mismatch(self):
        assert regex(r"[0-9]+").parse("abc") == Failure('Expected /[0-9]+/ but found "abc"', "abc")

    def test_end_of_input(self):
        assert regex(r"[0-9]+").parse("") == Failure("Unexpected end of input, expected /[0-9]+/", "")


class TestPureFailEof:
    def test_pure(self):
        assert pure(5).parse("abc") == Success(5, "abc")

    def test_fail(self):
        assert fail("nope").parse("abc") == Failure("nope", "abc")

    def test_eof(self):
        assert eof().parse("") == Success(None, "")

    def test_eof_with_input_left(self):
        assert eof().parse("abcdefghijklm") == Failure(
            'Expected end of input but found "abcdefghij..."', "abcdefghijklm"
        )
