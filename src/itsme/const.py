"""
General use constants.
"""

from __future__ import annotations
from typing import Final

EXCERPT_LIMIT: Final[int] = 10
"""The most characters of the offending input quoted in a diagnostic."""

SIGNS: Final[frozenset[str]] = frozenset({"-", "+"})
DECIMAL: Final[frozenset[str]] = frozenset({"0", "1", "2", "3", "4", "5", "6", "7", "8", "9"})
HEXADECIMAL: Final[frozenset[str]] = DECIMAL | {"a", "b", "c", "d", "e", "f", "A", "B", "C", "D", "E", "F"}
