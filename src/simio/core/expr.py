"""Expression evaluator for numeric command arguments.

Accepts C-style integer expressions such as ``0x6e``, ``1 << 3`` or
``(IFG2 + 1) & 0xff``. Literals may be decimal, ``0x`` hex, ``0b``
binary, ``0o`` octal, or hex with a trailing ``h`` (``6Eh``).
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Mapping

_TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<num>[0-9][0-9a-fA-F]*[hH]|0[xX][0-9a-fA-F]+|0[bB][01]+|0[oO][0-7]+|[0-9]+)"
    r"|(?P<name>[A-Za-z_.$][A-Za-z0-9_.$]*)"
    r"|(?P<op><<|>>|[-+*/%&|^~()])"
    r")"
)

# Largest shift count accepted; keeps values to a bounded size
MAX_SHIFT = 4096

# Binary operators: symbol -> (precedence, function). Higher binds tighter.
_BINARY_OPS: dict[str, tuple[int, Callable[[int, int], int]]] = {
    "|": (1, operator.or_),
    "^": (2, operator.xor),
    "&": (3, operator.and_),
    "<<": (4, operator.lshift),
    ">>": (4, operator.rshift),
    "+": (5, operator.add),
    "-": (5, operator.sub),
    "*": (6, operator.mul),
    "/": (6, operator.floordiv),
    "%": (6, operator.mod),
}


class ExprError(ValueError):
    """An expression could not be parsed or evaluated."""


def _tokenize(text: str) -> list[tuple[str, str]]:
    """Split text into (kind, value) tokens."""
    tokens: list[tuple[str, str]] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None or m.end() == pos:
            raise ExprError(f"unexpected character at '{text[pos:]}'")
        kind = m.lastgroup
        assert kind is not None
        tokens.append((kind, m.group(kind)))
        pos = m.end()
    return tokens


def _parse_number(text: str) -> int:
    try:
        if text[-1] in "hH":
            return int(text[:-1], 16)
        if text[:2].lower() in ("0x", "0b", "0o"):
            return int(text, 0)
        return int(text, 10)
    except ValueError as e:
        raise ExprError(f"bad number: {text[:20]}") from e


class _Parser:
    """Precedence-climbing evaluator over a token list."""

    def __init__(self, tokens: list[tuple[str, str]], symbols: Mapping[str, int]) -> None:
        self.tokens = tokens
        self.pos = 0
        self.symbols = symbols

    def _peek(self) -> tuple[str, str] | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _advance(self) -> tuple[str, str]:
        tok = self._peek()
        if tok is None:
            raise ExprError("unexpected end of expression")
        self.pos += 1
        return tok

    def parse(self) -> int:
        value = self._binary(1)
        tok = self._peek()
        if tok is not None:
            raise ExprError(f"unexpected token '{tok[1]}'")
        return value

    def _binary(self, min_prec: int) -> int:
        left = self._unary()
        while True:
            tok = self._peek()
            if tok is None or tok[0] != "op" or tok[1] not in _BINARY_OPS:
                return left
            prec, fn = _BINARY_OPS[tok[1]]
            if prec < min_prec:
                return left
            self._advance()
            right = self._binary(prec + 1)
            if tok[1] in ("/", "%") and right == 0:
                raise ExprError("division by zero")
            if tok[1] in ("<<", ">>") and not 0 <= right <= MAX_SHIFT:
                raise ExprError(f"shift count out of range (0..{MAX_SHIFT})")
            try:
                left = fn(left, right)
            except (OverflowError, MemoryError) as e:
                raise ExprError(f"value too large: {e}") from e

    def _unary(self) -> int:
        kind, value = self._advance()
        if kind == "op":
            if value == "-":
                return -self._unary()
            if value == "+":
                return self._unary()
            if value == "~":
                return ~self._unary()
            if value == "(":
                inner = self._binary(1)
                close = self._advance()
                if close != ("op", ")"):
                    raise ExprError(f"expected ')' but found '{close[1]}'")
                return inner
            raise ExprError(f"unexpected operator '{value}'")
        if kind == "num":
            return _parse_number(value)
        if value in self.symbols:
            return self.symbols[value]
        raise ExprError(f"unknown symbol: {value}")


def expr_eval(text: str, symbols: Mapping[str, int] | None = None) -> int:
    """Evaluate an integer expression.

    Args:
        text: Expression source, e.g. ``"0x6e"`` or ``"IFG2 + 1"``.
        symbols: Optional name -> value table for identifiers.

    Returns:
        The integer value of the expression.

    Raises:
        ExprError: If the text is empty, malformed, or references an
            unknown symbol.
    """
    tokens = _tokenize(text)
    if not tokens:
        raise ExprError("empty expression")
    return _Parser(tokens, symbols or {}).parse()
