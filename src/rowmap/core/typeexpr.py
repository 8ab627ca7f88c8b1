"""
Type expressions used by field declarations and directives.

Parses the small type language fields are declared in (``i32``,
``Option<String>``, ``std::collections::HashMap<String, i64>``, ``(i32, bool)``)
into frozen TypeExpr values. The rendered form of a TypeExpr is its identity:
the type registry, constraint sets and generated procedures all key on it.

Grammar (EBNF)
--------------
    type      = path | tuple ;
    path      = [ "::" ] ident { "::" ident } [ "<" type { "," type } [ "," ] ">" ] ;
    tuple     = "(" [ type { "," type } [ "," ] ] ")" ;
    ident     = letter_or_underscore { letter_or_underscore | digit } ;

Optional-wrapper detection
--------------------------
`TypeExpr.is_optional_wrapper` is purely syntactic: a single unqualified path
segment named ``Option``. A qualified ``std::option::Option<T>`` is not
recognized, and a locally defined type named ``Option`` is recognized. Both are
known limitations and are kept as is.

Examples
--------
>>> from rowmap.core.typeexpr import parse_type
>>> t = parse_type("Option< String >")
>>> t.render()
'Option<String>'
>>> t.is_optional_wrapper, t.inner.render()
(True, 'String')
>>> parse_type("std::option::Option<i32>").is_optional_wrapper
False
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final

from .constants import OPTION_WRAPPER
from .errors import UnparsableTypeError

__all__ = [
    "TypeExpr",
    "parse_type",
    "optional_of",
]

_TOKEN_RE: Final = re.compile(r"\s*(?:(::)|([A-Za-z_][A-Za-z0-9_]*)|([<>,()]))")


@dataclass(frozen=True)
class TypeExpr:
    """
    Parsed type expression.

    Attributes:
        path (tuple[str, ...]): Path segments; empty for tuple types.
        args (tuple[TypeExpr, ...]): Generic arguments, or tuple elements.
        leading_colon (bool): True when written with a leading ``::``.
        is_tuple (bool): True for ``( ... )`` forms (``()`` is the unit type).
    """

    path: tuple[str, ...]
    args: tuple[TypeExpr, ...] = field(default_factory=tuple)
    leading_colon: bool = False
    is_tuple: bool = False

    @property
    def name(self) -> str:
        """Last path segment (the outer type constructor)."""
        return self.path[-1] if self.path else ""

    @property
    def is_optional_wrapper(self) -> bool:
        return (
            not self.is_tuple
            and not self.leading_colon
            and len(self.path) == 1
            and self.path[0] == OPTION_WRAPPER
        )

    @property
    def inner(self) -> TypeExpr | None:
        """Wrapped type of an optional wrapper, else None."""
        if self.is_optional_wrapper and len(self.args) == 1:
            return self.args[0]
        return None

    @property
    def is_bare_name(self) -> bool:
        """Single segment without arguments (candidate generic parameter)."""
        return not self.is_tuple and not self.leading_colon and len(self.path) == 1 and not self.args

    def wrap_optional(self) -> TypeExpr:
        """Return ``Option<self>``."""
        return optional_of(self)

    def substitute(self, bindings: Mapping[str, TypeExpr]) -> TypeExpr:
        """Replace bare names found in `bindings`, recursing into arguments."""
        if not bindings:
            return self
        if self.is_bare_name and self.path[0] in bindings:
            return bindings[self.path[0]]
        if not self.args:
            return self
        return TypeExpr(
            path=self.path,
            args=tuple(a.substitute(bindings) for a in self.args),
            leading_colon=self.leading_colon,
            is_tuple=self.is_tuple,
        )

    def names(self) -> set[str]:
        """All bare names mentioned anywhere in the expression."""
        out: set[str] = set()
        if self.is_bare_name:
            out.add(self.path[0])
        for a in self.args:
            out |= a.names()
        return out

    def render(self) -> str:
        """Canonical spelling, used as the type identity."""
        if self.is_tuple:
            if len(self.args) == 1:
                return f"({self.args[0].render()},)"
            return "(" + ", ".join(a.render() for a in self.args) + ")"
        head = ("::" if self.leading_colon else "") + "::".join(self.path)
        if self.args:
            return head + "<" + ", ".join(a.render() for a in self.args) + ">"
        return head

    def __str__(self) -> str:
        return self.render()


def optional_of(inner: TypeExpr) -> TypeExpr:
    return TypeExpr(path=(OPTION_WRAPPER,), args=(inner,))


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    stripped = text.rstrip()
    while pos < len(stripped):
        m = _TOKEN_RE.match(stripped, pos)
        if m is None or m.end() == pos:
            raise UnparsableTypeError(text, f"unexpected character at offset {pos}")
        tokens.append(m.group(1) or m.group(2) or m.group(3))
        pos = m.end()
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    def _peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> str:
        tok = self._peek()
        if tok is None:
            raise UnparsableTypeError(self.text, "unexpected end of input")
        self.pos += 1
        return tok

    def _expect(self, tok: str) -> None:
        got = self._next()
        if got != tok:
            raise UnparsableTypeError(self.text, f"expected {tok!r}, found {got!r}")

    def _ident(self) -> str:
        tok = self._next()
        if not (tok[0].isalpha() or tok[0] == "_"):
            raise UnparsableTypeError(self.text, f"expected identifier, found {tok!r}")
        return tok

    def _list(self, close: str) -> tuple[list[TypeExpr], bool]:
        # Returns (items, saw_trailing_comma)
        items: list[TypeExpr] = []
        trailing = False
        while self._peek() != close:
            items.append(self.parse_type())
            trailing = False
            if self._peek() == ",":
                self._next()
                trailing = True
            elif self._peek() != close:
                raise UnparsableTypeError(
                    self.text, f"expected ',' or {close!r}, found {self._peek()!r}"
                )
        self._expect(close)
        return items, trailing

    def parse_type(self) -> TypeExpr:
        tok = self._peek()
        if tok == "(":
            self._next()
            items, trailing = self._list(")")
            if len(items) == 1 and not trailing:
                # Parenthesized type, not a 1-tuple.
                return items[0]
            return TypeExpr(path=(), args=tuple(items), is_tuple=True)

        leading = False
        if tok == "::":
            self._next()
            leading = True
        segments = [self._ident()]
        while self._peek() == "::":
            self._next()
            segments.append(self._ident())
        args: list[TypeExpr] = []
        if self._peek() == "<":
            self._next()
            args, _ = self._list(">")
            if not args:
                raise UnparsableTypeError(self.text, "empty generic argument list")
        return TypeExpr(path=tuple(segments), args=tuple(args), leading_colon=leading)

    def parse(self) -> TypeExpr:
        if not self.tokens:
            raise UnparsableTypeError(self.text, "empty type expression")
        result = self.parse_type()
        if self._peek() is not None:
            raise UnparsableTypeError(self.text, f"trailing input {self._peek()!r}")
        return result


def parse_type(text: str) -> TypeExpr:
    """
    Parse a type expression.

    Args:
        text (str): Source text, e.g. ``"Option<String>"``.

    Returns:
        TypeExpr: Parsed expression.

    Raises:
        UnparsableTypeError: If `text` is empty or not a valid type expression.
    """
    if not isinstance(text, str):
        raise UnparsableTypeError(repr(text), "type expression must be a string")
    return _Parser(text).parse()
