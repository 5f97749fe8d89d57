"""
Field path expressions for navigating unstructured documents.

Grammar:
    path     := ["{"] ["."] segment ("." segment)* ["}"]
    segment  := field ("[" int "]")*
    field    := any run of characters other than ".", "[", "]", "{", "}"

Examples: ``spec.foo``, ``.status.outputs.url``, ``{.status.conditions[0].type}``.
Wildcards, filters and recursive descent are not supported.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

_FIELD = re.compile(r"[^.\[\]{}]+")
_INDEX = re.compile(r"\[(-?\d+)\]")


class PathSyntaxError(ValueError):
    """Raised when a path expression cannot be parsed."""


class PathNotFoundError(LookupError):
    """Raised when a path has no value on the evaluated document."""


@dataclass(frozen=True)
class FieldAccess:
    name: str


@dataclass(frozen=True)
class IndexAccess:
    index: int
    field: str


Accessor = FieldAccess | IndexAccess


@dataclass(frozen=True)
class CompiledPath:
    expression: str
    accessors: tuple[Accessor, ...]

    def evaluate(self, document: Any) -> Any:
        """Return the value at this path.

        Raises:
            PathNotFoundError: At the first accessor that cannot be resolved
        """
        current = document
        for accessor in self.accessors:
            if isinstance(accessor, FieldAccess):
                if not isinstance(current, dict) or accessor.name not in current:
                    raise PathNotFoundError(f"{accessor.name} is not found")
                current = current[accessor.name]
            else:
                if not isinstance(current, list):
                    raise PathNotFoundError(f"{accessor.field} is not array or slice")
                length = len(current)
                position = accessor.index + length if accessor.index < 0 else accessor.index
                if position < 0 or position >= length:
                    raise PathNotFoundError(
                        f"array index out of bounds: index {accessor.index}, length {length}"
                    )
                current = current[position]
        return current


@lru_cache(maxsize=256)
def compile_path(expression: str) -> CompiledPath:
    """Parse a path expression.

    Raises:
        PathSyntaxError: If the expression is empty or malformed
    """
    text = expression.strip()
    if text.startswith("{") or text.endswith("}"):
        if not (text.startswith("{") and text.endswith("}")):
            raise PathSyntaxError(f"unclosed braces in path {expression!r}")
        text = text[1:-1].strip()
    if text.startswith("."):
        text = text[1:]
    if not text:
        raise PathSyntaxError(f"empty path {expression!r}")

    accessors: list[Accessor] = []
    for segment in text.split("."):
        match = _FIELD.match(segment)
        if not match:
            raise PathSyntaxError(f"invalid segment {segment!r} in path {expression!r}")
        name = match.group(0)
        accessors.append(FieldAccess(name))

        rest = segment[match.end():]
        while rest:
            index = _INDEX.match(rest)
            if not index:
                raise PathSyntaxError(f"invalid index {rest!r} in path {expression!r}")
            accessors.append(IndexAccess(int(index.group(1)), name))
            rest = rest[index.end():]

    return CompiledPath(expression=expression, accessors=tuple(accessors))


def evaluate(expression: str, document: Any) -> Any:
    """Compile and evaluate ``expression`` against ``document``."""
    return compile_path(expression).evaluate(document)
