"""Structural analysis of Rust source: symbols, nesting and dx element usage."""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class SymbolKind(Enum):
    FUNCTION = "function"
    STRUCT = "struct"
    ENUM = "enum"
    IMPL = "impl"
    MOD = "mod"
    CONST = "const"
    STATIC = "static"
    TRAIT = "trait"
    TYPE = "type"
    VARIABLE = "variable"


@dataclass(frozen=True)
class Range:
    """Span of a symbol: 1-based lines, 0-based columns."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int


@dataclass
class Symbol:
    """A named item in a source file, with any items nested inside it."""

    name: str
    kind: SymbolKind
    range: Range
    children: list[Symbol] = field(default_factory=list)


@dataclass(frozen=True)
class DxPattern:
    """A ``<dx...>`` element found in markup (line 1-based, column 0-based)."""

    component_name: str
    line: int
    col: int


_ITEM_PREFIXES: tuple[tuple[str, SymbolKind], ...] = (
    ("fn ", SymbolKind.FUNCTION),
    ("struct ", SymbolKind.STRUCT),
    ("enum ", SymbolKind.ENUM),
    ("impl ", SymbolKind.IMPL),
    ("const ", SymbolKind.CONST),
    ("static ", SymbolKind.STATIC),
    ("trait ", SymbolKind.TRAIT),
    ("type ", SymbolKind.TYPE),
)


def _split_lines(source: str) -> list[str]:
    """Split on ``\\n`` (dropping a preceding ``\\r``), without a trailing empty line."""
    if not source:
        return []
    parts = source.split("\n")
    trailing_newline = parts[-1] == ""
    if trailing_newline:
        parts.pop()
    last = len(parts) - 1
    return [
        part[:-1] if (index < last or trailing_newline) and part.endswith("\r") else part
        for index, part in enumerate(parts)
    ]


def _leading_token(text: str, is_stop: Callable[[str], bool]) -> str:
    """Characters of ``text`` up to the first one for which ``is_stop`` holds."""
    for index, char in enumerate(text):
        if is_stop(char):
            return text[:index]
    return text


def _contains(span: Range, line: int, column: int) -> bool:
    if line < span.start_line or line > span.end_line:
        return False
    if line == span.start_line and column < span.start_col:
        return False
    if line == span.end_line and column > span.end_col:
        return False
    return True


def _find_in_tree(symbols: Sequence[Symbol], line: int, column: int) -> Symbol | None:
    for symbol in symbols:
        if _contains(symbol.range, line, column):
            return _find_in_tree(symbol.children, line, column) or symbol
    return None


def _extract_symbols(source: str) -> list[Symbol]:
    """Line-based symbol extraction covering modules and common item kinds.

    Items that follow a ``mod`` line become its children until a line starting
    with ``}`` closes it.
    """
    symbols: list[Symbol] = []
    current_mod: Symbol | None = None

    for line_number, line in enumerate(_split_lines(source), start=1):
        trimmed = line.lstrip()
        if not trimmed:
            continue
        leading = len(line) - len(trimmed)
        span = Range(
            start_line=line_number,
            start_col=leading,
            end_line=line_number,
            end_col=leading + len(trimmed),
        )

        if trimmed.startswith("mod "):
            name = _leading_token(trimmed[4:], lambda c: c == "{" or c.isspace())
            if not name:
                continue
            module = Symbol(name=name, kind=SymbolKind.MOD, range=span)
            symbols.append(module)
            current_mod = module
            continue

        if trimmed.startswith("}"):
            current_mod = None
            continue

        match = next(
            ((prefix, kind) for prefix, kind in _ITEM_PREFIXES if trimmed.startswith(prefix)),
            None,
        )
        if match is None:
            continue
        prefix, kind = match
        name = _leading_token(
            trimmed[len(prefix):], lambda c: c in "({:" or c.isspace()
        )
        if not name:
            continue

        symbol = Symbol(name=name, kind=kind, range=span)
        if current_mod is not None:
            current_mod.children.append(symbol)
        else:
            symbols.append(symbol)

    return symbols


class SemanticAnalyzer:
    """Extracts symbols from Rust files and keeps a per-file symbol table."""

    def __init__(self) -> None:
        self._symbol_table: dict[str, list[Symbol]] = {}

    @staticmethod
    def _key(file_path: str | os.PathLike[str]) -> str:
        return str(Path(file_path))

    def analyze_file(self, file_path: str | os.PathLike[str], source: str) -> list[Symbol]:
        """Extract the symbols of ``source`` and remember them for ``file_path``."""
        symbols = _extract_symbols(source)
        self._symbol_table[self._key(file_path)] = symbols
        return symbols

    def find_symbol_at_position(
        self, file_path: str | os.PathLike[str], line: int, column: int
    ) -> Symbol | None:
        """The innermost analysed symbol covering the 1-based line and column."""
        symbols = self._symbol_table.get(self._key(file_path))
        if symbols is None:
            return None
        return _find_in_tree(symbols, line, column)

    def get_symbols(self, file_path: str | os.PathLike[str]) -> list[Symbol] | None:
        """Symbols from the last analysis of ``file_path``, or ``None``."""
        return self._symbol_table.get(self._key(file_path))

    def detect_dx_patterns(self, source: str) -> list[DxPattern]:
        """The first ``<dx`` element on each line of ``source``."""
        patterns = []
        for line_number, line in enumerate(_split_lines(source), start=1):
            position = line.find("<dx")
            if position < 0:
                continue
            name = _leading_token(
                line[position + 1:], lambda c: c in ">(" or c.isspace()
            )
            if name:
                patterns.append(DxPattern(component_name=name, line=line_number, col=position))
        return patterns