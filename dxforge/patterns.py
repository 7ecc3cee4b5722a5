"""Detection of dx-tool component references in source code."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

_BUILTIN_TOOLS: dict[str, tuple[str, str]] = {
    "ui": ("dx", "dx-ui"),
    "icons": ("dxi", "dx-icons"),
    "fonts": ("dxf", "dx-fonts"),
    "style": ("dxs", "dx-style"),
    "i18n": ("dxt", "dx-i18n"),
    "auth": ("dxa", "dx-auth"),
    "check": ("dxc", "dx-check"),
}


@dataclass(frozen=True)
class DxToolType:
    """A dx tool family: one of the built-in tools or a custom one."""

    name: str
    is_custom: bool = False

    UI: ClassVar[DxToolType]
    ICONS: ClassVar[DxToolType]
    FONTS: ClassVar[DxToolType]
    STYLE: ClassVar[DxToolType]
    I18N: ClassVar[DxToolType]
    AUTH: ClassVar[DxToolType]
    CHECK: ClassVar[DxToolType]

    def __post_init__(self) -> None:
        if not self.is_custom and self.name not in _BUILTIN_TOOLS:
            raise ValueError(f"unknown built-in dx tool: {self.name!r}")

    @classmethod
    def custom(cls, value: str) -> DxToolType:
        """A custom tool whose prefix and tool name are both ``value``."""
        return cls(value, is_custom=True)

    def prefix(self) -> str:
        """The identifier prefix used in source code, e.g. ``dxi``."""
        if self.is_custom:
            return self.name
        return _BUILTIN_TOOLS[self.name][0]

    def tool_name(self) -> str:
        """The tool's package name, e.g. ``dx-icons``."""
        if self.is_custom:
            return self.name
        return _BUILTIN_TOOLS[self.name][1]

    @staticmethod
    def from_prefix(prefix: str) -> DxToolType:
        """Map a source prefix back to its tool; unknown prefixes become custom."""
        for key, (known_prefix, _) in _BUILTIN_TOOLS.items():
            if known_prefix == prefix:
                return DxToolType(key)
        return DxToolType.custom(prefix)


DxToolType.UI = DxToolType("ui")
DxToolType.ICONS = DxToolType("icons")
DxToolType.FONTS = DxToolType("fonts")
DxToolType.STYLE = DxToolType("style")
DxToolType.I18N = DxToolType("i18n")
DxToolType.AUTH = DxToolType("auth")
DxToolType.CHECK = DxToolType("check")


@dataclass(frozen=True)
class PatternMatch:
    """One dx reference found in a file (line and column are 1-based)."""

    file: Path
    line: int
    column: int
    pattern: str
    tool: DxToolType
    component_name: str


def _lines(content: str) -> list[str]:
    """Split text into lines on ``\\n`` or ``\\r\\n``, without a trailing empty line."""
    parts = content.split("\n")
    trailing_newline = parts[-1] == ""
    if trailing_newline:
        parts.pop()
    result = []
    last = len(parts) - 1
    for index, part in enumerate(parts):
        terminated = index < last or trailing_newline
        if terminated and part.endswith("\r"):
            part = part[:-1]
        result.append(part)
    return result


class PatternDetector:
    """Finds dx component references such as ``dxButton`` or ``dxiHome``."""

    def __init__(self) -> None:
        self._patterns: dict[DxToolType, re.Pattern[str]] = {
            tool: re.compile(rf"\b{tool.prefix()}([A-Z][a-zA-Z0-9]*)\b")
            for tool in (
                DxToolType.UI,
                DxToolType.ICONS,
                DxToolType.FONTS,
                DxToolType.STYLE,
                DxToolType.I18N,
                DxToolType.AUTH,
            )
        }

    def detect_in_file(self, path: str | os.PathLike[str], content: str) -> list[PatternMatch]:
        """Return every dx reference in ``content``, attributed to ``path``."""
        file = Path(path)
        matches = []
        for line_number, line in enumerate(_lines(content), start=1):
            for tool, regex in self._patterns.items():
                for found in regex.finditer(line):
                    matches.append(
                        PatternMatch(
                            file=file,
                            line=line_number,
                            column=found.start() + 1,
                            pattern=found.group(0),
                            tool=tool,
                            component_name=found.group(1) or "",
                        )
                    )
        return matches

    def detect_in_files(
        self, files: Iterable[tuple[str | os.PathLike[str], str]]
    ) -> list[PatternMatch]:
        """Detect references across several ``(path, content)`` pairs."""
        return [m for path, content in files for m in self.detect_in_file(path, content)]

    def group_by_tool(self, matches: Iterable[PatternMatch]) -> dict[DxToolType, list[PatternMatch]]:
        """Group matches by the tool they belong to."""
        grouped: dict[DxToolType, list[PatternMatch]] = {}
        for match in matches:
            grouped.setdefault(match.tool, []).append(match)
        return grouped

    def has_patterns(self, content: str) -> bool:
        """Whether ``content`` contains any dx reference."""
        return any(regex.search(content) for regex in self._patterns.values())

    def extract_components(self, matches: Iterable[PatternMatch]) -> list[str]:
        """Unique component names from ``matches``, sorted."""
        return sorted({m.component_name for m in matches})


@dataclass(frozen=True)
class Position:
    """Zero-based line and character position."""

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    """A span between two positions."""

    start: Position
    end: Position


@dataclass(frozen=True)
class InjectionPoint:
    """A place where a component should be injected."""

    file: Path
    range: Range
    component: str
    tool: DxToolType
    import_needed: bool


def analyze_for_injection(
    path: str | os.PathLike[str], content: str, matches: Iterable[PatternMatch]
) -> list[InjectionPoint]:
    """Turn matches into injection points; imports are needed if the file has none."""
    file = Path(path)
    has_imports = "import" in content or "require" in content
    return [
        InjectionPoint(
            file=file,
            range=Range(
                start=Position(line=m.line - 1, character=m.column - 1),
                end=Position(line=m.line - 1, character=m.column + len(m.pattern) - 1),
            ),
            component=m.component_name,
            tool=m.tool,
            import_needed=not has_imports,
        )
        for m in matches
    ]