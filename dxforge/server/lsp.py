"""Language server core: dx component detection, completion and hover."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from dxforge.patterns import PatternDetector

logger = logging.getLogger(__name__)


class CompletionItemKind(Enum):
    COMPONENT = "Component"
    FUNCTION = "Function"
    VARIABLE = "Variable"


@dataclass(frozen=True)
class CompletionItem:
    label: str
    kind: CompletionItemKind
    detail: str | None = None
    documentation: str | None = None


@dataclass(frozen=True)
class HoverInfo:
    contents: str


_DX_COMPLETIONS = (
    CompletionItem(
        label="dxButton",
        kind=CompletionItemKind.COMPONENT,
        detail="DX UI Button component",
        documentation="Auto-injected button component from dx-ui",
    ),
    CompletionItem(
        label="dxInput",
        kind=CompletionItemKind.COMPONENT,
        detail="DX UI Input component",
        documentation="Auto-injected input component from dx-ui",
    ),
    CompletionItem(
        label="dxCard",
        kind=CompletionItemKind.COMPONENT,
        detail="DX UI Card component",
        documentation="Auto-injected card component from dx-ui",
    ),
    CompletionItem(
        label="dxiHome",
        kind=CompletionItemKind.COMPONENT,
        detail="DX Icon: Home",
        documentation="Auto-injected home icon from dx-icons",
    ),
    CompletionItem(
        label="dxiUser",
        kind=CompletionItemKind.COMPONENT,
        detail="DX Icon: User",
        documentation="Auto-injected user icon from dx-icons",
    ),
)


def _split_lines(text: str) -> list[str]:
    """Split on ``\\n`` (dropping a preceding ``\\r``), without a trailing empty line."""
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
        return [p[:-1] if p.endswith("\r") else p for p in parts]
    return [p[:-1] if p.endswith("\r") else p for p in parts[:-1]] + [parts[-1]]


class LspServer:
    """Keeps open documents and answers completion and hover requests."""

    def __init__(self) -> None:
        self._detector = PatternDetector()
        self._documents: dict[str, str] = {}

    def documents(self) -> dict[str, str]:
        """Snapshot of the open documents, keyed by URI."""
        return dict(self._documents)

    async def did_open(self, uri: str, text: str) -> None:
        logger.info("Document opened: %s", uri)
        self._documents[uri] = text
        matches = self._detector.detect_in_file(Path(uri), text)
        if matches:
            logger.info("Found %d DX patterns in %s", len(matches), uri)

    async def did_change(self, uri: str, text: str) -> None:
        logger.info("Document changed: %s", uri)
        self._documents[uri] = text

    async def did_close(self, uri: str) -> None:
        logger.info("Document closed: %s", uri)
        self._documents.pop(uri, None)

    async def completion(self, uri: str, line: int, character: int) -> list[CompletionItem]:
        """DX completions when the text before the cursor ends with ``dx``."""
        if line < 0 or character < 0:
            raise ValueError("line and character must be non-negative")
        logger.info("Completion requested at %s:%d:%d", uri, line, character)
        lines = _split_lines(self._documents.get(uri, ""))
        if line >= len(lines):
            return []
        prefix = lines[line][:character]
        if prefix.endswith("dx"):
            return list(_DX_COMPLETIONS)
        return []

    async def hover(self, uri: str, line: int, character: int) -> HoverInfo | None:
        """Describe the first dx component on the given zero-based line."""
        text = self._documents.get(uri, "")
        for match in self._detector.detect_in_file(Path(uri), text):
            if match.line == line + 1:
                return HoverInfo(
                    contents=(
                        f"**{match.component_name}** from {match.tool.tool_name()}"
                        "\n\nAuto-injected DX component"
                    )
                )
        return None