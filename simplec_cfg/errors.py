# simplec_cfg/errors.py
"""
Error types for the simple-C CFG builder.

Error Hierarchy:
────────────────
┌─────────────────────────────────────────────────────────────────────────────┐
│  CfgError (base)                                                            │
│  ├── SourceSyntaxError   - front-end grammar violations                     │
│  ├── ScopeNestingError   - reset/close with no open scope                   │
│  └── GraphStateError     - CFG lifecycle violations (prune twice, ...)      │
└─────────────────────────────────────────────────────────────────────────────┘

Error Codes:
────────────
Each error has a code of the form CFG-XXXX:
  - 1000-1999: Syntax errors
  - 3000-3999: Scope discipline errors
  - 9000-9999: Internal errors

Construction calls that target a sealed block are *not* errors: they return
``False`` and leave the graph untouched (see ``graph_builder``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any, Optional


@unique
class ErrorPhase(Enum):
    """Pipeline phase in which an error was raised."""

    PARSE = "parse"
    BUILD = "build"
    PRUNE = "prune"
    RENDER = "render"


class ErrorCode:
    """
    Structured error code ``PREFIX-NNNN``.
    """

    __slots__ = ("prefix", "number", "phase", "title")

    def __init__(self, prefix: str, number: int, phase: ErrorPhase, title: str) -> None:
        self.prefix = prefix
        self.number = number
        self.phase = phase
        self.title = title

    @property
    def code(self) -> str:
        """Get the full error code string."""
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.title!r})"

    def __hash__(self) -> int:
        return hash((self.prefix, self.number))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.prefix == other.prefix and self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class CfgErrorCodes:
    """Predefined error codes."""

    SYNTAX_ERROR = ErrorCode("CFG", 1001, ErrorPhase.PARSE, "syntax error")
    TRAILING_INPUT = ErrorCode("CFG", 1002, ErrorPhase.PARSE, "unparsed trailing input")
    NESTING_TOO_DEEP = ErrorCode("CFG", 1003, ErrorPhase.PARSE, "statements nested too deeply")

    SCOPE_UNDERFLOW = ErrorCode("CFG", 3001, ErrorPhase.BUILD, "no open scope")

    ALREADY_PRUNED = ErrorCode("CFG", 9001, ErrorPhase.PRUNE, "CFG already pruned")
    NOT_PRUNED = ErrorCode("CFG", 9002, ErrorPhase.RENDER, "CFG rendered before pruning")
    MALFORMED_GRAPH = ErrorCode("CFG", 9003, ErrorPhase.PRUNE, "malformed graph")
    BUILD_AFTER_PRUNE = ErrorCode("CFG", 9004, ErrorPhase.BUILD, "CFG mutated after pruning")


# ═══════════════════════════════════════════════════════════════════════════════
# SOURCE LOCATION
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SourceSpan:
    """
    A position in a source file.

    ``line`` and ``column`` are 1-based; 0 means unknown.
    """

    file: str = ""
    line: int = 0
    column: int = 0

    @classmethod
    def from_parse_error(cls, exc: Any, file: str = "") -> "SourceSpan":
        """Create a SourceSpan from a ``parsimonious`` ParseError."""
        try:
            line, column = exc.line(), exc.column()
        except (AttributeError, TypeError):
            line, column = 0, 0
        return cls(file=file, line=line, column=column)

    def __str__(self) -> str:
        if not self.file and self.line == 0:
            return "<unknown location>"

        parts = []
        if self.file:
            parts.append(self.file)
        if self.line > 0:
            parts.append(str(self.line))
            if self.column > 0:
                parts.append(str(self.column))

        return ":".join(parts)


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class CfgError(Exception):
    """
    Base exception for all CFG builder errors.

    Carries a structured code and an optional source span so the CLI can
    print a GCC-style diagnostic.
    """

    default_code: ErrorCode = CfgErrorCodes.MALFORMED_GRAPH

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        span: Optional[SourceSpan] = None,
        hint: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.span = span or SourceSpan()
        self.hint = hint

    def to_gcc_format(self) -> str:
        """Format as a GCC-style error message."""
        lines = [f"{self.span}: error: {self.message} [{self.code}]"]
        if self.hint:
            lines.append(f"hint: {self.hint}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_gcc_format()


class SourceSyntaxError(CfgError):
    """The input is not a valid simple-C translation unit."""

    default_code = CfgErrorCodes.SYNTAX_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        span: Optional[SourceSpan] = None,
        got: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, code=code, span=span, **kwargs)
        self.got = got
        if got and not self.hint:
            self.hint = f"unexpected text starting with {got!r}"


class ScopeNestingError(CfgError):
    """A scope was reset or closed while no scope was open.

    Only a traversal driver that breaks the open/close pairing can trigger
    this; well-formed input never does.
    """

    default_code = CfgErrorCodes.SCOPE_UNDERFLOW


class GraphStateError(CfgError):
    """A CFG was used out of its build → prune → render lifecycle."""

    default_code = CfgErrorCodes.MALFORMED_GRAPH


__all__ = [
    "ErrorPhase",
    "ErrorCode",
    "CfgErrorCodes",
    "SourceSpan",
    "CfgError",
    "SourceSyntaxError",
    "ScopeNestingError",
    "GraphStateError",
]
