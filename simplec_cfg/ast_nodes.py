"""
simplec_cfg.ast_nodes
=====================

Statement-level syntax tree of a simple-C translation unit.

Only the statement structure matters for CFG construction; everything
below statement level (expressions, declarators, types) is kept as a flat
list of source tokens and is printed back verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

Tokens = List[str]


@dataclass
class Declaration:
    """``int a, b[10];`` (tokens include the trailing ``;``)."""

    tokens: Tokens


@dataclass
class SimpleStmt:
    """Assignment, call, or empty statement (tokens include the ``;``)."""

    tokens: Tokens


@dataclass
class ReturnStmt:
    """``return expr;`` (tokens include ``return`` and ``;``)."""

    tokens: Tokens


@dataclass
class CompoundStmt:
    decls: List[Declaration] = field(default_factory=list)
    stmts: List["Statement"] = field(default_factory=list)


@dataclass
class IfStmt:
    cond: Tokens
    then: "Statement"
    orelse: Optional["Statement"] = None


@dataclass
class WhileStmt:
    cond: Tokens
    body: "Statement"


@dataclass
class ForStmt:
    """``for (init; cond; update) body``; the three clauses exclude ``;``."""

    init: Tokens
    cond: Tokens
    update: Tokens
    body: "Statement"


Statement = Union[CompoundStmt, SimpleStmt, IfStmt, WhileStmt, ForStmt, ReturnStmt]


@dataclass
class FunctionDef:
    name: str
    ret_type: Tokens
    params: Tokens
    body: CompoundStmt
    line: int = 0


@dataclass
class TranslationUnit:
    declarations: List[Declaration] = field(default_factory=list)
    functions: List[FunctionDef] = field(default_factory=list)
    filename: str = "<string>"


__all__ = [
    "Tokens",
    "Declaration",
    "SimpleStmt",
    "ReturnStmt",
    "CompoundStmt",
    "IfStmt",
    "WhileStmt",
    "ForStmt",
    "Statement",
    "FunctionDef",
    "TranslationUnit",
]
