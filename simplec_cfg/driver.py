"""
simplec_cfg.driver
==================

Depth-first traversal of a :class:`TranslationUnit` that feeds the
construction events of :class:`GraphBuilder`, plus the end-to-end
``translate`` pipeline.

Fragment conventions
--------------------
A simple statement becomes ``"    "``, one ``token + " "`` fragment per
token, then ``"\\n"``.  Control statements emit their keyword as a bare
fragment (``"if"``, ``"while"``, ``"for"``) so the renderer can find it.
Braces of compound statements are not emitted.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, Optional, Type

from .ast_nodes import (
    CompoundStmt,
    Declaration,
    ForStmt,
    FunctionDef,
    IfStmt,
    ReturnStmt,
    SimpleStmt,
    Statement,
    TranslationUnit,
    WhileStmt,
)
from .config import CfgConfig, OutputFormat
from .ctrlflow_graph import CFG, Program
from .graph_builder import GraphBuilder
from .parser import nesting_guard, parse
from .pruning import prune_program
from .render import STATEMENT_INDENT, render_program, render_program_dot

logger = logging.getLogger(__name__)


def fragments(tokens: Iterable[str]) -> list:
    """``["a", "="]`` -> ``["a ", "= "]``."""
    return [token + " " for token in tokens]


class CfgDriver:
    """Builds one CFG per function of a translation unit."""

    def __init__(self) -> None:
        self.program = Program()
        self._builder: Optional[GraphBuilder] = None
        self._dispatch: Dict[Type, Callable[[Statement], None]] = {
            CompoundStmt: self._visit_compound,
            SimpleStmt: self._visit_simple,
            ReturnStmt: self._visit_return,
            IfStmt: self._visit_if,
            WhileStmt: self._visit_while,
            ForStmt: self._visit_for,
        }

    # ----- emission helpers -------------------------------------------------

    @property
    def builder(self) -> GraphBuilder:
        if self._builder is None:
            raise RuntimeError("no function is being built")
        return self._builder

    def _emit(self, text: str) -> None:
        if self._builder is None:
            self.program.global_scope.append(text)
        else:
            self._builder.append_line(text)

    def _emit_statement(self, tokens: Iterable[str]) -> None:
        self._emit(STATEMENT_INDENT)
        for fragment in fragments(tokens):
            self._emit(fragment)
        self._emit("\n")

    def _emit_condition(self, keyword: str, cond: Iterable[str]) -> None:
        self._emit(STATEMENT_INDENT)
        self._emit(keyword)
        self._emit("( ")
        for fragment in fragments(cond):
            self._emit(fragment)
        self._emit(") ")

    # ----- translation unit -------------------------------------------------

    def build(self, unit: TranslationUnit) -> Program:
        for decl in unit.declarations:
            self._emit_statement(decl.tokens)
        for function in unit.functions:
            self.build_function(function)
        logger.info("%s: built %d CFG(s)", unit.filename, len(self.program))
        return self.program

    def build_function(self, function: FunctionDef) -> CFG:
        cfg = CFG(
            function.name,
            ret_type=fragments(function.ret_type),
            args=fragments(function.params),
        )
        self._builder = GraphBuilder(cfg)
        try:
            self._visit_compound(function.body)
        finally:
            self._builder = None
        logger.debug(
            "%s (line %d): %d block(s) before pruning",
            cfg.name, function.line, len(cfg.blocks),
        )
        return self.program.add(cfg)

    # ----- statements -------------------------------------------------------

    def visit(self, stmt: Statement) -> None:
        handler = self._dispatch.get(type(stmt))
        if handler is None:
            raise TypeError(f"not a statement node: {type(stmt).__name__}")
        handler(stmt)

    def _visit_compound(self, stmt: CompoundStmt) -> None:
        for decl in stmt.decls:
            self._visit_declaration(decl)
        for child in stmt.stmts:
            self.visit(child)

    def _visit_declaration(self, decl: Declaration) -> None:
        self._emit_statement(decl.tokens)

    def _visit_simple(self, stmt: SimpleStmt) -> None:
        self._emit_statement(stmt.tokens)

    def _visit_return(self, stmt: ReturnStmt) -> None:
        self._emit_statement(stmt.tokens)
        self.builder.seal_to_exit()

    def _visit_if(self, stmt: IfStmt) -> None:
        b = self.builder
        self._emit_condition("if", stmt.cond)

        with b.branch_scope() as branch:
            if branch is None:
                return

            b.reset_to_scope_start()
            if b.advance():
                branch.then_target = b.current
            self.visit(stmt.then)

            b.reset_to_scope_start()
            if b.advance():
                branch.else_target = b.current
            if stmt.orelse is not None:
                self.visit(stmt.orelse)

    def _visit_while(self, stmt: WhileStmt) -> None:
        b = self.builder
        with b.loop_scope() as header:
            if header is None:
                return
            self._emit_condition("while", stmt.cond)
            b.advance()
            self.visit(stmt.body)

        if b.advance():
            header.loop_exit = b.current

    def _visit_for(self, stmt: ForStmt) -> None:
        b = self.builder
        self._emit_statement([*stmt.init, ";"])

        with b.loop_scope() as header:
            if header is None:
                return
            self._emit(STATEMENT_INDENT)
            self._emit("for")
            self._emit("( ")
            self._emit("; ")
            for fragment in fragments(stmt.cond):
                self._emit(fragment)
            self._emit("; ")
            self._emit(") ")
            b.advance()

            with b.branch_scope() as body_start:
                if body_start is None:
                    return
                self._emit_statement([*stmt.update, ";"])
                b.reset_to_scope_start()
                self.visit(stmt.body)

        if b.advance():
            header.loop_exit = b.current


# ═══════════════════════════════════════════════════════════════════
#  PIPELINE
# ═══════════════════════════════════════════════════════════════════


def build_program(unit: TranslationUnit) -> Program:
    """Construct (but do not prune) the CFGs of *unit*."""
    return CfgDriver().build(unit)


def translate(source: str, input_file: str, config: Optional[CfgConfig] = None) -> str:
    """Parse, build, prune, and render *source*.

    Parameters
    ----------
    source : str
        simple-C program text.
    input_file : str
        Name printed in the program header and used in diagnostics.
    config : CfgConfig, optional
        Selects the output format; defaults to the text format.
    """
    config = config or CfgConfig()
    unit = parse(source, input_file)
    with nesting_guard(input_file):
        program = build_program(unit)
    prune_program(program)
    if config.output_format is OutputFormat.DOT:
        return render_program_dot(program)
    return render_program(program, input_file)


__all__ = [
    "fragments",
    "CfgDriver",
    "build_program",
    "translate",
]
