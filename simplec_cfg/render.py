"""
simplec_cfg.render
==================

Serialisation of pruned CFGs.

Text format (one stanza per block)::

    @main_B0 {
        if( x )     # then: main_B1
                    # else: main_B2
    }
    Predecessors: main_entry
    Successors: main_B1, main_B2

Fragments are printed verbatim.  Only the *last* ``if``/``for``/``while``
keyword fragment of a block can carry an annotation: ``# then:`` and
``# else:`` for an ``if`` whose then-target survived pruning, or
``# loop_end:`` for a loop header.  Every other ``if`` is printed with a
``{ }`` placeholder body.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .ctrlflow_graph import CFG, Block, BlockKind, GlobalScope, Program, block_sort_key
from .errors import CfgErrorCodes, GraphStateError

logger = logging.getLogger(__name__)

STATEMENT_INDENT = "    "
CONTROL_KEYWORDS = frozenset({"if", "for", "while"})
EMPTY_BODY = "{ }\n"


class Renderer:
    """Writes the canonical text form of a program into a buffer."""

    def __init__(self) -> None:
        self._out: List[str] = []

    def getvalue(self) -> str:
        return "".join(self._out)

    def write(self, text: str) -> None:
        self._out.append(text)

    # ----- stanzas ----------------------------------------------------------

    def header(self, input_file: str) -> None:
        self.write(f"/*--- program: {input_file} ---*/\n")

    def global_scope(self, scope: GlobalScope) -> None:
        if not scope:
            return
        self.write("@Globals {\n")
        for line in scope.lines:
            self.write(line)
        self.write("}\n")
        self.write("Predecessors: -\n")
        self.write("Successors: -\n")
        self.write("\n")

    def cfg(self, cfg: CFG) -> None:
        if not cfg.pruned:
            raise GraphStateError(
                f"CFG {cfg.name!r} must be pruned before rendering",
                code=CfgErrorCodes.NOT_PRUNED,
            )
        self._entry(cfg)
        for block in cfg.body_blocks():
            self._block(cfg, block)
        self._block(cfg, cfg.exit)

    def _entry(self, cfg: CFG) -> None:
        self.write(f"@{cfg.block_name(cfg.entry)} {{\n")
        self.write(f"   name: {cfg.name}\n")
        self.write(f"   ret_type: {''.join(cfg.ret_type)}\n")
        self.write(f"   args: {''.join(cfg.args) if cfg.args else '-'}\n")
        self.write("}\n")
        self._edges(cfg, cfg.entry)

    def _edges(self, cfg: CFG, block: Block) -> None:
        preds = ", ".join(cfg.sorted_names(block.predecessors))
        succs = ", ".join(cfg.sorted_names(block.successors))
        self.write(f"Predecessors: {preds or '-'}\n")
        self.write(f"Successors: {succs or '-'}\n")
        self.write("\n")

    def _block(self, cfg: CFG, block: Block) -> None:
        name = cfg.block_name(block)
        if name is None:
            return

        then_target = block.then_target
        has_then = then_target is not None and then_target.is_alive

        self.write(f"@{name} {{\n")

        keyword_positions = [
            i for i, fragment in enumerate(block.lines) if fragment in CONTROL_KEYWORDS
        ]
        trailing = keyword_positions[-1] if keyword_positions else -1

        annotated = False
        width = len(STATEMENT_INDENT)
        needs_body = False
        for i, fragment in enumerate(block.lines):
            if i == trailing:
                annotated = has_then if fragment == "if" else True
            if fragment == "if" and not annotated:
                needs_body = True
            if needs_body and fragment == STATEMENT_INDENT:
                self.write(EMPTY_BODY)
                needs_body = False
            self.write(fragment)
            if annotated:
                width += len(fragment)

        if needs_body:
            self.write(EMPTY_BODY)

        if has_then:
            width += len(STATEMENT_INDENT)
            self.write(f"{STATEMENT_INDENT}# then: {cfg.block_name(then_target)}\n")
            self.write(f"{' ' * width}# else: {self._target_name(cfg, block.else_target)}\n")
        elif block.loop_exit is not None:
            self.write(
                f"{STATEMENT_INDENT}# loop_end: {self._target_name(cfg, block.loop_exit)}\n"
            )

        self.write("}\n")
        self._edges(cfg, block)

    @staticmethod
    def _target_name(cfg: CFG, block: Optional[Block]) -> str:
        if block is None:
            return "null"
        return cfg.block_name(block) or "null"


def render_cfg(cfg: CFG) -> str:
    """Text form of a single pruned CFG."""
    r = Renderer()
    r.cfg(cfg)
    return r.getvalue()


def render_program(program: Program, input_file: str) -> str:
    """Text form of a whole program: header, Globals, then each function."""
    r = Renderer()
    r.header(input_file)
    r.global_scope(program.global_scope)
    for cfg in program:
        r.cfg(cfg)
    logger.debug("rendered %d function(s)", len(program))
    return r.getvalue()


# ---------------------------------------------------------------------------
# Graphviz
# ---------------------------------------------------------------------------


def _dot_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\l")


def cfg_to_dot(cfg: CFG) -> str:
    """Return a Graphviz DOT representation of a pruned CFG."""
    lines = [f'digraph "{cfg.name}" {{']
    lines.append(f'  label="{cfg.name}";')
    lines.append("  node [shape=box, fontname=monospace, fontsize=10];")
    for block in cfg.all_blocks():
        name = cfg.block_name(block)
        body = _dot_escape(block.text)
        style = ""
        if block.kind is BlockKind.ENTRY:
            style = ', style=filled, fillcolor="#ccffcc"'
        elif block.kind is BlockKind.EXIT:
            style = ', style=filled, fillcolor="#ffcccc"'
        lines.append(f'  "{name}" [label="{name}\\n{body}"{style}];')
    for block in cfg.all_blocks():
        for succ in sorted(block.successors, key=block_sort_key):
            attrs = ""
            if succ is block.then_target and succ is not block.else_target:
                attrs = ' [label="then", color=green]'
            elif succ is block.else_target and succ is not block.then_target:
                attrs = ' [label="else", color=red]'
            elif succ is block.loop_exit:
                attrs = ' [label="loop_end", style=dashed]'
            lines.append(f'  "{cfg.block_name(block)}" -> "{cfg.block_name(succ)}"{attrs};')
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_program_dot(program: Program) -> str:
    """DOT form of every CFG of *program*, one ``digraph`` each."""
    for cfg in program:
        if not cfg.pruned:
            raise GraphStateError(
                f"CFG {cfg.name!r} must be pruned before rendering",
                code=CfgErrorCodes.NOT_PRUNED,
            )
    return "".join(cfg_to_dot(cfg) for cfg in program)


__all__ = [
    "STATEMENT_INDENT",
    "CONTROL_KEYWORDS",
    "Renderer",
    "render_cfg",
    "render_program",
    "cfg_to_dot",
    "render_program_dot",
]
