"""simplec_cfg: control flow graphs for a simple C subset.

Builds one intraprocedural CFG per function of a simple-C program while
the statements are traversed, prunes it to a canonical minimal form, and
prints it in a fixed text format (or as Graphviz DOT).

Submodules
----------
ctrlflow_graph
    ``Block``, ``CFG``, ``GlobalScope`` and ``Program``.
graph_builder
    ``GraphBuilder``: the incremental construction operations.
pruning
    The four normalisation passes (``prune_cfg``, ``prune_program``).
render
    Canonical text output and DOT export.
parser
    parsimonious grammar and parse-tree → AST visitor.
driver
    AST traversal feeding the builder; ``translate`` pipeline.
errors
    ``CFG-XXXX`` error codes and the exception hierarchy.
main
    CLI entry-point (``simplec-cfg``).

Usage
-----
Command-line::

    simplec-cfg prog.c
    python -m simplec_cfg prog.c -f dot

Programmatic::

    from simplec_cfg import translate

    print(translate(open("prog.c").read(), "prog.c"))
"""

from __future__ import annotations

__version__: str = "0.1.0"
__all__: list[str] = [
    "__version__",
    "Block",
    "BlockKind",
    "CFG",
    "GlobalScope",
    "Program",
    "GraphBuilder",
    "prune_cfg",
    "prune_program",
    "render_program",
    "render_program_dot",
    "parse",
    "build_program",
    "translate",
    "CfgConfig",
    "OutputFormat",
    "CfgError",
    "SourceSyntaxError",
    "ScopeNestingError",
    "GraphStateError",
]

from .config import CfgConfig, OutputFormat
from .ctrlflow_graph import CFG, Block, BlockKind, GlobalScope, Program
from .driver import build_program, translate
from .errors import CfgError, GraphStateError, ScopeNestingError, SourceSyntaxError
from .graph_builder import GraphBuilder
from .parser import parse
from .pruning import prune_cfg, prune_program
from .render import render_program, render_program_dot
