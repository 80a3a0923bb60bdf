"""
simplec_cfg.ctrlflow_graph
==========================

Data model for the per-function control flow graphs.

Public API
----------
    BlockKind        - entry / exit / body
    Block            - a basic block holding opaque statement fragments
    CFG              - the control flow graph for one function
    GlobalScope      - file-scope declarations (no graph structure)
    Program          - the GlobalScope plus one CFG per function

Typical usage::

    from simplec_cfg.ctrlflow_graph import CFG
    from simplec_cfg.graph_builder import GraphBuilder

    cfg = CFG("main", ret_type=["int "])
    builder = GraphBuilder(cfg)
    builder.append_line("    ")
    builder.append_line("return ")
    builder.seal_to_exit()

Implementation notes
--------------------
* Blocks reference each other directly; predecessor and successor "sets"
  are ``dict`` objects used as insertion-ordered sets, so an edge exists
  once or not at all.
* Body blocks carry a dense creation-order ``id``.  Anonymous blocks (the
  join point of an ``if`` before its scope closes) have ``id = None`` until
  :meth:`CFG.register` numbers them.  Pruning kills a block by resetting its
  ``id`` to ``None``; the block stays in :attr:`CFG.blocks` so later passes
  iterate in the original order.
"""

from __future__ import annotations

import enum
from typing import Dict, Iterable, Iterator, List, Optional, Set

from .errors import CfgErrorCodes, GraphStateError


# ---------------------------------------------------------------------------
# Block kinds
# ---------------------------------------------------------------------------


class BlockKind(enum.Enum):
    """Classification of a CFG block."""

    ENTRY = "entry"
    EXIT = "exit"
    BODY = "body"


# ---------------------------------------------------------------------------
# Block  –  a basic block
# ---------------------------------------------------------------------------


class Block:
    """A basic block in the CFG.

    Attributes
    ----------
    id : int or None
        Dense creation-order number for body blocks; ``None`` while the
        block is anonymous and again once pruning has killed it.  Always
        ``None`` for the entry and exit blocks.
    kind : BlockKind
    lines : list[str]
        Ordered opaque text fragments.
    sealed : bool
        Set by a ``return``; no further lines are accepted and the only
        successor is the exit block.
    predecessors, successors : dict[Block, None]
        Insertion-ordered edge sets.
    then_target, else_target : Block or None
        Only meaningful on a block that ends with an ``if`` condition.
    loop_exit : Block or None
        Only meaningful on a loop header.
    """

    __slots__ = (
        "id",
        "kind",
        "lines",
        "sealed",
        "predecessors",
        "successors",
        "then_target",
        "else_target",
        "loop_exit",
    )

    def __init__(self, kind: BlockKind = BlockKind.BODY, block_id: Optional[int] = None) -> None:
        self.id: Optional[int] = block_id
        self.kind = kind
        self.lines: List[str] = []
        self.sealed = False
        self.predecessors: Dict[Block, None] = {}
        self.successors: Dict[Block, None] = {}
        self.then_target: Optional[Block] = None
        self.else_target: Optional[Block] = None
        self.loop_exit: Optional[Block] = None

    # ----- content ----------------------------------------------------------

    def append(self, text: str) -> bool:
        """Append a fragment unless the block is sealed.

        Returns ``True`` when the fragment was stored.
        """
        if self.sealed:
            return False
        self.lines.append(text)
        return True

    @property
    def text(self) -> str:
        return "".join(self.lines)

    # ----- edges ------------------------------------------------------------

    def link(self, other: "Block") -> None:
        """Add the edge ``self -> other`` (no-op if present)."""
        self.successors[other] = None
        other.predecessors[self] = None

    def unlink(self, other: "Block") -> None:
        """Remove the edge ``self -> other`` (no-op if absent)."""
        self.successors.pop(other, None)
        other.predecessors.pop(self, None)

    def sole_successor(self) -> Optional["Block"]:
        """The only successor, or ``None`` when there are zero or several."""
        if len(self.successors) != 1:
            return None
        return next(iter(self.successors))

    # ----- identity ---------------------------------------------------------

    @property
    def is_alive(self) -> bool:
        """Entry/exit are always alive; body blocks while they hold an id."""
        return self.kind is not BlockKind.BODY or self.id is not None

    @property
    def label(self) -> Optional[str]:
        """``"entry"``, ``"exit"``, the id as a string, or ``None``."""
        if self.kind is not BlockKind.BODY:
            return self.kind.value
        if self.id is None:
            return None
        return str(self.id)

    def __repr__(self) -> str:
        return (
            f"Block(label={self.label!r}, nlines={len(self.lines)}, "
            f"sealed={self.sealed})"
        )


def block_sort_key(block: Block):
    """Numeric labels ascending, before entry/exit in lexicographic order."""
    if block.kind is BlockKind.BODY:
        return (0, block.id if block.id is not None else -1, "")
    return (1, 0, block.kind.value)


# ---------------------------------------------------------------------------
# CFG
# ---------------------------------------------------------------------------


class CFG:
    """Intraprocedural control flow graph for a single function.

    Attributes
    ----------
    name : str
        Function name.
    ret_type : list[str]
        Return-type fragments.
    args : list[str]
        Parameter fragments; empty for ``f()``.
    entry : Block
        Synthetic entry block (no lines, no predecessors).
    exit : Block
        Synthetic exit block (no lines, no successors).
    blocks : dict[int, Block]
        Every body block that was ever numbered, keyed by creation id.
    pruned : bool
        Set once the pruning passes ran.
    """

    def __init__(
        self,
        name: str,
        ret_type: Optional[Iterable[str]] = None,
        args: Optional[Iterable[str]] = None,
    ) -> None:
        self.name = name
        self.ret_type: List[str] = list(ret_type or [])
        self.args: List[str] = list(args or [])
        self.entry = Block(BlockKind.ENTRY)
        self.exit = Block(BlockKind.EXIT)
        self.blocks: Dict[int, Block] = {}
        self.pruned = False
        self._next_id = 0
        self._display_index: Dict[Block, int] = {}

    # ----- graph mutation ---------------------------------------------------

    def new_block(self, numbered: bool = True) -> Block:
        """Create a body block; numbered blocks are registered immediately."""
        if self.pruned:
            raise GraphStateError(
                f"cannot add blocks to {self.name!r} after pruning",
                code=CfgErrorCodes.BUILD_AFTER_PRUNE,
            )
        block = Block(BlockKind.BODY)
        if numbered:
            self.register(block)
        return block

    def register(self, block: Block) -> Block:
        """Give *block* the next dense id and add it to the block table."""
        block.id = self._next_id
        self.blocks[block.id] = block
        self._next_id += 1
        return block

    # ----- queries ----------------------------------------------------------

    def body_blocks(self) -> Iterator[Block]:
        """Alive body blocks in creation order."""
        return (b for b in self.blocks.values() if b.is_alive)

    def all_blocks(self) -> List[Block]:
        """Entry, alive body blocks, exit."""
        return [self.entry, *self.body_blocks(), self.exit]

    def reachable_from(self, start: Block) -> Set[Block]:
        """Return the set of blocks reachable from *start* (DFS worklist)."""
        visited: Set[Block] = set()
        worklist = [start]
        while worklist:
            b = worklist.pop()
            if b in visited:
                continue
            visited.add(b)
            worklist.extend(b.successors)
        return visited

    # ----- display names ----------------------------------------------------

    def set_display_indices(self, indices: Dict[Block, int]) -> None:
        self._display_index = dict(indices)

    def display_index(self, block: Block) -> Optional[int]:
        return self._display_index.get(block)

    def block_name(self, block: Block) -> Optional[str]:
        """``<func>_entry``, ``<func>_exit``, ``<func>_B<k>``, or ``None``
        for a dead block."""
        if block.kind is not BlockKind.BODY:
            return f"{self.name}_{block.kind.value}"
        if block.id is None:
            return None
        index = self._display_index.get(block)
        if index is None:
            index = block.id
        return f"{self.name}_B{index}"

    def sorted_names(self, blocks: Iterable[Block]) -> List[str]:
        """Names of *blocks* in the canonical listing order."""
        return [
            self.block_name(b) or "-"
            for b in sorted(blocks, key=block_sort_key)
        ]

    def __repr__(self) -> str:
        return (
            f"CFG(name={self.name!r}, blocks={len(self.blocks)}, "
            f"pruned={self.pruned})"
        )


# ---------------------------------------------------------------------------
# Global scope and program
# ---------------------------------------------------------------------------


class GlobalScope:
    """File-scope declarations, kept as an ordered list of fragments."""

    def __init__(self) -> None:
        self.lines: List[str] = []

    def append(self, text: str) -> None:
        self.lines.append(text)

    def __bool__(self) -> bool:
        return bool(self.lines)


class Program:
    """The global scope plus one CFG per function, in traversal order."""

    def __init__(self) -> None:
        self.global_scope = GlobalScope()
        self.cfgs: List[CFG] = []

    def add(self, cfg: CFG) -> CFG:
        self.cfgs.append(cfg)
        return cfg

    def find(self, name: str) -> Optional[CFG]:
        for cfg in self.cfgs:
            if cfg.name == name:
                return cfg
        return None

    def __iter__(self) -> Iterator[CFG]:
        return iter(self.cfgs)

    def __len__(self) -> int:
        return len(self.cfgs)


__all__ = [
    "BlockKind",
    "Block",
    "block_sort_key",
    "CFG",
    "GlobalScope",
    "Program",
]
