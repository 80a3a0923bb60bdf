"""
simplec_cfg.graph_builder
=========================

Incremental CFG construction driven by a depth-first statement traversal.

At every point during construction there is exactly one open
*fall-through edge*: from :attr:`GraphBuilder.current` to the block on top
of the segment-end stack (or to the exit block when no scope is open).
Every operation that creates a block *splices* it into that edge::

    current ──► end            becomes          current ──► new ──► end

and the new block becomes current.  Branch and loop scopes push the block
the traversal must come back to (``segment_start``) and the block the scope
falls through to (``segment_end``) onto two parallel stacks.

Operations acting on a sealed current block (code after ``return``) are
no-ops that return ``False``; the caller then skips the sub-statement, so
unreachable code is never built into the graph.
"""

from __future__ import annotations

import contextlib
import logging
from typing import Iterator, List, Optional

from .ctrlflow_graph import CFG, Block
from .errors import CfgErrorCodes, GraphStateError, ScopeNestingError

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Owns the current-block pointer and the scope stacks of one CFG.

    Creating a builder splices block #0 between entry and exit, so the
    first statement of the function lands in block #0.
    """

    def __init__(self, cfg: CFG) -> None:
        if cfg.pruned:
            raise GraphStateError(
                f"cannot build into pruned CFG {cfg.name!r}",
                code=CfgErrorCodes.BUILD_AFTER_PRUNE,
            )
        self.cfg = cfg
        self.current: Block = cfg.entry
        self._segment_start: List[Block] = []
        self._segment_end: List[Block] = []
        cfg.entry.link(cfg.exit)
        self.advance()

    # ----- internals --------------------------------------------------------

    @property
    def depth(self) -> int:
        """Number of open scopes."""
        return len(self._segment_end)

    def _fallthrough_target(self) -> Block:
        if self._segment_end:
            return self._segment_end[-1]
        return self.cfg.exit

    def _splice(self, numbered: bool) -> Optional[Block]:
        """Splice a new block into the fall-through edge.

        Returns the block that was current before, or ``None`` if the
        current block is sealed.
        """
        if self.current.sealed:
            return None
        past = self.current
        target = self._fallthrough_target()
        block = self.cfg.new_block(numbered=numbered)

        past.unlink(target)
        past.link(block)
        block.link(target)

        self.current = block
        logger.debug(
            "%s: spliced block %s after %s",
            self.cfg.name, block.label or "<anon>", past.label,
        )
        return past

    # ----- content ----------------------------------------------------------

    def append_line(self, text: str) -> bool:
        """Append a fragment to the current block (dropped if sealed)."""
        return self.current.append(text)

    def advance(self) -> bool:
        """Start a new numbered block after the current one."""
        return self._splice(numbered=True) is not None

    # ----- scopes -----------------------------------------------------------

    def open_loop_scope(self) -> bool:
        """Start a loop header.

        The header is both the scope start and the scope end: statements of
        the loop body fall through back into it.
        """
        if self._splice(numbered=True) is None:
            return False
        self._segment_start.append(self.current)
        self._segment_end.append(self.current)
        return True

    def open_branch_scope(self) -> bool:
        """Open a branch scope after the current block.

        An anonymous join block is spliced in; the branch block (the old
        current) becomes the scope start and the join block the scope end.
        The join block is current afterwards; call
        :meth:`reset_to_scope_start` before building the first arm.
        """
        past = self._splice(numbered=False)
        if past is None:
            return False
        self._segment_start.append(past)
        self._segment_end.append(self.current)
        return True

    def reset_to_scope_start(self) -> Block:
        """Make the start block of the innermost scope current again."""
        if not self._segment_start:
            raise ScopeNestingError("reset_to_scope_start() without an open scope")
        self.current = self._segment_start[-1]
        return self.current

    def close_scope(self) -> Block:
        """Leave the innermost scope and continue in its end block.

        An anonymous end block receives its permanent id here.
        """
        if not self._segment_start or not self._segment_end:
            raise ScopeNestingError("close_scope() without an open scope")
        self._segment_start.pop()
        end = self._segment_end.pop()
        if end.id is None:
            self.cfg.register(end)
        self.current = end
        logger.debug("%s: closed scope, continuing in block %s", self.cfg.name, end.label)
        return end

    def seal_to_exit(self) -> bool:
        """Terminate the current block with a ``return``.

        All successors are replaced by the exit block and the block is
        frozen.  Returns ``False`` if it was already sealed.
        """
        block = self.current
        if block.sealed:
            return False
        for succ in list(block.successors):
            block.unlink(succ)
        block.link(self.cfg.exit)
        block.sealed = True
        logger.debug("%s: sealed block %s to exit", self.cfg.name, block.label)
        return True

    # ----- scoped acquisition ----------------------------------------------

    @contextlib.contextmanager
    def branch_scope(self) -> Iterator[Optional[Block]]:
        """Open a branch scope for the duration of a ``with`` block.

        Yields the branch block, or ``None`` if the current block is sealed
        (nothing was opened and the statement must be skipped).  The scope
        is closed on every exit path.
        """
        if not self.open_branch_scope():
            yield None
            return
        try:
            yield self._segment_start[-1]
        finally:
            self.close_scope()

    @contextlib.contextmanager
    def loop_scope(self) -> Iterator[Optional[Block]]:
        """Open a loop scope for the duration of a ``with`` block.

        Yields the loop header, or ``None`` if the current block is sealed.
        """
        if not self.open_loop_scope():
            yield None
            return
        try:
            yield self.current
        finally:
            self.close_scope()


__all__ = ["GraphBuilder"]
