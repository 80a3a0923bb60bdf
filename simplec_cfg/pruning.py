"""
simplec_cfg.pruning
===================

Normalisation of a completely built CFG into its canonical, minimal form.

The passes run once, in order:

1. **Reachability** - one ascending-id sweep.  Construction only creates
   edges to higher ids, plus back-edges into loop headers that are also
   reached through a lower-id fall-through, so a single sweep finds the
   same set as a fixed-point search.
2. **Empty-block elision** - blocks without lines are bypassed; branch and
   loop targets pointing at them are redirected to their successor.
3. **Straight-line merge** - a block with a single successor that has a
   single predecessor absorbs it, repeatedly.
4. **Renumbering** - surviving blocks get dense display indices
   ``0..k-1`` in creation order.

Dead blocks keep their slot in :attr:`CFG.blocks`; their ``id`` is reset to
``None``.  The passes mutate edges and targets destructively, so a CFG can
be pruned only once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Set

from .ctrlflow_graph import CFG, Block, Program
from .errors import CfgErrorCodes, GraphStateError

logger = logging.getLogger(__name__)


@dataclass
class PruneStats:
    """Per-pass counters, mostly for logging and tests."""

    unreachable: int = 0
    elided: int = 0
    merged: int = 0
    surviving: int = 0


class Pruner:
    """Runs the four normalisation passes over one CFG."""

    def __init__(self, cfg: CFG) -> None:
        self.cfg = cfg
        self.stats = PruneStats()

    def run(self) -> PruneStats:
        cfg = self.cfg
        if cfg.pruned:
            raise GraphStateError(
                f"CFG {cfg.name!r} was already pruned",
                code=CfgErrorCodes.ALREADY_PRUNED,
            )
        cfg.pruned = True

        self.remove_unreachable()
        self.elide_empty_blocks()
        self.merge_straight_lines()
        self.renumber()

        logger.debug(
            "%s: pruned (%d unreachable, %d empty, %d merged, %d left)",
            cfg.name,
            self.stats.unreachable,
            self.stats.elided,
            self.stats.merged,
            self.stats.surviving,
        )
        return self.stats

    # ----- pass 1 -----------------------------------------------------------

    def remove_unreachable(self) -> None:
        first = self.cfg.blocks.get(0)
        if first is None:
            return
        reached = sweep_reached(self.cfg.blocks.values(), first)

        for block in self.cfg.blocks.values():
            if block in reached:
                continue
            block.id = None
            for succ in block.successors:
                succ.predecessors.pop(block, None)
            self.stats.unreachable += 1

    # ----- pass 2 -----------------------------------------------------------

    def elide_empty_blocks(self) -> None:
        for block in self.cfg.blocks.values():
            if not block.is_alive or block.lines:
                continue

            succ = block.sole_successor()
            if succ is None:
                raise GraphStateError(
                    f"{self.cfg.name}: empty block {block.id} has "
                    f"{len(block.successors)} successors, expected 1",
                    code=CfgErrorCodes.MALFORMED_GRAPH,
                )

            for pred in block.predecessors:
                if pred.then_target is block:
                    pred.then_target = succ
                if pred.else_target is block:
                    pred.else_target = succ
                if pred.loop_exit is block:
                    pred.loop_exit = succ
                pred.successors.pop(block, None)
                pred.successors[succ] = None

            succ.predecessors.pop(block, None)
            for pred in block.predecessors:
                succ.predecessors[pred] = None

            block.id = None
            self.stats.elided += 1

    # ----- pass 3 -----------------------------------------------------------

    def merge_straight_lines(self) -> None:
        for block in self.cfg.blocks.values():
            if not block.is_alive:
                continue

            while True:
                nxt = block.sole_successor()
                if nxt is None or nxt is block or nxt is self.cfg.exit:
                    break
                if len(nxt.predecessors) != 1:
                    break

                block.lines.extend(nxt.lines)

                block.successors.pop(nxt)
                for after in nxt.successors:
                    after.predecessors.pop(nxt, None)
                    after.predecessors[block] = None
                    block.successors[after] = None

                block.then_target = nxt.then_target
                block.else_target = nxt.else_target
                block.loop_exit = nxt.loop_exit

                nxt.id = None
                self.stats.merged += 1

    # ----- pass 4 -----------------------------------------------------------

    def renumber(self) -> None:
        indices: Dict[Block, int] = {}
        for block in self.cfg.body_blocks():
            indices[block] = len(indices)
        self.cfg.set_display_indices(indices)
        self.stats.surviving = len(indices)


def prune_cfg(cfg: CFG) -> PruneStats:
    """Run the four passes over *cfg*."""
    return Pruner(cfg).run()


def prune_program(program: Program) -> Dict[str, PruneStats]:
    """Prune every CFG of *program*; returns stats keyed by function name."""
    return {cfg.name: prune_cfg(cfg) for cfg in program}


def sweep_reached(blocks: Iterable[Block], first: Block) -> Set[Block]:
    """Blocks reached by one ascending-id sweep over *blocks* from *first*.

    Pass 1 keeps exactly this set.
    """
    reached: Set[Block] = {first}
    for block in blocks:
        if block in reached:
            reached.update(block.successors)
    return reached


__all__ = [
    "PruneStats",
    "Pruner",
    "prune_cfg",
    "prune_program",
    "sweep_reached",
]
