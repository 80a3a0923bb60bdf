# tests/test_pruning.py
"""
Tests for the four pruning passes and the structural properties every
pruned CFG must satisfy.
"""

import pytest

from simplec_cfg.ctrlflow_graph import CFG, BlockKind
from simplec_cfg.errors import CfgErrorCodes, GraphStateError
from simplec_cfg.graph_builder import GraphBuilder
from simplec_cfg.pruning import Pruner, prune_cfg, prune_program, sweep_reached
from tests.conftest import (
    ALL_SOURCES,
    BOTH_ARMS_RETURN_C,
    DEAD_AFTER_RETURN_C,
    EMPTY_ARMS_C,
    EMPTY_FUNCTION_C,
    FOR_C,
    INFINITE_WHILE_C,
    NESTED_C,
    RETURN_IN_THEN_C,
    build,
    build_pruned,
    names,
)


class TestReachability:

    def test_single_sweep_matches_graph_search(self):
        """Edges only go to higher ids except back-edges into loop headers."""
        for source in ALL_SOURCES:
            for cfg in build(source):
                first = cfg.blocks[0]
                assert sweep_reached(cfg.blocks.values(), first) == cfg.reachable_from(first)

    def test_join_after_returning_arms_is_removed(self):
        cfg = build(BOTH_ARMS_RETURN_C).find("r")
        join = cfg.blocks[3]
        assert join.lines == ["    ", "a ", "= ", "5 ", "; ", "\n"]

        stats = prune_cfg(cfg)
        assert stats.unreachable == 1
        assert not join.is_alive
        assert names(cfg, cfg.exit.predecessors) == ["r_B1", "r_B2"]

    def test_code_after_return_never_reaches_graph(self):
        cfg = build_pruned(DEAD_AFTER_RETURN_C).find("k")
        (block,) = list(cfg.body_blocks())
        assert block.text == "    return 1 ; \n"


class TestEmptyBlockElision:

    def test_empty_function_keeps_only_entry_and_exit(self):
        cfg = build_pruned(EMPTY_FUNCTION_C).find("e")
        assert list(cfg.body_blocks()) == []
        assert list(cfg.entry.successors) == [cfg.exit]
        assert list(cfg.exit.predecessors) == [cfg.entry]

    def test_else_target_redirected_to_join(self):
        cfg = build_pruned(RETURN_IN_THEN_C).find("m")
        b0 = cfg.blocks[0]
        assert cfg.block_name(b0.then_target) == "m_B1"
        assert cfg.block_name(b0.else_target) == "m_B2"
        assert names(cfg, b0.successors) == ["m_B1", "m_B2"]
        assert names(cfg, cfg.exit.predecessors) == ["m_B1", "m_B2"]

    def test_loop_exit_redirected_to_exit(self):
        cfg = build_pruned(INFINITE_WHILE_C).find("spin")
        header = cfg.blocks[1]
        assert header.loop_exit is cfg.exit
        assert names(cfg, header.successors) == ["spin_B2", "spin_exit"]

    def test_malformed_empty_block(self):
        cfg = CFG("bad")
        builder = GraphBuilder(cfg)
        builder.open_branch_scope()
        builder.reset_to_scope_start()
        builder.advance()
        builder.reset_to_scope_start()
        builder.advance()
        builder.close_scope()
        # block 0 is empty but branches two ways
        with pytest.raises(GraphStateError) as info:
            prune_cfg(cfg)
        assert info.value.code == CfgErrorCodes.MALFORMED_GRAPH


class TestStraightLineMerge:

    def test_empty_arms_collapse_into_one_block(self):
        cfg = build(EMPTY_ARMS_C).find("f")
        stats = prune_cfg(cfg)
        assert (stats.unreachable, stats.elided, stats.merged, stats.surviving) == (0, 2, 1, 1)
        (block,) = list(cfg.body_blocks())
        assert block.then_target is None and block.else_target is None
        assert list(block.successors) == [cfg.exit]

    def test_sequential_statements_share_a_block(self):
        cfg = build_pruned("void t(int a) { a = 1; a = 2; }").find("t")
        (block,) = list(cfg.body_blocks())
        assert block.text == "    a = 1 ; \n    a = 2 ; \n"
        assert list(block.successors) == [cfg.exit]

    def test_for_update_merges_into_body(self):
        cfg = build_pruned(FOR_C).find("s")
        body = [b for b in cfg.body_blocks() if cfg.block_name(b) == "s_B2"][0]
        assert body.text == "    sum = sum + i ; \n    i = i + 1 ; \n"

    def test_merge_never_absorbs_exit(self):
        cfg = build_pruned(DEAD_AFTER_RETURN_C).find("k")
        assert cfg.exit.kind is BlockKind.EXIT
        assert cfg.block_name(cfg.exit) == "k_exit"


class TestRenumbering:

    def test_display_indices_dense_and_ordered(self):
        for source in ALL_SOURCES:
            for cfg in build_pruned(source):
                shown = [cfg.block_name(b) for b in cfg.body_blocks()]
                assert shown == [f"{cfg.name}_B{i}" for i in range(len(shown))]

    def test_raw_ids_skip_merged_blocks(self):
        cfg = build_pruned(FOR_C).find("s")
        alive = [b.id for b in cfg.body_blocks()]
        assert alive == [0, 1, 2, 4]


class TestPrunedProperties:

    @pytest.mark.parametrize("source", ALL_SOURCES)
    def test_invariants(self, source):
        for cfg in build_pruned(source):
            alive = set(cfg.all_blocks())
            reach = cfg.reachable_from(cfg.entry)
            for block in cfg.body_blocks():
                # every survivor is reachable and non-empty
                assert block in reach
                assert block.lines
                # edges stay among survivors and are symmetric
                for succ in block.successors:
                    assert succ in alive
                    assert block in succ.predecessors
                for pred in block.predecessors:
                    assert pred in alive
                    assert block in pred.successors
                # no mergeable pair is left
                nxt = block.sole_successor()
                if nxt is not None and nxt.kind is BlockKind.BODY and nxt is not block:
                    assert len(nxt.predecessors) != 1
            assert not cfg.exit.successors
            assert not cfg.entry.predecessors

    def test_nested_program_shapes(self):
        program = build_pruned(NESTED_C)
        gcd = program.find("gcd")
        header = gcd.blocks[1]
        assert header.lines[1] == "while"
        assert gcd.block_name(header) == "gcd_B0"
        assert gcd.block_name(header.loop_exit) == "gcd_B2"
        classify = program.find("classify")
        assert len(classify.exit.predecessors) == 4


class TestLifecycle:

    def test_prune_twice(self):
        cfg = build(EMPTY_ARMS_C).find("f")
        Pruner(cfg).run()
        with pytest.raises(GraphStateError) as info:
            Pruner(cfg).run()
        assert info.value.code == CfgErrorCodes.ALREADY_PRUNED

    def test_no_blocks_after_pruning(self):
        cfg = build_pruned(EMPTY_ARMS_C).find("f")
        with pytest.raises(GraphStateError):
            cfg.new_block()

    def test_prune_program_reports_per_function(self):
        stats = prune_program(build(NESTED_C))
        assert set(stats) == {"gcd", "sort", "classify"}
        assert all(s.surviving > 0 for s in stats.values())
