"""Unit tests for release_engine.flow.flow_structure."""

from __future__ import annotations

from release_engine.flow.flow_structure import (
    clone_step,
    get_child_steps,
    graph_fingerprint,
    list_all_steps,
    transfer_flow,
)
from release_engine.models.flow import (
    CodeAction,
    EmptyTrigger,
    FlowVersion,
    LoopOnItemsAction,
    PieceAction,
    PieceSettings,
    RouterAction,
)


def _piece(name: str, next_action=None) -> PieceAction:
    return PieceAction(
        name=name,
        settings=PieceSettings(piece_name="@pieces/http", piece_version="1.0.0", input={"url": name}),
        next_action=next_action,
    )


def _graph() -> EmptyTrigger:
    """trigger -> loop(body: a -> b) -> router([c, None, d]) -> e"""
    router = RouterAction(
        name="router",
        children=[_piece("c"), None, CodeAction(name="d")],
        next_action=_piece("e"),
    )
    loop = LoopOnItemsAction(
        name="loop",
        first_loop_action=_piece("a", next_action=_piece("b")),
        next_action=router,
    )
    return EmptyTrigger(name="trigger", next_action=loop)


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


class TestListAllSteps:
    def test_depth_first_order(self):
        names = [step.name for step in list_all_steps(_graph())]
        assert names == ["trigger", "loop", "a", "b", "router", "c", "d", "e"]

    def test_single_trigger(self):
        assert [s.name for s in list_all_steps(EmptyTrigger(name="trigger"))] == ["trigger"]

    def test_deterministic(self):
        graph = _graph()
        assert [s.name for s in list_all_steps(graph)] == [s.name for s in list_all_steps(graph)]

    def test_long_chain_does_not_recurse(self):
        step = None
        for idx in range(3000, 0, -1):
            step = CodeAction(name=f"step_{idx}", next_action=step)
        steps = list_all_steps(EmptyTrigger(name="trigger", next_action=step))
        assert len(steps) == 3001


class TestGetChildSteps:
    def test_router_skips_empty_branches(self):
        router = _graph().next_action.next_action
        assert [s.name for s in get_child_steps(router)] == ["c", "d"]

    def test_loop_body(self):
        loop = _graph().next_action
        assert [s.name for s in get_child_steps(loop)] == ["a"]

    def test_leaf_steps(self):
        assert get_child_steps(_piece("x")) == []
        assert get_child_steps(LoopOnItemsAction(name="empty_loop")) == []


class TestGraphFingerprint:
    def test_equal_graphs(self):
        assert graph_fingerprint(_graph()) == graph_fingerprint(_graph())

    def test_one_entry_per_step_without_links(self):
        fingerprint = graph_fingerprint(_graph())
        assert [entry["name"] for entry in fingerprint] == ["trigger", "loop", "a", "b", "router", "c", "d", "e"]
        assert all("nextAction" not in entry and "children" not in entry for entry in fingerprint)

    def test_empty_router_branch_position_matters(self):
        one = RouterAction(name="router", children=[CodeAction(name="x"), None])
        two = RouterAction(name="router", children=[None, CodeAction(name="x")])
        assert graph_fingerprint(one) != graph_fingerprint(two)

    def test_nesting_versus_chaining(self):
        nested = LoopOnItemsAction(name="loop", first_loop_action=CodeAction(name="x"))
        chained = LoopOnItemsAction(name="loop", next_action=CodeAction(name="x"))
        assert graph_fingerprint(nested) != graph_fingerprint(chained)

    def test_settings_difference(self):
        assert graph_fingerprint(_piece("a")) != graph_fingerprint(
            _piece("a").model_copy(update={"display_name": "changed"})
        )


# ---------------------------------------------------------------------------
# Cloning and rebuilding
# ---------------------------------------------------------------------------


class TestCloneStep:
    def test_settings_are_independent(self):
        step = _piece("a")
        cloned = clone_step(step)
        cloned.settings.input["url"] = "changed"
        assert step.settings.input == {"url": "a"}

    def test_equal_to_original(self):
        step = _piece("a", next_action=_piece("b"))
        assert clone_step(step) == step


class TestTransferFlow:
    def test_transform_applied_to_every_step(self):
        flow = FlowVersion(display_name="f", trigger=_graph())
        renamed = transfer_flow(flow, lambda step: step.model_copy(update={"display_name": step.name.upper()}))
        assert [s.display_name for s in list_all_steps(renamed.trigger)] == [
            "TRIGGER", "LOOP", "A", "B", "ROUTER", "C", "D", "E",
        ]

    def test_router_keeps_empty_branch_positions(self):
        flow = FlowVersion(display_name="f", trigger=_graph())
        rebuilt = transfer_flow(flow, clone_step)
        router = rebuilt.trigger.next_action.next_action
        assert router.children[1] is None
        assert [c.name for c in router.children if c is not None] == ["c", "d"]

    def test_transform_sees_steps_in_walk_order(self):
        flow = FlowVersion(display_name="f", trigger=_graph())
        seen: list[str] = []

        def _record(step):
            seen.append(step.name)
            return step

        transfer_flow(flow, _record)
        assert seen == [s.name for s in list_all_steps(flow.trigger)]

    def test_identity_transform_preserves_structure(self):
        flow = FlowVersion(display_name="f", trigger=_graph())
        assert transfer_flow(flow, clone_step) == flow

    def test_long_chain_does_not_recurse(self):
        step = None
        for idx in range(3000, 0, -1):
            step = CodeAction(name=f"step_{idx}", next_action=step)
        flow = FlowVersion(display_name="f", trigger=EmptyTrigger(name="trigger", next_action=step))
        rebuilt = transfer_flow(flow, clone_step)
        assert len(graph_fingerprint(rebuilt.trigger)) == 3001
        assert graph_fingerprint(rebuilt.trigger) == graph_fingerprint(flow.trigger)
