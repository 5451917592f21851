"""Walking and rebuilding flow step graphs.

The step graph is a tree rooted at the trigger.  All traversal here is a
closed dispatch over the step variants of :mod:`release_engine.models.flow`;
adding a variant without teaching :func:`get_child_steps` about it fails the
``assert_never`` exhaustiveness check under a type checker.

Traversal order is depth-first and deterministic: a step, then the steps
nested inside it (loop body, router branches in branch order), then its
``next_action`` chain.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, assert_never

from release_engine.models.flow import (
    CodeAction,
    EmptyTrigger,
    FlowVersion,
    LoopOnItemsAction,
    PieceAction,
    PieceTrigger,
    RouterAction,
)

if TYPE_CHECKING:
    from release_engine.models.flow import Step

StepTransform = Callable[["Step"], "Step"]


def get_child_steps(step: Step) -> list[Step]:
    """Return the steps nested directly inside *step* (excluding ``next_action``)."""
    if isinstance(step, LoopOnItemsAction):
        return [step.first_loop_action] if step.first_loop_action is not None else []
    if isinstance(step, RouterAction):
        return [child for child in step.children if child is not None]
    if isinstance(step, (CodeAction, PieceAction, EmptyTrigger, PieceTrigger)):
        return []
    assert_never(step)


def list_all_steps(trigger: Step) -> list[Step]:
    """Flatten the graph rooted at *trigger* into a deterministic list.

    Iterative so that long ``next_action`` chains do not hit the recursion
    limit.
    """
    steps: list[Step] = []
    stack: list[Step] = [trigger]
    while stack:
        step = stack.pop()
        steps.append(step)
        # Pushed in reverse so that nested steps are visited before next_action.
        if step.next_action is not None:
            stack.append(step.next_action)
        stack.extend(reversed(get_child_steps(step)))
    return steps


_LINK_FIELDS = {"next_action", "first_loop_action", "children"}


def clone_step(step: Step) -> Step:
    """Copy a single step with fully independent settings.

    Child links are shared with the original; :func:`transfer_flow` replaces
    them with rebuilt children.  The original step is never touched.
    """
    return step.model_copy(update={"settings": step.settings.model_copy(deep=True)})


def transfer_step(step: Step, transform: StepTransform) -> Step:
    """Apply *transform* to *step* and every step below it, returning a new graph.

    *transform* is called parent-first in :func:`list_all_steps` order and
    receives the original step.  Its result has its child links replaced by
    the transformed children.  The graph is rebuilt bottom-up without
    recursion.
    """
    steps = list_all_steps(step)
    transformed = {id(original): transform(original) for original in steps}
    rebuilt: dict[int, Step] = {}

    # Pre-order puts every step before its descendants, so walking it
    # backwards rebuilds children before their parents.
    for original in reversed(steps):
        update: dict[str, object] = {}
        if isinstance(original, LoopOnItemsAction) and original.first_loop_action is not None:
            update["first_loop_action"] = rebuilt[id(original.first_loop_action)]
        elif isinstance(original, RouterAction):
            update["children"] = [
                rebuilt[id(child)] if child is not None else None for child in original.children
            ]
        if original.next_action is not None:
            update["next_action"] = rebuilt[id(original.next_action)]

        result = transformed[id(original)]
        rebuilt[id(original)] = result.model_copy(update=update) if update else result

    return rebuilt[id(step)]


def transfer_flow(flow_version: FlowVersion, transform: StepTransform) -> FlowVersion:
    """Return a copy of *flow_version* whose trigger graph went through *transform*."""
    return flow_version.model_copy(update={"trigger": transfer_step(flow_version.trigger, transform)})


def graph_fingerprint(trigger: Step) -> list[dict[str, Any]]:
    """Flat, JSON-compatible description of the graph rooted at *trigger*.

    One entry per step in :func:`list_all_steps` order.  Each entry holds the
    step without its child links plus the shape of those links, which is
    enough to tell two graphs apart.  Comparing two fingerprints is a deep,
    order-sensitive comparison of the graphs that does not nest one level
    per step.
    """
    fingerprint: list[dict[str, Any]] = []
    for step in list_all_steps(trigger):
        entry = step.model_dump(mode="json", by_alias=True, exclude=_LINK_FIELDS)
        entry["links"] = {
            "next": step.next_action is not None,
            "children": [child is not None for child in get_child_links(step)],
        }
        fingerprint.append(entry)
    return fingerprint


def get_child_links(step: Step) -> list[Step | None]:
    """Nested child slots of *step*, keeping empty router branches as ``None``."""
    if isinstance(step, LoopOnItemsAction):
        return [step.first_loop_action]
    if isinstance(step, RouterAction):
        return list(step.children)
    return []
