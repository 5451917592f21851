"""Flow and step models.

A flow version holds a single trigger which is the root of the step graph.
Every step is one variant of a closed tagged union discriminated on
``type``; walking the graph dispatches on that tag (see
:mod:`release_engine.flow.flow_structure`).

Children hang off steps in three places:

* ``next_action`` -- the step executed after this one (every step),
* ``first_loop_action`` -- the body of a ``LOOP_ON_ITEMS`` action,
* ``children`` -- one optional action per branch of a ``ROUTER`` action.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import Field

from release_engine.models.base import StateModel


class StepType(str, Enum):
    """Kind of a step node in a flow graph."""

    # Triggers
    EMPTY = "EMPTY"
    PIECE_TRIGGER = "PIECE_TRIGGER"

    # Actions
    CODE = "CODE"
    PIECE = "PIECE"
    LOOP_ON_ITEMS = "LOOP_ON_ITEMS"
    ROUTER = "ROUTER"


PIECE_STEP_TYPES: frozenset[StepType] = frozenset({StepType.PIECE, StepType.PIECE_TRIGGER})


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class SampleDataSettings(StateModel):
    """Cached sample data captured while a user tests a step in the builder."""

    sample_data_file_id: str | None = None
    sample_data_input_file_id: str | None = None
    last_test_date: str | None = None
    customized_inputs: dict[str, Any] | None = None
    current_selected_data: Any = None


DEFAULT_SAMPLE_DATA_SETTINGS = SampleDataSettings()


class StepSettings(StateModel):
    """Settings shared by every step kind."""

    input_ui_info: SampleDataSettings | None = Field(
        default=None,
        description="Sample-data cache; never semantically significant.",
    )


class CodeSettings(StepSettings):
    source_code: dict[str, Any] = Field(default_factory=dict)
    input: dict[str, Any] = Field(default_factory=dict)


class PieceSettings(StepSettings):
    """Settings of a piece-backed action or trigger."""

    piece_name: str = Field(..., min_length=1, description="Package name of the piece.")
    piece_version: str = Field(
        ...,
        description="Exact version or range shorthand (``^1.2.0``, ``~0.3.1``).",
    )
    action_name: str | None = None
    trigger_name: str | None = None
    input: dict[str, Any] = Field(
        default_factory=dict,
        description="Configured piece inputs; ``auth`` holds the connection reference.",
    )


class LoopOnItemsSettings(StepSettings):
    items: str = ""


class RouterSettings(StepSettings):
    branches: list[dict[str, Any]] = Field(default_factory=list)
    execution_type: str | None = None


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


class BaseStep(StateModel):
    """Fields common to all step variants."""

    name: str = Field(..., min_length=1, description="Key of the step, unique within its flow.")
    display_name: str = ""
    valid: bool = True
    skip: bool | None = None
    next_action: Action | None = None


class CodeAction(BaseStep):
    type: Literal[StepType.CODE] = StepType.CODE
    settings: CodeSettings = Field(default_factory=CodeSettings)


class PieceAction(BaseStep):
    type: Literal[StepType.PIECE] = StepType.PIECE
    settings: PieceSettings


class LoopOnItemsAction(BaseStep):
    type: Literal[StepType.LOOP_ON_ITEMS] = StepType.LOOP_ON_ITEMS
    settings: LoopOnItemsSettings = Field(default_factory=LoopOnItemsSettings)
    first_loop_action: Action | None = None


class RouterAction(BaseStep):
    type: Literal[StepType.ROUTER] = StepType.ROUTER
    settings: RouterSettings = Field(default_factory=RouterSettings)
    children: list[Action | None] = Field(default_factory=list)


class EmptyTrigger(BaseStep):
    type: Literal[StepType.EMPTY] = StepType.EMPTY
    settings: StepSettings = Field(default_factory=StepSettings)


class PieceTrigger(BaseStep):
    type: Literal[StepType.PIECE_TRIGGER] = StepType.PIECE_TRIGGER
    settings: PieceSettings


Action = Annotated[
    Union[CodeAction, PieceAction, LoopOnItemsAction, RouterAction],
    Field(discriminator="type"),
]
Trigger = Annotated[Union[EmptyTrigger, PieceTrigger], Field(discriminator="type")]
Step = Union[CodeAction, PieceAction, LoopOnItemsAction, RouterAction, EmptyTrigger, PieceTrigger]

for _model in (BaseStep, CodeAction, PieceAction, LoopOnItemsAction, RouterAction, EmptyTrigger, PieceTrigger):
    _model.model_rebuild()


# ---------------------------------------------------------------------------
# Flows
# ---------------------------------------------------------------------------


class FlowVersion(StateModel):
    """A version of a flow: its display name and its step graph."""

    id: str | None = None
    flow_id: str | None = None
    display_name: str = Field(..., description="Human-readable flow name.")
    trigger: Trigger
    valid: bool = True
    state: str | None = None


class PopulatedFlow(StateModel):
    """A flow together with the version that is being released."""

    id: str | None = Field(default=None, description="Storage-internal id; ignored by the differ.")
    external_id: str = Field(
        ...,
        min_length=1,
        description="Stable identifier shared by the same flow across environments.",
    )
    version: FlowVersion
