"""Domain models for the release engine."""

from release_engine.models.flow import (
    DEFAULT_SAMPLE_DATA_SETTINGS,
    PIECE_STEP_TYPES,
    Action,
    CodeAction,
    CodeSettings,
    EmptyTrigger,
    FlowVersion,
    LoopOnItemsAction,
    LoopOnItemsSettings,
    PieceAction,
    PieceSettings,
    PieceTrigger,
    PopulatedFlow,
    RouterAction,
    RouterSettings,
    SampleDataSettings,
    Step,
    StepSettings,
    StepType,
    Trigger,
)
from release_engine.models.operations import (
    ConnectionOperation,
    ConnectionOperationType,
    CreateConnectionOperation,
    CreateFlowOperation,
    CreateTableOperation,
    DeleteFlowOperation,
    DiffState,
    ProjectOperation,
    ProjectOperationType,
    TableOperation,
    TableOperationType,
    UpdateConnectionOperation,
    UpdateFlowOperation,
    UpdateTableOperation,
)
from release_engine.models.state import (
    ConnectionState,
    FieldType,
    ProjectState,
    TableField,
    TableState,
)

__all__ = [
    "DEFAULT_SAMPLE_DATA_SETTINGS",
    "PIECE_STEP_TYPES",
    "Action",
    "CodeAction",
    "CodeSettings",
    "ConnectionOperation",
    "ConnectionOperationType",
    "ConnectionState",
    "CreateConnectionOperation",
    "CreateFlowOperation",
    "CreateTableOperation",
    "DeleteFlowOperation",
    "DiffState",
    "EmptyTrigger",
    "FieldType",
    "FlowVersion",
    "LoopOnItemsAction",
    "LoopOnItemsSettings",
    "PieceAction",
    "PieceSettings",
    "PieceTrigger",
    "PopulatedFlow",
    "ProjectOperation",
    "ProjectOperationType",
    "ProjectState",
    "RouterAction",
    "RouterSettings",
    "SampleDataSettings",
    "Step",
    "StepSettings",
    "StepType",
    "TableField",
    "TableOperation",
    "TableOperationType",
    "TableState",
    "Trigger",
    "UpdateConnectionOperation",
    "UpdateFlowOperation",
    "UpdateTableOperation",
]
