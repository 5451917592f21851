"""Operation models emitted by the project differ.

Each operation family is a tagged union discriminated on ``type``.  CREATE
carries only the new state, DELETE only the current state, and UPDATE both
the current state (``*_state``) and the desired one (``new_*_state``).
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import Field

from release_engine.models.base import StateModel
from release_engine.models.flow import PopulatedFlow
from release_engine.models.state import ConnectionState, TableState


class ProjectOperationType(str, Enum):
    CREATE_FLOW = "CREATE_FLOW"
    UPDATE_FLOW = "UPDATE_FLOW"
    DELETE_FLOW = "DELETE_FLOW"


class ConnectionOperationType(str, Enum):
    CREATE_CONNECTION = "CREATE_CONNECTION"
    UPDATE_CONNECTION = "UPDATE_CONNECTION"


class TableOperationType(str, Enum):
    CREATE_TABLE = "CREATE_TABLE"
    UPDATE_TABLE = "UPDATE_TABLE"


# ---------------------------------------------------------------------------
# Flow operations
# ---------------------------------------------------------------------------


class CreateFlowOperation(StateModel):
    type: Literal[ProjectOperationType.CREATE_FLOW] = ProjectOperationType.CREATE_FLOW
    flow_state: PopulatedFlow


class DeleteFlowOperation(StateModel):
    type: Literal[ProjectOperationType.DELETE_FLOW] = ProjectOperationType.DELETE_FLOW
    flow_state: PopulatedFlow


class UpdateFlowOperation(StateModel):
    type: Literal[ProjectOperationType.UPDATE_FLOW] = ProjectOperationType.UPDATE_FLOW
    flow_state: PopulatedFlow = Field(..., description="Flow as it exists in the current state.")
    new_flow_state: PopulatedFlow = Field(..., description="Flow as declared in the new state.")


ProjectOperation = Annotated[
    Union[CreateFlowOperation, DeleteFlowOperation, UpdateFlowOperation],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Connection operations
# ---------------------------------------------------------------------------


class CreateConnectionOperation(StateModel):
    type: Literal[ConnectionOperationType.CREATE_CONNECTION] = ConnectionOperationType.CREATE_CONNECTION
    connection_state: ConnectionState


class UpdateConnectionOperation(StateModel):
    type: Literal[ConnectionOperationType.UPDATE_CONNECTION] = ConnectionOperationType.UPDATE_CONNECTION
    connection_state: ConnectionState
    new_connection_state: ConnectionState


ConnectionOperation = Annotated[
    Union[CreateConnectionOperation, UpdateConnectionOperation],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Table operations
# ---------------------------------------------------------------------------


class CreateTableOperation(StateModel):
    type: Literal[TableOperationType.CREATE_TABLE] = TableOperationType.CREATE_TABLE
    table_state: TableState


class UpdateTableOperation(StateModel):
    type: Literal[TableOperationType.UPDATE_TABLE] = TableOperationType.UPDATE_TABLE
    table_state: TableState
    new_table_state: TableState


TableOperation = Annotated[
    Union[CreateTableOperation, UpdateTableOperation],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


class DiffState(StateModel):
    """Complete result of diffing two project states.

    ``operations`` holds flow operations ordered DELETE, CREATE, UPDATE.
    """

    operations: list[ProjectOperation] = Field(default_factory=list)
    connections: list[ConnectionOperation] = Field(default_factory=list)
    tables: list[TableOperation] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.operations or self.connections or self.tables)
