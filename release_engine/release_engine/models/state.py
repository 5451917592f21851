"""Project state models.

A :class:`ProjectState` is a point-in-time snapshot of everything a project
release moves between environments.  States are read-only inputs to the
differ; every model here is frozen.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field

from release_engine.models.base import StateModel
from release_engine.models.flow import PopulatedFlow


class FieldType(str, Enum):
    """Column type of a table field."""

    TEXT = "TEXT"
    NUMBER = "NUMBER"
    DATE = "DATE"
    STATIC_DROPDOWN = "STATIC_DROPDOWN"


class TableField(StateModel):
    """A single column of a table schema."""

    name: str = Field(..., min_length=1)
    type: FieldType
    data: Any = Field(
        default=None,
        description="Dropdown options; only meaningful for STATIC_DROPDOWN fields.",
    )


class TableState(StateModel):
    """Schema of a data table, identified by ``external_id``."""

    id: str | None = None
    external_id: str = Field(..., min_length=1)
    name: str
    fields: list[TableField] = Field(default_factory=list)


class ConnectionState(StateModel):
    """A connection binding, identified by ``external_id``.

    Credential values are never part of a state; only the piece the
    connection authenticates against is tracked.
    """

    external_id: str = Field(..., min_length=1)
    piece_name: str = Field(..., min_length=1)
    display_name: str | None = None


class ProjectState(StateModel):
    """Snapshot of a project's flows, connections and tables.

    ``connections`` and ``tables`` are optional: older exports carry flows
    only, and a missing collection is treated as empty by the differ.
    """

    flows: list[PopulatedFlow] = Field(default_factory=list)
    connections: list[ConnectionState] | None = None
    tables: list[TableState] | None = None
