"""Shared pydantic configuration for exported project-state documents.

Project states are exchanged as camelCase JSON.  Python code works with
snake_case attributes; ``populate_by_name`` lets tests and callers construct
models either way.  Unknown keys are kept so that a round-trip through the
engine never silently drops data it does not model explicitly.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StateModel(BaseModel):
    """Base class for every immutable state and operation model."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )
