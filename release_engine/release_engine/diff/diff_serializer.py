"""Loading project states and serialising diff results.

Serialised diffs are deterministic: keys are sorted and indentation is
fixed, so identical diffs always produce byte-identical JSON.
"""

from __future__ import annotations

import json

from pydantic import ValidationError

from release_engine.models.operations import (
    ConnectionOperationType,
    DiffState,
    ProjectOperationType,
    TableOperationType,
)
from release_engine.models.state import ProjectState


class StateLoadError(ValueError):
    """Raised when a project state document cannot be loaded."""


def load_project_state(json_str: str | bytes) -> ProjectState:
    """Parse an exported project state document.

    Raises
    ------
    StateLoadError
        If the document is not valid JSON or does not match the state schema.
    """
    try:
        return ProjectState.model_validate_json(json_str)
    except ValidationError as exc:
        messages = [
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" if err.get("loc") else err["msg"]
            for err in exc.errors()
        ]
        raise StateLoadError("; ".join(messages)) from exc


def serialize_diff(diff_state: DiffState) -> str:
    """Serialize a diff to deterministic camelCase JSON."""
    # model_dump_json has no sort_keys, so go through a dict.
    raw = diff_state.model_dump(mode="json", by_alias=True)
    return json.dumps(raw, indent=2, sort_keys=True, ensure_ascii=False)


def summarize_diff(diff_state: DiffState) -> dict[str, int]:
    """Count operations per operation type; every type is present."""
    counts: dict[str, int] = {
        op_type.value: 0
        for op_type in (*ProjectOperationType, *ConnectionOperationType, *TableOperationType)
    }
    for operation in (*diff_state.operations, *diff_state.connections, *diff_state.tables):
        counts[operation.type.value] += 1
    return counts
