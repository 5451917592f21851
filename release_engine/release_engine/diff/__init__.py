"""Project state diff engine."""

from release_engine.diff.diff_serializer import (
    StateLoadError,
    load_project_state,
    serialize_diff,
    summarize_diff,
)
from release_engine.diff.flow_normalizer import NormalizedFlow, normalize_flow, normalize_step
from release_engine.diff.project_diff import (
    DiffInvariantError,
    ProjectDiffService,
    diff,
    diff_connections,
    diff_tables,
    find_flows_to_create,
    find_flows_to_delete,
    is_connection_changed,
    is_normalized_flow_changed,
    is_table_changed,
    versions_matched,
)

__all__ = [
    "DiffInvariantError",
    "NormalizedFlow",
    "ProjectDiffService",
    "StateLoadError",
    "diff",
    "diff_connections",
    "diff_tables",
    "find_flows_to_create",
    "find_flows_to_delete",
    "is_connection_changed",
    "is_normalized_flow_changed",
    "is_table_changed",
    "load_project_state",
    "normalize_flow",
    "normalize_step",
    "serialize_diff",
    "summarize_diff",
    "versions_matched",
]
