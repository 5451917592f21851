"""Release engine -- diffs project states into create/update/delete operations.

The entry point is :func:`release_engine.diff.diff` (or
:class:`release_engine.diff.ProjectDiffService` when collaborators are
injected).
"""

from release_engine.models import DiffState, ProjectState

__all__ = [
    "DiffState",
    "ProjectState",
]
