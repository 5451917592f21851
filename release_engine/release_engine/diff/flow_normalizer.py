"""Canonical form of a flow version for change detection.

Two flow versions that only differ in volatile fields must compare equal.
Normalisation therefore:

1. Runs the flow through the piece auto-upgrader so that equivalent pins
   converge on the same range form.
2. Replaces every step's ``input_ui_info`` with the default sample-data
   settings.
3. Blanks ``piece_version`` on piece-backed steps and, when set, the
   ``auth`` input.  Credentials must never influence a diff, and versions
   are compared separately with :func:`~release_engine.flow.is_same_version`.

The pre-blanking versions are returned alongside the normalised graph,
keyed by step name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from release_engine.flow.flow_structure import clone_step, graph_fingerprint, transfer_flow
from release_engine.flow.piece_versions import PieceUpgrader
from release_engine.models.flow import (
    DEFAULT_SAMPLE_DATA_SETTINGS,
    PIECE_STEP_TYPES,
    FlowVersion,
    Step,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedFlow:
    """Normalised flow version plus the piece pins stripped from it."""

    display_name: str
    trigger: Step
    piece_versions: dict[str, str] = field(default_factory=dict)

    def trigger_fingerprint(self) -> list[dict[str, Any]]:
        """Flattened trigger graph used for deep structural comparison."""
        return graph_fingerprint(self.trigger)


def normalize_step(step: Step) -> Step:
    """Return a normalised clone of a single step; *step* is left untouched."""
    cloned = clone_step(step)
    settings_update: dict[str, object] = {"input_ui_info": DEFAULT_SAMPLE_DATA_SETTINGS}

    if step.type in PIECE_STEP_TYPES:
        settings_update["piece_version"] = ""
        if cloned.settings.input.get("auth"):
            settings_update["input"] = {**cloned.settings.input, "auth": ""}

    return cloned.model_copy(update={"settings": cloned.settings.model_copy(update=settings_update)})


async def normalize_flow(flow_version: FlowVersion, upgrader: PieceUpgrader) -> NormalizedFlow:
    """Normalise *flow_version* for comparison.

    Parameters
    ----------
    flow_version:
        The raw flow version.  It is never mutated.
    upgrader:
        Collaborator resolving piece pins to their auto-upgradable form.

    Returns
    -------
    NormalizedFlow
        The canonical trigger graph and the per-step piece versions
        recorded before they were blanked.
    """
    upgraded = await upgrader.upgrade(flow_version)
    piece_versions: dict[str, str] = {}

    def _normalize(step: Step) -> Step:
        if step.type in PIECE_STEP_TYPES:
            piece_versions[step.name] = step.settings.piece_version
        return normalize_step(step)

    normalized = transfer_flow(upgraded, _normalize)
    logger.debug(
        "Normalised flow %r (%d piece step(s))",
        normalized.display_name,
        len(piece_versions),
    )
    return NormalizedFlow(
        display_name=normalized.display_name,
        trigger=normalized.trigger,
        piece_versions=piece_versions,
    )
