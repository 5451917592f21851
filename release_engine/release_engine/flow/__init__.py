"""Flow graph utilities and piece version handling."""

from release_engine.flow.flow_structure import (
    clone_step,
    get_child_steps,
    get_child_links,
    graph_fingerprint,
    list_all_steps,
    transfer_flow,
    transfer_step,
)
from release_engine.flow.piece_versions import (
    AutoUpgradePieceUpgrader,
    PieceUpgrader,
    is_same_version,
    make_flow_auto_upgradable,
    parse_semver,
    resolve_exact_version,
    to_auto_upgradable_version,
)

__all__ = [
    "AutoUpgradePieceUpgrader",
    "PieceUpgrader",
    "clone_step",
    "get_child_steps",
    "get_child_links",
    "graph_fingerprint",
    "is_same_version",
    "list_all_steps",
    "make_flow_auto_upgradable",
    "parse_semver",
    "resolve_exact_version",
    "to_auto_upgradable_version",
    "transfer_flow",
    "transfer_step",
]
