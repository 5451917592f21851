"""Piece version resolution, auto-upgrade and compatibility checks.

Piece steps pin a version either exactly (``1.4.2``) or through a range
shorthand (``^1.4.2`` accepts any ``1.x.y``; ``~0.3.1`` accepts any
``0.3.y``).  A release treats two pins as the same dependency when they would
resolve to the same compatible line:

* stable pieces (major >= 1) are compatible within a major version,
* pre-1.0 pieces are compatible within a minor version,
* patch releases are always compatible.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from packaging.version import Version

from release_engine.flow.flow_structure import clone_step, transfer_flow
from release_engine.models.flow import PIECE_STEP_TYPES, FlowVersion, Step

logger = logging.getLogger(__name__)

_RANGE_PREFIXES = ("^", "~")


# Semantic Versioning 2.0.0 grammar (semver.org), with the optional leading
# "v" that npm-style version strings carry.
_SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


def resolve_exact_version(version: str) -> str:
    """Strip a ``^``/``~`` range shorthand, returning the concrete version."""
    if version.startswith(_RANGE_PREFIXES):
        return version[1:]
    return version


def parse_semver(version: str) -> Version | None:
    """Parse a concrete ``MAJOR.MINOR.PATCH`` version, or return ``None``.

    The string must follow the semantic versioning grammar; PEP 440-only
    spellings (``1.2.3.post1``, epochs, leading zeros) are rejected.  The
    returned :class:`~packaging.version.Version` holds the release core
    only, pre-release and build suffixes are validated and dropped.
    """
    match = _SEMVER_RE.fullmatch(version.strip())
    if match is None:
        return None
    return Version(f"{match['major']}.{match['minor']}.{match['patch']}")


def is_same_version(version_one: str, version_two: str) -> bool:
    """Return ``True`` when two pins of the same piece are compatible.

    If either version cannot be parsed as a semantic version, the resolved
    strings are compared verbatim.
    """
    exact_one = resolve_exact_version(version_one)
    exact_two = resolve_exact_version(version_two)

    parsed_one = parse_semver(exact_one)
    parsed_two = parse_semver(exact_two)
    if parsed_one is None or parsed_two is None:
        logger.debug("Comparing unparseable versions %r and %r verbatim", exact_one, exact_two)
        return exact_one == exact_two

    if parsed_one.major >= 1 or parsed_two.major >= 1:
        return parsed_one.major == parsed_two.major
    return parsed_one.major == parsed_two.major and parsed_one.minor == parsed_two.minor


def to_auto_upgradable_version(version: str) -> str:
    """Turn an exact pin into the range that auto-upgrades compatible releases.

    Versions already expressed as a range, and strings that are not semantic
    versions, are returned unchanged.
    """
    if version.startswith(_RANGE_PREFIXES):
        return version
    parsed = parse_semver(version)
    if parsed is None:
        return version
    prefix = "^" if parsed.major >= 1 else "~"
    return f"{prefix}{version}"


# ---------------------------------------------------------------------------
# Auto-upgrade collaborator
# ---------------------------------------------------------------------------


class PieceUpgrader(Protocol):
    """Rewrites a flow's piece pins to their latest compatible form."""

    async def upgrade(self, flow_version: FlowVersion) -> FlowVersion: ...


class AutoUpgradePieceUpgrader:
    """Default upgrader: marks every exact piece pin as auto-upgradable.

    Works purely on the flow graph; hosts that consult a piece registry can
    supply their own :class:`PieceUpgrader`.
    """

    async def upgrade(self, flow_version: FlowVersion) -> FlowVersion:
        return make_flow_auto_upgradable(flow_version)


def make_flow_auto_upgradable(flow_version: FlowVersion) -> FlowVersion:
    """Return a copy of *flow_version* with every piece pin auto-upgradable."""

    def _upgrade_step(step: Step) -> Step:
        if step.type not in PIECE_STEP_TYPES:
            return step
        cloned = clone_step(step)
        upgraded = to_auto_upgradable_version(cloned.settings.piece_version)
        return cloned.model_copy(
            update={"settings": cloned.settings.model_copy(update={"piece_version": upgraded})}
        )

    return transfer_flow(flow_version, _upgrade_step)
