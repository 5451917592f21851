"""Project state differ.

Compares the *current* state of a project with the *new* (desired) state and
produces the operations that converge one onto the other:

* flows -- DELETE, CREATE and UPDATE, always emitted in that category order,
* connections -- UPDATE and CREATE (removal is not represented),
* tables -- UPDATE and CREATE (removal is not represented).

Entities are matched by ``external_id``.  Flow updates are decided on the
normalised form of both versions (see
:mod:`release_engine.diff.flow_normalizer`) so that refreshed sample data,
credentials and compatible piece upgrades never show up as changes.

The differ is a pure function of its inputs: states are never mutated and
the only side effect is logging.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from release_engine.config import Settings, load_settings
from release_engine.diff.flow_normalizer import NormalizedFlow, normalize_flow
from release_engine.flow.piece_versions import AutoUpgradePieceUpgrader, PieceUpgrader, is_same_version
from release_engine.models.flow import PopulatedFlow
from release_engine.models.operations import (
    ConnectionOperation,
    CreateConnectionOperation,
    CreateFlowOperation,
    CreateTableOperation,
    DeleteFlowOperation,
    DiffState,
    ProjectOperation,
    TableOperation,
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

logger = logging.getLogger(__name__)

_E = TypeVar("_E", PopulatedFlow, ConnectionState, TableState)


class DiffInvariantError(RuntimeError):
    """Raised when the differ's own bookkeeping is inconsistent.

    This signals a defect in the engine, not a problem with the inputs, and
    aborts the whole diff.
    """


def _index_by_external_id(entities: Iterable[_E] | None) -> dict[str, _E]:
    """Map ``external_id`` to entity, keeping the first occurrence."""
    index: dict[str, _E] = {}
    for entity in entities or ():
        index.setdefault(entity.external_id, entity)
    return index


# ---------------------------------------------------------------------------
# Flows
# ---------------------------------------------------------------------------


def find_flows_to_create(current_state: ProjectState, new_state: ProjectState) -> list[ProjectOperation]:
    """CREATE for every new flow with no current counterpart, in new-state order."""
    current_ids = _index_by_external_id(current_state.flows)
    return [CreateFlowOperation(flow_state=flow) for flow in new_state.flows if flow.external_id not in current_ids]


def find_flows_to_delete(current_state: ProjectState, new_state: ProjectState) -> list[ProjectOperation]:
    """DELETE for every current flow with no new counterpart, in current-state order."""
    new_ids = _index_by_external_id(new_state.flows)
    return [DeleteFlowOperation(flow_state=flow) for flow in current_state.flows if flow.external_id not in new_ids]


def versions_matched(source: dict[str, str], target: dict[str, str]) -> bool:
    """Return ``True`` when every piece pin in *source* is compatible in *target*.

    Only the keys of *source* are checked.  A piece step that exists only on
    the *target* side is caught by the trigger comparison instead.
    """
    for step_name, source_version in source.items():
        target_version = target.get(step_name)
        if target_version is None:
            return False
        if not is_same_version(target_version, source_version):
            return False
    return True


def is_normalized_flow_changed(source: NormalizedFlow, target: NormalizedFlow) -> bool:
    """Change predicate over two normalised flow versions."""
    if source.display_name != target.display_name:
        return True
    if source.trigger_fingerprint() != target.trigger_fingerprint():
        return True
    return not versions_matched(source.piece_versions, target.piece_versions)


# ---------------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------------


def is_connection_changed(state_one: ConnectionState, state_two: ConnectionState) -> bool:
    return state_one.piece_name != state_two.piece_name


def diff_connections(current_state: ProjectState, new_state: ProjectState) -> list[ConnectionOperation]:
    """UPDATEs in current-state order, then CREATEs in new-state order."""
    current_by_id = _index_by_external_id(current_state.connections)
    new_by_id = _index_by_external_id(new_state.connections)
    operations: list[ConnectionOperation] = []

    for connection in current_state.connections or ():
        new_connection = new_by_id.get(connection.external_id)
        if new_connection is not None and is_connection_changed(new_connection, connection):
            operations.append(
                UpdateConnectionOperation(
                    connection_state=connection,
                    new_connection_state=new_connection,
                )
            )

    for connection in new_state.connections or ():
        if connection.external_id not in current_by_id:
            operations.append(CreateConnectionOperation(connection_state=connection))

    return operations


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def _field_signature(field: TableField) -> tuple[str, FieldType, Any]:
    # Dropdown options are the only field payload that changes a schema.
    data = field.data if field.type == FieldType.STATIC_DROPDOWN else None
    return field.name, field.type, data


def is_table_changed(state_one: TableState, state_two: TableState) -> bool:
    if state_one.name != state_two.name:
        return True
    return [_field_signature(f) for f in state_one.fields] != [_field_signature(f) for f in state_two.fields]


def diff_tables(current_state: ProjectState, new_state: ProjectState) -> list[TableOperation]:
    """UPDATEs in current-state order, then CREATEs in new-state order."""
    current_by_id = _index_by_external_id(current_state.tables)
    new_by_id = _index_by_external_id(new_state.tables)
    operations: list[TableOperation] = []

    for table in current_state.tables or ():
        new_table = new_by_id.get(table.external_id)
        if new_table is not None and is_table_changed(new_table, table):
            operations.append(UpdateTableOperation(table_state=table, new_table_state=new_table))

    for table in new_state.tables or ():
        if table.external_id not in current_by_id:
            operations.append(CreateTableOperation(table_state=table))

    return operations


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ProjectDiffService:
    """Diffs project states using an injected piece upgrader.

    Parameters
    ----------
    upgrader:
        Collaborator that rewrites piece pins to their auto-upgradable form.
        Defaults to :class:`AutoUpgradePieceUpgrader`.
    settings:
        Engine settings; loaded from the environment when omitted.
    """

    def __init__(
        self,
        upgrader: PieceUpgrader | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._upgrader: PieceUpgrader = upgrader if upgrader is not None else AutoUpgradePieceUpgrader()
        self._settings = settings if settings is not None else load_settings()

    async def diff(self, current_state: ProjectState, new_state: ProjectState) -> DiffState:
        """Compute every operation needed to move *current_state* to *new_state*."""
        delete_operations = find_flows_to_delete(current_state, new_state)
        create_operations = find_flows_to_create(current_state, new_state)
        update_operations = await self.find_flows_to_update(current_state, new_state)
        connections = diff_connections(current_state, new_state)
        tables = diff_tables(current_state, new_state)

        result = DiffState(
            operations=[*delete_operations, *create_operations, *update_operations],
            connections=connections,
            tables=tables,
        )
        summary = {
            "flows_deleted": len(delete_operations),
            "flows_created": len(create_operations),
            "flows_updated": len(update_operations),
            "connection_operations": len(connections),
            "table_operations": len(tables),
        }
        logger.info(
            "Diff complete: %d flow, %d connection, %d table operation(s)",
            len(result.operations),
            len(connections),
            len(tables),
            extra={"diff": summary},
        )
        return result

    async def find_flows_to_update(
        self,
        current_state: ProjectState,
        new_state: ProjectState,
    ) -> list[ProjectOperation]:
        """UPDATE for every matched flow whose normalised form changed.

        Pairs are checked concurrently, bounded by
        ``Settings.max_concurrent_flow_checks``.  Results keep the order of
        ``new_state.flows`` regardless of completion order.
        """
        current_by_id = _index_by_external_id(current_state.flows)
        matched: Sequence[PopulatedFlow] = [flow for flow in new_state.flows if flow.external_id in current_by_id]
        semaphore = asyncio.Semaphore(self._settings.max_concurrent_flow_checks)

        async def _check(new_flow: PopulatedFlow) -> ProjectOperation | None:
            current_flow = current_by_id.get(new_flow.external_id)
            if current_flow is None:
                raise DiffInvariantError(f"Could not find target flow for source flow {new_flow.external_id}")
            async with semaphore:
                changed = await self.is_flow_changed(current_flow, new_flow)
            logger.debug(
                "Flow %s %s",
                new_flow.external_id,
                "changed" if changed else "unchanged",
                extra={"flow_external_id": new_flow.external_id},
            )
            if not changed:
                return None
            return UpdateFlowOperation(flow_state=current_flow, new_flow_state=new_flow)

        # gather() returns results by argument position, not completion order.
        results = await asyncio.gather(*(_check(flow) for flow in matched))
        return [operation for operation in results if operation is not None]

    async def is_flow_changed(self, from_flow: PopulatedFlow, target_flow: PopulatedFlow) -> bool:
        """Return ``True`` when *target_flow* is a real change over *from_flow*."""
        normalized_from = await normalize_flow(from_flow.version, self._upgrader)
        normalized_target = await normalize_flow(target_flow.version, self._upgrader)
        return is_normalized_flow_changed(normalized_from, normalized_target)


async def diff(
    current_state: ProjectState,
    new_state: ProjectState,
    *,
    upgrader: PieceUpgrader | None = None,
    settings: Settings | None = None,
) -> DiffState:
    """Diff two project states with a one-off :class:`ProjectDiffService`."""
    return await ProjectDiffService(upgrader=upgrader, settings=settings).diff(current_state, new_state)
