"""Unit tests for release_engine.diff.diff_serializer."""

from __future__ import annotations

import json

import pytest

from release_engine.diff.diff_serializer import (
    StateLoadError,
    load_project_state,
    serialize_diff,
    summarize_diff,
)
from release_engine.models.flow import PieceTrigger, RouterAction, StepType
from release_engine.models.operations import (
    CreateConnectionOperation,
    CreateFlowOperation,
    DiffState,
    UpdateTableOperation,
)
from release_engine.models.state import ConnectionState, FieldType, TableField, TableState

_STATE_JSON = json.dumps(
    {
        "flows": [
            {
                "id": "internal-1",
                "externalId": "flow-1",
                "version": {
                    "displayName": "Route leads",
                    "trigger": {
                        "name": "trigger",
                        "type": "PIECE_TRIGGER",
                        "displayName": "New lead",
                        "valid": True,
                        "settings": {
                            "pieceName": "@pieces/hubspot",
                            "pieceVersion": "~0.5.3",
                            "triggerName": "new_contact",
                            "input": {"auth": "{{connections['hubspot']}}"},
                            "inputUiInfo": {"sampleDataFileId": "abc"},
                            "propertySettings": {"foo": {"type": "MANUAL"}},
                        },
                        "nextAction": {
                            "name": "step_1",
                            "type": "ROUTER",
                            "settings": {"branches": [], "executionType": "EXECUTE_FIRST_MATCH"},
                            "children": [{"name": "step_2", "type": "CODE", "settings": {}}, None],
                        },
                    },
                },
            }
        ],
        "connections": [{"externalId": "hubspot", "pieceName": "@pieces/hubspot"}],
    }
)


# ---------------------------------------------------------------------------
# load_project_state
# ---------------------------------------------------------------------------


class TestLoadProjectState:
    def test_loads_camel_case_export(self):
        state = load_project_state(_STATE_JSON)
        flow = state.flows[0]
        assert flow.external_id == "flow-1"
        assert isinstance(flow.version.trigger, PieceTrigger)
        assert flow.version.trigger.settings.piece_version == "~0.5.3"
        assert flow.version.trigger.settings.input_ui_info.sample_data_file_id == "abc"

    def test_nested_steps_are_discriminated(self):
        router = load_project_state(_STATE_JSON).flows[0].version.trigger.next_action
        assert isinstance(router, RouterAction)
        assert router.children[0].type == StepType.CODE
        assert router.children[1] is None

    def test_unknown_keys_are_kept(self):
        settings = load_project_state(_STATE_JSON).flows[0].version.trigger.settings
        dumped = settings.model_dump(by_alias=True)
        assert dumped["propertySettings"] == {"foo": {"type": "MANUAL"}}

    def test_optional_collections_default_to_none(self):
        state = load_project_state('{"flows": []}')
        assert state.connections is None
        assert state.tables is None

    def test_invalid_json(self):
        with pytest.raises(StateLoadError):
            load_project_state("{not json")

    def test_unknown_step_type(self):
        bad = _STATE_JSON.replace('"type": "ROUTER"', '"type": "TELEPORT"')
        with pytest.raises(StateLoadError, match="nextAction"):
            load_project_state(bad)

    def test_missing_external_id(self):
        with pytest.raises(StateLoadError, match="externalId"):
            load_project_state('{"flows": [{"version": {"displayName": "x", "trigger": {"name": "t", "type": "EMPTY"}}}]}')


# ---------------------------------------------------------------------------
# serialize_diff / summarize_diff
# ---------------------------------------------------------------------------


def _diff_state() -> DiffState:
    flow = load_project_state(_STATE_JSON).flows[0]
    table = TableState(external_id="t1", name="Leads", fields=[TableField(name="email", type=FieldType.TEXT)])
    return DiffState(
        operations=[CreateFlowOperation(flow_state=flow)],
        connections=[CreateConnectionOperation(connection_state=ConnectionState(external_id="c", piece_name="p"))],
        tables=[UpdateTableOperation(table_state=table, new_table_state=table.model_copy(update={"name": "People"}))],
    )


class TestSerializeDiff:
    def test_camel_case_keys(self):
        payload = json.loads(serialize_diff(_diff_state()))
        assert payload["operations"][0]["type"] == "CREATE_FLOW"
        assert payload["operations"][0]["flowState"]["externalId"] == "flow-1"
        assert payload["tables"][0]["newTableState"]["name"] == "People"

    def test_deterministic(self):
        assert serialize_diff(_diff_state()) == serialize_diff(_diff_state())

    def test_sorted_keys(self):
        text = serialize_diff(DiffState())
        assert text == json.dumps({"connections": [], "operations": [], "tables": []}, indent=2)

    def test_round_trip(self):
        original = _diff_state()
        assert DiffState.model_validate_json(serialize_diff(original)) == original


class TestSummarizeDiff:
    def test_counts_every_type(self):
        counts = summarize_diff(_diff_state())
        assert counts == {
            "CREATE_FLOW": 1,
            "UPDATE_FLOW": 0,
            "DELETE_FLOW": 0,
            "CREATE_CONNECTION": 1,
            "UPDATE_CONNECTION": 0,
            "CREATE_TABLE": 0,
            "UPDATE_TABLE": 1,
        }

    def test_empty_diff(self):
        assert set(summarize_diff(DiffState()).values()) == {0}
