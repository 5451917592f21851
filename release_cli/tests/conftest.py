"""Shared fixtures for CLI tests."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest


def _flow(external_id: str, display_name: str, piece_version: str) -> dict:
    return {
        "externalId": external_id,
        "version": {
            "displayName": display_name,
            "trigger": {
                "name": "trigger",
                "type": "PIECE_TRIGGER",
                "settings": {
                    "pieceName": "@pieces/webhook",
                    "pieceVersion": piece_version,
                    "triggerName": "catch_webhook",
                    "input": {},
                },
            },
        },
    }


@pytest.fixture(autouse=True)
def _restore_root_logger():
    # The CLI callback reconfigures the root logger.
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def current_state_file(tmp_path: Path) -> Path:
    path = tmp_path / "current.json"
    path.write_text(
        json.dumps(
            {
                "flows": [
                    _flow("keep", "Keep", "1.0.0"),
                    _flow("rename", "Old name", "0.3.0"),
                    _flow("drop", "Drop", "0.1.0"),
                ],
                "connections": [{"externalId": "slack", "pieceName": "@pieces/slack"}],
            }
        )
    )
    return path


@pytest.fixture
def new_state_file(tmp_path: Path) -> Path:
    path = tmp_path / "new.json"
    path.write_text(
        json.dumps(
            {
                "flows": [
                    _flow("keep", "Keep", "1.7.0"),
                    _flow("rename", "New name", "0.3.4"),
                    _flow("add", "Add", "2.0.0"),
                ],
                "connections": [
                    {"externalId": "slack", "pieceName": "@pieces/slack"},
                    {"externalId": "gmail", "pieceName": "@pieces/gmail", "displayName": "Work mail"},
                ],
                "tables": [{"externalId": "leads", "name": "Leads", "fields": [{"name": "email", "type": "TEXT"}]}],
            }
        )
    )
    return path
