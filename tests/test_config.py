# Copyright (c) 2025 Francis Bain
# SPDX-License-Identifier: Apache-2.0

"""Tests for plugin option and environment loading."""

import json
import os
from pathlib import Path

import pytest

from semantic_release_confluence.config import (
    Context,
    load_config_file,
    load_environment,
    normalize_plugin_config,
)


class TestNormalizePluginConfig:
    def test_maps_release_config_names(self):
        assert normalize_plugin_config(
            {
                "baseUrl": "https://wiki",
                "documentID": "1",
                "documentPath": "a.xml",
                "attachmentsDir": "assets",
            }
        ) == {
            "base_url": "https://wiki",
            "document_id": "1",
            "document_path": "a.xml",
            "attachments_dir": "assets",
        }

    def test_drops_unknown_keys(self):
        assert normalize_plugin_config({"baseUrl": "x", "path": "@semantic-release/x"}) == {
            "base_url": "x"
        }

    def test_none(self):
        assert normalize_plugin_config(None) == {}


class TestLoadConfigFile:
    def test_reads_object(self, tmp_path):
        path = tmp_path / "plugin.json"
        path.write_text(json.dumps({"documentID": "42"}), encoding="utf-8")

        assert load_config_file(path) == {"documentID": "42"}

    def test_rejects_non_object(self, tmp_path):
        path = tmp_path / "plugin.json"
        path.write_text('"just a string"', encoding="utf-8")

        with pytest.raises(ValueError, match="must contain a JSON object"):
            load_config_file(path)


class TestLoadEnvironment:
    def test_process_environment_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CONFLUENCE_TOKEN", "from-env")
        (tmp_path / ".env").write_text("CONFLUENCE_TOKEN=from-file\n", encoding="utf-8")

        env = load_environment(tmp_path)

        assert env["CONFLUENCE_TOKEN"] == "from-env"

    def test_falls_back_to_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("CONFLUENCE_USERNAME", raising=False)
        (tmp_path / ".env").write_text("CONFLUENCE_USERNAME=bot\n", encoding="utf-8")

        env = load_environment(tmp_path)

        assert env["CONFLUENCE_USERNAME"] == "bot"

    def test_without_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("CONFLUENCE_USERNAME", raising=False)
        monkeypatch.setenv("OTHER_VARIABLE", "1")

        env = load_environment(tmp_path)

        assert env["OTHER_VARIABLE"] == "1"
        assert "CONFLUENCE_USERNAME" not in env

    def test_ignores_env_file_in_parent_directory(self, tmp_path, monkeypatch):
        monkeypatch.delenv("CONFLUENCE_TOKEN", raising=False)
        (tmp_path / ".env").write_text("CONFLUENCE_TOKEN=from-parent\n", encoding="utf-8")
        project = tmp_path / "project"
        project.mkdir()

        env = load_environment(project)

        assert "CONFLUENCE_TOKEN" not in env


def test_context_defaults():
    context = Context()

    assert context.cwd == Path.cwd()
    assert context.env == dict(os.environ)
    assert context.dry_run is False
    assert context.logger.name == "semantic_release_confluence"
