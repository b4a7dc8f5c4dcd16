# Copyright (c) 2025 Francis Bain
# SPDX-License-Identifier: Apache-2.0

"""Configuration objects passed to the release hooks.

The orchestrator hands each hook a plugin configuration mapping (the options
written next to the plugin name in ``.releaserc``) and a context holding the
process environment and working directory. This module turns both into
explicit, read-only structures.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from decouple import Config, RepositoryEnv

USERNAME_VAR = "CONFLUENCE_USERNAME"
TOKEN_VAR = "CONFLUENCE_TOKEN"

# Option name as written in the plugin config -> PluginConfig field
CONFIG_KEYS = {
    "baseUrl": "base_url",
    "documentID": "document_id",
    "documentPath": "document_path",
    "attachmentsDir": "attachments_dir",
}


@dataclass(frozen=True)
class Credentials:
    """Confluence username and API token."""

    username: str
    token: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, token='***')"


@dataclass(frozen=True)
class PluginConfig:
    """Validated plugin options."""

    base_url: str
    document_id: str
    document_path: str
    attachments_dir: Optional[str] = None


@dataclass
class Context:
    """Invocation context supplied by the orchestrator."""

    env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    cwd: Path = field(default_factory=Path.cwd)
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("semantic_release_confluence")
    )
    dry_run: bool = False


def normalize_plugin_config(raw: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Map plugin option names onto ``PluginConfig`` field names.

    Both the camelCase names used in ``.releaserc`` and the snake_case field
    names are accepted; unknown keys are dropped.
    """
    normalized: dict[str, Any] = {}
    for key, value in (raw or {}).items():
        if key in CONFIG_KEYS:
            normalized[CONFIG_KEYS[key]] = value
        elif key in CONFIG_KEYS.values():
            normalized[key] = value
    return normalized


def load_config_file(path: Path) -> dict[str, Any]:
    """Load plugin options from a JSON file.

    Raises:
        ValueError: If the file does not hold a JSON object
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Plugin config file {path} must contain a JSON object")

    return data


def load_environment(cwd: Optional[Path] = None) -> dict[str, str]:
    """Return the process environment with Confluence credentials filled in.

    Credentials missing from the process environment are looked up in a
    ``.env`` file directly in ``cwd``. Parent directories are not searched.
    """
    env = dict(os.environ)
    env_file = Path(cwd or Path.cwd()) / ".env"
    if not env_file.is_file():
        return env

    source = Config(RepositoryEnv(str(env_file)))

    for name in (USERNAME_VAR, TOKEN_VAR):
        value = str(source(name, default=""))
        if value and not env.get(name):
            env[name] = value

    return env
