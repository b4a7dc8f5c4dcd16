# Copyright (c) 2025 Francis Bain
# SPDX-License-Identifier: Apache-2.0

"""Pre-flight validation of credentials, plugin options and local paths.

Checks run in a fixed order and stop at the first failure:

1. ``CONFLUENCE_USERNAME`` present
2. ``CONFLUENCE_TOKEN`` present
3. ``baseUrl``, ``documentID``, ``documentPath`` present
4. the document exists on disk
5. the attachments directory exists, when one is configured

No network calls are made here.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, NamedTuple, Optional

from .config import (
    TOKEN_VAR,
    USERNAME_VAR,
    Context,
    Credentials,
    PluginConfig,
    normalize_plugin_config,
)
from .errors import (
    E_ATTACH_DIR_EXISTS,
    E_ATTACH_FS_EXISTS,
    E_DOC_EXISTS,
    E_DOC_FS_EXISTS,
    E_MISSING_BASE_URL,
    E_MISSING_CTOKEN,
    E_MISSING_CUSERNAME,
    E_MISSING_DOC_ID,
    E_MISSING_PATH,
    ConfigError,
    FileSystemError,
)

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def verify_credentials(env: Mapping[str, str]) -> Credentials:
    """Read the Confluence credentials from the environment.

    Raises:
        ConfigError: If the username or token is missing or blank
    """
    username = env.get(USERNAME_VAR)
    if _is_blank(username):
        raise ConfigError(
            f"{USERNAME_VAR} not provided",
            E_MISSING_CUSERNAME,
            f'The environment variable "{USERNAME_VAR}" must be provided.',
        )

    token = env.get(TOKEN_VAR)
    if _is_blank(token):
        raise ConfigError(
            f"{TOKEN_VAR} not provided",
            E_MISSING_CTOKEN,
            f'The environment variable "{TOKEN_VAR}" must be provided.',
        )

    return Credentials(username=username.strip(), token=token.strip())


def verify_plugin_config(raw: Optional[Mapping[str, Any]]) -> PluginConfig:
    """Validate the plugin options and build a ``PluginConfig``.

    Raises:
        ConfigError: If a required option is missing, blank or not a string
    """
    options = normalize_plugin_config(raw)

    if _is_blank(options.get("base_url")):
        raise ConfigError(
            "baseUrl not provided",
            E_MISSING_BASE_URL,
            "Must supply a baseUrl in the plugin config.",
        )

    if _is_blank(options.get("document_id")):
        raise ConfigError(
            "documentID not provided",
            E_MISSING_DOC_ID,
            "Must supply a documentID in the plugin config.",
        )

    if _is_blank(options.get("document_path")):
        raise ConfigError(
            "documentPath not provided",
            E_MISSING_PATH,
            "Must supply a documentPath in the plugin config.",
        )

    attachments_dir = options.get("attachments_dir")
    if _is_blank(attachments_dir):
        attachments_dir = None

    return PluginConfig(
        base_url=options["base_url"].strip(),
        document_id=options["document_id"].strip(),
        document_path=options["document_path"].strip(),
        attachments_dir=attachments_dir.strip() if attachments_dir else None,
    )


def verify_paths(config: PluginConfig, cwd: Path) -> tuple[Path, Optional[Path]]:
    """Check that the document (and attachments directory, if configured) exist.

    Args:
        config: Validated plugin options
        cwd: Base directory for relative paths

    Returns:
        Tuple of (document path, attachments directory or None), both resolved

    Raises:
        FileSystemError: If a path is missing or its existence cannot be determined
    """
    document_path = Path(cwd) / config.document_path

    try:
        exists = document_path.is_file()
    except OSError as e:
        logger.critical(
            f"There was an error determining if the path at {config.document_path} exists."
        )
        raise FileSystemError(
            "Error determining documentPath existence",
            E_DOC_FS_EXISTS,
            f"There was an error while trying to determine the existence of {config.document_path}",
            path=str(document_path),
            cause=e,
        ) from e

    if not exists:
        raise FileSystemError(
            "File at documentPath does not exist",
            E_DOC_EXISTS,
            f"The document at {config.document_path} does not exist",
            path=str(document_path),
        )

    if config.attachments_dir is None:
        return document_path.resolve(), None

    attachments_dir = Path(cwd) / config.attachments_dir

    try:
        is_dir = attachments_dir.is_dir()
    except OSError as e:
        logger.critical(
            f"There was an error determining if the directory at {config.attachments_dir} exists."
        )
        raise FileSystemError(
            "Error determining attachmentsDir existence",
            E_ATTACH_FS_EXISTS,
            f"There was an error while trying to determine the existence of {config.attachments_dir}",
            path=str(attachments_dir),
            cause=e,
        ) from e

    if not is_dir:
        raise FileSystemError(
            "Directory at attachmentsDir does not exist",
            E_ATTACH_DIR_EXISTS,
            f"The attachments directory at {config.attachments_dir} does not exist",
            path=str(attachments_dir),
        )

    return document_path.resolve(), attachments_dir.resolve()


class VerifiedSetup(NamedTuple):
    config: PluginConfig
    credentials: Credentials
    document_path: Path
    attachments_dir: Optional[Path]


def verify(raw: Optional[Mapping[str, Any]], context: Context) -> VerifiedSetup:
    """Run every pre-flight check in order."""
    credentials = verify_credentials(context.env)
    config = verify_plugin_config(raw)
    document_path, attachments_dir = verify_paths(config, context.cwd)
    return VerifiedSetup(config, credentials, document_path, attachments_dir)
