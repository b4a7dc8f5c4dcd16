# Copyright (c) 2025 Francis Bain
# SPDX-License-Identifier: Apache-2.0

"""Lifecycle hooks called by the release orchestrator.

Both hooks take the plugin options mapping and a :class:`Context`. They
return normally on success and raise a
:class:`~semantic_release_confluence.errors.ReleaseError` on failure. Each
call builds its own client and fetches its own document state.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from .config import Context, Credentials, PluginConfig
from .confluence_api import ConfluenceClient
from .publisher import PublishResult, publish_document
from .resolver import resolve_document
from .validator import verify

ClientFactory = Callable[[PluginConfig, Credentials], ConfluenceClient]


def create_client(config: PluginConfig, credentials: Credentials) -> ConfluenceClient:
    """Build the Confluence client for one hook invocation."""
    return ConfluenceClient(
        base_url=config.base_url, username=credentials.username, token=credentials.token
    )


def verify_conditions(
    plugin_config: Optional[Mapping[str, Any]],
    context: Optional[Context] = None,
    *,
    client_factory: ClientFactory = create_client,
) -> None:
    """Check configuration, local files and that the page is reachable."""
    context = context or Context()
    setup = verify(plugin_config, context)

    client = client_factory(setup.config, setup.credentials)
    resolve_document(client, setup.config.document_id)

    context.logger.info("Configuration is valid.")


def publish(
    plugin_config: Optional[Mapping[str, Any]],
    context: Optional[Context] = None,
    *,
    client_factory: ClientFactory = create_client,
) -> PublishResult:
    """Publish the rendered document and its attachments to Confluence."""
    context = context or Context()
    context.logger.info("Publishing to confluence...")

    setup = verify(plugin_config, context)
    client = client_factory(setup.config, setup.credentials)

    return publish_document(client, setup, logger=context.logger, dry_run=context.dry_run)
