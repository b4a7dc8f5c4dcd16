# Copyright (c) 2025 Francis Bain
# SPDX-License-Identifier: Apache-2.0

# Makes top-level imports work and documents public API
from .config import Context, Credentials, PluginConfig
from .confluence_api import (
    AuthError,
    ConflictError,
    ConfluenceAPIError,
    ConfluenceClient,
    NotFoundError,
    RateLimitError,
    RemoteAttachment,
    ServerError,
)
from .errors import (
    EXIT_API_ERROR,
    EXIT_CONFIG_ERROR,
    EXIT_FILESYSTEM_ERROR,
    EXIT_SUCCESS,
    EXIT_UNEXPECTED_ERROR,
    ConfigError,
    FileSystemError,
    ReleaseError,
    RemoteError,
    VersionConflictError,
)
from .plugin import publish, verify_conditions
from .publisher import AttachmentOutcome, PublishResult
from .reconciler import Attachment, Disposition, ReconciliationPlan, reconcile
from .resolver import DocumentState

__all__ = [
    "verify_conditions",
    "publish",
    "Context",
    "Credentials",
    "PluginConfig",
    "ConfluenceClient",
    "RemoteAttachment",
    "ConfluenceAPIError",
    "AuthError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "ServerError",
    "Attachment",
    "Disposition",
    "ReconciliationPlan",
    "reconcile",
    "DocumentState",
    "AttachmentOutcome",
    "PublishResult",
    "ReleaseError",
    "ConfigError",
    "FileSystemError",
    "RemoteError",
    "VersionConflictError",
    "EXIT_SUCCESS",
    "EXIT_UNEXPECTED_ERROR",
    "EXIT_API_ERROR",
    "EXIT_CONFIG_ERROR",
    "EXIT_FILESYSTEM_ERROR",
]
