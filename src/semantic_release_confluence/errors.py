# Copyright (c) 2025 Francis Bain
# SPDX-License-Identifier: Apache-2.0

"""Error classes, error codes and exit codes for the release hooks.

Every failure raised by ``verify_conditions`` or ``publish`` is a
:class:`ReleaseError` carrying a stable code, a short message and a longer
explanation, so the orchestrator can show both the taxonomy code and the
underlying cause to the user.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

# Exit codes for the command line wrapper
EXIT_SUCCESS = 0
EXIT_UNEXPECTED_ERROR = 1  # Usage errors and anything not raised as a ReleaseError
EXIT_API_ERROR = 2  # Confluence API failures
EXIT_CONFIG_ERROR = 3  # Missing credentials or plugin configuration
EXIT_FILESYSTEM_ERROR = 4  # Document or attachment files missing/unreadable

# Configuration errors
E_MISSING_CUSERNAME = "E_MISSING_CUSERNAME"
E_MISSING_CTOKEN = "E_MISSING_CTOKEN"
E_MISSING_BASE_URL = "E_MISSING_BASE_URL"
E_MISSING_DOC_ID = "E_MISSING_DOC_ID"
E_MISSING_PATH = "E_MISSING_PATH"

# Filesystem errors
E_DOC_FS_EXISTS = "E_DOC_FS_EXISTS"
E_DOC_EXISTS = "E_DOC_EXISTS"
E_ATTACH_FS_EXISTS = "E_ATTACH_FS_EXISTS"
E_ATTACH_DIR_EXISTS = "E_ATTACH_DIR_EXISTS"
E_DOC_READ = "E_DOC_READ"
E_DOC_EMPTY = "E_DOC_EMPTY"
E_ATTACH_LOAD = "E_ATTACH_LOAD"

# Remote errors
E_DET_DOC_EXISTS_REMOTE = "E_DET_DOC_EXISTS_REMOTE"
E_DOC_NO_DATA = "E_DOC_NO_DATA"
E_DOC_VERSION_PARSE = "E_DOC_VERSION_PARSE"
E_ATTACH_LOAD_REMOTE = "E_ATTACH_LOAD_REMOTE"
E_ATTACH_PUBLISH = "E_ATTACH_PUBLISH"
E_DOC_PUBLISH = "E_DOC_PUBLISH"
E_VERSION_CONFLICT = "E_VERSION_CONFLICT"


class ReleaseError(Exception):
    """Base class for errors raised by the release hooks."""

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[str] = None,
        *,
        exit_code: int,
        cause: Optional[BaseException] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or message
        self.exit_code = exit_code
        self.cause = cause
        self.context = context or {}

    def __str__(self) -> str:
        text = f"{self.code}: {self.message}"
        if self.cause is not None:
            text += f" (caused by {type(self.cause).__name__}: {self.cause})"
        return text

    def log_error(self) -> None:
        """Log the error with context information."""
        logger.error(
            "%s: %s",
            self.code,
            self.details,
            extra={
                "error_type": type(self).__name__,
                "error_code": self.code,
                "exit_code": self.exit_code,
                "cause": repr(self.cause) if self.cause is not None else None,
                **self.context,
            },
        )


class ConfigError(ReleaseError):
    """Missing or invalid credentials or plugin configuration."""

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[str] = None,
        *,
        context: Optional[dict] = None,
    ):
        super().__init__(message, code, details, exit_code=EXIT_CONFIG_ERROR, context=context)


class FileSystemError(ReleaseError):
    """Local document or attachment directory could not be used."""

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[str] = None,
        *,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
        context: Optional[dict] = None,
    ):
        ctx = context or {}
        if path:
            ctx["path"] = path
        super().__init__(
            message, code, details, exit_code=EXIT_FILESYSTEM_ERROR, cause=cause, context=ctx
        )


class RemoteError(ReleaseError):
    """Error during Confluence API operations."""

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[str] = None,
        *,
        page_id: Optional[str] = None,
        cause: Optional[BaseException] = None,
        context: Optional[dict] = None,
    ):
        ctx = context or {}
        if page_id:
            ctx["page_id"] = page_id
        status = getattr(cause, "status", None)
        if status:
            ctx["status_code"] = status
        super().__init__(message, code, details, exit_code=EXIT_API_ERROR, cause=cause, context=ctx)


class VersionConflictError(RemoteError):
    """The page version changed between resolving and publishing."""

    def __init__(
        self,
        details: Optional[str] = None,
        *,
        page_id: Optional[str] = None,
        attempted_version: Optional[int] = None,
        cause: Optional[BaseException] = None,
        context: Optional[dict] = None,
    ):
        ctx = context or {}
        if attempted_version is not None:
            ctx["attempted_version"] = attempted_version
        super().__init__(
            "Detected mismatched Confluence version",
            E_VERSION_CONFLICT,
            details
            or "The document was modified remotely while publishing - aborting to prevent data loss.",
            page_id=page_id,
            cause=cause,
            context=ctx,
        )
