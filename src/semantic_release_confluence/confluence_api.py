# Copyright (c) 2025 Francis Bain
# SPDX-License-Identifier: Apache-2.0

"""Confluence API adapter implementation using atlassian-python-api.

This module exposes the handful of REST calls the release hooks need (page
lookup, page update, attachment listing/creation/update/removal) and maps
HTTP failures onto a small error model. Failed calls are logged and raised;
nothing is retried.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from functools import wraps
from pathlib import Path
from typing import Any

from atlassian import Confluence
from requests.exceptions import HTTPError, RequestException

logger = logging.getLogger("confluence_api")
logger.addHandler(logging.NullHandler())

# Multipart uploads are rejected by Confluence's XSRF check without this header
NO_CHECK_HEADERS = {"X-Atlassian-Token": "no-check"}

ATTACHMENT_PAGE_SIZE = 50


def with_logging(operation_name: str):
    """Decorator that adds structured start/success/failure logging to API operations."""

    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start_time = time.time()

            context = {k: v for k, v in kwargs.items() if k in ("page_id", "attachment_id", "title")}
            if args and "page_id" not in context:
                context["page_id"] = args[0]

            logger.info(f"Starting {operation_name}", extra={**context, "operation": operation_name})

            try:
                result = func(self, *args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Failed {operation_name}",
                    extra={
                        **context,
                        "operation": operation_name,
                        "duration_seconds": round(time.time() - start_time, 3),
                        "error": str(e),
                    },
                )
                raise

            logger.info(
                f"Successfully completed {operation_name}",
                extra={
                    **context,
                    "operation": operation_name,
                    "duration_seconds": round(time.time() - start_time, 3),
                },
            )
            return result

        return wrapper

    return decorator


@dataclass(frozen=True)
class RemoteAttachment:
    id: str
    title: str


class ConfluenceAPIError(Exception):
    def __init__(self, message: str, *, status: int | None = None, payload: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.payload = payload


class AuthError(ConfluenceAPIError): ...


class NotFoundError(ConfluenceAPIError): ...


class ConflictError(ConfluenceAPIError): ...


class RateLimitError(ConfluenceAPIError): ...


class ServerError(ConfluenceAPIError): ...


class ConfluenceClient:
    """Confluence API client using atlassian-python-api library.

    One instance is built per hook invocation; it holds no document state of
    its own.
    """

    def __init__(
        self,
        base_url: str,
        *,
        username: str | None = None,
        token: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        if not token:
            logger.warning(
                "ConfluenceClient initialized without credentials; calls will fail with AuthError"
            )

        self.confluence = self._create_confluence_client(self.base_url, username, token, timeout)

    def _handle_exception(self, e: Exception, context: str) -> None:
        """Map library exceptions to our error model."""
        if isinstance(e, ConfluenceAPIError):
            raise e
        if isinstance(e, HTTPError) and e.response is not None:
            status = e.response.status_code
            try:
                payload = e.response.json()
            except Exception:
                payload = e.response.text

            if status in (401, 403):
                raise AuthError(f"Auth failed during {context}", status=status, payload=payload) from e
            if status == 404:
                raise NotFoundError(
                    f"Resource not found during {context}", status=status, payload=payload
                ) from e
            if status == 409:
                raise ConflictError(
                    f"Version conflict during {context}", status=status, payload=payload
                ) from e
            if status == 429:
                raise RateLimitError(
                    f"Rate limited during {context}", status=status, payload=payload
                ) from e
            if 500 <= status < 600:
                raise ServerError(
                    f"Server error {status} during {context}", status=status, payload=payload
                ) from e
            raise ConfluenceAPIError(
                f"HTTP error {status} during {context}", status=status, payload=payload
            ) from e
        elif isinstance(e, RequestException):
            raise ConfluenceAPIError(f"Request failed during {context}: {e}") from e
        else:
            raise ConfluenceAPIError(f"Unexpected error during {context}: {e}") from e

    @with_logging("get_page_by_id")
    def get_page_by_id(
        self, page_id: str, *, expand: tuple[str, ...] = ("space", "version")
    ) -> dict[str, Any] | None:
        """Get the raw page JSON by ID.

        Args:
            page_id: Confluence page ID
            expand: Properties to expand (space and version by default)

        Returns:
            The page JSON as returned by Confluence, or None when the server
            answered without a body

        Raises:
            NotFoundError: If page doesn't exist
            AuthError: If authentication fails
            ConfluenceAPIError: For other API errors
        """
        try:
            return self.confluence.get(
                f"rest/api/content/{page_id}", params={"expand": ",".join(expand)}
            )
        except Exception as e:
            self._handle_exception(e, f"get_page_by_id(page_id={page_id})")

    @with_logging("get_attachments")
    def get_attachments(self, page_id: str) -> list[RemoteAttachment]:
        """List every attachment stored on a page, following pagination.

        Args:
            page_id: Confluence page ID

        Returns:
            Attachment id/title records in the order Confluence returns them
        """
        attachments: list[RemoteAttachment] = []
        start = 0

        try:
            while True:
                data = self.confluence.get(
                    f"rest/api/content/{page_id}/child/attachment",
                    params={"start": start, "limit": ATTACHMENT_PAGE_SIZE},
                ) or {}
                results = data.get("results") or []
                attachments.extend(
                    RemoteAttachment(id=str(item["id"]), title=item["title"]) for item in results
                )
                if not results or not (data.get("_links") or {}).get("next"):
                    break
                start += len(results)
        except Exception as e:
            self._handle_exception(e, f"get_attachments(page_id={page_id})")

        return attachments

    @with_logging("create_attachment")
    def create_attachment(self, page_id: str, *, title: str, path: Path) -> dict[str, Any]:
        """Upload a new attachment to a page."""
        with open(path, "rb") as fh:
            try:
                return self.confluence.post(
                    f"rest/api/content/{page_id}/child/attachment",
                    headers=NO_CHECK_HEADERS,
                    files={"file": (title, fh)},
                )
            except Exception as e:
                self._handle_exception(e, f"create_attachment(page_id={page_id}, title={title})")

    @with_logging("update_attachment")
    def update_attachment(
        self, page_id: str, *, attachment_id: str, title: str, path: Path
    ) -> dict[str, Any]:
        """Upload new data for an existing attachment, creating a new attachment version."""
        with open(path, "rb") as fh:
            try:
                return self.confluence.post(
                    f"rest/api/content/{page_id}/child/attachment/{attachment_id}/data",
                    headers=NO_CHECK_HEADERS,
                    files={"file": (title, fh)},
                )
            except Exception as e:
                self._handle_exception(
                    e, f"update_attachment(page_id={page_id}, attachment_id={attachment_id})"
                )

    @with_logging("delete_attachment")
    def delete_attachment(self, page_id: str, *, attachment_id: str) -> None:
        """Remove an attachment by its content ID."""
        try:
            self.confluence.delete(f"rest/api/content/{attachment_id}")
        except Exception as e:
            self._handle_exception(
                e, f"delete_attachment(page_id={page_id}, attachment_id={attachment_id})"
            )

    @with_logging("update_page")
    def update_page(
        self,
        page_id: str,
        *,
        space_key: str,
        title: str,
        version: int,
        html_storage: str,
    ) -> dict[str, Any]:
        """Store a new version of a page.

        Args:
            page_id: Confluence page ID to update
            space_key: Key of the space containing the page
            title: Page title (passed through unchanged)
            version: The new version number; Confluence rejects anything but
                current + 1 with HTTP 409
            html_storage: Page content in Confluence storage format (XHTML)

        Raises:
            ConflictError: If the version is stale (409)
            AuthError: If authentication fails
            ConfluenceAPIError: For other API errors
        """
        payload = {
            "id": page_id,
            "type": "page",
            "title": title,
            "space": {"key": space_key},
            "version": {"number": version, "minorEdit": False},
            "body": {"storage": {"value": html_storage, "representation": "storage"}},
        }
        try:
            return self.confluence.put(f"rest/api/content/{page_id}", data=payload)
        except Exception as e:
            self._handle_exception(e, f"update_page(page_id={page_id})")

    @classmethod
    def _create_confluence_client(
        cls,
        base_url: str,
        username: str | None = None,
        token: str | None = None,
        timeout: float = 30.0,
    ) -> Confluence:
        """Factory method for creating Confluence client - aids testing."""
        if username and token:
            return Confluence(url=base_url, username=username, password=token, timeout=timeout)
        elif token:
            return Confluence(url=base_url, token=token, timeout=timeout)
        else:
            return Confluence(url=base_url, timeout=timeout)
