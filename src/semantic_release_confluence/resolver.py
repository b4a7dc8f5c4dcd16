# Copyright (c) 2025 Francis Bain
# SPDX-License-Identifier: Apache-2.0

"""Lookup of the remote page that the rendered document is published to."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .confluence_api import ConfluenceAPIError, ConfluenceClient
from .errors import E_DET_DOC_EXISTS_REMOTE, E_DOC_NO_DATA, E_DOC_VERSION_PARSE, RemoteError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentState:
    """Snapshot of a page's space, version and title.

    Fetched once per hook invocation and passed along explicitly; a snapshot
    taken while verifying is never reused for publishing.
    """

    space: str
    version: int
    title: str


def parse_version(value: Any) -> int:
    """Parse a page version number.

    Accepts integers and strings holding an integer; rejects booleans,
    fractional numbers and negative values.

    Raises:
        ValueError: If ``value`` is not a non-negative integer
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid version number: {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str) and value.strip().lstrip("+-").isdigit():
        number = int(value.strip())
    else:
        raise ValueError(f"invalid version number: {value!r}")

    if number < 0:
        raise ValueError(f"negative version number: {number}")
    return number


def resolve_document(client: ConfluenceClient, document_id: str) -> DocumentState:
    """Fetch the current space key, version and title of a page.

    Args:
        client: Confluence client for this invocation
        document_id: Confluence page ID

    Returns:
        A fresh ``DocumentState``

    Raises:
        RemoteError: If the lookup fails, returns nothing, or the version cannot be parsed
    """
    try:
        data = client.get_page_by_id(document_id, expand=("space", "version"))
    except ConfluenceAPIError as e:
        logger.critical(
            f"There was an error while trying to determine the existence of document {document_id}"
        )
        raise RemoteError(
            "Error determining document existence",
            E_DET_DOC_EXISTS_REMOTE,
            f"There was an error while trying to determine the existence of a document with ID {document_id}",
            page_id=document_id,
            cause=e,
        ) from e

    if not isinstance(data, dict) or not data:
        raise RemoteError(
            "No document data",
            E_DOC_NO_DATA,
            f"No data was returned while retrieving data for the document with ID {document_id}",
            page_id=document_id,
        )

    raw_version = (data.get("version") or {}).get("number")
    try:
        version = parse_version(raw_version)
    except ValueError as e:
        raise RemoteError(
            "Unparsable document version",
            E_DOC_VERSION_PARSE,
            f"The version {raw_version!r} of the document with ID {document_id} is not an integer",
            page_id=document_id,
            cause=e,
        ) from e

    state = DocumentState(
        space=(data.get("space") or {}).get("key") or "",
        version=version,
        title=data.get("title") or "",
    )
    logger.debug(
        "Resolved document",
        extra={"page_id": document_id, "space_key": state.space, "version": state.version},
    )
    return state
