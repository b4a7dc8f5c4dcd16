# Copyright (c) 2025 Francis Bain
# SPDX-License-Identifier: Apache-2.0

"""Publication of the rendered document and its attachments.

A publish run moves through these stages, stopping at the first failure::

    IDLE -> RESOLVING_DOCUMENT
         -> RECONCILING_ATTACHMENTS -> APPLYING_ATTACHMENTS   (attachmentsDir set)
         -> PUSHING_CONTENT

Attachment removals, additions and updates are submitted together to a
thread pool and awaited jointly. A failed operation does not cancel the
others, but any failure aborts the run before the page content is pushed.
"""

from __future__ import annotations

import enum
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .confluence_api import ConflictError, ConfluenceAPIError, ConfluenceClient, RemoteAttachment
from .errors import (
    E_ATTACH_LOAD,
    E_ATTACH_LOAD_REMOTE,
    E_ATTACH_PUBLISH,
    E_DOC_EMPTY,
    E_DOC_PUBLISH,
    E_DOC_READ,
    FileSystemError,
    ReleaseError,
    RemoteError,
    VersionConflictError,
)
from .reconciler import (
    Attachment,
    Disposition,
    ReconciliationPlan,
    list_local_attachments,
    reconcile,
    select,
    with_paths,
)
from .resolver import DocumentState, resolve_document
from .validator import VerifiedSetup

DEFAULT_MAX_WORKERS = 8

module_logger = logging.getLogger(__name__)


class Stage(enum.Enum):
    IDLE = "idle"
    RESOLVING_DOCUMENT = "resolving document"
    RECONCILING_ATTACHMENTS = "reconciling attachments"
    APPLYING_ATTACHMENTS = "applying attachments"
    PUSHING_CONTENT = "pushing content"


@dataclass
class AttachmentOutcome:
    """Result of one attachment operation."""

    attachment: Attachment
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PublishResult:
    """Summary of a publish run."""

    state: DocumentState
    plan: ReconciliationPlan = field(default_factory=dict)
    outcomes: List[AttachmentOutcome] = field(default_factory=list)
    dry_run: bool = False


def load_remote_attachments(client: ConfluenceClient, document_id: str) -> List[RemoteAttachment]:
    """List the attachments stored on the page.

    Raises:
        RemoteError: If the listing fails
    """
    try:
        return client.get_attachments(document_id)
    except ConfluenceAPIError as e:
        raise RemoteError(
            "Error loading remote attachments",
            E_ATTACH_LOAD_REMOTE,
            f"There was an error while loading the attachments of the document with ID {document_id}",
            page_id=document_id,
            cause=e,
        ) from e


def _apply_one(client: ConfluenceClient, document_id: str, attachment: Attachment) -> None:
    if attachment.disposition is Disposition.REMOVE:
        client.delete_attachment(document_id, attachment_id=attachment.id)
    elif attachment.disposition is Disposition.ADD:
        client.create_attachment(document_id, title=attachment.title, path=attachment.path)
    else:
        client.update_attachment(
            document_id, attachment_id=attachment.id, title=attachment.title, path=attachment.path
        )


def apply_plan(
    client: ConfluenceClient,
    document_id: str,
    plan: ReconciliationPlan,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> List[AttachmentOutcome]:
    """Run every attachment operation in the plan concurrently.

    Args:
        client: Confluence client for this invocation
        document_id: Confluence page ID
        plan: Reconciliation plan with local paths set on ADD/UPDATE entries
        max_workers: Upper bound on concurrent requests

    Returns:
        One outcome per plan entry, all successful

    Raises:
        FileSystemError: If every failed operation failed reading its local file
        RemoteError: If any operation failed, after all operations have completed
    """
    operations = (
        select(plan, Disposition.REMOVE)
        + select(plan, Disposition.ADD)
        + select(plan, Disposition.UPDATE)
    )
    if not operations:
        return []

    outcomes: List[AttachmentOutcome] = []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(operations)))) as executor:
        futures = {
            executor.submit(_apply_one, client, document_id, attachment): attachment
            for attachment in operations
        }
        for future in as_completed(futures):
            outcomes.append(AttachmentOutcome(futures[future], future.exception()))

    failures = [outcome for outcome in outcomes if not outcome.ok]
    if failures:
        for outcome in failures:
            module_logger.error(
                f"Failed to {outcome.attachment.disposition.value} attachment "
                f"{outcome.attachment.title}: {outcome.error}",
                extra={"page_id": document_id, "title": outcome.attachment.title},
            )
        failed_titles = sorted(outcome.attachment.title for outcome in failures)
        if all(isinstance(outcome.error, OSError) for outcome in failures):
            raise FileSystemError(
                "Error loading attachments",
                E_ATTACH_LOAD,
                f"Could not read {len(failures)} local attachment file(s) "
                f"for the document with ID {document_id}: {', '.join(failed_titles)}",
                path=str(failures[0].attachment.path),
                cause=failures[0].error,
                context={"failed_attachments": failed_titles},
            ) from failures[0].error
        raise RemoteError(
            "Error publishing attachments",
            E_ATTACH_PUBLISH,
            f"{len(failures)} of {len(outcomes)} attachment operation(s) failed "
            f"for the document with ID {document_id}: {', '.join(failed_titles)}",
            page_id=document_id,
            cause=failures[0].error,
            context={"failed_attachments": failed_titles},
        ) from failures[0].error

    return outcomes


def read_document(path: Path) -> str:
    """Read the rendered document.

    Raises:
        FileSystemError: If the file cannot be read or holds no content
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileSystemError(
            "Error reading document",
            E_DOC_READ,
            f"There was an error while reading the document at {path}",
            path=str(path),
            cause=e,
        ) from e

    if not content.strip():
        raise FileSystemError(
            "Document is empty",
            E_DOC_EMPTY,
            f"The document at {path} has no content",
            path=str(path),
        )

    return content


def push_document(
    client: ConfluenceClient, document_id: str, state: DocumentState, content: str
) -> DocumentState:
    """Store ``content`` as the next version of the page.

    Returns:
        The state of the page after the update

    Raises:
        VersionConflictError: If the page changed since ``state`` was resolved
        RemoteError: For any other API failure
    """
    next_version = state.version + 1
    try:
        client.update_page(
            document_id,
            space_key=state.space,
            title=state.title,
            version=next_version,
            html_storage=content,
        )
    except ConflictError as e:
        raise VersionConflictError(
            f"Version {next_version} of the document with ID {document_id} was rejected; "
            "the page was modified while publishing",
            page_id=document_id,
            attempted_version=next_version,
            cause=e,
        ) from e
    except ConfluenceAPIError as e:
        raise RemoteError(
            "Error publishing document",
            E_DOC_PUBLISH,
            f"There was an error while publishing the content of the document with ID {document_id}",
            page_id=document_id,
            cause=e,
        ) from e

    return DocumentState(space=state.space, version=next_version, title=state.title)


def publish_document(
    client: ConfluenceClient,
    setup: VerifiedSetup,
    *,
    logger: Optional[logging.Logger] = None,
    dry_run: bool = False,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> PublishResult:
    """Synchronize attachments and push the document as a new page version.

    Args:
        client: Confluence client for this invocation
        setup: Output of the pre-flight checks
        logger: Logger to report progress to
        dry_run: Resolve and plan only; issue no writes
        max_workers: Upper bound on concurrent attachment requests

    Returns:
        Summary of the run
    """
    logger = logger or module_logger
    document_id = setup.config.document_id
    stage = Stage.IDLE

    try:
        stage = Stage.RESOLVING_DOCUMENT
        state = resolve_document(client, document_id)

        plan: ReconciliationPlan = {}
        outcomes: List[AttachmentOutcome] = []

        if setup.attachments_dir is not None:
            stage = Stage.RECONCILING_ATTACHMENTS
            local_names = list_local_attachments(setup.attachments_dir)
            remote = load_remote_attachments(client, document_id)
            plan = with_paths(reconcile(local_names, remote), setup.attachments_dir)
            logger.info(
                f"Attachment plan: {len(select(plan, Disposition.ADD))} to add, "
                f"{len(select(plan, Disposition.UPDATE))} to update, "
                f"{len(select(plan, Disposition.REMOVE))} to remove"
            )

            if not dry_run:
                stage = Stage.APPLYING_ATTACHMENTS
                outcomes = apply_plan(client, document_id, plan, max_workers=max_workers)

        stage = Stage.PUSHING_CONTENT
        content = read_document(setup.document_path)

        if dry_run:
            logger.info(
                f"Dry run: would publish {setup.document_path} as version {state.version + 1} "
                f"of '{state.title}' in space {state.space}"
            )
            return PublishResult(state=state, plan=plan, outcomes=outcomes, dry_run=True)

        pushed = push_document(client, document_id, state, content)
    except ReleaseError:
        logger.error(f"Publish failed while {stage.value}", extra={"page_id": document_id})
        raise

    logger.info(
        f"Published document {document_id} as version {pushed.version}",
        extra={"page_id": document_id, "space_key": pushed.space, "version": pushed.version},
    )
    return PublishResult(state=pushed, plan=plan, outcomes=outcomes)
