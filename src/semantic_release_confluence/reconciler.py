# Copyright (c) 2025 Francis Bain
# SPDX-License-Identifier: Apache-2.0

"""Attachment reconciliation between a local directory and a Confluence page.

The plan maps each attachment title to the action needed to make the remote
page match the local directory:

- only local  -> ``ADD``
- only remote -> ``REMOVE``
- both        -> ``UPDATE`` (carries the remote id)
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .confluence_api import RemoteAttachment
from .errors import E_ATTACH_LOAD, FileSystemError

logger = logging.getLogger(__name__)


class Disposition(enum.Enum):
    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"


@dataclass(frozen=True)
class Attachment:
    """A single entry of a reconciliation plan."""

    title: str
    disposition: Disposition
    id: Optional[str] = None
    path: Optional[Path] = None


ReconciliationPlan = Dict[str, Attachment]


def reconcile(
    local_names: Iterable[str], remote_attachments: Iterable[RemoteAttachment]
) -> ReconciliationPlan:
    """Compute the add/update/remove plan for a page's attachments.

    Args:
        local_names: File names found in the local attachments directory
        remote_attachments: Attachments currently stored on the page

    Returns:
        Mapping of attachment title to plan entry
    """
    plan: ReconciliationPlan = {}

    for name in local_names:
        if name not in plan:
            plan[name] = Attachment(title=name, disposition=Disposition.ADD)

    local = set(plan)

    for remote in remote_attachments:
        disposition = Disposition.UPDATE if remote.title in local else Disposition.REMOVE
        plan[remote.title] = Attachment(title=remote.title, disposition=disposition, id=remote.id)

    return plan


def select(plan: ReconciliationPlan, disposition: Disposition) -> List[Attachment]:
    """Return the plan entries with exactly the given disposition."""
    return [attachment for attachment in plan.values() if attachment.disposition is disposition]


def with_paths(plan: ReconciliationPlan, directory: Path) -> ReconciliationPlan:
    """Attach resolved local paths to the entries that upload a file."""
    return {
        title: (
            attachment
            if attachment.disposition is Disposition.REMOVE
            else replace(attachment, path=directory / title)
        )
        for title, attachment in plan.items()
    }


def list_local_attachments(directory: Path) -> List[str]:
    """List the names of the regular files directly inside ``directory``.

    Raises:
        FileSystemError: If the directory cannot be read
    """
    try:
        names = sorted(entry.name for entry in Path(directory).iterdir() if entry.is_file())
    except OSError as e:
        raise FileSystemError(
            "Error loading attachments",
            E_ATTACH_LOAD,
            f"There was an error while loading attachments from {directory}",
            path=str(directory),
            cause=e,
        ) from e

    logger.debug(f"Found {len(names)} local attachment(s) in {directory}")
    return names
