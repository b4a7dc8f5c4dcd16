import logging

import pytest
from stubs import StubClient, page_json

from semantic_release_confluence.config import Context
from semantic_release_confluence.confluence_api import RemoteAttachment


@pytest.fixture()
def stub_client():
    return StubClient(
        page=page_json(),
        attachments=[
            RemoteAttachment(id="att-1", title="diagram.png"),
            RemoteAttachment(id="att-2", title="obsolete.pdf"),
        ],
    )


@pytest.fixture()
def workspace(tmp_path):
    """A working directory holding a rendered document and an attachments folder."""
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "index.xml").write_text("<p>Release 1.2.0</p>", encoding="utf-8")
    assets = tmp_path / "docs" / "assets"
    assets.mkdir()
    (assets / "diagram.png").write_bytes(b"\x89PNG")
    (assets / "screenshot.png").write_bytes(b"\x89PNG")
    return tmp_path


@pytest.fixture()
def env():
    return {"CONFLUENCE_USERNAME": "username", "CONFLUENCE_TOKEN": "token"}


@pytest.fixture()
def context(workspace, env):
    return Context(env=env, cwd=workspace, logger=logging.getLogger("tests"))


@pytest.fixture()
def plugin_config():
    return {
        "baseUrl": "https://example.atlassian.net/wiki",
        "documentID": "1234",
        "documentPath": "docs/index.xml",
    }
