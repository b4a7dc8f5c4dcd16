# Copyright (c) 2025 Francis Bain
# SPDX-License-Identifier: Apache-2.0

"""Tests for remote document resolution."""

import pytest
from stubs import StubClient, page_json

from semantic_release_confluence.confluence_api import NotFoundError, ServerError
from semantic_release_confluence.errors import (
    E_DET_DOC_EXISTS_REMOTE,
    E_DOC_NO_DATA,
    E_DOC_VERSION_PARSE,
    EXIT_API_ERROR,
    RemoteError,
)
from semantic_release_confluence.resolver import DocumentState, parse_version, resolve_document


class TestParseVersion:
    @pytest.mark.parametrize("value, expected", [(0, 0), (7, 7), ("12", 12), (" 3 ", 3), (5.0, 5)])
    def test_valid(self, value, expected):
        assert parse_version(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "1.5", 2.5, True, -1, "-4", {"n": 1}])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_version(value)


class TestResolveDocument:
    def test_returns_state(self):
        client = StubClient(page=page_json(version=7, space="ENG", title="Handbook"))

        state = resolve_document(client, "1234")

        assert state == DocumentState(space="ENG", version=7, title="Handbook")
        assert client.page_requests == [("1234", ("space", "version"))]

    def test_fetches_fresh_state_on_every_call(self):
        client = StubClient(page=page_json(version=1))
        first = resolve_document(client, "1234")
        client.page = page_json(version=2)

        second = resolve_document(client, "1234")

        assert (first.version, second.version) == (1, 2)
        assert len(client.page_requests) == 2

    def test_missing_space_and_title_default_to_empty(self):
        client = StubClient(page={"id": "1234", "version": {"number": 3}})

        state = resolve_document(client, "1234")

        assert state == DocumentState(space="", version=3, title="")

    @pytest.mark.parametrize("error", [NotFoundError("gone", status=404), ServerError("boom", status=500)])
    def test_remote_failure(self, error):
        client = StubClient()
        client.page_error = error

        with pytest.raises(RemoteError) as exc_info:
            resolve_document(client, "1234")

        assert exc_info.value.code == E_DET_DOC_EXISTS_REMOTE
        assert exc_info.value.exit_code == EXIT_API_ERROR
        assert exc_info.value.cause is error
        assert exc_info.value.__cause__ is error
        assert exc_info.value.context["status_code"] == error.status

    @pytest.mark.parametrize("payload", [None, {}, ""])
    def test_no_data(self, payload):
        client = StubClient(page=payload)

        with pytest.raises(RemoteError) as exc_info:
            resolve_document(client, "1234")

        assert exc_info.value.code == E_DOC_NO_DATA

    def test_non_numeric_version(self):
        client = StubClient(page={**page_json(), "version": {"number": "latest"}})

        with pytest.raises(RemoteError) as exc_info:
            resolve_document(client, "1234")

        assert exc_info.value.code == E_DOC_VERSION_PARSE
        assert "latest" in exc_info.value.details

    def test_missing_version(self):
        client = StubClient(page={"id": "1234", "title": "x", "space": {"key": "DOC"}})

        with pytest.raises(RemoteError) as exc_info:
            resolve_document(client, "1234")

        assert exc_info.value.code == E_DOC_VERSION_PARSE
